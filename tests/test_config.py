import pytest
from pydantic import ValidationError
from slowapi import Limiter

from app.core.config import Settings
from app.core.rate_limiter import build_limiter
from app.routers.dependencies import get_boost_levels


def make_settings(**overrides):
    return Settings(_env_file=None, DATABASE_URL="mongodb://localhost:27017", DATABASE_NAME="test", **overrides)


def test_default_boost_levels():
    settings = make_settings()
    assert settings.boost_levels_list == [
        (10000, 10000.0), (1000, 1000.0), (300, 100.0), (100, 50.0), (10, 10.0)
    ]
    assert settings.BOOST_PRUNE_UNREACHABLE is True
    assert settings.BOOST_FALLBACK_ON_EMPTY is True


def test_custom_boost_levels_tolerate_spacing():
    settings = make_settings(ROLL_BOOST_LEVELS=" 5:2 , 50:12.5,")
    assert settings.boost_levels_list == [(5, 2.0), (50, 12.5)]


@pytest.mark.parametrize("raw", ["10", "ten:10", "10:2:3", "0:5", "10:-1", "10:0.5"])
def test_malformed_boost_levels_rejected(raw):
    with pytest.raises(ValidationError):
        make_settings(ROLL_BOOST_LEVELS=raw)


def test_cors_origins_list():
    settings = make_settings(CORS_ORIGINS="http://a.test, http://b.test")
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


def test_boost_level_dependency_reads_settings():
    thresholds = [level.threshold for level in get_boost_levels()]
    assert sorted(thresholds) == [10, 100, 300, 1000, 10000]


def test_rate_limiting_disabled_leaves_routes_alone():
    limiter, decorator = build_limiter(make_settings(RATE_LIMITING_ENABLED=False))
    assert limiter is None

    def route():
        return "ok"

    assert decorator("5/minute")(route) is route


def test_rate_limiting_enabled_builds_limiter():
    limiter, decorator = build_limiter(make_settings(RATE_LIMITING_ENABLED=True, REDIS_URL="memory://"))
    assert isinstance(limiter, Limiter)
    assert decorator == limiter.limit
