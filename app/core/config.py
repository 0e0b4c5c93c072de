# app/core/config.py

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List, Optional, Tuple

class Settings(BaseSettings):
    DATABASE_URL: str
    DATABASE_NAME: str

    RATE_LIMITING_ENABLED: bool = False
    REDIS_URL: str = "redis://localhost:6379"

    # Milestone boosts as "threshold:multiplier" pairs, comma separated.
    # Order does not matter, the largest matching threshold always wins.
    ROLL_BOOST_LEVELS: str = "10000:10000,1000:1000,300:100,100:50,10:10"

    # Drop titles rarer-than-reachable (chance_ratio < boost) on boosted rolls.
    BOOST_PRUNE_UNREACHABLE: bool = True

    # Retry once without boost when a boosted roll leaves nothing eligible.
    BOOST_FALLBACK_ON_EMPTY: bool = True

    # Used only when neither the request nor the config collection names one.
    DEFAULT_SEASON: Optional[str] = None

    # A comma-separated string of allowed frontend origins for CORS.
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    @field_validator("ROLL_BOOST_LEVELS")
    @classmethod
    def boost_levels_well_formed(cls, value: str) -> str:
        for pair in _split_pairs(value):
            threshold, multiplier = _parse_pair(pair)
            if threshold <= 0:
                raise ValueError(f"Boost level '{pair}' needs a positive threshold.")
            if multiplier < 1:
                raise ValueError(f"Boost level '{pair}' cannot lower the odds (multiplier < 1).")
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def boost_levels_list(self) -> List[Tuple[int, float]]:
        return [_parse_pair(pair) for pair in _split_pairs(self.ROLL_BOOST_LEVELS)]

    class Config:
        env_file = ".env"


def _split_pairs(raw: str) -> List[str]:
    return [pair.strip() for pair in raw.split(",") if pair.strip()]


def _parse_pair(pair: str) -> Tuple[int, float]:
    try:
        threshold, multiplier = pair.split(":")
        return int(threshold), float(multiplier)
    except ValueError:
        raise ValueError(f"Boost level '{pair}' is not in 'threshold:multiplier' form.")

settings = Settings()
