# app/core/rate_limiter.py

from typing import Callable, Optional, Tuple

from slowapi import Limiter
from slowapi.util import get_remote_address
from ..core.config import Settings, settings

def no_op_decorator(*args, **kwargs):
    def decorator(func):
        return func
    return decorator

def build_limiter(config: Settings) -> Tuple[Optional[Limiter], Callable]:
    """
    Returns (limiter, decorator). With rate limiting off the limiter is None
    and the decorator leaves routes untouched.
    """
    if not config.RATE_LIMITING_ENABLED:
        return None, no_op_decorator

    # Keyed by client IP; counters live in Redis so every worker shares them.
    limiter = Limiter(key_func=get_remote_address, storage_uri=config.REDIS_URL)
    return limiter, limiter.limit

limiter, limiter_decorator = build_limiter(settings)
