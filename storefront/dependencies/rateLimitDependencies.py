from fastapi import Depends
from fastapi_limiter.depends import RateLimiter

from storefront.config.settings import settings


async def no_rate_limit():
    """Stand-in when rate limiting is switched off (no redis available)"""
    return None


def rate_limit(times: int, seconds: int):
    """Router-level dependency; FastAPILimiter must be initialised when enabled"""
    if settings.RATE_LIMITING_ENABLED:
        return Depends(RateLimiter(times=times, seconds=seconds))
    return Depends(no_rate_limit)
