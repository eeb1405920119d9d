"""
AI result cache.

Content-addressed caching of provider results, scoped per trip, with a
bypass for conversational follow-ups.
"""

from holiday_planner.cache.keys import derive_cache_key
from holiday_planner.cache.policy import should_use_cache
from holiday_planner.cache.store import CACHE_KINDS, CachedResult, ResultCacheStore

__all__ = [
    "derive_cache_key",
    "should_use_cache",
    "CACHE_KINDS",
    "CachedResult",
    "ResultCacheStore",
]
