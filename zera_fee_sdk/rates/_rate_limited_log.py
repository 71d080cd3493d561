"""
Rate-limited logging for repeated rate-source failures.

While a rate endpoint is down every fee quote falls back to the configured
rate. The warning is emitted once per interval per message rather than once
per quote.
"""
import logging
import threading
from typing import Optional

from cachetools import TTLCache

# Configure logger
logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60

# Recently logged messages, keyed by interval so each interval gets its own TTL
_log_caches = {}
_log_caches_lock = threading.RLock()


def _cache_for(interval: int) -> TTLCache:
    cache = _log_caches.get(interval)
    if cache is None:
        cache = _log_caches[interval] = TTLCache(maxsize=256, ttl=interval)
    return cache


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = DEFAULT_INTERVAL,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log a message at most once per ``interval`` seconds.

    Args:
        message: Message to log
        level: Log level (debug, info, warning, error, critical)
        interval: Minimum interval between identical logs in seconds
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was logged, False if it was suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _log_caches_lock:
        cache = _cache_for(interval)
        if key in cache:
            return False
        cache[key] = True

    log_method(message)
    return True


def reset_rate_limited_log() -> None:
    """Forget every suppressed message."""
    with _log_caches_lock:
        _log_caches.clear()
