"""
Rate limiting for ledger write endpoints using SlowAPI.

Counters are kept in process memory; the limiter only guards the
bank/apply/pool write paths.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

from api.config import settings

logger = logging.getLogger(__name__)


# Initialize limiter
limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
    storage_uri="memory://",
    strategy="fixed-window",
)


def get_rate_limit_string() -> str:
    """
    Get rate limit string for use with @limiter.limit() decorator.

    Returns:
        str: Rate limit string (e.g., "60/minute")
    """
    return f"{settings.rate_limit_per_minute}/minute"
