"""Database utility functions."""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import OperationalError, InterfaceError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Substrings of driver errors worth another attempt
TRANSIENT_ERRORS = (
    "database is locked",
    "connection refused",
    "connection reset",
    "connection closed",
    "server closed",
    "timeout",
    "too many clients",
)


def is_transient_error(error: Exception) -> bool:
    """Whether a driver error looks like lock contention or a dropped connection."""
    message = str(error).lower()
    return any(fragment in message for fragment in TRANSIENT_ERRORS)


async def retry_on_transient_error(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 0.1,
) -> T:
    """Run a database operation, retrying transient errors with exponential backoff.

    SQLite reports writer contention as "database is locked"; PostgreSQL
    drops connections under load. Both are retried, anything else is raised
    immediately.

    Args:
        operation: Callable returning a fresh coroutine on every call
        max_retries: Maximum number of attempts
        base_delay: Base delay in seconds (doubles with each retry)
    """
    last_exception: Exception | None = None
    for attempt in range(max_retries):
        try:
            return await operation()
        except (OperationalError, InterfaceError) as e:
            if not is_transient_error(e):
                raise
            last_exception = e
            delay = base_delay * (2 ** attempt)
            logger.warning(
                f"Database transient error, retrying in {delay}s (attempt {attempt + 1}/{max_retries})"
            )
            await asyncio.sleep(delay)
    raise last_exception
