"""Database operations and utilities.

This module provides common database operations and utilities,
namely retry logic for transient failures.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from sqlalchemy.exc import OperationalError

from .db_core import DatabaseError

logger = logging.getLogger(__name__)

# Type variable for generic return type
T = TypeVar('T')


def _is_retryable(error: BaseException, exceptions: tuple) -> bool:
    # Database.session() wraps driver errors, so look at the cause as well
    return isinstance(error, exceptions) or isinstance(error.__cause__, exceptions)


def with_retry(
    max_attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2,
    exceptions: tuple = (OperationalError,)
) -> Callable:
    """
    Decorator that implements retry logic for database operations.

    Args:
        max_attempts: Maximum number of retry attempts
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay between retries
        exceptions: Tuple of exceptions to catch and retry

    Example:
        @with_retry(max_attempts=3)
        def count_carnivals(database: Database) -> int:
            with database.session() as session:
                return session.query(Carnival).count()
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return cast(T, func(*args, **kwargs))
                except Exception as e:
                    if not _is_retryable(e, exceptions):
                        raise
                    if attempt + 1 == max_attempts:
                        logger.error(
                            f"Final attempt failed for {func.__name__}: {str(e)}"
                        )
                        raise

                    logger.warning(
                        f"Attempt {attempt + 1}/{max_attempts} failed for "
                        f"{func.__name__}: {str(e)}. Retrying in {current_delay}s..."
                    )

                    time.sleep(current_delay)
                    current_delay *= backoff

            # Only reachable with max_attempts < 1
            raise DatabaseError(f"{func.__name__} was not attempted")

        return wrapper
    return decorator

