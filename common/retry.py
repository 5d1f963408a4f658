import logging
import time
from functools import wraps

from django.conf import settings
from django.db import OperationalError

logger = logging.getLogger(__name__)


def retry_on_db_error(attempts=None, backoff=None):
    """
    Retry a read-only query function when the database connection fails.

    Only wrap idempotent reads with this; mutations must fail on the first
    error so that a request is never applied twice.
    :param attempts: Total number of tries (defaults to settings.READ_RETRY_ATTEMPTS)
    :param backoff: Base delay in seconds, doubled after every failure
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            max_attempts = attempts or settings.READ_RETRY_ATTEMPTS
            delay = settings.READ_RETRY_BACKOFF if backoff is None else backoff
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except OperationalError as exc:
                    if attempt == max_attempts:
                        logger.error("%s failed after %d attempts: %s", func.__name__, attempt, exc)
                        raise
                    logger.warning("%s failed (attempt %d/%d), retrying: %s",
                                   func.__name__, attempt, max_attempts, exc)
                    time.sleep(delay * 2 ** (attempt - 1))
        return wrapper
    return decorator
