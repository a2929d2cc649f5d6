"""Retry utilities with exponential backoff."""

import structlog
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger().bind(source="retry")


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "retry.sleeping",
        call=getattr(retry_state.fn, "__name__", "call"),
        attempt=retry_state.attempt_number,
        wait_seconds=round(retry_state.next_action.sleep, 2) if retry_state.next_action else None,
        error=str(error) if error else None,
    )


def http_retry(
    max_attempts: int = 3,
    min_wait: float = 2.0,
    max_wait: float = 10.0,
    exceptions: tuple = (Exception,),
):
    """Retry decorator for HTTP calls to the knowledge store.

    Args:
        max_attempts: Max attempts, including the first call
        min_wait: Min wait between retries (seconds)
        max_wait: Max wait between retries (seconds)
        exceptions: Exception types to retry on; anything else raises at once
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=_log_retry,
        reraise=True,
    )


def retry_from_config(retry_config, exceptions: tuple = (Exception,)):
    """Build an http_retry decorator from a RetryConfig model."""
    return http_retry(
        max_attempts=retry_config.max_attempts,
        min_wait=retry_config.min_wait,
        max_wait=retry_config.max_wait,
        exceptions=exceptions,
    )
