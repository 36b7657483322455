# storefront/utils/retry.py
"""Tenacity policies for outbound calls. Only transient failures are retried."""
import redis
import requests
from tenacity import retry, retry_if_exception, retry_if_exception_type, stop_after_attempt, wait_exponential

HTTP_ATTEMPTS = 3
REDIS_ATTEMPTS = 3


def is_transient_http_error(exc: BaseException) -> bool:
    """Connection drops, timeouts and 5xx answers; a 4xx will fail the same way again."""
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError):
        status = getattr(exc.response, "status_code", None)
        return status is not None and status >= 500
    return False


def http_retry(attempts: int = HTTP_ATTEMPTS):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(is_transient_http_error),
    )


def redis_retry(attempts: int = REDIS_ATTEMPTS):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type((redis.ConnectionError, redis.TimeoutError)),
    )
