# ivory/utils/retry.py
import redis
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

ATTEMPTS = 3


def _backoff(exceptions, first_wait: float):
    return retry(
        reraise=True,
        stop=stop_after_attempt(ATTEMPTS),
        wait=wait_exponential(multiplier=first_wait, min=first_wait, max=first_wait * 10),
        retry=retry_if_exception_type(exceptions),
    )


def http_retry():
    # transport failures only; an HTTP error status is a real answer from the gateway
    return _backoff((requests.ConnectionError, requests.Timeout), first_wait=0.3)


def redis_retry():
    return _backoff(redis.RedisError, first_wait=0.2)
