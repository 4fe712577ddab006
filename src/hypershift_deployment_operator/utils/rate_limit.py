"""Rate limiting utilities for Kubernetes API calls."""

from __future__ import annotations

import os
import threading
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from kubernetes.client.exceptions import ApiException

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

# Rate limit configuration
_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_K8S_MAX_RETRIES = int(os.getenv("K8S_RATE_LIMIT_MAX_RETRIES", "3"))

_k8s_last_call_time: float = 0.0
_k8s_lock = threading.Lock()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls.

    Spaces calls at least 1/K8S_RATE_LIMIT_PER_SECOND seconds apart across
    all handler threads.
    """
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        global _k8s_last_call_time
        min_interval = 1.0 / _K8S_RATE_LIMIT_PER_SECOND
        with _k8s_lock:
            time_since_last_call = time.time() - _k8s_last_call_time
            if time_since_last_call < min_interval:
                time.sleep(min_interval - time_since_last_call)
            _k8s_last_call_time = time.time()
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def is_rate_limit_error(e: Exception) -> bool:
    """Check if an exception is a Kubernetes API rate limit response (429, or 503 mentioning rate limit)."""
    if not isinstance(e, ApiException):
        return False
    return e.status == 429 or (e.status == 503 and "rate limit" in str(e).lower())


def retry_on_rate_limit(func: _F, max_retries: int = _K8S_MAX_RETRIES) -> _F:
    """Retry a call with exponential backoff (1s, 2s, 4s) while the API rate limits it."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        attempt = 0
        while True:
            try:
                return func(*args, **kwargs)
            except ApiException as e:
                if not is_rate_limit_error(e) or attempt >= max_retries:
                    raise
                metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
                time.sleep(2 ** attempt)
                attempt += 1

    return wrapper  # type: ignore
