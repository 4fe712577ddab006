"""Main entry point for the HypershiftDeployment Operator."""

from __future__ import annotations

import os
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # AnnotationsProgressStorage keeps handler progress out of the status conditions
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Requeues use explicit delays; these cover unexpected handler failures
    settings.execution.min_retry_delay = 1.0
    settings.execution.max_retry_delay = 60.0
    settings.execution.retry_backoff = 2.0
    settings.execution.backoff_jitter = 0.1

    health.start_metrics_server(int(os.getenv("METRICS_PORT", "8080")))
