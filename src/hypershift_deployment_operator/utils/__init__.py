"""Utility functions for the HypershiftDeployment Operator."""

from .conditions import (
    Condition,
    apply_conditions,
    condition_changed,
    update_condition,
)
from .errors import (
    AggregateResolutionError,
    AlreadyExistsError,
    ConflictError,
    OwnershipError,
    ResolutionError,
    sanitize_exception,
)
from .events import emit_event
from .rate_limit import rate_limit_k8s, retry_on_rate_limit
from .secrets import generate_encryption_key_secret, rehome_secret

__all__ = [
    "Condition",
    "apply_conditions",
    "condition_changed",
    "update_condition",
    "AggregateResolutionError",
    "AlreadyExistsError",
    "ConflictError",
    "OwnershipError",
    "ResolutionError",
    "sanitize_exception",
    "emit_event",
    "rate_limit_k8s",
    "retry_on_rate_limit",
    "generate_encryption_key_secret",
    "rehome_secret",
]
