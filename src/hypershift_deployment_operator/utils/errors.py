"""Error types and error sanitization utilities."""

from __future__ import annotations

import re
from typing import Iterable


class OperatorError(Exception):
    """Base class for errors raised by the operator core."""


class ResolutionError(OperatorError):
    """A required secret or credential is missing after every fallback."""

    def __init__(self, message: str, kind: str = "Secret", namespace: str = "", name: str = ""):
        super().__init__(message)
        self.kind = kind
        self.namespace = namespace
        self.name = name


class AggregateResolutionError(ResolutionError):
    """Several resolution errors reported together."""

    def __init__(self, errors: Iterable[ResolutionError]):
        self.errors: list[ResolutionError] = list(errors)
        super().__init__(self._format(self.errors))

    @staticmethod
    def _format(errors: list[ResolutionError]) -> str:
        if len(errors) == 1:
            return str(errors[0])
        return "[" + ", ".join(str(e) for e in errors) + "]"


class AlreadyExistsError(OperatorError):
    """A remote object with the same identity already exists."""


class ConflictError(OperatorError):
    """The remote object was modified concurrently."""


class OwnershipError(OperatorError):
    """The remote object belongs to a different HypershiftDeployment."""

    def __init__(self, message: str, owner: str = ""):
        super().__init__(message)
        self.owner = owner


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"aws_access_key_id[:\s=]+([A-Z0-9]{20})",
    r"aws_secret_access_key[:\s=]+([A-Za-z0-9/+=]{40})",
    r"arn:aws:iam::\d+:role/([a-zA-Z0-9\-_/]+)",
    r"arn:aws:kms:[a-z0-9\-]+:\d+:key/([a-f0-9\-]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "aws_secret_access_key",
    "session_token",
    "password",
    "credentials",
    "token",
    "dockerconfigjson",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{field}[:=]\s*([^\s,;\)]+)",
            rf"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message."""
    return sanitize_error_message(str(error))
