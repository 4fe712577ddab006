"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, NamedTuple

from ..constants import (
    COND_WORK_CONFIGURED,
    REASON_MISCONFIGURED,
    REASON_WORK_APPLIED,
    REASON_WORK_CREATED,
)

STATUS_TRUE = "True"
STATUS_FALSE = "False"
STATUS_UNKNOWN = "Unknown"


class Condition(NamedTuple):
    """Desired state of one condition on the HypershiftDeployment."""

    type: str
    status: str
    reason: str
    message: str


def find_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    """Return the condition with the given type, if present."""
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def condition_changed(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
) -> bool:
    """Check whether writing the condition would change its (status, reason, message).

    A missing condition always counts as a change.
    """
    existing = find_condition(conditions, condition_type)
    if existing is None:
        return True
    return (
        existing.get("status") != status
        or existing.get("reason") != reason
        or existing.get("message") != message
    )


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    existing_idx = None
    for idx, cond in enumerate(conditions):
        if cond.get("type") == condition_type:
            existing_idx = idx
            break

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }

    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # Only update lastTransitionTime if status changed
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def apply_conditions(
    conditions: list[dict[str, Any]] | None,
    desired: Iterable[Condition],
    observed_generation: int | None = None,
) -> tuple[list[dict[str, Any]], bool]:
    """Apply desired conditions with compare-and-set semantics.

    The input list is never mutated. Conditions whose status, reason and
    message already match are left untouched.

    Returns:
        Tuple of (resulting conditions, whether anything changed)
    """
    result = [dict(cond) for cond in conditions or []]
    changed = False
    for cond in desired:
        if not condition_changed(result, cond.type, cond.status, cond.reason, cond.message):
            continue
        update_condition(result, cond.type, cond.status, cond.reason, cond.message, observed_generation)
        changed = True
    return result, changed


def work_configured_condition(created: bool) -> Condition:
    """Condition reporting that the ManifestWork carries the current payload."""
    if created:
        return Condition(COND_WORK_CONFIGURED, STATUS_TRUE, REASON_WORK_CREATED, "ManifestWork created")
    return Condition(COND_WORK_CONFIGURED, STATUS_TRUE, REASON_WORK_APPLIED, "ManifestWork is up to date")


def misconfigured_condition(message: str) -> Condition:
    """Condition reporting that the ManifestWork payload could not be built."""
    return Condition(COND_WORK_CONFIGURED, STATUS_FALSE, REASON_MISCONFIGURED, message)
