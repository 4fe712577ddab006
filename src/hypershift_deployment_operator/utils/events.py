"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CONFIGURATION_FAILED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_WAITING_FOR_CLEANUP,
    EVENT_REASON_WORK_CREATED,
    EVENT_REASON_WORK_DELETED,
    EVENT_REASON_WORK_UPDATED,
)


def emit_event(
    meta: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        meta: Resource metadata
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        meta,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(meta: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(meta, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(meta: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(meta, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_work_created(meta: dict[str, Any], work_ref: str) -> None:
    emit_event(meta, EVENT_REASON_WORK_CREATED, f"ManifestWork {work_ref} created")


def emit_work_updated(meta: dict[str, Any], work_ref: str) -> None:
    emit_event(meta, EVENT_REASON_WORK_UPDATED, f"ManifestWork {work_ref} updated")


def emit_work_deleted(meta: dict[str, Any], work_ref: str) -> None:
    emit_event(meta, EVENT_REASON_WORK_DELETED, f"ManifestWork {work_ref} deleted")


def emit_configuration_failed(meta: dict[str, Any], message: str) -> None:
    """Emit configuration failed event."""
    emit_event(meta, EVENT_REASON_CONFIGURATION_FAILED, message, type_="Warning")


def emit_waiting_for_cleanup(meta: dict[str, Any], message: str) -> None:
    emit_event(meta, EVENT_REASON_WAITING_FOR_CLEANUP, message)
