"""Aggregation of ManifestWork status feedback into HypershiftDeployment conditions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..constants import (
    COND_HOSTED_CLUSTER_AVAILABLE,
    COND_HOSTED_CLUSTER_PROGRESS,
    COND_NODE_POOL_READY,
    KIND_HOSTED_CLUSTER,
    KIND_NODE_POOL,
    PROGRESS_COMPLETED,
    REASON_FEEDBACK_MISSING,
    REASON_NOT_REPORTED,
)
from ..utils.conditions import STATUS_FALSE, STATUS_TRUE, STATUS_UNKNOWN, Condition


class FeedbackField(str, Enum):
    """Feedback value names requested through the ManifestWork feedback rules."""

    STATUS = "Status"
    REASON = "Reason"
    MESSAGE = "Message"
    PROGRESS = "Progress"


@dataclass
class FeedbackRecord:
    """Status feedback reported for one manifest of a ManifestWork."""

    kind: str
    namespace: str
    name: str
    fields: dict[FeedbackField, str] = field(default_factory=dict)

    def get(self, feedback_field: FeedbackField, default: str = "") -> str:
        return self.fields.get(feedback_field, default)

    @property
    def ready(self) -> str:
        """Readiness as a condition status: True, False or Unknown."""
        status = self.fields.get(FeedbackField.STATUS)
        if status == STATUS_TRUE:
            return STATUS_TRUE
        if status == STATUS_FALSE:
            return STATUS_FALSE
        return STATUS_UNKNOWN


def _field_value(value: dict[str, Any]) -> str | None:
    field_value = value.get("fieldValue") or {}
    for key in ("string", "integer", "boolean"):
        if field_value.get(key) is not None:
            raw = field_value[key]
            if isinstance(raw, bool):
                return "True" if raw else "False"
            return str(raw)
    return None


def parse_feedback(work_status: dict[str, Any] | None) -> list[FeedbackRecord]:
    """Parse status.resourceStatus.manifests of a ManifestWork into feedback records.

    Unknown feedback names are ignored.
    """
    records = []
    resource_status = (work_status or {}).get("resourceStatus") or {}
    for manifest in resource_status.get("manifests") or []:
        meta = manifest.get("resourceMeta") or {}
        record = FeedbackRecord(
            kind=meta.get("kind", ""),
            namespace=meta.get("namespace", ""),
            name=meta.get("name", ""),
        )
        for value in (manifest.get("statusFeedback") or {}).get("values") or []:
            try:
                feedback_field = FeedbackField(value.get("name"))
            except ValueError:
                continue
            parsed = _field_value(value)
            if parsed is not None:
                record.fields[feedback_field] = parsed
        records.append(record)
    return records


def representative(records: list[FeedbackRecord]) -> FeedbackRecord | None:
    """The last record that is not ready, else the first record."""
    if not records:
        return None
    for record in reversed(records):
        if record.ready != STATUS_TRUE:
            return record
    return records[0]


def _readiness_condition(condition_type: str, record: FeedbackRecord) -> Condition:
    if FeedbackField.STATUS not in record.fields:
        return Condition(
            condition_type,
            STATUS_UNKNOWN,
            REASON_FEEDBACK_MISSING,
            f"No status feedback reported for {record.kind} {record.namespace}/{record.name}",
        )
    return Condition(
        condition_type,
        record.ready,
        record.get(FeedbackField.REASON) or REASON_NOT_REPORTED,
        record.get(FeedbackField.MESSAGE),
    )


def aggregate_feedback(work_status: dict[str, Any] | None) -> list[Condition]:
    """Derive the desired HostedCluster and NodePool conditions from a ManifestWork status.

    Kinds with no feedback records produce no condition.

    Args:
        work_status: status of the ManifestWork

    Returns:
        Desired conditions in a fixed order
    """
    records = parse_feedback(work_status)
    desired = []

    hosted_cluster = representative([r for r in records if r.kind == KIND_HOSTED_CLUSTER])
    if hosted_cluster is not None:
        desired.append(_readiness_condition(COND_HOSTED_CLUSTER_AVAILABLE, hosted_cluster))
        progress = hosted_cluster.get(FeedbackField.PROGRESS)
        if progress:
            desired.append(Condition(
                COND_HOSTED_CLUSTER_PROGRESS,
                STATUS_TRUE if progress == PROGRESS_COMPLETED else STATUS_FALSE,
                progress,
                f"HostedCluster version rollout is {progress}",
            ))

    node_pool = representative([r for r in records if r.kind == KIND_NODE_POOL])
    if node_pool is not None:
        desired.append(_readiness_condition(COND_NODE_POOL_READY, node_pool))

    return desired


def work_conditions(work_status: dict[str, Any] | None) -> list[Condition]:
    """The ManifestWork's own conditions, copied verbatim."""
    return [
        Condition(
            cond.get("type", ""),
            cond.get("status", STATUS_UNKNOWN),
            cond.get("reason", ""),
            cond.get("message", ""),
        )
        for cond in (work_status or {}).get("conditions") or []
        if cond.get("type")
    ]
