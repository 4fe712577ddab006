"""Tests for ManifestWork status feedback aggregation."""

from __future__ import annotations

from hypershift_deployment_operator.services.feedback import (
    FeedbackField,
    aggregate_feedback,
    parse_feedback,
    representative,
    work_conditions,
)
from hypershift_deployment_operator.utils.conditions import Condition, apply_conditions


def feedback(kind: str, name: str, **values: str) -> dict:
    return {
        "resourceMeta": {"group": "hypershift.openshift.io", "kind": kind, "name": name, "namespace": "clusters"},
        "statusFeedback": {
            "values": [
                {"name": key, "fieldValue": {"type": "String", "string": value}}
                for key, value in values.items()
            ]
        },
    }


def work_status(*manifests: dict, conditions: list | None = None) -> dict:
    status: dict = {"resourceStatus": {"manifests": list(manifests)}}
    if conditions is not None:
        status["conditions"] = conditions
    return status


class TestParseFeedback:
    """Test parsing of resourceStatus feedback."""

    def test_parses_known_fields(self):
        records = parse_feedback(work_status(feedback("HostedCluster", "c1", Status="True", Reason="AsExpected")))

        assert len(records) == 1
        assert records[0].kind == "HostedCluster"
        assert records[0].fields == {FeedbackField.STATUS: "True", FeedbackField.REASON: "AsExpected"}

    def test_ignores_unknown_fields(self):
        records = parse_feedback(work_status(feedback("NodePool", "np", Status="True", Replicas="3")))

        assert set(records[0].fields) == {FeedbackField.STATUS}

    def test_integer_and_boolean_values(self):
        manifest = {
            "resourceMeta": {"kind": "NodePool", "name": "np", "namespace": "clusters"},
            "statusFeedback": {
                "values": [
                    {"name": "Status", "fieldValue": {"type": "Boolean", "boolean": True}},
                    {"name": "Message", "fieldValue": {"type": "Integer", "integer": 3}},
                ]
            },
        }

        record = parse_feedback(work_status(manifest))[0]

        assert record.get(FeedbackField.STATUS) == "True"
        assert record.get(FeedbackField.MESSAGE) == "3"

    def test_empty_status(self):
        assert parse_feedback(None) == []
        assert parse_feedback({}) == []


class TestAggregateFeedback:
    """Test mapping of feedback records to conditions."""

    def test_hosted_cluster_available(self):
        conditions = aggregate_feedback(
            work_status(feedback("HostedCluster", "c1", Status="True", Reason="AsExpected", Message="ok"))
        )

        assert conditions == [Condition("HostedClusterAvailable", "True", "AsExpected", "ok")]

    def test_hosted_cluster_progress_completed(self):
        conditions = aggregate_feedback(
            work_status(feedback("HostedCluster", "c1", Status="True", Reason="AsExpected", Progress="Completed"))
        )

        progress = conditions[1]
        assert progress.type == "HostedClusterProgress"
        assert progress.status == "True"
        assert progress.reason == "Completed"

    def test_hosted_cluster_progress_partial(self):
        conditions = aggregate_feedback(
            work_status(feedback("HostedCluster", "c1", Status="False", Reason="Rolling", Progress="Partial"))
        )

        assert conditions[1].status == "False"
        assert conditions[1].reason == "Partial"

    def test_unexpected_status_maps_to_unknown(self):
        conditions = aggregate_feedback(work_status(feedback("NodePool", "np", Status="Maybe", Reason="Odd")))

        assert conditions == [Condition("NodePoolReady", "Unknown", "Odd", "")]

    def test_missing_status_maps_to_unknown(self):
        conditions = aggregate_feedback(work_status(feedback("NodePool", "np", Reason="Odd")))

        assert conditions[0].status == "Unknown"
        assert conditions[0].reason == "StatusFeedbackMissing"

    def test_status_without_reason_uses_not_reported_placeholder(self):
        conditions = aggregate_feedback(work_status(feedback("HostedCluster", "c1", Status="True", Message="ok")))

        assert conditions == [Condition("HostedClusterAvailable", "True", "ReasonNotReported", "ok")]

    def test_last_not_ready_node_pool_is_representative(self):
        conditions = aggregate_feedback(work_status(
            feedback("NodePool", "np-1", Status="False", Reason="First", Message="first"),
            feedback("NodePool", "np-2", Status="True", Reason="Ready", Message="ok"),
            feedback("NodePool", "np-3", Status="False", Reason="Third", Message="third"),
        ))

        assert conditions == [Condition("NodePoolReady", "False", "Third", "third")]

    def test_first_record_when_all_ready(self):
        conditions = aggregate_feedback(work_status(
            feedback("NodePool", "np-1", Status="True", Reason="One", Message="1"),
            feedback("NodePool", "np-2", Status="True", Reason="Two", Message="2"),
        ))

        assert conditions == [Condition("NodePoolReady", "True", "One", "1")]

    def test_kinds_without_feedback_produce_nothing(self):
        assert aggregate_feedback(work_status()) == []

    def test_unchanged_feedback_causes_no_writes(self):
        """Feeding the same feedback twice yields changed=False the second time."""
        status = work_status(
            feedback("HostedCluster", "c1", Status="True", Reason="AsExpected", Message="ok"),
            feedback("NodePool", "np", Status="True", Reason="Ready", Message="ok"),
        )
        conditions, changed = apply_conditions([], aggregate_feedback(status))
        assert changed is True

        again, changed = apply_conditions(conditions, aggregate_feedback(status))

        assert changed is False
        assert again == conditions


def test_representative_of_nothing_is_none():
    assert representative([]) is None


def test_work_conditions_are_copied_verbatim():
    status = work_status(conditions=[
        {"type": "Applied", "status": "True", "reason": "AppliedManifestWorkComplete", "message": "done"},
        {"type": "Available", "status": "Unknown", "reason": "ResourcesNotAvailable", "message": "wait"},
    ])

    assert work_conditions(status) == [
        Condition("Applied", "True", "AppliedManifestWorkComplete", "done"),
        Condition("Available", "Unknown", "ResourcesNotAvailable", "wait"),
    ]
