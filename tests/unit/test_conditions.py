"""Unit tests for condition utilities."""

from __future__ import annotations

from hypershift_deployment_operator.utils.conditions import (
    Condition,
    apply_conditions,
    condition_changed,
    find_condition,
    misconfigured_condition,
    update_condition,
    work_configured_condition,
)


class TestConditions:
    """Test condition utilities."""

    def test_update_condition_new(self) -> None:
        """Test adding a new condition."""
        conditions = []
        result = update_condition(
            conditions, "TestCondition", "True", "TestReason", "Test message", observed_generation=1
        )

        assert len(result) == 1
        assert result[0]["type"] == "TestCondition"
        assert result[0]["status"] == "True"
        assert result[0]["reason"] == "TestReason"
        assert result[0]["message"] == "Test message"
        assert result[0]["observedGeneration"] == 1

    def test_update_condition_keeps_transition_time_when_status_unchanged(self) -> None:
        conditions = [
            {
                "type": "TestCondition",
                "status": "True",
                "reason": "OldReason",
                "message": "Old message",
                "lastTransitionTime": "2023-01-01T00:00:00Z",
            }
        ]

        result = update_condition(conditions, "TestCondition", "True", "NewReason", "New message")

        assert result[0]["reason"] == "NewReason"
        assert result[0]["lastTransitionTime"] == "2023-01-01T00:00:00Z"

    def test_update_condition_moves_transition_time_on_status_change(self) -> None:
        conditions = [
            {"type": "TestCondition", "status": "False", "lastTransitionTime": "2023-01-01T00:00:00Z"}
        ]

        result = update_condition(conditions, "TestCondition", "True", "Reason", "msg")

        assert result[0]["lastTransitionTime"] != "2023-01-01T00:00:00Z"

    def test_find_condition(self) -> None:
        conditions = [{"type": "A"}, {"type": "B"}]
        assert find_condition(conditions, "B") == {"type": "B"}
        assert find_condition(conditions, "C") is None


class TestConditionChanged:
    """Test the explicit condition diff."""

    existing = [{"type": "A", "status": "True", "reason": "R", "message": "m"}]

    def test_missing_condition_is_a_change(self) -> None:
        assert condition_changed([], "A", "True", "R", "m") is True

    def test_identical_triple_is_not_a_change(self) -> None:
        assert condition_changed(self.existing, "A", "True", "R", "m") is False

    def test_any_field_difference_is_a_change(self) -> None:
        assert condition_changed(self.existing, "A", "False", "R", "m") is True
        assert condition_changed(self.existing, "A", "True", "Other", "m") is True
        assert condition_changed(self.existing, "A", "True", "R", "other") is True


class TestApplyConditions:
    """Test compare-and-set application of desired conditions."""

    def test_reports_change_and_does_not_mutate_input(self) -> None:
        current = [{"type": "A", "status": "False", "reason": "R", "message": "m"}]

        result, changed = apply_conditions(current, [Condition("A", "True", "R", "m")], observed_generation=3)

        assert changed is True
        assert result[0]["status"] == "True"
        assert result[0]["observedGeneration"] == 3
        assert current[0]["status"] == "False"

    def test_unchanged_conditions_are_left_alone(self) -> None:
        current = [{"type": "A", "status": "True", "reason": "R", "message": "m", "lastTransitionTime": "t0"}]

        result, changed = apply_conditions(current, [Condition("A", "True", "R", "m")])

        assert changed is False
        assert result == current

    def test_none_is_treated_as_empty(self) -> None:
        result, changed = apply_conditions(None, [Condition("A", "True", "R", "m")])

        assert changed is True
        assert [c["type"] for c in result] == ["A"]

    def test_other_conditions_are_preserved(self) -> None:
        current = [{"type": "Other", "status": "True", "reason": "R", "message": "m"}]

        result, _ = apply_conditions(current, [Condition("A", "True", "R", "m")])

        assert [c["type"] for c in result] == ["Other", "A"]


class TestWorkConfiguredConditions:
    """Test ManifestWorkConfigured helpers."""

    def test_created(self) -> None:
        cond = work_configured_condition(created=True)
        assert cond == Condition("ManifestWorkConfigured", "True", "ManifestWorkCreated", "ManifestWork created")

    def test_applied(self) -> None:
        cond = work_configured_condition(created=False)
        assert cond.status == "True"
        assert cond.reason == "ManifestWorkApplied"

    def test_misconfigured_keeps_message_verbatim(self) -> None:
        cond = misconfigured_condition("failed to get the pull secret clusters/ps: not found")
        assert cond == Condition(
            "ManifestWorkConfigured",
            "False",
            "MisConfiguredManifestWork",
            "failed to get the pull secret clusters/ps: not found",
        )
