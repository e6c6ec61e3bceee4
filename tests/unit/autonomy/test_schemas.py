"""Tests for autonomy schemas."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from odin_navigator.autonomy.schemas import (
    ActionSequence,
    ActionStatus,
    ActionStep,
    AutonomousAction,
    AutonomyLevel,
    AutonomyVerdict,
    DecisionBoundary,
    HumanOverride,
    MissionPhase,
    SubsystemType,
)

NOW = datetime(2026, 3, 14, 12, 0, 0, tzinfo=timezone.utc)


class TestMissionPhase:

    @pytest.mark.parametrize("phase", ["launch", "landing", "emergency"])
    def test_critical_phases(self, phase):
        assert MissionPhase(phase).is_critical is True

    @pytest.mark.parametrize("phase", ["transit", "orbital", "surface"])
    def test_non_critical_phases(self, phase):
        assert MissionPhase(phase).is_critical is False

    def test_compares_with_strings(self):
        assert MissionPhase.ORBITAL == "orbital"
        assert SubsystemType.LIFE_SUPPORT == "life_support"


class TestDecisionBoundary:
    """Tests for DecisionBoundary."""

    def _boundary(self, **overrides):
        fields = dict(
            id="comms-beacon",
            subsystem="comms",
            action="activate_emergency_beacon",
            autonomy_level="full",
            confidence_threshold=85,
            time_constraint=15,
            requires_human_confirmation=False,
            safety_classification="critical",
        )
        fields.update(overrides)
        return DecisionBoundary(**fields)

    def test_key(self):
        assert self._boundary().key == ("comms", "activate_emergency_beacon")

    def test_defaults(self):
        boundary = self._boundary()

        assert boundary.mission_phase_restrictions == []
        assert boundary.fallback_action is None
        assert boundary.last_updated.tzinfo is not None

    def test_is_restricted_in(self):
        boundary = self._boundary(mission_phase_restrictions=["launch"])

        assert boundary.is_restricted_in(MissionPhase.LAUNCH) is True
        assert boundary.is_restricted_in(MissionPhase.TRANSIT) is False

    @pytest.mark.parametrize("threshold", [0, 100])
    def test_threshold_bounds_accepted(self, threshold):
        assert self._boundary(confidence_threshold=threshold).confidence_threshold == threshold

    @pytest.mark.parametrize("overrides", [
        {"confidence_threshold": 101},
        {"time_constraint": -5},
        {"subsystem": "galley"},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValidationError):
            self._boundary(**overrides)


class TestAutonomousAction:
    """Tests for AutonomousAction."""

    def _action(self, **overrides):
        fields = dict(
            decision_boundary_id="power-load-shed-minor",
            action="shed_non_critical_loads",
            subsystem=SubsystemType.POWER,
            confidence=97,
            human_override_deadline=NOW + timedelta(seconds=30),
            correlation_id="corr-1",
        )
        fields.update(overrides)
        return AutonomousAction(**fields)

    def test_defaults(self):
        action = self._action()

        assert action.id.startswith("auto_")
        assert action.status == ActionStatus.PENDING
        assert action.is_pending is True
        assert action.reasoning == []
        assert action.execution_plan is None
        assert action.executed_at is None

    def test_seconds_remaining(self):
        action = self._action()

        assert action.seconds_remaining(NOW) == 30
        assert action.seconds_remaining(NOW + timedelta(seconds=45)) == -15

    def test_execution_plan_kept_as_given(self):
        plan = ActionSequence(
            steps=[ActionStep(id="s1", description="Open breaker 4", duration=2)],
            total_duration=2,
            rollback_possible=True,
        )

        assert self._action(execution_plan=plan).execution_plan is plan
        assert self._action(execution_plan={"loads": ["heater_b"]}).execution_plan == {"loads": ["heater_b"]}

    def test_confidence_range(self):
        with pytest.raises(ValidationError):
            self._action(confidence=120)


class TestHumanOverride:

    def test_frozen(self):
        override = HumanOverride(
            autonomous_action_id="auto_1",
            operator_id="CAPCOM",
            override_reason="Manual control",
        )

        assert override.id.startswith("ovr_")
        assert override.confirmed_by_second_operator is None
        with pytest.raises(ValidationError):
            override.override_reason = "changed"


class TestAutonomyVerdict:

    def test_is_denied(self):
        verdict = AutonomyVerdict(
            can_execute=False,
            autonomy_level=AutonomyLevel.MANUAL,
            time_to_execution=0,
            requires_confirmation=True,
        )

        assert verdict.is_denied is True
        assert verdict.reasoning == []

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationError):
            AutonomyVerdict(
                can_execute=True,
                autonomy_level=AutonomyLevel.FULL,
                time_to_execution=-1,
                requires_confirmation=False,
            )
