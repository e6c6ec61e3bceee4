"""Integration tests for the autonomy governor.

Runs a mission timeline through evaluation, queued actions, overrides,
phase changes and emergency mode with a shared metrics collector.
"""

import threading
from unittest.mock import Mock, patch

import pytest

import main as demo
from odin_navigator.autonomy import (
    ActionStatus,
    AutonomyGovernor,
    AutonomyLevel,
    DenialReason,
    MissionPhase,
    SubsystemType,
)
from odin_navigator.monitoring import MetricsCollector, MetricType


class TestMissionTimeline:
    """Tests a full pass from transit through landing."""

    @pytest.fixture
    def metrics(self):
        return MetricsCollector(publisher=Mock(), batch_size=5)

    @pytest.fixture
    def flight(self, config, clock, metrics):
        return AutonomyGovernor(config=config, metrics=metrics, clock=clock)

    def test_evaluate_then_queue_then_execute(self, flight, clock):
        """Test the evaluate, create, execute path for an approved action."""
        verdict = flight.evaluate_autonomous_action(
            "repoint_high_gain_antenna", SubsystemType.COMMS, 96, ["DSN handover"]
        )
        assert verdict.can_execute is True

        action = flight.create_autonomous_action(
            "repoint_high_gain_antenna", SubsystemType.COMMS, 96,
            verdict.reasoning, None, "corr-antenna",
        )
        clock.advance(verdict.time_to_execution)

        assert flight.mark_action_executed(action.id) is True
        assert flight.get_pending_actions() == []
        assert flight.get_autonomy_status().pending_actions_count == 0

    def test_landing_timeline(self, flight, clock, metrics):
        """Test phase tightening, emergency cascade and recovery together."""
        radiators = flight.create_autonomous_action(
            "deploy_emergency_radiators", SubsystemType.THERMAL, 93, [], None, "c1"
        )
        avoidance = flight.create_autonomous_action(
            "emergency_collision_avoidance", SubsystemType.NAVIGATION, 97, [], None, "c2"
        )
        tcm = flight.create_autonomous_action(
            "execute_minor_tcm", SubsystemType.NAVIGATION, 85, [], None, "c3"
        )

        flight.update_mission_phase(MissionPhase.LANDING)
        verdict = flight.evaluate_autonomous_action(
            "deploy_emergency_radiators", SubsystemType.THERMAL, 93
        )
        assert verdict.autonomy_level == AutonomyLevel.ADVISORY
        assert any("97% threshold" in line for line in verdict.reasoning)

        clock.advance(5)
        overridden = flight.activate_emergency_mode("Hull breach warning")

        assert set(overridden) == {radiators.id, tcm.id}
        assert flight.get_action(avoidance.id).status == ActionStatus.PENDING
        assert flight.get_pending_actions() == [avoidance]

        status = flight.get_autonomy_status()
        assert status.emergency_mode is True
        assert status.mission_phase == MissionPhase.LANDING
        assert status.urgent_actions_count == 1
        assert status.recent_overrides_24h == 2

        clock.advance(10)
        assert [a.id for a in flight.expire_stale_actions()] == [avoidance.id]

        flight.deactivate_emergency_mode()
        flight.update_mission_phase(MissionPhase.SURFACE)

        assert flight.get_decision_boundary("thermal-radiator-deploy").confidence_threshold == 92
        assert flight.get_pending_actions() == []

        metrics.flush()
        assert metrics.get_count(MetricType.OVERRIDE.value) == 2
        assert metrics.get_count(MetricType.ACTION_EXPIRED.value) == 1
        assert metrics.publisher.called

    def test_emergency_denies_new_work(self, flight):
        """Test new non-critical actions are denied until emergency clears."""
        flight.activate_emergency_mode("Power bus fault")

        denied = flight.evaluate_autonomous_action(
            "isolate_faulty_thruster", SubsystemType.PROPULSION, 99
        )
        allowed = flight.evaluate_autonomous_action(
            "activate_emergency_beacon", SubsystemType.COMMS, 99
        )

        assert denied.denial_reason == DenialReason.EMERGENCY_MODE
        assert allowed.can_execute is True


class TestConcurrentOverrides:
    """Tests overrides racing from several operator consoles."""

    def test_single_override_wins(self, governor):
        """Test exactly one of many concurrent overrides succeeds."""
        action = governor.create_autonomous_action(
            "execute_minor_tcm", SubsystemType.NAVIGATION, 85, [], None, "c1"
        )
        results = []
        barrier = threading.Barrier(8)

        def console(operator_id):
            barrier.wait()
            results.append(governor.process_human_override(action.id, operator_id, "abort"))

        threads = [threading.Thread(target=console, args=(f"OP{i}",)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert len(governor.get_override_history(action.id)) == 1
        assert governor.get_action(action.id).status == ActionStatus.OVERRIDDEN


class TestDemo:
    """Tests the demo entry point runs end to end."""

    def test_run_autonomy_demo(self, governor):
        demo.run_autonomy_demo(governor)

        status = governor.get_autonomy_status()
        assert status.emergency_mode is False
        assert status.mission_phase == MissionPhase.SURFACE
        assert status.recent_overrides_24h == 2
        assert governor.get_decision_boundary("thermal-radiator-deploy").confidence_threshold == 92

    def test_metrics_collector_without_namespace(self, config):
        """Test the demo keeps metrics in memory by default."""
        assert demo.build_metrics_collector(config).publisher is None

    @patch("odin_navigator.monitoring.cloudwatch.boto3.client")
    def test_metrics_collector_with_namespace(self, mock_boto3_client, config):
        """Test a configured namespace routes metrics to CloudWatch."""
        config.cloudwatch_namespace = "ODINFlight"
        config.aws_region = "eu-west-1"

        collector = demo.build_metrics_collector(config)

        assert collector.publisher.namespace == "ODINFlight"
        mock_boto3_client.assert_called_once_with("cloudwatch", region_name="eu-west-1")
