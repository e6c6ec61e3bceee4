#!/usr/bin/env python3
"""Main entry point for ODIN Navigator.

Runs the autonomy governor through the decision-boundary, override and
emergency-mode scenarios and logs what it decides.
"""

from odin_navigator.autonomy import AutonomyGovernor, MissionPhase, SubsystemType
from odin_navigator.common.config import get_config
from odin_navigator.common.logging import get_logger
from odin_navigator.monitoring import MetricsCollector

config = get_config()
logger = get_logger(__name__, config.log_level.value)


def run_autonomy_demo(governor: AutonomyGovernor) -> None:
    """Walk the governor through the standard demo scenarios."""
    # Multi-tier decision boundaries
    for confidence in (97, 88, 60):
        verdict = governor.evaluate_autonomous_action(
            action="shed_non_critical_loads",
            subsystem=SubsystemType.POWER,
            confidence=confidence,
            reasoning=[f"Battery state of charge trending down ({confidence}% confidence)"],
        )
        logger.info(
            f"shed_non_critical_loads @ {confidence}%: can_execute={verdict.can_execute} "
            f"level={verdict.autonomy_level.value} "
            f"confirm={verdict.requires_confirmation} "
            f"t={verdict.time_to_execution}s"
        )

    # Pending actions and human override
    radiators = governor.create_autonomous_action(
        "deploy_emergency_radiators", SubsystemType.THERMAL, 93,
        ["Solar flare thermal spike predicted"], None, "demo-thermal-001",
    )
    beacon = governor.create_autonomous_action(
        "activate_emergency_beacon", SubsystemType.COMMS, 90,
        ["Loss of signal exceeds 10 minutes"], None, "demo-comms-001",
    )
    antenna = governor.create_autonomous_action(
        "repoint_high_gain_antenna", SubsystemType.COMMS, 96,
        ["DSN handover window opening"], None, "demo-comms-002",
    )
    for action in governor.get_pending_actions():
        logger.info(
            f"Pending {action.action} ({action.subsystem.value}), "
            f"deadline {action.human_override_deadline.isoformat()}"
        )

    if antenna is not None:
        governor.process_human_override(
            antenna.id, "FLIGHT_DIRECTOR", "Handover rescheduled by ground",
            alternative_action="hold_current_pointing",
        )

    # Emergency mode
    overridden = governor.activate_emergency_mode("Critical system health detected")
    logger.info(f"Emergency mode overrode {len(overridden)} action(s)")
    for queued in (radiators, beacon):
        if queued is not None:
            action = governor.get_action(queued.id)
            logger.info(f"{action.action}: {action.status.value}")
    governor.deactivate_emergency_mode()

    # Critical mission phase
    governor.update_mission_phase(MissionPhase.LANDING)
    boundary = governor.get_decision_boundary("thermal-radiator-deploy")
    if boundary is not None:
        logger.info(
            f"Landing phase: {boundary.id} threshold={boundary.confidence_threshold}% "
            f"confirm={boundary.requires_human_confirmation}"
        )
    governor.update_mission_phase(MissionPhase.SURFACE)

    status = governor.get_autonomy_status()
    logger.info(f"Autonomy status: {status.model_dump(mode='json')}")


def build_metrics_collector(config) -> MetricsCollector:
    """Collector publishing to CloudWatch when a namespace is configured."""
    if not config.cloudwatch_namespace:
        return MetricsCollector()

    # boto3 ships with the cloudwatch extra only
    from odin_navigator.monitoring.cloudwatch import CloudWatchPublisher

    publisher = CloudWatchPublisher(
        namespace=config.cloudwatch_namespace,
        region=config.aws_region,
        aws_profile=config.aws_profile,
    )
    return MetricsCollector(publisher=publisher)


def main():
    """Main entry point."""
    metrics = build_metrics_collector(config)
    governor = AutonomyGovernor(config=config, metrics=metrics)
    logger.info(f"ODIN Navigator initialized in {config.environment.value} mode")

    run_autonomy_demo(governor)

    metrics.shutdown()
    logger.info(f"Metrics: {metrics.get_summary()}")


if __name__ == "__main__":
    main()
