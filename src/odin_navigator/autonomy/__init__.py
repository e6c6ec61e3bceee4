"""Autonomy - decision boundaries, verdicts and human override tracking.

Components:
- AutonomyGovernor: maps a proposed action and its confidence onto a
  full / advisory / manual verdict and tracks the action lifecycle
- Boundary tables: hard-coded seed table and YAML loader
- Schemas: enums and pydantic models for boundaries, actions and overrides

Design principles:
- Every verdict carries its reasoning
- Emergency mode leaves only safety-critical actions autonomous
- Overrides are immutable and only valid before the action's deadline
- Missing boundaries or actions are reported, never raised
"""

from odin_navigator.autonomy.boundaries import (
    default_boundaries,
    load_boundaries,
    parse_boundaries,
)
from odin_navigator.autonomy.governor import AutonomyGovernor
from odin_navigator.autonomy.schemas import (
    ActionSequence,
    ActionStatus,
    ActionStep,
    AutonomousAction,
    AutonomyLevel,
    AutonomyStatus,
    AutonomyVerdict,
    DecisionBoundary,
    DenialReason,
    HealthStatus,
    HumanOverride,
    MissionPhase,
    SafetyClassification,
    SubsystemHealth,
    SubsystemType,
    SystemHealthSummary,
)

__all__ = [
    # Core components
    "AutonomyGovernor",
    # Boundary tables
    "default_boundaries",
    "load_boundaries",
    "parse_boundaries",
    # Schemas
    "ActionSequence",
    "ActionStatus",
    "ActionStep",
    "AutonomousAction",
    "AutonomyLevel",
    "AutonomyStatus",
    "AutonomyVerdict",
    "DecisionBoundary",
    "DenialReason",
    "HealthStatus",
    "HumanOverride",
    "MissionPhase",
    "SafetyClassification",
    "SubsystemHealth",
    "SubsystemType",
    "SystemHealthSummary",
]
