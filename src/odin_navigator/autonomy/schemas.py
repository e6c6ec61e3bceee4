"""Autonomy schemas - type definitions for decision boundaries and overrides.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MissionPhase(str, Enum):
    """Mission phases."""
    LAUNCH = "launch"
    TRANSIT = "transit"
    ORBITAL = "orbital"
    LANDING = "landing"
    SURFACE = "surface"
    EMERGENCY = "emergency"

    @property
    def is_critical(self) -> bool:
        return self in CRITICAL_MISSION_PHASES


CRITICAL_MISSION_PHASES = frozenset({
    MissionPhase.LAUNCH,
    MissionPhase.LANDING,
    MissionPhase.EMERGENCY,
})


class SubsystemType(str, Enum):
    """Spacecraft subsystems that can own autonomous actions."""
    COMMS = "comms"
    POWER = "power"
    THERMAL = "thermal"
    NAVIGATION = "navigation"
    PROPULSION = "propulsion"
    LIFE_SUPPORT = "life_support"
    SCIENCE = "science"


class AutonomyLevel(str, Enum):
    """How much human involvement an action requires."""
    FULL = "full"
    ADVISORY = "advisory"
    MANUAL = "manual"


class SafetyClassification(str, Enum):
    """Severity tag, independent of autonomy level."""
    ROUTINE = "routine"
    CAUTION = "caution"
    WARNING = "warning"
    CRITICAL = "critical"


class ActionStatus(str, Enum):
    """Lifecycle of an autonomous action."""
    PENDING = "pending"
    OVERRIDDEN = "overridden"
    EXECUTED = "executed"
    EXPIRED = "expired"


class HealthStatus(str, Enum):
    """Subsystem and overall health."""
    OPTIMAL = "optimal"
    NOMINAL = "nominal"
    CAUTION = "caution"
    WARNING = "warning"
    CRITICAL = "critical"
    OFFLINE = "offline"


class DenialReason(str, Enum):
    """Why a verdict does not allow autonomous execution."""
    NO_BOUNDARY = "no_boundary"
    PHASE_RESTRICTED = "phase_restricted"
    EMERGENCY_MODE = "emergency_mode"
    LOW_CONFIDENCE = "low_confidence"
    AUTONOMY_LEVEL_INSUFFICIENT = "autonomy_level_insufficient"


class DecisionBoundary(BaseModel):
    """Static policy row for one (subsystem, action) pair."""
    id: str = Field(
        ...,
        min_length=1,
        description="Unique boundary identifier"
    )
    subsystem: SubsystemType = Field(
        ...,
        description="Subsystem that owns the action"
    )
    action: str = Field(
        ...,
        min_length=1,
        description="Autonomous action governed by this boundary"
    )
    autonomy_level: AutonomyLevel = Field(
        ...,
        description="Maximum autonomy ever grantable for this boundary"
    )
    confidence_threshold: int = Field(
        ...,
        ge=0,
        le=100,
        description="Minimum confidence (percent) required to act"
    )
    time_constraint: int = Field(
        ...,
        gt=0,
        description="Seconds before the action must execute or be overridden"
    )
    requires_human_confirmation: bool = Field(
        ...,
        description="Whether an operator must confirm before execution"
    )
    safety_classification: SafetyClassification = Field(
        ...,
        description="Safety severity tag"
    )
    mission_phase_restrictions: List[MissionPhase] = Field(
        default_factory=list,
        description="Mission phases during which this boundary is disabled"
    )
    fallback_action: Optional[str] = Field(
        default=None,
        description="Action to take if this one is overridden"
    )
    last_updated: datetime = Field(
        default_factory=utc_now,
        description="When the boundary was last edited"
    )

    @property
    def key(self) -> tuple:
        """The (subsystem, action) pair this boundary governs."""
        return (self.subsystem.value, self.action)

    def is_restricted_in(self, phase: MissionPhase) -> bool:
        return phase in self.mission_phase_restrictions


class ActionStep(BaseModel):
    """One step of an execution plan."""
    id: str
    description: str
    duration: int = Field(default=0, ge=0, description="Seconds")
    dependencies: List[str] = Field(default_factory=list)
    criticality_level: str = Field(default="low")
    rollback_action: Optional[str] = None


class ActionSequence(BaseModel):
    """Step-by-step execution plan attached to an autonomous action."""
    steps: List[ActionStep] = Field(default_factory=list)
    total_duration: int = Field(default=0, ge=0, description="Seconds")
    rollback_possible: bool = False
    checkpoints: List[str] = Field(default_factory=list)


# ActionSequence, a plain dict, or None; stored as given.
ExecutionPlan = Any


class AutonomousAction(BaseModel):
    """A proposed action awaiting, or having received, a verdict."""
    id: str = Field(
        default_factory=lambda: f"auto_{uuid4().hex[:12]}",
        description="Unique action identifier"
    )
    decision_boundary_id: str = Field(
        ...,
        description="ID of the owning decision boundary"
    )
    action: str
    subsystem: SubsystemType
    confidence: float = Field(
        ...,
        ge=0,
        le=100,
        description="Confidence in the action (percent)"
    )
    reasoning: List[str] = Field(default_factory=list)
    execution_plan: ExecutionPlan = Field(
        default=None,
        description="Opaque execution payload supplied by the caller"
    )
    human_override_deadline: datetime = Field(
        ...,
        description="Creation time plus the boundary's time constraint"
    )
    status: ActionStatus = Field(default=ActionStatus.PENDING)
    correlation_id: str = Field(
        ...,
        description="Correlation ID for post-mission analysis"
    )
    created_at: datetime = Field(default_factory=utc_now)
    executed_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ActionStatus.PENDING

    def seconds_remaining(self, now: datetime) -> float:
        """Seconds until the override deadline (negative once passed)."""
        return (self.human_override_deadline - now).total_seconds()


class HumanOverride(BaseModel):
    """Immutable record of an operator (or system) cancelling a pending action."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: f"ovr_{uuid4().hex[:12]}",
        description="Unique override identifier"
    )
    autonomous_action_id: str = Field(
        ...,
        description="ID of the autonomous action being overridden"
    )
    operator_id: str = Field(
        ...,
        description="Operator (or SYSTEM_EMERGENCY) responsible"
    )
    override_reason: str
    alternative_action: Optional[str] = None
    timestamp: datetime = Field(default_factory=utc_now)
    confirmed_by_second_operator: Optional[bool] = Field(
        default=None,
        description="False when a critical action still needs a second operator"
    )


class SubsystemHealth(BaseModel):
    """Health snapshot for a single subsystem."""
    status: HealthStatus = HealthStatus.NOMINAL
    confidence: float = Field(default=100.0, ge=0, le=100)
    autonomy_available: bool = True
    last_assessment: datetime = Field(default_factory=utc_now)


class SystemHealthSummary(BaseModel):
    """Caller-supplied system health context for an evaluation."""
    overall: HealthStatus = HealthStatus.NOMINAL
    subsystems: Dict[SubsystemType, SubsystemHealth] = Field(default_factory=dict)
    active_alerts: List[str] = Field(default_factory=list)


class AutonomyVerdict(BaseModel):
    """Result of evaluating a proposed autonomous action."""
    can_execute: bool
    autonomy_level: AutonomyLevel
    time_to_execution: int = Field(
        ...,
        ge=0,
        description="Seconds until execution (0 when not executable)"
    )
    requires_confirmation: bool
    reasoning: List[str] = Field(default_factory=list)
    boundary_id: Optional[str] = None
    denial_reason: Optional[DenialReason] = None

    @property
    def is_denied(self) -> bool:
        return not self.can_execute


class AutonomyStatus(BaseModel):
    """Dashboard summary of governor state."""
    emergency_mode: bool
    mission_phase: MissionPhase
    operator_present: bool
    pending_actions_count: int
    urgent_actions_count: int
    recent_overrides_24h: int
    total_boundaries: int
    active_boundaries: int
