"""Autonomy Governor - decides whether a spacecraft action may run without a human.

Maps a proposed (subsystem, action) plus confidence onto a decision boundary
and produces a full / advisory / manual verdict. Tracks pending autonomous
actions, the override history, mission phase and emergency mode.

Policy outcomes (no boundary, denial, stale override) are return values.
Nothing here raises on a missing action or boundary.
"""

import math
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union
from uuid import uuid4

from odin_navigator.autonomy.boundaries import default_boundaries, load_boundaries
from odin_navigator.autonomy.schemas import (
    ActionStatus,
    AutonomousAction,
    AutonomyLevel,
    AutonomyStatus,
    AutonomyVerdict,
    DecisionBoundary,
    DenialReason,
    ExecutionPlan,
    HumanOverride,
    MissionPhase,
    SafetyClassification,
    SubsystemType,
    SystemHealthSummary,
    utc_now,
)
from odin_navigator.common.config import Config, get_config
from odin_navigator.common.constants import (
    AutonomyConstants,
    OverrideConstants,
    PhaseConstants,
)
from odin_navigator.common.logging import get_logger
from odin_navigator.monitoring.metrics import MetricsCollector

logger = get_logger(__name__)

Clock = Callable[[], datetime]
Subsystem = Union[SubsystemType, str]

NO_BOUNDARY_REASON = "No decision boundary defined for this action"
PHASE_RESTRICTED_REASON = "Action restricted in current mission phase"
EMERGENCY_MODE_REASON = "Emergency mode active - manual control required"
HIGH_CONFIDENCE_REASON = "High confidence (>=95%) - autonomous execution authorized"
MEDIUM_CONFIDENCE_REASON = "Medium confidence (80-95%) - human review recommended"
LOW_CONFIDENCE_REASON = "Low confidence (<80%) - manual confirmation required"


class AutonomyGovernor:
    """Central policy oracle for autonomous spacecraft actions.

    One instance per process. Every public method takes the same re-entrant
    lock, so the override deadline check and the status transition happen
    atomically even with concurrent callers.
    """

    def __init__(
        self,
        boundaries: Optional[Iterable[DecisionBoundary]] = None,
        config: Optional[Config] = None,
        metrics: Optional[MetricsCollector] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize the governor.

        Args:
            boundaries: Boundary table. Defaults to the YAML table named by
                config.boundary_file, or the seed table when unset.
            config: Configuration. Uses the global config if not provided.
            metrics: Optional collector for verdict and override metrics
            clock: Returns the current timezone-aware time. Injected by tests.
        """
        self.config = config or get_config()
        self.metrics = metrics
        self._clock: Clock = clock or utc_now
        self._lock = threading.RLock()

        self._decision_boundaries: Dict[str, DecisionBoundary] = {}
        self._active_actions: Dict[str, AutonomousAction] = {}
        self._override_history: List[HumanOverride] = []
        self._mission_phase = MissionPhase(self.config.initial_mission_phase)
        self._emergency_mode = False
        self._operator_present = True

        # boundary id -> (threshold, requires confirmation) before tightening
        self._phase_baseline: Dict[str, Tuple[int, bool]] = {}

        if boundaries is None:
            if self.config.boundary_file is not None:
                boundaries = load_boundaries(self.config.boundary_file)
            else:
                boundaries = default_boundaries()

        for boundary in boundaries:
            self._install_boundary(boundary.model_copy(deep=True))

        if self._mission_phase.is_critical:
            self._tighten_for_critical_phase()

        logger.info(
            f"Autonomy governor initialized with {len(self._decision_boundaries)} "
            f"decision boundaries (phase={self._mission_phase.value})"
        )

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def emergency_mode(self) -> bool:
        return self._emergency_mode

    @property
    def mission_phase(self) -> MissionPhase:
        return self._mission_phase

    @property
    def operator_present(self) -> bool:
        return self._operator_present

    def set_operator_presence(self, present: bool) -> None:
        with self._lock:
            self._operator_present = bool(present)
        logger.info(f"Operator presence set to {bool(present)}")

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_autonomous_action(
        self,
        action: str,
        subsystem: Subsystem,
        confidence: float,
        reasoning: Optional[List[str]] = None,
        system_health: Optional[SystemHealthSummary] = None,
    ) -> AutonomyVerdict:
        """Decide whether an action may execute autonomously.

        Checks, in order: boundary exists, mission phase restriction,
        emergency mode, then the confidence tier. Does not mutate governor
        state.

        Args:
            action: Proposed action name
            subsystem: Owning subsystem
            confidence: Confidence in the action (0-100, clamped)
            reasoning: Caller reasoning, kept at the front of the verdict's
                reasoning list
            system_health: Caller health context, surfaced in reasoning only

        Returns:
            AutonomyVerdict
        """
        caller_reasoning = list(reasoning or [])
        confidence = self._clamp_confidence(confidence)

        with self._lock:
            boundary = self._find_applicable_boundary(action, subsystem)

            if boundary is None:
                verdict = self._deny(caller_reasoning, NO_BOUNDARY_REASON,
                                     DenialReason.NO_BOUNDARY)
            elif boundary.is_restricted_in(self._mission_phase):
                verdict = self._deny(caller_reasoning, PHASE_RESTRICTED_REASON,
                                     DenialReason.PHASE_RESTRICTED, boundary)
            elif (self._emergency_mode
                  and boundary.safety_classification != SafetyClassification.CRITICAL):
                verdict = self._deny(caller_reasoning, EMERGENCY_MODE_REASON,
                                     DenialReason.EMERGENCY_MODE, boundary)
            else:
                verdict = self._evaluate_confidence_level(
                    confidence, boundary, caller_reasoning
                )
                verdict.reasoning.extend(
                    self._health_notes(boundary.subsystem, system_health)
                )

        if verdict.is_denied:
            logger.info(
                f"Autonomous execution denied for {self._subsystem_name(subsystem)}/{action}: "
                f"{verdict.denial_reason.value if verdict.denial_reason else 'unknown'}"
            )

        if self.metrics is not None:
            self.metrics.record_evaluation(
                subsystem=self._subsystem_name(subsystem),
                action=action,
                confidence=confidence,
                can_execute=verdict.can_execute,
                autonomy_level=verdict.autonomy_level.value,
                denial_reason=verdict.denial_reason.value if verdict.denial_reason else None,
            )

        return verdict

    def _evaluate_confidence_level(
        self,
        confidence: float,
        boundary: DecisionBoundary,
        caller_reasoning: List[str],
    ) -> AutonomyVerdict:
        """Map confidence onto the full / advisory / manual tiers."""
        if confidence >= AutonomyConstants.FULL_AUTONOMY_CONFIDENCE:
            can_execute = boundary.autonomy_level == AutonomyLevel.FULL
            rationale = [HIGH_CONFIDENCE_REASON]
            if not can_execute:
                rationale.append(
                    f"Boundary autonomy level '{boundary.autonomy_level.value}' "
                    f"does not permit full autonomous execution"
                )
            verdict = AutonomyVerdict(
                can_execute=can_execute,
                autonomy_level=AutonomyLevel.FULL,
                time_to_execution=AutonomyConstants.FULL_AUTONOMY_EXECUTION_DELAY_SECONDS,
                requires_confirmation=False,
                reasoning=caller_reasoning + rationale,
                boundary_id=boundary.id,
                denial_reason=None if can_execute else DenialReason.AUTONOMY_LEVEL_INSUFFICIENT,
            )
        elif confidence >= AutonomyConstants.ADVISORY_CONFIDENCE:
            can_execute = boundary.autonomy_level != AutonomyLevel.MANUAL
            rationale = [MEDIUM_CONFIDENCE_REASON]
            if not can_execute:
                rationale.append("Boundary requires manual control")
            verdict = AutonomyVerdict(
                can_execute=can_execute,
                autonomy_level=AutonomyLevel.ADVISORY,
                time_to_execution=boundary.time_constraint,
                requires_confirmation=True,
                reasoning=caller_reasoning + rationale,
                boundary_id=boundary.id,
                denial_reason=None if can_execute else DenialReason.AUTONOMY_LEVEL_INSUFFICIENT,
            )
        else:
            verdict = AutonomyVerdict(
                can_execute=False,
                autonomy_level=AutonomyLevel.MANUAL,
                time_to_execution=0,
                requires_confirmation=True,
                reasoning=caller_reasoning + [LOW_CONFIDENCE_REASON],
                boundary_id=boundary.id,
                denial_reason=DenialReason.LOW_CONFIDENCE,
            )

        # Informational only: the tiers above decide the verdict.
        if confidence < boundary.confidence_threshold:
            verdict.reasoning.append(
                f"Confidence {confidence:g}% is below the boundary's "
                f"{boundary.confidence_threshold}% threshold - operator review advised"
            )
        return verdict

    def _deny(
        self,
        caller_reasoning: List[str],
        reason: str,
        denial_reason: DenialReason,
        boundary: Optional[DecisionBoundary] = None,
    ) -> AutonomyVerdict:
        return AutonomyVerdict(
            can_execute=False,
            autonomy_level=AutonomyLevel.MANUAL,
            time_to_execution=0,
            requires_confirmation=True,
            reasoning=caller_reasoning + [reason],
            boundary_id=boundary.id if boundary else None,
            denial_reason=denial_reason,
        )

    @staticmethod
    def _health_notes(
        subsystem: SubsystemType,
        system_health: Optional[SystemHealthSummary],
    ) -> List[str]:
        if system_health is None:
            return []
        notes = []
        subsystem_health = system_health.subsystems.get(subsystem)
        if subsystem_health is not None and not subsystem_health.autonomy_available:
            notes.append(
                f"Subsystem health reports autonomy unavailable for {subsystem.value}"
            )
        return notes

    # ------------------------------------------------------------------
    # Action lifecycle
    # ------------------------------------------------------------------

    def create_autonomous_action(
        self,
        action: str,
        subsystem: Subsystem,
        confidence: float,
        reasoning: Optional[List[str]] = None,
        execution_plan: ExecutionPlan = None,
        correlation_id: Optional[str] = None,
    ) -> Optional[AutonomousAction]:
        """Queue an autonomous action awaiting possible human override.

        Does not re-run evaluation; callers check eligibility first.

        Returns:
            The pending AutonomousAction, or None if no boundary matches
        """
        with self._lock:
            boundary = self._find_applicable_boundary(action, subsystem)
            if boundary is None:
                return None

            now = self._clock()
            autonomous_action = AutonomousAction(
                decision_boundary_id=boundary.id,
                action=action,
                subsystem=boundary.subsystem,
                confidence=self._clamp_confidence(confidence),
                reasoning=list(reasoning or []),
                execution_plan=execution_plan,
                human_override_deadline=now + timedelta(seconds=boundary.time_constraint),
                status=ActionStatus.PENDING,
                correlation_id=correlation_id or f"corr_{uuid4().hex[:12]}",
                created_at=now,
            )
            self._active_actions[autonomous_action.id] = autonomous_action
            snapshot = autonomous_action.model_copy(deep=True)

        logger.info(
            f"Queued autonomous action {autonomous_action.id} "
            f"({boundary.subsystem.value}/{action}), override deadline "
            f"{autonomous_action.human_override_deadline.isoformat()}"
        )
        if self.metrics is not None:
            self.metrics.record_action_created(boundary.subsystem.value, action)
        return snapshot

    def process_human_override(
        self,
        action_id: str,
        operator_id: str,
        override_reason: str,
        alternative_action: Optional[str] = None,
    ) -> bool:
        """Cancel a pending action before its override deadline.

        Returns:
            False if the action is unknown, not pending, or past its
            deadline (nothing is changed). True once overridden.
        """
        with self._lock:
            action = self._active_actions.get(action_id)
            if action is None or action.status != ActionStatus.PENDING:
                return False

            now = self._clock()
            if now > action.human_override_deadline:
                return False

            boundary = self._decision_boundaries.get(action.decision_boundary_id)
            needs_second_operator = (
                boundary is not None
                and boundary.safety_classification == SafetyClassification.CRITICAL
                and not self._emergency_mode
            )

            override = HumanOverride(
                autonomous_action_id=action_id,
                operator_id=operator_id,
                override_reason=override_reason,
                alternative_action=alternative_action,
                timestamp=now,
                # Recorded only; collecting the second confirmation is the caller's job.
                confirmed_by_second_operator=False if needs_second_operator else None,
            )

            self._override_history.append(override)
            action.status = ActionStatus.OVERRIDDEN

        logger.info(
            f"Action {action_id} overridden by {operator_id}: {override_reason}"
            + (" (second operator confirmation required)" if needs_second_operator else "")
        )
        if self.metrics is not None:
            self.metrics.record_override(
                subsystem=action.subsystem.value,
                action=action.action,
                operator_id=operator_id,
                needs_second_operator=needs_second_operator,
            )
        return True

    def mark_action_executed(self, action_id: str) -> bool:
        """Record that a pending action has been carried out."""
        with self._lock:
            action = self._active_actions.get(action_id)
            if action is None or action.status != ActionStatus.PENDING:
                return False
            action.status = ActionStatus.EXECUTED
            action.executed_at = self._clock()

        logger.info(f"Autonomous action {action_id} executed")
        if self.metrics is not None:
            self.metrics.record_execution(action.subsystem.value, action.action)
        return True

    def expire_stale_actions(self) -> List[AutonomousAction]:
        """Move pending actions whose override deadline has passed to expired.

        Caller-driven; nothing runs this on a timer.

        Returns:
            The newly expired actions, soonest deadline first
        """
        with self._lock:
            now = self._clock()
            expired = [
                action for action in self._sorted_pending()
                if now > action.human_override_deadline
            ]
            for action in expired:
                action.status = ActionStatus.EXPIRED
                action.expired_at = now
            expired = [action.model_copy(deep=True) for action in expired]

        if expired:
            logger.warning(
                f"Expired {len(expired)} stale autonomous action(s): "
                f"{', '.join(action.id for action in expired)}"
            )
            if self.metrics is not None:
                for action in expired:
                    self.metrics.record_expiration(action.subsystem.value, action.action)
        return expired

    def get_pending_actions(self) -> List[AutonomousAction]:
        """Copies of the pending actions, soonest override deadline first."""
        with self._lock:
            return [action.model_copy(deep=True) for action in self._sorted_pending()]

    def get_action(self, action_id: str) -> Optional[AutonomousAction]:
        """Copy of one action, whatever its status."""
        with self._lock:
            action = self._active_actions.get(action_id)
            return action.model_copy(deep=True) if action is not None else None

    def get_override_history(self, action_id: Optional[str] = None) -> List[HumanOverride]:
        """Override records in the order they were made.

        Args:
            action_id: If provided, only overrides of this action
        """
        with self._lock:
            if action_id is None:
                return list(self._override_history)
            return [
                override for override in self._override_history
                if override.autonomous_action_id == action_id
            ]

    def _sorted_pending(self) -> List[AutonomousAction]:
        # sorted() is stable, so equal deadlines keep insertion order
        return sorted(
            (action for action in self._active_actions.values()
             if action.status == ActionStatus.PENDING),
            key=lambda action: action.human_override_deadline,
        )

    # ------------------------------------------------------------------
    # Emergency mode
    # ------------------------------------------------------------------

    def activate_emergency_mode(self, reason: str) -> List[str]:
        """Force manual control for everything except critical actions.

        Every pending action whose boundary is not critical is overridden
        by SYSTEM_EMERGENCY.

        Returns:
            IDs of the actions that were overridden
        """
        with self._lock:
            self._emergency_mode = True
            logger.warning(f"Emergency mode activated: {reason}")

            overridden = []
            for action_id, action in list(self._active_actions.items()):
                if action.status != ActionStatus.PENDING:
                    continue
                boundary = self._decision_boundaries.get(action.decision_boundary_id)
                if boundary is not None and boundary.safety_classification == SafetyClassification.CRITICAL:
                    continue
                if self.process_human_override(
                    action_id,
                    OverrideConstants.EMERGENCY_OPERATOR_ID,
                    f"{OverrideConstants.EMERGENCY_REASON_PREFIX}: {reason}",
                ):
                    overridden.append(action_id)
                else:
                    logger.warning(
                        f"Emergency override of {action_id} failed; deadline already passed"
                    )

        if self.metrics is not None:
            self.metrics.record_emergency_activation(len(overridden))
        return overridden

    def deactivate_emergency_mode(self) -> None:
        """Restore normal autonomy. Overridden actions are not replayed."""
        with self._lock:
            self._emergency_mode = False
        logger.warning("Emergency mode deactivated")

    # ------------------------------------------------------------------
    # Mission phase
    # ------------------------------------------------------------------

    def update_mission_phase(self, phase: Union[MissionPhase, str]) -> None:
        """Set the mission phase and adjust boundaries for it.

        Entering launch, landing or emergency raises the confidence
        threshold of every non-routine boundary by 5 (max 100) and forces
        human confirmation on them. With config.restore_phase_thresholds the
        tightening is applied once against the pre-phase values and undone
        on leaving the critical phases; otherwise each critical update
        tightens again and nothing is restored.
        """
        phase = MissionPhase(phase)
        with self._lock:
            previous = self._mission_phase
            self._mission_phase = phase

            if phase.is_critical:
                self._tighten_for_critical_phase()
            elif self._phase_baseline:
                self._restore_phase_baseline()

        logger.info(f"Mission phase changed: {previous.value} -> {phase.value}")

    def _tighten_for_critical_phase(self) -> None:
        increase = PhaseConstants.CRITICAL_PHASE_THRESHOLD_INCREASE
        tightened = 0
        for boundary in self._decision_boundaries.values():
            if boundary.safety_classification == SafetyClassification.ROUTINE:
                continue
            if self.config.restore_phase_thresholds:
                base_threshold, _ = self._phase_baseline.setdefault(
                    boundary.id,
                    (boundary.confidence_threshold, boundary.requires_human_confirmation),
                )
            else:
                base_threshold = boundary.confidence_threshold
            boundary.confidence_threshold = min(
                AutonomyConstants.CONFIDENCE_MAX, base_threshold + increase
            )
            boundary.requires_human_confirmation = True
            tightened += 1
        logger.info(
            f"Tightened {tightened} non-routine boundaries for critical phase "
            f"{self._mission_phase.value}"
        )

    def _restore_phase_baseline(self) -> None:
        for boundary_id, (threshold, requires_confirmation) in self._phase_baseline.items():
            boundary = self._decision_boundaries.get(boundary_id)
            if boundary is None:
                continue
            boundary.confidence_threshold = threshold
            boundary.requires_human_confirmation = requires_confirmation
        logger.info(f"Restored {len(self._phase_baseline)} boundaries after critical phase")
        self._phase_baseline.clear()

    # ------------------------------------------------------------------
    # Decision boundaries
    # ------------------------------------------------------------------

    def update_decision_boundary(self, boundary: DecisionBoundary) -> DecisionBoundary:
        """Add or replace a decision boundary.

        The stored copy is stamped with the current time. Any other boundary
        for the same (subsystem, action) pair is dropped. During a critical
        phase the supplied values become the restore point and the phase
        tightening is applied on top.

        Returns:
            A copy of the stored boundary
        """
        with self._lock:
            stored = boundary.model_copy(update={"last_updated": self._clock()}, deep=True)
            self._install_boundary(stored)
            self._phase_baseline.pop(stored.id, None)

            if (self._mission_phase.is_critical
                    and stored.safety_classification != SafetyClassification.ROUTINE):
                if self.config.restore_phase_thresholds:
                    self._phase_baseline[stored.id] = (
                        stored.confidence_threshold,
                        stored.requires_human_confirmation,
                    )
                stored.confidence_threshold = min(
                    AutonomyConstants.CONFIDENCE_MAX,
                    stored.confidence_threshold + PhaseConstants.CRITICAL_PHASE_THRESHOLD_INCREASE,
                )
                stored.requires_human_confirmation = True
            snapshot = stored.model_copy(deep=True)

        logger.info(f"Decision boundary {stored.id} updated")
        return snapshot

    def get_decision_boundary(self, boundary_id: str) -> Optional[DecisionBoundary]:
        """Copy of one boundary. Edits go through update_decision_boundary."""
        with self._lock:
            boundary = self._decision_boundaries.get(boundary_id)
            return boundary.model_copy(deep=True) if boundary is not None else None

    def get_subsystem_boundaries(self, subsystem: Subsystem) -> List[DecisionBoundary]:
        with self._lock:
            return [
                boundary.model_copy(deep=True)
                for boundary in self._decision_boundaries.values()
                if boundary.subsystem == subsystem
            ]

    def get_decision_boundaries(self) -> List[DecisionBoundary]:
        with self._lock:
            return [boundary.model_copy(deep=True) for boundary in self._decision_boundaries.values()]

    def _install_boundary(self, boundary: DecisionBoundary) -> None:
        """Store a boundary, replacing any other row for the same pair."""
        for existing_id, existing in list(self._decision_boundaries.items()):
            if existing_id != boundary.id and existing.key == boundary.key:
                del self._decision_boundaries[existing_id]
                self._phase_baseline.pop(existing_id, None)
                logger.info(
                    f"Decision boundary {existing_id} replaced by {boundary.id} "
                    f"for {boundary.subsystem.value}/{boundary.action}"
                )
        self._decision_boundaries[boundary.id] = boundary

    def _find_applicable_boundary(
        self, action: str, subsystem: Subsystem
    ) -> Optional[DecisionBoundary]:
        for boundary in self._decision_boundaries.values():
            if boundary.subsystem == subsystem and boundary.action == action:
                return boundary
        return None

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_autonomy_status(self) -> AutonomyStatus:
        """Summary counts for the autonomy dashboard."""
        with self._lock:
            now = self._clock()
            pending = self._sorted_pending()
            urgent_window = self.config.urgent_window_seconds
            lookback_start = now - timedelta(hours=self.config.override_lookback_hours)

            return AutonomyStatus(
                emergency_mode=self._emergency_mode,
                mission_phase=self._mission_phase,
                operator_present=self._operator_present,
                pending_actions_count=len(pending),
                urgent_actions_count=sum(
                    1 for action in pending
                    if action.seconds_remaining(now) < urgent_window
                ),
                recent_overrides_24h=sum(
                    1 for override in self._override_history
                    if override.timestamp > lookback_start
                ),
                total_boundaries=len(self._decision_boundaries),
                active_boundaries=sum(
                    1 for boundary in self._decision_boundaries.values()
                    if not boundary.is_restricted_in(self._mission_phase)
                ),
            )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _clamp_confidence(confidence: float) -> float:
        confidence = float(confidence)
        # NaN and infinities fall to the manual tier
        if not math.isfinite(confidence):
            return float(AutonomyConstants.CONFIDENCE_MIN)
        return max(
            float(AutonomyConstants.CONFIDENCE_MIN),
            min(float(AutonomyConstants.CONFIDENCE_MAX), confidence),
        )

    @staticmethod
    def _subsystem_name(subsystem: Subsystem) -> str:
        return subsystem.value if isinstance(subsystem, SubsystemType) else str(subsystem)
