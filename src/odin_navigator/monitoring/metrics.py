"""Monitoring - track autonomy verdicts, overrides, emergency activations, expirations."""

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from odin_navigator.common.constants import MonitoringConstants

logger = logging.getLogger(__name__)


class MetricType(str, Enum):
    EVALUATION = "autonomy_evaluation"
    AUTONOMOUS_APPROVAL = "autonomous_approval"
    DENIAL = "autonomy_denial"
    ACTION_CREATED = "autonomous_action_created"
    OVERRIDE = "human_override"
    EMERGENCY_ACTIVATION = "emergency_activation"
    ACTION_EXECUTED = "autonomous_action_executed"
    ACTION_EXPIRED = "autonomous_action_expired"
    CONFIDENCE = "confidence_score"


@dataclass
class MetricPoint:
    metric_name: str
    value: float
    unit: str = "None"
    timestamp: Optional[datetime] = None
    dimensions: Optional[Dict[str, str]] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


Publisher = Callable[[List[MetricPoint]], None]


class MetricsCollector:
    """Collects governor metrics in memory and hands batches to a publisher.

    Without a publisher, flushed batches are only logged at DEBUG. Running
    counters survive flushes so the dashboard can read totals at any time.
    """

    def __init__(
        self,
        publisher: Optional[Publisher] = None,
        batch_size: int = MonitoringConstants.DEFAULT_BATCH_SIZE,
        max_buffered: int = MonitoringConstants.MAX_BUFFERED_METRICS,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if max_buffered < batch_size:
            raise ValueError("max_buffered must be at least batch_size")
        self.publisher = publisher
        self.batch_size = batch_size
        self.max_buffered = max_buffered
        self.metric_buffer: List[MetricPoint] = []
        self._counters: Counter = Counter()
        self._dropped = 0
        self._lock = threading.Lock()

    def record_metric(self, metric: MetricPoint) -> None:
        """Record a metric point.

        Buffers metrics for batch publishing.
        """
        with self._lock:
            self.metric_buffer.append(metric)
            self._counters[metric.metric_name] += 1
            full = len(self.metric_buffer) >= self.batch_size

        # Auto-flush if buffer full
        if full:
            self.flush()

    def record_evaluation(
        self,
        subsystem: str,
        action: str,
        confidence: float,
        can_execute: bool,
        autonomy_level: str,
        denial_reason: Optional[str] = None,
    ) -> None:
        """Record metrics for an evaluation verdict.

        Args:
            subsystem: Subsystem of the proposed action
            action: Proposed action
            confidence: Confidence score (0-100)
            can_execute: Whether autonomous execution was allowed
            autonomy_level: Granted autonomy level
            denial_reason: DenialReason value when not executable
        """
        dimensions = {"subsystem": subsystem, "action": action}

        self.record_metric(MetricPoint(
            metric_name=MetricType.EVALUATION.value,
            value=1.0,
            unit="Count",
            dimensions={**dimensions, "autonomy_level": autonomy_level},
        ))

        if can_execute:
            self.record_metric(MetricPoint(
                metric_name=MetricType.AUTONOMOUS_APPROVAL.value,
                value=1.0,
                unit="Count",
                dimensions=dimensions,
            ))
        else:
            self.record_metric(MetricPoint(
                metric_name=MetricType.DENIAL.value,
                value=1.0,
                unit="Count",
                dimensions={**dimensions, "reason": denial_reason or "unknown"},
            ))
            with self._lock:
                self._counters[f"{MetricType.DENIAL.value}:{denial_reason or 'unknown'}"] += 1

        self.record_metric(MetricPoint(
            metric_name=MetricType.CONFIDENCE.value,
            value=confidence,
            unit="Percent",
            dimensions=dimensions,
        ))

    def record_action_created(self, subsystem: str, action: str) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.ACTION_CREATED.value,
            value=1.0,
            unit="Count",
            dimensions={"subsystem": subsystem, "action": action},
        ))

    def record_override(
        self,
        subsystem: str,
        action: str,
        operator_id: str,
        needs_second_operator: bool = False,
    ) -> None:
        """Record a human (or system) override.

        Args:
            subsystem: Subsystem of the overridden action
            action: Overridden action
            operator_id: Operator responsible
            needs_second_operator: Whether dual confirmation is outstanding
        """
        self.record_metric(MetricPoint(
            metric_name=MetricType.OVERRIDE.value,
            value=1.0,
            unit="Count",
            dimensions={
                "subsystem": subsystem,
                "action": action,
                "operator_id": operator_id,
                "needs_second_operator": str(needs_second_operator).lower(),
            },
        ))

    def record_emergency_activation(self, overridden_count: int) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.EMERGENCY_ACTIVATION.value,
            value=float(overridden_count),
            unit="Count",
        ))

    def record_execution(self, subsystem: str, action: str) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.ACTION_EXECUTED.value,
            value=1.0,
            unit="Count",
            dimensions={"subsystem": subsystem, "action": action},
        ))

    def record_expiration(self, subsystem: str, action: str) -> None:
        self.record_metric(MetricPoint(
            metric_name=MetricType.ACTION_EXPIRED.value,
            value=1.0,
            unit="Count",
            dimensions={"subsystem": subsystem, "action": action},
        ))

    def get_count(self, metric_name: str) -> int:
        """Total number of points recorded under a metric name."""
        with self._lock:
            return self._counters[metric_name]

    def get_denial_count(self, reason: str) -> int:
        with self._lock:
            return self._counters[f"{MetricType.DENIAL.value}:{reason}"]

    def get_summary(self) -> Dict[str, int]:
        """Snapshot of every running counter."""
        with self._lock:
            return dict(self._counters)

    def flush(self) -> bool:
        """Hand buffered metrics to the publisher.

        Publish errors are logged, never raised: governor operations record
        metrics mid-transition and must not fail because of the sink. A
        failed batch stays buffered for the next flush, up to
        max_buffered points.

        Returns:
            False if the publisher failed
        """
        with self._lock:
            if not self.metric_buffer:
                return True
            batch = list(self.metric_buffer)

        if self.publisher is not None:
            try:
                self.publisher(batch)
            except Exception as e:
                logger.error(f"Failed to publish metrics: {e}")
                self._drop_overflow()
                return False
        logger.debug(f"Flushed {len(batch)} autonomy metrics")

        with self._lock:
            del self.metric_buffer[:len(batch)]
        return True

    def _drop_overflow(self) -> None:
        with self._lock:
            overflow = len(self.metric_buffer) - self.max_buffered
            if overflow <= 0:
                return
            del self.metric_buffer[:overflow]
            self._dropped += overflow
        logger.warning(
            f"Metric buffer full; dropped {overflow} oldest point(s) "
            f"({self._dropped} total)"
        )

    @property
    def dropped_count(self) -> int:
        """Points discarded because the publisher kept failing."""
        with self._lock:
            return self._dropped

    def shutdown(self) -> None:
        """Flush remaining metrics on shutdown."""
        self.flush()
