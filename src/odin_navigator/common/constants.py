"""Centralized constants for the ODIN autonomy governor."""


# ===== CONFIDENCE TIERS =====
class AutonomyConstants:
    CONFIDENCE_MIN = 0
    CONFIDENCE_MAX = 100

    # Tier boundaries (percent)
    FULL_AUTONOMY_CONFIDENCE = 95
    ADVISORY_CONFIDENCE = 80

    # Safety buffer before a fully autonomous action runs
    FULL_AUTONOMY_EXECUTION_DELAY_SECONDS = 5


# ===== MISSION PHASES =====
class PhaseConstants:
    CRITICAL_PHASE_THRESHOLD_INCREASE = 5
    DEFAULT_MISSION_PHASE = "transit"


# ===== OVERRIDES & STATUS =====
class OverrideConstants:
    EMERGENCY_OPERATOR_ID = "SYSTEM_EMERGENCY"
    EMERGENCY_REASON_PREFIX = "Emergency mode activated"
    URGENT_WINDOW_SECONDS = 60
    RECENT_OVERRIDE_LOOKBACK_HOURS = 24


# ===== MONITORING =====
class MonitoringConstants:
    DEFAULT_BATCH_SIZE = 20
    # Points kept while the publisher is failing; oldest dropped first
    MAX_BUFFERED_METRICS = 1000

    # CloudWatch put_metric_data limit
    CLOUDWATCH_MAX_BATCH = 20
    DEFAULT_CLOUDWATCH_NAMESPACE = "ODINNavigator"
