"""ODIN Navigator - autonomy governor for the mission-control simulation."""

__version__ = "0.1.0"
__author__ = "ODIN Navigator Team"

# Core exports
from odin_navigator.autonomy.governor import AutonomyGovernor
from odin_navigator.autonomy.schemas import AutonomyLevel, AutonomyVerdict, MissionPhase

__all__ = [
    "AutonomyGovernor",
    "AutonomyLevel",
    "AutonomyVerdict",
    "MissionPhase",
]
