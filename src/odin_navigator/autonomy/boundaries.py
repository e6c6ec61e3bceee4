"""Decision boundary tables.

The seed table is the hard-coded configuration the governor starts with.
A YAML table can replace it; it is validated the same way the seed rows are.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

import yaml
from pydantic import ValidationError

from odin_navigator.autonomy.schemas import DecisionBoundary
from odin_navigator.common.exceptions import BoundaryConfigurationError

# (id, subsystem, action, autonomy, threshold, seconds, confirm, safety)
_SEED_ROWS = [
    # Power management
    ("power-load-shed-minor", "power", "shed_non_critical_loads",
     "full", 95, 30, False, "routine"),
    ("power-load-shed-major", "power", "shed_science_instruments",
     "advisory", 90, 60, True, "caution"),
    ("power-emergency-isolation", "power", "isolate_battery_bank",
     "manual", 100, 10, True, "critical"),
    # Thermal management
    ("thermal-radiator-deploy", "thermal", "deploy_emergency_radiators",
     "full", 92, 45, False, "caution"),
    ("thermal-component-shutdown", "thermal", "shutdown_overheating_components",
     "advisory", 88, 30, True, "warning"),
    # Communications
    ("comms-antenna-repoint", "comms", "repoint_high_gain_antenna",
     "full", 93, 60, False, "routine"),
    ("comms-emergency-beacon", "comms", "activate_emergency_beacon",
     "full", 85, 15, False, "critical"),
    # Navigation
    ("nav-trajectory-minor-correction", "navigation", "execute_minor_tcm",
     "advisory", 96, 300, True, "caution"),
    ("nav-collision-avoidance", "navigation", "emergency_collision_avoidance",
     "full", 80, 10, False, "critical"),
    # Propulsion
    ("prop-thruster-isolation", "propulsion", "isolate_faulty_thruster",
     "advisory", 94, 60, True, "warning"),
]


def default_boundaries() -> List[DecisionBoundary]:
    """Build a fresh copy of the seed decision boundary table."""
    return [
        DecisionBoundary(
            id=boundary_id,
            subsystem=subsystem,
            action=action,
            autonomy_level=autonomy,
            confidence_threshold=threshold,
            time_constraint=seconds,
            requires_human_confirmation=confirm,
            safety_classification=safety,
        )
        for (boundary_id, subsystem, action, autonomy,
             threshold, seconds, confirm, safety) in _SEED_ROWS
    ]


def parse_boundaries(
    raw_rows: Iterable[Dict[str, Any]],
    source: str = "<memory>",
) -> List[DecisionBoundary]:
    """Validate raw boundary rows.

    Raises:
        BoundaryConfigurationError: If a row is malformed, or if two rows
            share an id or a (subsystem, action) pair.
    """
    boundaries: List[DecisionBoundary] = []
    seen_ids = set()
    seen_keys = set()

    for index, row in enumerate(raw_rows):
        try:
            boundary = DecisionBoundary.model_validate(row)
        except ValidationError as e:
            raise BoundaryConfigurationError(
                f"Invalid decision boundary at index {index}: {e.error_count()} error(s)",
                source=source,
                details={"index": index, "errors": e.errors(include_url=False)},
            ) from e

        if boundary.id in seen_ids:
            raise BoundaryConfigurationError(
                f"Duplicate decision boundary id '{boundary.id}'",
                source=source,
            )
        if boundary.key in seen_keys:
            raise BoundaryConfigurationError(
                f"Duplicate decision boundary for {boundary.subsystem.value}/{boundary.action}",
                source=source,
            )

        seen_ids.add(boundary.id)
        seen_keys.add(boundary.key)
        boundaries.append(boundary)

    return boundaries


def load_boundaries(path: Union[str, Path]) -> List[DecisionBoundary]:
    """Load a decision boundary table from YAML.

    The file holds a top-level ``boundaries`` list whose rows use the
    DecisionBoundary field names.

    Args:
        path: Path to the YAML table

    Returns:
        List of validated DecisionBoundary rows

    Raises:
        BoundaryConfigurationError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.exists():
        raise BoundaryConfigurationError(
            f"Boundary file not found: {path}", source=str(path)
        )

    try:
        with open(path, "r") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise BoundaryConfigurationError(
            f"Boundary file is not valid YAML: {e}", source=str(path)
        ) from e

    if not isinstance(raw_config, dict) or not isinstance(raw_config.get("boundaries"), list):
        raise BoundaryConfigurationError(
            "Boundary file must contain a top-level 'boundaries' list",
            source=str(path),
        )

    return parse_boundaries(raw_config["boundaries"], source=str(path))
