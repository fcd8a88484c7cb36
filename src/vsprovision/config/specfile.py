"""Machine spec files."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from ..api.exceptions import ConfigError
from ..models.machine import MachineSpec


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "spec"
        lines.append(f"{location}: {item['msg']}")
    return "; ".join(lines)


def load_machine_spec(path: Path) -> MachineSpec:
    """Load a machine spec from a YAML file.

    Args:
        path: YAML file with the machine spec mapping

    Returns:
        Validated machine spec

    Raises:
        ConfigError: If the file is missing, not valid YAML or not a valid spec
    """
    if not path.exists():
        raise ConfigError(f"Machine spec not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Machine spec {path} must be a mapping")

    try:
        return MachineSpec.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid machine spec {path}: {_format_validation_error(e)}")
