# src/dcsim_core/analysis/config.py
import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from ..constants import (
    OPEN_PORT_CURRENT_THRESHOLD_AMPS,
    OPEN_PORT_RESISTANCE_SENTINEL_OHMS,
    REGULARIZATION_EPSILON,
    RIDGE_EPSILON,
    THEVENIN_SHORT_RESISTANCE_OHMS,
)

logger = logging.getLogger(__name__)


class ConfigParsingError(ValueError):
    """Custom exception for errors during solver configuration parsing."""
    pass


@dataclass(frozen=True)
class DCSolverConfig:
    """
    Numerical knobs of the DC solve and the Thevenin analysis. The defaults
    reproduce the reference behavior; tests and callers may tighten them.
    """
    regularization_epsilon: float = REGULARIZATION_EPSILON
    scale_aware_regularization: bool = True
    ridge: float = RIDGE_EPSILON
    short_resistance_ohms: float = THEVENIN_SHORT_RESISTANCE_OHMS
    open_port_current_threshold: float = OPEN_PORT_CURRENT_THRESHOLD_AMPS
    open_port_resistance_sentinel: float = OPEN_PORT_RESISTANCE_SENTINEL_OHMS


_FLAG_FIELDS = {"scale_aware_regularization"}


def parse_solver_config(raw_config: Optional[Dict[str, Any]]) -> DCSolverConfig:
    """
    Parses a raw solver configuration mapping into a `DCSolverConfig`.
    Missing keys keep their defaults. Numeric values must be positive and finite.
    """
    if not raw_config:
        return DCSolverConfig()
    if not isinstance(raw_config, dict):
        raise ConfigParsingError(f"Solver configuration must be a mapping, got {type(raw_config).__name__}.")

    known = {f.name for f in fields(DCSolverConfig)}
    unknown = sorted(set(raw_config) - known)
    if unknown:
        raise ConfigParsingError(f"Unknown solver configuration key(s): {', '.join(unknown)}.")

    values: Dict[str, Any] = {}
    try:
        for key, raw_value in raw_config.items():
            if key in _FLAG_FIELDS:
                if not isinstance(raw_value, bool):
                    raise ValueError(f"'{key}' must be a boolean, got {raw_value!r}.")
                values[key] = raw_value
                continue
            if isinstance(raw_value, bool):
                raise ValueError(f"'{key}' must be a number, got {raw_value!r}.")
            value = float(raw_value)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"'{key}' must be a positive finite number, got {raw_value!r}.")
            values[key] = value
    except (TypeError, ValueError) as e:
        raise ConfigParsingError(f"Failed to parse solver configuration: {e}") from e

    config = DCSolverConfig(**values)
    logger.debug(f"Parsed solver configuration: {config}")
    return config
