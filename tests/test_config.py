# tests/test_config.py
import pytest

from dcsim_core.analysis import ConfigParsingError, DCSolverConfig, parse_solver_config
from dcsim_core.constants import (
    OPEN_PORT_RESISTANCE_SENTINEL_OHMS, REGULARIZATION_EPSILON, THEVENIN_SHORT_RESISTANCE_OHMS,
)


class TestSolverConfig:

    def test_defaults(self):
        config = DCSolverConfig()
        assert config.regularization_epsilon == REGULARIZATION_EPSILON
        assert config.scale_aware_regularization is True
        assert config.short_resistance_ohms == THEVENIN_SHORT_RESISTANCE_OHMS
        assert config.open_port_resistance_sentinel == OPEN_PORT_RESISTANCE_SENTINEL_OHMS

    @pytest.mark.parametrize("raw", [None, {}])
    def test_empty_config_gives_defaults(self, raw):
        assert parse_solver_config(raw) == DCSolverConfig()

    def test_overrides(self):
        config = parse_solver_config({"ridge": "1e-9", "scale_aware_regularization": False})
        assert config.ridge == 1e-9
        assert config.scale_aware_regularization is False
        assert config.regularization_epsilon == REGULARIZATION_EPSILON

    @pytest.mark.parametrize("raw, fragment", [
        (["ridge"], "must be a mapping"),
        ({"tolerance": 1e-3}, "Unknown solver configuration key(s): tolerance"),
        ({"ridge": 0.0}, "positive finite"),
        ({"ridge": float("inf")}, "positive finite"),
        ({"ridge": "tiny"}, "Failed to parse"),
        ({"ridge": True}, "must be a number"),
        ({"scale_aware_regularization": 1}, "must be a boolean"),
    ])
    def test_invalid_values(self, raw, fragment):
        with pytest.raises(ConfigParsingError) as excinfo:
            parse_solver_config(raw)
        assert fragment in str(excinfo.value)

    def test_config_is_immutable(self):
        config = DCSolverConfig()
        with pytest.raises(AttributeError):
            config.ridge = 1.0
