# src/dcsim_core/analysis/results.py
"""
Defines the formal, type-safe data contracts for the results of the DC and
Thevenin analyses.

Results are frozen dataclasses: once created (and possibly cached) they cannot
be modified by downstream code. `to_dict()` renders the plain mapping shape
handed back to callers over the wire.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from ..validation import ValidationIssue

if TYPE_CHECKING:
    from .mna import MnaSystem


class SolveMethod(Enum):
    """Stage of the solver fallback chain that produced a solution."""
    DIRECT = "direct"
    RIDGE = "ridge"
    PSEUDO_INVERSE = "pseudo_inverse"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class DCSolution:
    """
    The result of one DC operating-point solve.

    Attributes:
        node_voltages: Net name -> voltage in volts. Always contains the ground
                       net and the literal ground alias at 0.0.
        branch_currents: Component id -> current in amperes, positive when it
                         enters the component's first terminal. Sensing
                         branches never appear here.
        control_currents: CCVS/CCCS id -> reference current it senses.
        probe_voltages: Voltage-probe id -> voltage of the probed net.
        solve_method: Fallback stage that produced the solution.
        issues: Non-fatal warnings and informational issues of the solve.
        system: The assembled MNA system, kept for matrix display.
    """
    node_voltages: Dict[str, float]
    branch_currents: Dict[str, float]
    control_currents: Dict[str, float] = field(default_factory=dict)
    probe_voltages: Dict[str, float] = field(default_factory=dict)
    solve_method: SolveMethod = SolveMethod.DIRECT
    issues: Tuple[ValidationIssue, ...] = ()
    system: Optional["MnaSystem"] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_voltages": dict(self.node_voltages),
            "branch_currents": dict(self.branch_currents),
        }


@dataclass(frozen=True)
class TheveninResult:
    """Equivalent of a one-port: open-circuit voltage `vth` in series with `rth`."""
    vth: float
    rth: float
    positive: str
    negative: str
    isc: float
    port_open: bool = False
    issues: Tuple[ValidationIssue, ...] = ()

    @property
    def norton_current(self) -> float:
        """Short-circuit current of the Norton equivalent, `vth / rth`."""
        return self.vth / self.rth

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vth": self.vth,
            "rth": self.rth,
            "port": {"positive": self.positive, "negative": self.negative},
        }
