# src/dcsim_core/analysis/extraction.py
import logging
from typing import Dict, Optional, Sequence

from ..components.base_enums import ComponentKind
from ..components.elements import (
    Cccs, Ccvs, CurrentProbe, CurrentSource, Marker, Resistor, Vccs, Vcvs, VoltageSource,
)
from ..constants import GROUND_NET_NAME
from ..errors import FrameworkLogicError
from ..validation import ValidationIssue
from .mna import MnaSystem
from .results import DCSolution
from .solver import SolveOutcome

logger = logging.getLogger(__name__)


def extract_solution(
    system: MnaSystem, outcome: SolveOutcome, issues: Optional[Sequence[ValidationIssue]] = None
) -> DCSolution:
    """
    Maps a solved MNA vector back to net voltages and per-component currents.

    Currents use the passive convention (positive when entering the first
    terminal). Sensing branches are internal and never reported as branch
    currents; the reference current of each CCVS/CCCS is reported separately
    in `control_currents`.
    """
    x = outcome.x
    net_index = system.net_index

    node_voltages: Dict[str, float] = {net_index.ground_net: 0.0, GROUND_NET_NAME: 0.0}
    for i, name in enumerate(net_index.node_names):
        node_voltages[name] = float(x[i])

    def v(net_name: str) -> float:
        return node_voltages[net_name]

    def reference_current(component_id: str) -> float:
        ref = system.references[component_id]
        return ref.sign * float(x[ref.index])

    branch_currents: Dict[str, float] = {}
    control_currents: Dict[str, float] = {}
    probe_voltages: Dict[str, float] = {}

    for element in system.elements:
        if isinstance(element, Resistor):
            branch_currents[element.id] = (v(element.p) - v(element.n)) / element.resistance
        elif isinstance(element, (VoltageSource, CurrentProbe, Vcvs)):
            branch_currents[element.id] = float(x[system.branch_of(element.id).index])
        elif isinstance(element, CurrentSource):
            branch_currents[element.id] = element.current
        elif isinstance(element, Vccs):
            branch_currents[element.id] = element.gain * (v(element.ctrl_p) - v(element.ctrl_n))
        elif isinstance(element, Ccvs):
            control_currents[element.id] = reference_current(element.id)
            branch_currents[element.id] = float(x[system.branch_of(element.id).index])
        elif isinstance(element, Cccs):
            control_currents[element.id] = reference_current(element.id)
            branch_currents[element.id] = element.gain * control_currents[element.id]
        elif isinstance(element, Marker):
            if element.kind is ComponentKind.VOLTAGE_PROBE:
                probe_voltages[element.id] = v(element.net)
        else:
            raise FrameworkLogicError(f"No result mapping for element type '{type(element).__name__}'.")

    logger.debug(
        f"Extracted {len(node_voltages)} net voltage(s) and {len(branch_currents)} branch current(s)."
    )
    return DCSolution(
        node_voltages=node_voltages,
        branch_currents=branch_currents,
        control_currents=control_currents,
        probe_voltages=probe_voltages,
        solve_method=outcome.method,
        issues=tuple(system.issues if issues is None else issues),
        system=system,
    )
