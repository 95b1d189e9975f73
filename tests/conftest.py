# tests/conftest.py
from collections import defaultdict

import pytest

from dcsim_core import Circuit, ComponentSpec, DCSolution
from dcsim_core.analysis.mna import Synthesized
from dcsim_core.components import Cccs, Ccvs, Marker
from dcsim_core.netlist import nets_from_connections


def make_circuit(components_def: list, name: str = "TestCircuit") -> Circuit:
    """
    Creates a Circuit whose nets are implied by the component connections.
    components_def: e.g., [("R1", "resistor", {"value": 1e3}, {"p": "n1", "n": "gnd"})]
    """
    components = [
        ComponentSpec(id=comp_id, type=comp_type, parameters=dict(params), connections=dict(connections))
        for comp_id, comp_type, params, connections in components_def
    ]
    return Circuit(components=components, nets=nets_from_connections(components), name=name)


def _element_terminals(element):
    if hasattr(element, "pos"):
        return element.pos, element.neg
    return element.p, element.n


def assert_kcl(solution: DCSolution, atol: float = 1e-9):
    """
    Checks that the reported currents balance at every net. A current enters an
    element at its first terminal and leaves at its second; the sensing branch
    of a current-controlled source carries its control current from ctrl_p to ctrl_n.
    """
    system = solution.system
    leaving = defaultdict(float)
    for element in system.elements:
        if isinstance(element, Marker):
            continue
        first, second = _element_terminals(element)
        current = solution.branch_currents[element.id]
        leaving[first] += current
        leaving[second] -= current
        if isinstance(element, (Ccvs, Cccs)) and isinstance(system.references[element.id], Synthesized):
            leaving[element.ctrl_p] += solution.control_currents[element.id]
            leaving[element.ctrl_n] -= solution.control_currents[element.id]

    for net_name, total in leaving.items():
        assert abs(total) <= atol, f"KCL violated at net '{net_name}': {total:.3e} A"


DIVIDER_DEF = [
    ("V1", "vsource_dc", {"dc": 9.0}, {"pos": "vin", "neg": "gnd"}),
    ("R1", "resistor", {"value": 3000.0}, {"p": "vin", "n": "n1"}),
    ("R2", "resistor", {"value": 6000.0}, {"p": "n1", "n": "gnd"}),
]

BRIDGE_DEF = [
    ("V1", "vsource_dc", {"dc": 10.0}, {"pos": "top", "neg": "gnd"}),
    ("R1", "resistor", {"value": 1000.0}, {"p": "top", "n": "a"}),
    ("R2", "resistor", {"value": 2000.0}, {"p": "a", "n": "gnd"}),
    ("R3", "resistor", {"value": 3000.0}, {"p": "top", "n": "b"}),
    ("R4", "resistor", {"value": 1000.0}, {"p": "b", "n": "gnd"}),
]


@pytest.fixture
def divider_circuit():
    """9 V across 3 kOhm + 6 kOhm; V(n1) = 6 V."""
    return make_circuit(DIVIDER_DEF, name="Divider")


@pytest.fixture
def bridge_circuit():
    """Unloaded Wheatstone bridge; seen from (a, b): Vth = 25/6 V, Rth = 4250/3 Ohm."""
    return make_circuit(BRIDGE_DEF, name="Bridge")


@pytest.fixture
def divider_payload():
    """The divider as a raw request mapping, with unit strings."""
    return {
        "circuit_name": "Divider",
        "components": [
            {"id": "V1", "type": "vsource_dc", "parameters": {"dc": "9 V"}, "connections": {"pos": "vin", "neg": "gnd"}},
            {"id": "R1", "type": "resistor", "parameters": {"value": "3 kohm"}, "connections": {"p": "vin", "n": "n1"}},
            {"id": "R2", "type": "resistor", "parameters": {"value": 6000}, "connections": {"p": "n1", "n": "gnd"}},
        ],
    }
