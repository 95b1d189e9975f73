# src/dcsim_core/components/elements.py
"""
The closed set of element variants the linear DC path understands.

Every DC-eligible component kind maps onto exactly one frozen dataclass that
carries only the nets and parameters relevant to its stamp. `DcElement` is the
union of all variants; the MNA builder dispatches over it in a single
exhaustive function, so adding a variant without a stamp fails loudly.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Union

from ..data_structures import Circuit, ComponentSpec
from ..validation import IssueCode, IssueCollector
from .base_enums import ComponentKind
from .catalog import AVAILABLE_TYPE_TAGS, DC_ELIGIBLE_KINDS, get_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resistor:
    id: str
    p: str
    n: str
    resistance: float

    @property
    def conductance(self) -> float:
        return 1.0 / self.resistance


@dataclass(frozen=True)
class VoltageSource:
    """Independent DC voltage source, V(pos) - V(neg) = voltage."""
    id: str
    pos: str
    neg: str
    voltage: float


@dataclass(frozen=True)
class CurrentSource:
    """Independent DC current source driving `current` from pos through the source to neg."""
    id: str
    pos: str
    neg: str
    current: float


@dataclass(frozen=True)
class CurrentProbe:
    """Ideal ammeter: a zero-volt branch from p to n whose current is reported."""
    id: str
    p: str
    n: str


@dataclass(frozen=True)
class Vcvs:
    id: str
    pos: str
    neg: str
    ctrl_p: str
    ctrl_n: str
    gain: float


@dataclass(frozen=True)
class Vccs:
    id: str
    pos: str
    neg: str
    ctrl_p: str
    ctrl_n: str
    gain: float


@dataclass(frozen=True)
class Ccvs:
    id: str
    pos: str
    neg: str
    ctrl_p: str
    ctrl_n: str
    gain: float


@dataclass(frozen=True)
class Cccs:
    id: str
    pos: str
    neg: str
    ctrl_p: str
    ctrl_n: str
    gain: float


@dataclass(frozen=True)
class Marker:
    """Ground symbols and voltage probes: connected to a net, contribute no stamp."""
    id: str
    kind: ComponentKind
    net: str


DcElement = Union[Resistor, VoltageSource, CurrentSource, CurrentProbe, Vcvs, Vccs, Ccvs, Cccs, Marker]

#: Elements that own a branch-current unknown.
VoltageDefiningElement = Union[VoltageSource, CurrentProbe, Vcvs, Ccvs]
VOLTAGE_DEFINING_TYPES = (VoltageSource, CurrentProbe, Vcvs, Ccvs)

#: Elements whose control quantity is a branch current.
CurrentControlledElement = Union[Ccvs, Cccs]
CURRENT_CONTROLLED_TYPES = (Ccvs, Cccs)

_CONTROLLED_CLASSES = {
    ComponentKind.VCVS: Vcvs,
    ComponentKind.VCCS: Vccs,
    ComponentKind.CCVS: Ccvs,
    ComponentKind.CCCS: Cccs,
}


def _read_parameters(spec: ComponentSpec, kind: ComponentKind, issues: IssueCollector) -> Dict[str, float]:
    """Collects the declared parameters of `spec` as finite floats, recording any problem."""
    values: Dict[str, float] = {}
    for param_name in get_schema(kind).parameters:
        if param_name not in spec.parameters:
            issues.error(IssueCode.PARAM_MISSING, component=spec.id, component_type=kind.value, parameter=param_name)
            continue
        raw = spec.parameters[param_name]
        try:
            value = float(raw)
        except (TypeError, ValueError):
            issues.error(IssueCode.PARAM_INVALID, component=spec.id, parameter=param_name, value=repr(raw), reason="not a number")
            continue
        if not math.isfinite(value):
            issues.error(IssueCode.PARAM_INVALID, component=spec.id, parameter=param_name, value=repr(raw), reason="must be finite")
            continue
        values[param_name] = value

    if kind is ComponentKind.RESISTOR and values.get("value", 1.0) <= 0:
        issues.error(
            IssueCode.PARAM_INVALID, component=spec.id, parameter="value", value=repr(values["value"]),
            reason="resistance must be strictly positive; use a wire for an ideal short"
        )
        values.pop("value")
    return values


def _build_element(spec: ComponentSpec, kind: ComponentKind, params: Dict[str, float]) -> DcElement:
    conn = spec.connections
    if kind is ComponentKind.RESISTOR:
        return Resistor(id=spec.id, p=conn["p"], n=conn["n"], resistance=params["value"])
    if kind is ComponentKind.VSOURCE_DC:
        return VoltageSource(id=spec.id, pos=conn["pos"], neg=conn["neg"], voltage=params["dc"])
    if kind is ComponentKind.ISOURCE_DC:
        return CurrentSource(id=spec.id, pos=conn["pos"], neg=conn["neg"], current=params["dc"])
    if kind is ComponentKind.CURRENT_PROBE:
        return CurrentProbe(id=spec.id, p=conn["p"], n=conn["n"])
    if kind in _CONTROLLED_CLASSES:
        return _CONTROLLED_CLASSES[kind](
            id=spec.id, pos=conn["pos"], neg=conn["neg"],
            ctrl_p=conn["ctrl_p"], ctrl_n=conn["ctrl_n"], gain=params["gain"],
        )
    if kind is ComponentKind.GROUND:
        return Marker(id=spec.id, kind=kind, net=conn["gnd"])
    if kind is ComponentKind.VOLTAGE_PROBE:
        return Marker(id=spec.id, kind=kind, net=conn["node"])
    raise AssertionError(f"No DC element variant for kind '{kind}'.")


def instantiate_elements(circuit: Circuit) -> List[DcElement]:
    """
    Converts every component of `circuit` into its DC element variant.

    All problems are collected first and reported together.

    Raises:
        SchemaError: Unknown type, unconnected required terminal, missing or
                     invalid parameter.
        EligibilityError: A known type the DC path cannot solve.
    """
    issues = IssueCollector()
    elements: List[DcElement] = []

    for spec in circuit.components:
        kind = ComponentKind.from_tag(spec.type)
        if kind is None:
            issues.error(
                IssueCode.COMP_TYPE_UNKNOWN, component=spec.id, component_type=spec.type,
                available_types=", ".join(AVAILABLE_TYPE_TAGS)
            )
            continue
        if kind not in DC_ELIGIBLE_KINDS:
            issues.error(IssueCode.DC_INELIGIBLE, component=spec.id, component_type=kind.value)
            continue

        missing_terminals = [t for t in get_schema(kind).terminals if t not in spec.connections]
        for terminal in missing_terminals:
            issues.error(IssueCode.COMP_TERMINAL_MISSING, component=spec.id, component_type=kind.value, terminal=terminal)

        errors_before = len(issues.errors)
        params = _read_parameters(spec, kind, issues)
        if missing_terminals or len(issues.errors) > errors_before:
            continue

        elements.append(_build_element(spec, kind, params))

    issues.raise_if_errors()
    logger.debug(f"Instantiated {len(elements)} DC element(s) for circuit '{circuit.name}'.")
    return elements
