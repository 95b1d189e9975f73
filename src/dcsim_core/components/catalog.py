# src/dcsim_core/components/catalog.py
"""
Terminal and parameter declarations for every component kind in the palette.

Each parameter is declared with the physical unit its SI magnitude is
expressed in; the request parser uses these units to convert strings such as
"3 kohm" into floats before the solver core ever sees them.
"""
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from .base_enums import ComponentKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentSchema:
    """
    Declared terminals (in canonical order) and parameters (name -> unit) of one kind.
    `dc_paths` lists the terminal pairs the element ties together at DC, i.e.
    the pairs across which it fixes a voltage or conducts.
    """
    terminals: Tuple[str, ...]
    parameters: Dict[str, str]
    dc_paths: Tuple[Tuple[str, str], ...] = ()


_TWO_TERMINAL = ("p", "n")
_SOURCE_TERMINALS = ("pos", "neg")
_CONTROL_TERMINALS = ("ctrl_p", "ctrl_n")
_CONTROLLED_TERMINALS = _SOURCE_TERMINALS + _CONTROL_TERMINALS

COMPONENT_SCHEMAS: Dict[ComponentKind, ComponentSchema] = {
    ComponentKind.RESISTOR: ComponentSchema(_TWO_TERMINAL, {"value": "ohm"}, (_TWO_TERMINAL,)),
    ComponentKind.CAPACITOR: ComponentSchema(_TWO_TERMINAL, {"value": "farad"}),
    ComponentKind.INDUCTOR: ComponentSchema(_TWO_TERMINAL, {"value": "henry"}, (_TWO_TERMINAL,)),
    ComponentKind.VSOURCE_DC: ComponentSchema(_SOURCE_TERMINALS, {"dc": "volt"}, (_SOURCE_TERMINALS,)),
    ComponentKind.VSOURCE_AC: ComponentSchema(_SOURCE_TERMINALS, {"amplitude": "volt", "frequency": "hertz"}, (_SOURCE_TERMINALS,)),
    ComponentKind.ISOURCE_DC: ComponentSchema(_SOURCE_TERMINALS, {"dc": "ampere"}),
    ComponentKind.ISOURCE_AC: ComponentSchema(_SOURCE_TERMINALS, {"amplitude": "ampere", "frequency": "hertz"}),
    # Controlled source gains: V/V, A/V, V/A and A/A respectively.
    ComponentKind.VCVS: ComponentSchema(_CONTROLLED_TERMINALS, {"gain": "dimensionless"}, (_SOURCE_TERMINALS,)),
    ComponentKind.VCCS: ComponentSchema(_CONTROLLED_TERMINALS, {"gain": "siemens"}),
    ComponentKind.CCVS: ComponentSchema(_CONTROLLED_TERMINALS, {"gain": "ohm"}, (_SOURCE_TERMINALS, _CONTROL_TERMINALS)),
    ComponentKind.CCCS: ComponentSchema(_CONTROLLED_TERMINALS, {"gain": "dimensionless"}, (_CONTROL_TERMINALS,)),
    ComponentKind.GROUND: ComponentSchema(("gnd",), {}),
    ComponentKind.VOLTAGE_PROBE: ComponentSchema(("node",), {}),
    ComponentKind.CURRENT_PROBE: ComponentSchema(_TWO_TERMINAL, {}, (_TWO_TERMINAL,)),
}

#: Kinds the linear DC path can solve. CCVS/CCCS need a reference-current
#: branch, which the MNA builder reuses or synthesizes.
DC_ELIGIBLE_KINDS: FrozenSet[ComponentKind] = frozenset({
    ComponentKind.RESISTOR,
    ComponentKind.VSOURCE_DC,
    ComponentKind.ISOURCE_DC,
    ComponentKind.GROUND,
    ComponentKind.VOLTAGE_PROBE,
    ComponentKind.CURRENT_PROBE,
    ComponentKind.VCVS,
    ComponentKind.VCCS,
    ComponentKind.CCVS,
    ComponentKind.CCCS,
})

#: Tags of the whole palette, in declaration order, for error messages.
AVAILABLE_TYPE_TAGS: Tuple[str, ...] = tuple(kind.value for kind in ComponentKind)


def get_schema(kind: ComponentKind) -> ComponentSchema:
    return COMPONENT_SCHEMAS[kind]
