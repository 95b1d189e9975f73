# src/dcsim_core/components/__init__.py
import logging
logger = logging.getLogger(__name__)

from .base_enums import ComponentKind
from .catalog import (
    COMPONENT_SCHEMAS, DC_ELIGIBLE_KINDS, AVAILABLE_TYPE_TAGS, ComponentSchema, get_schema
)
from .elements import (
    DcElement, Resistor, VoltageSource, CurrentSource, CurrentProbe,
    Vcvs, Vccs, Ccvs, Cccs, Marker,
    VOLTAGE_DEFINING_TYPES, CURRENT_CONTROLLED_TYPES,
    instantiate_elements,
)

__all__ = [
    "ComponentKind",
    "COMPONENT_SCHEMAS",
    "DC_ELIGIBLE_KINDS",
    "AVAILABLE_TYPE_TAGS",
    "ComponentSchema",
    "get_schema",
    "DcElement",
    "Resistor",
    "VoltageSource",
    "CurrentSource",
    "CurrentProbe",
    "Vcvs",
    "Vccs",
    "Ccvs",
    "Cccs",
    "Marker",
    "VOLTAGE_DEFINING_TYPES",
    "CURRENT_CONTROLLED_TYPES",
    "instantiate_elements",
]
