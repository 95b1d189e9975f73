# src/dcsim_core/components/base_enums.py
from enum import Enum
from typing import Optional


class ComponentKind(Enum):
    """
    The closed palette of component type tags accepted by the editor. The value
    is the tag string used on the wire.
    """
    RESISTOR = "resistor"
    CAPACITOR = "capacitor"
    INDUCTOR = "inductor"
    VSOURCE_DC = "vsource_dc"
    VSOURCE_AC = "vsource_ac"
    ISOURCE_DC = "isource_dc"
    ISOURCE_AC = "isource_ac"
    VCVS = "vcvs"
    CCVS = "ccvs"
    VCCS = "vccs"
    CCCS = "cccs"
    GROUND = "ground"
    VOLTAGE_PROBE = "voltage_probe"
    CURRENT_PROBE = "current_probe"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["ComponentKind"]:
        """Returns the kind for a type tag, or None if the tag is not in the palette."""
        try:
            return cls(tag)
        except ValueError:
            return None

    def __str__(self):
        return self.value
