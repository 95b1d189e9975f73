# src/dcsim_core/netlist/__init__.py
import logging
logger = logging.getLogger(__name__)

from .resolver import NetIndex, NetResolver
from .wiring import build_nets_from_wires, nets_from_connections

__all__ = [
    "NetIndex",
    "NetResolver",
    "build_nets_from_wires",
    "nets_from_connections",
]
