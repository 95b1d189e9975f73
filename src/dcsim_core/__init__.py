# src/dcsim_core/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.info("DCSim Core package initialized.")

from .units import ureg, pint, Quantity
from .data_structures import Circuit, ComponentSpec, NetSpec, TheveninPort
from .netlist import NetResolver, build_nets_from_wires
from .parser import RequestParser
from .analysis import DCAnalyzer, TheveninAnalyzer, DCSolution, TheveninResult, DCSolverConfig
from .cache import SolutionCache
from .api import run_simulation, solve_dc, solve_thevenin
from .errors import DCSimError, SimulationRunError

__all__ = [
    # Units
    "ureg", "pint", "Quantity",
    # Data Structures
    "Circuit", "ComponentSpec", "NetSpec", "TheveninPort",
    # Netlist
    "NetResolver", "build_nets_from_wires",
    # Parser
    "RequestParser",
    # Analysis
    "DCAnalyzer", "TheveninAnalyzer", "DCSolution", "TheveninResult", "DCSolverConfig",
    # Cache
    "SolutionCache",
    # Facade
    "run_simulation", "solve_dc", "solve_thevenin",
    # Top-Level Errors (Actionable Diagnostics)
    "DCSimError", "SimulationRunError",
]
