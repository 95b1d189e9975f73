# --- src/dcsim_core/constants.py ---
import logging

logger = logging.getLogger(__name__)

# --- Net Naming ---

#: Literal net name that always identifies the reference node, and the alias
#: under which the ground potential is always reported.
GROUND_NET_NAME: str = "gnd"

# --- Numerical Constants for the DC Solve ---

#: Diagonal perturbation applied to the constraint row of every duplicate
#: voltage-defining branch (all but the first branch on the same node pair).
#: Value: 1e-12 (acts as a 1 pico-ohm series resistance).
REGULARIZATION_EPSILON: float = 1.0e-12

#: Uniform diagonal ridge added to the whole MNA matrix on the second solver stage.
RIDGE_EPSILON: float = 1.0e-12

#: Resistance of the near-short inserted across a Thevenin port to measure Isc.
#: Value: 1e-6 Ohm.
THEVENIN_SHORT_RESISTANCE_OHMS: float = 1.0e-6

#: Short-circuit currents at or below this magnitude mean the port is open.
OPEN_PORT_CURRENT_THRESHOLD_AMPS: float = 1.0e-12

#: Thevenin resistance reported for an open port instead of raising an error.
#: Value: 1e12 Ohm.
OPEN_PORT_RESISTANCE_SENTINEL_OHMS: float = 1.0e12

# --- Cache ---

#: Default number of solutions kept by an injected SolutionCache.
DEFAULT_CACHE_MAX_ENTRIES: int = 128

logger.debug("Defined core constants: REGULARIZATION_EPSILON, RIDGE_EPSILON, THEVENIN_SHORT_RESISTANCE_OHMS")
