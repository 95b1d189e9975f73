# src/dcsim_core/analysis/thevenin.py
"""
Derives the Thevenin/Norton equivalent of a circuit seen from a port.

The equivalent is measured, not computed symbolically: one DC solve gives the
open-circuit voltage and a second solve with a zero-volt branch across the
port gives the ideal short-circuit current. The current a 1e-6 Ohm near-short
would carry follows in closed form; stamping that conductance directly would
leave the port voltage difference of a giga-ohm network below double precision.
"""

import logging
from typing import Optional, Tuple

from ..cache.keys import create_thevenin_key
from ..cache.service import SolutionCache
from ..components.base_enums import ComponentKind
from ..constants import GROUND_NET_NAME
from ..data_structures import Circuit, ComponentSpec, TheveninPort
from ..netlist.resolver import NetIndex, NetResolver
from ..validation import IssueCode, IssueCollector, ValidationError
from .classifier import require_dc_eligible
from .config import DCSolverConfig
from .dc import DCAnalyzer
from .exceptions import DCAnalysisError, TheveninAnalysisError
from .results import TheveninResult

logger = logging.getLogger(__name__)

_SHORT_ID_PREFIX = "__thevenin_short"


class TheveninAnalyzer:
    """Cache-aware Thevenin analysis of one port of a DC-eligible circuit."""

    def __init__(
        self,
        circuit: Circuit,
        port: TheveninPort,
        config: Optional[DCSolverConfig] = None,
        cache: Optional[SolutionCache] = None,
    ):
        if not isinstance(circuit, Circuit):
            raise TypeError("TheveninAnalyzer requires a Circuit object.")
        if not isinstance(port, TheveninPort):
            raise TypeError("TheveninAnalyzer requires a TheveninPort.")
        self.circuit = circuit
        self.port = port
        self.config: DCSolverConfig = config or DCSolverConfig()
        self.cache = cache

    def analyze(self) -> TheveninResult:
        """
        Raises:
            TopologyError: The circuit itself is malformed, or (once the
                           circuit is known to be DC-eligible) the port names an
                           undeclared net or both port terminals are the same net.
            SchemaError, EligibilityError: As for `DCAnalyzer`.
        """
        cache_key = None
        if self.cache is not None:
            cache_key = create_thevenin_key(self.circuit, self.port, self.config)
            cached_results = self.cache.get(cache_key)
            if isinstance(cached_results, TheveninResult):
                return cached_results

        net_index = NetResolver().resolve(self.circuit)
        require_dc_eligible(self.circuit)
        positive, negative = self._resolve_port(net_index)
        logger.info(f"Starting Thevenin analysis of '{self.circuit.name}' across ({positive}, {negative})...")

        try:
            open_circuit = DCAnalyzer(self.circuit, self.config, self.cache).analyze()
            vth = open_circuit.node_voltages[positive] - open_circuit.node_voltages[negative]

            short_id = self._unique_short_id()
            shorted = self.circuit.with_extra_component(ComponentSpec(
                id=short_id,
                type=ComponentKind.CURRENT_PROBE.value,
                parameters={},
                connections={"p": positive, "n": negative},
            ))
            short_circuit = DCAnalyzer(shorted, self.config, self.cache).analyze()
            isc = _near_short_current(vth, short_circuit.branch_currents[short_id], self.config.short_resistance_ohms)
        except (ValidationError, DCAnalysisError):
            raise
        except Exception as e:
            raise TheveninAnalysisError(
                circuit_name=self.circuit.name,
                details=f"An unexpected internal error occurred during Thevenin analysis: {e}"
            ) from e

        port_open = abs(isc) <= self.config.open_port_current_threshold
        if port_open:
            rth = self.config.open_port_resistance_sentinel
            logger.info(f"Port ({positive}, {negative}) is open (|Isc| = {abs(isc):.3e} A); Rth reported as {rth:.1e} Ohm.")
        else:
            rth = abs(vth / isc)

        result = TheveninResult(
            vth=vth, rth=rth, positive=positive, negative=negative, isc=isc,
            port_open=port_open, issues=open_circuit.issues,
        )
        logger.info(f"Thevenin analysis complete: Vth = {vth:.6g} V, Rth = {rth:.6g} Ohm.")
        if self.cache is not None:
            self.cache.put(cache_key, result)
        return result

    def _resolve_port(self, net_index: NetIndex) -> Tuple[str, str]:
        """Maps the port onto declared nets; the ground alias and a missing negative mean ground."""
        def canonical(net_name: Optional[str]) -> str:
            if net_name is None or net_name == GROUND_NET_NAME:
                return net_index.ground_net
            return net_name

        positive, negative = canonical(self.port.positive), canonical(self.port.negative)
        issues = IssueCollector()
        for terminal, net_name in (("positive", positive), ("negative", negative)):
            if not net_index.is_known(net_name):
                issues.error(IssueCode.PORT_UNKNOWN_NET, terminal=terminal, net=net_name)
        if not issues.has_errors and positive == negative:
            issues.error(IssueCode.PORT_DEGENERATE, net=positive)
        issues.raise_if_errors()
        return positive, negative

    def _unique_short_id(self) -> str:
        existing = self.circuit.component_map
        short_id, counter = _SHORT_ID_PREFIX, 1
        while short_id in existing:
            short_id = f"{_SHORT_ID_PREFIX}_{counter}"
            counter += 1
        return short_id


def _near_short_current(vth: float, ideal_short_current: float, short_resistance: float) -> float:
    """
    Current through a `short_resistance` resistor across the port, derived from
    the current of an ideal (zero-volt) short. With `Rth = vth / i`, it is
    `vth / (Rth + short_resistance)`, rearranged so that `i == 0` is allowed.
    """
    denominator = vth + ideal_short_current * short_resistance
    if denominator == 0.0:
        return 0.0
    return vth * ideal_short_current / denominator
