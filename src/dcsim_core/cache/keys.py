# src/dcsim_core/cache/keys.py
"""
Centralizes the generation of cache keys for analysis results.

A key captures every input that can change a result: the components with
their exact parameter values and connections, the net declarations and the
solver configuration. Each key starts with a namespace string so results of
different analyses never collide.
"""
from dataclasses import astuple
from typing import TYPE_CHECKING, Tuple

from ..data_structures import Circuit, TheveninPort

if TYPE_CHECKING:
    from ..analysis.config import DCSolverConfig


def _canonical_circuit(circuit: Circuit) -> Tuple:
    # repr() keeps floats exact and makes any parameter value hashable.
    components = tuple(
        (
            comp.id,
            comp.type,
            tuple(sorted((name, repr(value)) for name, value in comp.parameters.items())),
            tuple(sorted(comp.connections.items())),
        )
        for comp in circuit.components
    )
    nets = tuple(sorted((net.name, tuple(sorted(net.nodes))) for net in circuit.nets))
    return components, nets


def create_circuit_key(circuit: Circuit, config: "DCSolverConfig") -> Tuple:
    """Key of the DC solution of `circuit` under `config`."""
    return ("dc_solution",) + _canonical_circuit(circuit) + (astuple(config),)


def create_thevenin_key(circuit: Circuit, port: TheveninPort, config: "DCSolverConfig") -> Tuple:
    """Key of the Thevenin equivalent of `circuit` seen from `port`."""
    return ("thevenin",) + _canonical_circuit(circuit) + ((port.positive, port.negative), astuple(config))
