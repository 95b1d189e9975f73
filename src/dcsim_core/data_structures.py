# src/dcsim_core/data_structures.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# A net member: (component id, terminal name).
Terminal = Tuple[str, str]


@dataclass(frozen=True)
class ComponentSpec:
    """
    One placed component of the circuit, exactly as delivered by the editor.

    `parameters` holds real values in SI units keyed by parameter name
    (e.g. 'value', 'dc', 'gain'); `connections` maps each terminal name to the
    name of the net it sits on.
    """
    id: str
    type: str
    parameters: Dict[str, float] = field(default_factory=dict)
    connections: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NetSpec:
    """
    A named set of terminals held at the same potential. The order of `nodes`
    is the order supplied by the caller and is preserved.
    """
    name: str
    nodes: Tuple[Terminal, ...]

    def __post_init__(self):
        # Accept any iterable of pairs (e.g. JSON lists) but store a tuple of tuples.
        object.__setattr__(self, 'nodes', tuple(tuple(node) for node in self.nodes))


@dataclass(frozen=True)
class Circuit:
    """
    The immutable input snapshot of one solve request: components plus the
    nets they are grouped into. Created fresh per request and never mutated;
    derived circuits (e.g. with a Thevenin port short) are new instances.
    """
    components: Tuple[ComponentSpec, ...]
    nets: Tuple[NetSpec, ...]
    name: str = "circuit"

    def __post_init__(self):
        object.__setattr__(self, 'components', tuple(self.components))
        object.__setattr__(self, 'nets', tuple(self.nets))

    @property
    def component_map(self) -> Dict[str, ComponentSpec]:
        """Components keyed by id. Later duplicates win; the resolver reports them."""
        return {comp.id: comp for comp in self.components}

    @property
    def net_names(self) -> List[str]:
        return [net.name for net in self.nets]

    def with_extra_component(self, component: ComponentSpec) -> Circuit:
        """
        Returns a new Circuit with `component` added and its terminals appended
        to the member lists of the nets named in its connections.
        """
        extra_members: Dict[str, List[Terminal]] = {}
        for terminal, net_name in component.connections.items():
            extra_members.setdefault(net_name, []).append((component.id, terminal))

        new_nets = tuple(
            NetSpec(name=net.name, nodes=net.nodes + tuple(extra_members.get(net.name, ())))
            for net in self.nets
        )
        return Circuit(components=self.components + (component,), nets=new_nets, name=self.name)


@dataclass(frozen=True)
class TheveninPort:
    """A one-port designated by two net names. `negative=None` means ground."""
    positive: str
    negative: Optional[str] = None
