# src/dcsim_core/netlist/resolver.py
"""
Validates the net declarations of a circuit and indexes its non-ground nets.

The caller delivers nets already grouped (see `wiring.build_nets_from_wires`);
this module only checks that the grouping is consistent with the component
connections, identifies the single ground net and fixes the ordering of the
node-voltage unknowns.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import networkx as nx

from ..components.base_enums import ComponentKind
from ..components.catalog import AVAILABLE_TYPE_TAGS, get_schema
from ..constants import GROUND_NET_NAME
from ..data_structures import Circuit, Terminal
from ..validation import IssueCode, IssueCollector, ValidationIssue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetIndex:
    """
    The resolved net layout of one circuit.

    `node_names` holds the non-ground nets in lexicographic order; position i
    in this tuple is row/column i of the node block of the MNA matrix.
    """
    ground_net: str
    node_names: Tuple[str, ...]
    warnings: Tuple[ValidationIssue, ...] = ()
    _positions: Dict[str, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_positions', {name: i for i, name in enumerate(self.node_names)})

    @property
    def node_count(self) -> int:
        return len(self.node_names)

    def index_of(self, net_name: str) -> Optional[int]:
        """Matrix index of `net_name`, or None for the ground net."""
        if net_name == self.ground_net:
            return None
        try:
            return self._positions[net_name]
        except KeyError:
            raise KeyError(f"Net '{net_name}' is not part of this net index.") from None

    def is_known(self, net_name: str) -> bool:
        return net_name == self.ground_net or net_name in self._positions


class NetResolver:
    """
    Checks the net declarations of a `Circuit` and produces its `NetIndex`.

    Every problem found is collected; a single category-specific
    `ValidationError` is raised at the end so the user sees all of them.
    """

    def __init__(self, ground_name: str = GROUND_NET_NAME):
        self.ground_name = ground_name

    def resolve(self, circuit: Circuit) -> NetIndex:
        issues = IssueCollector()

        declared_nets = self._check_net_declarations(circuit, issues)
        member_net = self._check_net_members(circuit, declared_nets, issues)
        self._check_component_connections(circuit, declared_nets, member_net, issues)
        ground_net = self._find_ground(circuit, declared_nets, issues)

        issues.raise_if_errors()

        node_names = tuple(sorted(name for name in declared_nets if name != ground_net))
        warnings = self._find_floating_nets(circuit, ground_net, node_names, issues)
        for warning in warnings:
            logger.warning(warning.message)

        logger.debug(
            f"Resolved circuit '{circuit.name}': ground net '{ground_net}', "
            f"{len(node_names)} non-ground net(s)."
        )
        return NetIndex(ground_net=ground_net, node_names=node_names, warnings=tuple(warnings))

    # --- Validation passes ---

    def _check_net_declarations(self, circuit: Circuit, issues: IssueCollector) -> Set[str]:
        seen: Set[str] = set()
        for net in circuit.nets:
            if net.name in seen:
                issues.error(IssueCode.NET_DUPLICATE, net=net.name)
            seen.add(net.name)
            if len(net.nodes) < 2:
                issues.error(IssueCode.NET_MEMBERS_MIN, net=net.name, count=len(net.nodes))
        return seen

    def _check_net_members(
        self, circuit: Circuit, declared_nets: Set[str], issues: IssueCollector
    ) -> Dict[Terminal, str]:
        """Checks every (component, terminal) member; returns the terminal -> net map."""
        seen_ids: Set[str] = set()
        for comp in circuit.components:
            if comp.id in seen_ids:
                issues.error(IssueCode.COMP_DUPLICATE_ID, component=comp.id)
            seen_ids.add(comp.id)

        comp_map = circuit.component_map
        member_net: Dict[Terminal, str] = {}
        reported_reuse: Set[Terminal] = set()

        for net in circuit.nets:
            for comp_id, terminal in net.nodes:
                comp = comp_map.get(comp_id)
                if comp is None:
                    issues.error(IssueCode.NET_UNKNOWN_COMPONENT, net=net.name, component=comp_id)
                    continue
                kind = ComponentKind.from_tag(comp.type)
                if kind is not None and terminal not in get_schema(kind).terminals:
                    issues.error(
                        IssueCode.NET_UNKNOWN_TERMINAL, net=net.name, terminal=terminal,
                        component=comp_id, component_type=kind.value
                    )
                    continue
                key = (comp_id, terminal)
                previous = member_net.get(key)
                if previous is not None and previous != net.name:
                    if key not in reported_reuse:
                        issues.error(
                            IssueCode.NET_TERMINAL_REUSED, terminal=terminal, component=comp_id,
                            nets=f"'{previous}', '{net.name}'"
                        )
                        reported_reuse.add(key)
                    continue
                member_net[key] = net.name
        return member_net

    def _check_component_connections(
        self,
        circuit: Circuit,
        declared_nets: Set[str],
        member_net: Dict[Terminal, str],
        issues: IssueCollector,
    ):
        for comp in circuit.components:
            kind = ComponentKind.from_tag(comp.type)
            if kind is None:
                issues.error(
                    IssueCode.COMP_TYPE_UNKNOWN, component=comp.id, component_type=comp.type,
                    available_types=", ".join(AVAILABLE_TYPE_TAGS)
                )
                continue
            declared_terminals = get_schema(kind).terminals

            for terminal in declared_terminals:
                if terminal not in comp.connections:
                    issues.error(
                        IssueCode.COMP_TERMINAL_MISSING, component=comp.id,
                        component_type=kind.value, terminal=terminal
                    )

            for terminal, net_name in comp.connections.items():
                if terminal not in declared_terminals:
                    issues.error(
                        IssueCode.COMP_TERMINAL_UNDECLARED, component=comp.id, component_type=kind.value,
                        terminal=terminal, declared_terminals=", ".join(declared_terminals)
                    )
                    continue
                if net_name not in declared_nets:
                    issues.error(IssueCode.COMP_UNDECLARED_NET, component=comp.id, terminal=terminal, net=net_name)
                    continue
                listed_on = member_net.get((comp.id, terminal))
                if listed_on != net_name:
                    issues.error(
                        IssueCode.COMP_CONNECTION_MISMATCH, component=comp.id, terminal=terminal, net=net_name,
                        member_net=f"net '{listed_on}'" if listed_on else "no net"
                    )

    def _find_ground(self, circuit: Circuit, declared_nets: Set[str], issues: IssueCollector) -> Optional[str]:
        """
        Ground candidates: the net literally named after the ground, plus every
        net holding the terminal of a ground component. They must agree.
        """
        candidates: List[str] = []
        if self.ground_name in declared_nets:
            candidates.append(self.ground_name)

        for comp in circuit.components:
            if comp.type != ComponentKind.GROUND.value:
                continue
            for net_name in comp.connections.values():
                if net_name in declared_nets and net_name not in candidates:
                    candidates.append(net_name)

        if not candidates:
            issues.error(IssueCode.GND_MISSING, ground_name=self.ground_name)
            return None
        if len(candidates) > 1:
            issues.error(IssueCode.GND_AMBIGUOUS, candidates=", ".join(f"'{c}'" for c in candidates))
            return None
        return candidates[0]

    # --- Connectivity warnings ---

    def _find_floating_nets(
        self, circuit: Circuit, ground_net: str, node_names: Tuple[str, ...], issues: IssueCollector
    ) -> List[ValidationIssue]:
        """
        Builds the DC connectivity graph (nets as nodes, one edge per terminal
        pair an element ties together) and warns about every net that cannot
        reach ground. Such nets leave the MNA matrix singular.
        """
        graph = nx.Graph()
        graph.add_nodes_from(node_names)
        graph.add_node(ground_net)

        for comp in circuit.components:
            kind = ComponentKind.from_tag(comp.type)
            for term_a, term_b in get_schema(kind).dc_paths:
                net_a, net_b = comp.connections[term_a], comp.connections[term_b]
                if net_a != net_b:
                    graph.add_edge(net_a, net_b)

        grounded = nx.node_connected_component(graph, ground_net)
        floating = [
            issues.warning(IssueCode.NET_FLOATING, net=name, ground_net=ground_net)
            for name in node_names if name not in grounded
        ]
        return floating
