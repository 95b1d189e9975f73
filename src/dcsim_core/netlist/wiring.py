# src/dcsim_core/netlist/wiring.py
"""
Groups wire endpoints into nets.

An editor delivers wires as pairs of `(component id, terminal)` endpoints.
Terminals joined by a chain of wires are electrically identical; each
connected group of terminals becomes one `NetSpec`. Ground symbols are all the
same node, so every group holding a ground terminal is merged into the
single net named after the ground.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Sequence, Tuple

import networkx as nx

from ..components.base_enums import ComponentKind
from ..components.catalog import get_schema
from ..constants import GROUND_NET_NAME
from ..data_structures import ComponentSpec, NetSpec, Terminal
from ..validation import IssueCode, IssueCollector

logger = logging.getLogger(__name__)

Wire = Tuple[Terminal, Terminal]


def build_nets_from_wires(
    components: Sequence[ComponentSpec],
    wires: Iterable[Wire],
    ground_name: str = GROUND_NET_NAME,
) -> Tuple[List[ComponentSpec], List[NetSpec]]:
    """
    Turns a wire list into nets and fills in the component connections.

    Non-ground nets are named `n1`, `n2`, ... in the order their first terminal
    appears in the wire list.

    Args:
        components: The placed components. Existing `connections` are replaced.
        wires: Endpoint pairs `((comp_id, terminal), (comp_id, terminal))`.
        ground_name: Name given to the net holding the ground terminals.

    Returns:
        A tuple `(components, nets)` with new component instances whose
        `connections` reflect the computed nets.

    Raises:
        TopologyError: A wire endpoint names an unknown component or a
                       terminal its component does not declare.
    """
    comp_map = {comp.id: comp for comp in components}
    issues = IssueCollector()
    graph = nx.Graph()

    for wire_idx, wire in enumerate(wires):
        endpoints = [tuple(endpoint) for endpoint in wire]
        valid = True
        for comp_id, terminal in endpoints:
            comp = comp_map.get(comp_id)
            if comp is None:
                issues.error(IssueCode.WIRE_UNKNOWN_COMPONENT, wire=wire_idx, component=comp_id)
                valid = False
                continue
            kind = ComponentKind.from_tag(comp.type)
            if kind is not None and terminal not in get_schema(kind).terminals:
                issues.error(
                    IssueCode.WIRE_UNKNOWN_TERMINAL, wire=wire_idx, terminal=terminal,
                    component=comp_id, component_type=kind.value
                )
                valid = False
        if valid:
            # Graph insertion order records first appearance.
            graph.add_nodes_from(endpoints)
            graph.add_edge(*endpoints)

    issues.raise_if_errors()

    first_seen = {terminal: i for i, terminal in enumerate(graph.nodes)}
    ground_members: List[Terminal] = []
    other_groups: List[List[Terminal]] = []
    for group in nx.connected_components(graph):
        members = sorted(group, key=first_seen.__getitem__)
        if any(comp_map[comp_id].type == ComponentKind.GROUND.value for comp_id, _ in members):
            ground_members.extend(members)
        else:
            other_groups.append(members)

    other_groups.sort(key=lambda members: first_seen[members[0]])
    nets: List[NetSpec] = []
    if ground_members:
        ground_members.sort(key=first_seen.__getitem__)
        nets.append(NetSpec(name=ground_name, nodes=tuple(ground_members)))
    for net_number, members in enumerate(other_groups, start=1):
        nets.append(NetSpec(name=f"n{net_number}", nodes=tuple(members)))

    net_of: Dict[Terminal, str] = {member: net.name for net in nets for member in net.nodes}
    connected: List[ComponentSpec] = []
    for comp in components:
        connections = {
            terminal: net_of[(comp.id, terminal)]
            for (comp_id, terminal) in net_of if comp_id == comp.id
        }
        connected.append(replace(comp, connections=connections))

    logger.debug(f"Grouped {graph.number_of_nodes()} wired terminal(s) into {len(nets)} net(s).")
    return connected, nets


def nets_from_connections(components: Sequence[ComponentSpec]) -> List[NetSpec]:
    """
    Derives the net declarations implied by the components' own connections.
    Nets keep the order in which they are first referenced; members are listed
    in component order, then in the component's terminal order.
    """
    members: Dict[str, List[Terminal]] = {}
    for comp in components:
        for terminal, net_name in comp.connections.items():
            members.setdefault(net_name, []).append((comp.id, terminal))
    return [NetSpec(name=name, nodes=tuple(nodes)) for name, nodes in members.items()]
