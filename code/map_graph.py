"""networkx view of a tile grid: walkable tiles plus teleport edges."""

from __future__ import annotations

from typing import Optional

import networkx as nx

from map_geometry import TilePos
from map_grid import Grid
from map_models import is_walkable


def build_walk_graph(grid: Grid, include_teleports: bool = True) -> nx.Graph:
    """Nodes are walkable ``TilePos``; edges join 4-neighbors and portal partners.

    Teleport edges carry ``teleport=True`` so callers can filter them out.
    """
    graph = nx.Graph()
    for y in range(grid.height):
        for x in range(grid.width):
            if is_walkable(grid.get(x, y)):
                graph.add_node(TilePos(x, y))

    for node in list(graph.nodes):
        # Right and down only; the graph is undirected.
        for neighbor in (node.offset(1, 0), node.offset(0, 1)):
            if neighbor in graph:
                graph.add_edge(node, neighbor, teleport=False)

    if include_teleports:
        for pair in grid.portal_pairs():
            graph.add_edge(pair.a, pair.b, teleport=True)
    return graph


def shortest_path_length(graph: nx.Graph, start: TilePos, goal: TilePos) -> Optional[int]:
    """Number of moves from start to goal, or None when no path exists."""
    if start not in graph or goal not in graph:
        return None
    try:
        return int(nx.shortest_path_length(graph, start, goal))
    except nx.NetworkXNoPath:
        return None


def walkable_component_count(graph: nx.Graph) -> int:
    if graph.number_of_nodes() == 0:
        return 0
    return nx.number_connected_components(graph)


def largest_component_fraction(graph: nx.Graph) -> float:
    """Share of walkable tiles in the biggest connected region."""
    total = graph.number_of_nodes()
    if total == 0:
        return 0.0
    largest = max(len(component) for component in nx.connected_components(graph))
    return largest / total
