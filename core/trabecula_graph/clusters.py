"""Find clusters of vertices joined by short edges."""

from enum import Enum
from typing import Dict, List
import logging
import networkx as nx
from .graph import Graph, Vertex
from .dead_ends import is_short_edge

logger = logging.getLogger(__name__)


class ClusterStrategy(Enum):
    """How short edges are merged during one cleaning pass."""
    WHOLE_GRAPH = "whole_graph"  # Collapse every maximal short-edge cluster at once
    SEQUENTIAL_EDGES = "sequential_edges"  # Collapse one short edge at a time (order-dependent)

    @classmethod
    def from_flag(cls, use_clusters: bool) -> "ClusterStrategy":
        return cls.WHOLE_GRAPH if use_clusters else cls.SEQUENTIAL_EDGES


def short_edge_graph(graph: Graph, tolerance: float) -> nx.Graph:
    """
    Build a NetworkX graph of the short edges only.

    Nodes are the Vertex objects themselves, added in edge order.

    Args:
        graph: Graph with valid edge lengths
        tolerance: Edges shorter than this are included

    Returns:
        nx.Graph whose nodes are the endpoints of short edges
    """
    short = nx.Graph()
    for edge in graph.edges:
        if is_short_edge(edge, tolerance):
            short.add_edge(edge.v1, edge.v2)
    return short


def find_cluster_vertices(graph: Graph, tolerance: float) -> List[Vertex]:
    """Distinct endpoints of the short edges in the graph, in edge order."""
    return list(short_edge_graph(graph, tolerance).nodes())


def _in_node_order(component, order: Dict[Vertex, int]) -> List[Vertex]:
    # Components are sets; sort them so results don't depend on identity hashes
    return sorted(component, key=order.__getitem__)


def find_clusters(graph: Graph, tolerance: float) -> List[List[Vertex]]:
    """
    Find all the vertex clusters in the graph.

    A cluster is a maximal set of vertices connected to each other by edges
    shorter than tolerance. Clusters don't share vertices.

    Args:
        graph: Undirected graph with valid edge lengths
        tolerance: Maximum (exclusive) length of cluster edges

    Returns:
        List of clusters in discovery order, each a list of two or more vertices
    """
    short = short_edge_graph(graph, tolerance)
    order = {v: i for i, v in enumerate(short.nodes())}
    clusters = [_in_node_order(c, order) for c in nx.connected_components(short)]
    logger.debug("find_clusters: found %d clusters from %d candidate vertices",
                len(clusters), short.number_of_nodes())
    return clusters
