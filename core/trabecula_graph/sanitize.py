"""Remove loop edges and parallel edges from a skeleton graph."""

from typing import Dict, List
import logging
from .graph import Edge, Graph, Vertex, is_loop

logger = logging.getLogger(__name__)


def remove_branch_from_endpoints(edge: Edge) -> None:
    edge.v1.remove_branch(edge)
    edge.v2.remove_branch(edge)


def _drop_edges(graph: Graph, edges: List[Edge]) -> None:
    for edge in edges:
        remove_branch_from_endpoints(edge)
    dropped = set(edges)
    graph.edges = [e for e in graph.edges if e not in dropped]


def remove_loops(graph: Graph) -> int:
    """
    Remove edges that connect a vertex to itself.

    Args:
        graph: Graph to clean in place

    Returns:
        Number of loop edges removed
    """
    loops = [e for e in graph.edges if is_loop(e)]
    _drop_edges(graph, loops)
    logger.debug("remove_loops: removed %d loop edges", len(loops))
    return len(loops)


def map_vertex_ids(vertices: List[Vertex]) -> Dict[Vertex, int]:
    """Map each vertex to a dense index 0..n-1."""
    return {vertex: i for i, vertex in enumerate(vertices)}


def connection_hash(edge: Edge, id_map: Dict[Vertex, int]) -> int:
    """Order-independent key of the vertex pair an edge connects."""
    n_vertices = len(id_map)
    a = id_map[edge.v1]
    b = id_map[edge.v2]
    return a * n_vertices + b if a < b else b * n_vertices + a


def remove_parallel_edges(graph: Graph) -> int:
    """
    Remove parallel edges, leaving at most one edge between each vertex pair.

    Which of the parallel edges is kept is not part of the contract.

    Args:
        graph: Graph to clean in place. Edge endpoints must be in graph.vertices.

    Returns:
        Number of parallel edges removed
    """
    id_map = map_vertex_ids(graph.vertices)
    connections = set()
    parallel_edges = []
    for edge in graph.edges:
        key = connection_hash(edge, id_map)
        if key in connections:
            parallel_edges.append(edge)
        else:
            connections.add(key)
    _drop_edges(graph, parallel_edges)
    logger.debug("remove_parallel_edges: removed %d parallel edges", len(parallel_edges))
    return len(parallel_edges)
