"""Prune short terminal branches (dead ends)."""

import logging
from .graph import Edge, Graph
from .sanitize import remove_branch_from_endpoints

logger = logging.getLogger(__name__)


def is_short_edge(edge: Edge, tolerance: float) -> bool:
    return edge.length < tolerance


def is_dead_end_edge(edge: Edge) -> bool:
    """
    True if exactly one endpoint of the edge has a single branch.

    An isolated edge whose both endpoints have a single branch is not a dead end.
    """
    return sum(1 for v in (edge.v1, edge.v2) if len(v.branches) == 1) == 1


def prune_dead_ends(graph: Graph, tolerance: float) -> int:
    """
    Remove short dead-end edges and their terminal vertices.

    The endpoint with more than one branch is kept.

    Args:
        graph: Graph to prune in place
        tolerance: Edges shorter than this are short

    Returns:
        Number of dead-end edges removed
    """
    dead_ends = [e for e in graph.edges if is_dead_end_edge(e) and is_short_edge(e, tolerance)]
    terminals = {v for e in dead_ends for v in (e.v1, e.v2) if len(v.branches) == 1}

    graph.vertices = [v for v in graph.vertices if v not in terminals]
    for edge in dead_ends:
        remove_branch_from_endpoints(edge)
    removed = set(dead_ends)
    graph.edges = [e for e in graph.edges if e not in removed]

    logger.debug("prune_dead_ends: removed %d dead-end edges and %d terminal vertices",
                len(dead_ends), len(terminals))
    return len(dead_ends)
