"""Collapse short-edge clusters into single centroid vertices."""

from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
import logging
from .graph import Edge, Graph, Vertex
from .geometry import DEFAULT_CALIBRATION, update_edge_length
from .clusters import find_clusters
from .dead_ends import is_dead_end_edge, is_short_edge

logger = logging.getLogger(__name__)


def cluster_centre(cluster: Iterable[Vertex]) -> Vertex:
    """
    Create a vertex at the geometric centre of a cluster.

    The new vertex carries the points of all the cluster members, so its
    centroid is the mean of the cluster's points.

    Args:
        cluster: Vertices connected by short edges

    Returns:
        New vertex with no branches
    """
    centre = Vertex()
    for vertex in cluster:
        centre.points.extend(vertex.points)
    return centre


def find_edges_with_one_end_in_cluster(cluster: Iterable[Vertex]) -> List[Edge]:
    """
    Find the edges that connect the cluster to the rest of the graph.

    An edge with both ends in the cluster appears twice among the members'
    branches, an edge leading outside appears once.

    Returns:
        Boundary edges in first-seen order
    """
    counts = Counter(edge for vertex in cluster for edge in vertex.branches)
    return [edge for edge, count in counts.items() if count == 1]


def replace_edge(edge: Edge, cluster: Set[Vertex], centre: Vertex) -> Optional[Edge]:
    """
    Create an edge that connects the outside end of edge to the cluster centre.

    The replacement is registered as a branch of both of its endpoints. Its
    length is 0.0 until recomputed.

    Returns:
        The replacement edge, or None if neither endpoint is in the cluster
    """
    if edge.v1 in cluster:
        replacement = Edge(centre, edge.v2, None, 0.0)
    elif edge.v2 in cluster:
        replacement = Edge(edge.v1, centre, None, 0.0)
    else:
        return None
    replacement.v1.add_branch(replacement)
    replacement.v2.add_branch(replacement)
    return replacement


def map_replacement_edges(
    replacements: Dict[Edge, Edge],
    cluster: Set[Vertex],
    centre: Vertex,
    outer_edges: Iterable[Edge]
) -> None:
    """
    Map the boundary edges of a cluster to new edges that start from its centre.

    If a boundary edge was already replaced by another cluster's collapse,
    the latest replacement is re-routed instead of the original edge. An edge
    between two clusters thus ends up connecting the two centres.

    Args:
        replacements: Mapping from original edge to its replacement, updated in place
        cluster: Cluster members
        centre: Centroid vertex of the cluster
        outer_edges: Edges with exactly one end in the cluster
    """
    for outer_edge in outer_edges:
        old_edge = replacements.get(outer_edge, outer_edge)
        replacement = replace_edge(old_edge, cluster, centre)
        if replacement is not None:
            replacements[outer_edge] = replacement


def endpoints(edges: Iterable[Edge]) -> List[Vertex]:
    """Distinct endpoints of the edges, in order."""
    vertices = {}
    for edge in edges:
        vertices.setdefault(edge.v1, None)
        vertices.setdefault(edge.v2, None)
    return list(vertices)


def copy_lonely_vertices(source: Graph, target: Graph) -> None:
    """Add the vertices of source that have no branches to target."""
    target.add_vertices(v for v in source.vertices if v.is_lonely())


def remove_dangling_edges(graph: Graph) -> None:
    """Drop branches that are not edges of the graph from every vertex."""
    edge_set = set(graph.edges)
    for vertex in graph.vertices:
        vertex.branches = [e for e in vertex.branches if e in edge_set]


def collapse_clusters(
    graph: Graph,
    clusters: Sequence[Sequence[Vertex]],
    calibration: Sequence[float] = DEFAULT_CALIBRATION
) -> Tuple[Graph, Dict[Edge, Edge]]:
    """
    Collapse each cluster to a single centroid vertex.

    Edges inside a cluster are dropped, edges leading out of a cluster are
    replaced by new edges from the cluster centre, and edges that don't touch
    any cluster are kept as they are. Topology not connected to the clusters
    is preserved, as are vertices with no edges.

    The branch lists of the given graph's vertices are modified, so pass a
    working copy.

    Args:
        graph: Graph with valid edge lengths
        clusters: Disjoint vertex clusters
        calibration: Voxel size along x, y and z, for the replacement edge lengths

    Returns:
        Tuple of (clean_graph, replacements) where:
        - clean_graph: New graph with the clusters collapsed
        - replacements: Dict mapping each boundary edge to its replacement
    """
    cluster_sets = [set(cluster) for cluster in clusters]
    cluster_of = {vertex: i for i, cluster in enumerate(cluster_sets) for vertex in cluster}

    # Boundary edges must be found before replace_edge adds branches
    outer_edges = [find_edges_with_one_end_in_cluster(cluster) for cluster in clusters]
    centres = [cluster_centre(cluster) for cluster in clusters]

    replacements: Dict[Edge, Edge] = {}
    for cluster, centre, outer in zip(cluster_sets, centres, outer_edges):
        map_replacement_edges(replacements, cluster, centre, outer)

    connecting_edges = list(replacements.values())
    for edge in connecting_edges:
        update_edge_length(edge, calibration)

    def is_inner_edge(edge: Edge) -> bool:
        c1 = cluster_of.get(edge.v1)
        return c1 is not None and c1 == cluster_of.get(edge.v2)

    kept_edges = [e for e in graph.edges if e not in replacements and not is_inner_edge(e)]

    clean_graph = Graph()
    clean_graph.edges = kept_edges + connecting_edges
    clean_graph.add_vertices(centres)
    clean_graph.add_vertices(endpoints(kept_edges))
    clean_graph.add_vertices(endpoints(connecting_edges))
    copy_lonely_vertices(graph, clean_graph)
    remove_dangling_edges(clean_graph)

    logger.debug("collapse_clusters: %d clusters, %d edges kept, %d edges re-routed, %d -> %d vertices",
                len(clusters), len(kept_edges), len(connecting_edges),
                len(graph.vertices), len(clean_graph.vertices))
    return clean_graph, replacements


def collapse_all_clusters(
    graph: Graph,
    tolerance: float,
    calibration: Sequence[float] = DEFAULT_CALIBRATION
) -> Graph:
    """
    Collapse every maximal cluster of short edges in one go.

    Args:
        graph: Working graph with valid edge lengths (branch lists are modified)
        tolerance: Edges shorter than this are merged
        calibration: Voxel size along x, y and z

    Returns:
        New graph with each cluster replaced by its centroid vertex
    """
    clusters = find_clusters(graph, tolerance)
    clean_graph, _ = collapse_clusters(graph, clusters, calibration)
    return clean_graph


def collapse_short_edges_sequentially(
    graph: Graph,
    tolerance: float,
    calibration: Sequence[float] = DEFAULT_CALIBRATION
) -> Graph:
    """
    Collapse the short edges of the graph one at a time.

    The short edges that aren't dead ends are listed up front. Each is
    collapsed as a two-vertex cluster; later entries of the list that were
    re-routed by the collapse are swapped for their replacements. An entry
    that is no longer in the graph (it ended up inside an earlier collapse)
    is skipped. The result depends on the edge order.

    Args:
        graph: Working graph with valid edge lengths (branch lists are modified)
        tolerance: Edges shorter than this are merged
        calibration: Voxel size along x, y and z

    Returns:
        New graph with the short edges collapsed
    """
    current = graph
    short_edges = [e for e in current.edges if is_short_edge(e, tolerance) and not is_dead_end_edge(e)]
    collapsed = 0
    current_edges = set(current.edges)

    for i, edge in enumerate(short_edges):
        if edge not in current_edges:
            logger.debug("collapse_short_edges_sequentially: edge %d no longer in graph, skipping", i)
            continue
        current, replacements = collapse_clusters(current, [[edge.v1, edge.v2]], calibration)
        current_edges = set(current.edges)
        collapsed += 1
        for j in range(i + 1, len(short_edges)):
            if short_edges[j] in replacements:
                short_edges[j] = replacements[short_edges[j]]

    logger.debug("collapse_short_edges_sequentially: collapsed %d of %d short edges",
                collapsed, len(short_edges))
    return current
