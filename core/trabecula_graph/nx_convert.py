"""Convert between NetworkX skeleton graphs (sknw layout) and Graph."""

from typing import Any, Dict, List, Optional
import networkx as nx
import numpy as np
import logging
from .graph import Edge, Graph, Point, Vertex
from .geometry import centroid

logger = logging.getLogger(__name__)


def _to_points(coords: Any) -> List[Point]:
    """Convert an (N, 2) or (N, 3) coordinate array to voxel points. 2D points get z = 0."""
    array = np.asarray(coords)
    if array.size == 0:
        return []
    if array.ndim == 1:
        array = array.reshape(1, -1)
    array = np.rint(array).astype(int)
    if array.shape[1] == 2:
        array = np.column_stack([array, np.zeros(len(array), dtype=int)])
    elif array.shape[1] != 3:
        raise ValueError(f"Expected 2D or 3D coordinates, got shape {array.shape}")
    return [Point(int(x), int(y), int(z)) for x, y, z in array]


def graph_from_networkx(
    nx_graph: nx.Graph,
    points_key: str = "pts",
    slabs_key: str = "pts",
    length_key: str = "weight"
) -> Graph:
    """
    Build a Graph from a NetworkX skeleton graph.

    Nodes carry their junction voxels in the points_key attribute, edges carry
    the voxels along the branch in slabs_key and an optional length in
    length_key, as produced by sknw.build_sknw. MultiGraphs keep their
    parallel edges and self-loops, which clean_short_edges then removes.

    Args:
        nx_graph: NetworkX Graph or MultiGraph
        points_key: Node attribute with the node's (N, 2|3) voxel coordinates
        slabs_key: Edge attribute with the branch's voxel coordinates
        length_key: Edge attribute with the branch length (0.0 if missing)

    Returns:
        Graph with one vertex per node and one edge per NetworkX edge

    Raises:
        ValueError: If a node has no points_key attribute
    """
    vertices: Dict[Any, Vertex] = {}
    for node, data in nx_graph.nodes(data=True):
        if points_key not in data:
            raise ValueError(f"Node {node!r} has no '{points_key}' attribute")
        vertices[node] = Vertex(points=_to_points(data[points_key]))

    edges = []
    for u, v, data in nx_graph.edges(data=True):
        slabs: Optional[List[Point]] = None
        if slabs_key in data:
            slabs = _to_points(data[slabs_key])
        length = float(data.get(length_key, 0.0))
        edges.append(Edge(vertices[u], vertices[v], slabs, length))

    graph = Graph()
    graph.vertices = list(vertices.values())
    for edge in edges:
        graph.add_edge(edge)
    logger.debug("graph_from_networkx: %d vertices, %d edges", len(graph.vertices), len(graph.edges))
    return graph


def graphs_from_networkx(nx_graph: nx.Graph, **kwargs: Any) -> List[Graph]:
    """Build one Graph per connected component, largest component first."""
    components = sorted(nx.connected_components(nx_graph), key=len, reverse=True)
    return [graph_from_networkx(nx_graph.subgraph(c), **kwargs) for c in components]


def graph_to_networkx(graph: Graph) -> nx.Graph:
    """
    Convert a Graph to a NetworkX graph in the sknw layout.

    Nodes are numbered in vertex order and get 'pts' (voxel array) and 'o'
    (centroid) attributes; edges get 'pts' (slab array) and 'weight' (length).
    Parallel edges collapse onto one NetworkX edge, so clean the graph first.
    """
    nx_graph = nx.Graph()
    ids = {}
    for i, vertex in enumerate(graph.vertices):
        ids[vertex] = i
        pts = np.array(vertex.points, dtype=int).reshape(-1, 3)
        nx_graph.add_node(i, pts=pts, o=centroid(vertex.points))

    for edge in graph.edges:
        slabs = edge.slabs if edge.slabs is not None else []
        nx_graph.add_edge(
            ids[edge.v1],
            ids[edge.v2],
            pts=np.array(slabs, dtype=int).reshape(-1, 3),
            weight=edge.length,
        )
    return nx_graph
