"""Skeleton graph data model: voxel points, junction vertices and branch edges."""

from typing import Dict, Iterable, List, NamedTuple, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


class Point(NamedTuple):
    """Integer voxel coordinate."""
    x: int
    y: int
    z: int


@dataclass(eq=False)
class Vertex:
    """
    Junction or end point of the skeleton.

    Vertices compare by identity: two vertices with the same points are still different vertices.
    """
    points: List[Point] = field(default_factory=list)
    branches: List["Edge"] = field(default_factory=list)  # Incident edges

    def add_branch(self, edge: "Edge") -> None:
        self.branches.append(edge)

    def remove_branch(self, edge: "Edge") -> None:
        """Remove one occurrence of edge from the branches, if present."""
        for i, branch in enumerate(self.branches):
            if branch is edge:
                del self.branches[i]
                return

    def is_lonely(self) -> bool:
        return not self.branches

    def __repr__(self) -> str:
        return f"Vertex(points={self.points!r}, degree={len(self.branches)})"


@dataclass(eq=False)
class Edge:
    """
    Undirected branch between two vertices.

    The endpoints of an edge are never changed once it is created; a re-routed
    edge is a new Edge object. Only the length is updated in place.
    """
    v1: Vertex
    v2: Vertex
    slabs: Optional[List[Point]] = None  # Skeleton voxels along the branch
    length: float = 0.0

    def opposite_vertex(self, vertex: Vertex) -> Optional[Vertex]:
        """Return the other endpoint, or None if vertex is not an endpoint."""
        if vertex is self.v1:
            return self.v2
        if vertex is self.v2:
            return self.v1
        return None

    def __repr__(self) -> str:
        return f"Edge(v1={self.v1.points!r}, v2={self.v2.points!r}, length={self.length:.3f})"


def is_loop(edge: Edge) -> bool:
    """True if the edge connects a vertex to itself."""
    return edge.v1 is edge.v2


class Graph:
    """Vertices and edges of one connected skeleton."""

    def __init__(self):
        self.vertices: List[Vertex] = []
        self.edges: List[Edge] = []

    def add_vertex(self, vertex: Vertex) -> None:
        """Add a vertex unless it is already in the graph."""
        if not any(v is vertex for v in self.vertices):
            self.vertices.append(vertex)

    def add_vertices(self, vertices: Iterable[Vertex]) -> None:
        present = set(self.vertices)
        for vertex in vertices:
            if vertex not in present:
                self.vertices.append(vertex)
                present.add(vertex)

    def add_edge(self, edge: Edge) -> None:
        """Add an edge and register it as a branch of both endpoints."""
        self.edges.append(edge)
        edge.v1.add_branch(edge)
        edge.v2.add_branch(edge)

    def clone(self) -> "Graph":
        """
        Deep copy of the graph.

        Vertices, edges, point lists and slab lists are all new objects, and
        each vertex's branches keep their order. Vertices that edges reference
        but the graph doesn't list are copied and appended to the clone's
        vertices, after the listed ones.
        """
        vertex_map: Dict[Vertex, Vertex] = {}

        def copy_vertex(vertex: Vertex) -> Vertex:
            if vertex not in vertex_map:
                vertex_map[vertex] = Vertex(points=list(vertex.points))
            return vertex_map[vertex]

        for vertex in self.vertices:
            copy_vertex(vertex)

        edge_map: Dict[Edge, Edge] = {}
        for edge in self.edges:
            slabs = list(edge.slabs) if edge.slabs is not None else None
            edge_map[edge] = Edge(copy_vertex(edge.v1), copy_vertex(edge.v2), slabs, edge.length)

        for vertex, copy in vertex_map.items():
            copy.branches = [edge_map[b] for b in vertex.branches if b in edge_map]

        clone = Graph()
        clone.vertices = list(vertex_map.values())
        missing = len(vertex_map) - len(set(self.vertices))
        if missing:
            logger.debug("clone: added %d edge endpoints missing from the vertex list", missing)
        clone.edges = [edge_map[e] for e in self.edges]
        return clone

    def __repr__(self) -> str:
        return f"Graph(vertices={len(self.vertices)}, edges={len(self.edges)})"


def create_graph(edges: Iterable[Edge], vertices: Iterable[Vertex]) -> Graph:
    """
    Create a graph from edges and vertices.

    Edges are registered as branches of their endpoints.
    """
    graph = Graph()
    for edge in edges:
        graph.add_edge(edge)
    graph.add_vertices(vertices)
    return graph
