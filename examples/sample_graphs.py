#!/usr/bin/env python3
"""Small skeleton graphs with known geometry for the cleaning tests."""

import math
import random
from typing import List, Sequence, Tuple
from trabecula_graph.graph import Edge, Graph, Point, Vertex, create_graph


def make_vertices(*coords: Tuple[int, int, int]) -> List[Vertex]:
    """One vertex per coordinate, each with a single point."""
    return [Vertex(points=[Point(*c)]) for c in coords]


def create_sail_graph() -> Graph:
    """
    2
    |\\
    | |
    | \\
    0--1
    |
    3
    """
    v = make_vertices((0, 0, 0), (2, 0, 0), (0, 3, 0), (0, -1, 0))
    edges = [
        Edge(v[0], v[1], None, 2.0),
        Edge(v[0], v[2], None, 3.0),
        Edge(v[1], v[2], None, math.sqrt(13.0)),
        Edge(v[0], v[3], None, 1.0),
    ]
    return create_graph(edges, v)


def create_loop_graph() -> Graph:
    """
    Triangle with a zero length loop ("o") on vertex 0

      o
      0
     / \\
    1---2
    """
    v = make_vertices((0, 0, 0), (-1, -1, 0), (1, -1, 0))
    edges = [
        Edge(v[0], v[0], None, 0.0),
        Edge(v[0], v[1], None, 1.0),
        Edge(v[0], v[2], None, 1.0),
        Edge(v[1], v[2], None, 2.0),
    ]
    return create_graph(edges, v)


def create_arch_with_slabs_graph() -> Graph:
    """
    Single edge between two vertices (v) with slab points (s) bending above them

      ss
     s  s
    v    v
    """
    v = make_vertices((0, 0, 0), (5, 0, 0))
    slabs = [Point(1, 1, 0), Point(2, 2, 0), Point(3, 2, 0), Point(4, 1, 0)]
    edge = Edge(v[0], v[1], slabs, 4 * math.sqrt(2.0) + 1)
    return create_graph([edge], v)


def create_triangle_with_square_cluster() -> Graph:
    """
    Triangle whose bottom-left corner is a square of short edges with one diagonal

                4
              _/|
        3--2_/  |
        |\\_|    |
       _0--1    |
     _/         |
    /           |
    5-----------6
    """
    v = make_vertices((-1, -1, 0), (-1, 1, 0), (1, 1, 0), (1, -1, 0), (5, 4, 0), (-4, -5, 0), (5, -5, 0))
    edges = [
        Edge(v[0], v[1], None, 2.0),
        Edge(v[1], v[2], None, 2.0),
        Edge(v[2], v[3], None, 2.0),
        Edge(v[3], v[0], None, 2.0),
        Edge(v[1], v[3], None, 2.0 * math.sqrt(2.0)),
        Edge(v[2], v[4], None, 5.0),
        Edge(v[0], v[5], None, 5.0),
        Edge(v[4], v[6], None, 9.0),
        Edge(v[5], v[6], None, 9.0),
    ]
    return create_graph(edges, v)


def create_triangle_with_square_cluster_and_artefacts() -> Graph:
    """
    The triangle with a square cluster plus three loops, two parallel edges
    (4-6 both ways, 5-6 twice) and a dead end 6-7. 15 edges in total.
    """
    v = make_vertices(
        (-1, -1, 0), (-1, 1, 0), (1, 1, 0), (1, -1, 0), (5, 4, 0), (-4, -5, 0), (5, -5, 0), (7, -5, 0)
    )
    edges = [
        Edge(v[0], v[1], None, 2.0),
        Edge(v[1], v[2], None, 2.0),
        Edge(v[2], v[3], None, 2.0),
        Edge(v[3], v[0], None, 2.0),
        Edge(v[1], v[3], None, 2.0 * math.sqrt(2.0)),
        Edge(v[2], v[4], None, 5.0),
        Edge(v[0], v[5], None, 5.0),
        Edge(v[4], v[6], None, 9.0),
        Edge(v[6], v[4], None, 9.0),  # opposite-way parallel edge
        Edge(v[5], v[6], None, 9.0),
        Edge(v[5], v[6], None, 9.0),  # same-way parallel edge
        Edge(v[6], v[7], None, 2.0),  # dead end
        Edge(v[5], v[5], None, 9.0),  # loop
        Edge(v[6], v[6], None, 9.0),  # loop
        Edge(v[4], v[4], None, 9.0),  # loop
    ]
    return create_graph(edges, v)


def create_frame_graph() -> Graph:
    """
    Three unit edges along the axes from the origin ("frame" as in coordinate frame)

    z
    |  y
    | /
    |/
    o-----x
    """
    v = make_vertices((0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1))
    edges = [Edge(v[0], v[1], None, 1.0), Edge(v[0], v[2], None, 1.0), Edge(v[0], v[3], None, 1.0)]
    return create_graph(edges, v)


def create_dumbbell_graph() -> Graph:
    """
    Two triangles of short edges joined by a long edge 1-3

    2      5
     \\    /
      1--3
     /    \\
    0      4
    """
    v = make_vertices((0, -1, 0), (1, 0, 0), (0, 1, 0), (4, 0, 0), (5, -1, 0), (5, 1, 0))
    edges = [
        Edge(v[0], v[1], None, math.sqrt(2.0)),
        Edge(v[0], v[2], None, 2.0),
        Edge(v[1], v[2], None, math.sqrt(2.0)),
        Edge(v[3], v[4], None, math.sqrt(2.0)),
        Edge(v[4], v[5], None, 2.0),
        Edge(v[5], v[3], None, math.sqrt(2.0)),
        Edge(v[1], v[3], None, 3.0),
    ]
    return create_graph(edges, v)


def create_kite_graph() -> Graph:
    """
          ______4
        _/     _/
       /      /
     _/     _/
    2     _3
    |   _/
    0--1
    """
    v = make_vertices((0, 0, 0), (1, 0, 0), (0, 1, 0), (2, 2, 0), (5, 5, 0))
    edges = [
        Edge(v[0], v[1], None, 1.0),
        Edge(v[0], v[2], None, 1.0),
        Edge(v[1], v[3], None, math.sqrt(5.0)),
        Edge(v[2], v[3], None, math.sqrt(5.0)),
        Edge(v[3], v[4], None, 3 * math.sqrt(2.0)),
    ]
    return create_graph(edges, v)


def create_doorknob_graph() -> Graph:
    """
    A junction split in two (B, C) by a short edge. Collapsing B-C moves the
    junction next to L, which becomes a short dead end on the next pass.

            L
            |
    A-----B-C-----F
    """
    v = make_vertices((0, 0, 0), (3, 0, 0), (5, 0, 0), (8, 0, 0), (4, 2, 0))
    a, b, c, f, l = v
    edges = [
        Edge(a, b, None, 3.0),
        Edge(b, c, None, 2.0),
        Edge(c, f, None, 3.0),
        Edge(c, l, None, math.sqrt(5.0)),
    ]
    return create_graph(edges, v)


def create_straight_line_segments_graph() -> Graph:
    """
    Path P0-P1-P2-P3-P4 along x with two short inner edges

    P0----------P1-P2-P3----------P4
    """
    v = make_vertices((0, 0, 0), (10, 0, 0), (12, 0, 0), (14, 0, 0), (24, 0, 0))
    edges = [
        Edge(v[0], v[1], None, 10.0),
        Edge(v[1], v[2], None, 2.0),
        Edge(v[2], v[3], None, 2.0),
        Edge(v[3], v[4], None, 10.0),
    ]
    return create_graph(edges, v)


def create_short_triangle_with_tails_graph() -> Graph:
    """
    Triangle X-Y-Z of short edges with a long tail on X and on Z

    W
    |
    Z
    |\\
    V-----X-Y
    """
    v = make_vertices((-10, 0, 0), (0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 10, 0))
    vv, x, y, z, w = v
    edges = [
        Edge(vv, x, None, 10.0),
        Edge(x, y, None, 1.0),
        Edge(x, z, None, 1.0),
        Edge(y, z, None, math.sqrt(2.0)),
        Edge(z, w, None, 9.0),
    ]
    return create_graph(edges, v)


def create_random_graph(
    n_vertices: int,
    n_edges: int,
    seed: int,
    size: int = 20,
    n_lonely: int = 2
) -> Graph:
    """
    Random graph with junction vertices of 1-3 voxels, loops, parallel edges and lonely vertices.

    Edge lengths are left at 0.0; clean_short_edges recomputes them.
    """
    rng = random.Random(seed)

    def random_point() -> Point:
        return Point(rng.randrange(size), rng.randrange(size), rng.randrange(size))

    vertices = [Vertex(points=[random_point() for _ in range(rng.randint(1, 3))]) for _ in range(n_vertices)]
    edges = []
    for _ in range(n_edges):
        a = rng.choice(vertices)
        b = a if rng.random() < 0.05 else rng.choice(vertices)
        slabs = [random_point() for _ in range(rng.randint(0, 3))]
        edges.append(Edge(a, b, slabs, 0.0))
        if rng.random() < 0.1:
            edges.append(Edge(b, a, None, 0.0))
    lonely = [Vertex(points=[random_point()]) for _ in range(n_lonely)]
    return create_graph(edges, vertices + lonely)


def invariant_violations(graph: Graph) -> List[str]:
    """Describe every way the graph breaks the clean graph invariants (empty if it holds)."""
    problems = []
    vertex_set = set(graph.vertices)
    edge_set = set(graph.edges)
    if len(vertex_set) != len(graph.vertices):
        problems.append("duplicate vertices")
    if len(edge_set) != len(graph.edges):
        problems.append("duplicate edges")

    pairs = set()
    for i, edge in enumerate(graph.edges):
        if edge.v1 is edge.v2:
            problems.append(f"edge {i} is a loop")
        if edge.v1 not in vertex_set or edge.v2 not in vertex_set:
            problems.append(f"edge {i} has an endpoint outside the graph")
        key = frozenset((id(edge.v1), id(edge.v2)))
        if key in pairs:
            problems.append(f"edge {i} is parallel to another edge")
        pairs.add(key)

    for i, vertex in enumerate(graph.vertices):
        touching = [e for e in graph.edges if e.v1 is vertex or e.v2 is vertex]
        if len(vertex.branches) != len(touching) or set(vertex.branches) != set(touching):
            problems.append(f"vertex {i} branches don't match its edges")
    return problems


def snapshot(graph: Graph) -> Tuple:
    """Hashable description of a graph's structure, for checking it wasn't modified."""
    index = {v: i for i, v in enumerate(graph.vertices)}
    edge_index = {e: i for i, e in enumerate(graph.edges)}
    vertices = tuple(
        (tuple(v.points), tuple(edge_index.get(b, -1) for b in v.branches)) for v in graph.vertices
    )
    edges = tuple(
        (index.get(e.v1, -1), index.get(e.v2, -1), tuple(e.slabs or ()), e.length) for e in graph.edges
    )
    return vertices, edges


def all_points(graph: Graph) -> Sequence[Point]:
    return [p for v in graph.vertices for p in v.points]
