#!/usr/bin/env python3
"""Test the full short-edge cleaning pipeline."""

import math
import pytest
from trabecula_graph.graph import Edge, Graph, Point, Vertex, create_graph, is_loop
from trabecula_graph.geometry import centroid
from trabecula_graph.pipeline import (
    clean_largest_graph,
    clean_short_edges,
    clean_with_parameters,
    select_largest_graph,
)
from trabecula_graph.schemas import CleaningParameters
from sample_graphs import (
    all_points,
    create_arch_with_slabs_graph,
    create_doorknob_graph,
    create_dumbbell_graph,
    create_frame_graph,
    create_loop_graph,
    create_sail_graph,
    create_straight_line_segments_graph,
    create_triangle_with_square_cluster,
    create_triangle_with_square_cluster_and_artefacts,
    invariant_violations,
    make_vertices,
    snapshot,
)


def test_loops_are_removed():
    graph = create_loop_graph()

    clean, stats = clean_short_edges(graph, 0.0)

    assert len(clean.edges) == 3
    assert not any(is_loop(e) for e in clean.edges)
    assert stats.total_edges == 4
    assert stats.loop_edges == pytest.approx(100.0 / 4)
    assert invariant_violations(clean) == []


def test_parallel_pair_leaves_one_edge():
    a, b = make_vertices((0, 0, 0), (10, 0, 0))
    graph = create_graph([Edge(a, b), Edge(b, a)], [a, b])

    clean, stats = clean_short_edges(graph, 1.0)

    assert len(clean.vertices) == 2
    assert len(clean.edges) == 1
    assert clean.edges[0].length == pytest.approx(10.0)
    assert stats.parallel_edges == pytest.approx(50.0)
    assert invariant_violations(clean) == []


def test_dead_end_pruning_on_path():
    a, b, c = make_vertices((0, 0, 0), (1, 0, 0), (6, 0, 0))
    graph = create_graph([Edge(a, b), Edge(b, c)], [a, b, c])

    clean, stats = clean_short_edges(graph, 2.0)

    assert sorted(all_points(clean)) == [Point(1, 0, 0), Point(6, 0, 0)]
    assert len(clean.edges) == 1
    assert clean.edges[0].length == pytest.approx(5.0)
    assert stats.dead_end_edges == pytest.approx(50.0)
    assert invariant_violations(clean) == []


def test_isolated_short_edge_collapses_into_one_vertex():
    """Not a dead end (both ends are leaves), so it is merged as a cluster instead."""
    a, b = make_vertices((0, 0, 0), (2, 0, 0))
    graph = create_graph([Edge(a, b)], [a, b])

    for use_clusters in (True, False):
        clean, stats = clean_short_edges(graph, 3.0, use_clusters=use_clusters)

        assert clean.edges == []
        assert len(clean.vertices) == 1
        assert centroid(clean.vertices[0].points).tolist() == pytest.approx([1.0, 0.0, 0.0])
        assert stats.dead_end_edges == 0.0
        assert stats.cluster_edges == pytest.approx(100.0)


def test_star_of_dead_ends_leaves_the_centre():
    """The leaves of the star are dead ends and get pruned before clustering."""
    clean, stats = clean_short_edges(create_frame_graph(), 2.0)

    assert clean.edges == []
    assert len(clean.vertices) == 1
    assert clean.vertices[0].points == [Point(0, 0, 0)]
    assert stats.dead_end_edges == pytest.approx(100.0)


def test_boundary_edge_rerouted_in_pipeline():
    """A-B is short but neither end is a leaf; B-C and A-D are long."""
    a, b, c, d = make_vertices((0, 0, 0), (2, 0, 0), (1, 8, 0), (1, -8, 0))
    graph = create_graph([Edge(a, b), Edge(b, c), Edge(a, d)], [a, b, c, d])

    clean, stats = clean_short_edges(graph, 3.0)

    assert len(clean.vertices) == 3
    assert len(clean.edges) == 2
    assert [e.length for e in clean.edges] == pytest.approx([8.0, 8.0])
    assert stats.cluster_edges == pytest.approx(100.0 / 3)
    assert invariant_violations(clean) == []


def test_linear_length_ignores_slabs():
    graph = create_arch_with_slabs_graph()

    clean, _ = clean_short_edges(graph, 0)

    assert clean.edges[0].length == pytest.approx(5.0)
    assert clean.edges[0].slabs == graph.edges[0].slabs
    assert clean.edges[0].slabs is not graph.edges[0].slabs


def test_anisotropic_calibration():
    graph = create_sail_graph()

    clean, _ = clean_short_edges(graph, 0, calibration=[2.0, 5.0, 3.0])

    lengths = sorted(e.length for e in clean.edges)
    assert lengths == pytest.approx(sorted([4.0, 15.0, math.sqrt(241.0), 5.0]))


def test_short_calibration_uses_default():
    graph = create_sail_graph()

    clean, _ = clean_short_edges(graph, 0, calibration=[2.0, 5.0])

    lengths = sorted(e.length for e in clean.edges)
    assert lengths == pytest.approx(sorted([2.0, 3.0, math.sqrt(13.0), 1.0]))


def test_pruning_sail():
    clean, _ = clean_short_edges(create_sail_graph(), 1.01)

    assert len(clean.edges) == 3
    assert len(clean.vertices) == 3
    points = all_points(clean)
    for p in (Point(0, 0, 0), Point(0, 3, 0), Point(2, 0, 0)):
        assert points.count(p) == 1


def test_cleaning_triangle_with_square_cluster():
    clean, _ = clean_short_edges(create_triangle_with_square_cluster(), 2.01)

    assert len(clean.vertices) == 4
    assert len(clean.edges) == 4
    centre = max(clean.vertices, key=lambda v: len(v.points))
    assert len(centre.points) == 4
    assert centroid(centre.points).tolist() == pytest.approx([0.0, 0.0, 0.0])
    lengths = sorted(e.length for e in clean.edges)
    assert lengths == pytest.approx([math.sqrt(41.0), math.sqrt(41.0), 9.0, 9.0])
    assert invariant_violations(clean) == []


def test_reporting_of_percentages():
    graph = create_triangle_with_square_cluster_and_artefacts()

    clean, stats = clean_short_edges(graph, 2.01)

    assert stats.total_edges == 15
    assert stats.loop_edges == pytest.approx(3.0 / 15.0 * 100)
    assert stats.parallel_edges == pytest.approx(2.0 / 15.0 * 100)
    assert stats.dead_end_edges == pytest.approx(1.0 / 15.0 * 100)
    assert stats.cluster_edges == pytest.approx(5.0 / 15.0 * 100)
    assert len(clean.edges) == 4
    assert invariant_violations(clean) == []


def test_cluster_count_includes_parallel_edges_made_by_collapse():
    """Two leaves on the same side of a short edge end up parallel after the collapse."""
    a, b, c = make_vertices((0, 0, 0), (1, 0, 0), (0, 10, 0))
    graph = create_graph([Edge(a, b), Edge(a, c), Edge(b, c)], [a, b, c])

    clean, stats = clean_short_edges(graph, 2.0)

    assert len(clean.edges) == 1
    assert stats.cluster_edges == pytest.approx(2.0 / 3.0 * 100)
    assert stats.parallel_edges == 0.0
    assert invariant_violations(clean) == []


def test_iterative_pruning():
    once, _ = clean_short_edges(create_doorknob_graph(), 2.01, iterative_pruning=False)
    repeated, stats = clean_short_edges(create_doorknob_graph(), 2.01, iterative_pruning=True)

    assert len(once.vertices) == 4
    assert len(once.edges) == 3
    assert len(repeated.vertices) == 3
    assert len(repeated.edges) == 2
    assert stats.dead_end_edges == pytest.approx(25.0)
    assert stats.cluster_edges == pytest.approx(25.0)


def test_sequential_strategy():
    clean, _ = clean_short_edges(create_straight_line_segments_graph(), 2.01, use_clusters=False)

    assert len(clean.vertices) == 3
    assert [e.length for e in clean.edges] == pytest.approx([12.0, 12.0])
    assert invariant_violations(clean) == []


def test_dumbbell_collapses_to_one_edge():
    clean, stats = clean_short_edges(create_dumbbell_graph(), 2.01)

    assert len(clean.vertices) == 2
    assert len(clean.edges) == 1
    assert clean.edges[0].length == pytest.approx(13.0 / 3.0)
    assert stats.cluster_edges == pytest.approx(6.0 / 7.0 * 100)


def test_input_not_altered():
    graph = create_triangle_with_square_cluster_and_artefacts()
    before = snapshot(graph)

    clean, _ = clean_short_edges(graph, 2.01, iterative_pruning=True)

    assert snapshot(graph) == before
    assert set(clean.vertices).isdisjoint(graph.vertices)
    assert set(clean.edges).isdisjoint(graph.edges)


def test_lonely_vertex_returns_lonely_vertex():
    vertex = Vertex(points=[Point(3, 7, 11)])
    graph = create_graph([], [vertex])

    clean, stats = clean_short_edges(graph, 2.01)

    assert len(clean.vertices) == 1
    assert clean.vertices[0] is not vertex
    assert clean.vertices[0].points == [Point(3, 7, 11)]
    assert stats.total_edges == 0
    assert math.isnan(stats.loop_edges)


def test_cleaning_empty_graph():
    clean, stats = clean_short_edges(Graph(), 2.01)

    assert clean.vertices == []
    assert clean.edges == []
    assert math.isnan(stats.cluster_edges)


def test_edge_endpoint_missing_from_vertex_list():
    """C is only reachable through B-C; it is still cleaned like a listed vertex."""
    a, b, c = make_vertices((0, 0, 0), (1, 0, 0), (9, 0, 0))
    graph = create_graph([Edge(a, b), Edge(b, c)], [a, b])

    clean, _ = clean_short_edges(graph, 1.0)

    assert len(clean.vertices) == 3
    assert len(clean.edges) == 2
    assert Point(9, 0, 0) in all_points(clean)
    assert invariant_violations(clean) == []
    assert graph.vertices == [a, b]

    pruned, stats = clean_short_edges(graph, 2.0)

    assert sorted(all_points(pruned)) == [Point(1, 0, 0), Point(9, 0, 0)]
    assert [e.length for e in pruned.edges] == pytest.approx([8.0])
    assert stats.dead_end_edges == pytest.approx(50.0)


def test_zero_length_edge_from_coincident_points():
    a, b, c = make_vertices((0, 0, 0), (0, 0, 0), (9, 0, 0))
    d = Vertex(points=[Point(0, 9, 0)])
    graph = create_graph([Edge(a, b), Edge(b, c), Edge(a, d)], [a, b, c, d])

    clean, _ = clean_short_edges(graph, 0.5)

    assert len(clean.vertices) == 3
    assert invariant_violations(clean) == []


@pytest.mark.parametrize("graph", [None, "graph", []])
def test_invalid_graph_fails_fast(graph):
    with pytest.raises(ValueError):
        clean_short_edges(graph, 1.0)


@pytest.mark.parametrize("tolerance", [-1.0, float("nan"), float("inf"), None, "1.0"])
def test_invalid_tolerance_fails_fast(tolerance):
    with pytest.raises(ValueError):
        clean_short_edges(create_sail_graph(), tolerance)


def test_clean_with_parameters():
    params = CleaningParameters(tolerance=2.01, iterative_pruning=True)

    clean, _ = clean_with_parameters(create_doorknob_graph(), params)

    assert len(clean.vertices) == 3


def test_select_largest_graph():
    small = create_loop_graph()
    large = create_triangle_with_square_cluster()

    assert select_largest_graph([small, large]) is large
    assert select_largest_graph([]).vertices == []


def test_clean_largest_graph():
    clean, stats = clean_largest_graph([create_loop_graph(), create_triangle_with_square_cluster()], 2.01)

    assert stats.total_edges == 9
    assert len(clean.vertices) == 4


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
