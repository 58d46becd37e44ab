"""Clean short edges from a skeleton graph: loops, parallel edges, dead ends and clusters."""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from pathlib import Path
import ast
import logging
import math
import numbers
import time
from .graph import Graph
from .geometry import normalize_calibration, update_edge_length
from .sanitize import remove_loops, remove_parallel_edges
from .dead_ends import prune_dead_ends
from .clusters import ClusterStrategy
from .collapse import collapse_all_clusters, collapse_short_edges_sequentially
from .schemas import CleaningParameters, CulledEdgePercentages

logger = logging.getLogger(__name__)

CLEANING_STEPS = {
    ClusterStrategy.WHOLE_GRAPH: collapse_all_clusters,
    ClusterStrategy.SEQUENTIAL_EDGES: collapse_short_edges_sequentially,
}


def _check_inputs(graph: Any, tolerance: Any) -> None:
    if graph is None:
        raise ValueError("Cannot clean short edges: graph is None")
    if not isinstance(graph, Graph):
        raise ValueError(f"Cannot clean short edges: expected a Graph, got {type(graph).__name__}")
    if isinstance(tolerance, bool) or not isinstance(tolerance, numbers.Real):
        raise ValueError(f"Tolerance must be a number, got {tolerance!r}")
    if not math.isfinite(tolerance) or tolerance < 0:
        raise ValueError(f"Tolerance must be a finite, non-negative length, got {tolerance!r}")


def clean_short_edges(
    graph: Graph,
    tolerance: float,
    calibration: Optional[Sequence[float]] = None,
    iterative_pruning: bool = False,
    use_clusters: bool = True
) -> Tuple[Graph, CulledEdgePercentages]:
    """
    Clean short edges from a skeleton graph.

    Steps:
    1. Copy the graph; the input is never modified
    2. Remove loops and parallel edges, recompute edge lengths
    3. Prune short dead ends (exactly one endpoint with a single branch)
    4. Collapse clusters of short edges into centroid vertices
    5. Remove parallel edges created by the collapse
    Steps 3-5 repeat while iterative_pruning is set and the vertex count keeps shrinking.

    Args:
        graph: Skeleton graph to clean
        tolerance: Edges shorter than this are cleaned (calibrated units)
        calibration: Voxel size along x, y and z. Defaults to (1, 1, 1) if None or
                     shorter than three elements.
        iterative_pruning: If True, repeat until no more vertices are removed, otherwise a single pass
        use_clusters: If True, collapse connected clusters of short edges together,
                      otherwise collapse one short edge at a time (order-dependent)

    Returns:
        Tuple of (clean_graph, percentages) where:
        - clean_graph: New graph, independent of the input
        - percentages: Share of the original edges removed by each step

    Raises:
        ValueError: If graph is None or tolerance is negative or not finite
    """
    _check_inputs(graph, tolerance)
    calibration = normalize_calibration(calibration)
    strategy = ClusterStrategy.from_flag(use_clusters)
    cleaning_step = CLEANING_STEPS[strategy]
    start_time = time.time()

    working = graph.clone()
    total_edges = len(working.edges)
    loops = remove_loops(working)
    parallel = remove_parallel_edges(working)
    for edge in working.edges:
        update_edge_length(edge, calibration)

    dead_ends = 0
    cluster_edges = 0
    passes = 0
    while True:
        passes += 1
        start_size = len(working.vertices)
        dead_ends += prune_dead_ends(working, tolerance)
        edges_before = len(working.edges)
        clean_graph = cleaning_step(working, tolerance, calibration)
        remove_parallel_edges(clean_graph)
        cluster_edges += edges_before - len(clean_graph.edges)
        working = clean_graph
        logger.debug("clean_short_edges: pass %d, %d -> %d vertices, %d edges",
                    passes, start_size, len(working.vertices), len(working.edges))
        if not iterative_pruning or start_size == len(working.vertices):
            break

    percentages = CulledEdgePercentages.from_counts(total_edges, loops, parallel, dead_ends, cluster_edges)
    logger.info(
        "Cleaned graph with tolerance %.3f (%s, %d pass(es)) in %.2fs: %d -> %d vertices, %d -> %d edges "
        "(%d loops, %d parallel, %d dead ends, %d cluster edges removed)",
        tolerance, strategy.value, passes, time.time() - start_time,
        len(graph.vertices), len(working.vertices), total_edges, len(working.edges),
        loops, parallel, dead_ends, cluster_edges
    )
    return working, percentages


def clean_with_parameters(
    graph: Graph,
    parameters: CleaningParameters
) -> Tuple[Graph, CulledEdgePercentages]:
    """Run clean_short_edges with the settings of a CleaningParameters model."""
    return clean_short_edges(
        graph,
        parameters.tolerance,
        calibration=parameters.calibration,
        iterative_pruning=parameters.iterative_pruning,
        use_clusters=parameters.use_clusters,
    )


def load_cleaning_parameters(
    param_path: Union[str, Path],
    **overrides: Any
) -> CleaningParameters:
    """
    Load cleaning parameters from a text file.

    The file has one "parameter_name = value" per line; blank lines and lines
    starting with # are skipped. Values are Python literals (1e2, [0.5, 0.5, 1.0], True).
    Lines that fail to parse and unknown names are logged and ignored.

    Args:
        param_path: Path to the parameter file
        **overrides: Values that take precedence over the file

    Returns:
        Validated CleaningParameters

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the resulting parameters are invalid
    """
    param_path = Path(param_path)
    if not param_path.exists():
        raise FileNotFoundError(f"Parameter file not found: {param_path}")

    logger.info(f"Loading parameters from: {param_path}")
    params: Dict[str, Any] = {}
    known = set(CleaningParameters.model_fields)
    with open(param_path, 'r') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                logger.warning(f"  Ignoring line {line_num} without '=': {line}")
                continue

            name, value_str = (part.strip() for part in line.split('=', 1))
            if name not in known:
                logger.warning(f"  Unknown parameter on line {line_num}: {name}")
                continue
            try:
                params[name] = ast.literal_eval(value_str)
                logger.debug(f"  Loaded {name} = {params[name]}")
            except (ValueError, SyntaxError) as e:
                logger.warning(f"  Failed to parse parameter on line {line_num}: {line} ({e})")

    params.update(overrides)
    return CleaningParameters(**params)


def select_largest_graph(graphs: Sequence[Graph]) -> Graph:
    """Return the graph with the most vertices, or an empty graph if there are none."""
    if not graphs:
        return Graph()
    return max(graphs, key=lambda g: len(g.vertices))


def clean_largest_graph(
    graphs: Sequence[Graph],
    tolerance: float,
    calibration: Optional[Sequence[float]] = None,
    iterative_pruning: bool = False,
    use_clusters: bool = True
) -> Tuple[Graph, CulledEdgePercentages]:
    """
    Clean the largest of several skeleton graphs.

    An image can have several disconnected skeletons; only the one with the
    most vertices is cleaned.
    """
    if len(graphs) > 1:
        logger.warning("Image has %d skeletons - processing the largest", len(graphs))
    largest = select_largest_graph(graphs)
    return clean_short_edges(
        largest,
        tolerance,
        calibration=calibration,
        iterative_pruning=iterative_pruning,
        use_clusters=use_clusters,
    )


def clean_graphs(
    graphs: List[Graph],
    parameters: CleaningParameters
) -> List[Tuple[Graph, CulledEdgePercentages]]:
    """Clean each graph independently with the same parameters."""
    return [clean_with_parameters(graph, parameters) for graph in graphs]
