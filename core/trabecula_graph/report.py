"""Result tables for a cleaned graph."""

from typing import Dict, List, Optional
import logging
from .graph import Graph
from .geometry import centroid
from .schemas import CulledEdgePercentages, EdgeCentroidRow

logger = logging.getLogger(__name__)


def culled_edge_table(percentages: CulledEdgePercentages) -> Optional[Dict[str, float]]:
    """
    Percentages of culled edges by type, keyed by column title.

    Returns:
        Dict of column title -> percentage, or None if the graph had no edges
    """
    if percentages.total_edges <= 0:
        return None
    return {
        "Loop edges (%)": percentages.loop_edges,
        "Repeated edges (%)": percentages.parallel_edges,
        "Short edges (%)": percentages.cluster_edges,
        "Dead end edges (%)": percentages.dead_end_edges,
    }


def edge_centroid_table(graph: Graph) -> List[EdgeCentroidRow]:
    """Centroids of the vertices at both ends of each edge, in edge order."""
    rows = []
    for edge in graph.edges:
        c1 = centroid(edge.v1.points)
        c2 = centroid(edge.v2.points)
        rows.append(EdgeCentroidRow(
            v1x=c1[0], v1y=c1[1], v1z=c1[2],
            v2x=c2[0], v2y=c2[1], v2z=c2[2],
        ))
    logger.debug("edge_centroid_table: %d rows", len(rows))
    return rows
