"""Pydantic models for cleaning parameters and results."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
import math
from .geometry import normalize_calibration


class CleaningParameters(BaseModel):
    """Parameters of a short-edge cleaning run."""
    tolerance: float = Field(ge=0.0, allow_inf_nan=False)  # Edges shorter than this are cleaned
    calibration: Optional[List[float]] = Field(default=None, validate_default=True)  # Voxel size along x, y, z
    iterative_pruning: bool = False  # Repeat until the vertex count stops changing
    use_clusters: bool = True  # Whole-graph clusters vs. one short edge at a time

    @field_validator("calibration")
    @classmethod
    def _default_calibration(cls, value: Optional[List[float]]) -> List[float]:
        return list(normalize_calibration(value))


class CulledEdgePercentages(BaseModel):
    """Share of the original edges removed by each cleaning step, in percent."""
    total_edges: int = -1
    loop_edges: float = math.nan
    parallel_edges: float = math.nan
    dead_end_edges: float = math.nan
    cluster_edges: float = math.nan

    @classmethod
    def from_counts(
        cls,
        total_edges: int,
        loops: int,
        parallel: int,
        dead_ends: int,
        cluster_edges: int
    ) -> "CulledEdgePercentages":
        """Convert removal counts to percentages of total_edges (NaN if total_edges is 0)."""
        def percentage(count: int) -> float:
            if total_edges == 0:
                return math.nan
            return count / float(total_edges) * 100.0

        return cls(
            total_edges=total_edges,
            loop_edges=percentage(loops),
            parallel_edges=percentage(parallel),
            dead_end_edges=percentage(dead_ends),
            cluster_edges=percentage(cluster_edges),
        )


class EdgeCentroidRow(BaseModel):
    """Centroids of the two endpoint vertices of an edge."""
    v1x: float
    v1y: float
    v1z: float
    v2x: float
    v2y: float
    v2z: float
