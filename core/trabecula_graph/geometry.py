"""Centroids and calibrated distances of voxel point sets."""

from typing import Iterable, Optional, Sequence, Tuple
import numpy as np
import logging

logger = logging.getLogger(__name__)

DEFAULT_CALIBRATION = (1.0, 1.0, 1.0)


def normalize_calibration(calibration: Optional[Sequence[float]]) -> Tuple[float, float, float]:
    """
    Return a 3-element voxel calibration.

    A missing calibration, or one with fewer than three elements, is replaced
    with the isotropic default (1, 1, 1) instead of raising. Extra elements are ignored.

    Args:
        calibration: Physical voxel size along x, y and z, or None

    Returns:
        Tuple of (x, y, z) voxel sizes
    """
    if calibration is None or len(calibration) < 3:
        logger.debug("normalize_calibration: got %r, using default %r", calibration, DEFAULT_CALIBRATION)
        return DEFAULT_CALIBRATION
    return (float(calibration[0]), float(calibration[1]), float(calibration[2]))


def centroid(points: Iterable[Sequence[float]]) -> np.ndarray:
    """
    Compute the arithmetic mean of a set of 3D points.

    Args:
        points: Voxel coordinates, each (x, y, z)

    Returns:
        (3,) float array. NaN coordinates if points is empty.
    """
    coords = np.asarray(list(points), dtype=float).reshape(-1, 3)
    if len(coords) == 0:
        return np.full(3, np.nan)
    return coords.mean(axis=0)


def calibrated_distance(
    c1: Sequence[float],
    c2: Sequence[float],
    calibration: Sequence[float] = DEFAULT_CALIBRATION
) -> float:
    """
    Euclidean distance between two centroids after scaling each axis by the voxel calibration.

    Args:
        c1: First centroid (x, y, z)
        c2: Second centroid (x, y, z)
        calibration: Voxel size along x, y and z

    Returns:
        Calibrated distance
    """
    diff = (np.asarray(c1, dtype=float) - np.asarray(c2, dtype=float)) * np.asarray(calibration[:3], dtype=float)
    return float(np.sqrt(np.sum(diff * diff)))


def edge_length(edge, calibration: Sequence[float] = DEFAULT_CALIBRATION) -> float:
    """Calibrated distance between the centroids of the edge's endpoint vertices."""
    return calibrated_distance(centroid(edge.v1.points), centroid(edge.v2.points), calibration)


def update_edge_length(edge, calibration: Sequence[float] = DEFAULT_CALIBRATION) -> float:
    """Recompute and store the edge length. Returns the new length."""
    edge.length = edge_length(edge, calibration)
    return edge.length
