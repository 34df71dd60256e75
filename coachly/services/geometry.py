"""
Planar geometry helpers for keypoint analysis.

Coordinates are image pixels, so y grows downward.
"""

from typing import Tuple

import numpy as np

Point = Tuple[float, float]

# Rays shorter than this are treated as degenerate
MIN_RAY_LENGTH = 1e-9


class GeometryError(ValueError):
    """Raised when a measurement is undefined for the given points."""


def calculate_angle(p1: Point, p2: Point, p3: Point) -> float:
    """
    Interior angle at ``p2`` between the rays p2->p1 and p2->p3.

    Args:
        p1: End of the first ray
        p2: Vertex
        p3: End of the second ray

    Returns:
        Angle in degrees, within [0, 180]

    Raises:
        GeometryError: If either ray has zero length or a coordinate is not finite
    """
    a = np.asarray(p1, dtype=float)
    b = np.asarray(p2, dtype=float)
    c = np.asarray(p3, dtype=float)

    ba = a - b
    bc = c - b
    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba < MIN_RAY_LENGTH or norm_bc < MIN_RAY_LENGTH:
        raise GeometryError(f"Degenerate angle: vertex {tuple(b)} coincides with an endpoint")

    cosine_angle = np.dot(ba, bc) / (norm_ba * norm_bc)
    if not np.isfinite(cosine_angle):
        raise GeometryError("Angle undefined for non-finite coordinates")
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)
    return float(np.degrees(np.arccos(cosine_angle)))


def point_above(point: Point, distance: float) -> Point:
    """Virtual point straight above ``point``, used as a vertical reference."""
    return (point[0], point[1] - distance)


def segment_ratio(numerator: float, denominator: float) -> float:
    """Ratio of two signed segment lengths; undefined for a zero denominator."""
    if denominator == 0:
        raise GeometryError("Segment ratio undefined: zero-length denominator")
    ratio = numerator / denominator
    if not np.isfinite(ratio):
        raise GeometryError("Segment ratio undefined for non-finite lengths")
    return ratio
