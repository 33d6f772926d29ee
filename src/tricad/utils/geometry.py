"""3D geometry utilities: transform decomposition and axis remapping."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

logger = logging.getLogger(__name__)

MIN_VECTOR_LENGTH = 1e-9

Z_AXIS = np.array([0.0, 0.0, 1.0])
X_AXIS = np.array([1.0, 0.0, 0.0])


def matrix_from_column_major(m: Sequence[float]) -> np.ndarray:
    """Convert a flat 16-element column-major transform into a 4x4 matrix."""
    return np.asarray(m, dtype=np.float64).reshape(4, 4, order="F")


def swap_yz(v: np.ndarray) -> np.ndarray:
    """Y-up (x, y, z) → Z-up (x, z, y)."""
    return np.asarray(v, dtype=np.float64)[[0, 2, 1]]


def normalize(v: np.ndarray, fallback: np.ndarray) -> np.ndarray:
    """Unit vector along ``v``; degenerate or non-finite input returns ``fallback``."""
    v = np.asarray(v, dtype=np.float64)
    length = float(np.linalg.norm(v))
    if not np.isfinite(length) or length < MIN_VECTOR_LENGTH:
        logger.debug(f"Degenerate direction {v.tolist()}, using {fallback.tolist()}")
        return fallback.copy()
    return v / length


def decompose_placement(m: Sequence[float]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Split a Y-up world transform into a Z-up IFC axis placement.

    Returns (location, axis, ref_direction): the translation column, the
    Y basis column as the placement Z axis and the X basis column as the
    reference direction, each with Y and Z swapped. Directions are unit
    length.
    """
    mat = matrix_from_column_major(m)
    location = swap_yz(mat[:3, 3])
    axis = normalize(swap_yz(mat[:3, 1]), Z_AXIS)
    ref_direction = normalize(swap_yz(mat[:3, 0]), X_AXIS)
    return location, axis, ref_direction
