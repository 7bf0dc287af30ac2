# accumulator.py
"""
Computes whole-dataset statistics used to normalize record attributes.

This module defines the NormalizationBasis (centroid and magnitude maxima)
and computes it in one pass over the retained dataset.
"""
import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numba import jit

from dataset import Dataset
from errors import EmptyDatasetError

# --- Data Contracts ---
#
# compute_basis(dataset: Dataset) -> NormalizationBasis:
#   - Inputs: the retained (sampled) Dataset.
#   - Outputs: centroid = sum(positions) / count, and the maxima of the
#     cached position and velocity magnitudes.
#   - Raises: EmptyDatasetError if the dataset has no records. Callers fall
#     back to NormalizationBasis.empty().
#   - Invariants: the basis aggregates exactly the given dataset. It is
#     recomputed on every (re)load and never on attribute-only updates.
#
# relative_positions(dataset: Dataset, basis: NormalizationBasis) -> np.ndarray:
#   - Outputs: float32 array (N, 3) of position - centroid, read-only.


@dataclass(frozen=True)
class NormalizationBasis:
    centroid: Tuple[float, float, float]
    max_position_magnitude: float
    max_velocity_magnitude: float

    @classmethod
    def empty(cls) -> "NormalizationBasis":
        """Zero basis used when there are no records to aggregate."""
        return cls(centroid=(0.0, 0.0, 0.0), max_position_magnitude=0.0, max_velocity_magnitude=0.0)

    @property
    def centroid_magnitude(self) -> float:
        return float(np.linalg.norm(np.asarray(self.centroid, dtype=np.float64)))


@jit(nopython=True)
def _accumulate_numba(positions, position_magnitudes, velocity_magnitudes):
    """
    Numba-jitted single pass producing the position sum and both maxima.
    The sum is kept in float64 to limit drift on large float32 datasets.
    """
    count = positions.shape[0]
    total = np.zeros(3, dtype=np.float64)
    max_position = 0.0
    max_velocity = 0.0

    for i in range(count):
        total[0] += positions[i, 0]
        total[1] += positions[i, 1]
        total[2] += positions[i, 2]
        if position_magnitudes[i] > max_position:
            max_position = position_magnitudes[i]
        if velocity_magnitudes[i] > max_velocity:
            max_velocity = velocity_magnitudes[i]

    return total, max_position, max_velocity


def compute_basis(dataset: Dataset) -> NormalizationBasis:
    """
    Aggregates the centroid and magnitude maxima of a dataset.
    """
    count = len(dataset)
    if count == 0:
        raise EmptyDatasetError()

    total, max_position, max_velocity = _accumulate_numba(
        dataset.positions, dataset.position_magnitudes, dataset.velocity_magnitudes
    )
    centroid = total / count

    basis = NormalizationBasis(
        centroid=(float(centroid[0]), float(centroid[1]), float(centroid[2])),
        max_position_magnitude=float(max_position),
        max_velocity_magnitude=float(max_velocity),
    )
    logging.info(f"Dataset centre point: ({centroid[0]:.4f}, {centroid[1]:.4f}, {centroid[2]:.4f})")
    logging.info(f"Maximum position magnitude: {basis.max_position_magnitude:.4f}")
    logging.info(f"Maximum velocity: {basis.max_velocity_magnitude:.4f}")
    return basis


def relative_positions(dataset: Dataset, basis: NormalizationBasis) -> np.ndarray:
    """Offsets every position by the centroid."""
    centroid = np.asarray(basis.centroid, dtype=np.float64)
    relative = (dataset.positions.astype(np.float64) - centroid).astype(np.float32)
    relative.flags.writeable = False
    return relative
