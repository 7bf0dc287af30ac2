# attributes.py
"""
Maps records to visual attributes.

Every record gets a normalized scalar t, which is clamped to [0, 1] and fed
to the gradient to obtain its color and opacity. Two scalars are supported:

- "distance": distance from the centroid, scaled by
  (max position magnitude - |centroid|). The denominator is the one the
  renderer has always used; it is not max(|position - centroid|), so t can
  exceed 1 for off-centre datasets and is then clamped.
- "speed": velocity magnitude scaled by the maximum velocity magnitude.

The mapper is pure. It never modifies the dataset or the basis.
"""
import logging
import math
from enum import Enum
from typing import Union

import numpy as np
from numba import jit

from accumulator import NormalizationBasis
from constants import NEUTRAL_COLOR, NORMALIZATION_ROUNDING_ULPS
from dataset import Dataset
from errors import DegenerateNormalizationError
from gradient import GradientFunction

FLOAT32_EPS = float(np.finfo(np.float32).eps)

# --- Data Contracts ---
#
# normalization_denominator(basis: NormalizationBasis, mode: ColorMode) -> float:
#   - Outputs: the strictly positive, finite denominator for `mode`.
#   - Raises: DegenerateNormalizationError otherwise.
#
# normalized_scalars(dataset, relative_positions, basis, mode) -> np.ndarray:
#   - Outputs: float64 array (N,) of t values clamped to [0, 1], parallel
#     to the dataset.
#
# map_colors(dataset, relative_positions, basis, gradient, mode) -> np.ndarray:
#   - Outputs: float32 array (N, 4) of RGBA colors, row i for record i.
#   - Side Effects: None. Repeated calls with equal inputs give equal output.


class ColorMode(str, Enum):
    DISTANCE = "distance"
    SPEED = "speed"


def coerce_color_mode(mode: Union[str, ColorMode]) -> ColorMode:
    try:
        return ColorMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in ColorMode)
        msg = f"Configuration error: unknown color mode {mode!r}. Expected one of: {valid}."
        logging.critical(msg)
        raise ValueError(msg) from None


@jit(nopython=True)
def _scaled_distances_numba(relative_positions, denominator):
    """Numba-jitted |p - centroid| / denominator for every row."""
    count = relative_positions.shape[0]
    scaled = np.empty(count, dtype=np.float64)
    for i in range(count):
        x = np.float64(relative_positions[i, 0])
        y = np.float64(relative_positions[i, 1])
        z = np.float64(relative_positions[i, 2])
        scaled[i] = np.sqrt(x * x + y * y + z * z) / denominator
    return scaled


def normalization_denominator(basis: NormalizationBasis, mode: ColorMode = ColorMode.DISTANCE) -> float:
    mode = coerce_color_mode(mode)
    if mode is ColorMode.DISTANCE:
        denominator = basis.max_position_magnitude - basis.centroid_magnitude
        # A single point, or all points equal, leaves only rounding noise here.
        tolerance = NORMALIZATION_ROUNDING_ULPS * FLOAT32_EPS * basis.max_position_magnitude
    else:
        denominator = basis.max_velocity_magnitude
        tolerance = 0.0

    if not math.isfinite(denominator) or denominator <= tolerance:
        raise DegenerateNormalizationError(denominator, mode.value)
    return denominator


def normalized_scalars(
    dataset: Dataset,
    relative_positions: np.ndarray,
    basis: NormalizationBasis,
    mode: ColorMode = ColorMode.DISTANCE,
) -> np.ndarray:
    mode = coerce_color_mode(mode)
    denominator = normalization_denominator(basis, mode)
    if mode is ColorMode.DISTANCE:
        scaled = _scaled_distances_numba(relative_positions, denominator)
    else:
        scaled = dataset.velocity_magnitudes.astype(np.float64) / denominator
    # Gradient evaluation is only defined on [0, 1].
    return np.clip(scaled, 0.0, 1.0)


def map_colors(
    dataset: Dataset,
    relative_positions: np.ndarray,
    basis: NormalizationBasis,
    gradient: GradientFunction,
    mode: ColorMode = ColorMode.DISTANCE,
) -> np.ndarray:
    """
    Evaluates the gradient for every record.

    Raises:
        DegenerateNormalizationError: if the basis cannot scale `mode`.
    """
    mode = coerce_color_mode(mode)
    if relative_positions.shape[0] != len(dataset):
        raise ValueError(
            f"Relative positions ({relative_positions.shape[0]}) do not match "
            f"dataset length ({len(dataset)})."
        )

    scalars = normalized_scalars(dataset, relative_positions, basis, mode)
    colors = np.empty((len(dataset), 4), dtype=np.float32)
    for i, t in enumerate(scalars):
        colors[i] = gradient.evaluate(float(t))

    if len(scalars):
        logging.debug(
            f"Mapped {len(dataset)} colors by {mode.value} "
            f"(t range {scalars.min():.3f}-{scalars.max():.3f})."
        )
    return colors


def neutral_colors(count: int) -> np.ndarray:
    """Fallback colors used when mapping cannot run."""
    return np.tile(np.asarray(NEUTRAL_COLOR, dtype=np.float32), (count, 1))
