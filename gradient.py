# gradient.py
"""
Color and opacity gradients.

The pipeline treats a gradient as an opaque capability: anything with an
`evaluate(t)` method returning an RGBA tuple will do. This module defines
that protocol and a key-based Gradient used as the default implementation.
"""
import logging
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

import numpy as np

from constants import DEFAULT_GRADIENT_ALPHA_KEYS, DEFAULT_GRADIENT_COLOR_KEYS

RGBA = Tuple[float, float, float, float]

# --- Data Contracts ---
#
# class GradientFunction (Protocol):
#   - evaluate(self, t: float) -> RGBA:
#     - Inputs: t in [0, 1]. Callers clamp before evaluating.
#     - Outputs: (r, g, b, a), each channel in [0, 1].
#
# class Gradient:
#   - __init__(self, color_keys, alpha_keys):
#     - color_keys: sequence of (time, r, g, b); alpha_keys: sequence of (time, a).
#       At least one key of each kind; all values in [0, 1].
#     - Raises: ValueError on an empty key list or out-of-range values.
#   - evaluate(t) linearly interpolates each channel between keys and holds
#     the first/last key value outside the key range.


class GradientFunction(Protocol):
    def evaluate(self, t: float) -> RGBA:
        ...


def _validate_keys(keys: Sequence[Sequence[float]], width: int, kind: str) -> np.ndarray:
    array = np.asarray(keys, dtype=np.float64)
    if array.ndim != 2 or array.shape[0] == 0 or array.shape[1] != width:
        msg = f"Gradient {kind} keys must be a non-empty list of {width}-value entries, got {keys!r}."
        logging.critical(msg)
        raise ValueError(msg)
    if np.any(array < 0.0) or np.any(array > 1.0):
        msg = f"Gradient {kind} keys must have times and channels in [0, 1], got {keys!r}."
        logging.critical(msg)
        raise ValueError(msg)
    # np.interp needs increasing sample points.
    return array[np.argsort(array[:, 0], kind='stable')]


class Gradient:
    """
    A gradient defined by color keys and alpha keys.
    """
    def __init__(
        self,
        color_keys: Sequence[Sequence[float]] = DEFAULT_GRADIENT_COLOR_KEYS,
        alpha_keys: Sequence[Sequence[float]] = DEFAULT_GRADIENT_ALPHA_KEYS,
    ):
        self.color_keys = _validate_keys(color_keys, 4, "color")
        self.alpha_keys = _validate_keys(alpha_keys, 2, "alpha")
        logging.debug(
            f"Gradient created with {len(self.color_keys)} color keys "
            f"and {len(self.alpha_keys)} alpha keys."
        )

    @classmethod
    def from_config(cls, params: Optional[Dict[str, Any]]) -> "Gradient":
        """Builds a gradient from the `appearance.gradient` config section."""
        params = params or {}
        if not params:
            logging.info("No gradient found in config. Using default gradient.")
        return cls(
            color_keys=params.get('color_keys', DEFAULT_GRADIENT_COLOR_KEYS),
            alpha_keys=params.get('alpha_keys', DEFAULT_GRADIENT_ALPHA_KEYS),
        )

    def evaluate(self, t: float) -> RGBA:
        t = min(max(float(t), 0.0), 1.0)
        times = self.color_keys[:, 0]
        r = np.interp(t, times, self.color_keys[:, 1])
        g = np.interp(t, times, self.color_keys[:, 2])
        b = np.interp(t, times, self.color_keys[:, 3])
        a = np.interp(t, self.alpha_keys[:, 0], self.alpha_keys[:, 1])
        return (float(r), float(g), float(b), float(a))
