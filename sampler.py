# sampler.py
"""
Selects a capacity-bounded random subset of dataset rows.

Each row index gets an independent uniform key in [0, 1); the indices are
stable-sorted by key and the first min(N, C) are kept. This is a uniform
random permutation prefix: every ordering and every subset of the kept size
is equally likely.
"""
import logging
from typing import Optional

import numpy as np

# --- Data Contracts ---
#
# class RandomSampler:
#   - __init__(self, seed: Optional[int] = None):
#     - Inputs: seed for the sampler's own Generator. None draws fresh
#       entropy from the OS, so repeated runs differ.
#
#   - sample(self, count: int, capacity: int) -> np.ndarray:
#     - Inputs: number of available rows N, host capacity C.
#     - Outputs: int64 array of min(N, C) distinct indices in [0, N),
#       in randomized order.
#     - Raises: ValueError if count or capacity is negative.


class RandomSampler:
    """
    Bounded sampling without replacement using a dedicated random generator.
    """
    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        # All randomness in a pipeline flows through this one generator.
        self.rng = np.random.default_rng(seed)

    def sample(self, count: int, capacity: int) -> np.ndarray:
        """
        Returns min(count, capacity) row indices in random order.
        """
        if count < 0 or capacity < 0:
            msg = f"Sampling needs non-negative count and capacity, got count={count}, capacity={capacity}."
            logging.critical(msg)
            raise ValueError(msg)

        keys = self.rng.random(count)
        order = np.argsort(keys, kind='stable')
        selected = order[:min(count, capacity)].astype(np.int64)

        logging.debug(f"Sampled {selected.shape[0]} of {count} rows (capacity {capacity}).")
        return selected
