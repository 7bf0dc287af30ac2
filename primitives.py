# primitives.py
"""
Assembles the render-ready primitive buffer.

A PrimitiveBuffer wraps a read-only NumPy structured array. Entry i always
derives from dataset record i; the renderer may rely on that for indexed
updates. Buffers are rebuilt wholesale and never modified after creation.
"""
import logging
from typing import Iterator, NamedTuple, Protocol, Tuple

import numpy as np

# --- Data Contracts ---
#
# build_primitive_buffer(relative_positions, colors, size) -> PrimitiveBuffer:
#   - Inputs:
#     - relative_positions: float array (N, 3), position - centroid.
#     - colors: float array (N, 4), RGBA in [0, 1].
#     - size: float, applied to every primitive.
#   - Outputs: a read-only PrimitiveBuffer of length N.
#   - Raises: ValueError if the inputs are not parallel.
#
# class PrimitiveSink (Protocol):
#   - set_primitives(self, buffer: PrimitiveBuffer, count: int) -> None
#     The external renderer's upload call. It owns whatever copy it keeps.

PRIMITIVE_DTYPE = np.dtype([
    ('position', np.float32, (3,)),
    ('color', np.float32, (4,)),
    ('size', np.float32),
])


class RenderPrimitive(NamedTuple):
    relative_position: Tuple[float, float, float]
    color: Tuple[float, float, float, float]
    size: float


class PrimitiveBuffer:
    """
    An immutable, ordered sequence of render primitives.
    """
    def __init__(self, data: np.ndarray):
        if data.dtype != PRIMITIVE_DTYPE:
            raise ValueError(f"Expected primitive dtype {PRIMITIVE_DTYPE}, got {data.dtype}.")
        data.flags.writeable = False
        self.data = data

    @classmethod
    def empty(cls) -> "PrimitiveBuffer":
        return cls(np.zeros(0, dtype=PRIMITIVE_DTYPE))

    def __len__(self) -> int:
        return self.data.shape[0]

    def __getitem__(self, index: int) -> RenderPrimitive:
        entry = self.data[index]
        return RenderPrimitive(
            relative_position=tuple(float(v) for v in entry['position']),
            color=tuple(float(v) for v in entry['color']),
            size=float(entry['size']),
        )

    def __iter__(self) -> Iterator[RenderPrimitive]:
        for i in range(len(self)):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrimitiveBuffer):
            return NotImplemented
        return self.tobytes() == other.tobytes()

    @property
    def positions(self) -> np.ndarray:
        return self.data['position']

    @property
    def colors(self) -> np.ndarray:
        return self.data['color']

    @property
    def sizes(self) -> np.ndarray:
        return self.data['size']

    def tobytes(self) -> bytes:
        return self.data.tobytes()


class PrimitiveSink(Protocol):
    def set_primitives(self, buffer: PrimitiveBuffer, count: int) -> None:
        ...


def build_primitive_buffer(relative_positions: np.ndarray, colors: np.ndarray, size: float) -> PrimitiveBuffer:
    """
    Zips positions, colors and the uniform size into a new buffer.
    """
    count = relative_positions.shape[0]
    if colors.shape[0] != count:
        raise ValueError(
            f"Cannot build primitives: {count} positions but {colors.shape[0]} colors."
        )

    data = np.zeros(count, dtype=PRIMITIVE_DTYPE)
    data['position'] = relative_positions
    data['color'] = colors
    data['size'] = size

    logging.debug(f"Built primitive buffer with {count} entries ({data.nbytes} bytes).")
    return PrimitiveBuffer(data)
