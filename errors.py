# errors.py
"""
Error taxonomy for the dataset-to-primitive pipeline.

All errors are local to a single load or remap cycle. The pipeline catches
them, logs them and reports them to the caller in a `CycleReport`; none of
them is fatal to the process.
"""
from typing import Optional


class ParticleDatasetError(Exception):
    """Base class for all recoverable pipeline errors."""


class MalformedRecordError(ParticleDatasetError):
    """A data line has too few fields or a field that is not a finite number."""

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Line {line_number}: {reason} ({line!r})")


class EmptyDatasetError(ParticleDatasetError):
    """No usable rows survived parsing and sampling."""

    def __init__(self, rows_read: int = 0, capacity: Optional[int] = None):
        self.rows_read = rows_read
        self.capacity = capacity
        message = f"Dataset is empty after parsing {rows_read} rows"
        if capacity is not None:
            message += f" with capacity {capacity}"
        super().__init__(message)


class DegenerateNormalizationError(ParticleDatasetError):
    """The normalization denominator is zero, negative or not finite."""

    def __init__(self, denominator: float, mode: str):
        self.denominator = denominator
        self.mode = mode
        super().__init__(
            f"Cannot normalize '{mode}' attribute: denominator is {denominator!r}"
        )
