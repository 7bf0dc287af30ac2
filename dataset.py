# dataset.py
"""
Parses the text dataset into typed records.

This module defines the Record and Dataset types. A Dataset stores all
records column-wise in read-only float32 NumPy arrays, with the position and
velocity magnitudes computed once at parse time so later mapping passes
never have to recompute them.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from constants import HEADER_LINES, MIN_RECORD_FIELDS
from errors import MalformedRecordError

FLOAT32_MAX = float(np.finfo(np.float32).max)

# --- Data Contracts ---
#
# parse_line(line: str, line_number: int, delimiter: Optional[str]) -> Tuple[float, ...]:
#   - Inputs: one stripped, non-empty data line.
#   - Outputs: six floats (position xyz, velocity xyz). Extra fields ignored.
#   - Raises: MalformedRecordError for < 6 fields or non-numeric values, non-finite values
#     or values outside the float32 range.
#
# parse_records(text: str, delimiter: Optional[str] = None) -> ParseResult:
#   - Inputs: the complete dataset text, header line included.
#   - Outputs: a ParseResult holding a Dataset in input order, the number of
#     non-empty data rows read, and one MalformedRecordError per skipped row.
#   - Invariants: len(result.dataset) + len(result.diagnostics) == result.rows_read.
#
# class Dataset:
#   - positions, velocities: float32 arrays of shape (N, 3), read-only.
#   - position_magnitudes, velocity_magnitudes: float32 arrays of shape (N,).
#   - take(indices) -> Dataset: a new Dataset in the order of `indices`.


@dataclass(frozen=True)
class Record:
    """One parsed dataset row."""
    position: Tuple[float, float, float]
    velocity: Tuple[float, float, float]
    position_magnitude: float
    velocity_magnitude: float


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


class Dataset:
    """
    An ordered, immutable collection of records backed by NumPy arrays.
    """
    def __init__(self, positions: np.ndarray, velocities: np.ndarray):
        positions = np.array(positions, dtype=np.float32).reshape(-1, 3)
        velocities = np.array(velocities, dtype=np.float32).reshape(-1, 3)
        if positions.shape != velocities.shape:
            raise ValueError(
                f"Positions {positions.shape} and velocities {velocities.shape} "
                f"must have the same shape."
            )

        self.positions = _read_only(positions)
        self.velocities = _read_only(velocities)
        # Magnitudes are taken in float64 and stored as float32.
        self.position_magnitudes = _read_only(
            np.linalg.norm(positions.astype(np.float64), axis=1).astype(np.float32)
        )
        self.velocity_magnitudes = _read_only(
            np.linalg.norm(velocities.astype(np.float64), axis=1).astype(np.float32)
        )

    @classmethod
    def empty(cls) -> "Dataset":
        return cls(np.zeros((0, 3)), np.zeros((0, 3)))

    def __len__(self) -> int:
        return self.positions.shape[0]

    def __getitem__(self, index: int) -> Record:
        return Record(
            position=tuple(float(v) for v in self.positions[index]),
            velocity=tuple(float(v) for v in self.velocities[index]),
            position_magnitude=float(self.position_magnitudes[index]),
            velocity_magnitude=float(self.velocity_magnitudes[index]),
        )

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def take(self, indices: Sequence[int]) -> "Dataset":
        """Returns the records at `indices`, in that order."""
        indices = np.asarray(indices, dtype=np.int64)
        return Dataset(self.positions[indices], self.velocities[indices])


@dataclass
class ParseResult:
    dataset: Dataset
    rows_read: int
    diagnostics: List[MalformedRecordError] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.diagnostics)


def parse_line(line: str, line_number: int, delimiter: Optional[str] = None) -> Tuple[float, ...]:
    """
    Splits one data line into position and velocity components.

    Args:
        line (str): The stripped data line.
        line_number (int): 1-based line number, used for diagnostics.
        delimiter (Optional[str]): Field separator. None splits on any whitespace.

    Returns:
        Tuple[float, ...]: (px, py, pz, vx, vy, vz).
    """
    if delimiter is None:
        fields = line.split()
    else:
        fields = [f.strip() for f in line.split(delimiter)]

    if len(fields) < MIN_RECORD_FIELDS:
        raise MalformedRecordError(
            line_number, line,
            f"expected at least {MIN_RECORD_FIELDS} fields, found {len(fields)}"
        )

    values = []
    for column, text in enumerate(fields[:MIN_RECORD_FIELDS], start=1):
        try:
            value = float(text)
        except ValueError:
            raise MalformedRecordError(
                line_number, line, f"column {column} is not numeric: {text!r}"
            ) from None
        if not math.isfinite(value):
            raise MalformedRecordError(
                line_number, line, f"column {column} is not finite: {text!r}"
            )
        # Records are stored as float32; larger values would become inf there.
        if abs(value) > FLOAT32_MAX:
            raise MalformedRecordError(
                line_number, line, f"column {column} is out of float32 range: {text!r}"
            )
        values.append(value)

    # The cached magnitudes are float32 as well.
    for name, vector in (("position", values[0:3]), ("velocity", values[3:6])):
        if math.hypot(*vector) > FLOAT32_MAX:
            raise MalformedRecordError(
                line_number, line, f"{name} magnitude is out of float32 range"
            )
    return tuple(values)


def parse_records(text: str, delimiter: Optional[str] = None) -> ParseResult:
    """
    Parses the complete dataset text, skipping malformed rows.

    The first line is a header and is discarded. Empty lines are ignored
    without a diagnostic; a trailing newline is common in exported data.
    """
    lines = text.split('\n')
    rows = []
    diagnostics: List[MalformedRecordError] = []
    rows_read = 0

    for line_number, raw_line in enumerate(lines[HEADER_LINES:], start=HEADER_LINES + 1):
        line = raw_line.strip()
        if not line:
            continue
        rows_read += 1
        try:
            rows.append(parse_line(line, line_number, delimiter))
        except MalformedRecordError as e:
            logging.warning(f"Skipping malformed row. {e}")
            diagnostics.append(e)

    if rows:
        data = np.array(rows, dtype=np.float64)
        dataset = Dataset(data[:, 0:3], data[:, 3:6])
    else:
        dataset = Dataset.empty()

    logging.info(f"Dataset size: {rows_read} rows ({len(dataset)} parsed, {len(diagnostics)} skipped)")
    return ParseResult(dataset=dataset, rows_read=rows_read, diagnostics=diagnostics)


def read_dataset_text(path: str) -> str:
    """Reads a dataset file as UTF-8 text."""
    logging.info(f"Reading dataset from {path}...")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except FileNotFoundError:
        logging.error(f"Dataset file not found at {path}.")
        raise
    logging.debug(f"Read {len(text)} characters from {path}.")
    return text
