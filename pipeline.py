# pipeline.py
"""
Orchestrates the dataset-to-primitive pipeline.

The render host drives this module through three entry points:
1. `load(text)`: parse, sample, accumulate statistics, map, build. Run on
   start-up and whenever the data source changes.
2. `reload()`: re-run `load` on the last text, drawing a new sample.
3. `remap()`: map and build only. Run after any change to the gradient, the
   particle size or the color mode. Never re-parses or re-samples.

Setters do not trigger a remap on their own; the host calls `remap()`.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from accumulator import NormalizationBasis, compute_basis, relative_positions
from attributes import coerce_color_mode, map_colors, neutral_colors
from constants import DEFAULT_CAPACITY, DEFAULT_COLOR_MODE, DEFAULT_PARTICLE_SIZE
from dataset import Dataset, parse_records
from errors import (
    DegenerateNormalizationError,
    EmptyDatasetError,
    MalformedRecordError,
    ParticleDatasetError,
)
from gradient import GradientFunction
from primitives import PrimitiveBuffer, PrimitiveSink, build_primitive_buffer
from sampler import RandomSampler

# --- Data Contracts ---
#
# class ParticleDatasetPipeline:
#   - __init__(self, params: Dict[str, Any], gradient: GradientFunction, capacity: int):
#     - Inputs:
#       - params: Dictionary of pipeline parameters from config.json.
#         - "particle_size": float > 0
#         - "color_mode": "distance" | "speed"
#         - "delimiter": Optional[str]
#         - "seed": Optional[int]
#       - gradient: the injected color mapping.
#       - capacity: maximum number of primitives the host can display.
#     - Raises: ValueError for invalid size, capacity or color mode.
#
#   - load(self, text: str) -> CycleReport
#   - reload(self) -> CycleReport
#   - remap(self) -> CycleReport
#     - Outputs: a CycleReport. Parse diagnostics, EmptyDatasetError and
#       DegenerateNormalizationError are reported, never raised.
#     - Side Effects: replaces self.state and pushes the new buffer to the
#       attached sink, if any.
#     - Invariants: len(state.primitives) == len(state.dataset)
#       <= min(rows parsed, capacity). state is replaced as a whole.


@dataclass
class PipelineState:
    """Everything derived from one load, owned by a single pipeline."""
    dataset: Dataset = field(default_factory=Dataset.empty)
    basis: NormalizationBasis = field(default_factory=NormalizationBasis.empty)
    relative_positions: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float32))
    primitives: PrimitiveBuffer = field(default_factory=PrimitiveBuffer.empty)


@dataclass
class CycleReport:
    """Outcome of one load or remap cycle."""
    stage: str
    primitive_count: int = 0
    rows_read: int = 0
    rows_parsed: int = 0
    diagnostics: List[MalformedRecordError] = field(default_factory=list)
    error: Optional[ParticleDatasetError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def skipped_count(self) -> int:
        return len(self.diagnostics)


class ParticleDatasetPipeline:
    """
    Turns a point-sample dataset into render primitives.
    """
    def __init__(self, params: Dict[str, Any], gradient: GradientFunction, capacity: int = DEFAULT_CAPACITY):
        if capacity < 0:
            msg = f"Configuration error: capacity must be non-negative, got {capacity}."
            logging.critical(msg)
            raise ValueError(msg)

        self.capacity = int(capacity)
        self.delimiter: Optional[str] = params.get('delimiter')
        self.gradient = gradient
        self.particle_size = DEFAULT_PARTICLE_SIZE
        self.set_particle_size(params.get('particle_size', DEFAULT_PARTICLE_SIZE))
        self.color_mode = coerce_color_mode(params.get('color_mode', DEFAULT_COLOR_MODE))
        self.sampler = RandomSampler(params.get('seed'))

        self.state = PipelineState()
        self.sink: Optional[PrimitiveSink] = None
        self._source_text: Optional[str] = None

        logging.info(
            f"Pipeline initialized: capacity {self.capacity}, "
            f"particle size {self.particle_size}, color mode '{self.color_mode.value}'."
        )

    # --- Configuration ---

    def attach(self, sink: PrimitiveSink) -> None:
        """Registers the renderer that receives every rebuilt buffer."""
        self.sink = sink
        self._upload(self.state.primitives)

    def set_particle_size(self, size: float) -> None:
        size = float(size)
        if not size > 0.0:
            msg = f"Configuration error: particle size must be positive, got {size}."
            logging.critical(msg)
            raise ValueError(msg)
        self.particle_size = size

    def set_gradient(self, gradient: GradientFunction) -> None:
        self.gradient = gradient

    def set_color_mode(self, mode: str) -> None:
        self.color_mode = coerce_color_mode(mode)

    # --- Lifecycle ---

    def load(self, text: str) -> CycleReport:
        """
        Parses, samples and accumulates a dataset, then maps it.
        """
        self._source_text = text
        parsed = parse_records(text, self.delimiter)
        report = CycleReport(
            stage="load",
            rows_read=parsed.rows_read,
            rows_parsed=len(parsed.dataset),
            diagnostics=list(parsed.diagnostics),
        )
        if parsed.skipped_count:
            logging.warning(f"Skipped {parsed.skipped_count} malformed rows of {parsed.rows_read}.")

        indices = self.sampler.sample(len(parsed.dataset), self.capacity)
        dataset = parsed.dataset.take(indices)

        try:
            basis = compute_basis(dataset)
        except EmptyDatasetError:
            error = EmptyDatasetError(rows_read=parsed.rows_read, capacity=self.capacity)
            logging.error(f"{error}. No primitives will be generated.")
            self.state = PipelineState()
            self._upload(self.state.primitives)
            report.error = error
            return report

        new_state = PipelineState(
            dataset=dataset,
            basis=basis,
            relative_positions=relative_positions(dataset, basis),
        )
        new_state.primitives, report.error = self._build(new_state)
        self.state = new_state
        self._upload(new_state.primitives)

        report.primitive_count = len(new_state.primitives)
        logging.info(f"Generating {report.primitive_count} particles")
        return report

    def reload(self) -> CycleReport:
        """Reloads the last dataset text with a fresh random sample."""
        if self._source_text is None:
            error = EmptyDatasetError(rows_read=0, capacity=self.capacity)
            logging.error(f"Reload requested before any dataset was loaded: {error}.")
            return CycleReport(stage="reload", error=error)
        report = self.load(self._source_text)
        report.stage = "reload"
        return report

    def remap(self) -> CycleReport:
        """
        Recomputes colors and sizes for the current dataset.
        """
        state = self.state
        report = CycleReport(stage="remap", rows_parsed=len(state.dataset))
        if len(state.dataset) == 0:
            report.error = EmptyDatasetError(capacity=self.capacity)
            logging.error(f"Cannot remap: {report.error}.")
            return report

        primitives, report.error = self._build(state)
        # Replace the state object so a reader never sees a half-updated one.
        self.state = PipelineState(
            dataset=state.dataset,
            basis=state.basis,
            relative_positions=state.relative_positions,
            primitives=primitives,
        )
        self._upload(primitives)
        report.primitive_count = len(primitives)
        return report

    # --- Internals ---

    def _build(self, state: PipelineState):
        error: Optional[DegenerateNormalizationError] = None
        try:
            colors = map_colors(
                state.dataset, state.relative_positions, state.basis, self.gradient, self.color_mode
            )
        except DegenerateNormalizationError as e:
            logging.error(f"{e}. Falling back to neutral color for {len(state.dataset)} particles.")
            colors = neutral_colors(len(state.dataset))
            error = e

        primitives = build_primitive_buffer(state.relative_positions, colors, self.particle_size)
        return primitives, error

    def _upload(self, primitives: PrimitiveBuffer) -> None:
        if self.sink is not None:
            self.sink.set_primitives(primitives, len(primitives))
