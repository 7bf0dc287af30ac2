import numpy as np
import pytest

from accumulator import NormalizationBasis, compute_basis, relative_positions
from attributes import (
    ColorMode, coerce_color_mode, map_colors, neutral_colors,
    normalization_denominator, normalized_scalars
)
from constants import NEUTRAL_COLOR
from dataset import Dataset
from errors import DegenerateNormalizationError


def _prepare(dataset):
    basis = compute_basis(dataset)
    return basis, relative_positions(dataset, basis)


def test_distance_uses_max_position_minus_centroid_magnitude(line_dataset, gradient):
    basis, relative = _prepare(line_dataset)

    # centroid (3, 0, 0), max |p| = 6, so the denominator is 6 - 3 = 3.
    assert normalization_denominator(basis, ColorMode.DISTANCE) == pytest.approx(3.0)
    colors = map_colors(line_dataset, relative, basis, gradient, ColorMode.DISTANCE)

    np.testing.assert_allclose(colors[:, 0], [2 / 3, 1 / 3, 1.0], rtol=1e-6)
    np.testing.assert_allclose(colors[:, 3], [1.0, 1.0, 1.0])


def test_distance_scalars_above_one_are_clamped(gradient):
    dataset = Dataset(
        positions=[[10.0, 0.0, 0.0], [11.0, 0.0, 0.0], [0.0, 0.0, 0.0]],
        velocities=np.zeros((3, 3)),
    )
    basis, relative = _prepare(dataset)

    # centroid (7, 0, 0), denominator 11 - 7 = 4; distances 3, 4 and 7.
    scalars = normalized_scalars(dataset, relative, basis)
    np.testing.assert_allclose(scalars, [0.75, 1.0, 1.0], rtol=1e-6)

    map_colors(dataset, relative, basis, gradient)
    assert all(0.0 <= t <= 1.0 for t in gradient.calls)


def test_speed_mode_scales_by_max_velocity(line_dataset, gradient):
    basis, relative = _prepare(line_dataset)
    colors = map_colors(line_dataset, relative, basis, gradient, "speed")

    np.testing.assert_allclose(colors[:, 0], [0.25, 0.5, 1.0], rtol=1e-6)


def test_all_zero_single_record_is_degenerate(gradient):
    dataset = Dataset([[0.0, 0.0, 0.0]], [[1.0, 0.0, 0.0]])
    basis, relative = _prepare(dataset)

    with pytest.raises(DegenerateNormalizationError) as excinfo:
        map_colors(dataset, relative, basis, gradient)
    assert excinfo.value.mode == "distance"
    assert gradient.calls == []


def test_single_offset_record_is_degenerate(gradient):
    # |centroid| equals the max position magnitude, leaving a zero denominator.
    dataset = Dataset([[0.3, 0.4, 1.2]], [[0.0, 0.0, 0.0]])
    basis, relative = _prepare(dataset)

    with pytest.raises(DegenerateNormalizationError):
        map_colors(dataset, relative, basis, gradient)


def test_zero_velocities_are_degenerate_in_speed_mode(gradient):
    dataset = Dataset([[1.0, 0.0, 0.0], [2.0, 0.0, 0.0]], np.zeros((2, 3)))
    basis, relative = _prepare(dataset)

    with pytest.raises(DegenerateNormalizationError) as excinfo:
        map_colors(dataset, relative, basis, gradient, ColorMode.SPEED)
    assert excinfo.value.denominator == 0.0


def test_non_finite_denominator_is_degenerate():
    basis = NormalizationBasis(centroid=(0.0, 0.0, 0.0), max_position_magnitude=float("inf"),
                               max_velocity_magnitude=1.0)
    with pytest.raises(DegenerateNormalizationError):
        normalization_denominator(basis)


def test_mapping_is_idempotent_and_pure(line_dataset, gradient):
    basis, relative = _prepare(line_dataset)
    positions_before = line_dataset.positions.copy()

    first = map_colors(line_dataset, relative, basis, gradient)
    second = map_colors(line_dataset, relative, basis, gradient)

    assert first.tobytes() == second.tobytes()
    np.testing.assert_array_equal(line_dataset.positions, positions_before)
    assert basis == compute_basis(line_dataset)


def test_mismatched_relative_positions_are_rejected(line_dataset, gradient):
    basis, relative = _prepare(line_dataset)
    with pytest.raises(ValueError):
        map_colors(line_dataset, relative[:2], basis, gradient)


def test_neutral_colors():
    colors = neutral_colors(3)
    assert colors.shape == (3, 4)
    np.testing.assert_allclose(colors, [NEUTRAL_COLOR] * 3)
    assert neutral_colors(0).shape == (0, 4)


def test_color_mode_coercion():
    assert coerce_color_mode("speed") is ColorMode.SPEED
    assert coerce_color_mode(ColorMode.DISTANCE) is ColorMode.DISTANCE
    with pytest.raises(ValueError):
        coerce_color_mode("temperature")


def test_tight_cluster_just_above_rounding_noise_is_mapped():
    # Denominator 1e-6 is about 8 float32 epsilons of max |p| = 1.
    basis = NormalizationBasis(centroid=(1.0, 0.0, 0.0), max_position_magnitude=1.0 + 1e-6,
                               max_velocity_magnitude=1.0)
    assert normalization_denominator(basis) == pytest.approx(1e-6, rel=1e-6)


def test_denominator_within_rounding_noise_is_degenerate():
    # Denominator 2e-7 is below 4 float32 epsilons of max |p| = 1.
    basis = NormalizationBasis(centroid=(1.0, 0.0, 0.0), max_position_magnitude=1.0 + 2e-7,
                               max_velocity_magnitude=1.0)
    with pytest.raises(DegenerateNormalizationError):
        normalization_denominator(basis)


def test_tight_cluster_far_from_origin_gets_gradient_colors(gradient):
    dataset = Dataset(
        positions=[[1000.0, 0.0, 0.0], [1000.25, 0.0, 0.0]],
        velocities=np.zeros((2, 3)),
    )
    basis, relative = _prepare(dataset)

    # centroid 1000.125, denominator 1000.25 - 1000.125 = 0.125.
    colors = map_colors(dataset, relative, basis, gradient)
    np.testing.assert_allclose(colors[:, 0], [1.0, 1.0], rtol=1e-5)
    assert len(gradient.calls) == 2
