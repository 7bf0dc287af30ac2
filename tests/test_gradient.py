import pytest

from constants import DEFAULT_GRADIENT_ALPHA_KEYS, DEFAULT_GRADIENT_COLOR_KEYS
from gradient import Gradient


@pytest.fixture
def black_to_white():
    return Gradient(
        color_keys=[(0.0, 0.0, 0.0, 0.0), (1.0, 1.0, 1.0, 1.0)],
        alpha_keys=[(0.0, 1.0), (1.0, 0.0)],
    )


def test_endpoints_and_midpoint(black_to_white):
    assert black_to_white.evaluate(0.0) == pytest.approx((0.0, 0.0, 0.0, 1.0))
    assert black_to_white.evaluate(1.0) == pytest.approx((1.0, 1.0, 1.0, 0.0))
    assert black_to_white.evaluate(0.25) == pytest.approx((0.25, 0.25, 0.25, 0.75))


def test_out_of_range_input_is_clamped(black_to_white):
    assert black_to_white.evaluate(-3.0) == black_to_white.evaluate(0.0)
    assert black_to_white.evaluate(7.0) == black_to_white.evaluate(1.0)


def test_values_outside_key_range_hold_nearest_key():
    gradient = Gradient(color_keys=[(0.4, 1.0, 0.0, 0.0), (0.6, 0.0, 0.0, 1.0)], alpha_keys=[(0.5, 0.5)])
    assert gradient.evaluate(0.1) == pytest.approx((1.0, 0.0, 0.0, 0.5))
    assert gradient.evaluate(0.9) == pytest.approx((0.0, 0.0, 1.0, 0.5))


def test_unsorted_keys_are_sorted():
    gradient = Gradient(color_keys=[(1.0, 1.0, 1.0, 1.0), (0.0, 0.0, 0.0, 0.0)], alpha_keys=[(0.0, 1.0)])
    assert gradient.evaluate(0.5) == pytest.approx((0.5, 0.5, 0.5, 1.0))


@pytest.mark.parametrize("color_keys,alpha_keys", [
    ([], [(0.0, 1.0)]),
    ([(0.0, 1.0, 1.0)], [(0.0, 1.0)]),
    ([(0.0, 2.0, 0.0, 0.0)], [(0.0, 1.0)]),
    ([(0.0, 1.0, 0.0, 0.0)], [(1.5, 1.0)]),
])
def test_invalid_keys_are_rejected(color_keys, alpha_keys):
    with pytest.raises(ValueError):
        Gradient(color_keys=color_keys, alpha_keys=alpha_keys)


def test_from_config_defaults():
    default = Gradient(DEFAULT_GRADIENT_COLOR_KEYS, DEFAULT_GRADIENT_ALPHA_KEYS)
    assert Gradient.from_config(None).evaluate(0.3) == default.evaluate(0.3)
    assert Gradient.from_config({}).evaluate(0.8) == default.evaluate(0.8)


def test_from_config_keys():
    gradient = Gradient.from_config({
        "color_keys": [[0.0, 0.0, 1.0, 0.0], [1.0, 0.0, 1.0, 0.0]],
        "alpha_keys": [[0.0, 0.2]],
    })
    assert gradient.evaluate(0.5) == pytest.approx((0.0, 1.0, 0.0, 0.2))
