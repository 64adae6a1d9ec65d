"""Tests for perimeter smoothing."""
import numpy as np
import pytest
from skimage.draw import disk

from regiontrace.contour_tracing import trace_perimeters
from regiontrace.perimeter_smoothing import (
    MAX_SIGMA,
    fixed_kernel,
    gaussian_kernel,
    remove_repeated_points,
    smooth_perimeter,
    smooth_perimeters,
)
from regiontrace.types import InvalidParameterError, Point


def _points(*coords):
    return [Point(x, y) for x, y in coords]


def _assert_no_cyclic_repeats(perimeter):
    if len(perimeter) > 1:
        for p, q in zip(perimeter, perimeter[1:] + perimeter[:1]):
            assert p != q


SQUARE = _points((0, 0), (10, 0), (10, 10), (0, 10))
RING_3X3 = _points((0, 0), (1, 0), (2, 0), (2, 1), (2, 2), (1, 2), (0, 2), (0, 1))


class TestKernels:
    """Test kernel construction."""

    def test_fixed_kernel(self):
        weights, center = fixed_kernel()

        assert center == 2
        np.testing.assert_allclose(weights, np.array([1, 3, 16, 3, 1]) / 24)

    def test_gaussian_kernel_sigma_one(self):
        weights, center = gaussian_kernel(1.0)

        assert len(weights) == 5
        assert center == 2
        assert weights.sum() == pytest.approx(1.0)
        np.testing.assert_allclose(weights, weights[::-1])
        assert np.argmax(weights) == center

        expected = np.exp(-0.5 * np.arange(-2, 3) ** 2)
        np.testing.assert_allclose(weights, expected / expected.sum())

    def test_gaussian_kernel_size_grows_with_sigma(self):
        assert len(gaussian_kernel(2.0)[0]) == 9
        assert len(gaussian_kernel(5.0)[0]) == 19

    def test_gaussian_kernel_sizes_are_odd(self):
        for sigma in [0.3, 0.5, 0.8, 1.3, 2.7, 4.1]:
            weights, center = gaussian_kernel(sigma)
            assert len(weights) % 2 == 1
            assert center == len(weights) // 2

    def test_tiny_sigma_is_identity(self):
        weights, center = gaussian_kernel(0.1)

        assert center == 0
        np.testing.assert_allclose(weights, [1.0])

    @pytest.mark.parametrize("sigma", [0, 0.0, -1.0])
    def test_non_positive_sigma(self, sigma):
        with pytest.raises(InvalidParameterError):
            gaussian_kernel(sigma)

    @pytest.mark.parametrize("sigma", [float("inf"), float("nan"), 1e300])
    def test_non_finite_sigma(self, sigma):
        with pytest.raises(InvalidParameterError):
            gaussian_kernel(sigma)

    def test_largest_sigma_accepted(self):
        weights, center = gaussian_kernel(MAX_SIGMA)

        assert len(weights) % 2 == 1
        assert center == len(weights) // 2


class TestRemoveRepeatedPoints:
    """Test duplicate collapsing with wrap-around."""

    def test_collapses_runs_cyclically(self):
        points = np.array([[0, 0], [0, 0], [1, 0], [1, 0], [0, 0]])

        result = remove_repeated_points(points)

        np.testing.assert_array_equal(result, [[1, 0], [0, 0]])

    def test_all_equal(self):
        points = np.array([[3, 4]] * 5)

        np.testing.assert_array_equal(remove_repeated_points(points), [[3, 4]])

    def test_no_repeats(self):
        points = np.array([[0, 0], [1, 0], [1, 1]])

        np.testing.assert_array_equal(remove_repeated_points(points), points)


class TestSmoothPerimeter:
    """Test cases for smooth_perimeter function."""

    def test_fixed_kernel_wraps_around(self):
        """Corners of a square are pulled in using points across the seam."""
        smoothed = smooth_perimeter(SQUARE, 1.0, kernel="fixed")

        assert smoothed == _points((2, 2), (8, 2), (8, 8), (2, 8))

    def test_fixed_kernel_ignores_factor(self):
        assert smooth_perimeter(SQUARE, 0.0, kernel="fixed") == \
            smooth_perimeter(SQUARE, 7.5, kernel="fixed")

    def test_gaussian_square(self):
        smoothed = smooth_perimeter(SQUARE, 1.0)

        assert smoothed == _points((4, 4), (6, 4), (6, 6), (4, 6))

    def test_tiny_factor_keeps_points(self):
        assert smooth_perimeter(RING_3X3, 0.1) == RING_3X3

    def test_straight_run_unchanged(self):
        """Interior points of a long straight edge stay put."""
        perimeter = [Point(x, 0) for x in range(20)] + [Point(x, 1) for x in range(19, -1, -1)]

        smoothed = smooth_perimeter(perimeter, 1.0, kernel="fixed")

        for x in range(3, 17):
            assert Point(x, 0) in smoothed

    def test_collapse_to_single_point(self):
        """Heavy smoothing of a tiny loop leaves one point."""
        smoothed = smooth_perimeter(RING_3X3, 10.0)

        assert smoothed == [Point(1, 1)]

    def test_two_point_perimeter(self):
        perimeter = _points((0, 0), (1, 0))

        assert smooth_perimeter(perimeter, 1.0, kernel="fixed") == perimeter

    def test_input_not_modified(self):
        perimeter = list(SQUARE)

        smooth_perimeter(perimeter, 1.0)

        assert perimeter == SQUARE

    def test_digital_circle_properties(self):
        """Smoothing a traced disk keeps a short, closed, bounded loop."""
        mask = np.zeros((41, 41), dtype=bool)
        rr, cc = disk((20, 20), 15, shape=mask.shape)
        mask[rr, cc] = True
        perimeter = trace_perimeters(mask)[0]

        for factor in [0.5, 1.0, 1.5]:
            smoothed = smooth_perimeter(perimeter, factor)
            _, center = gaussian_kernel(factor)

            assert 1 < len(smoothed) <= len(perimeter)
            _assert_no_cyclic_repeats(smoothed)

            original = np.array([(p.x, p.y) for p in perimeter])
            for p in smoothed:
                distance = np.min(np.linalg.norm(original - [p.x, p.y], axis=1))
                assert distance <= center + 1

    def test_noisy_loop(self):
        """Random jagged loop: length bound and no repeats for every kernel."""
        rng = np.random.default_rng(5)
        angles = np.linspace(0, 2 * np.pi, 60, endpoint=False)
        radius = 20 + rng.integers(-3, 4, size=60)
        perimeter = _points(*zip(
            np.rint(30 + radius * np.cos(angles)).astype(int),
            np.rint(30 + radius * np.sin(angles)).astype(int),
        ))

        for kernel in ["gaussian", "fixed"]:
            smoothed = smooth_perimeter(perimeter, 2.0, kernel=kernel)
            assert len(smoothed) <= len(perimeter)
            _assert_no_cyclic_repeats(smoothed)

    def test_single_point_rejected(self):
        with pytest.raises(InvalidParameterError):
            smooth_perimeter([Point(1, 1)], 1.0)

    def test_empty_rejected(self):
        with pytest.raises(InvalidParameterError):
            smooth_perimeter([], 1.0)

    def test_zero_factor_rejected(self):
        with pytest.raises(InvalidParameterError):
            smooth_perimeter(SQUARE, 0)

    def test_infinite_factor_rejected(self):
        with pytest.raises(InvalidParameterError):
            smooth_perimeter(SQUARE, float("inf"))

    def test_unknown_kernel(self):
        with pytest.raises(InvalidParameterError):
            smooth_perimeter(SQUARE, 1.0, kernel="box")


class TestSmoothPerimeters:
    """Test cases for smooth_perimeters function."""

    def test_maps_over_set(self):
        smoothed = smooth_perimeters([SQUARE, list(SQUARE)], 1.0, kernel="fixed")

        assert smoothed == [_points((2, 2), (8, 2), (8, 8), (2, 8))] * 2

    def test_single_points_pass_through(self):
        perimeters = [[Point(5, 5)], SQUARE]

        smoothed = smooth_perimeters(perimeters, 1.0)

        assert smoothed[0] == [Point(5, 5)]
        assert smoothed[1] == _points((4, 4), (6, 4), (6, 6), (4, 6))

    def test_empty_set(self):
        assert smooth_perimeters([], 1.0) == []

    def test_zero_factor_rejected_for_degenerate_set(self):
        with pytest.raises(InvalidParameterError):
            smooth_perimeters([[Point(0, 0)]], 0.0)
