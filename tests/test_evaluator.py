"""Tests for evaluation of spline plans."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from imspline.boundary import BoundaryExt
from imspline.evaluator import evaluate, evaluate_points, reconstruct_samples
from imspline.exceptions import PlanDestroyedError
from imspline.kernel import bspline_kernel
from imspline.plan import build_plan


def _periodic_coefficients_fft(image: np.ndarray, order: int) -> np.ndarray:
    """Exact periodic B-spline coefficients of a 2D image by inverse filtering."""
    height, width = image.shape

    def response(n: int) -> np.ndarray:
        kernel = np.zeros(n)
        m = order // 2
        for k in range(-m, m + 1):
            kernel[k % n] += bspline_kernel(float(k), order)
        return np.fft.fft(kernel)

    spectrum = np.fft.fft2(image) / np.outer(response(height), response(width))
    return np.real(np.fft.ifft2(spectrum))


class TestEndToEnd:
    """Reference cases on small images."""

    def test_four_by_four_cubic_periodic(self, rng: np.random.Generator) -> None:
        image = rng.random((4, 4))
        coeffs = _periodic_coefficients_fft(image, 3)

        x = y = 1.5
        weights = np.array([bspline_kernel(x - k, 3) for k in range(4)])
        expected = weights @ coeffs @ weights

        with build_plan(image, 3, "periodic", 1e-6) as plan:
            nptest.assert_allclose(plan.coefficients[0], coeffs, atol=1e-12)
            assert plan.evaluate(x, y)[0] == pytest.approx(expected, abs=1e-9)

    @pytest.mark.parametrize("order", [0, 1, 2, 3, 5, 11])
    @pytest.mark.parametrize("boundary", list(BoundaryExt))
    def test_sample_reproduction(
        self, order: int, boundary: BoundaryExt, rng: np.random.Generator
    ) -> None:
        image = rng.random((2, 9, 12))
        with build_plan(image, order, boundary, 1e-12) as plan:
            nptest.assert_allclose(reconstruct_samples(plan), image, atol=1e-8)

    @pytest.mark.parametrize("boundary", ["periodic", "hsymmetric", "wsymmetric"])
    def test_sample_reproduction_enlarged(
        self, boundary: str, rng: np.random.Generator
    ) -> None:
        image = rng.random((1, 30, 25))
        with build_plan(image, 7, boundary, 1e-10, True) as plan:
            assert plan.enlarged
            nptest.assert_allclose(reconstruct_samples(plan), image, atol=1e-7)

    def test_enlarged_agrees_with_exact_domain(self, rng: np.random.Generator) -> None:
        image = rng.random((12, 10))
        xs = rng.uniform(-3.0, 13.0, 50)
        ys = rng.uniform(-3.0, 15.0, 50)
        with build_plan(image, 5, "hsym", 1e-12) as exact, build_plan(
            image, 5, "hsym", 1e-12, True
        ) as enlarged:
            nptest.assert_allclose(
                enlarged.evaluate_points(xs, ys), exact.evaluate_points(xs, ys), atol=1e-8
            )


class TestDegenerateOrders:
    """Nearest-neighbour and bilinear interpolation."""

    def test_order_zero_is_nearest_neighbour(self, rng: np.random.Generator) -> None:
        image = rng.random((3, 4))
        with build_plan(image, 0, "hsym") as plan:
            assert plan.evaluate(1.4, 0.6)[0] == image[1, 1]
            assert plan.evaluate(1.6, 2.2)[0] == image[2, 2]
            assert plan.evaluate(2.5, 0.0)[0] == image[0, 3]

    def test_order_one_is_bilinear(self, rng: np.random.Generator) -> None:
        image = rng.random((3, 4))
        expected = 0.5 * (0.75 * (image[0, 1] + image[1, 1]) + 0.25 * (image[0, 2] + image[1, 2]))
        with build_plan(image, 1, "periodic") as plan:
            assert plan.evaluate(1.25, 0.5)[0] == pytest.approx(expected, rel=1e-14)


class TestBoundaryBehaviour:
    """Periodicity, symmetry and constant fill."""

    @pytest.mark.parametrize(
        ("boundary", "period"),
        [("periodic", (7, 5)), ("hsymmetric", (14, 10)), ("wsymmetric", (12, 8))],
    )
    def test_periodicity(
        self, boundary: str, period: tuple[int, int], rng: np.random.Generator
    ) -> None:
        image = rng.random((5, 7))
        xs = rng.uniform(-2.0, 9.0, 20)
        ys = rng.uniform(-2.0, 7.0, 20)
        with build_plan(image, 5, boundary, 1e-9) as plan:
            base = plan.evaluate_points(xs, ys)
            shifted = plan.evaluate_points(xs + period[0], ys - 3 * period[1])
            nptest.assert_allclose(shifted, base, atol=1e-12)

    def test_half_sample_symmetry(self, rng: np.random.Generator) -> None:
        image = rng.random((6, 8))
        xs = rng.uniform(0.0, 8.0, 25)
        ys = rng.uniform(0.0, 6.0, 25)
        with build_plan(image, 4, "hsymmetric", 1e-9) as plan:
            base = plan.evaluate_points(xs, ys)
            nptest.assert_allclose(plan.evaluate_points(-1.0 - xs, ys), base, atol=1e-12)
            nptest.assert_allclose(plan.evaluate_points(xs, -1.0 - ys), base, atol=1e-12)
            nptest.assert_allclose(plan.evaluate_points(15.0 - xs, ys), base, atol=1e-12)

    def test_whole_sample_symmetry(self, rng: np.random.Generator) -> None:
        image = rng.random((6, 8))
        xs = rng.uniform(0.0, 8.0, 25)
        ys = rng.uniform(0.0, 6.0, 25)
        with build_plan(image, 3, "wsymmetric", 1e-9) as plan:
            base = plan.evaluate_points(xs, ys)
            nptest.assert_allclose(plan.evaluate_points(-xs, -ys), base, atol=1e-12)
            nptest.assert_allclose(plan.evaluate_points(14.0 - xs, ys), base, atol=1e-12)

    @pytest.mark.parametrize("order", [1, 3, 6])
    def test_constant_fill_far_away(self, order: int, rng: np.random.Generator) -> None:
        image = rng.random((2, 5, 6))
        with build_plan(image, order, "constant", fill_value=3.0) as plan:
            for x, y in [(-100.0, 2.0), (2.0, 1e6), (1e300, -1e300), (-40.0, -40.0)]:
                nptest.assert_allclose(plan.evaluate(x, y), [3.0, 3.0], atol=1e-12)

    def test_constant_fill_approached_outside(self, rng: np.random.Generator) -> None:
        image = rng.random((8, 8))
        with build_plan(image, 3, "constant", 1e-8, fill_value=-1.0) as plan:
            distances = np.arange(0.0, 21.0)
            values = plan.evaluate_points(7.0 + distances, np.full(distances.size, 3.0))[0]
            assert values[0] == pytest.approx(image[3, 7], abs=1e-8)
            # the spline relaxes to the fill value geometrically
            assert np.max(np.abs(values[15:] + 1.0)) < 1e-6
            assert values[-1] == pytest.approx(-1.0, abs=1e-8)


class TestEvaluatePoints:
    """Vectorized evaluation."""

    def test_matches_pointwise(self, rng: np.random.Generator) -> None:
        image = rng.random((3, 6, 7))
        xs = rng.uniform(-4.0, 10.0, 15)
        ys = rng.uniform(-4.0, 10.0, 15)
        with build_plan(image, 5, "wsym") as plan:
            values = evaluate_points(plan, xs, ys)
            assert values.shape == (3, 15)
            for j in range(15):
                nptest.assert_allclose(values[:, j], evaluate(plan, xs[j], ys[j]), atol=1e-15)

    def test_broadcast_shape(self) -> None:
        with build_plan(np.ones((2, 4, 4)), 3) as plan:
            values = plan.evaluate_points(np.zeros((2, 3)), 1.5)
            assert values.shape == (2, 2, 3)
            nptest.assert_allclose(values, 1.0)

    def test_scalar_points(self) -> None:
        with build_plan(np.ones((4, 4)), 3) as plan:
            assert plan.evaluate_points(1.0, 2.0).shape == (1,)

    def test_non_finite_coordinates(self) -> None:
        with build_plan(np.ones((2, 4, 4)), 3) as plan:
            assert np.all(np.isnan(plan.evaluate(np.nan, 1.0)))
            values = plan.evaluate_points([np.inf, 1.0, 2.0], [0.0, -np.inf, 2.0])
            assert np.all(np.isnan(values[:, :2]))
            nptest.assert_allclose(values[:, 2], 1.0)

    def test_incompatible_shapes(self) -> None:
        with build_plan(np.ones((4, 4)), 3) as plan, pytest.raises(ValueError):
            plan.evaluate_points(np.zeros(3), np.zeros(4))

    def test_evaluation_leaves_plan_unchanged(self, rng: np.random.Generator) -> None:
        with build_plan(rng.random((5, 5)), 3) as plan:
            before = plan.coefficients.copy()
            plan.evaluate_points(rng.uniform(-10, 10, 100), rng.uniform(-10, 10, 100))
            nptest.assert_array_equal(plan.coefficients, before)

    def test_destroyed_plan(self) -> None:
        plan = build_plan(np.ones((4, 4)), 3)
        plan.destroy()
        with pytest.raises(PlanDestroyedError):
            evaluate_points(plan, [0.0], [0.0])
        with pytest.raises(PlanDestroyedError):
            reconstruct_samples(plan)


class TestPrecision:
    """Sample reproduction within the requested tolerance."""

    @pytest.mark.parametrize("eps", [1e-2, 1e-4, 1e-6])
    @pytest.mark.parametrize("boundary", list(BoundaryExt))
    @pytest.mark.parametrize("order", [3, 11, 25])
    def test_reproduction_within_eps(
        self, order: int, boundary: BoundaryExt, eps: float, rng: np.random.Generator
    ) -> None:
        image = rng.random((40, 40))
        with build_plan(image, order, boundary, eps) as plan:
            error = np.max(np.abs(reconstruct_samples(plan)[0] - image))
        assert error <= eps * np.max(np.abs(image))

    @pytest.mark.parametrize("boundary", ["hsymmetric", "wsymmetric"])
    def test_reproduction_within_eps_on_larger_domain(
        self, boundary: str, rng: np.random.Generator
    ) -> None:
        image = rng.random((2, 40, 40))
        with build_plan(image, 11, boundary, 1e-3, True) as plan:
            error = np.max(np.abs(reconstruct_samples(plan) - image))
        assert error <= 1e-3

    @pytest.mark.parametrize("boundary", ["hsymmetric", "wsymmetric"])
    def test_error_decreases_with_eps(self, boundary: str, rng: np.random.Generator) -> None:
        image = rng.random((48, 48))
        errors = []
        for eps in [1e-2, 1e-4, 1e-6, 1e-8, 1e-10]:
            with build_plan(image, 11, boundary, eps) as plan:
                errors.append(float(np.max(np.abs(reconstruct_samples(plan)[0] - image))))
        for previous, current in zip(errors, errors[1:]):
            assert current <= previous + 1e-14
