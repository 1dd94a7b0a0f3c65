"""Tests for homography parsing, application and inversion."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from imspline.exceptions import ConfigurationError
from imspline.homography import apply_homography, invert_homography, parse_homography

PROJECTIVE = np.array([[1.1, 0.2, 3.0], [-0.1, 0.9, -2.0], [1e-3, 2e-3, 1.0]])


class TestParseHomography:
    """Reading the nine coefficients."""

    @pytest.mark.parametrize(
        "text",
        [
            "1 0 2.5 0 1 -1 0 0 1",
            "1 0 2.5; 0 1 -1; 0 0 1",
            "1,0,2.5,0,1,-1,0,0,1",
            "  1.0 0.0 +2.5e0 ; 0 1 -1e0 ; 0 0 1 ",
        ],
    )
    def test_separators(self, text: str) -> None:
        expected = np.array([[1.0, 0.0, 2.5], [0.0, 1.0, -1.0], [0.0, 0.0, 1.0]])
        nptest.assert_array_equal(parse_homography(text), expected)

    def test_scientific_notation(self) -> None:
        res = parse_homography("1 0 0 0 1 0 1e-3 -2.5E-4 .5")
        nptest.assert_array_equal(res[2], [1e-3, -2.5e-4, 0.5])

    @pytest.mark.parametrize("text", ["", "1 0 0 0 1 0 0 0", "1 0 0 0 1 0 0 0 1 0"])
    def test_wrong_count(self, text: str) -> None:
        with pytest.raises(ConfigurationError, match="Wrong number of parameters in homography"):
            parse_homography(text)


class TestApplyHomography:
    """Mapping of points."""

    def test_translation(self) -> None:
        H = np.array([[1.0, 0.0, 2.0], [0.0, 1.0, -3.0], [0.0, 0.0, 1.0]])
        res = apply_homography(H, [[0.0, 0.0], [1.5, 2.0]])
        nptest.assert_allclose(res, [[2.0, -3.0], [3.5, -1.0]])

    def test_projective_division(self) -> None:
        p = np.array([10.0, 20.0])
        w = PROJECTIVE[2, 0] * p[0] + PROJECTIVE[2, 1] * p[1] + PROJECTIVE[2, 2]
        expected = (PROJECTIVE[:2, :2] @ p + PROJECTIVE[:2, 2]) / w
        nptest.assert_allclose(apply_homography(PROJECTIVE, p), expected, rtol=1e-15)

    def test_accepts_flat_coefficients(self) -> None:
        p = np.array([[1.0, 2.0]])
        nptest.assert_array_equal(
            apply_homography(PROJECTIVE.ravel(), p), apply_homography(PROJECTIVE, p)
        )

    def test_shape_preservation(self) -> None:
        pts = np.zeros((4, 5, 2))
        assert apply_homography(PROJECTIVE, pts).shape == (4, 5, 2)

    def test_point_at_infinity(self) -> None:
        H = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]])
        res = apply_homography(H, [0.0, 1.0])
        assert not np.all(np.isfinite(res))

    def test_invalid_points(self) -> None:
        with pytest.raises(ValueError, match="last dimension of 2"):
            apply_homography(PROJECTIVE, np.zeros((3, 3)))

    def test_invalid_matrix(self) -> None:
        with pytest.raises(ConfigurationError, match="9 coefficients"):
            apply_homography(np.eye(2), [0.0, 0.0])


class TestInvertHomography:
    """Inverse maps."""

    def test_round_trip(self, rng: np.random.Generator) -> None:
        pts = rng.uniform(-50.0, 50.0, (20, 2))
        back = apply_homography(invert_homography(PROJECTIVE), apply_homography(PROJECTIVE, pts))
        nptest.assert_allclose(back, pts, atol=1e-10)

    def test_inverse_matrix(self) -> None:
        nptest.assert_allclose(invert_homography(PROJECTIVE) @ PROJECTIVE, np.eye(3), atol=1e-14)

    def test_singular(self) -> None:
        with pytest.raises(ConfigurationError, match="singular"):
            invert_homography(np.zeros((3, 3)))
