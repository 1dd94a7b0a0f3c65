"""Tests for image file input/output."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.testing as nptest
import pytest

from imspline.exceptions import ImageIOError
from imspline.io import read_image, write_image


class TestRoundTrip:
    """Images written then read back."""

    def test_color_png(self, tmp_path: Path, rng: np.random.Generator) -> None:
        image = rng.integers(0, 256, (3, 5, 7)).astype(np.float64)
        path = tmp_path / "color.png"
        write_image(path, image)
        res = read_image(path)
        assert res.dtype == np.float64
        assert res.shape == (3, 5, 7)
        nptest.assert_array_equal(res, image)

    def test_grayscale_png(self, tmp_path: Path, rng: np.random.Generator) -> None:
        image = rng.integers(0, 256, (4, 6)).astype(np.float64)
        path = tmp_path / "gray.png"
        write_image(path, image)
        res = read_image(path)
        assert res.shape == (1, 4, 6)
        nptest.assert_array_equal(res[0], image)

    def test_rounding_and_clipping(self, tmp_path: Path) -> None:
        image = np.array([[[-5.0, 0.4, 0.6, 254.6, 300.0]]])
        path = tmp_path / "clip.png"
        write_image(path, image)
        nptest.assert_array_equal(read_image(path), [[[0.0, 0.0, 1.0, 255.0, 255.0]]])

    def test_float_tiff(self, tmp_path: Path, rng: np.random.Generator) -> None:
        image = rng.uniform(-10.0, 300.0, (1, 4, 5))
        path = tmp_path / "float.tif"
        write_image(path, image)
        res = read_image(path)
        assert res.shape == (1, 4, 5)
        nptest.assert_allclose(res, image.astype(np.float32), rtol=1e-7)

    def test_non_ascii_path(self, tmp_path: Path) -> None:
        image = np.full((1, 2, 3), 42.0)
        path = tmp_path / "été.png"
        write_image(str(path), image)
        nptest.assert_array_equal(read_image(str(path)), image)


class TestErrors:
    """Unreadable and unwritable images."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImageIOError, match="Cannot read image"):
            read_image(tmp_path / "missing.png")

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "garbage.png"
        path.write_bytes(b"this is not an image")
        with pytest.raises(ImageIOError, match="Cannot decode image"):
            read_image(path)

    def test_two_channels(self, tmp_path: Path) -> None:
        with pytest.raises(ImageIOError, match="1, 3 or 4 channels"):
            write_image(tmp_path / "two.png", np.zeros((2, 3, 3)))

    def test_unknown_extension(self, tmp_path: Path) -> None:
        with pytest.raises(ImageIOError, match="Cannot encode image"):
            write_image(tmp_path / "image.unknownformat", np.zeros((1, 3, 3)))

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ImageIOError, match="Cannot write image"):
            write_image(tmp_path / "no" / "such" / "dir.png", np.zeros((1, 3, 3)))

    def test_io_errors_are_os_errors(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            read_image(tmp_path / "missing.png")
