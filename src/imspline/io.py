"""Image input/output as planar float buffers.

Images are read with OpenCV and returned as ``(c, h, w)`` float64 arrays, channels
in file order. Paths are read and written through byte buffers so that
non-ASCII paths work on every platform.
"""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import numpy.typing as npt

from .exceptions import ImageIOError

FLOAT_EXTENSIONS = frozenset({".tif", ".tiff", ".exr", ".pfm"})
"""File extensions written as 32-bit floats; all others are written as 8 bits."""

_WRITABLE_CHANNELS = (1, 3, 4)


def read_image(path: str | Path) -> npt.NDArray[np.float64]:
    """Read an image file into a planar buffer.

    Args:
        path (str | Path): Image file.

    Returns:
        npt.NDArray[np.float64]: Array of shape (c, h, w).

    Raises:
        ImageIOError: If the file does not exist or cannot be decoded.
    """
    path = Path(path)
    try:
        data = np.fromfile(path, dtype=np.uint8)
    except OSError as exc:
        raise ImageIOError(f"Cannot read image '{path}': {exc}") from exc

    try:
        image = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise ImageIOError(f"Cannot decode image '{path}': {exc}") from exc
    if image is None:
        raise ImageIOError(f"Cannot decode image '{path}'")

    if image.ndim == 2:  # noqa: PLR2004
        image = image[np.newaxis]
    else:
        image = np.moveaxis(image, -1, 0)
    return np.ascontiguousarray(image, dtype=np.float64)


def write_image(path: str | Path, image: npt.ArrayLike) -> None:
    """Write a planar buffer to an image file.

    TIFF, EXR and PFM files hold 32-bit floats. Other formats are rounded and
    clipped to ``[0, 255]``.

    Args:
        path (str | Path): Output file; the extension selects the format.
        image (npt.ArrayLike): Array of shape (c, h, w) or (h, w).

    Raises:
        ImageIOError: If the image cannot be encoded or written, or has a
            channel count other than 1, 3 or 4.
    """
    path = Path(path)
    arr = np.asarray(image, dtype=np.float64)
    if arr.ndim == 2:  # noqa: PLR2004
        arr = arr[np.newaxis]
    if arr.ndim != 3 or arr.shape[0] not in _WRITABLE_CHANNELS:  # noqa: PLR2004
        raise ImageIOError(
            f"Cannot write an image of shape {arr.shape}: expected 1, 3 or 4 channels"
        )

    suffix = path.suffix.lower()
    if suffix in FLOAT_EXTENSIONS:
        pixels = arr.astype(np.float32)
    else:
        pixels = np.clip(np.rint(arr), 0, 255).astype(np.uint8)
    pixels = pixels[0] if pixels.shape[0] == 1 else np.moveaxis(pixels, 0, -1)

    try:
        ok, encoded = cv2.imencode(suffix, np.ascontiguousarray(pixels))
    except cv2.error as exc:
        raise ImageIOError(f"Cannot encode image '{path}': {exc}") from exc
    if not ok:
        raise ImageIOError(f"Cannot encode image '{path}'")

    try:
        encoded.tofile(path)
    except OSError as exc:
        raise ImageIOError(f"Cannot write image '{path}': {exc}") from exc


__all__ = [
    "FLOAT_EXTENSIONS",
    "read_image",
    "write_image",
]
