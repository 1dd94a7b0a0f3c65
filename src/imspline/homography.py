"""Homography algebra: parsing, application and inversion of 3x3 projective maps."""

from __future__ import annotations

import re

import numpy as np
import numpy.typing as npt

from .exceptions import ConfigurationError

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _as_matrix(H: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Return a homography as a (3, 3) float64 array."""
    mat = np.asarray(H, dtype=np.float64)
    if mat.size != 9:  # noqa: PLR2004
        raise ConfigurationError(f"A homography has 9 coefficients, got {mat.size}")
    return mat.reshape(3, 3)


def parse_homography(text: str) -> npt.NDArray[np.float64]:
    """Read the nine coefficients of a homography, row by row.

    Coefficients may be separated by spaces or separator signs, e.g.
    ``"1 0 0; 0 1 0; 0 0 1"``.

    Args:
        text (str): The coefficients.

    Returns:
        npt.NDArray[np.float64]: The (3, 3) matrix.

    Raises:
        ConfigurationError: If the text does not hold exactly nine numbers.

    Example:
        >>> parse_homography("1 0 2.5; 0 1 -1; 0 0 1")[:, 2]
        array([ 2.5, -1. ,  1. ])
    """
    values = [float(v) for v in _NUMBER_RE.findall(text)]
    if len(values) != 9:  # noqa: PLR2004
        raise ConfigurationError(
            f"Wrong number of parameters in homography: expected 9, got {len(values)}"
        )
    return np.array(values, dtype=np.float64).reshape(3, 3)


def apply_homography(H: npt.ArrayLike, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Map points through a homography.

    Args:
        H (npt.ArrayLike): The homography, (3, 3) or 9 coefficients.
        points (npt.ArrayLike): Points of shape (..., 2), as ``(x, y)``.

    Returns:
        npt.NDArray[np.float64]: Mapped points with the shape of ``points``.
        Points sent to infinity have non-finite coordinates.

    Raises:
        ConfigurationError: If ``H`` does not have nine coefficients.
        ValueError: If the last dimension of ``points`` is not 2.
    """
    mat = _as_matrix(H)
    pts = np.asarray(points, dtype=np.float64)
    if pts.shape[-1] != 2:  # noqa: PLR2004
        raise ValueError(f"points must have a last dimension of 2, got shape {pts.shape}")

    x = pts[..., 0]
    y = pts[..., 1]
    with np.errstate(divide="ignore", invalid="ignore"):
        w = mat[2, 0] * x + mat[2, 1] * y + mat[2, 2]
        mapped_x = (mat[0, 0] * x + mat[0, 1] * y + mat[0, 2]) / w
        mapped_y = (mat[1, 0] * x + mat[1, 1] * y + mat[1, 2]) / w
    return np.stack([mapped_x, mapped_y], axis=-1)


def invert_homography(H: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Inverse of a homography.

    Args:
        H (npt.ArrayLike): The homography, (3, 3) or 9 coefficients.

    Returns:
        npt.NDArray[np.float64]: The (3, 3) inverse matrix.

    Raises:
        ConfigurationError: If ``H`` does not have nine coefficients or is singular.
    """
    mat = _as_matrix(H)
    try:
        return np.linalg.inv(mat)
    except np.linalg.LinAlgError as exc:
        raise ConfigurationError("The homography is singular") from exc


__all__ = [
    "apply_homography",
    "invert_homography",
    "parse_homography",
]
