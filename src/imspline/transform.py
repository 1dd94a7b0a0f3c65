"""Homographic warping of images by spline interpolation."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .boundary import BoundaryExt
from .config import DEFAULT_BOUNDARY, DEFAULT_EPS, DEFAULT_FILL_VALUE, DEFAULT_ORDER
from .geometry import OutputGeometry
from .homography import apply_homography, invert_homography
from .logger import logger
from .plan import build_plan


def warp_homography(  # noqa: PLR0913
    image: npt.ArrayLike,
    H: npt.ArrayLike,
    order: int = DEFAULT_ORDER,
    boundary: str | BoundaryExt = DEFAULT_BOUNDARY,
    eps: float = DEFAULT_EPS,
    larger: bool = False,
    geometry: OutputGeometry | None = None,
    *,
    fill_value: float = DEFAULT_FILL_VALUE,
) -> npt.NDArray[np.float64]:
    """Apply a homography to an image.

    Output pixel ``(i, j)`` sits at ``p = (x0 + i, y0 + j)`` in the output plane
    and takes the value of the spline interpolant at ``H^{-1} p``.

    Args:
        image (npt.ArrayLike): Planar image of shape (c, h, w) or (h, w).
        H (npt.ArrayLike): Homography from input to output coordinates.
        order (int): Spline order. Defaults to 11.
        boundary (str | BoundaryExt): Boundary extension. Defaults to half-symmetric.
        eps (float): Relative truncation tolerance in ``(0, 1)``. Defaults to 1e-6.
        larger (bool): Prefilter on an enlarged domain. Defaults to False.
        geometry (OutputGeometry | None): Output area; defaults to the input
            size at the origin.
        fill_value (float): Fill value of the constant extension.

    Returns:
        npt.NDArray[np.float64]: Warped image of shape (c, hout, wout).

    Raises:
        ConfigurationError: If an argument is invalid or ``H`` is singular.
        ResourceError: If the spline plan cannot be allocated.
    """
    inverse = invert_homography(H)

    with build_plan(image, order, boundary, eps, larger, fill_value=fill_value) as plan:
        if geometry is None:
            geometry = OutputGeometry(0.0, 0.0, plan.width, plan.height)
        logger.debug("Warping %r into %s", plan, geometry)

        rows, cols = np.mgrid[0 : geometry.height, 0 : geometry.width].astype(np.float64)
        points = np.stack([cols + geometry.x0, rows + geometry.y0], axis=-1)
        sources = apply_homography(inverse, points)
        return plan.evaluate_points(sources[..., 0], sources[..., 1])


__all__ = ["warp_homography"]
