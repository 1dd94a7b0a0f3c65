"""Numba-backed evaluation of B-spline coefficient grids at continuous coordinates."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

from ._boundary_impl import (
    _CONSTANT,
    _HSYMMETRIC,
    _extension_period_core,
    _resolve_index_core,
)
from ._kernel_impl import _cardinal_weights_core

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _reduce_coordinate_core(v: float, n: int, offset: int, order: int, boundary: int) -> float:
    """Bring a coordinate back near the domain without changing the spline value.

    Periodic and symmetric splines are periodic, so the coordinate is reduced
    modulo the extension period. The constant extension is clamped far enough
    outside the working buffer that only fill values are touched.
    """
    if boundary == _CONSTANT:
        limit = float(offset + order + 2)
        if v < -limit:
            return -limit
        if v > n + limit:
            return n + limit
        return v
    period = float(_extension_period_core(n, boundary))
    return v - period * np.floor(v / period)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_point_core(  # noqa: PLR0913
    coeffs: npt.NDArray[np.float64],
    order: int,
    x: float,
    y: float,
    offset_x: int,
    offset_y: int,
    width: int,
    height: int,
    boundary: int,
    fill: float,
    wx: npt.NDArray[np.float64],
    wy: npt.NDArray[np.float64],
    cols: npt.NDArray[np.int64],
    out: npt.NDArray[np.float64],
) -> None:
    """Interpolate every channel of a coefficient grid at ``(x, y)``.

    Args:
        coeffs (npt.NDArray[np.float64]): Coefficients of shape (c, h', w').
        order (int): Spline order.
        x (float): Column coordinate, in original image pixels.
        y (float): Row coordinate, in original image pixels.
        offset_x (int): Column of the buffer where the original image starts.
        offset_y (int): Row of the buffer where the original image starts.
        width (int): Original image width.
        height (int): Original image height.
        boundary (int): Boundary code.
        fill (float): Fill value of the constant extension.
        wx (npt.NDArray[np.float64]): Scratch array of length order+1.
        wy (npt.NDArray[np.float64]): Scratch array of length order+1.
        cols (npt.NDArray[np.int64]): Scratch array of length order+1.
        out (npt.NDArray[np.float64]): Output array of length c.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    num_channels, size_y, size_x = coeffs.shape

    if not (np.isfinite(x) and np.isfinite(y)):
        for ch in range(num_channels):
            out[ch] = np.nan
        return

    x = _reduce_coordinate_core(x, width, offset_x, order, boundary)
    y = _reduce_coordinate_core(y, height, offset_y, order, boundary)

    half = 0.5 * (order - 1)
    sx = x - half
    fx = np.floor(sx)
    sy = y - half
    fy = np.floor(sy)
    _cardinal_weights_core(order, sx - fx, wx)
    _cardinal_weights_core(order, sy - fy, wy)

    first_x = int(fx) + offset_x
    first_y = int(fy) + offset_y
    for k in range(order + 1):
        cols[k] = _resolve_index_core(first_x + k, size_x, offset_x, width, boundary)

    for ch in range(num_channels):
        out[ch] = 0.0

    for l in range(order + 1):  # noqa: E741
        row = _resolve_index_core(first_y + l, size_y, offset_y, height, boundary)
        wl = wy[l]
        for k in range(order + 1):
            col = cols[k]
            weight = wl * wx[k]
            if row < 0 or col < 0:
                for ch in range(num_channels):
                    out[ch] += weight * fill
            else:
                for ch in range(num_channels):
                    out[ch] += weight * coeffs[ch, row, col]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_points_core(  # noqa: PLR0913
    coeffs: npt.NDArray[np.float64],
    order: int,
    xs: npt.NDArray[np.float64],
    ys: npt.NDArray[np.float64],
    offset_x: int,
    offset_y: int,
    width: int,
    height: int,
    boundary: int,
    fill: float,
    out: npt.NDArray[np.float64],
) -> None:
    """Interpolate at many points; ``out`` has shape (c, len(xs))."""
    num_channels = coeffs.shape[0]
    wx = np.empty(order + 1, dtype=np.float64)
    wy = np.empty(order + 1, dtype=np.float64)
    cols = np.empty(order + 1, dtype=np.int64)
    values = np.empty(num_channels, dtype=np.float64)

    for j in range(xs.shape[0]):
        _evaluate_point_core(
            coeffs,
            order,
            xs[j],
            ys[j],
            offset_x,
            offset_y,
            width,
            height,
            boundary,
            fill,
            wx,
            wy,
            cols,
            values,
        )
        for ch in range(num_channels):
            out[ch, j] = values[ch]


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    coeffs_dummy = np.zeros((1, 3, 3), dtype=np.float64)
    pts_dummy = np.array([0.25, 1.5], dtype=np.float64)
    out_dummy = np.empty((1, 2), dtype=np.float64)
    _evaluate_points_core(
        coeffs_dummy, 3, pts_dummy, pts_dummy, 0, 0, 3, 3, _HSYMMETRIC, 0.0, out_dummy
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_evaluate_point_core",
    "_evaluate_points_core",
    "_reduce_coordinate_core",
]
