"""Centered B-spline kernel: values, support, window weights and prefilter poles.

The centered B-spline of order (degree) ``n`` is the ``n``-fold self-convolution
of the unit box ``[-1/2, 1/2)``. It is nonzero on ``|x| < (n + 1) / 2`` and
touches ``n + 1`` lattice points per axis.

Window convention: a query at ``x`` touches the lattice points
``first, ..., first + n`` with ``first = floor(x - (n - 1) / 2)``. Odd orders
are thus centered on ``floor(x)`` and even orders on the nearest integer.
"""

from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt

from ._kernel_impl import (
    _bspline_values_core,
    _compute_poles_impl,
    _kernel_weights_core,
)
from .config import validate_order


def kernel_support(order: int) -> int:
    """Number of lattice points touched per axis (``order + 1``).

    Raises:
        ConfigurationError: If the order is out of range.
    """
    return validate_order(order) + 1


def kernel_radius(order: int) -> float:
    """Half-width of the kernel support, ``(order + 1) / 2``.

    Raises:
        ConfigurationError: If the order is out of range.
    """
    return 0.5 * (validate_order(order) + 1)


def bspline_kernel(x: npt.ArrayLike, order: int) -> float | npt.NDArray[np.float64]:
    """Evaluate the centered B-spline of the given order.

    Orders 0 to 3 use closed-form piecewise polynomials; higher orders use the
    Cox-de Boor recursion.

    Args:
        x (npt.ArrayLike): Offset(s) from the kernel center.
        order (int): Spline order, in ``[0, MAX_ORDER]``.

    Returns:
        float | npt.NDArray[np.float64]: Kernel value(s); a float for scalar input,
        otherwise an array with the shape of ``x``.

    Raises:
        ConfigurationError: If the order is out of range.

    Example:
        >>> bspline_kernel([0.0, 1.0], 3)
        array([0.66666667, 0.16666667])
    """
    order = validate_order(order)
    pts = np.asarray(x, dtype=np.float64)
    flat = np.ascontiguousarray(pts.ravel())
    out = np.empty_like(flat)
    _bspline_values_core(order, flat, out)
    if pts.ndim == 0:
        return float(out[0])
    return out.reshape(pts.shape)


def kernel_window(x: float, order: int) -> tuple[int, float]:
    """First lattice index touched by a query and its position inside the window.

    Args:
        x (float): Query coordinate along one axis.
        order (int): Spline order.

    Returns:
        tuple[int, float]: ``(first, t)`` with ``first = floor(x - (order - 1) / 2)``
        and ``t = x - (order - 1) / 2 - first`` in ``[0, 1)``.

    Raises:
        ConfigurationError: If the order is out of range.
    """
    shifted = float(x) - 0.5 * (validate_order(order) - 1)
    first = math.floor(shifted)
    return first, shifted - first


def kernel_weights(t: npt.ArrayLike, order: int) -> npt.NDArray[np.float64]:
    """Weights of the lattice points of a window.

    For a window position ``t`` returned by :func:`kernel_window`, entry ``k``
    is the kernel value at the offset between the query and the lattice point
    ``first + k``. The weights sum to one.

    Args:
        t (npt.ArrayLike): Window position(s), in ``[0, 1]``.
        order (int): Spline order.

    Returns:
        npt.NDArray[np.float64]: Array with the shape of ``t`` and a trailing
        dimension of length ``order + 1``.

    Raises:
        ConfigurationError: If the order is out of range.
        ValueError: If any position lies outside ``[0, 1]``.

    Example:
        >>> kernel_weights(0.5, 3)
        array([0.02083333, 0.47916667, 0.47916667, 0.02083333])
    """
    order = validate_order(order)
    pts = np.asarray(t, dtype=np.float64)
    flat = np.ascontiguousarray(pts.ravel())
    if np.any((flat < 0.0) | (flat > 1.0)):
        raise ValueError("window positions must lie in [0, 1]")
    out = np.empty((flat.size, order + 1), dtype=np.float64)
    _kernel_weights_core(order, flat, out)
    return out.reshape(*pts.shape, order + 1)


def compute_poles(order: int) -> npt.NDArray[np.float64]:
    """Poles of the recursive prefilter of the given spline order.

    There are ``order // 2`` real poles in ``(-1, 0)``; orders 0 and 1 have none
    (their coefficients are the samples themselves).

    Args:
        order (int): Spline order.

    Returns:
        npt.NDArray[np.float64]: The poles, sorted by decreasing magnitude.

    Raises:
        ConfigurationError: If the order is out of range.

    Example:
        >>> compute_poles(3)
        array([-0.26794919])
    """
    return np.array(_compute_poles_impl(validate_order(order)), dtype=np.float64)


__all__ = [
    "bspline_kernel",
    "compute_poles",
    "kernel_radius",
    "kernel_support",
    "kernel_weights",
    "kernel_window",
]
