"""Precision utilities: tolerances and truncation of the boundary series."""

from __future__ import annotations

import math
from functools import cache
from typing import Any, cast

import numpy as np
from numpy import typing as npt

from ._prefilter_impl import _truncation_term_count_core
from .exceptions import ConfigurationError


@cache
def _ensure_float_dtype_by_name(name: str) -> np.dtype[np.floating[Any]]:
    """Cached validator returning a floating dtype from its canonical name.

    Args:
        name (str): Canonical NumPy dtype name (e.g., "float64").

    Returns:
        np.dtype[np.floating[Any]]: Validated floating-point dtype.

    Raises:
        ValueError: If dtype is not a supported floating-point type.
    """
    dtype_obj = np.dtype(name)
    if dtype_obj.type not in (np.float32, np.float64):
        raise ValueError(f"Unsupported dtype: {name}")
    return cast(np.dtype[np.floating[Any]], dtype_obj)


def get_machine_epsilon(dtype: npt.DTypeLike = np.float64) -> float:
    """Get machine epsilon for a given floating-point dtype.

    Args:
        dtype (npt.DTypeLike): ``float32`` or ``float64`` dtype. Defaults to float64.

    Returns:
        float: Machine epsilon for the given dtype.

    Raises:
        ValueError: If dtype is not a supported floating-point type.
    """
    dtype_obj = _ensure_float_dtype_by_name(np.dtype(dtype).name)
    return float(np.finfo(dtype_obj).eps)


def fix_precision(eps: float) -> float:
    """Convert a driver precision value into a relative tolerance.

    Values greater than or equal to 1 are read as a number of decimal digits:
    ``eps`` becomes ``10**-ceil(eps)``. Smaller values are returned unchanged.

    Args:
        eps (float): Precision as given on the command line.

    Returns:
        float: The relative tolerance.

    Example:
        >>> fix_precision(6)
        1e-06
        >>> fix_precision(0.01)
        0.01
    """
    eps = float(eps)
    if eps >= 1:
        return 10.0 ** (-math.ceil(eps))
    return eps


def validate_precision(eps: float) -> float:
    """Check that a relative tolerance lies in ``(0, 1)``.

    Args:
        eps (float): Relative truncation tolerance.

    Returns:
        float: The tolerance as a Python ``float``.

    Raises:
        ConfigurationError: If ``eps`` is not a finite number in ``(0, 1)``.
    """
    eps = float(eps)
    if not (math.isfinite(eps) and 0.0 < eps < 1.0):
        raise ConfigurationError(f"eps must lie in (0, 1), got {eps}")
    return eps


def truncation_term_count(
    pole: float, eps: float, period: int, exact: bool = False
) -> tuple[int, bool]:
    r"""Number of terms kept in a geometric boundary series.

    The initial value of a recursive filter with pole ``z`` is a series
    :math:`\sum_{k \ge 0} z^k \tilde{x}_k` over virtual samples of period ``period``.
    Keeping ``K`` terms leaves a tail bounded by :math:`|z|^K / (1 - |z|)` times
    the signal amplitude; ``K`` is the smallest count making that bound lower
    than ``eps``. Once ``K`` reaches the period, the tail is summed in closed
    form instead and the series is exact.

    Args:
        pole (float): Filter pole, ``0 < |pole| < 1``.
        eps (float): Relative tolerance in ``(0, 1)``.
        period (int): Period of the virtual samples. Must be positive.
        exact (bool): Force exact summation over one period. Defaults to False.

    Returns:
        tuple[int, bool]: The term count and whether the tail is closed
        analytically (in which case the count equals ``period``).

    Raises:
        ConfigurationError: If any argument is out of range.

    Example:
        >>> truncation_term_count(np.sqrt(3.0) - 2.0, 1e-6, 1000)
        (11, False)
    """
    z_abs = abs(float(pole))
    if not 0.0 < z_abs < 1.0:
        raise ConfigurationError("pole magnitude must lie in (0, 1)")
    eps = validate_precision(eps)
    if period < 1:
        raise ConfigurationError("period must be positive")
    count, closed = _truncation_term_count_core(z_abs, eps, int(period), bool(exact))
    return int(count), bool(closed)


def pole_tolerances(
    poles: npt.ArrayLike, eps: float, ndim: int = 2
) -> npt.NDArray[np.float64]:
    r"""Truncation tolerance of the boundary series of each pole.

    A pole ``z`` filters with gain :math:`G_z = ((1 + |z|) / (1 - |z|))^2` in the
    maximum norm. Truncating its two boundary series at tolerance
    :math:`\epsilon_z` perturbs its output by at most
    :math:`3 a_z \epsilon_z` times the input amplitude, where
    :math:`a_z = |z| (1 + |z|) / (1 - |z|)`; the remaining poles, and the other
    passes of a separable filter, amplify that perturbation further. With ``m``
    poles of total gain ``G``, the tolerance

    .. math::

        \epsilon_z = \frac{\epsilon}{3 m a_z (G / G_z) \, d \, G^{d - 1}}

    keeps the coefficient error of a ``d``-dimensional filter, and hence the
    error on the interpolated samples, below ``eps`` times the signal amplitude.

    Args:
        poles (npt.ArrayLike): Filter poles, ``0 < |z| < 1``.
        eps (float): Relative tolerance in ``(0, 1)``.
        ndim (int): Number of separable passes (1 for lines, 2 for images).
            Defaults to 2.

    Returns:
        npt.NDArray[np.float64]: One tolerance per pole, never above ``eps``.

    Raises:
        ConfigurationError: If an argument is out of range.

    Example:
        >>> bool(pole_tolerances([np.sqrt(3.0) - 2.0], 1e-6, ndim=1)[0] < 1e-6)
        True
    """
    eps = validate_precision(eps)
    if ndim not in (1, 2):
        raise ConfigurationError(f"ndim must be 1 or 2, got {ndim!r}")
    z_abs = np.abs(np.asarray(poles, dtype=np.float64).ravel())
    if np.any((z_abs <= 0.0) | (z_abs >= 1.0)):
        raise ConfigurationError("pole magnitude must lie in (0, 1)")
    if z_abs.size == 0:
        return np.empty(0, dtype=np.float64)

    gains = ((1.0 + z_abs) / (1.0 - z_abs)) ** 2
    total_gain = float(np.prod(gains))
    spread = z_abs * (1.0 + z_abs) / (1.0 - z_abs)
    bound = 3.0 * z_abs.size * spread * (total_gain / gains) * ndim * total_gain ** (ndim - 1)
    # floor keeps the term counts finite for eps near the underflow limit
    return np.clip(eps / bound, np.finfo(np.float64).tiny, eps)


__all__ = [
    "fix_precision",
    "get_machine_epsilon",
    "pole_tolerances",
    "truncation_term_count",
    "validate_precision",
]
