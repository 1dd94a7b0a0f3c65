"""One-dimensional recursive prefiltering and its boundary initialization.

These functions expose, on a single line of samples, the building blocks used
by :func:`imspline.build_plan` on images.
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

from ._prefilter_impl import _filter_line_core, _geometric_boundary_sum_core
from .boundary import BoundaryExt, parse_boundary
from .config import DEFAULT_EPS, DEFAULT_FILL_VALUE
from .exceptions import ConfigurationError
from .kernel import compute_poles
from .precision import pole_tolerances, validate_precision


def _normalize_signal(signal: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Convert a signal to a contiguous, non-empty 1D float64 array."""
    arr = np.ascontiguousarray(signal, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise ConfigurationError("signal must be a non-empty 1D array")
    return arr


def geometric_boundary_sum(
    signal: npt.ArrayLike,
    pole: float,
    eps: float = DEFAULT_EPS,
    boundary: str | BoundaryExt = BoundaryExt.HSYMMETRIC,
    direction: Literal["backward", "forward"] = "backward",
    fill_value: float = DEFAULT_FILL_VALUE,
) -> tuple[float, int]:
    r"""Geometric series over the virtual samples past one end of a signal.

    For ``direction="backward"`` computes :math:`\sum_{k \ge 0} z^k \tilde{x}[-1-k]`
    and for ``direction="forward"`` :math:`\sum_{k \ge 0} z^k \tilde{x}[n+k]`,
    where :math:`\tilde{x}` is the boundary extension of the signal of length
    ``n``. The periodic extension is summed exactly over one period. The other
    extensions are summed term by term until the tail bound
    :math:`|z|^K / (1 - |z|)` falls below ``eps``; when the summation reaches a
    full period of the extension first, the tail is closed analytically and the
    result is exact.

    Args:
        signal (npt.ArrayLike): 1D signal.
        pole (float): Filter pole, ``0 < |pole| < 1``.
        eps (float): Relative tolerance in ``(0, 1)``. Defaults to 1e-6.
        boundary (str | BoundaryExt): Boundary extension. Defaults to half-symmetric.
        direction (Literal["backward", "forward"]): End of the signal.
            Defaults to "backward".
        fill_value (float): Fill value of the constant extension. Defaults to 0.

    Returns:
        tuple[float, int]: The sum and the number of terms evaluated.

    Raises:
        ConfigurationError: If any argument is invalid.
    """
    src = _normalize_signal(signal)
    z = float(pole)
    if not 0.0 < abs(z) < 1.0:
        raise ConfigurationError("pole magnitude must lie in (0, 1)")
    eps = validate_precision(eps)
    code = parse_boundary(boundary).code

    if direction == "backward":
        start, step = -1, -1
    elif direction == "forward":
        start, step = src.size, 1
    else:
        raise ConfigurationError(f"direction must be 'backward' or 'forward', got {direction!r}")

    value, count = _geometric_boundary_sum_core(
        src, z, eps, start, step, 0, src.size, code, float(fill_value)
    )
    return float(value), int(count)


def causal_initial_value(
    signal: npt.ArrayLike,
    pole: float,
    eps: float = DEFAULT_EPS,
    boundary: str | BoundaryExt = BoundaryExt.HSYMMETRIC,
    fill_value: float = DEFAULT_FILL_VALUE,
) -> tuple[float, int]:
    r"""First value of the causal recursion with pole ``z``.

    Equals :math:`x[0] + z \sum_{k \ge 0} z^k \tilde{x}[-1-k]`, the causal filter
    output at 0 of the infinitely extended signal, within ``eps``.

    Args:
        signal (npt.ArrayLike): 1D signal.
        pole (float): Filter pole, ``0 < |pole| < 1``.
        eps (float): Relative tolerance in ``(0, 1)``. Defaults to 1e-6.
        boundary (str | BoundaryExt): Boundary extension. Defaults to half-symmetric.
        fill_value (float): Fill value of the constant extension. Defaults to 0.

    Returns:
        tuple[float, int]: The initial value and the number of series terms used.

    Raises:
        ConfigurationError: If any argument is invalid.
    """
    src = _normalize_signal(signal)
    head, count = geometric_boundary_sum(src, pole, eps, boundary, "backward", fill_value)
    return float(src[0] + float(pole) * head), count


def prefilter_line(
    signal: npt.ArrayLike,
    order: int,
    boundary: str | BoundaryExt = BoundaryExt.HSYMMETRIC,
    eps: float = DEFAULT_EPS,
    fill_value: float = DEFAULT_FILL_VALUE,
) -> npt.NDArray[np.float64]:
    r"""B-spline coefficients of a 1D signal.

    The spline :math:`\sum_k c_k \beta^n(x - k)` built on the returned
    coefficients interpolates the signal at the integers, within ``eps`` times
    the signal amplitude.

    Args:
        signal (npt.ArrayLike): 1D signal.
        order (int): Spline order.
        boundary (str | BoundaryExt): Boundary extension. Defaults to half-symmetric.
        eps (float): Relative tolerance in ``(0, 1)``. Defaults to 1e-6.
        fill_value (float): Fill value of the constant extension. Defaults to 0.

    Returns:
        npt.NDArray[np.float64]: The coefficients, same length as the signal.

    Raises:
        ConfigurationError: If any argument is invalid.
    """
    line = _normalize_signal(signal).copy()
    poles = compute_poles(order)
    eps = validate_precision(eps)
    code = parse_boundary(boundary).code
    work = np.empty_like(line)
    tolerances = pole_tolerances(poles, eps, ndim=1)
    _filter_line_core(line, work, poles, tolerances, 0, line.size, code, float(fill_value))
    return line


__all__ = [
    "causal_initial_value",
    "geometric_boundary_sum",
    "prefilter_line",
]
