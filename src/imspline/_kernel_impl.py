"""Numba-backed core implementations of the centered B-spline kernel and its poles."""

from __future__ import annotations

from collections.abc import Callable
from functools import cache
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt
from scipy.optimize import brentq

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
def _cardinal_weights_core(
    n: int,
    t: float,
    out: npt.NDArray[np.float64],
) -> None:
    """Evaluate the n+1 cardinal B-splines of degree n active on the unit span.

    With ``N`` the B-spline of degree n supported on ``[0, n + 1]``, writes
    ``out[r] = N(t + n - r)`` for ``r = 0, ..., n``. Uses the stable Cox-de Boor
    (BasisFuns) recursion specialized to span index i=0.

    Args:
        n (int): Degree of the B-spline basis (>= 0).
        t (float): Position inside the span, in ``[0, 1]``.
        out (npt.NDArray[np.float64]): Output array of length n+1.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    out[0] = 1.0
    if n == 0:
        return

    one_minus_t = 1.0 - t
    for k in range(1, n + 1):
        inv_k = 1.0 / k
        saved = 0.0
        for r in range(k):
            Nr_old = out[r]
            term = (r + one_minus_t) * inv_k
            out[r] = saved + Nr_old * term
            saved = Nr_old * (1.0 - term)
        out[k] = saved


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _bspline_closed_form_core(x: float, n: int) -> float:
    """Closed-form centered B-spline of degree 0 to 3.

    The degree-0 kernel is the half-open box ``[-1/2, 1/2)``.
    """
    ax = abs(x)
    if n == 0:
        if -0.5 <= x < 0.5:
            return 1.0
        return 0.0
    if n == 1:
        if ax < 1.0:
            return 1.0 - ax
        return 0.0
    if n == 2:
        if ax < 0.5:
            return 0.75 - ax * ax
        if ax < 1.5:
            t = 1.5 - ax
            return 0.5 * t * t
        return 0.0
    # n == 3
    if ax < 1.0:
        return 2.0 / 3.0 - ax * ax + 0.5 * ax * ax * ax
    if ax < 2.0:
        t = 2.0 - ax
        return t * t * t / 6.0
    return 0.0


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _bspline_value_core(x: float, n: int) -> float:
    """Centered B-spline of degree n at x.

    Degrees up to 3 use the closed forms; higher degrees use the Cox-de Boor
    recursion on the span containing ``x + (n + 1) / 2``.
    """
    if n <= 3:
        return _bspline_closed_form_core(x, n)

    u = x + 0.5 * (n + 1)
    if u <= 0.0 or u >= n + 1:
        return 0.0
    span = int(np.floor(u))
    weights = np.empty(n + 1, dtype=np.float64)
    _cardinal_weights_core(n, u - span, weights)
    return weights[n - span]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _bspline_values_core(
    n: int,
    x: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Vectorized :func:`_bspline_value_core`, results written to ``out``."""
    for j in range(x.shape[0]):
        out[j] = _bspline_value_core(x[j], n)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _kernel_weights_core(
    n: int,
    t: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> None:
    """Window weights for every entry of ``t``; ``out`` has shape (len(t), n+1)."""
    for j in range(t.shape[0]):
        _cardinal_weights_core(n, t[j], out[j])


# Scan of the pole search, in s = -log|z|; reaches |z| ~ 1e-35, well below the
# smallest pole of MAX_ORDER.
_POLE_SCAN = np.geomspace(1e-4, 80.0, 8001)


@cache
def _compute_poles_impl(n: int) -> tuple[float, ...]:
    r"""Poles of the inverse B-spline filter of degree n.

    The poles are the roots inside the unit circle of
    :math:`\sum_{k=-m}^{m} \beta^n(k) z^{k+m}` with ``m = n // 2``. They are real,
    simple and lie in ``(-1, 0)``. Writing ``z = -exp(-s)``, they are bracketed
    by sign changes on a logarithmic scan of ``s`` and refined with Brent's
    method.

    Args:
        n (int): Spline degree (>= 0).

    Returns:
        tuple[float, ...]: The ``n // 2`` poles sorted by decreasing magnitude.

    Raises:
        RuntimeError: If the scan does not isolate exactly ``n // 2`` roots.
    """
    m = n // 2
    if m == 0:
        return ()

    coeffs = np.array([_bspline_value_core(float(k), n) for k in range(-m, m + 1)])

    def char_poly(s: float) -> float:
        return float(np.polyval(coeffs, -np.exp(-s)))

    values = np.polyval(coeffs, -np.exp(-_POLE_SCAN))
    brackets = np.nonzero(values[:-1] * values[1:] < 0.0)[0]
    if brackets.size != m:
        raise RuntimeError(f"Found {brackets.size} poles for degree {n}, expected {m}")

    rtol = 4.0 * np.finfo(np.float64).eps
    poles = []
    for i in brackets:
        s = brentq(char_poly, _POLE_SCAN[i], _POLE_SCAN[i + 1], xtol=1e-15, rtol=rtol)
        poles.append(-float(np.exp(-s)))
    return tuple(poles)


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    x_dummy = np.array([-1.0, 0.0, 0.5], dtype=np.float64)
    out_dummy = np.empty(3, dtype=np.float64)
    _bspline_values_core(3, x_dummy, out_dummy)
    _bspline_values_core(5, x_dummy, out_dummy)

    weights_dummy = np.empty((3, 4), dtype=np.float64)
    _kernel_weights_core(3, x_dummy, weights_dummy)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_bspline_closed_form_core",
    "_bspline_value_core",
    "_bspline_values_core",
    "_cardinal_weights_core",
    "_compute_poles_impl",
    "_kernel_weights_core",
]
