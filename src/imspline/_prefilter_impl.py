"""Numba-backed recursive B-spline prefiltering.

Each pole ``z`` of the inverse B-spline filter is applied as a causal pass
``c+[i] = x[i] + z c+[i-1]``, an anticausal pass ``c-[i] = z (c-[i+1] - c+[i])``
and a rescaling by ``(1 - z)(1 - 1/z)``, which gives the pole a unit DC gain.

Both passes start from geometric series over the virtual samples past the ends
of the working line. A line of length ``size`` holds the original signal of
length ``length`` starting at ``offset``; virtual samples are obtained by
mapping through the boundary rule onto that original part.

Each pole truncates its series at its own tolerance (see
:func:`imspline.precision.pole_tolerances`), small enough that the errors
amplified by the remaining poles and passes stay below the requested precision.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

from ._boundary_impl import (
    _HSYMMETRIC,
    _PERIODIC,
    _extension_period_core,
    _map_index_core,
)

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
def _truncation_term_count_core(
    z_abs: float, eps: float, period: int, exact: bool
) -> tuple[int, bool]:
    """Term count of a geometric boundary series and whether its tail is closed.

    Args:
        z_abs (float): Pole magnitude, in ``(0, 1)``.
        eps (float): Relative tolerance, in ``(0, 1)``.
        period (int): Period of the virtual samples (positive).
        exact (bool): Sum exactly over one period regardless of ``eps``.

    Returns:
        tuple[int, bool]: ``(count, closed)``; when ``closed`` is True the count
        equals ``period`` and the tail is summed analytically.
    """
    if exact:
        return period, True
    # Smallest K with |z|^K / (1 - |z|) < eps.
    count = int(np.ceil(np.log(eps * (1.0 - z_abs)) / np.log(z_abs)))
    if count < 1:
        count = 1
    if count >= period:
        return period, True
    return count, False


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _virtual_sample_core(  # noqa: PLR0913
    src: npt.NDArray[np.float64],
    j: int,
    offset: int,
    length: int,
    boundary: int,
    fill: float,
) -> float:
    """Value of the extended signal at working-line index ``j``."""
    m = _map_index_core(j - offset, length, boundary)
    if m < 0:
        return fill
    return src[offset + m]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _geometric_boundary_sum_core(  # noqa: PLR0913
    src: npt.NDArray[np.float64],
    z: float,
    eps: float,
    start: int,
    step: int,
    offset: int,
    length: int,
    boundary: int,
    fill: float,
) -> tuple[float, int]:
    """Sum ``z^k x[start + step k]`` over ``k >= 0`` on the extended signal.

    The virtual samples reached from ``start`` outside the working line form a
    periodic sequence (period given by the boundary rule). Summation proceeds
    term by term until the tail bound drops below ``eps``; if a full period is
    reached first, the tail is closed with the factor ``1 / (1 - z^P)`` and the
    sum is exact. The periodic extension is always summed exactly.

    Returns:
        tuple[float, int]: The sum and the number of terms evaluated.
    """
    period = _extension_period_core(length, boundary)
    count, closed = _truncation_term_count_core(abs(z), eps, period, boundary == _PERIODIC)

    acc = 0.0
    zk = 1.0
    for k in range(count):
        acc += zk * _virtual_sample_core(src, start + step * k, offset, length, boundary, fill)
        zk *= z
    if closed:
        acc /= 1.0 - zk
    return acc, count


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _filter_line_core(  # noqa: PLR0913
    line: npt.NDArray[np.float64],
    work: npt.NDArray[np.float64],
    poles: npt.NDArray[np.float64],
    tolerances: npt.NDArray[np.float64],
    offset: int,
    length: int,
    boundary: int,
    fill: float,
) -> None:
    """Turn a line of samples into B-spline coefficients, in place.

    Args:
        line (npt.NDArray[np.float64]): Working line; overwritten.
        work (npt.NDArray[np.float64]): Scratch array of the same length.
        poles (npt.NDArray[np.float64]): Filter poles.
        tolerances (npt.NDArray[np.float64]): Truncation tolerance of the boundary
            series of each pole.
        offset (int): Index of the line where the original signal starts.
        length (int): Length of the original signal.
        boundary (int): Boundary code.
        fill (float): Fill value of the constant extension.
    """
    size = line.shape[0]
    for p in range(poles.shape[0]):
        z = poles[p]
        eps = tolerances[p]
        for i in range(size):
            work[i] = line[i]

        # causal: c+[0] = x[0] + z * sum_k z^k x[-1 - k]
        head, _ = _geometric_boundary_sum_core(
            work, z, eps, -1, -1, offset, length, boundary, fill
        )
        line[0] = work[0] + z * head
        for i in range(1, size):
            line[i] = work[i] + z * line[i - 1]

        # anticausal: c-[N-1] = -z / (1 - z^2) * (c+[N-1] + z * sum_k z^k x[N + k])
        tail, _ = _geometric_boundary_sum_core(
            work, z, eps, size, 1, offset, length, boundary, fill
        )
        line[size - 1] = -z / (1.0 - z * z) * (line[size - 1] + z * tail)
        for i in range(size - 2, -1, -1):
            line[i] = z * (line[i + 1] - line[i])

        gain = (1.0 - z) * (1.0 - 1.0 / z)
        for i in range(size):
            line[i] *= gain


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _prefilter_image_core(  # noqa: PLR0913
    coeffs: npt.NDArray[np.float64],
    poles: npt.NDArray[np.float64],
    tolerances: npt.NDArray[np.float64],
    offset_x: int,
    offset_y: int,
    width: int,
    height: int,
    boundary: int,
    fill: float,
) -> None:
    """Separable prefilter of a planar (c, h', w') buffer, in place.

    Rows are filtered first, then columns; channels are independent.

    Args:
        coeffs (npt.NDArray[np.float64]): Working buffer holding the (extended)
            samples; overwritten with the coefficients.
        poles (npt.NDArray[np.float64]): Filter poles (possibly empty).
        tolerances (npt.NDArray[np.float64]): Truncation tolerance of each pole.
        offset_x (int): Column of the buffer where the original image starts.
        offset_y (int): Row of the buffer where the original image starts.
        width (int): Original image width.
        height (int): Original image height.
        boundary (int): Boundary code.
        fill (float): Fill value of the constant extension.
    """
    if poles.shape[0] == 0:
        return

    num_channels, size_y, size_x = coeffs.shape
    row_work = np.empty(size_x, dtype=np.float64)
    column = np.empty(size_y, dtype=np.float64)
    column_work = np.empty(size_y, dtype=np.float64)

    for ch in range(num_channels):
        for r in range(size_y):
            _filter_line_core(
                coeffs[ch, r], row_work, poles, tolerances, offset_x, width, boundary, fill
            )
        for q in range(size_x):
            for r in range(size_y):
                column[r] = coeffs[ch, r, q]
            _filter_line_core(
                column, column_work, poles, tolerances, offset_y, height, boundary, fill
            )
            for r in range(size_y):
                coeffs[ch, r, q] = column[r]


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    coeffs_dummy = np.arange(12, dtype=np.float64).reshape(1, 3, 4)
    poles_dummy = np.array([np.sqrt(3.0) - 2.0], dtype=np.float64)
    tolerances_dummy = np.array([1e-6], dtype=np.float64)
    _prefilter_image_core(
        coeffs_dummy, poles_dummy, tolerances_dummy, 0, 0, 4, 3, _HSYMMETRIC, 0.0
    )
    _truncation_term_count_core(0.5, 1e-6, 8, False)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_filter_line_core",
    "_geometric_boundary_sum_core",
    "_prefilter_image_core",
    "_truncation_term_count_core",
    "_virtual_sample_core",
]
