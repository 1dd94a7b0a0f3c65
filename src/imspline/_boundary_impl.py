"""Numba-backed boundary index resolution."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

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


# Integer codes of BoundaryExt, shared by every compiled kernel.
_CONSTANT: Final[int] = 0
_PERIODIC: Final[int] = 1
_HSYMMETRIC: Final[int] = 2
_WSYMMETRIC: Final[int] = 3


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _map_index_core(i: int, n: int, boundary: int) -> int:
    """Map a lattice index onto ``[0, n)`` following the boundary rule.

    Args:
        i (int): Index, possibly outside ``[0, n)``.
        n (int): Signal length (positive).
        boundary (int): Boundary code.

    Returns:
        int: The resolved index, or -1 for constant-extension indices outside
        the domain.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    if boundary == _PERIODIC:
        return i % n
    if boundary == _HSYMMETRIC:
        period = 2 * n
        r = i % period
        if r < n:
            return r
        return period - 1 - r
    if boundary == _WSYMMETRIC:
        if n == 1:
            return 0
        period = 2 * n - 2
        r = i % period
        if r < n:
            return r
        return period - r
    if 0 <= i < n:
        return i
    return -1


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _extension_period_core(n: int, boundary: int) -> int:
    """Period of the extended signal (1 for the constant fill)."""
    if boundary == _PERIODIC:
        return n
    if boundary == _HSYMMETRIC:
        return 2 * n
    if boundary == _WSYMMETRIC:
        return max(2 * n - 2, 1)
    return 1


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _map_indices_core(
    indices: npt.NDArray[np.int64],
    n: np.int64,
    boundary: np.int64,
    out: npt.NDArray[np.int64],
) -> None:
    """Vectorized :func:`_map_index_core`, results written to ``out``."""
    for j in range(indices.shape[0]):
        out[j] = _map_index_core(indices[j], n, boundary)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _resolve_index_core(p: int, size: int, offset: int, n: int, boundary: int) -> int:
    """Resolve a working-buffer position into a buffer index.

    The working buffer has ``size`` entries and holds the original domain of
    length ``n`` starting at ``offset``. Positions inside the buffer are used
    as they are; positions outside are mapped onto the original domain.

    Returns:
        int: A valid buffer index, or -1 when the constant fill applies.
    """
    if 0 <= p < size:
        return p
    m = _map_index_core(p - offset, n, boundary)
    if m < 0:
        return -1
    return offset + m


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _extend_image_core(
    image: npt.NDArray[np.float64],
    offset_x: int,
    offset_y: int,
    boundary: int,
    fill: float,
    out: npt.NDArray[np.float64],
) -> None:
    """Copy a planar image into a larger buffer, padding with its boundary extension.

    Args:
        image (npt.NDArray[np.float64]): Array of shape (c, h, w).
        offset_x (int): Column of the buffer where the image starts.
        offset_y (int): Row of the buffer where the image starts.
        boundary (int): Boundary code.
        fill (float): Fill value of the constant extension.
        out (npt.NDArray[np.float64]): Output buffer of shape (c, h', w').
    """
    num_channels, height, width = image.shape
    out_height = out.shape[1]
    out_width = out.shape[2]
    for r in range(out_height):
        src_r = _map_index_core(r - offset_y, height, boundary)
        for q in range(out_width):
            src_q = _map_index_core(q - offset_x, width, boundary)
            if src_r < 0 or src_q < 0:
                for ch in range(num_channels):
                    out[ch, r, q] = fill
            else:
                for ch in range(num_channels):
                    out[ch, r, q] = image[ch, src_r, src_q]


def _warmup_numba_functions() -> None:
    """Precompile numba functions with int64/float64 signatures for faster first call."""
    idx_dummy = np.arange(-3, 4, dtype=np.int64)
    out_dummy = np.empty_like(idx_dummy)
    _map_indices_core(idx_dummy, np.int64(2), np.int64(_HSYMMETRIC), out_dummy)
    _resolve_index_core(-1, 2, 0, 2, _PERIODIC)

    img_dummy = np.zeros((1, 2, 2), dtype=np.float64)
    buf_dummy = np.empty((1, 4, 4), dtype=np.float64)
    _extend_image_core(img_dummy, 1, 1, _WSYMMETRIC, 0.0, buf_dummy)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_CONSTANT",
    "_HSYMMETRIC",
    "_PERIODIC",
    "_WSYMMETRIC",
    "_extend_image_core",
    "_extension_period_core",
    "_map_index_core",
    "_map_indices_core",
    "_resolve_index_core",
]
