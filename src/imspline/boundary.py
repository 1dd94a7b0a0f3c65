"""Boundary extensions and lattice index resolution.

A boundary extension defines the virtual samples of a finite signal of length
``n`` at indices outside ``[0, n)``. The same rule is used to initialize the
recursive prefilters and to resolve out-of-range lattice positions during
evaluation.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

import numpy as np
import numpy.typing as npt

from ._boundary_impl import (
    _CONSTANT,
    _HSYMMETRIC,
    _PERIODIC,
    _WSYMMETRIC,
    _extension_period_core,
    _map_indices_core,
)
from .exceptions import ConfigurationError


class BoundaryExt(Enum):
    """Enumeration of boundary extensions.

    Attributes:
        CONSTANT (BoundaryExt): Samples outside the domain take a fixed fill value.
            Not compatible with exact-domain computations.
        PERIODIC (BoundaryExt): ``s[i + n] = s[i]``.
        HSYMMETRIC (BoundaryExt): Half-sample symmetric, ``s[-1 - i] = s[i]``
            (period ``2n``).
        WSYMMETRIC (BoundaryExt): Whole-sample symmetric, ``s[-i] = s[i]``
            (period ``2n - 2``).
    """

    CONSTANT = "constant"
    PERIODIC = "periodic"
    HSYMMETRIC = "hsymmetric"
    WSYMMETRIC = "wsymmetric"

    @property
    def code(self) -> int:
        """Integer code used by the compiled kernels."""
        return _BOUNDARY_CODES[self]


_BOUNDARY_CODES: Final[dict[BoundaryExt, int]] = {
    BoundaryExt.CONSTANT: _CONSTANT,
    BoundaryExt.PERIODIC: _PERIODIC,
    BoundaryExt.HSYMMETRIC: _HSYMMETRIC,
    BoundaryExt.WSYMMETRIC: _WSYMMETRIC,
}


def parse_boundary(name: str | BoundaryExt) -> BoundaryExt:
    """Resolve a boundary extension from its name.

    Any non-empty prefix of a boundary name is accepted (``"hsym"`` selects
    :attr:`BoundaryExt.HSYMMETRIC`). Matching is case-insensitive and candidates
    are tried in declaration order.

    Args:
        name (str | BoundaryExt): Boundary name, prefix, or an existing member.

    Returns:
        BoundaryExt: The matching boundary extension.

    Raises:
        ConfigurationError: If the name does not match any boundary extension.

    Example:
        >>> parse_boundary("per")
        <BoundaryExt.PERIODIC: 'periodic'>
    """
    if isinstance(name, BoundaryExt):
        return name

    key = name.strip().lower()
    if key:
        for boundary in BoundaryExt:
            if boundary.value.startswith(key):
                return boundary
    raise ConfigurationError(f"Unknown boundary condition {name!r}")


def map_index(
    indices: npt.ArrayLike, length: int, boundary: str | BoundaryExt
) -> npt.NDArray[np.int_]:
    """Resolve lattice indices into ``[0, length)`` according to a boundary rule.

    Periodic indices wrap modulo ``length``; symmetric indices are reflected.
    For :attr:`BoundaryExt.CONSTANT`, indices outside the domain resolve to the
    fill sentinel ``-1``.

    Args:
        indices (npt.ArrayLike): Integer index or array of indices (any sign).
        length (int): Signal length. Must be positive.
        boundary (str | BoundaryExt): Boundary extension.

    Returns:
        npt.NDArray[np.int_]: Resolved indices with the same shape as ``indices``.

    Raises:
        ConfigurationError: If ``length`` is not positive or the boundary is unknown.

    Example:
        >>> map_index([-2, -1, 0, 3, 4], 4, "hsymmetric")
        array([1, 0, 0, 3, 3])
    """
    if length < 1:
        raise ConfigurationError("length must be positive")
    code = parse_boundary(boundary).code

    idx = np.asarray(indices, dtype=np.int64)
    flat = np.ascontiguousarray(idx.ravel())
    out = np.empty(flat.shape, dtype=np.int64)
    _map_indices_core(flat, np.int64(length), np.int64(code), out)
    return out.reshape(idx.shape).astype(np.int_)


def extension_period(length: int, boundary: str | BoundaryExt) -> int:
    """Period of the extended signal.

    For the constant extension this is the period of the virtual samples past
    either end of the domain (a constant sequence, hence 1).

    Args:
        length (int): Signal length. Must be positive.
        boundary (str | BoundaryExt): Boundary extension.

    Returns:
        int: ``length`` (periodic), ``2 * length`` (half-symmetric),
        ``max(2 * length - 2, 1)`` (whole-symmetric) or 1 (constant).

    Raises:
        ConfigurationError: If ``length`` is not positive or the boundary is unknown.
    """
    if length < 1:
        raise ConfigurationError("length must be positive")
    return int(_extension_period_core(length, parse_boundary(boundary).code))


__all__ = [
    "BoundaryExt",
    "extension_period",
    "map_index",
    "parse_boundary",
]
