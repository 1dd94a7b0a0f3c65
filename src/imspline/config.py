"""Interpolation configuration: defaults, limits and the plan configuration record."""

from __future__ import annotations

from typing import Final, NamedTuple

from .boundary import BoundaryExt
from .exceptions import ConfigurationError

MAX_ORDER: Final[int] = 25
"""Highest supported spline order."""

DEFAULT_ORDER: Final[int] = 11
"""Default spline order of the command-line driver."""

DEFAULT_EPS: Final[float] = 1e-6
"""Default relative truncation tolerance of the boundary initialization."""

DEFAULT_BOUNDARY: Final[BoundaryExt] = BoundaryExt.HSYMMETRIC
"""Default boundary extension."""

DEFAULT_FILL_VALUE: Final[float] = 0.0
"""Default fill value of the constant boundary extension."""


class PlanConfig(NamedTuple):
    """Configuration a spline plan was built with.

    Attributes:
        order (int): Spline order (degree), in ``[0, MAX_ORDER]``.
        boundary (BoundaryExt): Boundary extension.
        eps (float): Relative truncation tolerance, in ``(0, 1)``.
        enlarge (bool): Whether the working domain is enlarged.
        fill_value (float): Value of the constant extension.
    """

    order: int
    boundary: BoundaryExt
    eps: float
    enlarge: bool
    fill_value: float


def validate_order(order: int) -> int:
    """Check that a spline order is an integer in ``[0, MAX_ORDER]``.

    Args:
        order (int): Spline order.

    Returns:
        int: The order as a Python ``int``.

    Raises:
        ConfigurationError: If the order is not an integer or is out of range.
    """
    try:
        as_int = int(order)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"order must be an integer, got {order!r}") from exc
    if isinstance(order, bool) or as_int != order:
        raise ConfigurationError(f"order must be an integer, got {order!r}")
    order = as_int
    if order < 0:
        raise ConfigurationError("order must be non-negative")
    if order > MAX_ORDER:
        raise ConfigurationError(f"The maximal order authorized is {MAX_ORDER}")
    return order


__all__ = [
    "DEFAULT_BOUNDARY",
    "DEFAULT_EPS",
    "DEFAULT_FILL_VALUE",
    "DEFAULT_ORDER",
    "MAX_ORDER",
    "PlanConfig",
    "validate_order",
]
