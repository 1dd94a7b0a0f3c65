"""Spline plans: prefiltered coefficient grids ready for repeated evaluation.

Typical use::

    with build_plan(image, order=5, boundary="periodic") as plan:
        value = plan.evaluate(1.3, 2.4)   # one value per channel

A plan is built once per image, evaluated any number of times, then destroyed.
"""

from __future__ import annotations

import math
import sys
from types import TracebackType

import numpy as np
import numpy.typing as npt

from ._boundary_impl import _extend_image_core
from ._prefilter_impl import _prefilter_image_core
from .boundary import BoundaryExt, parse_boundary
from .config import (
    DEFAULT_BOUNDARY,
    DEFAULT_EPS,
    DEFAULT_FILL_VALUE,
    DEFAULT_ORDER,
    PlanConfig,
    validate_order,
)
from .evaluator import evaluate, evaluate_points
from .exceptions import ConfigurationError, PlanDestroyedError, ResourceError
from .kernel import compute_poles
from .logger import logger
from .precision import (
    get_machine_epsilon,
    pole_tolerances,
    truncation_term_count,
    validate_precision,
)


class SplinePlan:
    """Prefiltered B-spline representation of a planar multi-channel image.

    Instances are created by :func:`build_plan`. The plan owns a coefficient
    array of shape ``(c, h', w')`` where ``(h', w')`` are the working dimensions
    (the image dimensions, or larger when the domain is enlarged), together
    with its configuration and the prefilter poles.

    After :meth:`destroy` the coefficients and poles are released and every
    further use raises :class:`PlanDestroyedError`.
    """

    def __init__(
        self,
        coefficients: npt.NDArray[np.float64],
        poles: npt.NDArray[np.float64],
        config: PlanConfig,
        image_size: tuple[int, int],
        offset: tuple[int, int],
    ) -> None:
        """Wrap already prefiltered coefficients. Use :func:`build_plan` instead.

        Args:
            coefficients (npt.NDArray[np.float64]): Array of shape (c, h', w').
            poles (npt.NDArray[np.float64]): Prefilter poles.
            config (PlanConfig): Configuration the plan was built with.
            image_size (tuple[int, int]): Original ``(width, height)``.
            offset (tuple[int, int]): ``(x, y)`` position of the original image
                inside the working buffer.
        """
        self._coefficients: npt.NDArray[np.float64] | None = coefficients
        self._poles: npt.NDArray[np.float64] | None = poles
        self._config = config
        self._width, self._height = image_size
        self._offset_x, self._offset_y = offset

    def _check_alive(self) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        if self._coefficients is None or self._poles is None:
            raise PlanDestroyedError("The spline plan has been destroyed.")
        return self._coefficients, self._poles

    def _evaluation_state(
        self,
    ) -> tuple[npt.NDArray[np.float64], int, int, int, int, int, int, float]:
        """Arguments of the compiled evaluation kernels."""
        coeffs, _ = self._check_alive()
        return (
            coeffs,
            self._config.order,
            self._offset_x,
            self._offset_y,
            self._width,
            self._height,
            self._config.boundary.code,
            self._config.fill_value,
        )

    @property
    def config(self) -> PlanConfig:
        """Configuration the plan was built with."""
        return self._config

    @property
    def order(self) -> int:
        """Spline order."""
        return self._config.order

    @property
    def boundary(self) -> BoundaryExt:
        """Boundary extension."""
        return self._config.boundary

    @property
    def eps(self) -> float:
        """Relative truncation tolerance."""
        return self._config.eps

    @property
    def enlarged(self) -> bool:
        """Whether coefficients were computed on an enlarged domain."""
        return self._config.enlarge

    @property
    def fill_value(self) -> float:
        """Fill value of the constant extension."""
        return self._config.fill_value

    @property
    def width(self) -> int:
        """Width of the original image."""
        return self._width

    @property
    def height(self) -> int:
        """Height of the original image."""
        return self._height

    @property
    def num_channels(self) -> int:
        """Number of channels."""
        return int(self._check_alive()[0].shape[0])

    @property
    def offset(self) -> tuple[int, int]:
        """``(x, y)`` position of the original image inside the working buffer."""
        return self._offset_x, self._offset_y

    @property
    def working_shape(self) -> tuple[int, int]:
        """Working dimensions ``(w', h')``."""
        coeffs, _ = self._check_alive()
        return int(coeffs.shape[2]), int(coeffs.shape[1])

    @property
    def poles(self) -> npt.NDArray[np.float64]:
        """Prefilter poles (read-only view)."""
        _, poles = self._check_alive()
        view = poles.view()
        view.flags.writeable = False
        return view

    @property
    def coefficients(self) -> npt.NDArray[np.float64]:
        """Coefficient array of shape (c, h', w') (read-only view)."""
        view = self._check_alive()[0].view()
        view.flags.writeable = False
        return view

    @property
    def is_destroyed(self) -> bool:
        """Whether :meth:`destroy` has been called."""
        return self._coefficients is None

    def evaluate(self, x: float, y: float) -> npt.NDArray[np.float64]:
        """Interpolate every channel at ``(x, y)``. See :func:`imspline.evaluate`."""
        return evaluate(self, x, y)

    def evaluate_points(self, xs: npt.ArrayLike, ys: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Interpolate every channel at many points. See :func:`imspline.evaluate_points`."""
        return evaluate_points(self, xs, ys)

    def destroy(self) -> None:
        """Release the coefficients and poles. Destroying twice is a no-op."""
        if self._coefficients is not None:
            logger.debug("Destroying spline plan %r", self)
        self._coefficients = None
        self._poles = None

    def __enter__(self) -> SplinePlan:
        self._check_alive()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()

    def __repr__(self) -> str:
        state = "destroyed" if self.is_destroyed else f"working={self.working_shape}"
        return (
            f"SplinePlan(size=({self._width}, {self._height}), order={self.order}, "
            f"boundary={self.boundary.value}, eps={self.eps:g}, {state})"
        )


def _normalize_image(image: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Convert an image to a contiguous (c, h, w) float64 array.

    Raises:
        ConfigurationError: If the image is not 2D or 3D, is empty, or is not real.
    """
    arr = np.asarray(image)
    if np.iscomplexobj(arr) or not (
        np.issubdtype(arr.dtype, np.number) or arr.dtype == np.bool_
    ):
        raise ConfigurationError(f"image must hold real numbers, got dtype {arr.dtype}")
    if arr.ndim == 2:  # noqa: PLR2004
        arr = arr[np.newaxis]
    elif arr.ndim != 3:  # noqa: PLR2004
        raise ConfigurationError(
            f"image must have shape (h, w) or (c, h, w), got {arr.ndim} dimensions"
        )
    if 0 in arr.shape:
        raise ConfigurationError(f"image must not be empty, got shape {arr.shape}")
    return np.ascontiguousarray(arr, dtype=np.float64)


def default_margin(order: int, eps: float) -> int:
    """Margin added on each side of an enlarged working domain.

    The margin covers the kernel radius plus the number of terms after which
    the largest pole's impulse response falls below that pole's tolerance (see
    :func:`imspline.precision.pole_tolerances`), so that the approximate virtual
    samples past the working buffer do not affect the original domain beyond
    the requested precision.

    Args:
        order (int): Spline order.
        eps (float): Relative tolerance in ``(0, 1)``.

    Returns:
        int: The margin, in samples.

    Raises:
        ConfigurationError: If the order or ``eps`` is invalid.
    """
    order = validate_order(order)
    eps = validate_precision(eps)
    poles = compute_poles(order)
    decay = 0
    if poles.size > 0:
        tolerance = float(pole_tolerances(poles, eps)[0])
        decay, _ = truncation_term_count(float(poles[0]), tolerance, sys.maxsize)
    return decay + math.ceil(0.5 * (order + 1)) + 1


def build_plan(  # noqa: PLR0913
    image: npt.ArrayLike,
    order: int = DEFAULT_ORDER,
    boundary: str | BoundaryExt = DEFAULT_BOUNDARY,
    eps: float = DEFAULT_EPS,
    enlarge: bool = False,
    *,
    fill_value: float = DEFAULT_FILL_VALUE,
    margin: int | None = None,
) -> SplinePlan:
    """Prefilter an image into a spline plan.

    Each channel is filtered separably, rows then columns, with the recursive
    filters of the B-spline of the given order. The initial values of the
    recursions are computed on the boundary extension of the image, exactly for
    the periodic extension and within ``eps`` otherwise.

    Args:
        image (npt.ArrayLike): Planar image of shape (c, h, w), or (h, w) for a
            single channel. Converted to float64; never modified.
        order (int): Spline order, in ``[0, MAX_ORDER]``. Defaults to 11.
        boundary (str | BoundaryExt): Boundary extension or its name.
            Defaults to half-symmetric.
        eps (float): Relative truncation tolerance in ``(0, 1)``. Defaults to 1e-6.
        enlarge (bool): Compute coefficients on a domain enlarged by ``margin``
            samples on each side. Forced for the constant extension.
            Defaults to False.
        fill_value (float): Fill value of the constant extension. Defaults to 0.
        margin (int | None): Enlargement margin; defaults to :func:`default_margin`.
            Ignored when the domain is not enlarged.

    Returns:
        SplinePlan: The plan.

    Raises:
        ConfigurationError: If any argument is invalid.
        ResourceError: If the coefficient buffer cannot be allocated.
    """
    order = validate_order(order)
    boundary = parse_boundary(boundary)
    eps = validate_precision(eps)
    img = _normalize_image(image)
    fill_value = float(fill_value)
    if not math.isfinite(fill_value):
        raise ConfigurationError("fill_value must be finite")

    if eps < get_machine_epsilon(np.float64):
        logger.warning("eps=%g is below double precision; results are limited by rounding", eps)

    if boundary is BoundaryExt.CONSTANT and not enlarge:
        logger.warning(
            "The constant extension is not compatible with computations in the exact "
            "domain; enlarging the domain."
        )
        enlarge = True

    if not enlarge:
        margin = 0
    elif margin is None:
        margin = default_margin(order, eps)
    elif isinstance(margin, bool) or int(margin) != margin or margin < 0:
        raise ConfigurationError(f"margin must be a non-negative integer, got {margin!r}")
    margin = int(margin)

    num_channels, height, width = img.shape
    poles = compute_poles(order)
    config = PlanConfig(order, boundary, eps, bool(enlarge), fill_value)

    try:
        if margin == 0:
            coeffs = img.copy()
        else:
            coeffs = np.empty(
                (num_channels, height + 2 * margin, width + 2 * margin), dtype=np.float64
            )
            _extend_image_core(img, margin, margin, boundary.code, fill_value, coeffs)
    except MemoryError as exc:
        raise ResourceError(
            f"Cannot allocate spline coefficients for a {width}x{height}x{num_channels} "
            f"image with margin {margin}"
        ) from exc

    tolerances = pole_tolerances(poles, eps)
    _prefilter_image_core(
        coeffs, poles, tolerances, margin, margin, width, height, boundary.code, fill_value
    )

    plan = SplinePlan(coeffs, poles, config, (width, height), (margin, margin))
    logger.debug("Built %r with %d pole(s)", plan, poles.size)
    return plan


def destroy_plan(plan: SplinePlan) -> None:
    """Release the storage of a plan. Equivalent to ``plan.destroy()``."""
    plan.destroy()


__all__ = [
    "SplinePlan",
    "build_plan",
    "default_margin",
    "destroy_plan",
]
