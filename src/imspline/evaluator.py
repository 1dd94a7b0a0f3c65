"""Evaluation of a spline plan at continuous coordinates.

The value at ``(x, y)`` is ``sum_k sum_l wx[k] wy[l] c[first_y + l, first_x + k]``
where the weights come from :func:`imspline.kernel.kernel_weights` and the
lattice positions outside the coefficient buffer are resolved with the plan's
boundary rule (the constant extension yields its fill value). Evaluation never
modifies the plan and may run concurrently from several threads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from ._evaluate_impl import _evaluate_point_core, _evaluate_points_core

if TYPE_CHECKING:
    from .plan import SplinePlan


def evaluate(plan: SplinePlan, x: float, y: float) -> npt.NDArray[np.float64]:
    """Interpolate every channel of a plan at one point.

    Args:
        plan (SplinePlan): A built (not destroyed) plan.
        x (float): Column coordinate in original image pixels (sample ``(i, j)``
            lies at ``x = i``, ``y = j``).
        y (float): Row coordinate in original image pixels.

    Returns:
        npt.NDArray[np.float64]: One value per channel. NaN for non-finite
        coordinates.

    Raises:
        PlanDestroyedError: If the plan was destroyed.
    """
    coeffs, order, offset_x, offset_y, width, height, code, fill = plan._evaluation_state()

    n_weights = order + 1
    out = np.empty(coeffs.shape[0], dtype=np.float64)
    _evaluate_point_core(
        coeffs,
        order,
        float(x),
        float(y),
        offset_x,
        offset_y,
        width,
        height,
        code,
        fill,
        np.empty(n_weights, dtype=np.float64),
        np.empty(n_weights, dtype=np.float64),
        np.empty(n_weights, dtype=np.int64),
        out,
    )
    return out


def evaluate_points(
    plan: SplinePlan, xs: npt.ArrayLike, ys: npt.ArrayLike
) -> npt.NDArray[np.float64]:
    """Interpolate every channel of a plan at many points.

    Args:
        plan (SplinePlan): A built (not destroyed) plan.
        xs (npt.ArrayLike): Column coordinates.
        ys (npt.ArrayLike): Row coordinates, broadcastable with ``xs``.

    Returns:
        npt.NDArray[np.float64]: Array of shape ``(c, *shape)`` where ``shape`` is
        the broadcast shape of the coordinates.

    Raises:
        PlanDestroyedError: If the plan was destroyed.
        ValueError: If the coordinates cannot be broadcast together.
    """
    coeffs, order, offset_x, offset_y, width, height, code, fill = plan._evaluation_state()

    x_arr, y_arr = np.broadcast_arrays(
        np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
    )
    shape = x_arr.shape
    flat_x = np.ascontiguousarray(x_arr.ravel())
    flat_y = np.ascontiguousarray(y_arr.ravel())

    out = np.empty((coeffs.shape[0], flat_x.size), dtype=np.float64)
    _evaluate_points_core(
        coeffs, order, flat_x, flat_y, offset_x, offset_y, width, height, code, fill, out
    )
    return out.reshape(coeffs.shape[0], *shape)


def reconstruct_samples(plan: SplinePlan) -> npt.NDArray[np.float64]:
    """Evaluate a plan at every integer lattice point of the original image.

    For a correctly built plan the result reproduces the image within the
    plan's precision.

    Args:
        plan (SplinePlan): A built (not destroyed) plan.

    Returns:
        npt.NDArray[np.float64]: Array of shape (c, h, w).

    Raises:
        PlanDestroyedError: If the plan was destroyed.
    """
    ys, xs = np.mgrid[0 : plan.height, 0 : plan.width].astype(np.float64)
    return evaluate_points(plan, xs, ys)


__all__ = [
    "evaluate",
    "evaluate_points",
    "reconstruct_samples",
]
