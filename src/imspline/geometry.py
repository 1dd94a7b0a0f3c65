"""Output geometry of a homographic warp."""

from __future__ import annotations

import math
import re
from typing import NamedTuple

import numpy as np
import numpy.typing as npt

from .exceptions import ConfigurationError
from .homography import apply_homography

_SIZE_RE = re.compile(
    r"^(?P<w>\d+)x(?P<h>\d+)"
    r"(?:(?P<x>[-+](?:\d+\.?\d*|\.\d+))(?P<y>[-+](?:\d+\.?\d*|\.\d+)))?$"
)


class OutputGeometry(NamedTuple):
    """Area of the output plane covered by the warped image.

    Output pixel ``(i, j)`` lies at ``(x0 + i, y0 + j)`` in the output plane.

    Attributes:
        x0 (float): Abscissa of the first output column.
        y0 (float): Ordinate of the first output row.
        width (int): Number of output columns.
        height (int): Number of output rows.
    """

    x0: float
    y0: float
    width: int
    height: int


def _is_keyword(text: str, keyword: str) -> bool:
    return bool(text) and keyword.startswith(text)


def parse_geometry(text: str, width: int, height: int, H: npt.ArrayLike) -> OutputGeometry:
    """Decode an output geometry specification.

    Accepted forms:

    - ``"wxh"``: size only, origin at 0;
    - ``"wxh+x0+y0"``: size and origin (use ``-`` for negative offsets);
    - ``"auto"``: bounding box of the transformed image corners;
    - ``"center"``: input size, placed so the image center stays fixed.

    Non-empty prefixes of ``auto`` and ``center`` are accepted.

    Args:
        text (str): The specification.
        width (int): Input image width.
        height (int): Input image height.
        H (npt.ArrayLike): The homography (input to output).

    Returns:
        OutputGeometry: The output area.

    Raises:
        ConfigurationError: If the specification is malformed or gives a
            non-positive size.
    """
    spec = text.strip()

    if _is_keyword(spec, "center"):
        center = apply_homography(H, [0.5 * width, 0.5 * height])
        return OutputGeometry(
            float(center[0]) - 0.5 * width, float(center[1]) - 0.5 * height, width, height
        )

    if _is_keyword(spec, "auto"):
        corners = np.array(
            [[0.0, 0.0], [width, 0.0], [0.0, height], [width, height]], dtype=np.float64
        )
        mapped = apply_homography(H, corners)
        if not np.all(np.isfinite(mapped)):
            raise ConfigurationError("The homography sends an image corner to infinity")
        lower = mapped.min(axis=0)
        upper = mapped.max(axis=0)
        return OutputGeometry(
            float(lower[0]),
            float(lower[1]),
            math.ceil(upper[0] - lower[0]),
            math.ceil(upper[1] - lower[1]),
        )

    match = _SIZE_RE.match(spec)
    if match is None:
        raise ConfigurationError(f"Wrong format for geometry: {text!r}")
    out_width = int(match["w"])
    out_height = int(match["h"])
    if out_width <= 0 or out_height <= 0:
        raise ConfigurationError(f"Geometry size must be positive: {text!r}")
    x0 = float(match["x"]) if match["x"] is not None else 0.0
    y0 = float(match["y"]) if match["y"] is not None else 0.0
    return OutputGeometry(x0, y0, out_width, out_height)


__all__ = [
    "OutputGeometry",
    "parse_geometry",
]
