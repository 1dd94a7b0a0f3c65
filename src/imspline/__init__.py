"""Public API surface for imspline.

B-spline interpolation of multi-channel images with exact or
precision-controlled boundary handling. Defines package metadata and
exported interfaces.
"""

from typing import Final

# Private API imports (accessible but not in __all__)
# Users can access private functions via: imspline._kernel_impl._function_name, etc.
from . import (
    _boundary_impl,  # noqa: F401
    _evaluate_impl,  # noqa: F401
    _kernel_impl,  # noqa: F401
    _prefilter_impl,  # noqa: F401
)

# Public API imports
from .boundary import BoundaryExt, extension_period, map_index, parse_boundary
from .config import (
    DEFAULT_BOUNDARY,
    DEFAULT_EPS,
    DEFAULT_FILL_VALUE,
    DEFAULT_ORDER,
    MAX_ORDER,
    PlanConfig,
)
from .evaluator import evaluate, evaluate_points, reconstruct_samples
from .exceptions import (
    ConfigurationError,
    ImageIOError,
    ImsplineError,
    PlanDestroyedError,
    ResourceError,
)
from .geometry import OutputGeometry, parse_geometry
from .homography import apply_homography, invert_homography, parse_homography
from .io import read_image, write_image
from .kernel import (
    bspline_kernel,
    compute_poles,
    kernel_radius,
    kernel_support,
    kernel_weights,
    kernel_window,
)
from .logger import setup_logger
from .plan import SplinePlan, build_plan, default_margin, destroy_plan
from .precision import fix_precision, pole_tolerances, truncation_term_count
from .prefilter import causal_initial_value, geometric_boundary_sum, prefilter_line
from .transform import warp_homography

# Package metadata
__version__: Final[str] = "0.1.0"
__license__: Final[str] = "LGPL-3.0-or-later"
__author__: Final[str] = "Thibaud Briand, Pascal Monasse"

# Public interface: only functions/classes that don't start with _
__all__ = [
    "DEFAULT_BOUNDARY",
    "DEFAULT_EPS",
    "DEFAULT_FILL_VALUE",
    "DEFAULT_ORDER",
    "MAX_ORDER",
    "BoundaryExt",
    "ConfigurationError",
    "ImageIOError",
    "ImsplineError",
    "OutputGeometry",
    "PlanConfig",
    "PlanDestroyedError",
    "ResourceError",
    "SplinePlan",
    "__author__",
    "__license__",
    "__version__",
    "apply_homography",
    "build_plan",
    "bspline_kernel",
    "causal_initial_value",
    "compute_poles",
    "default_margin",
    "destroy_plan",
    "evaluate",
    "evaluate_points",
    "extension_period",
    "fix_precision",
    "geometric_boundary_sum",
    "invert_homography",
    "kernel_radius",
    "kernel_support",
    "kernel_weights",
    "kernel_window",
    "map_index",
    "parse_boundary",
    "parse_geometry",
    "parse_homography",
    "pole_tolerances",
    "prefilter_line",
    "read_image",
    "reconstruct_samples",
    "setup_logger",
    "truncation_term_count",
    "warp_homography",
    "write_image",
]
