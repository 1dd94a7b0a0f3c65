"""Smoke tests for package metadata.

Validates public attributes exposed via the package API.
"""

from __future__ import annotations

import importlib
from typing import Final

import imspline


def test_package_all_exports() -> None:
    """Ensure all expected symbols are exported."""
    expected_metadata: Final[set[str]] = {"__version__", "__license__", "__author__"}
    assert expected_metadata.issubset(set(imspline.__all__))

    expected_public_api: Final[set[str]] = {
        # Configuration
        "DEFAULT_BOUNDARY",
        "DEFAULT_EPS",
        "DEFAULT_FILL_VALUE",
        "DEFAULT_ORDER",
        "MAX_ORDER",
        "PlanConfig",
        # Errors
        "ConfigurationError",
        "ImageIOError",
        "ImsplineError",
        "PlanDestroyedError",
        "ResourceError",
        # Kernel
        "bspline_kernel",
        "compute_poles",
        "kernel_radius",
        "kernel_support",
        "kernel_weights",
        "kernel_window",
        # Boundary
        "BoundaryExt",
        "extension_period",
        "map_index",
        "parse_boundary",
        # Precision and prefiltering
        "causal_initial_value",
        "fix_precision",
        "geometric_boundary_sum",
        "pole_tolerances",
        "prefilter_line",
        "truncation_term_count",
        # Plans and evaluation
        "SplinePlan",
        "build_plan",
        "default_margin",
        "destroy_plan",
        "evaluate",
        "evaluate_points",
        "reconstruct_samples",
        # Driver layer
        "OutputGeometry",
        "apply_homography",
        "invert_homography",
        "parse_geometry",
        "parse_homography",
        "read_image",
        "setup_logger",
        "warp_homography",
        "write_image",
    }

    assert expected_public_api.issubset(set(imspline.__all__))

    # Only metadata may start with an underscore
    private_in_all = {name for name in imspline.__all__ if name.startswith("_")}
    assert private_in_all.issubset(expected_metadata)

    expected_all = expected_metadata | expected_public_api
    assert set(imspline.__all__) == expected_all

    for name in imspline.__all__:
        assert hasattr(imspline, name)


def test_package_metadata_values() -> None:
    """Validate the package metadata constants."""
    assert imspline.__version__ == "0.1.0"
    assert imspline.__license__ == "LGPL-3.0-or-later"
    assert imspline.__author__ == "Thibaud Briand, Pascal Monasse"


def test_metadata_import_stability() -> None:
    """Verify metadata survives module reloads."""
    module = importlib.reload(imspline)
    assert module.__version__ == "0.1.0"


def test_default_configuration() -> None:
    """Defaults of the command-line driver."""
    assert imspline.MAX_ORDER == 25
    assert imspline.DEFAULT_ORDER == 11
    assert imspline.DEFAULT_EPS == 1e-6
    assert imspline.DEFAULT_BOUNDARY is imspline.BoundaryExt.HSYMMETRIC
    assert imspline.DEFAULT_FILL_VALUE == 0.0
