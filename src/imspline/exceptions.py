"""Exception hierarchy for imspline.

Every error raised on purpose by the package derives from :class:`ImsplineError`.
The concrete classes also derive from the closest built-in exception so that
callers catching ``ValueError`` or ``MemoryError`` keep working.
"""


class ImsplineError(Exception):
    """Base class for all imspline errors."""


class ConfigurationError(ImsplineError, ValueError):
    """Invalid interpolation or driver configuration.

    Raised for an order outside ``[0, MAX_ORDER]``, a precision outside ``(0, 1)``,
    an unknown boundary name, a malformed geometry string, a wrong number of
    homography coefficients, a singular homography or an image of invalid shape.
    """


class ResourceError(ImsplineError, MemoryError):
    """Allocation failure while building a spline plan."""


class PlanDestroyedError(ImsplineError, RuntimeError):
    """A destroyed spline plan was used."""


class ImageIOError(ImsplineError, OSError):
    """An image file could not be read or written."""


__all__ = [
    "ConfigurationError",
    "ImageIOError",
    "ImsplineError",
    "PlanDestroyedError",
    "ResourceError",
]
