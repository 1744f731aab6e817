"""
gds_gerber package init.

Public API is kept to errors and results so that importing the package
does not pull in the GDSII reader.
"""

__version__ = "0.1.0"

from .errors import (
    LayoutError,
    StructureNotFoundError,
    UnsupportedElementError,
    ReferenceCycleError,
    CoordinateRangeError,
)
from .results import ConversionResult, LayerOutput

__all__ = [
    "LayoutError",
    "StructureNotFoundError",
    "UnsupportedElementError",
    "ReferenceCycleError",
    "CoordinateRangeError",
    "ConversionResult",
    "LayerOutput",
]
