# gds_gerber/geometry/__init__.py

from .primitives import Point, Bounds, Region, Pattern
from .cache import PatternCache
from .flatten import flatten

__all__ = [
    "Point",
    "Bounds",
    "Region",
    "Pattern",
    "PatternCache",
    "flatten",
]
