# gds_gerber/library/__init__.py

from .models import (
    ArrayRef,
    Boundary,
    Box,
    Element,
    Library,
    Node,
    PathElement,
    Structure,
    StructRef,
    Text,
)
from .gds_reader import load_library, read_gds

__all__ = [
    "ArrayRef",
    "Boundary",
    "Box",
    "Element",
    "Library",
    "Node",
    "PathElement",
    "Structure",
    "StructRef",
    "Text",
    "load_library",
    "read_gds",
]
