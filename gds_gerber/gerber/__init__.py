# gds_gerber/gerber/__init__.py

from .format import (
    DEFAULT_FORMAT,
    GerberFormatInfo,
    format_coordinate,
    to_output_unit,
)
from .writer import write_gerber

__all__ = [
    "DEFAULT_FORMAT",
    "GerberFormatInfo",
    "format_coordinate",
    "to_output_unit",
    "write_gerber",
]
