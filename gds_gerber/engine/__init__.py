# gds_gerber/engine/__init__.py

from .run import (
    convert_file,
    convert_layer,
    convert_layout,
    output_path_for,
    write_pattern_file,
)

__all__ = [
    "convert_file",
    "convert_layer",
    "convert_layout",
    "output_path_for",
    "write_pattern_file",
]
