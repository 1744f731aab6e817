# gds_gerber/gerber/writer.py
#
# Gerber region writer. Knows nothing about files or the hierarchy;
# it serializes an already flattened Pattern to a text sink.

from __future__ import annotations

from typing import Iterable, TextIO

from ..geometry.primitives import Pattern, Point
from ..library.models import Library
from .format import DEFAULT_FORMAT, GerberFormatInfo, format_coordinate, to_output_unit

REGION_ON = "G36*"
REGION_OFF = "G37*"
END_OF_FILE = "M02*"


def _coords(p: Point, db_unit: float, fmt: GerberFormatInfo) -> str:
    x = format_coordinate(to_output_unit(p.x, db_unit, fmt))
    y = format_coordinate(to_output_unit(p.y, db_unit, fmt))
    return f"X{x}Y{y}"


def write_header(o: TextIO, fmt: GerberFormatInfo = DEFAULT_FORMAT) -> None:
    o.write(f"{fmt.format_directive()}\n")
    o.write(f"{fmt.unit_directive()}\n")


def write_region(
    o: TextIO,
    points: Iterable[Point],
    db_unit: float,
    fmt: GerberFormatInfo = DEFAULT_FORMAT,
) -> None:
    # Move to the first point, then interpolate through every point
    # including the first one again. Closure is left to region mode.
    points = list(points)
    if not points:
        raise ValueError("Cannot write an empty region")
    o.write(f"{_coords(points[0], db_unit, fmt)}D02*\n")
    for p in points:
        o.write(f"{_coords(p, db_unit, fmt)}D01*\n")


def write_gerber(
    pattern: Pattern,
    library: Library,
    o: TextIO,
    fmt: GerberFormatInfo = DEFAULT_FORMAT,
) -> None:
    """
    Serialize `pattern` as one Gerber region block.

    Command order: coordinate format, units, region on, per region one
    D02 move plus one D01 per point, region off, end of file.
    Coordinates are scaled with the library's database unit.
    """
    write_header(o, fmt)
    o.write(f"{REGION_ON}\n")
    for region in pattern.regions:
        write_region(o, region.points, library.db_unit, fmt)
    o.write(f"{REGION_OFF}\n")
    o.write(f"{END_OF_FILE}\n")
