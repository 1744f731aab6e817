# gds_gerber/gerber/format.py

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext

from ..errors import CoordinateRangeError

_METERS_TO_MM = Decimal(1000)


@dataclass(frozen=True)
class GerberFormatInfo:
    """
    Coordinate format contract of the emitted file.

    Leading zeros omitted, absolute coordinates, same digits for X and Y.
    Only millimeters are emitted.
    """
    int_digits: int = 6
    dec_digits: int = 6
    units: str = "mm"

    def __post_init__(self) -> None:
        if not 1 <= self.int_digits <= 6:
            raise ValueError(f"int_digits must be in 1..6, got {self.int_digits}")
        if not 1 <= self.dec_digits <= 6:
            raise ValueError(f"dec_digits must be in 1..6, got {self.dec_digits}")
        if self.units != "mm":
            raise ValueError(f"only 'mm' output units are supported, got {self.units!r}")

    def format_directive(self) -> str:
        digits = f"{self.int_digits}{self.dec_digits}"
        return f"%FSLAX{digits}Y{digits}*%"

    def unit_directive(self) -> str:
        return "%MOMM*%"


DEFAULT_FORMAT = GerberFormatInfo()


def _exact_decimal(value: float) -> Decimal:
    # repr() gives the shortest string that round-trips, so 1e-06 stays 1e-06
    return Decimal(repr(float(value)))


def to_output_unit(raw: int, db_unit: float, fmt: GerberFormatInfo = DEFAULT_FORMAT) -> int:
    """
    Convert a database-unit coordinate to the fixed-point integer of `fmt`.

    raw * db_unit gives meters; times 1000 gives millimeters; the result
    is then scaled by 10**dec_digits. The arithmetic is exact, and a value
    that needs more fractional digits than the format has, or more integer
    digits, raises CoordinateRangeError instead of being rounded.
    """
    with localcontext() as ctx:
        ctx.prec = 50
        mm = Decimal(int(raw)) * _exact_decimal(db_unit) * _METERS_TO_MM
        scaled = mm.scaleb(fmt.dec_digits)
        integral = scaled.to_integral_value()
        if scaled != integral:
            raise CoordinateRangeError(
                f"Coordinate {raw} ({mm} mm) needs more than {fmt.dec_digits} decimal digits"
            )
        if abs(mm) >= Decimal(10) ** fmt.int_digits:
            raise CoordinateRangeError(
                f"Coordinate {raw} ({mm} mm) needs more than {fmt.int_digits} integer digits"
            )
        return int(integral)


def format_coordinate(value: int) -> str:
    """
    Render a fixed-point integer with leading zeros omitted.
    """
    return str(int(value))
