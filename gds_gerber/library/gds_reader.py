# gds_gerber/library/gds_reader.py
#
# GDSII stream reader. Walks the records in file order and builds the
# Library model directly, so element order and XY lists are kept exactly
# as stored (including the closing vertex of every BOUNDARY).

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from ..errors import GdsFormatError
from .models import (
    ArrayRef,
    Boundary,
    Box,
    Library,
    Node,
    PathElement,
    Structure,
    StructRef,
    Text,
    XY,
)

logger = logging.getLogger(__name__)

JSON_SUFFIXES = {".json"}

# Record types
LIBNAME = 0x02
UNITS = 0x03
ENDLIB = 0x04
BGNSTR = 0x05
STRNAME = 0x06
ENDSTR = 0x07
BOUNDARY = 0x08
PATH = 0x09
SREF = 0x0A
AREF = 0x0B
TEXT = 0x0C
LAYER = 0x0D
DATATYPE = 0x0E
WIDTH = 0x0F
XY_RECORD = 0x10
ENDEL = 0x11
SNAME = 0x12
COLROW = 0x13
NODE = 0x15
TEXTTYPE = 0x16
STRING = 0x19
STRANS = 0x1A
MAG = 0x1B
ANGLE = 0x1C
NODETYPE = 0x2A
BOX = 0x2D
BOXTYPE = 0x2E

_ELEMENT_KINDS = {
    BOUNDARY: "boundary",
    PATH: "path",
    SREF: "sref",
    AREF: "aref",
    TEXT: "text",
    BOX: "box",
    NODE: "node",
}

# Data types
_NO_DATA = 0
_BIT_ARRAY = 1
_INT16 = 2
_INT32 = 3
_REAL8 = 5
_ASCII = 6

# STRANS bit for reflection about the x axis
_REFLECTION_BIT = 0x8000

# GDSII stores units as 8 byte excess-64 reals; the conversion to double
# carries noise past this many significant digits.
_UNIT_SIGNIFICANT_DIGITS = 12


def _normalize_unit(value: float) -> float:
    return float(f"{value:.{_UNIT_SIGNIFICANT_DIGITS}g}")


def load_library(path: Union[str, Path]) -> Library:
    """
    Load a Library from a GDSII stream file or a Library JSON dump.

    The format is picked from the file suffix; anything that is not
    .json is read as GDSII.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Layout file not found: {path}")

    if path.suffix.lower() in JSON_SUFFIXES:
        return Library.from_json(path.read_text(encoding="utf-8"))
    return read_gds(path)


def read_gds(path: Union[str, Path]) -> Library:
    """
    Read a GDSII stream file into the read-only Library model.

    Structures and the elements inside them keep their file order, and
    coordinates stay the raw integer database units of the XY records.
    Nothing is deduplicated: a BOUNDARY keeps its repeated closing vertex.

    Raises GdsFormatError for truncated streams and misplaced records.
    """
    path = Path(path)
    with path.open("rb") as stream:
        lib = _parse(stream)

    logger.debug(
        "read %s: %d structures, db unit %g m", path.name, len(lib.structures), lib.db_unit
    )
    return lib


def _eight_byte_real_to_float(data: bytes) -> float:
    short1, short2, long3 = struct.unpack(">HHL", data)
    exponent = (short1 & 0x7F00) // 256 - 64
    mantissa = (((short1 & 0x00FF) * 65536 + short2) * 4294967296 + long3) / 72057594037927936.0
    if short1 & 0x8000:
        return -mantissa * 16.0 ** exponent
    return mantissa * 16.0 ** exponent


def _decode(data_type: int, data: bytes) -> Any:
    if data_type == _NO_DATA:
        return None
    if data_type == _BIT_ARRAY:
        return list(struct.unpack(f">{len(data) // 2}H", data))
    if data_type == _INT16:
        return list(struct.unpack(f">{len(data) // 2}h", data))
    if data_type == _INT32:
        return list(struct.unpack(f">{len(data) // 4}i", data))
    if data_type == _REAL8:
        return [_eight_byte_real_to_float(data[i:i + 8]) for i in range(0, len(data), 8)]
    if data_type == _ASCII:
        return data.rstrip(b"\0").decode("ascii", errors="replace")
    return data


def _record_reader(stream: BinaryIO) -> Iterator[Tuple[int, Any]]:
    while True:
        header = stream.read(4)
        if len(header) < 4:
            raise GdsFormatError("GDSII stream ended before ENDLIB")
        size, record_type, data_type = struct.unpack(">HBB", header)
        if size < 4:
            raise GdsFormatError(f"Invalid GDSII record length {size}")
        data = stream.read(size - 4)
        if len(data) < size - 4:
            raise GdsFormatError(f"GDSII record 0x{record_type:02X} is truncated")
        yield record_type, _decode(data_type, data)
        if record_type == ENDLIB:
            return


def _parse(stream: BinaryIO) -> Library:
    lib_name = "LIB"
    db_unit: Optional[float] = None
    user_unit: Optional[float] = None
    structures: List[Structure] = []

    struct_name: Optional[str] = None
    elements: List[Any] = []
    current: Optional[Dict[str, Any]] = None

    for record_type, value in _record_reader(stream):
        if record_type in _ELEMENT_KINDS:
            if struct_name is None:
                raise GdsFormatError("Element outside of a structure")
            current = {"kind": _ELEMENT_KINDS[record_type], "xy": []}
        elif record_type == ENDEL:
            if current is None:
                raise GdsFormatError(f"ENDEL without element in structure {struct_name!r}")
            elements.append(_build_element(current, struct_name))
            current = None
        elif current is not None:
            _element_record(current, record_type, value)
        elif record_type == LIBNAME:
            lib_name = value
        elif record_type == UNITS:
            # db unit in user units, db unit in meters
            db_unit = _normalize_unit(value[1])
            user_unit = _normalize_unit(value[1] / value[0])
        elif record_type == BGNSTR:
            elements = []
        elif record_type == STRNAME:
            struct_name = value
        elif record_type == ENDSTR:
            if struct_name is None:
                raise GdsFormatError("ENDSTR without STRNAME")
            logger.debug("read structure %s with %d elements", struct_name, len(elements))
            structures.append(Structure(name=struct_name, elements=tuple(elements)))
            struct_name = None

    if db_unit is None:
        raise GdsFormatError("GDSII stream has no UNITS record")

    return Library(
        name=lib_name,
        db_unit=db_unit,
        user_unit=user_unit,
        structures=tuple(structures),
    )


def _element_record(current: Dict[str, Any], record_type: int, value: Any) -> None:
    if record_type == LAYER:
        current["layer"] = value[0]
    elif record_type in (DATATYPE, TEXTTYPE, BOXTYPE, NODETYPE):
        current["type"] = value[0]
    elif record_type == XY_RECORD:
        # long boundaries may continue over several XY records
        current["xy"].extend(zip(value[0::2], value[1::2]))
    elif record_type == WIDTH:
        current["width"] = abs(value[0])
    elif record_type == SNAME:
        current["name"] = value
    elif record_type == STRING:
        current["text"] = value
    elif record_type == COLROW:
        current["columns"], current["rows"] = value[0], value[1]
    elif record_type == STRANS:
        current["x_reflection"] = bool(value[0] & _REFLECTION_BIT)
    elif record_type == MAG:
        current["magnification"] = value[0]
    elif record_type == ANGLE:
        current["rotation"] = value[0]


def _require(current: Dict[str, Any], key: str, structure: Optional[str]) -> Any:
    if key not in current:
        raise GdsFormatError(
            f"{current['kind']} element in structure {structure!r} has no {key} record"
        )
    return current[key]


def _first_xy(current: Dict[str, Any], structure: Optional[str]) -> XY:
    xy = current["xy"]
    if not xy:
        raise GdsFormatError(f"{current['kind']} element in structure {structure!r} has no XY record")
    return xy[0]


def _build_element(current: Dict[str, Any], structure: Optional[str]) -> Any:
    kind = current["kind"]
    points = tuple(current["xy"])

    if kind == "boundary":
        _first_xy(current, structure)
        return Boundary(
            layer=_require(current, "layer", structure),
            datatype=current.get("type", 0),
            points=points,
        )
    if kind == "sref":
        return StructRef(
            name=_require(current, "name", structure),
            origin=_first_xy(current, structure),
            rotation=current.get("rotation", 0.0),
            magnification=current.get("magnification", 1.0),
            x_reflection=current.get("x_reflection", False),
        )
    if kind == "text":
        return Text(
            layer=_require(current, "layer", structure),
            texttype=current.get("type", 0),
            text=current.get("text", ""),
            origin=_first_xy(current, structure),
        )
    if kind == "path":
        return PathElement(
            layer=_require(current, "layer", structure),
            datatype=current.get("type", 0),
            width=current.get("width", 0),
            points=points,
        )
    if kind == "aref":
        columns = current.get("columns", 1)
        rows = current.get("rows", 1)
        if len(points) < 3:
            raise GdsFormatError(f"aref element in structure {structure!r} needs 3 XY points")
        (x0, y0), (x1, _), (_, y2) = points[:3]
        return ArrayRef(
            name=_require(current, "name", structure),
            origin=(x0, y0),
            columns=columns,
            rows=rows,
            spacing=((x1 - x0) // max(columns, 1), (y2 - y0) // max(rows, 1)),
        )
    if kind == "box":
        return Box(layer=_require(current, "layer", structure), boxtype=current.get("type", 0), points=points)
    return Node(layer=_require(current, "layer", structure), nodetype=current.get("type", 0), points=points)
