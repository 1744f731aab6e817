# gds_gerber/errors.py

from __future__ import annotations

from typing import Optional, Sequence


class LayoutError(RuntimeError):
    pass


class StructureNotFoundError(LayoutError):
    """
    Requested structure (top level or referenced) is absent from the library.

    This is the one recoverable error: callers report it and skip the
    pattern instead of crashing.
    """

    def __init__(self, name: str, referenced_from: Optional[str] = None):
        self.name = name
        self.referenced_from = referenced_from
        if referenced_from is None:
            msg = f"Structure {name!r} does not exist in the library"
        else:
            msg = f"Structure {name!r} referenced from {referenced_from!r} does not exist in the library"
        super().__init__(msg)


class UnsupportedElementError(LayoutError):
    def __init__(self, structure: str, element: object, reason: str = ""):
        self.structure = structure
        self.element = element
        kind = getattr(element, "kind", type(element).__name__)
        msg = f"Unsupported element {kind!r} in structure {structure!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class ReferenceCycleError(LayoutError):
    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__("Structure reference cycle: " + " -> ".join(self.chain))


class CoordinateRangeError(LayoutError, ValueError):
    """
    A coordinate does not fit the target integer or fixed-point range.

    Raised both for offset accumulation overflowing the GDSII coordinate
    width and for millimeter values the output format cannot hold exactly.
    """


class GdsFormatError(LayoutError, ValueError):
    """
    The GDSII stream is truncated or holds records in an impossible order.
    """
