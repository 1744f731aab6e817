# gds_gerber/library/models.py

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

XY = Tuple[int, int]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Boundary(_Frozen):
    kind: Literal["boundary"] = "boundary"
    layer: int
    datatype: int = 0
    points: Tuple[XY, ...] = Field(min_length=1)


class StructRef(_Frozen):
    kind: Literal["sref"] = "sref"
    name: str
    origin: XY = (0, 0)
    rotation: float = 0.0
    magnification: float = 1.0
    x_reflection: bool = False

    @property
    def is_translation_only(self) -> bool:
        return (
            self.rotation % 360.0 == 0.0
            and self.magnification == 1.0
            and not self.x_reflection
        )


class Text(_Frozen):
    kind: Literal["text"] = "text"
    layer: int
    texttype: int = 0
    text: str = ""
    origin: XY = (0, 0)


class PathElement(_Frozen):
    kind: Literal["path"] = "path"
    layer: int
    datatype: int = 0
    width: int = 0
    points: Tuple[XY, ...] = ()


class ArrayRef(_Frozen):
    kind: Literal["aref"] = "aref"
    name: str
    origin: XY = (0, 0)
    columns: int = 1
    rows: int = 1
    spacing: XY = (0, 0)


class Box(_Frozen):
    kind: Literal["box"] = "box"
    layer: int
    boxtype: int = 0
    points: Tuple[XY, ...] = ()


class Node(_Frozen):
    kind: Literal["node"] = "node"
    layer: int
    nodetype: int = 0
    points: Tuple[XY, ...] = ()


Element = Annotated[
    Union[Boundary, StructRef, Text, PathElement, ArrayRef, Box, Node],
    Field(discriminator="kind"),
]


class Structure(_Frozen):
    name: str
    elements: Tuple[Element, ...] = ()

    def references(self) -> List[str]:
        """
        Names of structures this one instantiates, in element order.
        """
        return [e.name for e in self.elements if isinstance(e, (StructRef, ArrayRef))]


class Library(_Frozen):
    """
    Read-only layout hierarchy.

    db_unit is the size of one integer coordinate step in meters;
    user_unit is kept for reporting only.
    """
    name: str = "LIB"
    db_unit: float = Field(gt=0)
    user_unit: Optional[float] = None
    structures: Tuple[Structure, ...] = ()

    _by_name: Dict[str, Structure] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _unique_names(self) -> "Library":
        seen = set()
        for s in self.structures:
            if s.name in seen:
                raise ValueError(f"duplicate structure name: {s.name!r}")
            seen.add(s.name)
        return self

    def model_post_init(self, __context: Any) -> None:
        self._by_name = {s.name: s for s in self.structures}

    def get_structure(self, name: str) -> Optional[Structure]:
        return self._by_name.get(name)

    def structure_names(self) -> List[str]:
        return [s.name for s in self.structures]

    def top_structures(self) -> List[str]:
        """
        Structures no other structure references.
        """
        referenced = set()
        for s in self.structures:
            referenced.update(s.references())
        return [s.name for s in self.structures if s.name not in referenced]

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, data: str) -> "Library":
        return cls.model_validate_json(data)
