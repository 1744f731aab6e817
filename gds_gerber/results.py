from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class RunInfo(BaseModel):
    id: str
    generated_at: datetime
    tool: Optional[str] = None
    tool_version: Optional[str] = None


class SourceInfo(BaseModel):
    path: str
    library_name: Optional[str] = None
    cell: str
    db_unit_m: float = Field(gt=0)
    structures_total: int = 0


class BoundsMm(BaseModel):
    min_x: float
    min_y: float
    max_x: float
    max_y: float


class LayerOutput(BaseModel):
    layer: int
    output_path: str
    regions: int = Field(default=0, ge=0)
    points: int = Field(default=0, ge=0)
    bounds_mm: Optional[BoundsMm] = None
    area_mm2: float = Field(default=0.0, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.regions == 0


class ConversionResult(BaseModel):
    schema_version: str = "1.0.0"
    run: RunInfo
    source: SourceInfo
    layers: List[LayerOutput] = Field(default_factory=list)

    @property
    def regions_total(self) -> int:
        return sum(l.regions for l in self.layers)

    def get_layer(self, layer: int) -> Optional[LayerOutput]:
        for l in self.layers:
            if l.layer == layer:
                return l
        return None

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, data: str) -> "ConversionResult":
        return cls.model_validate_json(data)
