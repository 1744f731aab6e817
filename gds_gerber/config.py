# gds_gerber/config.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import json

from .gerber.format import GerberFormatInfo


@dataclass
class ConversionConfig:
    """
    Settings for one conversion run.

    Loaded from a JSON file; unknown keys are kept in `raw` so that
    newer config files still load.
    """
    int_digits: int = 6
    dec_digits: int = 6
    output_suffix: str = ".g"
    default_layers: List[int] = field(default_factory=lambda: [1])
    max_workers: int = 1
    use_cache: bool = True
    raw: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if not self.default_layers:
            raise ValueError("default_layers must not be empty")
        # validates the digit counts
        self.gerber_format()

    def gerber_format(self) -> GerberFormatInfo:
        return GerberFormatInfo(int_digits=self.int_digits, dec_digits=self.dec_digits)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionConfig":
        suffix = str(data.get("output_suffix", ".g"))
        if suffix and not suffix.startswith("."):
            suffix = "." + suffix
        return cls(
            int_digits=int(data.get("int_digits", 6)),
            dec_digits=int(data.get("dec_digits", 6)),
            output_suffix=suffix,
            default_layers=[int(v) for v in data.get("default_layers", [1])],
            max_workers=int(data.get("max_workers", 1)),
            use_cache=bool(data.get("use_cache", True)),
            raw=data,
        )


def load_config(path: Optional[Path] = None) -> ConversionConfig:
    """
    Load a ConversionConfig from JSON, or the defaults when path is None.
    """
    if path is None:
        return ConversionConfig()
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must hold a JSON object")
    return ConversionConfig.from_dict(data)
