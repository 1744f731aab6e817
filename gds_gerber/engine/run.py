# gds_gerber/engine/run.py

from __future__ import annotations

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .. import __version__
from ..config import ConversionConfig
from ..errors import StructureNotFoundError
from ..geometry import PatternCache, flatten
from ..geometry.primitives import Pattern
from ..geometry.queries import get_pattern_area, get_pattern_bounds
from ..gerber.format import GerberFormatInfo
from ..gerber.writer import write_gerber
from ..library import Library, load_library
from ..results import BoundsMm, ConversionResult, LayerOutput, RunInfo, SourceInfo

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def output_path_for(output_dir: PathLike, source_stem: str, cell: str, layer: int, suffix: str = ".g") -> Path:
    return Path(output_dir) / f"{source_stem}_{cell}_{layer}{suffix}"


def write_pattern_file(
    pattern: Pattern,
    library: Library,
    path: Path,
    fmt: GerberFormatInfo,
) -> None:
    """
    Emit `pattern` into `path`.

    The file is closed on every exit path; if emission fails the partial
    file is removed before the error propagates.
    """
    f = path.open("w", encoding="ascii", newline="\n")
    try:
        with f:
            write_gerber(pattern, library, f, fmt)
    except Exception:
        path.unlink(missing_ok=True)
        raise


def convert_layer(
    library: Library,
    cell: str,
    layer: int,
    out_path: Path,
    fmt: GerberFormatInfo,
    cache: Optional[PatternCache] = None,
) -> LayerOutput:
    pattern = flatten(library, cell, layer, cache=cache)
    write_pattern_file(pattern, library, out_path, fmt)

    mm_per_db = library.db_unit * 1000.0
    bounds = get_pattern_bounds(pattern)
    bounds_mm = None
    if bounds is not None:
        b = bounds.scaled(mm_per_db)
        bounds_mm = BoundsMm(min_x=b.min_x, min_y=b.min_y, max_x=b.max_x, max_y=b.max_y)

    logger.info("wrote %s (%d regions)", out_path, len(pattern))
    return LayerOutput(
        layer=layer,
        output_path=str(out_path),
        regions=len(pattern),
        points=pattern.point_count(),
        bounds_mm=bounds_mm,
        area_mm2=get_pattern_area(pattern) * mm_per_db * mm_per_db,
    )


def _unique_layers(layers: Iterable[int]) -> List[int]:
    out: List[int] = []
    for layer in layers:
        if layer in out:
            logger.warning("layer %d requested more than once; writing it once", layer)
            continue
        out.append(layer)
    return out


def convert_layout(
    library: Library,
    cell: str,
    layers: Optional[Sequence[int]],
    output_dir: PathLike,
    *,
    source_name: str,
    config: Optional[ConversionConfig] = None,
) -> ConversionResult:
    """
    Flatten `cell` once per layer and write one Gerber file per layer.

    Files are named <source stem>_<cell>_<layer><suffix> inside output_dir.
    Layers are independent of each other; with config.max_workers > 1 they
    run on a thread pool that shares the read-only library and one
    PatternCache.
    """
    if config is None:
        config = ConversionConfig()

    if library.get_structure(cell) is None:
        raise StructureNotFoundError(cell)

    fmt = config.gerber_format()
    layer_list = _unique_layers(layers if layers else config.default_layers)
    cache = PatternCache() if config.use_cache else None

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(source_name).stem

    def _run(layer: int) -> LayerOutput:
        out_path = output_path_for(output_dir, stem, cell, layer, config.output_suffix)
        return convert_layer(library, cell, layer, out_path, fmt, cache)

    if config.max_workers > 1 and len(layer_list) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            outputs = list(pool.map(_run, layer_list))
    else:
        outputs = [_run(layer) for layer in layer_list]

    if cache is not None:
        logger.debug("pattern cache: %d entries, %d hits", len(cache), cache.hits)

    return ConversionResult(
        run=RunInfo(
            id=uuid.uuid4().hex,
            generated_at=datetime.now(timezone.utc),
            tool="gds-gerber",
            tool_version=__version__,
        ),
        source=SourceInfo(
            path=str(source_name),
            library_name=library.name,
            cell=cell,
            db_unit_m=library.db_unit,
            structures_total=len(library.structures),
        ),
        layers=outputs,
    )


def convert_file(
    path: PathLike,
    cell: str,
    layers: Optional[Sequence[int]] = None,
    output_dir: Optional[PathLike] = None,
    config: Optional[ConversionConfig] = None,
) -> ConversionResult:
    """
    High level entry point:

    - Loads the layout (a GDSII stream file, or a Library JSON dump).
    - Writes one Gerber file per layer into output_dir (default: the
      current directory).
    """
    path = Path(path)
    library = load_library(path)
    return convert_layout(
        library,
        cell,
        layers,
        output_dir if output_dir is not None else Path.cwd(),
        source_name=str(path),
        config=config,
    )
