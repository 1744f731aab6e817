from __future__ import annotations

from .results import ConversionResult, LayerOutput


def _bounds_text(layer: LayerOutput) -> str:
    b = layer.bounds_mm
    if b is None:
        return "n/a"
    return f"({b.min_x:.6f}, {b.min_y:.6f}) - ({b.max_x:.6f}, {b.max_y:.6f}) mm"


def generate_text_report(result: ConversionResult) -> str:
    lines = []

    lines.append(f"Gerber export for cell {result.source.cell}")
    lines.append(f"Source:  {result.source.path}")
    if result.source.library_name:
        lines.append(f"Library: {result.source.library_name}")
    lines.append(f"DB unit: {result.source.db_unit_m:g} m")
    lines.append("")
    lines.append(
        f"Layers written: {len(result.layers)} "
        f"(regions total {result.regions_total})"
    )
    lines.append("")

    for layer in result.layers:
        note = " (empty)" if layer.is_empty else ""
        lines.append(f"[layer {layer.layer}] {layer.output_path}{note}")
        lines.append(f"  regions: {layer.regions}, points: {layer.points}")
        lines.append(f"  bounds:  {_bounds_text(layer)}")
        lines.append(f"  area:    {layer.area_mm2:.6f} mm^2")
    lines.append("")

    return "\n".join(lines)


def generate_markdown_report(result: ConversionResult) -> str:
    lines = []

    lines.append(f"# Gerber export - {result.source.cell}")
    lines.append("")
    lines.append(f"- Source: `{result.source.path}`")
    lines.append(f"- Database unit: **{result.source.db_unit_m:g} m**")
    lines.append(f"- Regions total: **{result.regions_total}**")
    lines.append("")
    lines.append("| Layer | File | Regions | Points | Area (mm^2) |")
    lines.append("|-------|------|---------|--------|-------------|")
    for layer in result.layers:
        lines.append(
            f"| {layer.layer} | `{layer.output_path}` | {layer.regions} | "
            f"{layer.points} | {layer.area_mm2:.6f} |"
        )
    lines.append("")

    return "\n".join(lines)
