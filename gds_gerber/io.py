from __future__ import annotations

from pathlib import Path

from .report import generate_markdown_report, generate_text_report
from .results import ConversionResult

REPORT_FORMATS = ("json", "text", "markdown")


def save_conversion_result(result: ConversionResult, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.to_json(), encoding="utf-8")


def save_report(result: ConversionResult, path: Path, report_format: str = "json") -> None:
    """
    Write the run summary as JSON, a plain text report, or a markdown table.
    """
    if report_format == "json":
        save_conversion_result(result, path)
        return
    if report_format == "text":
        text = generate_text_report(result)
    elif report_format == "markdown":
        text = generate_markdown_report(result)
    else:
        raise ValueError(f"Unknown report format: {report_format!r}")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
