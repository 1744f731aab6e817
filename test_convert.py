"""
Tests for the conversion engine, config loading, report and CLI.
"""

import contextlib
import io
import json
import tempfile
import unittest
from pathlib import Path

from gds_gerber.cli import main
from gds_gerber.config import ConversionConfig, load_config
from gds_gerber.engine import convert_file, convert_layout, output_path_for
from gds_gerber.errors import CoordinateRangeError, StructureNotFoundError
from gds_gerber.io import save_conversion_result, save_report
from gds_gerber.library import Boundary, Library, Structure, StructRef
from gds_gerber.results import ConversionResult
from gds_gerber.report import generate_markdown_report, generate_text_report

SCENARIO_OUTPUT = (
    "%FSLAX66Y66*%\n"
    "%MOMM*%\n"
    "G36*\n"
    "X2000000Y0D02*\n"
    "X2000000Y0D01*\n"
    "X3000000Y0D01*\n"
    "X3000000Y1000000D01*\n"
    "X2000000Y1000000D01*\n"
    "G37*\n"
    "M02*\n"
)


def scenario_library():
    return Library(
        name="TEST",
        db_unit=1e-6,
        structures=(
            Structure(name="A", elements=(
                Boundary(layer=1, points=((0, 0), (1000, 0), (1000, 1000), (0, 1000))),
                Boundary(layer=2, points=((0, 0), (10, 0), (10, 10))),
            )),
            Structure(name="B", elements=(StructRef(name="A", origin=(2000, 0)),)),
        ),
    )


class _TmpDirCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()


class TestConvertLayout(_TmpDirCase):

    def test_one_file_per_layer(self):
        result = convert_layout(
            scenario_library(), "B", [1, 2, 7], self.tmp, source_name="chip.gds"
        )
        names = sorted(p.name for p in self.tmp.iterdir())
        self.assertEqual(names, ["chip_B_1.g", "chip_B_2.g", "chip_B_7.g"])
        self.assertEqual((self.tmp / "chip_B_1.g").read_text(), SCENARIO_OUTPUT)

        self.assertEqual([l.layer for l in result.layers], [1, 2, 7])
        self.assertEqual(result.get_layer(1).regions, 1)
        self.assertEqual(result.get_layer(1).points, 4)
        self.assertTrue(result.get_layer(7).is_empty)
        self.assertIsNone(result.get_layer(7).bounds_mm)
        self.assertEqual(result.regions_total, 2)

    def test_bounds_and_area_in_mm(self):
        result = convert_layout(scenario_library(), "B", [1], self.tmp, source_name="chip.gds")
        layer = result.get_layer(1)
        self.assertAlmostEqual(layer.bounds_mm.min_x, 2.0)
        self.assertAlmostEqual(layer.bounds_mm.max_x, 3.0)
        self.assertAlmostEqual(layer.bounds_mm.max_y, 1.0)
        self.assertAlmostEqual(layer.area_mm2, 1.0)

    def test_default_layers_from_config(self):
        config = ConversionConfig(default_layers=[2], output_suffix=".gbr")
        convert_layout(scenario_library(), "B", None, self.tmp, source_name="x/chip.gds", config=config)
        self.assertEqual([p.name for p in self.tmp.iterdir()], ["chip_B_2.gbr"])

    def test_duplicate_layers_written_once(self):
        result = convert_layout(scenario_library(), "B", [1, 1], self.tmp, source_name="chip.gds")
        self.assertEqual(len(result.layers), 1)

    def test_parallel_layers_match_serial(self):
        serial_dir = self.tmp / "serial"
        parallel_dir = self.tmp / "parallel"
        convert_layout(scenario_library(), "B", [1, 2], serial_dir, source_name="chip.gds")
        convert_layout(
            scenario_library(), "B", [1, 2], parallel_dir, source_name="chip.gds",
            config=ConversionConfig(max_workers=2),
        )
        for name in ("chip_B_1.g", "chip_B_2.g"):
            self.assertEqual(
                (serial_dir / name).read_text(),
                (parallel_dir / name).read_text(),
            )

    def test_missing_cell_writes_nothing(self):
        with self.assertRaises(StructureNotFoundError):
            convert_layout(scenario_library(), "NOPE", [1], self.tmp, source_name="chip.gds")
        self.assertEqual(list(self.tmp.iterdir()), [])

    def test_failed_emission_removes_partial_file(self):
        lib = Library(
            db_unit=1e-10,
            structures=(Structure(name="A", elements=(Boundary(layer=1, points=((1, 0),)),)),),
        )
        with self.assertRaises(CoordinateRangeError):
            convert_layout(lib, "A", [1], self.tmp, source_name="chip.gds")
        self.assertFalse(output_path_for(self.tmp, "chip", "A", 1).exists())

    def test_convert_file_from_json(self):
        src = self.tmp / "design.json"
        src.write_text(scenario_library().to_json(), encoding="utf-8")
        out = self.tmp / "out"
        result = convert_file(src, "B", [1], output_dir=out)
        self.assertEqual((out / "design_B_1.g").read_text(), SCENARIO_OUTPUT)
        self.assertEqual(result.source.cell, "B")
        self.assertEqual(result.source.structures_total, 2)


class TestConfig(_TmpDirCase):

    def test_defaults(self):
        config = load_config(None)
        self.assertEqual(config.default_layers, [1])
        self.assertEqual(config.output_suffix, ".g")
        self.assertEqual(config.gerber_format().format_directive(), "%FSLAX66Y66*%")

    def test_load_from_json(self):
        path = self.tmp / "cfg.json"
        path.write_text(json.dumps({
            "dec_digits": 5,
            "output_suffix": "gbr",
            "default_layers": [3, 4],
            "future_option": True,
        }))
        config = load_config(path)
        self.assertEqual(config.dec_digits, 5)
        self.assertEqual(config.output_suffix, ".gbr")
        self.assertEqual(config.default_layers, [3, 4])
        self.assertTrue(config.raw["future_option"])

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            ConversionConfig(int_digits=9)
        with self.assertRaises(ValueError):
            ConversionConfig(max_workers=0)
        with self.assertRaises(FileNotFoundError):
            load_config(self.tmp / "missing.json")


class TestResultAndReport(_TmpDirCase):

    def test_result_json_and_reports(self):
        result = convert_layout(scenario_library(), "B", [1, 5], self.tmp, source_name="chip.gds")
        path = self.tmp / "reports" / "result.json"
        save_conversion_result(result, path)
        again = ConversionResult.from_json(path.read_text(encoding="utf-8"))
        self.assertEqual(again.layers, result.layers)
        self.assertEqual(again.run.tool, "gds-gerber")

        text = generate_text_report(result)
        self.assertIn("[layer 1]", text)
        self.assertIn("(empty)", text)
        md = generate_markdown_report(result)
        self.assertIn("| 1 |", md)

    def test_save_report_formats(self):
        result = convert_layout(scenario_library(), "B", [1], self.tmp, source_name="chip.gds")
        save_report(result, self.tmp / "r" / "summary.md", "markdown")
        self.assertTrue((self.tmp / "r" / "summary.md").read_text().startswith("# Gerber export - B"))
        save_report(result, self.tmp / "summary.txt", "text")
        self.assertIn("[layer 1]", (self.tmp / "summary.txt").read_text())
        with self.assertRaises(ValueError):
            save_report(result, self.tmp / "summary.csv", "csv")


class TestCli(_TmpDirCase):

    def _write_json_library(self):
        src = self.tmp / "chip.json"
        src.write_text(scenario_library().to_json(), encoding="utf-8")
        return src

    def test_cli_writes_files_and_report(self):
        src = self._write_json_library()
        out = self.tmp / "out"
        report = self.tmp / "report.json"
        rc = main([str(src), "B", "1", "2", "--output-dir", str(out), "--report", str(report)])
        self.assertEqual(rc, 0)
        self.assertEqual((out / "chip_B_1.g").read_text(), SCENARIO_OUTPUT)
        self.assertTrue((out / "chip_B_2.g").exists())
        again = ConversionResult.from_json(report.read_text(encoding="utf-8"))
        self.assertEqual(len(again.layers), 2)

    def test_cli_markdown_report(self):
        src = self._write_json_library()
        report = self.tmp / "report.md"
        rc = main([
            str(src), "B", "1", "--output-dir", str(self.tmp),
            "--report", str(report), "--report-format", "markdown",
        ])
        self.assertEqual(rc, 0)
        md = report.read_text(encoding="utf-8")
        self.assertIn("| Layer | File |", md)
        self.assertIn("| 1 |", md)

    def test_cli_default_layer(self):
        src = self._write_json_library()
        rc = main([str(src), "B", "--output-dir", str(self.tmp)])
        self.assertEqual(rc, 0)
        self.assertTrue((self.tmp / "chip_B_1.g").exists())

    def test_cli_missing_cell_returns_error(self):
        src = self._write_json_library()
        rc = main([str(src), "NOPE", "--output-dir", str(self.tmp)])
        self.assertEqual(rc, 1)

    def test_cli_list_cells(self):
        src = self._write_json_library()
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            rc = main([str(src), "--list-cells"])
        self.assertEqual(rc, 0)
        self.assertEqual(buf.getvalue().splitlines(), ["A", "B (top)"])

    def test_cli_missing_file(self):
        with self.assertRaises(SystemExit):
            main([str(self.tmp / "nope.gds"), "TOP"])


if __name__ == "__main__":
    unittest.main()
