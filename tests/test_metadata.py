"""
Unit tests for catalog generation.

The handbook PDF is replaced by a list of page texts, so pdfplumber is
only exercised through build_catalog() without a PDF.
"""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from courseguide.catalog import CatalogStore
from courseguide.errors import CatalogError
from courseguide.metadata import (
    build_catalog,
    build_metadata,
    extract_credits,
    find_module_page,
    main,
    parse_module_list,
)


def _pages(n: int, **texts: str) -> list:
    pages = ["filler text"] * n
    for key, text in texts.items():
        pages[int(key[1:]) - 1] = text
    return pages


class TestModuleList(unittest.TestCase):
    def test_parse(self) -> None:
        entries = parse_module_list("Modules Ethics_12 Robotics - Perception_55 Control Systems 2_20")
        self.assertEqual(
            entries,
            [
                {"name": "Ethics", "listedPage": 12},
                {"name": "Robotics - Perception", "listedPage": 55},
                {"name": "Control Systems 2", "listedPage": 20},
            ],
        )

    def test_parse_empty(self) -> None:
        self.assertEqual(parse_module_list(""), [])


class TestPageSearch(unittest.TestCase):
    def test_extract_credits(self) -> None:
        self.assertEqual(extract_credits("Credits: 5 ECTS, workload 150h"), 5.0)
        self.assertEqual(extract_credits("7.5 CP"), 7.5)
        self.assertIsNone(extract_credits("no credits here"))

    def test_find_near_listed_page(self) -> None:
        pages = _pages(30, p20="Module: Robotics - Perception\n5 ECTS")
        self.assertEqual(find_module_page(pages, "robotics - perception", 15), 20)

    def test_outside_radius(self) -> None:
        pages = _pages(40, p2="Robotics - Perception")
        self.assertIsNone(find_module_page(pages, "Robotics - Perception", 30))

    def test_no_pages(self) -> None:
        self.assertIsNone(find_module_page([], "Ethics", 3))


class TestBuild(unittest.TestCase):
    def test_build_metadata_with_pages(self) -> None:
        pages = _pages(30, p20="Robotics - Perception\n5 ECTS", p13="Ethics 3 CP")
        meta = build_metadata(
            [{"name": "Robotics - Perception", "listedPage": 18}, {"name": "Ethics", "listedPage": 12}], pages
        )
        self.assertIn("generatedAt", meta)
        self.assertEqual(
            meta["modules"][0],
            {"name": "Robotics - Perception", "listedPage": 18, "actualPage": 20, "ects": 5.0},
        )
        self.assertEqual(meta["modules"][1]["actualPage"], 13)
        self.assertEqual(meta["modules"][1]["ects"], 3.0)

    def test_build_metadata_missing_page(self) -> None:
        with self.assertLogs("courseguide.metadata", level="WARNING"):
            meta = build_metadata([{"name": "Quantum Chemistry", "listedPage": 5}], _pages(10))
        self.assertIsNone(meta["modules"][0]["actualPage"])

    def test_build_catalog_without_pdf(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            src = Path(d) / "modules.txt"
            src.write_text("Modules Ethics_12 Control Systems 2_20", encoding="utf-8")
            out = Path(d) / "data" / "modules_metadata.json"

            self.assertEqual(build_catalog(src, out), 2)

            data = json.loads(out.read_text(encoding="utf-8"))
            self.assertEqual([m["name"] for m in data["modules"]], ["Ethics", "Control Systems 2"])

            # the generated file is readable by the catalog; page falls back to listedPage
            store = CatalogStore(out)
            self.assertEqual(store.find_course_page("Control Systems 2"), 20)

    def test_build_catalog_missing_list(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(CatalogError):
                build_catalog(Path(d) / "missing.txt", Path(d) / "out.json")

    def test_main_exit_codes(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            src = Path(d) / "modules.txt"
            src.write_text("Modules Ethics_12", encoding="utf-8")
            out = Path(d) / "out.json"

            with redirect_stdout(io.StringIO()):
                with self.assertRaises(SystemExit) as ok:
                    main([str(src), "--out", str(out)])
                with self.assertRaises(SystemExit) as failed:
                    main([str(Path(d) / "missing.txt"), "--out", str(out)])

        self.assertEqual(ok.exception.code, 0)
        self.assertEqual(failed.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
