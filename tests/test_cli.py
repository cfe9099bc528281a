"""
Tests for CLI entry points and transcript loading.

These tests focus on:
- Basic CLI argument validation (search requires text)
- Running commands against a temporary catalog file
  (to avoid depending on the packaged catalog or the network)
"""

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

from courseguide.cli import load_transcript, main

MODULES = [
    {"name": "Machine Learning - Basic Methods", "page": 40, "ects": 6},
    {"name": "Robotics - Perception", "page": 55, "ects": 5},
]

NO_REMOTE = {"GEMINI_API_KEY": "", "COURSEGUIDE_CATALOG": ""}


class TestCLI(unittest.TestCase):
    def _run(self, argv: list) -> tuple:
        buf = io.StringIO()
        with mock.patch.dict(os.environ, NO_REMOTE), redirect_stdout(buf):
            with self.assertRaises(SystemExit) as ctx:
                main(argv)
        return ctx.exception.code, buf.getvalue()

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.catalog = self.dir / "modules_metadata.json"
        self.catalog.write_text(json.dumps({"modules": MODULES}), encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_cli_search_requires_text(self) -> None:
        # search without text should exit with nonzero
        code, _ = self._run(["--catalog", str(self.catalog), "search", ""])
        self.assertNotEqual(code, 0)

    def test_cli_search(self) -> None:
        code, out = self._run(["--catalog", str(self.catalog), "search", "robot"])
        self.assertEqual(code, 0)
        self.assertIn("Robotics - Perception | 5 ECTS | p. 55", out)

    def test_cli_show(self) -> None:
        code, out = self._run(["--catalog", str(self.catalog), "show", "Robotics - Perception"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["page"], 55)

        code, _ = self._run(["--catalog", str(self.catalog), "show", "Quantum Chemistry"])
        self.assertEqual(code, 1)

    def test_cli_analyze(self) -> None:
        transcript = self.dir / "transcript.json"
        transcript.write_text(
            json.dumps(
                {
                    "messages": [
                        {"role": "user", "content": "What should I take?"},
                        {
                            "role": "assistant",
                            "content": "I'll add Machine Learning - Basic Methods with five ECTS to my plan.",
                        },
                    ]
                }
            ),
            encoding="utf-8",
        )
        code, out = self._run(["--catalog", str(self.catalog), "analyze", str(transcript)])
        self.assertEqual(code, 0)
        self.assertIn("Booked courses: 1", out)
        self.assertIn("Machine Learning - Basic Methods | 5 ECTS | p. 40", out)

    def test_cli_analyze_missing_file(self) -> None:
        code, _ = self._run(["--catalog", str(self.catalog), "analyze", str(self.dir / "missing.json")])
        self.assertEqual(code, 1)

    def test_cli_build_catalog(self) -> None:
        src = self.dir / "modules.txt"
        src.write_text("Modules Robotics - Perception_55", encoding="utf-8")
        out_path = self.dir / "out.json"
        code, out = self._run(["build-catalog", str(src), "--out", str(out_path)])
        self.assertEqual(code, 0)
        self.assertTrue(out_path.exists())
        self.assertIn("Saved metadata for 1 modules", out)

    def test_cli_build_catalog_unreadable_pdf(self) -> None:
        src = self.dir / "modules.txt"
        src.write_text("Modules Robotics - Perception_55", encoding="utf-8")
        pdf = self.dir / "handbook.pdf"
        pdf.write_bytes(b"this is not a pdf")
        code, out = self._run(["build-catalog", str(src), "--pdf", str(pdf), "--out", str(self.dir / "out.json")])
        self.assertEqual(code, 1)
        self.assertIn("Could not build catalog", out)

    def test_cli_build_catalog_undecodable_list(self) -> None:
        src = self.dir / "modules.txt"
        src.write_bytes(b"\xff\xfe\xfa Modules")
        code, _ = self._run(["build-catalog", str(src), "--out", str(self.dir / "out.json")])
        self.assertEqual(code, 1)


class TestLoadTranscript(unittest.TestCase):
    def test_list_and_filtering(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "t.json"
            p.write_text(
                json.dumps([{"role": "Assistant", "content": "Hi"}, {"role": "user"}, "junk"]),
                encoding="utf-8",
            )
            messages = load_transcript(p)
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0].role, "assistant")

    def test_broken_file(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "t.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_transcript(p), [])


if __name__ == "__main__":
    unittest.main()
