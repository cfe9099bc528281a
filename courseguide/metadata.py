"""
Catalog generation (module list + handbook PDF -> modules_metadata.json).

Input:
- a module list as printed in the handbook index: "Modules Name A_12 Name B_15 ..."
  (each entry is <name>_<listed page>)
- optionally the handbook PDF

For each module, the pages around the listed page (+-15) are searched for
the module name. The first hit becomes `actualPage` and the first
"<n> ECTS" / "<n> CP" on that page becomes `ects`.

Output: {"generatedAt": ..., "modules": [...]}, the format CatalogStore reads.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pdfplumber
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from courseguide.errors import CatalogError

logger = logging.getLogger(__name__)


PACKAGE_DIR = Path(__file__).resolve().parent
SEARCH_RADIUS = 15

_ENTRY = re.compile(r"([^_]+?)_(\d+)(?:\s+|$)")
_CREDITS = re.compile(r"(\d+(?:\.\d+)?)\s*(?:ECTS|CP)\b", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_module_list(text: str) -> List[Dict[str, Any]]:
    """
    Parse "Name_page" entries into [{"name": ..., "listedPage": ...}, ...].
    """
    cleaned = re.sub(r"^\s*Modules\s*", "", text or "", flags=re.IGNORECASE)
    entries: List[Dict[str, Any]] = []
    for m in _ENTRY.finditer(cleaned):
        name = m.group(1).strip()
        if name:
            entries.append({"name": name, "listedPage": int(m.group(2))})
    return entries


def extract_credits(text: str) -> Optional[float]:
    m = _CREDITS.search(text or "")
    return float(m.group(1)) if m else None


def find_module_page(page_texts: Sequence[str], name: str, listed_page: int, radius: int = SEARCH_RADIUS) -> Optional[int]:
    """
    1-based page number near `listed_page` whose text contains `name`.
    """
    if not page_texts:
        return None
    target = name.lower()
    first = max(1, listed_page - radius)
    last = min(len(page_texts), listed_page + radius)
    for page_number in range(first, last + 1):
        if target in (page_texts[page_number - 1] or "").lower():
            return page_number
    return None


def read_pdf_pages(pdf_path: Path) -> List[str]:
    try:
        with pdfplumber.open(str(pdf_path)) as pdf:
            return [page.extract_text() or "" for page in pdf.pages]
    except (OSError, PdfminerException, PSException) as e:
        raise CatalogError(f"cannot read handbook PDF {pdf_path}: {e}") from e


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def build_metadata(entries: List[Dict[str, Any]], page_texts: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    modules: List[Dict[str, Any]] = []
    missing = 0

    for entry in entries:
        record: Dict[str, Any] = {
            "name": entry["name"],
            "listedPage": entry["listedPage"],
            "actualPage": None,
            "ects": None,
        }
        if page_texts:
            page = find_module_page(page_texts, entry["name"], entry["listedPage"])
            if page is None:
                missing += 1
                logger.warning(
                    "Could not locate module page for %r (listed page %s)", entry["name"], entry["listedPage"]
                )
            else:
                record["actualPage"] = page
                record["ects"] = extract_credits(page_texts[page - 1])
        modules.append(record)

    if missing:
        logger.info("Missing pages: %d of %d modules", missing, len(modules))

    return {
        "generatedAt": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "modules": modules,
    }


def build_catalog(list_path: Path, out_path: Path, pdf_path: Optional[Path] = None) -> int:
    """
    Build modules_metadata.json. Returns the number of modules written.
    Raises CatalogError if the module list or the PDF cannot be read.
    """
    try:
        listing = list_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"cannot read module list {list_path}: {e}") from e

    entries = parse_module_list(listing)
    page_texts = read_pdf_pages(pdf_path) if pdf_path is not None else None

    metadata = build_metadata(entries, page_texts)

    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(metadata, ensure_ascii=False, indent=2), encoding="utf-8")
    return len(metadata["modules"])


# ---------------------------------------------------------------------------
# CLI entry
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="courseguide.metadata", description="Build modules_metadata.json")
    p.add_argument("modules", type=Path, help="Module list file (Name_page entries)")
    p.add_argument("--pdf", type=Path, default=None, help="Course handbook PDF")
    p.add_argument("--out", type=Path, default=PACKAGE_DIR / "data" / "modules_metadata.json")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        n = build_catalog(args.modules, args.out, args.pdf)
    except CatalogError as e:
        print(f"Error: {e}")
        raise SystemExit(1)
    print(f"Saved metadata for {n} modules to {args.out.resolve()}")
    raise SystemExit(0)


if __name__ == "__main__":
    main()
