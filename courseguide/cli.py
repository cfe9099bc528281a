"""
CLI (Command Line Interface).

Quick terminal commands for power users and for testing, e.g.:

    courseguide search <text>
    courseguide show <module name>
    courseguide analyze <transcript.json>
    courseguide build-catalog <modules.txt> [--pdf handbook.pdf]
    courseguide interactive

Note:
- The interactive UI lives in courseguide/interactive.py
- This CLI prints plain text (no rich formatting)
- Configuration comes from the environment / .env (see courseguide/config.py)
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from courseguide.config import load_settings
from courseguide.errors import CatalogError
from courseguide.log import configure_logging
from courseguide.metadata import build_catalog
from courseguide.model import CourseRecommendation, Message
from courseguide.session import AdvisingSession


def _load_json(path: Path) -> Any:
    """
    Load JSON from a file.

    CLI behavior: never crash if data is missing or broken.
    Instead, return [] as a safe default so commands can still run.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return []


def load_transcript(path: Path) -> list[Message]:
    """
    Read a transcript file: a list of {role, content, timestamp} objects,
    or an object with such a list under "messages".
    """
    raw = _load_json(path)
    if isinstance(raw, dict):
        raw = raw.get("messages", [])
    if not isinstance(raw, list):
        return []

    out: list[Message] = []
    for m in raw:
        if not isinstance(m, dict):
            continue
        role = str(m.get("role", "")).strip().lower()
        content = str(m.get("content", "") or "")
        if role and content:
            out.append(Message(role=role, content=content, timestamp=str(m.get("timestamp", "") or "")))
    return out


def format_course(course: CourseRecommendation) -> str:
    bits = [course.name]
    if course.credits:
        bits.append(course.credits)
    if course.semester:
        bits.append(course.semester)
    if course.page:
        bits.append(f"p. {course.page}")
    return " | ".join(bits)


def _cmd_search(args: argparse.Namespace, session: AdvisingSession) -> int:
    """
    Search modules by substring match in the module name.
    """
    query = (args.text or "").strip()
    if not query:
        print("Please provide a search text.")
        return 1

    matches = session.catalog.search(query, limit=50)
    if not matches:
        print("No results.")
        return 0

    # show max 20
    for m in matches[:20]:
        ects = f"{m.ects:g} ECTS" if m.ects is not None else "? ECTS"
        print(f"{m.name} | {ects} | p. {m.page}")
    if len(matches) > 20:
        print(f"... and {len(matches) - 20} more results")

    return 0


def _cmd_show(args: argparse.Namespace, session: AdvisingSession) -> int:
    """
    Print one module as JSON.
    """
    name = (args.name or "").strip()
    if not name:
        print("Please provide a module name.")
        return 1

    module = session.get_module_by_name(name)
    if module is None:
        print(f"Module not found: {name}")
        return 1

    print(json.dumps(module.to_dict(), indent=2, ensure_ascii=False))
    return 0


def _cmd_analyze(args: argparse.Namespace, session: AdvisingSession) -> int:
    """
    Extract booked courses from a transcript file.
    """
    messages = load_transcript(Path(args.transcript))
    if not messages:
        print("Transcript is empty or unreadable.")
        return 1

    result = session.analyze_transcript_for_booked_courses(messages)
    if not result.booked_courses:
        print("No courses detected.")
        return 0

    print(f"Booked courses: {len(result.booked_courses)}")
    for course in result.booked_courses:
        print(f"- {format_course(course)}")

    if result.assigned_by_semester:
        print("\nBy semester:")
        for semester, courses in result.assigned_by_semester.items():
            print(f"{semester}: {', '.join(c.name for c in courses)}")

    return 0


def _cmd_build_catalog(args: argparse.Namespace) -> int:
    modules_path = Path(args.modules)
    if not modules_path.exists():
        print(f"Module list not found: {modules_path}")
        return 1

    out = Path(args.out) if args.out else Path(__file__).resolve().parent / "data" / "modules_metadata.json"
    pdf = Path(args.pdf) if args.pdf else None
    try:
        n = build_catalog(modules_path, out, pdf)
    except CatalogError as e:
        print(f"Could not build catalog: {e}")
        return 1
    print(f"Saved metadata for {n} modules to {out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="courseguide", description="Course Guide CLI")
    parser.add_argument("--catalog", type=str, default=None, help="Path or URL of modules_metadata.json")
    parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, ...")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Search for modules")
    p_search.add_argument("text", type=str, help="Search text")

    p_show = sub.add_parser("show", help="Show one module as JSON")
    p_show.add_argument("name", type=str, help="Module name")

    p_analyze = sub.add_parser("analyze", help="Extract booked courses from a transcript")
    p_analyze.add_argument("transcript", type=str, help="Transcript JSON file")

    p_build = sub.add_parser("build-catalog", help="Build modules_metadata.json from a module list")
    p_build.add_argument("modules", type=str, help="Module list file (Name_page entries)")
    p_build.add_argument("--pdf", type=str, default=None, help="Course handbook PDF")
    p_build.add_argument("--out", type=str, default=None, help="Output JSON path")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings()
    if args.catalog:
        settings.catalog_source = args.catalog
    configure_logging(args.log_level or settings.log_level)

    if args.command == "build-catalog":
        raise SystemExit(_cmd_build_catalog(args))

    session = AdvisingSession.from_settings(settings)

    if args.command == "search":
        raise SystemExit(_cmd_search(args, session))
    if args.command == "show":
        raise SystemExit(_cmd_show(args, session))
    if args.command == "analyze":
        raise SystemExit(_cmd_analyze(args, session))

    if args.command == "interactive":
        from courseguide.interactive import run_interactive

        run_interactive(session)
        raise SystemExit(0)

    raise SystemExit(2)
