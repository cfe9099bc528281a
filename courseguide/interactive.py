from __future__ import annotations

from datetime import datetime

from rich import box
from rich.console import Console
from rich.table import Table

from courseguide.model import CourseRecommendation, Message
from courseguide.session import AdvisingSession

console = Console()


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg)


def run_interactive(session: AdvisingSession) -> None:
    """
    Interactive menu loop. The conversation is entered turn by turn and
    analysed on demand; everything is lost on exit.
    """
    messages: list[Message] = []

    while True:
        _print_header(session, messages)

        choice = _prompt(
            "\n[1] Add conversation turn\n"
            "[2] Analyze conversation (extract booked courses)\n"
            "[3] Search module library + add\n"
            "[4] View recommendations\n"
            "[5] Remove a recommendation\n"
            "[6] Semester planner\n"
            "[7] Add semester\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_add_turn(messages)
        elif choice == "2":
            _flow_analyze(session, messages)
        elif choice == "3":
            _flow_search_add(session)
        elif choice == "4":
            _flow_view_recommendations(session)
        elif choice == "5":
            _flow_remove(session)
        elif choice == "6":
            _flow_planner(session)
        elif choice == "7":
            _flow_add_semester(session)
        else:
            _println("Invalid choice.")


def _print_header(session: AdvisingSession, messages: list[Message]) -> None:
    n_modules = len(session.get_all_course_names())
    _println("\n=== Course Guide (interactive) ===")
    if n_modules:
        _println(f"Catalog: {n_modules} modules")
    else:
        _println("Catalog: (empty) – set COURSEGUIDE_CATALOG or run 'courseguide build-catalog'")
    _println(
        f"Turns: {len(messages)} | Recommendations: {len(session.recommendations)} "
        f"| Semesters: {len(session.planner.semesters())}"
    )


def _course_label(course: CourseRecommendation) -> str:
    bits = [f"[bold cyan]{course.name}[/]"]
    if course.credits:
        bits.append(f"[yellow]{course.credits}[/]")
    if course.semester:
        bits.append(f"[green]{course.semester}[/]")
    if course.page:
        bits.append(f"p. {course.page}")
    return " | ".join(bits)


def _flow_add_turn(messages: list[Message]) -> None:
    role_in = _prompt("Role [A]ssistant / [u]ser: ").strip().lower()
    role = "user" if role_in.startswith("u") else "assistant"

    _println("Paste the message, finish with an empty line:")
    lines: list[str] = []
    while True:
        line = _prompt("")
        if not line.strip():
            break
        lines.append(line)

    content = "\n".join(lines).strip()
    if not content:
        _println("Nothing added.")
        return

    messages.append(Message(role=role, content=content, timestamp=datetime.now().strftime("%H:%M:%S")))
    _println(f"Added {role} turn ({len(content)} characters).")


def _flow_analyze(session: AdvisingSession, messages: list[Message]) -> None:
    if not any(m.role == "assistant" for m in messages):
        _println("No assistant turns yet.")
        return

    with console.status("Analyzing conversation..."):
        result = session.analyze_transcript_for_booked_courses(messages)

    if not result.booked_courses:
        _println("No courses detected.")
        return

    table = Table(title=f"Booked courses ({len(result.booked_courses)})", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Course")
    for i, c in enumerate(result.booked_courses, start=1):
        table.add_row(str(i), _course_label(c))
    console.print(table)


def _flow_search_add(session: AdvisingSession) -> None:
    """
    Search the module library and add modules. After adding, ask whether
    the user wants to add more without returning to the main menu.
    """
    while True:
        query = _prompt("Search module name [blank = back]: ").strip()
        if not query:
            return

        matches = session.catalog.search(query)[:20]
        if not matches:
            _println("No results.")
            continue

        table = Table(title="Search results (max 20)", box=box.SIMPLE)
        table.add_column("#", justify="right")
        table.add_column("Module")
        table.add_column("ECTS", justify="right")
        table.add_column("Page", justify="right")
        for i, m in enumerate(matches, start=1):
            table.add_row(str(i), m.name, f"{m.ects:g}" if m.ects is not None else "", str(m.page))
        console.print(table)

        pick = _prompt("Enter number to add [blank = new search]: ").strip()
        if not pick:
            continue
        if not pick.isdigit():
            _println("Not a number.")
            continue

        i = int(pick)
        if not (1 <= i <= len(matches)):
            _println("Out of range.")
            continue

        module = matches[i - 1]
        if session.recommendations.find_by_name(module.name) is not None:
            _println(f'"{module.name}" is already in your recommendations.')
        else:
            session.add_module_to_recommendations(module.name)
            _println(f'Added "{module.name}" to recommendations.')

        more = _prompt("Add another module? [Y/n]: ").strip().lower()
        if more == "n":
            return


def _flow_view_recommendations(session: AdvisingSession) -> None:
    courses = session.recommendations.all()
    if not courses:
        _println("No course recommendations yet.")
        return

    table = Table(title="Recommendations", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Course")
    for i, c in enumerate(courses, start=1):
        table.add_row(str(i), _course_label(c))
    console.print(table)


def _flow_remove(session: AdvisingSession) -> None:
    while True:
        courses = session.recommendations.all()
        if not courses:
            _println("No course recommendations.")
            return

        table = Table(title="Remove recommendation", box=box.SIMPLE)
        table.add_column("#", justify="right")
        table.add_column("Course")
        for i, c in enumerate(courses, start=1):
            table.add_row(str(i), _course_label(c))
        console.print(table)

        pick = _prompt("Enter number to remove (or blank to cancel): ").strip()
        if not pick:
            return
        if not pick.isdigit() or not (1 <= int(pick) <= len(courses)):
            _println("Out of range.")
            continue

        course = courses[int(pick) - 1]
        session.remove_recommendation(course.id or "")
        _println(f"Removed: {course.name}")

        more = _prompt("Remove another course? [Y/n]: ").strip().lower()
        if more == "n":
            return


def _flow_planner(session: AdvisingSession) -> None:
    semesters = session.planner.semesters()
    if not semesters:
        _println("No semesters yet. Courses with a semester label create one automatically.")
        return

    for s in semesters:
        courses = session.planner.courses_in(s.id)
        total = session.planner.semester_ects(s.id)
        _println(f"\n[bold {s.color}]{s.name}[/]  {total:g}/{s.ects_goal:g} ECTS")
        if not courses:
            _println("  (no courses)")
        for c in courses:
            _println(f"  - {_course_label(c)}")

    unassigned = [c for c in session.recommendations.all() if c.id not in session.planner.assigned_ids()]
    if not unassigned:
        return

    _println("\nUnassigned:")
    for i, c in enumerate(unassigned, start=1):
        _println(f"{i}) {_course_label(c)}")

    pick = _prompt("Assign course number (blank = back): ").strip()
    if not pick.isdigit() or not (1 <= int(pick) <= len(unassigned)):
        return
    course = unassigned[int(pick) - 1]

    for i, s in enumerate(semesters, start=1):
        _println(f"{i}) {s.name}")
    pick = _prompt("Semester number: ").strip()
    if pick.isdigit() and 1 <= int(pick) <= len(semesters):
        session.planner.add_course(semesters[int(pick) - 1].id, course.id or "")
        _println(f"Assigned {course.name} to {semesters[int(pick) - 1].name}.")


def _flow_add_semester(session: AdvisingSession) -> None:
    name = _prompt("Semester name (e.g. WS 2025): ").strip()
    if not name:
        return
    goal_in = _prompt("ECTS goal [30]: ").strip()
    try:
        goal = float(goal_in) if goal_in else None
    except ValueError:
        goal = None
    semester = session.planner.add_semester(name, ects_goal=goal)
    _println(f"Added semester {semester.name}.")
