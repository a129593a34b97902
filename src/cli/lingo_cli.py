"""
Lingo Mini CLI - terminal front end for the quiz client.

Usage:
    lingo play              # Pick a course and lesson, then answer exercises
    lingo play -c es        # Jump straight to the course with code ES
    lingo courses           # List courses and their lessons
    lingo seed              # Seed the backend with the demo course
    lingo status            # Check that the backend is reachable

The backend URL comes from BACKEND_URL (or .env), default http://localhost:8000.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Awaitable

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import get_settings
from src.integrations.course_service_client import CourseServiceClient
from src.quiz import (
    CourseServiceError,
    Exercise,
    Screen,
    ScreenController,
    SessionState,
)
from src.quiz.logging_setup import configure_logging

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="lingo",
    help="Lingo Mini - language-learning quizzes in the terminal",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def get_client() -> CourseServiceClient:
    """Build a backend client from settings."""
    return CourseServiceClient(**get_settings().get_service_config())


async def _attempt(action: Awaitable[bool]) -> bool:
    """Run a remote action, showing failures as a transient message."""
    try:
        return await action
    except CourseServiceError as e:
        console.print(f"[yellow]⚠ {e}[/]")
        return False


# =============================================================================
# Rendering
# =============================================================================


def render_catalog(state: SessionState) -> None:
    if not state.courses:
        console.print(
            Panel(
                "No courses yet. Type [bold]s[/] to create a sample Spanish course.",
                border_style="dim",
            )
        )
        return

    courses = Table(title="Courses", show_header=True)
    courses.add_column("#", justify="right")
    courses.add_column("Course")
    courses.add_column("Code")
    for number, course in enumerate(state.courses, start=1):
        marker = "[green]●[/] " if course == state.selected_course else ""
        courses.add_row(str(number), f"{marker}{course.name}", course.display_code)
    console.print(courses)

    if state.selected_course is None:
        return

    lessons = Table(title=f"Lessons - {state.selected_course.name}", show_header=True)
    lessons.add_column("#", justify="right")
    lessons.add_column("Lesson")
    lessons.add_column("Title")
    for number, lesson in enumerate(state.lessons, start=1):
        lessons.add_row(str(number), f"Lesson {lesson.order}", lesson.title)
    console.print(lessons)


def render_exercise(state: SessionState, exercise: Exercise) -> None:
    lesson_order = state.selected_lesson.order if state.selected_lesson else 0
    console.print(
        f"[bold green]Lesson {lesson_order}[/]  [dim]{state.progress_label}[/]"
        f"  [green]XP {state.score}[/]"
    )
    console.print(Panel(f"[bold]{escape(exercise.prompt)}[/]", title="Question", border_style="green"))
    if exercise.is_multiple_choice:
        for number, option in enumerate(exercise.options, start=1):
            console.print(f"  [cyan]{number}[/]. {escape(option)}")
        if not exercise.options:
            console.print("  [dim](no options available)[/]")


def render_result(state: SessionState, points: int) -> None:
    result = state.last_result
    if result is None:
        return
    if result.correct:
        console.print(f"[green]✓ Correct! +{points} XP[/]")
    else:
        console.print(f"[red]✗ Not quite. Answer: {escape(result.expected)}[/]")


def render_summary(state: SessionState) -> None:
    console.print(
        Panel(
            f"[bold]Great job![/]\nYou earned [green]{state.score} XP[/]",
            title="🎉",
            border_style="green",
        )
    )


def _choice(raw: str, count: int) -> int | None:
    """Convert a 1-based menu number into an index, or None if out of range."""
    if raw.isdigit() and 1 <= int(raw) <= count:
        return int(raw) - 1
    return None


def _draft_from_input(exercise: Exercise, raw: str) -> str:
    if not exercise.is_multiple_choice:
        return raw
    index = _choice(raw.strip(), len(exercise.options))
    return exercise.options[index] if index is not None else ""


# =============================================================================
# Interactive loop
# =============================================================================


async def _catalog_step(controller: ScreenController) -> bool:
    """Handle one catalog interaction. Returns False when the user quits."""
    state = controller.state
    render_catalog(state)
    raw = Prompt.ask("[bold]Lesson #[/], [bold]c[/]ourse #, [bold]s[/]eed or [bold]q[/]uit").strip()

    if raw == "q":
        return False
    if raw == "s":
        await _attempt(controller.seed_demo())
    elif raw.startswith("c"):
        index = _choice(raw[1:].strip(), len(state.courses))
        if index is None:
            console.print("[yellow]Pick a course with c<number>, e.g. c2[/]")
        else:
            await _attempt(controller.select_course(state.courses[index]))
    else:
        index = _choice(raw, len(state.lessons))
        if index is None:
            console.print("[yellow]Unknown choice[/]")
        else:
            await _attempt(controller.start_lesson(state.lessons[index]))
    return True


async def _active_step(controller: ScreenController, points: int) -> None:
    state = controller.state
    exercise = state.current_exercise
    if exercise is None:
        controller.exit()
        return

    if state.last_result is not None:
        render_result(state, points)
        Prompt.ask("[dim]Press Enter to continue[/]", default="", show_default=False)
        controller.next()
        return

    render_exercise(state, exercise)
    prompt = "Option #" if exercise.is_multiple_choice else "Your answer"
    raw = Prompt.ask(f"{prompt} ([bold]x[/] to exit lesson)", default="", show_default=False)
    if raw.strip() == "x":
        controller.exit()
        return

    controller.set_draft_answer(_draft_from_input(exercise, raw))
    if not controller.state.draft_answer:
        console.print("[yellow]Choose or type an answer first[/]")
        return
    await _attempt(controller.submit())


async def _summary_step(controller: ScreenController) -> bool:
    render_summary(controller.state)
    raw = Prompt.ask(
        "[bold]r[/]etry lesson, [bold]b[/]ack to course or [bold]q[/]uit",
        choices=["r", "b", "q"],
        default="b",
    )
    if raw == "q":
        return False
    if raw == "r":
        await _attempt(controller.retry_same_lesson())
    else:
        controller.back_to_course()
    return True


async def _play(course_code: str | None, points: int) -> None:
    settings = get_settings()
    async with get_client() as client:
        controller = ScreenController(
            client,
            points_per_correct=points,
            strict=settings.strict_transitions,
        )
        await _attempt(controller.open())

        if course_code:
            wanted = course_code.lower()
            match = next((c for c in controller.state.courses if c.code.lower() == wanted), None)
            if match is None:
                console.print(f"[yellow]No course with code {course_code.upper()}[/]")
            else:
                await _attempt(controller.select_course(match))

        running = True
        while running:
            screen = controller.state.screen
            if screen is Screen.CATALOG:
                running = await _catalog_step(controller)
            elif screen is Screen.ACTIVE:
                await _active_step(controller, points)
            else:
                running = await _summary_step(controller)


# =============================================================================
# Commands
# =============================================================================


@app.callback()
def main_callback() -> None:
    """Lingo Mini - language-learning quizzes in the terminal."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)


@app.command()
def play(
    course: Annotated[
        str | None, typer.Option("--course", "-c", help="Course code to open (case-insensitive)")
    ] = None,
    points: Annotated[
        int | None, typer.Option("--points", "-p", help="XP per correct answer")
    ] = None,
) -> None:
    """
    Play through a lesson.

    Examples:
        lingo play           # Choose course and lesson interactively
        lingo play -c es     # Open the ES course directly
    """
    award = points if points is not None else get_settings().points_per_correct
    asyncio.run(_play(course, award))


async def _list_catalog() -> SessionState | None:
    async with get_client() as client:
        controller = ScreenController(client)
        if not await _attempt(controller.open()):
            return None
        for course in list(controller.state.courses):
            console.print(f"\n[bold]{course.name}[/] [dim]{course.display_code}[/]")
            if not await _attempt(controller.select_course(course)):
                continue
            for lesson in controller.state.lessons:
                console.print(f"  Lesson {lesson.order}: {lesson.title}")
        return controller.state


@app.command()
def courses() -> None:
    """List courses and their lessons."""
    state = asyncio.run(_list_catalog())
    if state is None:
        raise typer.Exit(code=1)
    if not state.courses:
        console.print("[yellow]No courses yet. Run 'lingo seed' to create the demo course.[/]")


@app.command()
def seed() -> None:
    """Seed the backend with the demo course, then list courses."""

    async def _seed() -> bool:
        async with get_client() as client:
            controller = ScreenController(client)
            seeded = await _attempt(controller.seed_demo())
            if seeded:
                for course in controller.state.courses:
                    console.print(f"[green]✓[/] {course.name} [dim]{course.display_code}[/]")
            return seeded

    if not asyncio.run(_seed()):
        raise typer.Exit(code=1)


@app.command()
def status() -> None:
    """Check that the backend is reachable."""

    async def _status() -> bool:
        async with get_client() as client:
            return await client.health_check()

    url = get_settings().backend_url
    if asyncio.run(_status()):
        console.print(f"[green]● Backend online[/] [dim]{url}[/]")
    else:
        console.print(f"[red]● Backend unreachable[/] [dim]{url}[/]")
        raise typer.Exit(code=1)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    run()
