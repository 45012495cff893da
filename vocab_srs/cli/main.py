"""
vocab-srs CLI - terminal vocabulary practice.

Usage:
    vocab-srs practice             # Practice with the saved session size
    vocab-srs practice --size 50   # One-off session size
    vocab-srs add serendipity -d "a happy accident" -e "Pure serendipity."
    vocab-srs status               # Per-word status and due badge
    vocab-srs stats                # Collection summary
    vocab-srs size 50              # Save the session size preference
"""

from __future__ import annotations

import asyncio
import re
import time
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from config import get_settings
from vocab_srs.core.exceptions import InsufficientItems, RepositoryUnavailable
from vocab_srs.core.log_setup import configure_logging
from vocab_srs.storage.json_repository import JsonFileRepository
from vocab_srs.study.due_classifier import BadgeKind, classify, due_badge
from vocab_srs.study.models import Item
from vocab_srs.study.progress import ProgressTracker
from vocab_srs.study.quiz_session import QuizSession
from vocab_srs.study.stats import collection_summary
from vocab_srs.study.study_service import StudyService

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="vocab-srs",
    help="Spaced-repetition vocabulary practice in the terminal",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

WordsOption = Annotated[
    Optional[Path],
    typer.Option("--words", "-w", help="Word file (defaults to VOCAB_SRS_WORDS_FILE)"),
]

BADGE_STYLES = {
    BadgeKind.NEW: "cyan",
    BadgeKind.OVERDUE: "red",
    BadgeKind.TODAY: "yellow",
    BadgeKind.UPCOMING: "green",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Configure logging before any command runs."""
    settings = get_settings()
    if verbose:
        settings = settings.model_copy(update={"log_level": "DEBUG"})
    configure_logging(settings)


def _open_repository(words: Optional[Path]) -> JsonFileRepository:
    path = words or Path(get_settings().words_file)
    try:
        return JsonFileRepository(path)
    except RepositoryUnavailable as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _render_badge(item: Item) -> str:
    badge = due_badge(item.status_state())
    return f"[{BADGE_STYLES[badge.kind]}]{badge.label}[/]"


def _blank_term(item: Item) -> str:
    if not item.example:
        return "Example sentence not available."
    return re.sub(re.escape(item.term), "_" * 11, item.example, flags=re.IGNORECASE)


# =============================================================================
# Practice
# =============================================================================


@app.command()
def practice(
    words: WordsOption = None,
    size: Annotated[
        Optional[int], typer.Option("--size", "-n", help="Session size (25 or 50)")
    ] = None,
) -> None:
    """
    Start a practice session.

    Type the word that matches the definition. Missed words come back a
    few questions later until every word has been answered once.
    """
    repository = _open_repository(words)
    service = StudyService(repository)

    if size is not None and size not in get_settings().session_size_choices:
        console.print(f"[red]Session size must be one of {list(get_settings().session_size_choices)}[/]")
        raise typer.Exit(code=1)

    asyncio.run(_run_practice(service, size))


async def _run_practice(service: StudyService, size: Optional[int]) -> None:
    """Execute a practice session."""
    try:
        session = await service.start_session(size)
    except InsufficientItems as e:
        console.print(f"[yellow]{e}[/]")
        return

    progress = ProgressTracker(session)
    console.print(
        Panel(
            f"[bold cyan]VOCABULARY PRACTICE[/]\nWords: {len(session.session_start_snapshot)}",
            border_style="cyan",
        )
    )

    try:
        while not session.is_complete():
            item = session.current_question()
            if item is None:
                break
            _ask(session, item, progress)
            # Let detached review writes run between questions
            await asyncio.sleep(0)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[dim]Session interrupted[/]")

    await service.review_writer.drain()
    _show_results(session)


def _ask(session: QuizSession, item: Item, progress: ProgressTracker) -> None:
    counters = progress.snapshot()
    console.print(
        f"\n[dim]{counters.current}/{counters.total}[/]  {_render_badge(item)}"
    )
    console.print(f'[italic]"{_blank_term(item)}"[/]')
    console.print(f"{item.definition} ({item.term[:1].upper()})")

    outcome = None
    while outcome is None:
        started = time.monotonic()
        answer = Prompt.ask("[bold]>[/]", default="", show_default=False)
        elapsed_ms = int((time.monotonic() - started) * 1000)
        outcome = session.submit_answer(answer, elapsed_ms)

    if outcome.is_correct:
        console.print(f"[green]✓ {item.term}[/] [dim]({outcome.rating.name.title()})[/]")
    else:
        console.print(f"[red]✗ {item.term}[/] [dim]- it will come back soon[/]")


def _show_results(session: QuizSession) -> None:
    results = session.results()
    plural = "" if results.mastered_count == 1 else "s"
    console.print(
        Panel(
            f"[bold]{results.mastered_count}[/] word{plural} mastered\n"
            f"[dim]{results.correct_count} correct out of {results.total_attempts} "
            f"attempts ({results.accuracy_percent}%)[/]",
            title="Results",
            border_style="green",
        )
    )


# =============================================================================
# Words
# =============================================================================


@app.command()
def add(
    term: Annotated[str, typer.Argument(help="Word to save")],
    definition: Annotated[str, typer.Option("--definition", "-d", help="Definition")] = "",
    example: Annotated[str, typer.Option("--example", "-e", help="Example sentence")] = "",
    words: WordsOption = None,
) -> None:
    """Save a word (updates definition/example if it already exists)."""
    if not term.strip():
        console.print("[red]Error:[/red] term must not be blank")
        raise typer.Exit(code=1)

    repository = _open_repository(words)
    existing = repository.get_item(term)
    if existing is not None:
        existing.definition = definition or existing.definition
        existing.example = example or existing.example
        repository.add_item(existing)
    else:
        repository.add_item(Item(term=term.strip(), definition=definition, example=example))
    repository.save()
    console.print(f"[green]Saved[/] {term.strip()}")


@app.command()
def status(words: WordsOption = None) -> None:
    """Show each word's learning status and due badge."""
    repository = _open_repository(words)
    items = asyncio.run(repository.fetch_all_items())

    if not items:
        console.print("[yellow]No saved words yet.[/]")
        return

    table = Table(title="Saved Words")
    table.add_column("Word", style="bold")
    table.add_column("Status")
    table.add_column("Due")
    table.add_column("Reviews", justify="right")

    for item in sorted(items, key=lambda i: i.normalized_term):
        state = item.status_state()
        table.add_row(item.term, classify(state).value, _render_badge(item), str(state.reps))

    console.print(table)
    if repository.skipped_rows:
        console.print(f"[yellow]{repository.skipped_rows} malformed row(s) skipped[/]")


@app.command()
def stats(words: WordsOption = None) -> None:
    """Show collection statistics."""
    repository = _open_repository(words)
    summary = collection_summary(asyncio.run(repository.fetch_all_items()))

    table = Table(title="Collection Stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total Words", str(summary.total_words))
    table.add_row("Due for Review", str(summary.due_words))
    table.add_row("New", str(summary.new_words))
    table.add_row("Learning", str(summary.learning_words))
    table.add_row("Mastered", str(summary.mastered_words))
    table.add_row("Average Stability", f"{summary.average_stability:.1f}d")
    table.add_row("Average Difficulty", f"{summary.average_difficulty:.1f}")
    table.add_row("Total Reviews", str(summary.total_reviews))
    table.add_row("Accuracy", f"{summary.accuracy_rate:.0f}%")
    console.print(table)


@app.command()
def size(
    value: Annotated[Optional[int], typer.Argument(help="New session size")] = None,
    words: WordsOption = None,
) -> None:
    """Show or save the session size preference."""
    service = StudyService(_open_repository(words))

    if value is None:
        console.print(f"Session size: [bold]{service.get_session_size()}[/]")
        return

    try:
        service.set_session_size(value)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]Session size set to {value}[/]")


def run() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run()
