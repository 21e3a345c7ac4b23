"""
iplusone CLI - study sentences from the terminal.

Usage:
    iplusone add story.txt --source "Some novel"   # Ingest text
    iplusone next                                  # Show the next sentence
    iplusone review 42 4                           # Grade sentence 42
    iplusone study                                 # Interactive session
    iplusone count                                 # Reviews still due
    iplusone retokenize                            # Rebuild after changing analyzer
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from iplusone.config import Settings, get_settings
from iplusone.exceptions import KnowledgeError
from iplusone.study.scheduler import MAX_QUALITY, MIN_QUALITY
from iplusone.study.sentence_selector import SelectionResult
from iplusone.study.study_service import StudyService, local_now

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="iplusone",
    help="Sentence-based spaced repetition: review due words, learn one new thing at a time",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def configure_logging(settings: Settings) -> None:
    """Route loguru output to stderr (and a rotating file if configured)."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", encoding="utf-8")


def get_service() -> StudyService:
    return StudyService.from_settings(get_settings())


def _fail(exc: KnowledgeError) -> None:
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1)


def render_selection(result: SelectionResult, reviews_remaining: int) -> None:
    """Show a selected sentence with its due and new words."""
    if result.is_empty:
        console.print(Panel(result.sentence_text, title="Nothing to review", border_style="green"))
        return

    due = ", ".join(text for _, text in result.due_words) or "-"
    new = ", ".join(text for _, text in result.new_words) or "-"
    body = (
        f"[bold]{result.sentence_text}[/bold]\n\n"
        f"[cyan]Reviewing:[/cyan] {due}\n"
        f"[yellow]New:[/yellow] {new}"
    )
    subtitle = f"source: {result.sentence_source}" if result.sentence_source else None
    console.print(
        Panel(
            body,
            title=f"Sentence #{result.sentence_id} ({reviews_remaining} reviews due)",
            subtitle=subtitle,
        )
    )


# =============================================================================
# Commands
# =============================================================================


@app.command()
def add(
    path: Annotated[Path, typer.Argument(help="Text file to ingest, or - for stdin")],
    source: Annotated[
        str | None, typer.Option("--source", "-s", help="Provenance tag (defaults to the file name)")
    ] = None,
) -> None:
    """Split a text into sentences and add them to the corpus."""
    if str(path) == "-":
        text = sys.stdin.read()
        source = source or "stdin"
    else:
        if not path.exists():
            console.print(f"[red]File not found:[/red] {path}")
            raise typer.Exit(code=1)
        text = path.read_text(encoding="utf-8")
        source = source or path.name

    try:
        processed = get_service().add_text(text, source)
    except KnowledgeError as exc:
        _fail(exc)
    console.print(f"[green]Processed {processed} sentences[/green] from {source}")


@app.command(name="next")
def next_sentence() -> None:
    """Show the next sentence to study."""
    try:
        service = get_service()
        now = local_now()
        reviews_remaining = service.get_review_count(now)
        result = service.get_next_sentence_for_review(now)
    except KnowledgeError as exc:
        _fail(exc)
    render_selection(result, reviews_remaining)


@app.command()
def review(
    sentence_id: Annotated[int, typer.Argument(help="Sentence to grade")],
    quality: Annotated[
        float, typer.Argument(min=MIN_QUALITY, max=MAX_QUALITY, help="0 (blackout) to 5 (perfect)")
    ],
) -> None:
    """Grade every word in a sentence."""
    try:
        get_service().review_sentence(sentence_id, quality)
    except KnowledgeError as exc:
        _fail(exc)
    console.print(f"Reviewed sentence {sentence_id} with quality {quality}")


@app.command(name="review-word")
def review_word(
    word_id: Annotated[int, typer.Argument(help="Word to grade")],
    quality: Annotated[
        float, typer.Argument(min=MIN_QUALITY, max=MAX_QUALITY, help="0 (blackout) to 5 (perfect)")
    ],
) -> None:
    """Grade a single word."""
    try:
        get_service().review_word(word_id, quality)
    except KnowledgeError as exc:
        _fail(exc)
    console.print(f"Reviewed word {word_id} with quality {quality}")


@app.command()
def count() -> None:
    """Print how many words are due today."""
    try:
        remaining = get_service().get_review_count()
    except KnowledgeError as exc:
        _fail(exc)
    console.print(remaining)


@app.command()
def retokenize() -> None:
    """Re-run the analyzer over every stored sentence (keeps review progress)."""
    try:
        get_service().retokenize()
    except KnowledgeError as exc:
        _fail(exc)
    console.print("[green]Retokenized all sentences[/green]")


@app.command()
def study(
    limit: Annotated[
        int, typer.Option("--limit", "-n", min=1, help="Stop after this many sentences")
    ] = 20,
) -> None:
    """Interactive session: grade sentences until done (q to quit)."""
    choices = [str(q) for q in range(int(MIN_QUALITY), int(MAX_QUALITY) + 1)] + ["q"]

    reviewed = 0
    try:
        service = get_service()
        while reviewed < limit:
            now = local_now()
            result = service.get_next_sentence_for_review(now)
            render_selection(result, service.get_review_count(now))
            if result.is_empty:
                break

            answer = Prompt.ask("Quality", choices=choices, default="4")
            if answer == "q":
                break

            service.review_sentence(result.sentence_id, float(answer))
            reviewed += 1
    except KnowledgeError as exc:
        _fail(exc)

    console.print(f"[green]Session finished:[/green] {reviewed} sentences reviewed")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    configure_logging(get_settings())
    app()


if __name__ == "__main__":
    main()
