"""
Typer CLI for the fluentpath engine.

Commands:
    fluentpath assess RECORDS.json          - CEFR level per module + upgrade decision
    fluentpath stats RECORDS.json           - Activity statistics per module
    fluentpath review due WORDS.json        - Words due for review now
    fluentpath review apply WORDS.json TEXT OUTCOME
                                            - Apply unknown/familiar/known to a word
    fluentpath review insights WORDS.json   - Vocabulary book summary
    fluentpath score speak ORIGINAL SPOKEN  - Pronunciation score
    fluentpath score write ESSAY.txt        - Writing rubric score
    fluentpath levels                       - Active level requirement table
    fluentpath serve                        - Run the REST API

Usage:
    fluentpath --help
    fluentpath assess records.json --today 2024-05-01
    fluentpath review apply words.json ubiquitous known --output words.json
    fluentpath score speak "I like apples" "I like oranges" --confidence 0.8
    fluentpath score write essay.txt --word-limit 150 --keyword travel
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, NoReturn

import typer
from loguru import logger
from pydantic import BaseModel, ValidationError
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.api.schemas import RecordsDocument, VocabularyEntryModel, WordbookDocument
from src.assessment.aggregator import aggregate, aggregate_by_module
from src.assessment.evaluator import evaluate_all
from src.assessment.upgrade import ProficiencyAssessment, decide
from src.core.level_table import LevelRequirementTable, LevelTableConfigError, load_level_table
from src.core.log_setup import configure_logging
from src.core.proficiency import CEFRLevel, SkillModule, Trend
from src.scoring.pronunciation import score_pronunciation
from src.scoring.writing import score_writing
from src.wordbook.scheduler import (
    ReviewOutcome,
    apply_review,
    describe_interval,
    due_for_review,
    learning_advice,
    new_entry,
    review_insights,
    review_priority,
)

app = typer.Typer(
    help="fluentpath CLI: CEFR assessment, vocabulary review scheduling and scoring",
    no_args_is_help=True,
)
console = Console()

DATETIME_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]

_TREND_ICONS = {
    Trend.UP: "[green]↑ up[/green]",
    Trend.DOWN: "[red]↓ down[/red]",
    Trend.STABLE: "[dim]→ stable[/dim]",
}


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """
    Adaptive assessment and review engine for English learners.

    Input documents are JSON; nothing is stored between commands.
    """
    if verbose:
        configure_logging(get_settings(), level="DEBUG")


# ========================================
# Input helpers
# ========================================


def _fail(message: str) -> NoReturn:
    rprint(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)


def _load_document(path: Path, model: type[BaseModel]) -> Any:
    """Read a JSON file into a pydantic document, exiting 1 on bad input."""
    if not path.is_file():
        _fail(f"File not found: {path}")
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        _fail(f"{path} is not valid JSON: {exc}")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        rprint(f"[red]✗[/red] {path} failed validation:")
        for error in exc.errors()[:10]:
            location = ".".join(str(part) for part in error["loc"])
            rprint(f"  - [cyan]{location}[/cyan]: {error['msg']}")
        raise typer.Exit(code=1)


def _level_table(path: Path | None = None) -> LevelRequirementTable:
    source = str(path) if path else get_settings().level_requirements_path
    try:
        return load_level_table(source)
    except (LevelTableConfigError, FileNotFoundError) as exc:
        logger.error(f"Level table error: {exc}")
        _fail(f"Invalid level requirement table: {exc}")


def _now(value: datetime | None) -> datetime:
    return value if value is not None else datetime.now(UTC)


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


# ========================================
# ASSESSMENT COMMANDS
# ========================================


def _print_assessment(result: ProficiencyAssessment) -> None:
    table = Table(title=f"Proficiency: {result.overall_level.value}", show_header=True)
    table.add_column("Module", style="cyan")
    table.add_column("Level", justify="center", style="bold")
    table.add_column("Accuracy", justify="right")
    table.add_column("Attempts", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Trend")

    for module in SkillModule:
        a = result.modules[module]
        label = module.display_name
        if module is result.weakest_module:
            label += " [red](weakest)[/red]"
        elif module is result.strongest_module:
            label += " [green](strongest)[/green]"
        table.add_row(
            label,
            a.current_level.value,
            f"{a.accuracy:.1f}%",
            str(a.total_attempts),
            f"{a.progress:.0f}% → {a.next_level.value}" if a.next_level else "max",
            _TREND_ICONS[a.recent_trend],
        )
    console.print(table)

    upgrade = result.level_upgrade
    if upgrade.next_level is None:
        rprint("[bold green]✓ Top level reached[/bold green]")
    elif upgrade.can_upgrade:
        rprint(f"[bold green]✓ Ready to upgrade to {upgrade.next_level.value}[/bold green]")
    else:
        rprint(
            f"[yellow]Not yet ready for {upgrade.next_level.value}[/yellow] "
            f"(overall progress {upgrade.overall_progress:.1f}%)"
        )

    if result.recommendations:
        rprint("\n[bold]Recommendations:[/bold]")
        for line in result.recommendations:
            rprint(f"  - {line}")


@app.command("assess")
def assess_command(
    records_file: Path = typer.Argument(..., help="JSON list of activity records or a records document"),
    today: datetime | None = typer.Option(
        None, "--today", formats=DATETIME_FORMATS, help="Anchor day for the study streak"
    ),
    levels_file: Path | None = typer.Option(None, "--levels", help="Level requirement table JSON"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """
    Assess CEFR level per skill module and decide whether to upgrade.

    Examples:
        fluentpath assess records.json
        fluentpath assess records.json --today 2024-05-01 --json
    """
    settings = get_settings()
    document: RecordsDocument = _load_document(records_file, RecordsDocument)
    table = _level_table(levels_file)

    assessments = evaluate_all(
        document.to_records(),
        document.to_window(),
        table,
        today=today.date() if today else document.today,
        correct_threshold=settings.correct_accuracy_threshold,
        trend_window=settings.trend_window,
        trend_threshold=settings.trend_threshold,
    )
    result = decide(assessments, table)

    if as_json:
        _echo_json(result.to_dict())
    else:
        _print_assessment(result)


@app.command("stats")
def stats_command(
    records_file: Path = typer.Argument(..., help="JSON list of activity records or a records document"),
    today: datetime | None = typer.Option(
        None, "--today", formats=DATETIME_FORMATS, help="Anchor day for the study streak"
    ),
) -> None:
    """Show activity statistics overall and per skill module."""
    settings = get_settings()
    document: RecordsDocument = _load_document(records_file, RecordsDocument)
    records = document.to_records()
    anchor = today.date() if today else document.today

    overall = aggregate(
        records,
        document.to_window(),
        today=anchor,
        correct_threshold=settings.correct_accuracy_threshold,
    )
    per_module = aggregate_by_module(
        records,
        document.to_window(),
        today=anchor,
        correct_threshold=settings.correct_accuracy_threshold,
    )

    table = Table(title="Activity Statistics", show_header=True)
    table.add_column("Module", style="cyan")
    table.add_column("Attempts", justify="right")
    table.add_column("Correct", justify="right", style="green")
    table.add_column("Accuracy", justify="right")
    table.add_column("Minutes", justify="right")

    for module, result in per_module.items():
        table.add_row(
            module.display_name,
            str(result.total_attempts),
            str(result.correct_attempts),
            f"{result.average_accuracy:.1f}%",
            f"{result.total_time_spent / 60:.0f}",
        )
    table.add_row(
        "[bold]All[/bold]",
        str(overall.total_attempts),
        str(overall.correct_attempts),
        f"{overall.average_accuracy:.1f}%",
        f"{overall.total_time_spent / 60:.0f}",
        style="bold",
    )
    console.print(table)
    rprint(f"Study streak: [bold]{overall.streak_days}[/bold] day(s)")


@app.command("levels")
def levels_command(
    levels_file: Path | None = typer.Option(None, "--levels", help="Level requirement table JSON"),
) -> None:
    """Show the active level requirement table (accuracy% / minimum attempts)."""
    table_data = _level_table(levels_file)

    table = Table(title="Level Requirements", show_header=True)
    table.add_column("Level", style="bold cyan")
    for module in SkillModule:
        table.add_column(module.display_name, justify="right")

    for level in CEFRLevel:
        row = [level.value]
        for module in SkillModule:
            req = table_data.requirement(level, module)
            row.append(f"{req.accuracy:g}% / {req.minimum_attempts}")
        table.add_row(*row)
    console.print(table)


# ========================================
# REVIEW COMMANDS
# ========================================

review_app = typer.Typer(help="Vocabulary review scheduling")
app.add_typer(review_app, name="review")


@review_app.command("due")
def review_due(
    words_file: Path = typer.Argument(..., help="JSON list of vocabulary entries"),
    now: datetime | None = typer.Option(None, "--now", formats=DATETIME_FORMATS),
    limit: int | None = typer.Option(None, "--limit", min=1, help="Maximum words to show"),
) -> None:
    """
    Show words due for review, previously reviewed words first.

    Examples:
        fluentpath review due words.json
        fluentpath review due words.json --now 2024-05-01 --limit 10
    """
    document: WordbookDocument = _load_document(words_file, WordbookDocument)
    moment = _now(now)
    queue = due_for_review(document.to_entries(), moment)
    shown = queue[: limit or get_settings().review_queue_limit]

    if not queue:
        rprint("[green]✓[/green] Nothing due for review")
        return

    table = Table(title=f"Due for review ({len(queue)})", show_header=True)
    table.add_column("Word", style="cyan")
    table.add_column("Mastery", justify="center")
    table.add_column("Reviews", justify="right")
    table.add_column("Priority", justify="right")

    for entry in shown:
        table.add_row(
            entry.text,
            str(entry.mastery_level),
            str(entry.review_count),
            f"{review_priority(entry, moment):.2f}",
        )
    console.print(table)
    if len(queue) > len(shown):
        rprint(f"  ... and {len(queue) - len(shown)} more")


@review_app.command("apply")
def review_apply(
    words_file: Path = typer.Argument(..., help="JSON list of vocabulary entries"),
    text: str = typer.Argument(..., help="Word to review"),
    outcome: ReviewOutcome = typer.Argument(..., help="unknown, familiar or known"),
    now: datetime | None = typer.Option(None, "--now", formats=DATETIME_FORMATS),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the updated word list to this file"
    ),
) -> None:
    """
    Apply a review outcome to one word and show its next due time.

    A word not yet in the list is added as a new entry first.
    """
    document: WordbookDocument = _load_document(words_file, WordbookDocument)
    moment = _now(now)
    entries = document.to_entries()
    key = text.strip().lower()

    index = next((i for i, e in enumerate(entries) if e.text.lower() == key), None)
    if index is None:
        entries.append(new_entry(text, moment))
        index = len(entries) - 1
        rprint(f"[yellow]'{key}' was not in the list; added as a new word[/yellow]")

    scheduled = apply_review(entries[index], outcome, moment)
    entries[index] = scheduled.entry

    for warning in scheduled.warnings:
        rprint(f"[yellow]⚠[/yellow] {warning}")

    entry = scheduled.entry
    rprint(
        f"[green]✓[/green] [cyan]{entry.text}[/cyan]: mastery {entry.mastery_level}/5, "
        f"next review {describe_interval(scheduled.interval)} "
        f"([dim]{entry.next_review_due_at.isoformat()}[/dim])"
    )
    rprint(f"  {learning_advice(entry)}")

    if output is not None:
        payload = [
            VocabularyEntryModel.from_entry(e).model_dump(mode="json") for e in entries
        ]
        output.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        rprint(f"  Saved {len(entries)} words to {output}")


@review_app.command("insights")
def review_insights_command(
    words_file: Path = typer.Argument(..., help="JSON list of vocabulary entries"),
    now: datetime | None = typer.Option(None, "--now", formats=DATETIME_FORMATS),
) -> None:
    """Summarise a vocabulary book."""
    document: WordbookDocument = _load_document(words_file, WordbookDocument)
    insights = review_insights(document.to_entries(), _now(now))

    table = Table(title="Vocabulary Book", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Words", str(insights.total_words))
    table.add_row("Mastered (4+)", str(insights.mastered_words))
    table.add_row("Never reviewed", str(insights.new_words))
    table.add_row("Due now", str(insights.due_now))
    table.add_row("Due today", str(insights.due_today))
    table.add_row("Due this week", str(insights.due_this_week))
    table.add_row("Average mastery", f"{insights.average_mastery:.2f}")
    table.add_row("Recall rate", f"{insights.recall_rate:.1f}%")
    console.print(table)

    distribution = "  ".join(f"{level}: {count}" for level, count in insights.by_mastery.items())
    rprint(f"Mastery distribution  {distribution}")


# ========================================
# SCORING COMMANDS
# ========================================

score_app = typer.Typer(help="Heuristic pronunciation and writing scores")
app.add_typer(score_app, name="score")


@score_app.command("speak")
def score_speak(
    original: str = typer.Argument(..., help="Target sentence"),
    spoken: str = typer.Argument(..., help="Recognised transcript"),
    confidence: float = typer.Option(1.0, "--confidence", "-c", help="Recogniser confidence 0-1"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Score a spoken attempt against the target sentence."""
    result = score_pronunciation(original, spoken, confidence)
    if as_json:
        _echo_json(result.to_dict())
        return

    for warning in result.warnings:
        rprint(f"[yellow]⚠[/yellow] {warning}")
    rprint(f"[bold]Overall:[/bold] {result.overall_score:.1f}")
    rprint(
        f"  Accuracy {result.accuracy_score:.1f}  "
        f"Fluency {result.fluency_score:.0f}  "
        f"Pronunciation {result.pronunciation_score:.1f}"
    )
    rprint(f"  {result.feedback}")
    for mistake in result.mistakes:
        rprint(f"  [red]✗[/red] {mistake.suggestion}")


@score_app.command("write")
def score_write(
    essay_file: Path = typer.Argument(..., help="Plain-text essay; blank lines separate paragraphs"),
    word_limit: int | None = typer.Option(None, "--word-limit", min=1),
    keywords: list[str] | None = typer.Option(None, "--keyword", "-k", help="Expected keyword (repeatable)"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """Score an essay with the default writing rubric."""
    if not essay_file.is_file():
        _fail(f"File not found: {essay_file}")

    result = score_writing(
        essay_file.read_text(encoding="utf-8"),
        word_limit=word_limit,
        keywords=keywords or None,
    )
    if as_json:
        _echo_json(result.to_dict())
        return

    table = Table(title=f"Writing: {result.total_score}/{result.max_score}", show_header=True)
    table.add_column("Criterion", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Feedback")
    for cs in result.criteria_scores:
        table.add_row(cs.criterion_id, f"{cs.score}/{cs.max_score}", cs.feedback)
    console.print(table)

    rprint(result.overall_feedback)
    for suggestion in result.suggestions:
        rprint(f"  - {suggestion}")


# ========================================
# SERVER
# ========================================


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    """Run the REST API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


@app.command("version")
def show_version() -> None:
    """Show version information."""
    rprint("[bold]fluentpath-engine[/bold] v0.1.0")
    rprint("  CEFR assessment, spaced repetition and scoring")


def main() -> None:
    """Entry point for the CLI."""
    configure_logging(get_settings(), level="WARNING")
    app()


if __name__ == "__main__":
    main()
