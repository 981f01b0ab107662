"""
Typer CLI for the sprout practice trainer.

Commands:
    sprout plan --subject S          - Compose and show the next practice session
    sprout answer ITEM --correct     - Record a correct answer
    sprout answer ITEM --wrong       - Record a wrong answer
    sprout reveal ITEM               - Record that the answer was shown
    sprout end-session --subject S   - Close a session (cooldown tick)
    sprout stats [--subject S]       - Learning statistics and streaks
    sprout level --subject S         - Show (or --advance) the stored level
    sprout reset                     - Delete all progress for a learner

Usage:
    sprout --help
    sprout plan --subject kannada --revision
    sprout answer kn-001 --correct --learner asha
"""

from __future__ import annotations

import sys
import time
from datetime import UTC, datetime

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config import Settings, get_settings
from sprout.cli.subjects import SubjectConfiguration
from sprout.core.errors import DomainValidationError
from sprout.core.guidance import ParentGuidance, SessionGuidance, Urgency
from sprout.core.identifiers import ItemId, LearnerId
from sprout.delivery.catalog import CatalogError, load_catalog, subject_index
from sprout.delivery.guidance_cache import GuidanceCache
from sprout.delivery.state_store import TrackerStore
from sprout.learning.assembler import PracticeSessionService, SessionRequirements
from sprout.learning.candidates import CandidateItem
from sprout.learning.progression import MAX_COMPLEXITY_LEVEL, items_at_level
from sprout.study.statistics import StatisticsAggregator, todays_attempts

app = typer.Typer(
    help="sprout: spaced-repetition practice for young learners",
    no_args_is_help=True,
)

console = Console()

URGENCY_STYLES = {
    Urgency.SUCCESS: "green",
    Urgency.INFO: "cyan",
    Urgency.WARNING: "yellow",
}


def configure_logging(settings: Settings) -> None:
    """Route loguru to stderr (and optionally a file) at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            str(settings.log_file),
            level="DEBUG",
            rotation="5 MB",
            retention=3,
        )


# ========================================
# Context Builder (Dependency Injection)
# ========================================


class CLIContext:
    """
    Dependency container for CLI commands.

    Lazily opens the store and catalog so commands that need neither
    never touch disk.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.subjects = SubjectConfiguration()
        # One lookup per command here; long-lived callers reuse a single instance.
        self.guidance_cache = GuidanceCache(self.settings.guidance_cache_size)
        self._store: TrackerStore | None = None
        self._catalog: list[CandidateItem] | None = None

    @property
    def store(self) -> TrackerStore:
        if self._store is None:
            self._store = TrackerStore(self.settings.state_db_path)
        return self._store

    @property
    def catalog(self) -> list[CandidateItem]:
        if self._catalog is None:
            self._catalog = load_catalog(self.settings.catalog_path)
        return self._catalog

    def learner(self, learner_id: str | None) -> LearnerId:
        return LearnerId.from_string(learner_id or self.settings.default_learner_id)

    def find_item(self, item_id: str) -> CandidateItem:
        for item in self.catalog:
            if item.id == item_id:
                return item
        raise CatalogError(f"Unknown item: {item_id}")

    def close(self) -> None:
        if self._store is not None:
            self._store.close()


def _context() -> CLIContext:
    settings = get_settings()
    configure_logging(settings)
    return CLIContext(settings)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def _print_guidance(guidance: ParentGuidance, tip: str | None = None) -> None:
    style = URGENCY_STYLES.get(guidance.urgency, "white")
    console.print(f"[{style}]{guidance.message}[/{style}]")
    if tip:
        console.print(f"[dim]Tip: {tip}[/dim]")


# ========================================
# Commands
# ========================================


@app.command("plan")
def plan(
    subject: str = typer.Option(..., "--subject", "-s", help="Subject code"),
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
    level: int = typer.Option(None, "--level", help="Complexity level (defaults to stored level)"),
    size: int = typer.Option(None, "--size", "-n", help="Maximum items in the session"),
    revision: bool = typer.Option(
        False, "--revision", help="Allow mastered items out of cooldown"
    ),
) -> None:
    """
    Compose the next practice session.

    Struggling items come first, then new items, then (with --revision)
    mastered items whose cooldown has run out.
    """
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        complexity_level = level or ctx.store.get_level(learner_id, subject)
        trackers = ctx.store.load_all(learner_id)
        requirements = SessionRequirements(
            subject=subject,
            complexity_level=complexity_level,
            max_session_size=size if size is not None else ctx.settings.default_session_size,
            include_revision_words=revision or ctx.settings.include_revision_words,
            learner_id=learner_id,
        )
        composition = PracticeSessionService().generate_session(
            ctx.catalog, trackers, requirements
        )
        texts = {item.id: item.display_text for item in ctx.catalog}
    except (DomainValidationError, CatalogError) as e:
        _fail(str(e))
    finally:
        ctx.close()

    title = f"{ctx.subjects.display_name(subject)} - Level {complexity_level}"
    console.print(Panel(composition.rationale, title=f"[bold]{title}[/bold]", border_style="blue"))

    if composition.is_empty:
        return

    table = Table(show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Item")
    table.add_column("Text")
    table.add_column("Status")
    for index, item_id in enumerate(composition.selected_ids, start=1):
        tracker = trackers.get(item_id)
        status = tracker.status.display_name if tracker else "New"
        table.add_row(str(index), item_id, texts.get(item_id, item_id), status)
    console.print(table)

    summary = (
        f"{composition.session_type.value} session, "
        f"about {composition.estimated_minutes} min"
    )
    if composition.recommended_break_after:
        summary += f", break after {composition.recommended_break_after} items"
    console.print(f"[dim]{summary}[/dim]")

    intro = SessionGuidance.from_session_data(
        session_id=composition.events[0].session_id if composition.events else subject,
        current_question_index=0,
        total_questions=len(composition.selected_ids),
        mastered_in_session=0,
        all_questions_in_set_mastered=False,
        has_more_levels=complexity_level < MAX_COMPLEXITY_LEVEL,
        subject=subject,
        is_first_question_ever=not trackers,
    ).get_session_guidance()
    if intro:
        console.print(f"[cyan]{intro.message}[/cyan]")


@app.command("answer")
def answer(
    item_id: str = typer.Argument(..., help="Catalog item id"),
    correct: bool = typer.Option(..., "--correct/--wrong", help="Outcome of the attempt"),
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
) -> None:
    """Record one answer and show the parent guidance that follows."""
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        item = ctx.find_item(item_id)
        tracker = ctx.store.load_or_create(learner_id, ItemId.from_string(item.id))
        transition = tracker.record_attempt(correct, int(time.time() * 1000))
        ctx.store.save(tracker)
    except (DomainValidationError, CatalogError) as e:
        _fail(str(e))
    finally:
        ctx.close()

    mark = "[green]correct[/green]" if correct else "[red]wrong[/red]"
    console.print(f"{item.display_text}: {mark} (progress {tracker.progress})")

    if transition is not None:
        if transition.is_achieved:
            console.print("[bold green]Mastered![/bold green]")
        else:
            console.print("[yellow]Mastery lost, back into practice[/yellow]")

    _print_guidance(ctx.guidance_cache.get_or_compute(tracker), ctx.subjects.parent_tip(item.subject))


@app.command("reveal")
def reveal(
    item_id: str = typer.Argument(..., help="Catalog item id"),
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
) -> None:
    """Record that the answer was shown without an attempt."""
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        item = ctx.find_item(item_id)
        tracker = ctx.store.load_or_create(learner_id, ItemId.from_string(item.id))
        tracker.record_reveal()
        ctx.store.save(tracker)
    except (DomainValidationError, CatalogError) as e:
        _fail(str(e))
    finally:
        ctx.close()

    console.print(f"{item.display_text}: answer shown ({tracker.reveal_count} reveals)")
    _print_guidance(ctx.guidance_cache.get_or_compute(tracker))


@app.command("end-session")
def end_session(
    subject: str = typer.Option(..., "--subject", "-s", help="Subject code"),
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
) -> None:
    """
    Close a practice session.

    Every tracker at the learner's current level in the subject counts one
    session boundary toward the end of its cooldown.
    """
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        complexity_level = ctx.store.get_level(learner_id, subject)
        items = items_at_level(ctx.catalog, subject, complexity_level)
        ticked = ctx.store.tick_cooldowns(learner_id, [item.id for item in items])
        trackers = ctx.store.load_many(learner_id, [item.id for item in items])
        complete = PracticeSessionService.should_progress_to_next_level(
            ctx.catalog, trackers, subject, complexity_level
        )
        has_more_levels = complexity_level < MAX_COMPLEXITY_LEVEL and bool(
            items_at_level(ctx.catalog, subject, complexity_level + 1)
        )
    except (DomainValidationError, CatalogError) as e:
        _fail(str(e))
    finally:
        ctx.close()

    console.print(f"Session closed: {ticked} items moved closer to revision")

    if not items:
        return
    mastered = sum(1 for tracker in trackers.values() if tracker.is_mastered)
    result = SessionGuidance.from_session_data(
        session_id=f"{learner_id}:{subject}:{complexity_level}",
        current_question_index=len(items) - 1,
        total_questions=len(items),
        mastered_in_session=mastered,
        all_questions_in_set_mastered=complete,
        has_more_levels=has_more_levels,
        subject=subject,
        is_first_question_ever=False,
    ).get_session_guidance()
    if result:
        style = URGENCY_STYLES.get(result.urgency, "white")
        console.print(f"[{style}]{result.message}[/{style}]")
    if complete and has_more_levels:
        console.print(f"[dim]Run: sprout level --subject {subject} --advance[/dim]")


@app.command("stats")
def stats(
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
    subject: str = typer.Option(None, "--subject", "-s", help="Only show one subject"),
) -> None:
    """Show mastery, accuracy and practice streaks."""
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        trackers = list(ctx.store.load_all(learner_id).values())
        subjects = subject_index(ctx.catalog)
    except (DomainValidationError, CatalogError) as e:
        _fail(str(e))
    finally:
        ctx.close()

    aggregator = StatisticsAggregator()
    result = aggregator.aggregate(trackers, subjects)
    if subject:
        result = result.for_subject(subject)
        trackers = [t for t in trackers if subjects.get(str(t.item_id)) == subject]
    today = todays_attempts(trackers, datetime.now(UTC).date())

    table = Table(title=f"Progress for {learner_id}", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Items attempted", str(result.total_attempted))
    table.add_row("Items mastered", str(result.total_mastered))
    table.add_row("Mastery", f"{result.mastery_percentage:.0f}%")
    table.add_row("Avg attempts to master", f"{result.average_attempts_to_mastery:.1f}")
    table.add_row("Turnarounds", str(result.turnaround_count))
    table.add_row("Current streak", f"{result.current_streak} days")
    table.add_row("Longest streak", f"{result.longest_streak} days")
    table.add_row("Attempts today", str(today))
    console.print(table)

    if not result.subject_breakdown:
        return

    breakdown = Table(title="By subject", show_header=True)
    breakdown.add_column("Subject")
    breakdown.add_column("Attempted", justify="right")
    breakdown.add_column("Mastered", justify="right")
    breakdown.add_column("Accuracy", justify="right")
    for entry in result.subject_breakdown:
        breakdown.add_row(
            ctx.subjects.display_name(entry.subject),
            str(entry.items_attempted),
            f"{entry.items_mastered} ({entry.mastery_percentage:.0f}%)",
            f"{entry.average_accuracy:.0f}%",
        )
    console.print(breakdown)


@app.command("level")
def level(
    subject: str = typer.Option(..., "--subject", "-s", help="Subject code"),
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
    advance: bool = typer.Option(False, "--advance", help="Move up one level"),
) -> None:
    """Show the stored complexity level, or advance it by one."""
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        if advance:
            current = ctx.store.advance_level(learner_id, subject)
        else:
            current = ctx.store.get_level(learner_id, subject)
    except DomainValidationError as e:
        _fail(str(e))
    finally:
        ctx.close()

    console.print(f"{ctx.subjects.display_name(subject)}: level {current}")


@app.command("reset")
def reset(
    learner: str = typer.Option(None, "--learner", "-l", help="Learner id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete all progress and stored levels for a learner."""
    ctx = _context()
    try:
        learner_id = ctx.learner(learner)
        if not yes and not typer.confirm(f"Delete all progress for {learner_id}?"):
            console.print("[dim]Cancelled[/dim]")
            return
        removed = ctx.store.reset_learner(learner_id)
    except DomainValidationError as e:
        _fail(str(e))
    finally:
        ctx.close()

    console.print(f"[yellow]Removed {removed} items for {learner_id}[/yellow]")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
