"""
Typer CLI for the training flow engine.

Commands:
    flows db init                        - Initialize database tables
    flows definitions create TITLE       - Create a definition with its 0.1 draft
    flows definitions list               - List definitions with their latest version
    flows versions list DEFINITION_ID    - List a definition's versions
    flows versions publish DEFINITION_ID - Publish the definition's draft
    flows versions archive VERSION_ID    - Archive a published version
    flows versions unarchive VERSION_ID  - Return an archived version to published
    flows versions new-draft VERSION_ID  - Start a new draft from a version
    flows versions validate VERSION_ID   - Score a version's flow
    flows content analyze FILE           - Analyze a plain-text document
    flows generate FILE                  - Generate a flow from a document

Usage:
    flows --help
    flows definitions create "Forklift pre-shift check" --by admin
    flows versions publish 3f1c... --increment major --notes "New checklist"
    flows generate manual.txt --topic "Lockout/Tagout" --steps 8 --save 3f1c...
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.core.errors import TrainingFlowError

app = typer.Typer(
    help="Training flow authoring, versioning and generation",
    no_args_is_help=True,
)

console = Console()


def _fail(error: Exception) -> None:
    rprint(f"[red]Error:[/red] {error}")
    raise typer.Exit(code=1)


def _read_document(path: Path) -> str:
    if not path.exists():
        rprint(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8", errors="replace")


def _status_style(status: str) -> str:
    return {"draft": "yellow", "published": "green", "archived": "dim"}.get(status, "white")


# ========================================
# DATABASE COMMANDS
# ========================================

db_app = typer.Typer(help="Database management", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from src.db.database import init_db

    logger.info("Initializing database tables...")
    init_db()
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# DEFINITION COMMANDS
# ========================================

definitions_app = typer.Typer(help="Training definitions", no_args_is_help=True)
app.add_typer(definitions_app, name="definitions")


@definitions_app.command("create")
def definitions_create(
    title: str = typer.Argument(..., help="Training title"),
    created_by: str = typer.Option(..., "--by", help="Author identifier"),
    description: str = typer.Option(None, "--description", "-d", help="Training description"),
) -> None:
    """Create a training definition and its first draft (version 0.1)."""
    from src.db.database import session_scope
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            definition, draft = VersionStore(session).create_definition(
                title, created_by=created_by, description=description
            )
    except TrainingFlowError as e:
        _fail(e)

    rprint(f"[green]✓[/green] Created [bold]{definition.title}[/bold]")
    rprint(f"  Definition: {definition.id}")
    rprint(f"  Draft:      {draft.id} (version {draft.version_number})")


@definitions_app.command("list")
def definitions_list() -> None:
    """List training definitions, newest first."""
    from src.db.database import session_scope
    from src.versions import VersionStore

    with session_scope() as session:
        summaries = VersionStore(session).list_definitions()

    if not summaries:
        rprint("[yellow]No training definitions yet[/yellow]")
        return

    table = Table(title=f"Training Definitions ({len(summaries)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="cyan")
    table.add_column("Latest", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Created by")

    for summary in summaries:
        latest = summary.latest_version
        status = latest.status.value if latest else "-"
        table.add_row(
            str(summary.definition.id),
            summary.definition.title,
            latest.version_number if latest else "-",
            f"[{_status_style(status)}]{status}[/{_status_style(status)}]",
            summary.definition.created_by,
        )

    console.print(table)


# ========================================
# VERSION COMMANDS
# ========================================

versions_app = typer.Typer(help="Version lifecycle (publish, archive, drafts)", no_args_is_help=True)
app.add_typer(versions_app, name="versions")


@versions_app.command("list")
def versions_list(
    definition_id: str = typer.Argument(..., help="Definition ID"),
) -> None:
    """List a definition's versions, most recent first."""
    from src.db.database import session_scope
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            versions = VersionStore(session).list_versions(definition_id)
    except TrainingFlowError as e:
        _fail(e)

    table = Table(title="Versions")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Version", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Steps", justify="right")
    table.add_column("Published")
    table.add_column("Notes", style="dim", max_width=40)

    for version in versions:
        style = _status_style(version.status.value)
        table.add_row(
            str(version.id),
            version.version_number,
            f"[{style}]{version.status.value}[/{style}]",
            str(len(version.steps)),
            version.published_at.strftime("%Y-%m-%d %H:%M") if version.published_at else "-",
            version.version_notes or "",
        )

    console.print(table)


@versions_app.command("publish")
def versions_publish(
    definition_id: str = typer.Argument(..., help="Definition ID"),
    increment: str = typer.Option("minor", "--increment", "-i", help="minor or major"),
    custom_version: str = typer.Option(None, "--version", "-v", help="Exact version number to publish as"),
    notes: str = typer.Option(None, "--notes", "-n", help="Version notes"),
    strict: bool = typer.Option(False, "--strict", help="Refuse to publish a flow with validation errors"),
) -> None:
    """Publish the definition's draft."""
    from src.db.database import session_scope
    from src.validation import validate
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            store = VersionStore(session)
            if strict:
                draft = store.latest_draft(definition_id)
                if draft is not None:
                    definition = store.get_definition(definition_id)
                    validate(draft.steps, definition.title).raise_for_errors()
            published = store.publish(
                definition_id,
                increment=increment,
                custom_version=custom_version,
                version_notes=notes,
            )
    except TrainingFlowError as e:
        _fail(e)

    rprint(f"[green]✓[/green] Published version [bold]{published.version_number}[/bold]")


@versions_app.command("archive")
def versions_archive(version_id: str = typer.Argument(..., help="Version ID")) -> None:
    """Archive a published version."""
    from src.db.database import session_scope
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            version = VersionStore(session).archive(version_id)
    except TrainingFlowError as e:
        _fail(e)

    rprint(f"[green]✓[/green] Archived version {version.version_number}")


@versions_app.command("unarchive")
def versions_unarchive(version_id: str = typer.Argument(..., help="Version ID")) -> None:
    """Return an archived version to published."""
    from src.db.database import session_scope
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            version = VersionStore(session).unarchive(version_id)
    except TrainingFlowError as e:
        _fail(e)

    rprint(f"[green]✓[/green] Version {version.version_number} is published again")


@versions_app.command("new-draft")
def versions_new_draft(version_id: str = typer.Argument(..., help="Source version ID")) -> None:
    """Start a new draft from an existing version."""
    from src.db.database import session_scope
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            draft = VersionStore(session).create_draft_from(version_id)
    except TrainingFlowError as e:
        _fail(e)

    rprint(f"[green]✓[/green] Created draft {draft.id}")
    rprint(f"  [dim]{draft.version_notes}[/dim]")


@versions_app.command("validate")
def versions_validate(version_id: str = typer.Argument(..., help="Version ID")) -> None:
    """Score a version's flow and list its issues."""
    from src.db.database import session_scope
    from src.validation import block_type_counts, metrics, objectives, optimization_suggestions, validate
    from src.versions import VersionStore

    try:
        with session_scope() as session:
            store = VersionStore(session)
            version = store.get_version(version_id)
            definition = store.get_definition(version.training_definition_id)
    except TrainingFlowError as e:
        _fail(e)

    result = validate(version.steps, definition.title)
    flow_metrics = metrics(version.steps)

    score_style = "green" if result.score >= 80 else "yellow" if result.score >= 60 else "red"
    rprint(f"\n[bold]{definition.title}[/bold] v{version.version_number}")
    rprint(f"Score: [{score_style}]{result.score}/100[/{score_style}]  "
           f"{'[green]valid[/green]' if result.is_valid else '[red]invalid[/red]'}")

    for label, style, issues in (
        ("Errors", "red", result.errors),
        ("Warnings", "yellow", result.warnings),
        ("Suggestions", "blue", result.suggestions + optimization_suggestions(version.steps)),
    ):
        if issues:
            rprint(f"\n[{style}]{label} ({len(issues)})[/{style}]")
            for issue in issues:
                rprint(f"  • {issue}")

    table = Table(title="Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Questions", str(flow_metrics.total_questions))
    table.add_row("Total points", str(flow_metrics.total_points))
    table.add_row("Average points", f"{flow_metrics.average_points:.1f}")
    for block_type, count in block_type_counts(version.steps).items():
        table.add_row(f"{block_type.capitalize()} blocks", str(count))
    table.add_row("Mandatory questions", str(flow_metrics.mandatory_questions))
    table.add_row("Estimated duration", f"~{flow_metrics.estimated_duration} min")
    console.print(table)

    for objective in objectives(version.steps):
        rprint(f"  {objective.topic}: {objective.coverage}% ({objective.question_count} questions)")


# ========================================
# CONTENT COMMANDS
# ========================================

content_app = typer.Typer(help="Source document analysis", no_args_is_help=True)
app.add_typer(content_app, name="content")


@content_app.command("analyze")
def content_analyze(
    path: Path = typer.Argument(..., help="Plain-text document"),
    summary: bool = typer.Option(False, "--summary", "-s", help="Also print a free-text analysis"),
) -> None:
    """Analyze a document's topics, complexity and training potential."""
    from src.analysis import analyze

    text = _read_document(path)
    analysis = analyze(text)

    table = Table(title=f"Analysis: {path.name}")
    table.add_column("Signal", style="cyan")
    table.add_column("Value")
    table.add_row("Words / sentences", f"{analysis.word_count} / {analysis.sentence_count}")
    table.add_row("Complexity", analysis.complexity.value)
    table.add_row("Difficulty", analysis.estimated_difficulty.value)
    table.add_row("Reading level", f"{analysis.reading_level:.1f}")
    table.add_row("Suggested questions", str(analysis.suggested_question_count))
    table.add_row("Estimated duration", f"{analysis.estimated_duration} min")
    table.add_row("Key topics", ", ".join(analysis.key_topics) or "-")
    table.add_row("Audience", ", ".join(analysis.target_audience))
    table.add_row("Critical points", "; ".join(analysis.critical_points))
    table.add_row("Prerequisites", ", ".join(analysis.prerequisite_knowledge))
    console.print(table)

    if summary:
        from src.generation import FlowGenerationPipeline

        result = asyncio.run(FlowGenerationPipeline().analyze_document(text, path.name))
        if result.error:
            rprint(f"[yellow]⚠[/yellow] Local summary used: {result.error}")
        rprint(result.text)


# ========================================
# GENERATION COMMAND
# ========================================


@app.command("generate")
def generate(
    path: Path = typer.Argument(..., help="Plain-text source document"),
    topics: list[str] = typer.Option(None, "--topic", "-t", help="Topic to focus on (repeatable)"),
    steps: int = typer.Option(10, "--steps", help="Number of blocks"),
    mix: int = typer.Option(60, "--mix", help="Percentage of information blocks"),
    difficulty: str = typer.Option("intermediate", "--difficulty", help="beginner, intermediate or advanced"),
    tone: str = typer.Option("formal", "--tone", help="formal, conversational or technical"),
    instructions: str = typer.Option("", "--instructions", help="Custom instructions"),
    generate_title: bool = typer.Option(False, "--title", help="Generate a title"),
    generate_description: bool = typer.Option(False, "--description", help="Generate a description"),
    save: str = typer.Option(None, "--save", help="Store the result as a draft of this definition"),
) -> None:
    """Generate a training flow from a document."""
    from src.analysis import analyze
    from src.generation import FlowGenerationPipeline, GenerationConfig, generate_draft

    text = _read_document(path)
    analysis = analyze(text)

    try:
        config = GenerationConfig(
            document_text=text,
            file_name=path.name,
            selected_topics=list(topics or analysis.key_topics[:3]),
            step_count=steps,
            content_mix=mix,
            difficulty=difficulty,
            tone=tone,
            custom_instructions=instructions,
            generate_title=generate_title,
            generate_description=generate_description,
            estimated_duration=analysis.estimated_duration,
        )
    except ValueError as e:
        _fail(e)

    pipeline = FlowGenerationPipeline()
    saved = None
    try:
        if save:
            from src.db.database import session_scope
            from src.versions import VersionStore

            with session_scope() as session:
                result, saved = asyncio.run(generate_draft(pipeline, VersionStore(session), save, config))
        else:
            result = asyncio.run(pipeline.generate(config))
    except TrainingFlowError as e:
        _fail(e)

    if result.error:
        rprint(f"[yellow]⚠[/yellow] Fallback flow used: {result.error}")
    if result.title:
        rprint(f"[bold]{result.title}[/bold]")
    if result.description:
        rprint(f"[dim]{result.description}[/dim]")

    table = Table(title=f"Generated flow ({len(result.blocks)} blocks)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type", style="cyan")
    table.add_column("Content", max_width=70)
    for block in result.blocks:
        config_dict = block.config.to_dict()
        content = config_dict.get("content") or config_dict.get("question_text") or config_dict.get("instructions", "")
        table.add_row(str(block.order), block.type.value, content)
    console.print(table)

    if saved is not None:
        rprint(f"[green]✓[/green] Saved as draft {saved.id}")


# ========================================
# Entry Point
# ========================================


def configure_logging() -> None:
    """Route loguru output to stderr (and the configured log file)."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="10 MB", retention=5)


def main() -> None:
    """Entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
