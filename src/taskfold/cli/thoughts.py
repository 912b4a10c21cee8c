"""
Taskfold CLI - Thought inbox commands.

List and read notes, preview what the extractor finds in them, turn them
into task suggestions and archive them once tasks have been created.
"""

import typer
from rich.console import Console
from rich.table import Table

from taskfold.cli.context import (
    get_config,
    get_task_store,
    get_thought_store,
    print_json,
    project_root,
)
from taskfold.cli.errors import exit_for
from taskfold.core.errors import TaskfoldError
from taskfold.core.thoughts.context import ProjectContext
from taskfold.core.thoughts.extractor import extract_candidates
from taskfold.core.thoughts.intent import analyze_intent
from taskfold.core.thoughts.processor import ProcessingReport, process_thoughts

console = Console()
app = typer.Typer(help="Process the thought inbox")

PRIORITY_COLORS = {"P0": "red", "P1": "yellow", "P2": "white", "P3": "dim"}
CONTEXT_TASK_LIMIT = 20
CONTEXT_TITLE_WIDTH = 40


@app.command("list")
def list_thoughts(
    ctx: typer.Context,
    archived: bool = typer.Option(
        False,
        "--archived",
        help="Also show how many notes are archived",
    ),
    category: str | None = typer.Option(
        None,
        "--category",
        "-c",
        help="List a sibling folder of the inbox, e.g. meetings",
    ),
) -> None:
    """
    List notes waiting in the inbox.

    Examples:
        taskfold thoughts list
        taskfold thoughts list --archived
        taskfold thoughts list --category meetings
    """
    try:
        store = get_thought_store(get_config(ctx)).for_category(category)
        summaries = store.list_thoughts()
    except TaskfoldError as e:
        raise exit_for(e) from e

    if not summaries:
        console.print(f"[dim]No notes in {store.inbox_dir}[/dim]")
    else:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("File")
        table.add_column("Lines", justify="right")
        table.add_column("Checkboxes", justify="right")
        for summary in summaries:
            table.add_row(summary.name, str(summary.lines), str(summary.checkbox_count))
        console.print(table)
        console.print(f"\n[dim]Total: {len(summaries)} notes[/dim]")

    if archived:
        try:
            count = store.archived_count()
        except TaskfoldError as e:
            raise exit_for(e) from e
        console.print(f"[dim]Archived: {count} notes[/dim]")


@app.command()
def show(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="Note filename, e.g. ideas.md"),
    archived: bool = typer.Option(
        False,
        "--archived",
        help="Read from the archive instead of the inbox",
    ),
    category: str | None = typer.Option(
        None,
        "--category",
        "-c",
        help="Read from a sibling folder of the inbox",
    ),
) -> None:
    """
    Print a note.

    Examples:
        taskfold thoughts show ideas.md
        taskfold thoughts show ideas.md --archived
    """
    try:
        store = get_thought_store(get_config(ctx)).for_category(category)
        note = store.read_thought(filename, from_archive=archived)
    except TaskfoldError as e:
        raise exit_for(e) from e

    location = "archive" if note.archived else "inbox"
    console.print(f"[bold cyan]{note.filename}[/bold cyan] [dim]({location}, {note.line_count} lines)[/dim]")
    for key, value in note.metadata.items():
        console.print(f"[dim]{key}:[/dim] {value}")
    console.print()
    console.print(note.content, markup=False)


@app.command()
def extract(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="Note filename"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Show every candidate found in a note, before any filtering.

    Examples:
        taskfold thoughts extract ideas.md
    """
    config = get_config(ctx)
    store = get_thought_store(config)
    try:
        note = store.read_thought(filename)
    except TaskfoldError as e:
        raise exit_for(e) from e

    rows = []
    for candidate in extract_candidates(note.content, context_size=config.extraction.context_size):
        analysis = analyze_intent(candidate)
        rows.append(
            {
                "line_number": candidate.line_number,
                "text": candidate.text,
                "section": candidate.section,
                "context": list(candidate.context),
                "is_checklist": candidate.is_explicit_checklist_item,
                "is_checked": candidate.is_checked,
                "priority": analysis.priority.value,
                "confidence": analysis.confidence,
                "tags": analysis.tags,
            }
        )

    if json_output:
        print_json(rows)
        return

    if not rows:
        console.print("[yellow]No candidates found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Line", justify="right", style="dim")
    table.add_column("P", width=2, justify="center")
    table.add_column("Conf", justify="right")
    table.add_column("Section")
    table.add_column("Text", overflow="fold")
    for row in rows:
        table.add_row(
            str(row["line_number"]),
            row["priority"][1],
            str(row["confidence"]),
            row["section"] or "",
            row["text"],
        )
    console.print(table)


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _print_context(context: ProjectContext) -> None:
    if context.tasks:
        table = Table(title="Existing tasks", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan")
        table.add_column("Title")
        table.add_column("Status")
        table.add_column("Priority")
        for summary in context.tasks[:CONTEXT_TASK_LIMIT]:
            table.add_row(
                summary.id,
                _truncate(summary.title, CONTEXT_TITLE_WIDTH),
                summary.status,
                summary.priority,
            )
        console.print(table)
        hidden = len(context.tasks) - CONTEXT_TASK_LIMIT
        if hidden > 0:
            console.print(f"[dim]... and {hidden} more[/dim]")
    else:
        console.print("[dim]No existing tasks[/dim]")

    if context.roadmap:
        console.print("\n[bold]Roadmap[/bold]")
        console.print(context.roadmap.strip(), markup=False)
    if context.decisions:
        console.print("\n[bold]Decisions[/bold]")
        for decision in context.decisions:
            console.print(f"  - {decision}", markup=False)
    if context.status:
        console.print("\n[bold]Status[/bold]")
        console.print(context.status.strip(), markup=False)


def _print_report(report: ProcessingReport) -> None:
    console.print(f"[bold]Project:[/bold] {report.project}\n")
    _print_context(report.context)

    for thought in report.thoughts:
        console.print(f"\n[bold cyan]{thought.filename}[/bold cyan] [dim]({thought.line_count} lines)[/dim]")
        if not thought.suggestions:
            console.print("  [dim]No suggestions[/dim]")
        for suggestion in thought.suggestions:
            color = PRIORITY_COLORS.get(suggestion.priority.value, "white")
            done = " [green](checked)[/green]" if suggestion.is_checked else ""
            console.print(
                f"  [{color}]{suggestion.priority.value}[/{color}] {suggestion.title}"
                f" [dim]({suggestion.confidence}%, line {suggestion.line_number})[/dim]{done}"
            )
            if suggestion.tags:
                console.print(f"     [dim]Tags:[/dim] {', '.join(suggestion.tags)}")
            if suggestion.shadow_rationale:
                console.print(f"     [dim]Why:[/dim] {suggestion.shadow_rationale}")
            if suggestion.practical_note:
                console.print(f"     [dim]{suggestion.practical_note}[/dim]")
            for related in suggestion.related:
                console.print(
                    f"     [yellow]Similar:[/yellow] {related.task_id} {related.title}"
                    f" [dim]({related.ratio:.0%})[/dim]"
                )
        if thought.dropped:
            console.print(f"  [dim]{thought.dropped} low-confidence candidate(s) skipped[/dim]")

    console.print(f"\n[dim]Total: {report.suggestion_count} suggestion(s)[/dim]")


@app.command()
def process(
    ctx: typer.Context,
    filename: str | None = typer.Argument(None, help="Single note to process (default: all)"),
    project: str = typer.Option(
        ...,
        "--project",
        "-P",
        help="Project prefix the suggestions are for",
    ),
    min_confidence: int | None = typer.Option(
        None,
        "--min-confidence",
        min=0,
        max=100,
        help="Override the configured confidence threshold",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Suggest tasks from inbox notes. Nothing is written.

    Create the tasks you want with `taskfold task create`, then archive the
    note with `taskfold thoughts archive`.

    Examples:
        taskfold thoughts process --project auth
        taskfold thoughts process ideas.md -P auth --json
    """
    config = get_config(ctx)
    extraction = config.extraction
    if min_confidence is not None:
        extraction = extraction.model_copy(update={"min_confidence": min_confidence})

    try:
        report = process_thoughts(
            get_task_store(config),
            get_thought_store(config),
            project,
            filename=filename,
            config=extraction,
            project_root=project_root(config),
        )
    except TaskfoldError as e:
        raise exit_for(e) from e

    if json_output:
        print_json(report.to_dict())
        return

    if not report.thoughts:
        console.print("[yellow]No notes to process[/yellow]")
        return
    _print_report(report)


@app.command()
def archive(
    ctx: typer.Context,
    filename: str = typer.Argument(..., help="Note filename to archive"),
    task_ids: list[str] | None = typer.Option(
        None,
        "--task",
        "-t",
        help="ID of a task created from the note (can be repeated)",
    ),
    notes: str | None = typer.Option(
        None,
        "--notes",
        "-n",
        help="Remark to record in the archive log",
    ),
) -> None:
    """
    Move a processed note to the archive and log it.

    Examples:
        taskfold thoughts archive ideas.md --task AUTH-004 --task AUTH-005
    """
    store = get_thought_store(get_config(ctx))
    try:
        entry = store.archive_thought(filename, task_ids or [], notes=notes)
    except TaskfoldError as e:
        raise exit_for(e) from e

    console.print(f"[green]Archived:[/green] {entry.filename}")
    if entry.task_ids:
        console.print(f"[dim]Tasks:[/dim] {', '.join(entry.task_ids)}")


@app.command("archived")
def list_archived(
    ctx: typer.Context,
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        min=1,
        help="Maximum entries to show",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Show archive history, newest first.

    Examples:
        taskfold thoughts archived --limit 5
    """
    store = get_thought_store(get_config(ctx))
    try:
        listing = store.list_archived_thoughts(limit=limit)
    except TaskfoldError as e:
        raise exit_for(e) from e

    if json_output:
        print_json(
            {
                "entries": [
                    {
                        "filename": e.filename,
                        "archived": e.archived.isoformat(),
                        "line_count": e.line_count,
                        "task_ids": e.task_ids,
                        "notes": e.notes,
                    }
                    for e in listing.entries
                ],
                "files": [
                    {"name": f.name, "lines": f.lines, "checkbox_count": f.checkbox_count}
                    for f in listing.files
                ],
            }
        )
        return

    if listing.is_empty:
        console.print("[dim]No archived notes yet[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Archived", style="dim")
    table.add_column("File")
    table.add_column("Lines", justify="right")
    table.add_column("Tasks")
    for entry in listing.entries:
        table.add_row(
            entry.archived.strftime("%Y-%m-%d %H:%M"),
            entry.filename,
            str(entry.line_count),
            ", ".join(entry.task_ids) or "-",
        )
    console.print(table)
    console.print(f"\n[dim]{len(listing.files)} archived file(s)[/dim]")
