"""
Taskfold CLI - Task commands.

Create, update, archive and query task records, and pick the next
actionable task from the dependency graph.
"""

import typer
from rich.console import Console
from rich.table import Table

from taskfold.cli.context import get_config, get_task_store, print_json
from taskfold.cli.errors import ExitCode, exit_for, print_invalid_option_error
from taskfold.core.errors import TaskfoldError
from taskfold.core.tasks.graph import TaskGraph
from taskfold.core.tasks.models import Task, TaskStatus

console = Console()
app = typer.Typer(help="Manage tasks")

STATUS_COLORS = {
    TaskStatus.TODO: "white",
    TaskStatus.IN_PROGRESS: "yellow",
    TaskStatus.BLOCKED: "red",
    TaskStatus.DONE: "green",
}


def _parse_status(status: str) -> TaskStatus:
    try:
        return TaskStatus(status.lower())
    except ValueError:
        print_invalid_option_error(status, [s.value for s in TaskStatus])
        raise typer.Exit(ExitCode.USER_ERROR)


def _dump(task: Task) -> dict:
    return task.model_dump(mode="json")


def _print_task(task: Task, graph: TaskGraph | None = None) -> None:
    console.print(f"[bold cyan]{task.id}[/bold cyan] - {task.title}")
    console.print(f"[dim]Status:[/dim] {task.status.value}")
    console.print(f"[dim]Priority:[/dim] {task.priority.value}")
    console.print(f"[dim]Owner:[/dim] {task.owner}")

    if task.tags:
        console.print(f"[dim]Tags:[/dim] {', '.join(task.tags)}")
    if task.depends_on:
        console.print(f"[dim]Depends on:[/dim] {', '.join(task.depends_on)}")
        if graph is not None:
            unmet = graph.unmet_dependencies(task.id)
            if unmet:
                console.print(f"[yellow]Waiting on:[/yellow] {', '.join(unmet)}")
    if task.blocked_by:
        console.print(f"[dim]Blocked by:[/dim] {', '.join(task.blocked_by)}")
    if graph is not None:
        dependents = graph.dependents(task.id)
        if dependents:
            console.print(f"[dim]Blocks:[/dim] {', '.join(dependents)}")
    if task.estimate:
        console.print(f"[dim]Estimate:[/dim] {task.estimate}")

    if task.description:
        console.print(f"\n[bold]Description:[/bold]\n{task.description}")
    if task.subtasks:
        console.print("\n[bold]Subtasks:[/bold]")
        for subtask in task.subtasks:
            mark = "x" if subtask.done else " "
            console.print(f"  \\[{mark}] {subtask.text}")


@app.command()
def create(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Task title"),
    project: str = typer.Option(
        ...,
        "--project",
        "-P",
        help="Project prefix (e.g. AUTH)",
    ),
    priority: str = typer.Option(
        "P2",
        "--priority",
        "-p",
        help="Priority level P0-P3 (P0 is highest)",
    ),
    owner: str | None = typer.Option(
        None,
        "--owner",
        "-o",
        help="Task owner",
    ),
    depends_on: list[str] | None = typer.Option(
        None,
        "--depends-on",
        help="Task IDs this task depends on (can be repeated)",
    ),
    blocked_by: list[str] | None = typer.Option(
        None,
        "--blocked-by",
        help="Manual blocker (can be repeated)",
    ),
    tags: list[str] | None = typer.Option(
        None,
        "--tag",
        "-t",
        help="Task tag (can be repeated)",
    ),
    estimate: str | None = typer.Option(
        None,
        "--estimate",
        help="Free-form estimate, e.g. 2h",
    ),
    description: str | None = typer.Option(
        None,
        "--description",
        "-d",
        help="Task description",
    ),
    subtasks: list[str] | None = typer.Option(
        None,
        "--subtask",
        help="Checklist item (can be repeated)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Create a new task.

    Examples:
        taskfold task create "Fix login bug" --project auth --priority P0
        taskfold task create "Write tests" -P auth --depends-on AUTH-001
    """
    config = get_config(ctx)
    store = get_task_store(config)

    try:
        task = store.create_task(
            title=title,
            project=project,
            priority=priority,
            owner=owner or config.default_owner,
            depends_on=depends_on or [],
            blocked_by=blocked_by or [],
            tags=tags or [],
            estimate=estimate,
            description=description or "",
            subtasks=subtasks or [],
        )
    except TaskfoldError as e:
        raise exit_for(e) from e

    if json_output:
        print_json(_dump(task))
    else:
        console.print(f"[green]Created:[/green] {task.id}")


@app.command()
def update(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to update"),
    title: str | None = typer.Option(
        None,
        "--title",
        help="Update title",
    ),
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="New status: todo, in_progress, blocked, done",
    ),
    priority: str | None = typer.Option(
        None,
        "--priority",
        "-p",
        help="Update priority (P0-P3)",
    ),
    owner: str | None = typer.Option(
        None,
        "--owner",
        "-o",
        help="Set owner",
    ),
    depends_on: list[str] | None = typer.Option(
        None,
        "--depends-on",
        help="Replace dependencies (can be repeated)",
    ),
    clear_deps: bool = typer.Option(
        False,
        "--clear-deps",
        help="Remove all dependencies",
    ),
    blocked_by: list[str] | None = typer.Option(
        None,
        "--blocked-by",
        help="Replace manual blockers (can be repeated)",
    ),
    unblock: bool = typer.Option(
        False,
        "--unblock",
        help="Clear all manual blockers",
    ),
    tags: list[str] | None = typer.Option(
        None,
        "--tag",
        "-t",
        help="Replace tags (can be repeated)",
    ),
    clear_tags: bool = typer.Option(
        False,
        "--clear-tags",
        help="Remove all tags",
    ),
    estimate: str | None = typer.Option(
        None,
        "--estimate",
        help="Update estimate",
    ),
    description: str | None = typer.Option(
        None,
        "--description",
        "-d",
        help="Update description",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Update a task's fields.

    Examples:
        taskfold task update AUTH-001 --status in_progress
        taskfold task update AUTH-001 --priority P1 --owner alex
        taskfold task update AUTH-002 --unblock
        taskfold task update AUTH-003 --clear-deps --clear-tags
    """
    changes: dict = {}
    if title is not None:
        changes["title"] = title
    if status is not None:
        changes["status"] = _parse_status(status)
    if priority is not None:
        changes["priority"] = priority
    if owner is not None:
        changes["owner"] = owner
    if clear_deps:
        changes["depends_on"] = []
    elif depends_on:
        changes["depends_on"] = depends_on
    if unblock:
        changes["blocked_by"] = []
    elif blocked_by:
        changes["blocked_by"] = blocked_by
    if clear_tags:
        changes["tags"] = []
    elif tags:
        changes["tags"] = tags
    if estimate is not None:
        changes["estimate"] = estimate
    if description is not None:
        changes["description"] = description

    if not changes:
        console.print("[yellow]No updates specified[/yellow]")
        raise typer.Exit(ExitCode.USER_ERROR)

    store = get_task_store(get_config(ctx))
    try:
        task = store.update_task(task_id, **changes)
    except TaskfoldError as e:
        raise exit_for(e) from e

    if json_output:
        print_json(_dump(task))
    else:
        console.print(f"[green]Updated:[/green] {task.id}")


@app.command()
def archive(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to archive"),
) -> None:
    """
    Move a task out of the active set.

    Archived ids are never reused.

    Examples:
        taskfold task archive AUTH-001
    """
    store = get_task_store(get_config(ctx))
    try:
        path = store.archive_task(task_id)
    except TaskfoldError as e:
        raise exit_for(e) from e

    console.print(f"[green]Archived:[/green] {task_id}")
    console.print(f"[dim]{path}[/dim]")


@app.command("list")
def list_tasks(
    ctx: typer.Context,
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Filter by status: todo, in_progress, blocked, done",
    ),
    project: str | None = typer.Option(
        None,
        "--project",
        "-P",
        help="Filter by project prefix",
    ),
    archived: bool = typer.Option(
        False,
        "--archived",
        help="List archived tasks instead of active ones",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    List tasks with optional filters.

    Examples:
        taskfold task list
        taskfold task list --status todo --project auth
        taskfold task list --archived
    """
    task_status = _parse_status(status) if status else None
    store = get_task_store(get_config(ctx))

    result = store.load_archived_tasks() if archived else store.load_all_tasks()
    for error in result.malformed:
        console.print(f"[yellow]Warning:[/yellow] {error.message}")

    tasks = result.tasks
    if task_status:
        tasks = [t for t in tasks if t.status == task_status]
    if project:
        tasks = [t for t in tasks if t.project == project.upper()]

    if json_output:
        print_json([_dump(t) for t in tasks])
        return

    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("P", width=2, justify="center")
    table.add_column("Status", width=12)
    table.add_column("Owner")
    table.add_column("Title", overflow="fold")

    for task in tasks:
        color = STATUS_COLORS.get(task.status, "white")
        table.add_row(
            task.id,
            task.priority.value[1],  # Just the number
            f"[{color}]{task.status.value}[/{color}]",
            task.owner,
            task.title,
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(tasks)} tasks[/dim]")


@app.command("next")
def next_task(
    ctx: typer.Context,
    project: str | None = typer.Option(
        None,
        "--project",
        "-P",
        help="Only consider this project",
    ),
    tags: list[str] | None = typer.Option(
        None,
        "--tag",
        "-t",
        help="Require tag (can be repeated)",
    ),
    owner: str | None = typer.Option(
        None,
        "--owner",
        "-o",
        help="Only consider tasks with this owner",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Show the most urgent actionable task.

    A task is actionable when it is todo, has no manual blockers and every
    dependency is done.

    Examples:
        taskfold task next
        taskfold task next --project auth --tag backend
    """
    store = get_task_store(get_config(ctx))
    graph = TaskGraph(store.load_all_tasks().tasks, store.load_archived_tasks().tasks)

    for task_id, missing in graph.dangling_dependencies().items():
        console.print(
            f"[yellow]Warning:[/yellow] {task_id} depends on unknown task(s): {', '.join(missing)}"
        )

    task = graph.next_task(project=project, tags=tags, owner=owner)

    if json_output:
        print_json(_dump(task) if task else None)
        return

    if task is None:
        console.print("[yellow]No actionable tasks[/yellow]")
        blocked = graph.blocked_tasks()
        if blocked:
            console.print(f"[dim]{len(blocked)} todo task(s) are blocked[/dim]")
        return

    _print_task(task, graph)


@app.command()
def show(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to display"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Show detailed information about a task.

    Examples:
        taskfold task show AUTH-001
        taskfold task show AUTH-001 --json
    """
    store = get_task_store(get_config(ctx))
    try:
        task = store.get_task(task_id)
    except TaskfoldError as e:
        raise exit_for(e) from e

    if json_output:
        print_json(_dump(task))
        return

    graph = TaskGraph(store.load_all_tasks().tasks, store.load_archived_tasks().tasks)
    _print_task(task, graph)


