"""Output formatters for stacks, resources, events and drift results."""

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from stackctl.models import (
    DriftStatus,
    ResourceDriftStatus,
    Stack,
    StackDriftResult,
    StackEvent,
    StackResource,
    StackSummary,
)

STATUS_COLORS = {
    "COMPLETE": "green",
    "IN_PROGRESS": "yellow",
    "FAILED": "red",
}


def _status_style(status: str) -> str:
    if "ROLLBACK" in status and not status.endswith("IN_PROGRESS"):
        return "red"
    for suffix, color in STATUS_COLORS.items():
        if status.endswith(suffix):
            return color
    return "dim"


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_json(records) -> str:
    """Format a dataclass record, or a list of them, as JSON."""
    if isinstance(records, list):
        data = [asdict(r) if is_dataclass(r) else r for r in records]
    else:
        data = asdict(records) if is_dataclass(records) else records
    return json.dumps(data, indent=2, default=_json_default)


def _render(renderable) -> str:
    console = Console(record=True, width=160)
    console.print(renderable)
    return console.export_text()


def format_stacks_table(stacks: list[Stack] | list[StackSummary]) -> str:
    if not stacks:
        return "No stacks found."

    table = Table(title="Stacks")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Created")

    for s in stacks:
        style = _status_style(s.status.value)
        table.add_row(
            s.stack_name,
            Text(s.status.value, style=style),
            s.creation_time.isoformat(timespec="seconds"),
        )

    return _render(table)


def format_stack_detail(stack: Stack) -> str:
    """Render a single stack with its parameters, tags and outputs as a tree."""
    style = _status_style(stack.status.value)
    tree = Tree(
        Text.from_markup(
            f"[bold]{escape(stack.stack_name)}[/bold] — [{style}]{stack.status.value}[/{style}]"
        )
    )
    tree.add(Text(f"id: {stack.stack_id}"))
    if stack.status_reason:
        tree.add(Text(f"reason: {stack.status_reason}"))
    if stack.description:
        tree.add(Text(f"description: {stack.description}"))

    for label, mapping in (
        ("parameters", stack.parameters),
        ("tags", stack.tags),
        ("outputs", stack.outputs),
    ):
        if mapping:
            branch = tree.add(label)
            for key, value in mapping.items():
                branch.add(Text(f"{key} = {value}"))

    if stack.capabilities:
        tree.add(f"capabilities: {', '.join(stack.capabilities)}")

    return _render(tree)


def format_resources_table(resources: list[StackResource]) -> str:
    if not resources:
        return "No resources found."

    table = Table(title="Resources")
    table.add_column("Logical ID")
    table.add_column("Type")
    table.add_column("Physical ID")
    table.add_column("Status")

    for r in resources:
        table.add_row(
            r.logical_id,
            r.resource_type,
            r.physical_id or "",
            Text(r.status, style=_status_style(r.status)),
        )

    return _render(table)


def format_events_table(events: list[StackEvent]) -> str:
    if not events:
        return "No events found."

    table = Table(title="Events")
    table.add_column("Timestamp")
    table.add_column("Logical ID")
    table.add_column("Status")
    table.add_column("Reason")

    for e in events:
        table.add_row(
            e.timestamp.isoformat(timespec="seconds"),
            e.logical_id,
            Text(e.resource_status, style=_status_style(e.resource_status)),
            Text(e.status_reason or ""),
        )

    return _render(table)


def format_drift_tree(results: list[StackDriftResult]) -> str:
    """Format drift results as a Rich tree view, returned as a string."""
    if not results:
        return "No drift detected."

    tree = Tree("[bold]Drift Report[/bold]")

    for r in results:
        status_style = "green" if r.drift_status == DriftStatus.IN_SYNC else "red"
        stack_branch = tree.add(
            Text.from_markup(
                f"[{status_style}]{escape(r.stack_name)}[/{status_style}] — {r.drift_status.value}"
            )
        )

        for rd in r.resource_drifts:
            if rd.status == ResourceDriftStatus.IN_SYNC:
                continue
            resource_branch = stack_branch.add(
                Text(f"{rd.logical_id} ({rd.resource_type}) — {rd.status.value}")
            )
            for pd in rd.property_diffs:
                resource_branch.add(
                    Text.from_markup(
                        f"{escape(pd.property_path)}: [green]{escape(pd.expected_value)}[/green]"
                        f" → [red]{escape(pd.actual_value)}[/red]"
                    )
                )

    return _render(tree)
