"""Fetch and render a stack's event log."""

from datetime import datetime

from stackctl.aws.client import CloudFormationClient
from stackctl.models import StackEvent, WaiterType
from stackctl.paginator import collect_pages


def _to_event(raw: dict) -> StackEvent:
    return StackEvent(
        event_id=raw["EventId"],
        stack_name=raw["StackName"],
        timestamp=raw["Timestamp"],
        logical_id=raw["LogicalResourceId"],
        resource_type=raw.get("ResourceType", ""),
        resource_status=raw.get("ResourceStatus", ""),
        status_reason=raw.get("ResourceStatusReason"),
    )


def fetch_events(
    client: CloudFormationClient,
    stack_name: str,
    since: datetime | None = None,
) -> list[StackEvent]:
    """Return the stack's events newer than ``since``, oldest first.

    ``since=None`` returns every event. The server delivers pages newest first,
    so the result is always re-sorted.
    """
    raw = collect_pages(
        lambda token: client.describe_stack_events(stack_name, next_token=token),
        "StackEvents",
    )

    events = [_to_event(e) for e in raw]
    if since is not None:
        events = [e for e in events if e.timestamp > since]

    return sorted(events, key=lambda e: e.timestamp)


def format_event_line(waiter_type: WaiterType | str, stack_name: str, event: StackEvent) -> str:
    timestamp = event.timestamp.isoformat(timespec="seconds")
    line = (
        f"[ stack | {waiter_type} ] {stack_name}\t{timestamp}"
        f"\t{event.logical_id}\t{event.resource_status}"
    )
    if event.status_reason:
        line += f"\t{event.status_reason}"
    return line
