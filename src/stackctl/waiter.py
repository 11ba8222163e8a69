"""Wait for a stack operation to finish while streaming its events."""

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future
from datetime import UTC, datetime

import click

from stackctl.aws.client import CloudFormationClient
from stackctl.errors import RemoteValidationError
from stackctl.events import fetch_events, format_event_line
from stackctl.models import WaiterType

logger = logging.getLogger(__name__)


def _start_waiter(client: CloudFormationClient, stack_name: str, waiter_type: WaiterType) -> Future:
    """Run the blocking waiter on a daemon thread; its outcome lands in the future."""
    done: Future = Future()

    def run():
        try:
            client.wait_until_complete(stack_name, waiter_type)
        except Exception as e:
            done.set_exception(e)
        else:
            done.set_result(None)

    thread = threading.Thread(target=run, name=f"stackctl-wait-{stack_name}", daemon=True)
    thread.start()
    return done


def poll_until_complete(
    client: CloudFormationClient,
    stack_name: str,
    waiter_type: WaiterType | str,
    echo: Callable[[str], None] = click.echo,
    poll_interval: float = 1.0,
) -> None:
    """Block until ``waiter_type`` completes for the stack, echoing new events.

    Completion is decided by the background waiter only; the loop always does a
    final fetch before it checks. Raises the waiter's error on failure, or the
    first fetch error that is not tolerated.
    """
    waiter_type = WaiterType(waiter_type)
    watermark = datetime.now(UTC)
    done = _start_waiter(client, stack_name, waiter_type)

    while True:
        try:
            events = fetch_events(client, stack_name, watermark)
        except RemoteValidationError as e:
            # the stack disappears from under us once a delete finishes
            if waiter_type != WaiterType.DELETE:
                raise
            logger.debug("Ignoring %s while deleting %s: %s", e.code, stack_name, e)
            events = []

        newest = watermark
        for event in events:
            echo(format_event_line(waiter_type, stack_name, event))
            newest = max(newest, event.timestamp)
        watermark = newest

        if done.done():
            done.result()
            logger.debug("Stack %s %s complete", stack_name, waiter_type)
            return

        if poll_interval > 0:
            time.sleep(poll_interval)
