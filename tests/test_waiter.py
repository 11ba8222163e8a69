"""Tests for the wait-and-stream-events loop."""

import threading
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from stackctl.errors import RemoteValidationError, TransportError
from stackctl.models import WaiterType
from stackctl.waiter import poll_until_complete
from tests.conftest import raw_event


@pytest.fixture
def release():
    event = threading.Event()
    yield event
    event.set()


@pytest.fixture
def mock_cfn_client(release):
    client = MagicMock()
    client.wait_until_complete.side_effect = lambda stack_name, waiter_type: release.wait(5)
    return client


def _future(seconds):
    return datetime.now(UTC) + timedelta(minutes=5, seconds=seconds)


def _not_found():
    return RemoteValidationError("Stack with id demo does not exist", code="ValidationError")


def test_create_streams_each_event_once_in_order(mock_cfn_client, release):
    t1, t2, t3 = _future(1), _future(2), _future(3)
    calls = []

    def pages(stack_name, next_token=None):
        calls.append(next_token)
        if len(calls) == 1:
            return {"StackEvents": [raw_event(t2), raw_event(t1)]}
        if len(calls) == 3:
            release.set()
        return {"StackEvents": [raw_event(t3, status="CREATE_COMPLETE"), raw_event(t2), raw_event(t1)]}

    mock_cfn_client.describe_stack_events.side_effect = pages
    lines = []

    result = poll_until_complete(
        mock_cfn_client, "demo", WaiterType.CREATE, echo=lines.append, poll_interval=0
    )

    assert result is None
    assert len(lines) == 3
    assert all(line.startswith("[ stack | create ] demo\t") for line in lines)
    stamps = [line.split("\t")[1] for line in lines]
    assert stamps == sorted(stamps)
    assert lines[-1].endswith("CREATE_COMPLETE")
    mock_cfn_client.wait_until_complete.assert_called_once_with("demo", WaiterType.CREATE)


def test_completion_with_no_new_events(mock_cfn_client, release):
    release.set()
    mock_cfn_client.describe_stack_events.return_value = {"StackEvents": []}
    lines = []

    poll_until_complete(mock_cfn_client, "demo", "update", echo=lines.append, poll_interval=0)

    assert lines == []
    assert mock_cfn_client.describe_stack_events.call_count >= 1


def test_old_events_are_not_printed(mock_cfn_client, release):
    release.set()
    past = datetime.now(UTC) - timedelta(hours=1)
    mock_cfn_client.describe_stack_events.return_value = {"StackEvents": [raw_event(past)]}
    lines = []

    poll_until_complete(mock_cfn_client, "demo", "update", echo=lines.append, poll_interval=0)

    assert lines == []


def test_delete_tolerates_missing_stack(mock_cfn_client, release):
    t1 = _future(1)
    calls = []

    def pages(stack_name, next_token=None):
        calls.append(next_token)
        if len(calls) <= 2:
            return {"StackEvents": [raw_event(t1, status="DELETE_IN_PROGRESS")]}
        if len(calls) == 4:
            release.set()
        raise _not_found()

    mock_cfn_client.describe_stack_events.side_effect = pages
    lines = []

    poll_until_complete(
        mock_cfn_client, "demo", WaiterType.DELETE, echo=lines.append, poll_interval=0
    )

    assert len(calls) >= 4
    assert len(lines) == 1
    assert "DELETE_IN_PROGRESS" in lines[0]


def test_missing_stack_is_fatal_outside_delete(mock_cfn_client):
    mock_cfn_client.describe_stack_events.side_effect = _not_found()

    with pytest.raises(RemoteValidationError):
        poll_until_complete(mock_cfn_client, "demo", WaiterType.UPDATE, poll_interval=0)

    assert mock_cfn_client.describe_stack_events.call_count == 1


def test_other_errors_are_fatal_during_delete(mock_cfn_client):
    mock_cfn_client.describe_stack_events.side_effect = TransportError(
        "Rate exceeded", code="Throttling"
    )

    with pytest.raises(TransportError, match="Rate exceeded"):
        poll_until_complete(mock_cfn_client, "demo", WaiterType.DELETE, poll_interval=0)


def test_waiter_failure_is_raised(mock_cfn_client):
    mock_cfn_client.wait_until_complete.side_effect = TransportError(
        "Waiter StackCreateComplete failed: terminal failure state"
    )
    mock_cfn_client.describe_stack_events.return_value = {"StackEvents": []}

    with pytest.raises(TransportError, match="terminal failure"):
        poll_until_complete(mock_cfn_client, "demo", WaiterType.CREATE, poll_interval=0)


def test_independent_waits_do_not_share_state():
    results = {}

    def run(name):
        client = MagicMock()
        client.wait_until_complete.return_value = None
        client.describe_stack_events.return_value = {"StackEvents": [raw_event(_future(1))]}
        lines = []
        poll_until_complete(client, name, WaiterType.CREATE, echo=lines.append, poll_interval=0)
        results[name] = lines

    threads = [threading.Thread(target=run, args=(name,)) for name in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert len(results["a"]) == 1
    assert len(results["b"]) == 1
    assert "] a\t" in results["a"][0]
