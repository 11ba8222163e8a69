"""Tests for output formatters."""

import json
from datetime import UTC, datetime

from stackctl.formatter import (
    format_drift_tree,
    format_events_table,
    format_json,
    format_stack_detail,
    format_stacks_table,
)
from stackctl.models import (
    DiffType,
    DriftStatus,
    PropertyDiff,
    ResourceDrift,
    ResourceDriftStatus,
    Stack,
    StackDriftResult,
    StackEvent,
    StackStatus,
)

CREATED = datetime(2026, 2, 25, 13, 0, 0, tzinfo=UTC)


def _stack():
    return Stack(
        stack_id="arn:aws:cloudformation:us-east-1:123:stack/my-stack/uuid",
        stack_name="my-stack",
        status=StackStatus.UPDATE_COMPLETE,
        creation_time=CREATED,
        parameters={"Env": "prod"},
        tags={"ManagedBy": "stackctl"},
    )


def _drift_result(drifted=True):
    resource_drifts = []
    if drifted:
        resource_drifts = [
            ResourceDrift(
                logical_id="MyQueue",
                physical_id="queue-url",
                resource_type="AWS::SQS::Queue",
                status=ResourceDriftStatus.MODIFIED,
                property_diffs=[
                    PropertyDiff("/Properties/DelaySeconds", "0", "5", DiffType.NOT_EQUAL)
                ],
                timestamp=CREATED,
            )
        ]
    return StackDriftResult(
        stack_id="arn:...",
        stack_name="my-stack" if drifted else "clean-stack",
        drift_status=DriftStatus.DRIFTED if drifted else DriftStatus.IN_SYNC,
        resource_drifts=resource_drifts,
        detection_id="det-123",
        timestamp=CREATED,
        drifted_resource_count=len(resource_drifts),
    )


def test_format_json_serializes_enums_and_datetimes():
    data = json.loads(format_json([_stack()]))

    assert data[0]["stack_name"] == "my-stack"
    assert data[0]["status"] == "UPDATE_COMPLETE"
    assert data[0]["creation_time"] == "2026-02-25T13:00:00+00:00"
    assert data[0]["tags"] == {"ManagedBy": "stackctl"}


def test_format_json_single_record():
    data = json.loads(format_json(_stack()))

    assert data["parameters"] == {"Env": "prod"}


def test_format_stacks_table():
    output = format_stacks_table([_stack()])

    assert "my-stack" in output
    assert "UPDATE_COMPLETE" in output


def test_format_stacks_table_empty():
    assert format_stacks_table([]) == "No stacks found."


def test_format_stack_detail():
    output = format_stack_detail(_stack())

    assert "my-stack" in output
    assert "Env = prod" in output
    assert "ManagedBy = stackctl" in output


def test_format_events_table():
    event = StackEvent(
        event_id="e-1",
        stack_name="my-stack",
        timestamp=CREATED,
        logical_id="MyQueue",
        resource_type="AWS::SQS::Queue",
        resource_status="CREATE_FAILED",
        status_reason="[Access] denied",
    )

    output = format_events_table([event])

    assert "MyQueue" in output
    assert "[Access] denied" in output


def test_format_drift_tree():
    output = format_drift_tree([_drift_result(), _drift_result(drifted=False)])

    assert "Drift Report" in output
    assert "my-stack" in output
    assert "MyQueue" in output
    assert "/Properties/DelaySeconds" in output
    assert "clean-stack" in output


def test_format_drift_tree_empty():
    assert format_drift_tree([]) == "No drift detected."
