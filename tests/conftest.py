"""Shared test fixtures."""

from datetime import UTC, datetime

import pytest

SIMPLE_TEMPLATE = """{
    "AWSTemplateFormatVersion": "2010-09-09",
    "Resources": {
        "MyQueue": {
            "Type": "AWS::SQS::Queue",
            "Properties": {
                "QueueName": "my-test-queue"
            }
        }
    }
}"""


@pytest.fixture
def aws_credentials(monkeypatch):
    """Set dummy AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


def raw_stack(name="demo", status="CREATE_COMPLETE", **extra):
    """A DescribeStacks entry as boto3 returns it."""
    stack = {
        "StackId": f"arn:aws:cloudformation:us-east-1:123:stack/{name}/uuid",
        "StackName": name,
        "StackStatus": status,
        "CreationTime": datetime(2026, 2, 25, 13, 0, 0, tzinfo=UTC),
    }
    stack.update(extra)
    return stack


def raw_event(timestamp, logical_id="MyQueue", status="CREATE_IN_PROGRESS", reason=None):
    """A DescribeStackEvents entry as boto3 returns it."""
    event = {
        "EventId": f"{logical_id}-{status}-{timestamp.isoformat()}",
        "StackId": "arn:aws:cloudformation:us-east-1:123:stack/demo/uuid",
        "StackName": "demo",
        "LogicalResourceId": logical_id,
        "ResourceType": "AWS::SQS::Queue",
        "Timestamp": timestamp,
        "ResourceStatus": status,
    }
    if reason:
        event["ResourceStatusReason"] = reason
    return event
