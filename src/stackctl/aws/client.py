"""Thin boto3 wrapper exposing the CloudFormation calls stackctl relies on."""

import logging
from typing import Any

import boto3
from botocore.exceptions import ClientError, WaiterError

from stackctl.errors import TransportError
from stackctl.models import WaiterType

logger = logging.getLogger(__name__)

WAITER_NAMES = {
    WaiterType.CREATE: "stack_create_complete",
    WaiterType.UPDATE: "stack_update_complete",
    WaiterType.DELETE: "stack_delete_complete",
}


class CloudFormationClient:
    """Wraps boto3 CloudFormation calls and translates botocore errors.

    Every method maps onto one API operation and returns the raw response
    dict. Paged operations take a ``next_token`` and return a single page.
    """

    def __init__(
        self,
        region: str | None = None,
        profile: str | None = None,
        client: Any = None,
        waiter_delay: int | None = None,
        waiter_max_attempts: int | None = None,
    ):
        if client is None:
            session = boto3.session.Session(profile_name=profile, region_name=region)
            client = session.client("cloudformation")
        self._client = client
        self._waiter_config = {}
        if waiter_delay is not None:
            self._waiter_config["Delay"] = waiter_delay
        if waiter_max_attempts is not None:
            self._waiter_config["MaxAttempts"] = waiter_max_attempts

    def _call(self, operation: str, **kwargs) -> dict:
        logger.debug("cloudformation %s %s", operation, kwargs.get("StackName", ""))
        try:
            return getattr(self._client, operation)(**kwargs)
        except ClientError as e:
            raise TransportError.from_client_error(e) from e

    @staticmethod
    def _with_token(kwargs: dict, next_token: str | None) -> dict:
        if next_token:
            kwargs["NextToken"] = next_token
        return kwargs

    def list_stacks(self, status_filter: list[str] | None = None, next_token: str | None = None) -> dict:
        kwargs: dict = {}
        if status_filter:
            kwargs["StackStatusFilter"] = list(status_filter)
        return self._call("list_stacks", **self._with_token(kwargs, next_token))

    def describe_stacks(self, stack_name: str | None = None, next_token: str | None = None) -> dict:
        kwargs: dict = {}
        if stack_name:
            kwargs["StackName"] = stack_name
        return self._call("describe_stacks", **self._with_token(kwargs, next_token))

    def create_stack(self, **kwargs) -> dict:
        return self._call("create_stack", **kwargs)

    def update_stack(self, **kwargs) -> dict:
        return self._call("update_stack", **kwargs)

    def delete_stack(self, stack_name: str, retain_resources: list[str] | None = None) -> dict:
        kwargs: dict = {"StackName": stack_name}
        if retain_resources:
            kwargs["RetainResources"] = list(retain_resources)
        return self._call("delete_stack", **kwargs)

    def validate_template(self, template_body: str | None = None, template_url: str | None = None) -> dict:
        if template_body:
            return self._call("validate_template", TemplateBody=template_body)
        return self._call("validate_template", TemplateURL=template_url)

    def describe_stack_events(self, stack_name: str, next_token: str | None = None) -> dict:
        kwargs = {"StackName": stack_name}
        return self._call("describe_stack_events", **self._with_token(kwargs, next_token))

    def describe_stack_resources(self, stack_name: str) -> dict:
        return self._call("describe_stack_resources", StackName=stack_name)

    def detect_stack_drift(self, stack_name: str, logical_resource_ids: list[str] | None = None) -> dict:
        kwargs: dict = {"StackName": stack_name}
        if logical_resource_ids:
            kwargs["LogicalResourceIds"] = list(logical_resource_ids)
        return self._call("detect_stack_drift", **kwargs)

    def describe_stack_drift_detection_status(self, detection_id: str) -> dict:
        return self._call(
            "describe_stack_drift_detection_status", StackDriftDetectionId=detection_id
        )

    def describe_stack_resource_drifts(
        self,
        stack_name: str,
        status_filter: list[str] | None = None,
        next_token: str | None = None,
    ) -> dict:
        kwargs: dict = {"StackName": stack_name}
        if status_filter:
            kwargs["StackResourceDriftStatusFilters"] = list(status_filter)
        return self._call("describe_stack_resource_drifts", **self._with_token(kwargs, next_token))

    def wait_until_complete(self, stack_name: str, waiter_type: WaiterType) -> None:
        """Block until the stack reaches the terminal state for ``waiter_type``."""
        waiter = self._client.get_waiter(WAITER_NAMES[WaiterType(waiter_type)])
        kwargs: dict = {"StackName": stack_name}
        if self._waiter_config:
            kwargs["WaiterConfig"] = dict(self._waiter_config)
        try:
            waiter.wait(**kwargs)
        except WaiterError as e:
            raise TransportError.from_waiter_error(e) from e
        except ClientError as e:
            raise TransportError.from_client_error(e) from e
