"""Stack create/update/delete/describe operations."""

import logging

from stackctl.aws.client import CloudFormationClient
from stackctl.errors import InvalidInputError, TransportError
from stackctl.models import Stack, StackResource, StackStatus, StackSummary
from stackctl.paginator import collect_pages
from stackctl.template import validate_template

logger = logging.getLogger(__name__)

PROVENANCE_TAG_KEY = "ManagedBy"
PROVENANCE_TAG_VALUE = "stackctl"


def stamp_tags(tags: dict[str, str] | None) -> dict[str, str]:
    """Return a copy of ``tags`` carrying the provenance tag."""
    stamped = dict(tags or {})
    stamped[PROVENANCE_TAG_KEY] = PROVENANCE_TAG_VALUE
    return stamped


def tag_list(tags: dict[str, str]) -> list[dict[str, str]]:
    return [{"Key": k, "Value": v} for k, v in tags.items()]


def parameter_list(params: dict[str, str]) -> list[dict[str, str]]:
    return [{"ParameterKey": k, "ParameterValue": v} for k, v in params.items()]


def _to_stack(raw: dict) -> Stack:
    return Stack(
        stack_id=raw["StackId"],
        stack_name=raw["StackName"],
        status=StackStatus(raw["StackStatus"]),
        creation_time=raw["CreationTime"],
        status_reason=raw.get("StackStatusReason"),
        last_updated_time=raw.get("LastUpdatedTime"),
        description=raw.get("Description"),
        parameters={
            p["ParameterKey"]: p.get("ParameterValue", "") for p in raw.get("Parameters", [])
        },
        tags={t["Key"]: t["Value"] for t in raw.get("Tags", [])},
        outputs={o["OutputKey"]: o.get("OutputValue", "") for o in raw.get("Outputs", [])},
        capabilities=list(raw.get("Capabilities", [])),
    )


def _to_summary(raw: dict) -> StackSummary:
    return StackSummary(
        stack_id=raw["StackId"],
        stack_name=raw["StackName"],
        status=StackStatus(raw["StackStatus"]),
        creation_time=raw["CreationTime"],
        deletion_time=raw.get("DeletionTime"),
        template_description=raw.get("TemplateDescription"),
    )


class StackManager:
    """CRUD operations for CloudFormation stacks."""

    def __init__(self, client: CloudFormationClient):
        self._client = client

    def _stack_request(
        self,
        name: str,
        params: dict[str, str] | None,
        tags: dict[str, str] | None,
        template_body: str | bytes | None,
        template_url: str | None,
    ) -> dict:
        validation = validate_template(self._client, template_body, template_url)

        request = {
            "StackName": name,
            "Parameters": parameter_list(params or {}),
            "Capabilities": validation.capabilities,
            "Tags": tag_list(stamp_tags(tags)),
        }
        if template_body:
            if isinstance(template_body, bytes):
                template_body = template_body.decode("utf-8")
            request["TemplateBody"] = template_body
        else:
            request["TemplateURL"] = template_url
        return request

    def create(
        self,
        name: str,
        params: dict[str, str] | None = None,
        tags: dict[str, str] | None = None,
        template_body: str | bytes | None = None,
        template_url: str | None = None,
    ) -> str:
        """Validate the template and create the stack. Returns the stack id."""
        request = self._stack_request(name, params, tags, template_body, template_url)
        resp = self._client.create_stack(**request)
        logger.info("Create requested for stack %s", name)
        return resp["StackId"]

    def update(
        self,
        name: str,
        params: dict[str, str] | None = None,
        tags: dict[str, str] | None = None,
        template_body: str | bytes | None = None,
        template_url: str | None = None,
    ) -> str:
        """Validate the template and update an existing stack."""
        request = self._stack_request(name, params, tags, template_body, template_url)
        resp = self._client.update_stack(**request)
        logger.info("Update requested for stack %s", name)
        return resp["StackId"]

    def delete(self, name: str, *retain_resource_ids: str) -> None:
        self._client.delete_stack(name, retain_resources=list(retain_resource_ids))
        logger.info("Delete requested for stack %s", name)

    def describe(self, name: str) -> Stack:
        """Describe a single stack by name or id."""
        if not name:
            raise InvalidInputError("Missing stack name")

        resp = self._client.describe_stacks(stack_name=name)
        return _to_stack(resp["Stacks"][0])

    def exists(self, name: str) -> bool:
        """True when the stack can be described. Any error counts as absent."""
        try:
            return self.describe(name) is not None
        except Exception:
            logger.debug("Stack %s not found", name, exc_info=True)
            return False

    def list_stacks(self, *status_filter: str) -> list[StackSummary]:
        """List stack summaries across all pages, optionally filtered by status.

        On failure the raised TransportError carries the summaries fetched so
        far in ``partial``.
        """
        try:
            raw = collect_pages(
                lambda token: self._client.list_stacks(list(status_filter), next_token=token),
                "StackSummaries",
                keep_partial=True,
            )
        except TransportError as e:
            e.partial = [_to_summary(s) for s in e.partial or []]
            raise
        return [_to_summary(s) for s in raw]

    def describe_stacks(self) -> list[Stack]:
        """Describe every live stack across all pages."""
        try:
            raw = collect_pages(
                lambda token: self._client.describe_stacks(next_token=token),
                "Stacks",
                keep_partial=True,
            )
        except TransportError as e:
            e.partial = [_to_stack(s) for s in e.partial or []]
            raise
        return [_to_stack(s) for s in raw]

    def list_resources(self, name: str) -> list[StackResource]:
        if not name:
            raise InvalidInputError("Missing stack name")

        resp = self._client.describe_stack_resources(name)
        return [
            StackResource(
                logical_id=r["LogicalResourceId"],
                physical_id=r.get("PhysicalResourceId"),
                resource_type=r["ResourceType"],
                status=r["ResourceStatus"],
                timestamp=r["Timestamp"],
                status_reason=r.get("ResourceStatusReason"),
            )
            for r in resp["StackResources"]
        ]
