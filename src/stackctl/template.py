"""CloudFormation template loading and validation."""

from pathlib import Path

from stackctl.aws.client import CloudFormationClient
from stackctl.errors import InvalidInputError
from stackctl.models import TemplateValidation

MAX_TEMPLATE_BODY_BYTES = 51200


def load_template(path: str | Path) -> str:
    """Read a template body from a local file."""
    return Path(path).read_text(encoding="utf-8")


def _body_size(body: str | bytes) -> int:
    if isinstance(body, bytes):
        return len(body)
    return len(body.encode("utf-8"))


def validate_template(
    client: CloudFormationClient,
    template_body: str | bytes | None = None,
    template_url: str | None = None,
) -> TemplateValidation:
    """Validate a template body or URL and return the capabilities it needs.

    The body wins when both are given. An oversized body is rejected locally.
    """
    if not template_body and not template_url:
        raise InvalidInputError("Missing CloudFormation template body or template URL")

    if template_body:
        size = _body_size(template_body)
        if size > MAX_TEMPLATE_BODY_BYTES:
            raise InvalidInputError(
                f"Template body is {size} bytes, exceeding the maximum of "
                f"{MAX_TEMPLATE_BODY_BYTES} bytes"
            )
        if isinstance(template_body, bytes):
            template_body = template_body.decode("utf-8")
        resp = client.validate_template(template_body=template_body)
    else:
        resp = client.validate_template(template_url=template_url)

    return TemplateValidation(
        capabilities=list(resp.get("Capabilities", [])),
        parameters=[p["ParameterKey"] for p in resp.get("Parameters", [])],
        description=resp.get("Description"),
        capabilities_reason=resp.get("CapabilitiesReason"),
    )
