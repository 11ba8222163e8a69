"""CLI entrypoint for stackctl."""

import functools
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from stackctl.aws.client import CloudFormationClient
from stackctl.drift import DriftDetector
from stackctl.errors import StackctlError
from stackctl.events import fetch_events
from stackctl.formatter import (
    format_drift_tree,
    format_events_table,
    format_json,
    format_resources_table,
    format_stack_detail,
    format_stacks_table,
)
from stackctl.models import DriftStatus, StackStatus, WaiterType
from stackctl.stack import StackManager
from stackctl.template import load_template, validate_template
from stackctl.waiter import poll_until_complete

FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)


def _handle_errors(f):
    """Report stackctl errors as a one-line message and exit 1."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except StackctlError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return wrapper


def _parse_pairs(values: tuple[str, ...], option: str) -> dict[str, str]:
    pairs = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"{item!r} is not KEY=VALUE", param_hint=option)
        pairs[key] = value
    return pairs


def _template_options(f):
    f = click.option("--template-url", default=None, help="S3 URL of the template.")(f)
    f = click.option(
        "--template-file",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Local template file.",
    )(f)
    return f


def _stack_options(f):
    f = click.option("--wait/--no-wait", default=True, help="Stream events until done.")(f)
    f = click.option("--tag", multiple=True, help="Stack tag (KEY=VALUE).")(f)
    f = click.option("--param", multiple=True, help="Stack parameter (KEY=VALUE).")(f)
    return _template_options(f)


@click.group()
@click.option("--region", envvar="STACKCTL_REGION", default=None, help="AWS region.")
@click.option("--profile", envvar="STACKCTL_PROFILE", default=None, help="AWS profile.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, region, profile, verbose):
    """Manage CloudFormation stacks."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )
    ctx.obj = CloudFormationClient(region=region, profile=profile)


@main.command("list")
@click.option(
    "--status",
    multiple=True,
    type=click.Choice([s.value for s in StackStatus]),
    help="Only list stacks in this status.",
)
@FORMAT_OPTION
@click.pass_obj
@_handle_errors
def list_cmd(client, status, output_format):
    """List stacks."""
    stacks = StackManager(client).list_stacks(*status)
    click.echo(format_json(stacks) if output_format == "json" else format_stacks_table(stacks))


@main.command()
@click.option("--name", default=None, help="Only show this stack.")
@FORMAT_OPTION
@click.pass_obj
@_handle_errors
def get(client, name, output_format):
    """Show details of one stack, or of every live stack."""
    manager = StackManager(client)

    if name:
        if not manager.exists(name):
            click.echo(f"Error: Failed to find stack {name}", err=True)
            sys.exit(1)
        stack = manager.describe(name)
        click.echo(format_json(stack) if output_format == "json" else format_stack_detail(stack))
        return

    stacks = manager.describe_stacks()
    click.echo(format_json(stacks) if output_format == "json" else format_stacks_table(stacks))


@main.command()
@_template_options
@FORMAT_OPTION
@click.pass_obj
@_handle_errors
def validate(client, template_file, template_url, output_format):
    """Validate a template and show the capabilities it requires."""
    body = load_template(template_file) if template_file else None
    result = validate_template(client, body, template_url)

    if output_format == "json":
        click.echo(format_json(result))
        return

    click.echo("Template is valid.")
    if result.capabilities:
        click.echo(f"Capabilities: {', '.join(result.capabilities)}")
    if result.parameters:
        click.echo(f"Parameters: {', '.join(result.parameters)}")


def _apply(client, name, waiter_type, template_file, template_url, param, tag, wait):
    manager = StackManager(client)
    body = load_template(template_file) if template_file else None
    operation = manager.create if waiter_type == WaiterType.CREATE else manager.update

    stack_id = operation(
        name,
        params=_parse_pairs(param, "--param"),
        tags=_parse_pairs(tag, "--tag"),
        template_body=body,
        template_url=template_url,
    )
    click.echo(f"Stack {name} {waiter_type} started: {stack_id}")

    if wait:
        poll_until_complete(client, name, waiter_type)
        click.echo(f"Stack {name} {waiter_type} complete")


@main.command()
@click.argument("name")
@_stack_options
@click.pass_obj
@_handle_errors
def create(client, name, template_file, template_url, param, tag, wait):
    """Create a stack."""
    _apply(client, name, WaiterType.CREATE, template_file, template_url, param, tag, wait)


@main.command()
@click.argument("name")
@_stack_options
@click.pass_obj
@_handle_errors
def update(client, name, template_file, template_url, param, tag, wait):
    """Update an existing stack."""
    _apply(client, name, WaiterType.UPDATE, template_file, template_url, param, tag, wait)


@main.command()
@click.argument("name")
@click.option("--retain", multiple=True, help="Logical id of a resource to keep.")
@click.option("--wait/--no-wait", default=True, help="Stream events until done.")
@click.pass_obj
@_handle_errors
def delete(client, name, retain, wait):
    """Delete a stack."""
    StackManager(client).delete(name, *retain)
    click.echo(f"Stack {name} delete started")

    if wait:
        poll_until_complete(client, name, WaiterType.DELETE)
        click.echo(f"Stack {name} delete complete")


@main.command()
@click.argument("name")
@FORMAT_OPTION
@click.pass_obj
@_handle_errors
def events(client, name, output_format):
    """Show a stack's full event history, oldest first."""
    stack_events = fetch_events(client, name)
    click.echo(
        format_json(stack_events) if output_format == "json" else format_events_table(stack_events)
    )


@main.command()
@click.argument("name")
@FORMAT_OPTION
@click.pass_obj
@_handle_errors
def resources(client, name, output_format):
    """List the resources of a stack."""
    stack_resources = StackManager(client).list_resources(name)
    click.echo(
        format_json(stack_resources)
        if output_format == "json"
        else format_resources_table(stack_resources)
    )


@main.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--drifted-only", is_flag=True, help="Show only drifted stacks.")
@click.option(
    "--max-concurrent",
    type=click.IntRange(1, 50),
    default=5,
    help="Max concurrent drift detections.",
)
@FORMAT_OPTION
@click.pass_obj
@_handle_errors
def drift(client, names, drifted_only, max_concurrent, output_format):
    """Detect drift on one or more stacks.

    Exits 1 when drift is found and 2 when detection failed for any stack.
    """
    detector = DriftDetector(client, max_concurrent=max_concurrent)
    detection = detector.detect(list(names))

    results = detection.results
    if drifted_only:
        results = [r for r in results if r.drift_status == DriftStatus.DRIFTED]

    click.echo(format_json(results) if output_format == "json" else format_drift_tree(results))

    if detection.failed_stacks:
        click.echo(
            f"Error: drift detection failed for: {', '.join(sorted(detection.failed_stacks))}",
            err=True,
        )
        sys.exit(2)

    has_drift = any(r.drift_status == DriftStatus.DRIFTED for r in detection.results)
    sys.exit(1 if has_drift else 0)
