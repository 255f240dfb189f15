"""CLI entrypoint for hello-fargate."""

import logging
import os
import sys
from collections.abc import Callable

import click
import questionary
from rich.table import Table

from hello_fargate.cli.errors import report_error
from hello_fargate.cli.state import DeploymentState, load_state, record_outputs, save_state
from hello_fargate.cli.ui import console, report_step
from hello_fargate.core.deployments.aws_ecs import (
    check_deployment,
    cleanup_resources,
    create_session,
    find_service_endpoint,
    provision,
    run_pipeline,
    should_run,
    smoke_check,
)
from hello_fargate.core.settings import (
    ecs_config_from_settings,
    get_settings,
    pipeline_options_from_settings,
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Provision and deploy hello-fargate on AWS ECS.

    Args:
        verbose: Whether to enable debug logging.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    if verbose:
        logging.getLogger("hello_fargate").setLevel(logging.DEBUG)


@cli.command("provision")
@click.option("--wait/--no-wait", default=True, help="Wait for the service to become stable.")
@click.option("--image", default=None, help="Image reference to run instead of the registry image.")
def provision_command(wait: bool, image: str | None) -> None:
    """Create or converge the network, cluster, task definition and service."""

    def action() -> None:
        settings = get_settings()
        if image:
            settings.ecs.image = image
        config = ecs_config_from_settings(settings)
        session = create_session(config)
        outputs = provision(session, config, report_step, wait=wait)
        record_outputs(outputs)
        _print_mapping("Provisioning outputs", outputs.as_dict())

    _run_action(action)


@cli.command("deploy")
@click.option("--force", is_flag=True, help="Run even when not triggered by a push to the branch.")
@click.option("--commit-sha", envvar="GITHUB_SHA", default=None, help="Commit being deployed.")
def deploy_command(force: bool, commit_sha: str | None) -> None:
    """Build, push and roll out a new image."""

    def action() -> None:
        settings = get_settings()
        event_name = os.environ.get("GITHUB_EVENT_NAME")
        ref = os.environ.get("GITHUB_REF")
        if not force and not should_run(event_name, ref, settings.pipeline.branch):
            console.print(
                f"[yellow]Skipping deploy: not a push to {settings.pipeline.branch} "
                f"(event={event_name or '-'}, ref={ref or '-'}).[/yellow]"
            )
            return

        config = ecs_config_from_settings(settings)
        options = pipeline_options_from_settings(settings, commit_sha=_short_sha(commit_sha))
        session = create_session(config)
        result = run_pipeline(session, config, options, report_step)

        state = load_state()
        state.image = result.image
        label = "-"
        if result.revision is not None:
            state.task_definition_arn = result.revision.arn
            label = result.revision.label
        save_state(state)
        console.print(f"[green]Deployed {result.image} as {label}.[/green]")

    _run_action(action)


@cli.command("status")
def status_command() -> None:
    """Show the status of every deployment resource."""

    def action() -> None:
        config = ecs_config_from_settings(get_settings())
        results = check_deployment(create_session(config), config)
        table = Table(title="Deployment resources", show_header=True, header_style="bold cyan")
        table.add_column("Resource", style="white", no_wrap=True)
        table.add_column("Status", style="white")
        for name, status in results.items():
            table.add_row(name, _style_status(status))
        console.print(table)

    _run_action(action)


@cli.command("outputs")
def outputs_command() -> None:
    """Print the identifiers recorded by the last provisioning run."""
    _run_action(lambda: _print_mapping("Provisioning outputs", load_state().outputs()))


@cli.command("smoke")
@click.option("--url", default=None, help="Endpoint to check instead of the service's task.")
def smoke_command(url: str | None) -> None:
    """Request the deployed endpoint and check the greeting."""

    def action() -> None:
        target = url
        if target is None:
            config = ecs_config_from_settings(get_settings())
            target = find_service_endpoint(create_session(config), config)
        if target is None:
            raise RuntimeError("No running task with a public IP was found.")
        ok, message = smoke_check(target)
        if not ok:
            raise RuntimeError(message)
        console.print(f"[green]{message}[/green]")

    _run_action(action)


@cli.command("destroy")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation.")
def destroy_command(yes: bool) -> None:
    """Tear down every deployment resource."""

    def action() -> None:
        config = ecs_config_from_settings(get_settings())
        if not yes:
            confirmed = questionary.confirm(
                f"Delete all resources of {config.project_name} in {config.aws_region}?",
                default=False,
            ).ask()
            if not confirmed:
                console.print("[dim]Teardown cancelled.[/dim]")
                return
        cleanup_resources(create_session(config), config, report_step)
        save_state(DeploymentState())
        console.print("[green]Teardown complete.[/green]")

    _run_action(action)


@cli.command("serve")
@click.option("--port", type=int, default=None, help="Port to listen on (default: $PORT or 3000).")
def serve_command(port: int | None) -> None:
    """Run the application locally."""
    from hello_fargate.app import serve

    # The group configures WARNING for the deployment commands.
    app_logger = logging.getLogger("hello_fargate")
    if app_logger.getEffectiveLevel() > logging.INFO:
        app_logger.setLevel(logging.INFO)
    serve(port)


def main() -> None:
    """Run the CLI."""
    cli()


def _run_action(action: Callable[[], None]) -> None:
    """Run a command action, reporting failures and exiting non-zero."""
    try:
        action()
    except Exception as exc:  # noqa: BLE001
        report_error(exc)
        sys.exit(1)


def _short_sha(commit_sha: str | None) -> str | None:
    if not commit_sha:
        return None
    return commit_sha[:7]


def _print_mapping(title: str, values: dict[str, str]) -> None:
    if not values:
        console.print("[yellow]Nothing recorded yet. Run provisioning first.[/yellow]")
        return
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Output", style="white", no_wrap=True)
    table.add_column("Value", style="bright_white")
    for key, value in values.items():
        table.add_row(key, value)
    console.print(table)


def _style_status(status: str) -> str:
    """Return colourised status text for terminal output."""
    if status.startswith("present"):
        return f"[green]{status}[/green]"
    if status == "not set":
        return "[yellow]not set[/yellow]"
    if status.startswith("missing") or status.startswith("error"):
        return f"[red]{status}[/red]"
    if status.startswith("status "):
        return f"[yellow]{status}[/yellow]"
    return status


if __name__ == "__main__":
    main()
