"""Error reporting helpers for the CLI."""

from hello_fargate.cli.ui import console
from hello_fargate.core.deployments.aws_ecs import (
    ConfigurationConflictError,
    PipelineError,
    RolloutFailedError,
)
from hello_fargate.core.deployments.aws_ecs.errors import (
    is_aws_auth_error,
    is_aws_endpoint_error,
)


def report_error(exc: Exception) -> None:
    """Render deployment errors with actionable guidance.

    Args:
        exc: Raised exception from a deployment action.
    """
    if isinstance(exc, PipelineError):
        console.print(f"[red]Pipeline halted at step '{exc.step}'.[/red]")
        cause = exc.cause
        if isinstance(cause, Exception):
            exc = cause

    if is_aws_auth_error(exc):
        console.print(
            "[red]AWS authentication failed. Your credentials are missing, invalid, "
            "or expired.[/red]"
        )
        console.print(
            "[dim]Set AWS_ACCESS_KEY_ID/AWS_SECRET_ACCESS_KEY or AWS_PROFILE, "
            "or check the registry credentials, and retry.[/dim]"
        )
        return

    if is_aws_endpoint_error(exc):
        console.print("[red]Could not reach AWS endpoint from this environment.[/red]")
        console.print("[dim]Check network connectivity and AWS region configuration.[/dim]")
        return

    if isinstance(exc, ConfigurationConflictError):
        console.print(f"[red]Configuration conflict: {exc}[/red]")
        return

    if isinstance(exc, RolloutFailedError):
        console.print(f"[red]Rollout failed: {exc}[/red]")
        if exc.snapshot is not None:
            console.print(
                f"[dim]Service is {exc.snapshot.phase.value} with "
                f"{exc.snapshot.running_count}/{exc.snapshot.desired_count} tasks running. "
                "Previous tasks keep serving; register a known-good image to recover.[/dim]"
            )
        return

    console.print(f"[red]Deployment failed: {exc}[/red]")
