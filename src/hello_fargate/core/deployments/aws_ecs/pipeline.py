"""Build-and-deploy pipeline for ECS."""

import logging
import shutil
import subprocess  # nosec B404
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from hello_fargate.core.deployments.aws_ecs.containers import ContainerDefinition
from hello_fargate.core.deployments.aws_ecs.ecs_services import (
    update_service,
    wait_for_service_stable,
)
from hello_fargate.core.deployments.aws_ecs.ecs_tasks import (
    latest_task_definition,
    register_task_definition,
)
from hello_fargate.core.deployments.aws_ecs.errors import PipelineError
from hello_fargate.core.deployments.aws_ecs.images import (
    build_image,
    push_image,
    registry_login,
    repository_uri,
)
from hello_fargate.core.deployments.aws_ecs.models import (
    EcsDeploymentConfig,
    PipelineOptions,
    ServiceSnapshot,
    TaskDefinitionRevision,
)
from hello_fargate.core.deployments.aws_ecs.provision import resolve_containers

logger = logging.getLogger(__name__)

STEP_NAMES = (
    "checkout",
    "build",
    "login",
    "push",
    "render",
    "register",
    "update-service",
    "wait-for-stable",
)


@dataclass(frozen=True)
class PipelineStep:
    """A named pipeline gate."""

    name: str
    action: Callable[[], None]


@dataclass
class PipelineResult:
    """Values produced by a pipeline run."""

    commit_sha: str | None = None
    image: str | None = None
    pushed_images: list[str] = field(default_factory=list)
    containers: list[ContainerDefinition] = field(default_factory=list)
    revision: TaskDefinitionRevision | None = None
    snapshot: ServiceSnapshot | None = None
    completed_steps: list[str] = field(default_factory=list)


def should_run(event_name: str | None, ref: str | None, branch: str) -> bool:
    """Return true only for a push to the deployment branch."""
    return event_name == "push" and ref == f"refs/heads/{branch}"


def run_pipeline(
    session: Any,
    config: EcsDeploymentConfig,
    options: PipelineOptions,
    reporter: Callable[[str], None],
) -> PipelineResult:
    """Build, push and roll out a new image.

    Steps run in order and each is a hard gate: the first failure raises
    PipelineError and no later step runs. A failed rollout leaves the
    service on whatever revision ECS was last able to run.
    """
    result = PipelineResult()
    for step in build_steps(session, config, options, reporter, result):
        reporter(f"[{step.name}]")
        try:
            step.action()
        except Exception as exc:  # noqa: BLE001
            logger.error("Pipeline step %s failed: %s", step.name, exc)
            raise PipelineError(step.name, exc) from exc
        result.completed_steps.append(step.name)
    return result


def build_steps(
    session: Any,
    config: EcsDeploymentConfig,
    options: PipelineOptions,
    reporter: Callable[[str], None],
    result: PipelineResult,
) -> list[PipelineStep]:
    """Return the pipeline steps bound to a run's shared result."""

    def checkout() -> None:
        if not options.source_dir.is_dir():
            raise RuntimeError(f"Source directory {options.source_dir} does not exist.")
        result.commit_sha = options.commit_sha or _git_commit(options.source_dir)
        reporter(f"Source {options.source_dir} at {result.commit_sha or 'unknown commit'}")

    def build() -> None:
        uri = repository_uri(session, config)
        mutable = f"{uri}:{config.image_tag}"
        pinned = f"{uri}:{result.commit_sha}" if result.commit_sha else None
        result.pushed_images = [mutable] + ([pinned] if pinned else [])
        result.image = pinned if options.pin_commit_tag and pinned else mutable
        build_image(options.source_dir, mutable, reporter, extra_tags=result.pushed_images[1:])

    def login() -> None:
        registry_login(session, config, reporter)

    def push() -> None:
        for image in result.pushed_images:
            push_image(image, reporter)

    def render() -> None:
        if result.image is None:
            raise RuntimeError("No image was built.")
        result.containers = resolve_containers(config, result.image)

    def register() -> None:
        latest = latest_task_definition(session, config.task_family)
        if latest is None or not latest.get("executionRoleArn"):
            raise RuntimeError(
                f"No task definition found for family {config.task_family}. "
                "Run provisioning first."
            )
        result.revision = register_task_definition(
            session,
            config,
            result.containers,
            str(latest["executionRoleArn"]),
            reporter,
        )

    def update() -> None:
        if result.revision is None:
            raise RuntimeError("No task definition was registered.")
        update_service(session, config, result.revision.arn, reporter)

    def wait() -> None:
        if result.revision is None:
            raise RuntimeError("No task definition was registered.")
        result.snapshot = wait_for_service_stable(
            session,
            config.cluster_name,
            config.service_name,
            result.revision.arn,
            reporter,
            timeout_seconds=config.stability_timeout_seconds,
            poll_interval_seconds=config.poll_interval_seconds,
        )

    actions = (checkout, build, login, push, render, register, update, wait)
    return [PipelineStep(name, action) for name, action in zip(STEP_NAMES, actions, strict=True)]


def _git_commit(source_dir: Path) -> str | None:
    """Return the short commit SHA of a checkout, if it is a git repository."""
    git = shutil.which("git")
    if not git:
        return None
    completed = subprocess.run(  # nosec B603
        [git, "rev-parse", "--short", "HEAD"],
        cwd=source_dir,
        capture_output=True,
        text=True,
        check=False,
    )
    if completed.returncode != 0:
        return None
    return completed.stdout.strip() or None
