"""ECS service helpers: create, roll forward, and wait for stability."""

import logging
import time
from collections.abc import Callable
from typing import Any, cast

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.errors import RolloutFailedError, error_code
from hello_fargate.core.deployments.aws_ecs.models import (
    DeploymentInfo,
    EcsDeploymentConfig,
    NetworkOutputs,
    ServicePhase,
    ServiceSnapshot,
)

logger = logging.getLogger(__name__)


def describe_service(session: Any, cluster_name: str, service_name: str) -> ServiceSnapshot | None:
    """Return the current state of a service, or None if it does not exist."""
    ecs = session.client("ecs")
    try:
        response = ecs.describe_services(cluster=cluster_name, services=[service_name])
    except ClientError as exc:
        if error_code(exc) == "ClusterNotFoundException":
            return None
        raise RuntimeError(f"Failed to describe service {service_name}: {exc}") from exc

    services = response.get("services", [])
    if not services:
        return None
    return _snapshot_from_api(services[0])


def ensure_service(
    session: Any,
    config: EcsDeploymentConfig,
    task_definition_arn: str,
    network: NetworkOutputs,
    reporter: Callable[[str], None],
) -> str:
    """Create the service, or roll an existing one forward to a revision.

    Returns:
        The service ARN.
    """
    ecs = session.client("ecs")
    current = describe_service(session, config.cluster_name, config.service_name)

    if current is None or current.phase == ServicePhase.INACTIVE:
        reporter(f"Creating ECS service {config.service_name}")
        response = ecs.create_service(
            cluster=config.cluster_name,
            serviceName=config.service_name,
            taskDefinition=task_definition_arn,
            desiredCount=config.desired_count,
            launchType="FARGATE",
            networkConfiguration={
                "awsvpcConfiguration": {
                    "subnets": network.subnet_ids,
                    "securityGroups": [network.security_group_id],
                    "assignPublicIp": "ENABLED",
                }
            },
        )
        return cast(str, response["service"]["serviceArn"])

    if (
        current.task_definition_arn == task_definition_arn
        and current.desired_count == config.desired_count
    ):
        reporter(f"ECS service {config.service_name} already runs {task_definition_arn}")
        return current.service_arn

    return update_service(session, config, task_definition_arn, reporter)


def update_service(
    session: Any,
    config: EcsDeploymentConfig,
    task_definition_arn: str,
    reporter: Callable[[str], None],
) -> str:
    """Point an existing service at a task definition revision.

    ECS replaces running tasks with tasks of the new revision; old tasks
    drain once the new ones are healthy.
    """
    ecs = session.client("ecs")
    reporter(f"Updating ECS service {config.service_name} to {task_definition_arn}")
    try:
        response = ecs.update_service(
            cluster=config.cluster_name,
            service=config.service_name,
            taskDefinition=task_definition_arn,
            desiredCount=config.desired_count,
        )
    except ClientError as exc:
        if error_code(exc) in {"ServiceNotFoundException", "ServiceNotActiveException"}:
            raise RuntimeError(
                f"ECS service {config.service_name} does not exist. Run provisioning first."
            ) from exc
        raise RuntimeError(f"Failed to update service {config.service_name}: {exc}") from exc
    return cast(str, response["service"]["serviceArn"])


def wait_for_service_stable(
    session: Any,
    cluster_name: str,
    service_name: str,
    task_definition_arn: str,
    reporter: Callable[[str], None],
    timeout_seconds: int = 600,
    poll_interval_seconds: int = 15,
) -> ServiceSnapshot:
    """Block until the service runs its desired count at the target revision.

    Nothing is reverted on failure: tasks of the previous revision keep
    serving until a newer revision is rolled out.

    Raises:
        RolloutFailedError: When the rollout fails or the timeout elapses.
    """
    deadline = time.monotonic() + timeout_seconds
    last_phase: ServicePhase | None = None

    while True:
        snapshot = describe_service(session, cluster_name, service_name)
        if snapshot is None:
            raise RolloutFailedError(f"ECS service {service_name} was not found.")

        if snapshot.phase != last_phase:
            reporter(
                f"Service {service_name} is {snapshot.phase.value} "
                f"({snapshot.running_count}/{snapshot.desired_count} running)"
            )
            last_phase = snapshot.phase

        if snapshot.is_stable_at(task_definition_arn):
            reporter(f"Service {service_name} is stable")
            return snapshot

        if snapshot.phase == ServicePhase.FAILED:
            raise RolloutFailedError(
                f"Rollout of {task_definition_arn} to {service_name} failed.",
                snapshot,
            )

        if time.monotonic() >= deadline:
            raise RolloutFailedError(
                f"Service {service_name} did not become stable at {task_definition_arn} "
                f"within {timeout_seconds} seconds.",
                snapshot,
            )

        logger.debug("Service %s not stable yet: %s", service_name, snapshot)
        time.sleep(poll_interval_seconds)


def _snapshot_from_api(service: dict[str, Any]) -> ServiceSnapshot:
    deployments = tuple(
        DeploymentInfo(
            deployment_id=str(item.get("id", "")),
            status=str(item.get("status", "")),
            task_definition_arn=str(item.get("taskDefinition", "")),
            desired_count=int(item.get("desiredCount", 0)),
            running_count=int(item.get("runningCount", 0)),
            rollout_state=item.get("rolloutState"),
        )
        for item in service.get("deployments", [])
    )
    return ServiceSnapshot(
        service_name=str(service.get("serviceName", "")),
        service_arn=str(service.get("serviceArn", "")),
        status=str(service.get("status", "")),
        desired_count=int(service.get("desiredCount", 0)),
        running_count=int(service.get("runningCount", 0)),
        pending_count=int(service.get("pendingCount", 0)),
        task_definition_arn=str(service.get("taskDefinition", "")),
        deployments=deployments,
    )
