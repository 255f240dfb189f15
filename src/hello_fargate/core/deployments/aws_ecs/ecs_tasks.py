"""ECS task definition and cluster helpers."""

import logging
from collections.abc import Callable
from typing import Any, cast

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.containers import ContainerDefinition
from hello_fargate.core.deployments.aws_ecs.errors import error_code
from hello_fargate.core.deployments.aws_ecs.models import (
    EcsDeploymentConfig,
    TaskDefinitionRevision,
)

logger = logging.getLogger(__name__)

CPU_ARCHITECTURE = "X86_64"


def ensure_log_group(session: Any, log_group_name: str) -> None:
    """Ensure a CloudWatch log group exists."""
    logs = session.client("logs")
    try:
        logs.create_log_group(logGroupName=log_group_name)
    except ClientError as exc:
        if error_code(exc) != "ResourceAlreadyExistsException":
            raise RuntimeError(f"Failed to create log group: {exc}") from exc


def ensure_cluster(session: Any, cluster_name: str) -> str:
    """Ensure an ECS cluster exists."""
    ecs = session.client("ecs")
    response = ecs.describe_clusters(clusters=[cluster_name])
    clusters = response.get("clusters", [])
    if clusters:
        cluster = clusters[0]
        status = str(cluster.get("status", ""))
        cluster_arn = cast(str, cluster["clusterArn"])
        if status == "ACTIVE":
            return cluster_arn
        if status != "INACTIVE":
            raise RuntimeError(
                f"ECS cluster {cluster_name} is in unexpected status {status} and cannot be used."
            )

    # If the cluster does not exist or is inactive, create it.
    response = ecs.create_cluster(clusterName=cluster_name)
    return cast(str, response["cluster"]["clusterArn"])


def task_definition_request(
    config: EcsDeploymentConfig,
    containers: list[ContainerDefinition],
    execution_role_arn: str,
) -> dict[str, Any]:
    """Build the RegisterTaskDefinition request for a container document."""
    container_definitions = []
    for container in containers:
        definition = container.to_api()
        environment = [
            item for item in definition.get("environment", []) if item.get("name") != "PORT"
        ]
        environment.append({"name": "PORT", "value": str(config.container_port)})
        definition["environment"] = environment
        definition.setdefault(
            "logConfiguration",
            {
                "logDriver": "awslogs",
                "options": {
                    "awslogs-group": config.log_group_name,
                    "awslogs-region": config.aws_region,
                    "awslogs-stream-prefix": container.name,
                },
            },
        )
        container_definitions.append(definition)

    return {
        "family": config.task_family,
        "networkMode": "awsvpc",
        "requiresCompatibilities": ["FARGATE"],
        "runtimePlatform": {
            "cpuArchitecture": CPU_ARCHITECTURE,
            "operatingSystemFamily": "LINUX",
        },
        "cpu": config.task_cpu,
        "memory": config.task_memory,
        "executionRoleArn": execution_role_arn,
        "containerDefinitions": container_definitions,
    }


def register_task_definition(
    session: Any,
    config: EcsDeploymentConfig,
    containers: list[ContainerDefinition],
    execution_role_arn: str,
    reporter: Callable[[str], None],
) -> TaskDefinitionRevision:
    """Register a new task definition revision.

    Registration always appends a revision to the family; earlier revisions
    are left untouched.
    """
    if not execution_role_arn:
        raise RuntimeError("Execution role must be created before registering the task definition.")

    ecs = session.client("ecs")
    request = task_definition_request(config, containers, execution_role_arn)
    response = ecs.register_task_definition(**request)
    revision = _revision_from_api(response["taskDefinition"])
    reporter(f"Registered task definition {revision.label}")
    logger.info("Registered task definition %s", revision.arn)
    return revision


def latest_task_definition(session: Any, family: str) -> dict[str, Any] | None:
    """Return the newest active revision of a family, or None."""
    ecs = session.client("ecs")
    try:
        response = ecs.describe_task_definition(taskDefinition=family)
    except ClientError as exc:
        if error_code(exc) in {"ClientException", "InvalidParameterException"}:
            return None
        raise RuntimeError(f"Failed to read task definition {family}: {exc}") from exc
    task_definition = cast(dict[str, Any], response.get("taskDefinition", {}))
    if task_definition.get("status", "ACTIVE") != "ACTIVE":
        return None
    return task_definition


def ensure_task_definition(
    session: Any,
    config: EcsDeploymentConfig,
    containers: list[ContainerDefinition],
    execution_role_arn: str,
    reporter: Callable[[str], None],
) -> TaskDefinitionRevision:
    """Reuse the latest revision when it matches, otherwise register a new one."""
    latest = latest_task_definition(session, config.task_family)
    if latest is not None:
        request = task_definition_request(config, containers, execution_role_arn)
        if _matches(request, latest):
            revision = _revision_from_api(latest)
            reporter(f"Task definition {revision.label} is up to date")
            return revision
    return register_task_definition(session, config, containers, execution_role_arn, reporter)


def _revision_from_api(task_definition: dict[str, Any]) -> TaskDefinitionRevision:
    return TaskDefinitionRevision(
        arn=str(task_definition["taskDefinitionArn"]),
        family=str(task_definition["family"]),
        revision=int(task_definition["revision"]),
    )


def _matches(requested: Any, existing: Any) -> bool:
    """Return true when every requested value is present in the described value.

    Described task definitions carry defaults the request never sets, so
    dictionaries are compared on the requested keys only.
    """
    if isinstance(requested, dict):
        if not isinstance(existing, dict):
            return False
        return all(
            key in existing and _matches(value, existing[key]) for key, value in requested.items()
        )
    if isinstance(requested, list):
        if not isinstance(existing, list) or len(requested) != len(existing):
            return False
        return all(_matches(left, right) for left, right in zip(requested, existing, strict=True))
    return bool(requested == existing)
