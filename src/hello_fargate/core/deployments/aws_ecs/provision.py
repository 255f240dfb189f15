"""Provisioning entrypoint for ECS."""

import logging
from collections.abc import Callable
from typing import Any

from hello_fargate.core.deployments.aws_ecs.containers import (
    ContainerDefinition,
    default_container_definitions,
    load_container_definitions,
    render_container_definitions,
)
from hello_fargate.core.deployments.aws_ecs.ecs_services import (
    ensure_service,
    wait_for_service_stable,
)
from hello_fargate.core.deployments.aws_ecs.ecs_tasks import (
    ensure_cluster,
    ensure_log_group,
    ensure_task_definition,
)
from hello_fargate.core.deployments.aws_ecs.iam import ensure_execution_role
from hello_fargate.core.deployments.aws_ecs.images import repository_uri
from hello_fargate.core.deployments.aws_ecs.models import (
    EcsDeploymentConfig,
    ProvisioningOutputs,
)
from hello_fargate.core.deployments.aws_ecs.network import ensure_network
from hello_fargate.core.deployments.aws_ecs.session import get_identity

logger = logging.getLogger(__name__)


def provision(
    session: Any,
    config: EcsDeploymentConfig,
    reporter: Callable[[str], None],
    wait: bool = False,
) -> ProvisioningOutputs:
    """Converge every deployment resource in dependency order.

    Each step completes before the next begins: network, cluster, log
    group, execution role, task definition, service. Re-running with
    unchanged inputs reuses every resource.
    """
    reporter("Checking AWS credentials")
    identity = get_identity(session)
    reporter(f"Using AWS account {identity['Account']} ({identity['Arn']})")

    network = ensure_network(session, config, reporter)

    reporter(f"Ensuring ECS cluster {config.cluster_name}")
    cluster_arn = ensure_cluster(session, config.cluster_name)

    reporter(f"Ensuring CloudWatch log group {config.log_group_name}")
    ensure_log_group(session, config.log_group_name)

    role = ensure_execution_role(session, config.execution_role_name, reporter)

    image = resolve_image(session, config)
    containers = resolve_containers(config, image)
    revision = ensure_task_definition(session, config, containers, role.arn, reporter)

    service_arn = ensure_service(session, config, revision.arn, network, reporter)
    if wait:
        wait_for_service_stable(
            session,
            config.cluster_name,
            config.service_name,
            revision.arn,
            reporter,
            timeout_seconds=config.stability_timeout_seconds,
            poll_interval_seconds=config.poll_interval_seconds,
        )

    logger.info("Provisioning complete for %s", config.project_name)
    return ProvisioningOutputs(
        vpc_id=network.vpc_id,
        subnet_id=network.subnet_id,
        cluster_arn=cluster_arn,
        security_group_id=network.security_group_id,
        execution_role_arn=role.arn,
        task_definition_arn=revision.arn,
        service_arn=service_arn,
    )


def resolve_image(session: Any, config: EcsDeploymentConfig) -> str:
    """Return the configured image reference, or the registry image at the configured tag."""
    if config.image:
        return config.image
    return f"{repository_uri(session, config)}:{config.image_tag}"


def resolve_containers(config: EcsDeploymentConfig, image: str) -> list[ContainerDefinition]:
    """Load the container document and point the application container at an image."""
    if config.container_definitions_path is None:
        return default_container_definitions(config.container_name, image, config.container_port)
    containers = load_container_definitions(config.container_definitions_path)
    return render_container_definitions(
        containers, config.container_name, image, container_port=config.container_port
    )
