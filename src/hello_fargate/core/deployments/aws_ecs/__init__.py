"""AWS ECS deployment helpers."""

from hello_fargate.core.deployments.aws_ecs.cleanup import cleanup_resources
from hello_fargate.core.deployments.aws_ecs.containers import (
    ContainerDefinition,
    PortMapping,
    default_container_definitions,
    load_container_definitions,
    render_container_definitions,
)
from hello_fargate.core.deployments.aws_ecs.ecr import delete_repository, ensure_repository
from hello_fargate.core.deployments.aws_ecs.ecs_services import (
    describe_service,
    ensure_service,
    update_service,
    wait_for_service_stable,
)
from hello_fargate.core.deployments.aws_ecs.ecs_tasks import (
    ensure_cluster,
    ensure_log_group,
    ensure_task_definition,
    latest_task_definition,
    register_task_definition,
)
from hello_fargate.core.deployments.aws_ecs.errors import (
    AuthorizationError,
    ConfigurationConflictError,
    ContainerDocumentError,
    DeploymentError,
    PipelineError,
    RolloutFailedError,
    TrustPolicyMismatchError,
)
from hello_fargate.core.deployments.aws_ecs.iam import ensure_execution_role
from hello_fargate.core.deployments.aws_ecs.models import (
    EcsDeploymentConfig,
    NetworkOutputs,
    PipelineOptions,
    ProvisioningOutputs,
    SecurityGroupInfo,
    ServicePhase,
    ServiceSnapshot,
    TaskDefinitionRevision,
)
from hello_fargate.core.deployments.aws_ecs.network import ensure_network, validate_cidrs
from hello_fargate.core.deployments.aws_ecs.pipeline import (
    PipelineResult,
    run_pipeline,
    should_run,
)
from hello_fargate.core.deployments.aws_ecs.provision import provision
from hello_fargate.core.deployments.aws_ecs.security_groups import ensure_security_group
from hello_fargate.core.deployments.aws_ecs.session import create_session, get_identity
from hello_fargate.core.deployments.aws_ecs.status import (
    check_deployment,
    find_service_endpoint,
    smoke_check,
)

__all__ = [
    "AuthorizationError",
    "ConfigurationConflictError",
    "ContainerDefinition",
    "ContainerDocumentError",
    "DeploymentError",
    "EcsDeploymentConfig",
    "NetworkOutputs",
    "PipelineError",
    "PipelineOptions",
    "PipelineResult",
    "PortMapping",
    "ProvisioningOutputs",
    "RolloutFailedError",
    "SecurityGroupInfo",
    "ServicePhase",
    "ServiceSnapshot",
    "TaskDefinitionRevision",
    "TrustPolicyMismatchError",
    "check_deployment",
    "cleanup_resources",
    "create_session",
    "default_container_definitions",
    "delete_repository",
    "describe_service",
    "ensure_cluster",
    "ensure_execution_role",
    "ensure_log_group",
    "ensure_network",
    "ensure_repository",
    "ensure_security_group",
    "ensure_service",
    "ensure_task_definition",
    "find_service_endpoint",
    "get_identity",
    "latest_task_definition",
    "load_container_definitions",
    "provision",
    "register_task_definition",
    "render_container_definitions",
    "run_pipeline",
    "should_run",
    "smoke_check",
    "update_service",
    "validate_cidrs",
    "wait_for_service_stable",
]
