"""Runtime settings for provisioning, deployment and the application."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hello_fargate.config.paths import env_path
from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig, PipelineOptions

ENV_FILE_PATH = str(env_path())


class AWSSettings(BaseSettings):
    """AWS account access."""

    model_config = SettingsConfigDict(
        env_prefix="AWS_",
        env_file=ENV_FILE_PATH,
        env_ignore_empty=True,
        extra="ignore",
    )

    region: str = Field(default="us-east-1", description="AWS region")
    profile: str | None = Field(default=None, description="Named AWS profile")


class EcsSettings(BaseSettings):
    """Network, cluster, task and service parameters."""

    model_config = SettingsConfigDict(
        env_prefix="ECS_",
        env_file=ENV_FILE_PATH,
        env_ignore_empty=True,
        extra="ignore",
    )

    project_name: str = "hello-fargate"
    cluster_name: str = "hello-fargate-cluster"
    service_name: str = "hello-fargate-service"
    task_family: str = "hello-fargate-task"
    task_cpu: str = Field(default="256", description="Task CPU units")
    task_memory: str = Field(default="512", description="Task memory in MiB")
    container_name: str = "hello-fargate"
    container_port: int = Field(default=80, ge=1, le=65535)
    desired_count: int = Field(default=1, ge=0)
    vpc_cidr: str = "10.0.0.0/16"
    subnet_cidr: str = "10.0.1.0/24"
    log_group_name: str = "/ecs/hello-fargate"
    execution_role_name: str = "hello-fargate-task-execution"
    image: str | None = Field(
        default=None,
        description="Full image reference; defaults to the registry repository at the image tag",
    )
    container_definitions_path: Path | None = Field(
        default=None,
        description="JSON container definition document",
    )
    stability_timeout_seconds: int = Field(default=600, ge=0)
    poll_interval_seconds: int = Field(default=15, ge=0)


class RegistrySettings(BaseSettings):
    """Container registry used by the pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="REGISTRY_",
        env_file=ENV_FILE_PATH,
        env_ignore_empty=True,
        extra="ignore",
    )

    # Unset means the account's ECR registry.
    url: str | None = Field(default=None, description="Registry host, e.g. docker.io")
    username: str | None = Field(default=None, description="Registry username")
    password: str | None = Field(default=None, description="Registry password or token")
    repository: str = Field(default="hello-fargate", description="Image repository name")


class PipelineSettings(BaseSettings):
    """Build-and-deploy pipeline options."""

    model_config = SettingsConfigDict(
        env_prefix="PIPELINE_",
        env_file=ENV_FILE_PATH,
        env_ignore_empty=True,
        extra="ignore",
    )

    branch: str = "main"
    image_tag: str = "latest"
    source_dir: Path = Path(".")
    pin_commit_tag: bool = False


class AppSettings(BaseSettings):
    """Application container settings."""

    model_config = SettingsConfigDict(extra="ignore")

    port: int = Field(default=3000, alias="PORT", ge=1, le=65535)


class DeploymentSettings(BaseSettings):
    """All deployment settings."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE_PATH,
        env_ignore_empty=True,
        extra="ignore",
    )

    aws: AWSSettings
    ecs: EcsSettings
    registry: RegistrySettings
    pipeline: PipelineSettings


def get_settings() -> DeploymentSettings:
    """Load and return the deployment configuration.

    The sub-configs are automatically populated from the environment
    thanks to pydantic-settings.
    """
    return DeploymentSettings(
        aws=AWSSettings(),
        ecs=EcsSettings(),
        registry=RegistrySettings(),
        pipeline=PipelineSettings(),
    )


def ecs_config_from_settings(settings: DeploymentSettings) -> EcsDeploymentConfig:
    """Build an ECS deployment config from settings."""
    return EcsDeploymentConfig(
        aws_region=settings.aws.region,
        aws_profile=settings.aws.profile,
        project_name=settings.ecs.project_name,
        cluster_name=settings.ecs.cluster_name,
        service_name=settings.ecs.service_name,
        task_family=settings.ecs.task_family,
        task_cpu=settings.ecs.task_cpu,
        task_memory=settings.ecs.task_memory,
        container_name=settings.ecs.container_name,
        container_port=settings.ecs.container_port,
        desired_count=settings.ecs.desired_count,
        vpc_cidr=settings.ecs.vpc_cidr,
        subnet_cidr=settings.ecs.subnet_cidr,
        log_group_name=settings.ecs.log_group_name,
        execution_role_name=settings.ecs.execution_role_name,
        image=settings.ecs.image,
        image_repository=settings.registry.repository,
        image_tag=settings.pipeline.image_tag,
        registry_url=settings.registry.url,
        registry_username=settings.registry.username,
        registry_password=settings.registry.password,
        container_definitions_path=settings.ecs.container_definitions_path,
        stability_timeout_seconds=settings.ecs.stability_timeout_seconds,
        poll_interval_seconds=settings.ecs.poll_interval_seconds,
    )


def pipeline_options_from_settings(
    settings: DeploymentSettings,
    commit_sha: str | None = None,
) -> PipelineOptions:
    """Build pipeline options from settings."""
    return PipelineOptions(
        branch=settings.pipeline.branch,
        source_dir=settings.pipeline.source_dir,
        pin_commit_tag=settings.pipeline.pin_commit_tag,
        commit_sha=commit_sha,
    )
