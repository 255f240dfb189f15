"""Data models for ECS deployment."""

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path


@dataclass
class EcsDeploymentConfig:
    """Configuration for ECS deployment."""

    aws_region: str
    aws_profile: str | None
    project_name: str
    cluster_name: str
    service_name: str
    task_family: str
    task_cpu: str
    task_memory: str
    container_name: str
    container_port: int
    desired_count: int
    vpc_cidr: str
    subnet_cidr: str
    log_group_name: str
    execution_role_name: str
    image: str | None
    image_repository: str
    image_tag: str
    registry_url: str | None
    registry_username: str | None
    registry_password: str | None
    container_definitions_path: Path | None
    stability_timeout_seconds: int
    poll_interval_seconds: int


@dataclass(frozen=True)
class PipelineOptions:
    """Settings for a single build-and-deploy run."""

    branch: str
    source_dir: Path
    pin_commit_tag: bool = False
    commit_sha: str | None = None


@dataclass
class SecurityGroupInfo:
    """Representation of a security group."""

    group_id: str
    name: str
    description: str
    vpc_id: str


@dataclass
class NetworkOutputs:
    """Identifiers of the provisioned network."""

    vpc_id: str
    subnet_id: str
    security_group_id: str
    internet_gateway_id: str | None = None
    route_table_id: str | None = None

    @property
    def subnet_ids(self) -> list[str]:
        return [self.subnet_id]


@dataclass(frozen=True)
class ExecutionRole:
    """IAM role assumed by ECS to pull images and write logs."""

    name: str
    arn: str


@dataclass(frozen=True)
class TaskDefinitionRevision:
    """A registered, immutable task definition revision."""

    arn: str
    family: str
    revision: int

    @property
    def label(self) -> str:
        return f"{self.family}:{self.revision}"


class ServicePhase(str, Enum):
    """Lifecycle phase of an ECS service."""

    PENDING = "PENDING"
    PROVISIONING = "PROVISIONING"
    ACTIVE = "ACTIVE"
    DRAINING = "DRAINING"
    FAILED = "FAILED"
    INACTIVE = "INACTIVE"


@dataclass(frozen=True)
class DeploymentInfo:
    """One deployment entry of an ECS service."""

    deployment_id: str
    status: str
    task_definition_arn: str
    desired_count: int
    running_count: int
    rollout_state: str | None = None


@dataclass(frozen=True)
class ServiceSnapshot:
    """Observed state of an ECS service at one point in time."""

    service_name: str
    service_arn: str
    status: str
    desired_count: int
    running_count: int
    pending_count: int
    task_definition_arn: str
    deployments: tuple[DeploymentInfo, ...] = ()

    @property
    def primary(self) -> DeploymentInfo | None:
        for deployment in self.deployments:
            if deployment.status == "PRIMARY":
                return deployment
        return None

    @property
    def rollout_state(self) -> str | None:
        primary = self.primary
        return primary.rollout_state if primary else None

    @property
    def phase(self) -> ServicePhase:
        """Derive the service phase from its status and deployments."""
        if self.status == "INACTIVE":
            return ServicePhase.INACTIVE
        if self.status == "DRAINING":
            return ServicePhase.DRAINING
        if not self.deployments:
            return ServicePhase.PENDING
        if self.rollout_state == "FAILED":
            return ServicePhase.FAILED
        if len(self.deployments) > 1:
            return ServicePhase.DRAINING
        if self.running_count < self.desired_count:
            return ServicePhase.PROVISIONING
        return ServicePhase.ACTIVE

    def is_stable_at(self, task_definition_arn: str) -> bool:
        """Return true when all desired tasks run the given revision."""
        primary = self.primary
        if primary is None or len(self.deployments) != 1:
            return False
        if primary.task_definition_arn != task_definition_arn:
            return False
        if primary.rollout_state not in (None, "COMPLETED"):
            return False
        return (
            self.status == "ACTIVE"
            and self.running_count == self.desired_count
            and primary.running_count == self.desired_count
        )


@dataclass
class ProvisioningOutputs:
    """Identifiers exposed once provisioning completes."""

    vpc_id: str
    subnet_id: str
    cluster_arn: str
    security_group_id: str
    execution_role_arn: str
    task_definition_arn: str
    service_arn: str

    def as_dict(self) -> dict[str, str]:
        return asdict(self)
