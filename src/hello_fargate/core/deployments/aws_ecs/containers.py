"""Container definition documents for the task definition."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from hello_fargate.core.deployments.aws_ecs.errors import ContainerDocumentError


class PortMapping(BaseModel):
    """Container to host port mapping."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    container_port: int = Field(alias="containerPort", ge=1, le=65535)
    host_port: int | None = Field(default=None, alias="hostPort", ge=1, le=65535)
    protocol: str = "tcp"

    @model_validator(mode="after")
    def _host_port_matches(self) -> "PortMapping":
        # awsvpc networking requires identical container and host ports.
        if self.host_port is None:
            self.host_port = self.container_port
        if self.host_port != self.container_port:
            raise ValueError("hostPort must equal containerPort for awsvpc tasks")
        return self


class ContainerDefinition(BaseModel):
    """One entry of the container specification document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(min_length=1)
    image: str = Field(min_length=1)
    essential: bool = True
    port_mappings: list[PortMapping] = Field(default_factory=list, alias="portMappings")

    def to_api(self) -> dict[str, Any]:
        """Return the ECS API representation of this container."""
        return self.model_dump(by_alias=True, exclude_none=True)


def load_container_definitions(path: Path) -> list[ContainerDefinition]:
    """Load and validate a container definition document.

    Args:
        path: JSON file holding an ordered list of container descriptors.

    Returns:
        The validated container definitions, in document order.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ContainerDocumentError(f"Cannot read container definitions {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ContainerDocumentError(f"Invalid container definitions {path}: {exc}") from exc
    return parse_container_definitions(data)


def parse_container_definitions(data: Any) -> list[ContainerDefinition]:
    """Validate raw container descriptors."""
    if not isinstance(data, list) or not data:
        raise ContainerDocumentError("Container definitions must be a non-empty JSON list.")

    try:
        containers = [ContainerDefinition.model_validate(item) for item in data]
    except ValidationError as exc:
        raise ContainerDocumentError(f"Invalid container definition: {exc}") from exc

    names = [container.name for container in containers]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ContainerDocumentError(f"Duplicate container names: {', '.join(duplicates)}")
    if not any(container.essential for container in containers):
        raise ContainerDocumentError("At least one container must be essential.")
    return containers


def default_container_definitions(name: str, image: str, port: int) -> list[ContainerDefinition]:
    """Return the single-container document used when no file is configured."""
    return [
        ContainerDefinition(
            name=name,
            image=image,
            essential=True,
            port_mappings=[PortMapping(container_port=port, host_port=port)],
        )
    ]


def render_container_definitions(
    containers: list[ContainerDefinition],
    container_name: str,
    image: str,
    container_port: int | None = None,
) -> list[ContainerDefinition]:
    """Return a copy of the document with one container's image replaced.

    When ``container_port`` is given, the named container's port mappings are
    replaced by a single mapping on that port, so the task exposes the port
    the application listens on.
    """
    if not any(container.name == container_name for container in containers):
        raise ContainerDocumentError(
            f"Container {container_name} is not defined in the container definitions."
        )

    update: dict[str, Any] = {"image": image}
    if container_port is not None:
        protocols = [mapping.protocol for mapping in _port_mappings(containers, container_name)]
        update["port_mappings"] = [
            PortMapping(
                container_port=container_port,
                host_port=container_port,
                protocol=protocols[0] if protocols else "tcp",
            )
        ]
    return [
        container.model_copy(update=update, deep=True)
        if container.name == container_name
        else container.model_copy(deep=True)
        for container in containers
    ]


def _port_mappings(containers: list[ContainerDefinition], name: str) -> list[PortMapping]:
    """Return the port mappings of the named container."""
    for container in containers:
        if container.name == name:
            return container.port_mappings
    return []
