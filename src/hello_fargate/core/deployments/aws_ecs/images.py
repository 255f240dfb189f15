"""Docker build, registry login and push helpers."""

import base64
import shutil
import subprocess  # nosec B404
from collections.abc import Callable
from pathlib import Path
from typing import Any

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.ecr import ensure_repository
from hello_fargate.core.deployments.aws_ecs.errors import (
    AuthorizationError,
    ConfigurationConflictError,
)
from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig

TARGET_PLATFORM = "linux/amd64"
DOCKER_HUB = "docker.io"


def registry_host(config: EcsDeploymentConfig) -> str | None:
    """Return the external registry images are pushed to.

    Credentials without a registry URL target Docker Hub. None means the
    account's ECR registry.
    """
    if config.registry_url:
        return config.registry_url.rstrip("/")
    if config.registry_username and config.registry_password:
        return DOCKER_HUB
    return None


def repository_uri(session: Any, config: EcsDeploymentConfig) -> str:
    """Return the image repository URI, creating the ECR repository if needed."""
    host = registry_host(config)
    if host:
        return f"{host}/{config.image_repository}"
    return ensure_repository(session, config.image_repository)


def registry_login(
    session: Any,
    config: EcsDeploymentConfig,
    reporter: Callable[[str], None],
) -> None:
    """Authenticate Docker with the registry `repository_uri` points at.

    External registries use the configured credentials; the ECR registry
    uses an authorisation token for the current AWS identity.

    Raises:
        ConfigurationConflictError: When an external registry has no credentials.
        AuthorizationError: When Docker rejects the login.
    """
    require_docker()
    host = registry_host(config)
    if host:
        if not (config.registry_username and config.registry_password):
            raise ConfigurationConflictError(
                f"Registry {host} requires REGISTRY_USERNAME and REGISTRY_PASSWORD."
            )
        reporter(f"Authenticating Docker with {host}")
        username, password, endpoint = config.registry_username, config.registry_password, host
    else:
        reporter("Authenticating Docker with ECR")
        username, password, endpoint = _ecr_login(session)

    command = ["docker", "login", "--username", username, "--password-stdin", endpoint]
    try:
        _run(command, reporter, input_bytes=password.encode("utf-8"))
    except subprocess.CalledProcessError as exc:
        raise AuthorizationError(f"Docker login failed for {endpoint}.") from exc


def build_image(
    root_dir: Path,
    image: str,
    reporter: Callable[[str], None],
    extra_tags: list[str] | None = None,
) -> None:
    """Build the application image from a source directory."""
    require_docker()
    if not (root_dir / "Dockerfile").is_file():
        raise RuntimeError(f"No Dockerfile found in {root_dir}.")

    command = ["docker", "build", "--platform", TARGET_PLATFORM, "-t", image]
    for tag in extra_tags or []:
        command.extend(["-t", tag])
    command.append(str(root_dir))
    reporter(f"Building image {image} ({TARGET_PLATFORM})")
    _run(command, reporter)


def push_image(image: str, reporter: Callable[[str], None]) -> None:
    """Push an image reference to its registry."""
    reporter(f"Pushing image {image}")
    _run(["docker", "push", image], reporter)


def require_docker() -> None:
    """Ensure Docker is installed."""
    if not shutil.which("docker"):
        raise RuntimeError("Docker is required to build and push images.")


def _ecr_login(session: Any) -> tuple[str, str, str]:
    """Return Docker login credentials for ECR."""
    ecr = session.client("ecr")
    try:
        # spellchecker:ignore-next-line
        response = ecr.get_authorization_token()
    except ClientError as exc:
        raise AuthorizationError(f"Failed to authenticate with ECR: {exc}") from exc

    # spellchecker:ignore-next-line
    auth_data = response["authorizationData"][0]
    # spellchecker:ignore-next-line
    token = base64.b64decode(auth_data["authorizationToken"]).decode("utf-8")
    username, password = token.split(":", 1)
    proxy_endpoint = auth_data["proxyEndpoint"]
    return username, password, proxy_endpoint


def _run(
    command: list[str],
    reporter: Callable[[str], None],
    input_bytes: bytes | None = None,
) -> None:
    """Run a subprocess command."""
    executable = shutil.which(command[0])
    if not executable:
        raise RuntimeError(f"Executable not found: {command[0]}")
    resolved_command = [executable, *command[1:]]
    reporter(f"Running: {' '.join(resolved_command)}")
    subprocess.run(resolved_command, check=True, input=input_bytes)  # nosec B603
