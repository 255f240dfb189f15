"""Error types raised by the ECS deployment helpers."""

from typing import TYPE_CHECKING

from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
)

if TYPE_CHECKING:
    from hello_fargate.core.deployments.aws_ecs.models import ServiceSnapshot

AUTH_ERROR_CODES = {
    "ExpiredToken",
    "ExpiredTokenException",
    # spellchecker:ignore-next-line
    "UnrecognizedClientException",
    "InvalidClientTokenId",
    "InvalidSignatureException",
    "AccessDenied",
    "AccessDeniedException",
    "UnauthorizedOperation",
}


class DeploymentError(RuntimeError):
    """Base class for deployment failures."""


class ConfigurationConflictError(DeploymentError):
    """Requested resource parameters conflict with existing account state."""


class TrustPolicyMismatchError(ConfigurationConflictError):
    """An existing role trusts principals other than the ECS tasks service."""


class AuthorizationError(DeploymentError):
    """Credentials are missing, invalid, or lack the required permissions."""


class ContainerDocumentError(DeploymentError):
    """The container definition document is invalid."""


class RolloutFailedError(DeploymentError):
    """The service did not reach a stable state at the target revision."""

    def __init__(self, message: str, snapshot: "ServiceSnapshot | None" = None) -> None:
        super().__init__(message)
        self.snapshot = snapshot


class PipelineError(DeploymentError):
    """A pipeline step failed and halted the pipeline."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"Pipeline step '{step}' failed: {cause}")
        self.step = step
        self.cause = cause


def error_code(exc: ClientError) -> str:
    """Return the AWS error code of a client error."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def is_aws_auth_error(exc: BaseException) -> bool:
    """Return true when an exception chain indicates AWS auth issues.

    Args:
        exc: Raised exception from a deployment action.

    Returns:
        True when the chain contains an auth-related error.
    """
    for item in exception_chain(exc):
        if isinstance(item, AuthorizationError):
            return True
        if isinstance(item, (NoCredentialsError, PartialCredentialsError, ProfileNotFound)):
            return True
        if isinstance(item, ClientError) and error_code(item) in AUTH_ERROR_CODES:
            return True
        if "security token included in the request is expired" in str(item).lower():
            return True
    return False


def is_aws_endpoint_error(exc: BaseException) -> bool:
    """Return true when an exception chain indicates endpoint/network errors."""
    return any(isinstance(item, EndpointConnectionError) for item in exception_chain(exc))


def exception_chain(exc: BaseException) -> list[BaseException]:
    """Return exceptions in cause/context chain.

    Args:
        exc: Root exception.

    Returns:
        Ordered exception chain from root to cause/context.
    """
    chain: list[BaseException] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        chain.append(current)
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return chain
