"""ECR repository used when no external registry is configured."""

import logging
from collections.abc import Callable
from typing import Any

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.errors import error_code

logger = logging.getLogger(__name__)

MISSING_REPOSITORY = "RepositoryNotFoundException"


def find_repository(session: Any, name: str) -> str | None:
    """Return the URI of an ECR repository, or None when it does not exist."""
    ecr = session.client("ecr")
    try:
        response = ecr.describe_repositories(repositoryNames=[name])
    except ClientError as exc:
        if error_code(exc) == MISSING_REPOSITORY:
            return None
        raise RuntimeError(f"Failed to read ECR repository {name}: {exc}") from exc
    return str(response["repositories"][0]["repositoryUri"])


def ensure_repository(session: Any, name: str) -> str:
    """Return the URI of an ECR repository, creating it on first use."""
    uri = find_repository(session, name)
    if uri is not None:
        return uri
    response = session.client("ecr").create_repository(repositoryName=name)
    logger.info("Created ECR repository %s", name)
    return str(response["repository"]["repositoryUri"])


def delete_repository(session: Any, name: str, reporter: Callable[[str], None]) -> None:
    """Delete an ECR repository together with its images.

    A repository that is already gone is skipped; other failures are reported.
    """
    try:
        session.client("ecr").delete_repository(repositoryName=name, force=True)
    except ClientError as exc:
        if error_code(exc) != MISSING_REPOSITORY:
            reporter(f"Failed to delete ECR repository {name}: {exc}")
        return
    reporter(f"Deleted ECR repository {name}")
