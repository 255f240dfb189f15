"""IAM role helpers for ECS deployment."""

import json
from collections.abc import Callable
from typing import Any, cast
from urllib.parse import unquote

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.errors import (
    TrustPolicyMismatchError,
    error_code,
)
from hello_fargate.core.deployments.aws_ecs.models import ExecutionRole

ECS_TASKS_PRINCIPAL = "ecs-tasks.amazonaws.com"
TASK_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"
)


def ensure_execution_role(
    session: Any,
    role_name: str,
    reporter: Callable[[str], None],
) -> ExecutionRole:
    """Ensure the task execution role exists with the ECS tasks trust policy.

    An existing role is reused only when its trust policy names the ECS tasks
    service as the sole principal. The policy is never rewritten, so a role
    trusting anything else is reported instead of being widened or narrowed.

    Raises:
        TrustPolicyMismatchError: When the existing role trusts other principals.
    """
    iam = session.client("iam")

    reporter("Ensuring task execution role")
    role = _get_role(iam, role_name)
    if role is None:
        response = iam.create_role(
            RoleName=role_name,
            AssumeRolePolicyDocument=json.dumps(ecs_trust_policy()),
            Description="Allows ECS tasks to pull images and write logs",
        )
        role_arn = cast(str, response["Role"]["Arn"])
        iam.get_waiter("role_exists").wait(RoleName=role_name)
    else:
        principals = trusted_principals(role.get("AssumeRolePolicyDocument", {}))
        if principals != {ECS_TASKS_PRINCIPAL}:
            found = ", ".join(sorted(principals)) or "none"
            raise TrustPolicyMismatchError(
                f"Role {role_name} already exists but trusts [{found}] "
                f"instead of only {ECS_TASKS_PRINCIPAL}."
            )
        role_arn = cast(str, role["Arn"])
        reporter(f"Execution role {role_name} already exists")

    _attach_managed_policy(iam, role_name, TASK_EXECUTION_POLICY_ARN)
    return ExecutionRole(name=role_name, arn=role_arn)


def trusted_principals(policy_document: dict[str, Any] | str) -> set[str]:
    """Return every principal allowed to assume a role.

    Service principals are returned as-is; other principal kinds are
    prefixed with their kind (``AWS:``, ``Federated:``) so they never
    match a service name.
    """
    if isinstance(policy_document, str):
        policy_document = json.loads(unquote(policy_document))

    statements = policy_document.get("Statement", [])
    if isinstance(statements, dict):
        statements = [statements]

    principals: set[str] = set()
    for statement in statements:
        if statement.get("Effect") != "Allow":
            continue
        actions = statement.get("Action", [])
        if isinstance(actions, str):
            actions = [actions]
        if not any(action in {"sts:AssumeRole", "sts:*", "*"} for action in actions):
            continue
        principal = statement.get("Principal", {})
        if principal == "*":
            principals.add("*")
            continue
        for kind, values in principal.items():
            if isinstance(values, str):
                values = [values]
            for value in values:
                principals.add(value if kind == "Service" else f"{kind}:{value}")
    return principals


def ecs_trust_policy() -> dict[str, Any]:
    """Return the ECS task trust policy."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": ECS_TASKS_PRINCIPAL},
                "Action": "sts:AssumeRole",
            }
        ],
    }


def _get_role(iam: Any, role_name: str) -> dict[str, Any] | None:
    """Return role details, or None when the role does not exist."""
    try:
        response = iam.get_role(RoleName=role_name)
    except ClientError as exc:
        if error_code(exc) != "NoSuchEntity":
            raise RuntimeError(f"Failed to read role {role_name}: {exc}") from exc
        return None
    return cast(dict[str, Any], response["Role"])


def _attach_managed_policy(iam: Any, role_name: str, policy_arn: str) -> None:
    """Attach a managed policy if it is missing."""
    response = iam.list_attached_role_policies(RoleName=role_name)
    attached = {policy["PolicyArn"] for policy in response.get("AttachedPolicies", [])}
    if policy_arn in attached:
        return
    iam.attach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
