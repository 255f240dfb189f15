"""Security group management for ECS."""

from collections.abc import Callable
from typing import Any

from boto3.session import Session
from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.errors import error_code
from hello_fargate.core.deployments.aws_ecs.models import SecurityGroupInfo

ANYWHERE = "0.0.0.0/0"


def ensure_security_group(
    session: Session,
    vpc_id: str,
    name: str,
    description: str,
    port: int,
    reporter: Callable[[str], None],
) -> SecurityGroupInfo:
    """Ensure a security group allowing inbound TCP on a port and all outbound traffic."""
    ec2 = session.client("ec2")
    response = ec2.describe_security_groups(
        Filters=[
            {"Name": "vpc-id", "Values": [vpc_id]},
            {"Name": "group-name", "Values": [name]},
        ]
    )
    groups = response.get("SecurityGroups", [])
    if groups:
        group = groups[0]
        group_id = str(group["GroupId"])
        reporter(f"Security group {group_id} already exists")
    else:
        reporter(f"Creating security group {name}")
        try:
            created = ec2.create_security_group(
                VpcId=vpc_id,
                GroupName=name,
                Description=description,
            )
        except ClientError as exc:
            raise RuntimeError(f"Failed to create security group: {exc}") from exc
        group_id = str(created["GroupId"])
        ec2.create_tags(Resources=[group_id], Tags=[{"Key": "Name", "Value": name}])
        group = ec2.describe_security_groups(GroupIds=[group_id])["SecurityGroups"][0]

    if not _has_ingress(group, port):
        reporter(f"Allowing inbound TCP/{port} from anywhere")
        _authorize(
            ec2.authorize_security_group_ingress,
            group_id,
            {
                "IpProtocol": "tcp",
                "FromPort": port,
                "ToPort": port,
                "IpRanges": [{"CidrIp": ANYWHERE}],
            },
        )

    if not _has_open_egress(group):
        reporter("Allowing all outbound traffic")
        _authorize(
            ec2.authorize_security_group_egress,
            group_id,
            {"IpProtocol": "-1", "IpRanges": [{"CidrIp": ANYWHERE}]},
        )

    return SecurityGroupInfo(
        group_id=group_id,
        name=name,
        description=description,
        vpc_id=vpc_id,
    )


def _authorize(call: Callable[..., Any], group_id: str, permission: dict[str, Any]) -> None:
    """Add a rule, treating an existing identical rule as success."""
    try:
        call(GroupId=group_id, IpPermissions=[permission])
    except ClientError as exc:
        if error_code(exc) != "InvalidPermission.Duplicate":
            raise RuntimeError(f"Failed to update security group {group_id}: {exc}") from exc


def _has_ingress(group: dict[str, Any], port: int) -> bool:
    for permission in group.get("IpPermissions", []):
        if permission.get("IpProtocol") != "tcp":
            continue
        if permission.get("FromPort") != port or permission.get("ToPort") != port:
            continue
        if _opens_to_anywhere(permission):
            return True
    return False


def _has_open_egress(group: dict[str, Any]) -> bool:
    return any(
        permission.get("IpProtocol") == "-1" and _opens_to_anywhere(permission)
        for permission in group.get("IpPermissionsEgress", [])
    )


def _opens_to_anywhere(permission: dict[str, Any]) -> bool:
    return any(item.get("CidrIp") == ANYWHERE for item in permission.get("IpRanges", []))
