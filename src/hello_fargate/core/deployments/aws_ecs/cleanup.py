"""Clean-up helpers for ECS deployment resources."""

from collections.abc import Callable
from typing import Any

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.ecr import delete_repository
from hello_fargate.core.deployments.aws_ecs.ecs_services import describe_service
from hello_fargate.core.deployments.aws_ecs.errors import error_code
from hello_fargate.core.deployments.aws_ecs.images import registry_host
from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig, ServicePhase


def cleanup_resources(
    session: Any,
    config: EcsDeploymentConfig,
    reporter: Callable[[str], None],
) -> None:
    """Tear down every resource created for the deployment.

    Missing resources are skipped. Other failures are reported and the
    remaining deletions still run.
    """
    reporter("Deleting ECS service (if it exists)")
    _delete_service(session, config, reporter)

    reporter("Deregistering task definitions")
    _deregister_task_definitions(session, config.task_family, reporter)

    reporter("Deleting ECS cluster (if it exists)")
    _delete_cluster(session, config.cluster_name, reporter)

    reporter("Deleting CloudWatch log group")
    _delete_log_group(session, config.log_group_name, reporter)

    if registry_host(config) is None:
        reporter("Deleting ECR repository (if it exists)")
        delete_repository(session, config.image_repository, reporter)

    reporter("Deleting IAM execution role (if it exists)")
    _delete_role(session, config.execution_role_name, reporter)

    vpc_id = _find_vpc(session, config.project_name)
    if vpc_id:
        reporter("Deleting VPC resources")
        _cleanup_vpc(session, vpc_id, reporter)


def _delete_service(
    session: Any,
    config: EcsDeploymentConfig,
    reporter: Callable[[str], None],
) -> None:
    """Scale a service to zero and delete it."""
    snapshot = describe_service(session, config.cluster_name, config.service_name)
    if snapshot is None or snapshot.phase == ServicePhase.INACTIVE:
        return

    ecs = session.client("ecs")
    try:
        ecs.update_service(
            cluster=config.cluster_name,
            service=config.service_name,
            desiredCount=0,
        )
        ecs.delete_service(cluster=config.cluster_name, service=config.service_name, force=True)
        ecs.get_waiter("services_inactive").wait(
            cluster=config.cluster_name,
            services=[config.service_name],
        )
    except ClientError as exc:
        reporter(f"Failed to delete service {config.service_name}: {exc}")


def _deregister_task_definitions(
    session: Any,
    family: str,
    reporter: Callable[[str], None],
) -> None:
    """Deregister every active revision of a task definition family."""
    ecs = session.client("ecs")
    paginator = ecs.get_paginator("list_task_definitions")
    for page in paginator.paginate(familyPrefix=family, status="ACTIVE"):
        for task_definition_arn in page.get("taskDefinitionArns", []):
            try:
                ecs.deregister_task_definition(taskDefinition=task_definition_arn)
            except ClientError as exc:
                reporter(f"Failed to deregister task definition {task_definition_arn}: {exc}")


def _delete_cluster(session: Any, cluster_name: str, reporter: Callable[[str], None]) -> None:
    """Delete an ECS cluster if it exists."""
    ecs = session.client("ecs")
    try:
        ecs.delete_cluster(cluster=cluster_name)
    except ClientError as exc:
        if error_code(exc) == "ClusterNotFoundException":
            return
        reporter(f"Failed to delete cluster: {exc}")


def _delete_log_group(session: Any, log_group_name: str, reporter: Callable[[str], None]) -> None:
    """Delete a CloudWatch log group."""
    logs = session.client("logs")
    try:
        logs.delete_log_group(logGroupName=log_group_name)
    except ClientError as exc:
        if error_code(exc) != "ResourceNotFoundException":
            reporter(f"Failed to delete log group: {exc}")


def _delete_role(session: Any, role_name: str, reporter: Callable[[str], None]) -> None:
    """Detach policies from a role and delete it."""
    iam = session.client("iam")
    try:
        attached = iam.list_attached_role_policies(RoleName=role_name)
    except ClientError as exc:
        if error_code(exc) == "NoSuchEntity":
            return
        reporter(f"Failed to list attached policies for {role_name}: {exc}")
        return

    for policy in attached.get("AttachedPolicies", []):
        policy_arn = policy["PolicyArn"]
        try:
            iam.detach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
        except ClientError as exc:
            reporter(f"Failed to detach policy {policy_arn} from {role_name}: {exc}")

    for policy_name in iam.list_role_policies(RoleName=role_name).get("PolicyNames", []):
        try:
            iam.delete_role_policy(RoleName=role_name, PolicyName=policy_name)
        except ClientError as exc:
            reporter(f"Failed to delete policy {policy_name} from {role_name}: {exc}")

    reporter(f"Removing IAM role {role_name}")
    try:
        iam.delete_role(RoleName=role_name)
    except ClientError as exc:
        if error_code(exc) != "NoSuchEntity":
            reporter(f"Failed to delete role {role_name}: {exc}")


def _find_vpc(session: Any, project_name: str) -> str | None:
    ec2 = session.client("ec2")
    response = ec2.describe_vpcs(
        Filters=[{"Name": "tag:Name", "Values": [f"{project_name}-vpc"]}]
    )
    vpcs = response.get("Vpcs", [])
    return str(vpcs[0]["VpcId"]) if vpcs else None


def _cleanup_vpc(session: Any, vpc_id: str, reporter: Callable[[str], None]) -> None:
    """Delete a VPC and its dependent resources."""
    ec2 = session.client("ec2")

    _delete_security_groups(ec2, vpc_id, reporter)
    _delete_route_tables(ec2, vpc_id, reporter)

    for igw_id in _list_internet_gateways(ec2, vpc_id):
        reporter(f"Detaching and deleting internet gateway {igw_id}")
        try:
            ec2.detach_internet_gateway(InternetGatewayId=igw_id, VpcId=vpc_id)
            ec2.delete_internet_gateway(InternetGatewayId=igw_id)
        except ClientError as exc:
            reporter(f"Failed to delete internet gateway {igw_id}: {exc}")

    _delete_subnets(ec2, vpc_id, reporter)

    reporter(f"Deleting VPC {vpc_id}")
    try:
        ec2.delete_vpc(VpcId=vpc_id)
    except ClientError as exc:
        reporter(f"Failed to delete VPC {vpc_id}: {exc}")


def _list_internet_gateways(ec2: Any, vpc_id: str) -> list[str]:
    """List internet gateways attached to a VPC."""
    response = ec2.describe_internet_gateways(
        Filters=[{"Name": "attachment.vpc-id", "Values": [vpc_id]}]
    )
    return [igw["InternetGatewayId"] for igw in response.get("InternetGateways", [])]


def _delete_route_tables(ec2: Any, vpc_id: str, reporter: Callable[[str], None]) -> None:
    """Delete non-main route tables."""
    response = ec2.describe_route_tables(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
    for route_table in response.get("RouteTables", []):
        associations = route_table.get("Associations", [])
        is_main = any(assoc.get("Main") for assoc in associations)
        for assoc in associations:
            assoc_id = assoc.get("RouteTableAssociationId")
            if assoc_id and not assoc.get("Main"):
                try:
                    ec2.disassociate_route_table(AssociationId=assoc_id)
                except ClientError as exc:
                    reporter(f"Failed to disassociate route table: {exc}")
        if is_main:
            continue
        try:
            ec2.delete_route_table(RouteTableId=route_table["RouteTableId"])
        except ClientError as exc:
            reporter(f"Failed to delete route table: {exc}")


def _delete_subnets(ec2: Any, vpc_id: str, reporter: Callable[[str], None]) -> None:
    """Delete all subnets in a VPC."""
    response = ec2.describe_subnets(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
    for subnet in response.get("Subnets", []):
        subnet_id = subnet["SubnetId"]
        try:
            ec2.delete_subnet(SubnetId=subnet_id)
        except ClientError as exc:
            reporter(f"Failed to delete subnet {subnet_id}: {exc}")


def _delete_security_groups(ec2: Any, vpc_id: str, reporter: Callable[[str], None]) -> None:
    """Delete non-default security groups in a VPC."""
    response = ec2.describe_security_groups(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
    for group in response.get("SecurityGroups", []):
        if group.get("GroupName") == "default":
            continue
        group_id = group["GroupId"]
        try:
            ec2.delete_security_group(GroupId=group_id)
        except ClientError as exc:
            reporter(f"Failed to delete security group {group_id}: {exc}")
