"""Deployment status checks for ECS."""

from typing import Any

import requests
from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.ecs_services import describe_service
from hello_fargate.core.deployments.aws_ecs.errors import error_code
from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig

EXPECTED_BODY = "Hello, World!"


def check_deployment(session: Any, config: EcsDeploymentConfig) -> dict[str, str]:
    """Check whether deployment resources exist."""
    results: dict[str, str] = {}

    vpc_status, vpc_id = _check_vpc(session, config.project_name)
    results["VPC"] = vpc_status
    results["Subnet"] = _check_subnet(session, vpc_id, config.subnet_cidr)
    results["Security group"] = _check_security_group(session, vpc_id, config.project_name)
    results["Execution role"] = _check_role(session, config.execution_role_name)
    results["Log group"] = _check_log_group(session, config.log_group_name)
    results["Task definition"] = _check_task_definition(session, config.task_family)
    results["ECS cluster"] = _check_cluster(session, config.cluster_name)
    results["ECS service"] = _check_service(session, config)

    return results


def find_service_endpoint(session: Any, config: EcsDeploymentConfig) -> str | None:
    """Return the public URL of a running task of the service, if any."""
    ecs = session.client("ecs")
    response = ecs.list_tasks(
        cluster=config.cluster_name,
        serviceName=config.service_name,
        desiredStatus="RUNNING",
    )
    task_arns = response.get("taskArns", [])
    if not task_arns:
        return None

    tasks = ecs.describe_tasks(cluster=config.cluster_name, tasks=task_arns).get("tasks", [])
    eni_ids = [
        detail["value"]
        for task in tasks
        if task.get("lastStatus") == "RUNNING"
        for attachment in task.get("attachments", [])
        for detail in attachment.get("details", [])
        if detail.get("name") == "networkInterfaceId"
    ]
    if not eni_ids:
        return None

    ec2 = session.client("ec2")
    interfaces = ec2.describe_network_interfaces(NetworkInterfaceIds=eni_ids)
    for interface in interfaces.get("NetworkInterfaces", []):
        public_ip = interface.get("Association", {}).get("PublicIp")
        if public_ip:
            if config.container_port == 80:
                return f"http://{public_ip}/"
            return f"http://{public_ip}:{config.container_port}/"
    return None


def smoke_check(url: str, timeout_seconds: float = 10.0) -> tuple[bool, str]:
    """Request the application root and compare it with the expected response."""
    try:
        response = requests.get(url, timeout=timeout_seconds)
    except requests.RequestException as exc:
        return False, f"Request to {url} failed: {exc}"

    if response.status_code != 200:
        return False, f"{url} returned HTTP {response.status_code}"
    if response.text != EXPECTED_BODY:
        return False, f"{url} returned unexpected body {response.text!r}"
    return True, f"{url} returned HTTP 200 {EXPECTED_BODY!r}"


def _check_vpc(session: Any, project_name: str) -> tuple[str, str | None]:
    ec2 = session.client("ec2")
    response = ec2.describe_vpcs(
        Filters=[{"Name": "tag:Name", "Values": [f"{project_name}-vpc"]}]
    )
    vpcs = response.get("Vpcs", [])
    if not vpcs:
        return "missing", None
    vpc_id = str(vpcs[0]["VpcId"])
    state = str(vpcs[0].get("State", "")).lower()
    if state and state != "available":
        return f"status {state}", vpc_id
    return "present", vpc_id


def _check_subnet(session: Any, vpc_id: str | None, cidr: str) -> str:
    if not vpc_id:
        return "not set"
    ec2 = session.client("ec2")
    response = ec2.describe_subnets(
        Filters=[
            {"Name": "vpc-id", "Values": [vpc_id]},
            {"Name": "cidr-block", "Values": [cidr]},
        ]
    )
    subnets = response.get("Subnets", [])
    if not subnets:
        return "missing"
    state = str(subnets[0].get("State", "")).lower()
    if state and state != "available":
        return f"status {state}"
    return "present"


def _check_security_group(session: Any, vpc_id: str | None, project_name: str) -> str:
    if not vpc_id:
        return "not set"
    ec2 = session.client("ec2")
    response = ec2.describe_security_groups(
        Filters=[
            {"Name": "vpc-id", "Values": [vpc_id]},
            {"Name": "group-name", "Values": [f"{project_name}-sg"]},
        ]
    )
    return "present" if response.get("SecurityGroups") else "missing"


def _check_role(session: Any, role_name: str) -> str:
    iam = session.client("iam")
    try:
        iam.get_role(RoleName=role_name)
    except ClientError as exc:
        code = error_code(exc)
        if code == "NoSuchEntity":
            return "missing"
        return f"error: {code}"
    return "present"


def _check_log_group(session: Any, log_group_name: str) -> str:
    logs = session.client("logs")
    response = logs.describe_log_groups(logGroupNamePrefix=log_group_name)
    groups = [group["logGroupName"] for group in response.get("logGroups", [])]
    return "present" if log_group_name in groups else "missing"


def _check_task_definition(session: Any, family: str) -> str:
    ecs = session.client("ecs")
    try:
        response = ecs.describe_task_definition(taskDefinition=family)
    except ClientError as exc:
        code = error_code(exc)
        if code in {"ClientException", "InvalidParameterException"}:
            return "missing"
        return f"error: {code}"

    task_definition = response.get("taskDefinition", {})
    status = str(task_definition.get("status", "")).upper()
    if status and status != "ACTIVE":
        return f"status {status}"
    return f"present (revision {task_definition.get('revision')})"


def _check_cluster(session: Any, cluster_name: str) -> str:
    ecs = session.client("ecs")
    response = ecs.describe_clusters(clusters=[cluster_name])
    clusters = response.get("clusters", [])
    if not clusters:
        return "missing"
    if clusters[0].get("status") != "ACTIVE":
        return f"status {clusters[0].get('status')}"
    return "present"


def _check_service(session: Any, config: EcsDeploymentConfig) -> str:
    snapshot = describe_service(session, config.cluster_name, config.service_name)
    if snapshot is None:
        return "missing"
    if snapshot.status != "ACTIVE":
        return f"status {snapshot.status}"
    return (
        f"present ({snapshot.phase.value}, "
        f"{snapshot.running_count}/{snapshot.desired_count} running)"
    )
