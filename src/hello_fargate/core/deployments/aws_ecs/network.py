"""VPC and subnet management for ECS."""

import ipaddress
import logging
from collections.abc import Callable
from typing import Any

from boto3.session import Session

from hello_fargate.core.deployments.aws_ecs.errors import ConfigurationConflictError
from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig, NetworkOutputs
from hello_fargate.core.deployments.aws_ecs.security_groups import ensure_security_group

logger = logging.getLogger(__name__)

ANYWHERE = "0.0.0.0/0"


def validate_cidrs(
    vpc_cidr: str,
    subnet_cidr: str,
) -> tuple[ipaddress.IPv4Network, ipaddress.IPv4Network]:
    """Parse the VPC and subnet blocks and check that the subnet fits the VPC.

    Raises:
        ConfigurationConflictError: When a block is malformed or the subnet
            lies outside the VPC.
    """
    vpc_network = _parse_cidr(vpc_cidr, "VPC")
    subnet_network = _parse_cidr(subnet_cidr, "subnet")
    if not subnet_network.subnet_of(vpc_network):
        raise ConfigurationConflictError(
            f"Subnet range {subnet_cidr} is not contained in VPC range {vpc_cidr}."
        )
    return vpc_network, subnet_network


def ensure_network(
    session: Session,
    config: EcsDeploymentConfig,
    reporter: Callable[[str], None],
) -> NetworkOutputs:
    """Ensure the VPC, subnet, internet access and security group exist."""
    validate_cidrs(config.vpc_cidr, config.subnet_cidr)

    vpc_id = ensure_vpc(session, config.project_name, config.vpc_cidr, reporter)
    subnet_id = ensure_subnet(session, config.project_name, vpc_id, config.subnet_cidr, reporter)
    igw_id, route_table_id = ensure_internet_access(
        session, config.project_name, vpc_id, subnet_id, reporter
    )
    group = ensure_security_group(
        session,
        vpc_id,
        f"{config.project_name}-sg",
        "Allow HTTP inbound and all outbound traffic",
        config.container_port,
        reporter,
    )
    return NetworkOutputs(
        vpc_id=vpc_id,
        subnet_id=subnet_id,
        security_group_id=group.group_id,
        internet_gateway_id=igw_id,
        route_table_id=route_table_id,
    )


def ensure_vpc(
    session: Session,
    project_name: str,
    cidr: str,
    reporter: Callable[[str], None],
) -> str:
    """Ensure a tagged VPC with the given block exists and return its ID."""
    ec2 = session.client("ec2")
    name = f"{project_name}-vpc"
    response = ec2.describe_vpcs(Filters=[{"Name": "tag:Name", "Values": [name]}])
    vpcs = response.get("Vpcs", [])
    if vpcs:
        vpc = vpcs[0]
        existing = str(vpc["CidrBlock"])
        if existing != cidr:
            raise ConfigurationConflictError(
                f"VPC {name} ({vpc['VpcId']}) already exists with range {existing}, "
                f"requested {cidr}."
            )
        reporter(f"VPC {vpc['VpcId']} already exists")
        return str(vpc["VpcId"])

    reporter(f"Creating VPC {name} ({cidr})")
    vpc_id = str(ec2.create_vpc(CidrBlock=cidr)["Vpc"]["VpcId"])
    ec2.get_waiter("vpc_available").wait(VpcIds=[vpc_id])
    _tag_resource(ec2, vpc_id, name)
    ec2.modify_vpc_attribute(VpcId=vpc_id, EnableDnsSupport={"Value": True})
    ec2.modify_vpc_attribute(VpcId=vpc_id, EnableDnsHostnames={"Value": True})
    logger.info("Created VPC %s with range %s", vpc_id, cidr)
    return vpc_id


def ensure_subnet(
    session: Session,
    project_name: str,
    vpc_id: str,
    cidr: str,
    reporter: Callable[[str], None],
) -> str:
    """Ensure a public subnet with the given block exists in the VPC.

    The subnet is found by its Name tag first, then by block. A tagged subnet
    with another block, or an untagged one overlapping the block, is a conflict.
    """
    ec2 = session.client("ec2")
    name = f"{project_name}-public"
    requested = ipaddress.ip_network(cidr)
    response = ec2.describe_subnets(Filters=[{"Name": "vpc-id", "Values": [vpc_id]}])
    subnets = response.get("Subnets", [])

    for subnet in subnets:
        if _name_tag(subnet) != name:
            continue
        if subnet["CidrBlock"] != cidr:
            raise ConfigurationConflictError(
                f"Subnet {name} ({subnet['SubnetId']}) already exists with range "
                f"{subnet['CidrBlock']}, requested {cidr}."
            )
        reporter(f"Subnet {subnet['SubnetId']} already exists")
        return str(subnet["SubnetId"])

    for subnet in subnets:
        if subnet["CidrBlock"] == cidr:
            subnet_id = str(subnet["SubnetId"])
            if _name_tag(subnet) != name:
                _tag_resource(ec2, subnet_id, name)
            reporter(f"Subnet {subnet_id} already exists")
            return subnet_id

    for subnet in subnets:
        existing = ipaddress.ip_network(subnet["CidrBlock"])
        if existing.overlaps(requested):
            raise ConfigurationConflictError(
                f"Subnet range {cidr} conflicts with existing subnet "
                f"{subnet['SubnetId']} ({subnet['CidrBlock']}) in VPC {vpc_id}."
            )

    availability_zone = _first_availability_zone(ec2)
    reporter(f"Creating subnet {name} ({cidr}) in {availability_zone}")
    subnet_id = str(
        ec2.create_subnet(
            VpcId=vpc_id,
            CidrBlock=cidr,
            AvailabilityZone=availability_zone,
        )["Subnet"]["SubnetId"]
    )
    ec2.get_waiter("subnet_available").wait(SubnetIds=[subnet_id])
    _tag_resource(ec2, subnet_id, name)
    ec2.modify_subnet_attribute(
        SubnetId=subnet_id,
        MapPublicIpOnLaunch={"Value": True},
    )
    logger.info("Created subnet %s with range %s", subnet_id, cidr)
    return subnet_id


def ensure_internet_access(
    session: Session,
    project_name: str,
    vpc_id: str,
    subnet_id: str,
    reporter: Callable[[str], None],
) -> tuple[str, str]:
    """Ensure an internet gateway and public route serve the subnet."""
    ec2 = session.client("ec2")

    gateways = ec2.describe_internet_gateways(
        Filters=[{"Name": "attachment.vpc-id", "Values": [vpc_id]}]
    ).get("InternetGateways", [])
    if gateways:
        igw_id = str(gateways[0]["InternetGatewayId"])
    else:
        reporter("Creating internet gateway (public subnet access)")
        igw_id = str(ec2.create_internet_gateway()["InternetGateway"]["InternetGatewayId"])
        ec2.attach_internet_gateway(InternetGatewayId=igw_id, VpcId=vpc_id)
        _tag_resource(ec2, igw_id, f"{project_name}-igw")

    route_table_name = f"{project_name}-public-rt"
    tables = ec2.describe_route_tables(
        Filters=[
            {"Name": "vpc-id", "Values": [vpc_id]},
            {"Name": "tag:Name", "Values": [route_table_name]},
        ]
    ).get("RouteTables", [])
    if tables:
        route_table = tables[0]
    else:
        reporter("Creating route table for public subnet")
        route_table = ec2.create_route_table(VpcId=vpc_id)["RouteTable"]
        _tag_resource(ec2, route_table["RouteTableId"], route_table_name)
    route_table_id = str(route_table["RouteTableId"])

    routes = route_table.get("Routes", [])
    if not any(route.get("DestinationCidrBlock") == ANYWHERE for route in routes):
        ec2.create_route(
            RouteTableId=route_table_id,
            DestinationCidrBlock=ANYWHERE,
            GatewayId=igw_id,
        )

    associations = route_table.get("Associations", [])
    if not any(assoc.get("SubnetId") == subnet_id for assoc in associations):
        ec2.associate_route_table(RouteTableId=route_table_id, SubnetId=subnet_id)

    return igw_id, route_table_id


def _parse_cidr(value: str, label: str) -> ipaddress.IPv4Network:
    """Parse an IPv4 block, reporting the offending range on failure."""
    try:
        network = ipaddress.ip_network(value, strict=True)
    except ValueError as exc:
        raise ConfigurationConflictError(f"Invalid {label} range {value}: {exc}") from exc
    if not isinstance(network, ipaddress.IPv4Network):
        raise ConfigurationConflictError(f"{label} range {value} must be IPv4.")
    return network


def _name_tag(resource: dict[str, Any]) -> str | None:
    """Return the Name tag of a described resource."""
    for tag in resource.get("Tags", []):
        if tag.get("Key") == "Name":
            return str(tag.get("Value"))
    return None


def _tag_resource(ec2: Any, resource_id: str, name: str) -> None:
    """Apply a Name tag to a resource."""
    ec2.create_tags(Resources=[resource_id], Tags=[{"Key": "Name", "Value": name}])


def _first_availability_zone(ec2: Any) -> str:
    """Fetch the first availability zone."""
    response = ec2.describe_availability_zones()
    zones = response.get("AvailabilityZones", [])
    if not zones:
        raise RuntimeError("No availability zones found for this region.")
    return str(zones[0]["ZoneName"])
