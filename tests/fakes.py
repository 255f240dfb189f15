"""In-memory stand-ins for the AWS clients used by the deployment helpers."""

import base64
import copy
import ipaddress
import itertools
import json
from typing import Any

from botocore.exceptions import ClientError

from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"
PUBLIC_IP = "203.0.113.10"

FilterList = list[dict[str, Any]] | None
Rules = list[dict[str, Any]]


def client_error(code: str, operation: str, message: str | None = None) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


class FakeWaiter:
    def __init__(self, name: str, calls: list[str]) -> None:
        self.name = name
        self.calls = calls

    def wait(self, **kwargs: Any) -> None:
        self.calls.append(self.name)


class FakePaginator:
    def __init__(self, method: Any) -> None:
        self.method = method

    def paginate(self, **kwargs: Any) -> list[dict[str, Any]]:
        return [self.method(**kwargs)]


def _name_of(resource: dict[str, Any]) -> str | None:
    for tag in resource.get("Tags", []):
        if tag["Key"] == "Name":
            return str(tag["Value"])
    return None


def _matches_filters(resource: dict[str, Any], filters: FilterList) -> bool:
    for item in filters or []:
        name, values = item["Name"], item["Values"]
        if name == "tag:Name":
            actual: Any = _name_of(resource)
        elif name == "vpc-id":
            actual = resource.get("VpcId")
        elif name == "cidr-block":
            actual = resource.get("CidrBlock")
        elif name == "group-name":
            actual = resource.get("GroupName")
        elif name == "attachment.vpc-id":
            attached = [attachment["VpcId"] for attachment in resource.get("Attachments", [])]
            if not set(attached) & set(values):
                return False
            continue
        else:
            raise AssertionError(f"Unsupported filter {name}")
        if actual not in values:
            return False
    return True


class FakeEc2:
    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.vpcs: dict[str, dict[str, Any]] = {}
        self.subnets: dict[str, dict[str, Any]] = {}
        self.internet_gateways: dict[str, dict[str, Any]] = {}
        self.route_tables: dict[str, dict[str, Any]] = {}
        self.security_groups: dict[str, dict[str, Any]] = {}
        self.waits: list[str] = []
        self.calls: list[str] = []

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids):08x}"

    def _all(self) -> dict[str, dict[str, Any]]:
        return {
            **self.vpcs,
            **self.subnets,
            **self.internet_gateways,
            **self.route_tables,
            **self.security_groups,
        }

    def resource_counts(self) -> dict[str, int]:
        return {
            "vpcs": len(self.vpcs),
            "subnets": len(self.subnets),
            "internet_gateways": len(self.internet_gateways),
            "route_tables": len(self.route_tables),
            "security_groups": len(self.security_groups),
        }

    def get_waiter(self, name: str) -> FakeWaiter:
        return FakeWaiter(name, self.waits)

    def create_tags(self, Resources: list[str], Tags: list[dict[str, str]]) -> None:
        for resource_id in Resources:
            resource = self._all()[resource_id]
            keys = {tag["Key"] for tag in Tags}
            resource["Tags"] = [t for t in resource.get("Tags", []) if t["Key"] not in keys] + Tags

    def describe_availability_zones(self) -> dict[str, Any]:
        return {"AvailabilityZones": [{"ZoneName": f"{REGION}a"}, {"ZoneName": f"{REGION}b"}]}

    def describe_vpcs(self, Filters: FilterList = None) -> dict[str, Any]:
        vpcs = [v for v in self.vpcs.values() if _matches_filters(v, Filters)]
        return {"Vpcs": copy.deepcopy(vpcs)}

    def create_vpc(self, CidrBlock: str) -> dict[str, Any]:
        self.calls.append("create_vpc")
        vpc_id = self._new_id("vpc")
        self.vpcs[vpc_id] = {"VpcId": vpc_id, "CidrBlock": CidrBlock, "State": "available"}
        group_id = self._new_id("sg")
        self.security_groups[group_id] = {
            "GroupId": group_id,
            "GroupName": "default",
            "VpcId": vpc_id,
            "IpPermissions": [],
            "IpPermissionsEgress": [],
        }
        main_id = self._new_id("rtb")
        self.route_tables[main_id] = {
            "RouteTableId": main_id,
            "VpcId": vpc_id,
            "Routes": [{"DestinationCidrBlock": CidrBlock, "GatewayId": "local"}],
            "Associations": [{"Main": True, "RouteTableAssociationId": self._new_id("rtbassoc")}],
        }
        return {"Vpc": copy.deepcopy(self.vpcs[vpc_id])}

    def modify_vpc_attribute(self, VpcId: str, **kwargs: Any) -> None:
        self.vpcs[VpcId].setdefault("Attributes", {}).update(kwargs)

    def delete_vpc(self, VpcId: str) -> None:
        leftovers = [
            r
            for r in self._all().values()
            if r.get("VpcId") == VpcId and r.get("GroupName") != "default"
        ]
        leftovers = [
            r for r in leftovers if not any(a.get("Main") for a in r.get("Associations", []))
        ]
        if leftovers:
            raise client_error("DependencyViolation", "DeleteVpc")
        for store in (self.security_groups, self.route_tables):
            for key in [k for k, v in store.items() if v.get("VpcId") == VpcId]:
                del store[key]
        del self.vpcs[VpcId]

    def describe_subnets(self, Filters: FilterList = None) -> dict[str, Any]:
        subnets = [s for s in self.subnets.values() if _matches_filters(s, Filters)]
        return {"Subnets": copy.deepcopy(subnets)}

    def create_subnet(self, VpcId: str, CidrBlock: str, AvailabilityZone: str) -> dict[str, Any]:
        self.calls.append("create_subnet")
        vpc_range = ipaddress.ip_network(self.vpcs[VpcId]["CidrBlock"])
        if not ipaddress.ip_network(CidrBlock).subnet_of(vpc_range):
            raise client_error("InvalidSubnet.Range", "CreateSubnet")
        subnet_id = self._new_id("subnet")
        self.subnets[subnet_id] = {
            "SubnetId": subnet_id,
            "VpcId": VpcId,
            "CidrBlock": CidrBlock,
            "AvailabilityZone": AvailabilityZone,
            "State": "available",
        }
        return {"Subnet": copy.deepcopy(self.subnets[subnet_id])}

    def add_subnet(self, vpc_id: str, cidr: str) -> str:
        return str(self.create_subnet(vpc_id, cidr, f"{REGION}a")["Subnet"]["SubnetId"])

    def modify_subnet_attribute(self, SubnetId: str, **kwargs: Any) -> None:
        self.subnets[SubnetId].update({key: value["Value"] for key, value in kwargs.items()})

    def delete_subnet(self, SubnetId: str) -> None:
        del self.subnets[SubnetId]

    def describe_internet_gateways(self, Filters: FilterList = None) -> dict[str, Any]:
        gateways = [g for g in self.internet_gateways.values() if _matches_filters(g, Filters)]
        return {"InternetGateways": copy.deepcopy(gateways)}

    def create_internet_gateway(self) -> dict[str, Any]:
        igw_id = self._new_id("igw")
        self.internet_gateways[igw_id] = {"InternetGatewayId": igw_id, "Attachments": []}
        return {"InternetGateway": copy.deepcopy(self.internet_gateways[igw_id])}

    def attach_internet_gateway(self, InternetGatewayId: str, VpcId: str) -> None:
        self.internet_gateways[InternetGatewayId]["Attachments"].append(
            {"VpcId": VpcId, "State": "available"}
        )

    def detach_internet_gateway(self, InternetGatewayId: str, VpcId: str) -> None:
        self.internet_gateways[InternetGatewayId]["Attachments"] = []

    def delete_internet_gateway(self, InternetGatewayId: str) -> None:
        del self.internet_gateways[InternetGatewayId]

    def describe_route_tables(self, Filters: FilterList = None) -> dict[str, Any]:
        tables = [t for t in self.route_tables.values() if _matches_filters(t, Filters)]
        return {"RouteTables": copy.deepcopy(tables)}

    def create_route_table(self, VpcId: str) -> dict[str, Any]:
        table_id = self._new_id("rtb")
        self.route_tables[table_id] = {
            "RouteTableId": table_id,
            "VpcId": VpcId,
            "Routes": [
                {"DestinationCidrBlock": self.vpcs[VpcId]["CidrBlock"], "GatewayId": "local"}
            ],
            "Associations": [],
        }
        return {"RouteTable": copy.deepcopy(self.route_tables[table_id])}

    def create_route(self, RouteTableId: str, DestinationCidrBlock: str, GatewayId: str) -> None:
        routes = self.route_tables[RouteTableId]["Routes"]
        if any(route["DestinationCidrBlock"] == DestinationCidrBlock for route in routes):
            raise client_error("RouteAlreadyExists", "CreateRoute")
        routes.append({"DestinationCidrBlock": DestinationCidrBlock, "GatewayId": GatewayId})

    def associate_route_table(self, RouteTableId: str, SubnetId: str) -> dict[str, Any]:
        association_id = self._new_id("rtbassoc")
        self.route_tables[RouteTableId]["Associations"].append(
            {"RouteTableAssociationId": association_id, "SubnetId": SubnetId, "Main": False}
        )
        return {"AssociationId": association_id}

    def disassociate_route_table(self, AssociationId: str) -> None:
        for table in self.route_tables.values():
            table["Associations"] = [
                a
                for a in table["Associations"]
                if a.get("RouteTableAssociationId") != AssociationId
            ]

    def delete_route_table(self, RouteTableId: str) -> None:
        del self.route_tables[RouteTableId]

    def describe_security_groups(
        self,
        Filters: FilterList = None,
        GroupIds: list[str] | None = None,
    ) -> dict[str, Any]:
        groups = [
            g
            for g in self.security_groups.values()
            if _matches_filters(g, Filters) and (GroupIds is None or g["GroupId"] in GroupIds)
        ]
        return {"SecurityGroups": copy.deepcopy(groups)}

    def create_security_group(self, VpcId: str, GroupName: str, Description: str) -> dict[str, Any]:
        self.calls.append("create_security_group")
        if any(
            g["VpcId"] == VpcId and g["GroupName"] == GroupName
            for g in self.security_groups.values()
        ):
            raise client_error("InvalidGroup.Duplicate", "CreateSecurityGroup")
        group_id = self._new_id("sg")
        self.security_groups[group_id] = {
            "GroupId": group_id,
            "GroupName": GroupName,
            "Description": Description,
            "VpcId": VpcId,
            "IpPermissions": [],
            "IpPermissionsEgress": [{"IpProtocol": "-1", "IpRanges": [{"CidrIp": "0.0.0.0/0"}]}],
        }
        return {"GroupId": group_id}

    def _authorize(self, key: str, GroupId: str, IpPermissions: Rules) -> None:
        rules = self.security_groups[GroupId][key]
        for permission in IpPermissions:
            if permission in rules:
                raise client_error("InvalidPermission.Duplicate", "AuthorizeSecurityGroup")
            rules.append(copy.deepcopy(permission))

    def authorize_security_group_ingress(self, GroupId: str, IpPermissions: Rules) -> None:
        self._authorize("IpPermissions", GroupId, IpPermissions)

    def authorize_security_group_egress(self, GroupId: str, IpPermissions: Rules) -> None:
        self._authorize("IpPermissionsEgress", GroupId, IpPermissions)

    def delete_security_group(self, GroupId: str) -> None:
        del self.security_groups[GroupId]

    def describe_network_interfaces(self, NetworkInterfaceIds: list[str]) -> dict[str, Any]:
        return {
            "NetworkInterfaces": [
                {"NetworkInterfaceId": eni, "Association": {"PublicIp": PUBLIC_IP}}
                for eni in NetworkInterfaceIds
            ]
        }


class FakeIam:
    def __init__(self) -> None:
        self.roles: dict[str, dict[str, Any]] = {}
        self.attached: dict[str, list[str]] = {}
        self.inline: dict[str, dict[str, str]] = {}
        self.waits: list[str] = []

    def add_role(self, name: str, trust_policy: dict[str, Any]) -> None:
        self.create_role(RoleName=name, AssumeRolePolicyDocument=json.dumps(trust_policy))

    def get_waiter(self, name: str) -> FakeWaiter:
        return FakeWaiter(name, self.waits)

    def get_role(self, RoleName: str) -> dict[str, Any]:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "GetRole")
        return {"Role": copy.deepcopy(self.roles[RoleName])}

    def create_role(
        self, RoleName: str, AssumeRolePolicyDocument: str, **kwargs: Any
    ) -> dict[str, Any]:
        if RoleName in self.roles:
            raise client_error("EntityAlreadyExists", "CreateRole")
        self.roles[RoleName] = {
            "RoleName": RoleName,
            "Arn": f"arn:aws:iam::{ACCOUNT_ID}:role/{RoleName}",
            "AssumeRolePolicyDocument": json.loads(AssumeRolePolicyDocument),
        }
        self.attached[RoleName] = []
        self.inline[RoleName] = {}
        return {"Role": copy.deepcopy(self.roles[RoleName])}

    def list_attached_role_policies(self, RoleName: str) -> dict[str, Any]:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "ListAttachedRolePolicies")
        return {"AttachedPolicies": [{"PolicyArn": arn} for arn in self.attached[RoleName]]}

    def attach_role_policy(self, RoleName: str, PolicyArn: str) -> None:
        self.attached[RoleName].append(PolicyArn)

    def detach_role_policy(self, RoleName: str, PolicyArn: str) -> None:
        self.attached[RoleName].remove(PolicyArn)

    def list_role_policies(self, RoleName: str) -> dict[str, Any]:
        return {"PolicyNames": list(self.inline[RoleName])}

    def delete_role_policy(self, RoleName: str, PolicyName: str) -> None:
        del self.inline[RoleName][PolicyName]

    def delete_role(self, RoleName: str) -> None:
        if RoleName not in self.roles:
            raise client_error("NoSuchEntity", "DeleteRole")
        del self.roles[RoleName]


class FakeEcs:
    """ECS fake that rolls deployments forward on every describe_services call.

    Deployments of task definitions listed in ``failing_task_definitions``
    never get running tasks, so the previous deployment keeps serving.
    """

    def __init__(self) -> None:
        self.clusters: dict[str, dict[str, Any]] = {}
        self.task_definitions: dict[str, list[dict[str, Any]]] = {}
        self.services: dict[str, dict[str, Any]] = {}
        self.failing_task_definitions: set[str] = set()
        self.waits: list[str] = []
        self._deployment_ids = itertools.count(1)

    def get_waiter(self, name: str) -> FakeWaiter:
        return FakeWaiter(name, self.waits)

    def get_paginator(self, name: str) -> FakePaginator:
        return FakePaginator(getattr(self, name))

    # Clusters

    def describe_clusters(self, clusters: list[str]) -> dict[str, Any]:
        found = [copy.deepcopy(self.clusters[name]) for name in clusters if name in self.clusters]
        return {"clusters": found}

    def create_cluster(self, clusterName: str) -> dict[str, Any]:
        self.clusters[clusterName] = {
            "clusterName": clusterName,
            "clusterArn": f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:cluster/{clusterName}",
            "status": "ACTIVE",
        }
        return {"cluster": copy.deepcopy(self.clusters[clusterName])}

    def delete_cluster(self, cluster: str) -> None:
        if cluster not in self.clusters:
            raise client_error("ClusterNotFoundException", "DeleteCluster")
        self.clusters[cluster]["status"] = "INACTIVE"

    # Task definitions

    def revisions(self, family: str) -> list[dict[str, Any]]:
        return self.task_definitions.get(family, [])

    def register_task_definition(self, **request: Any) -> dict[str, Any]:
        family = request["family"]
        revisions = self.task_definitions.setdefault(family, [])
        revision = len(revisions) + 1
        containers = []
        for container in copy.deepcopy(request["containerDefinitions"]):
            # Described definitions carry defaults the request never sets.
            container.setdefault("cpu", 0)
            container.setdefault("mountPoints", [])
            container.setdefault("volumesFrom", [])
            for mapping in container.get("portMappings", []):
                mapping.setdefault("protocol", "tcp")
            containers.append(container)
        record = {
            **copy.deepcopy(request),
            "containerDefinitions": containers,
            "taskDefinitionArn": (
                f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:task-definition/{family}:{revision}"
            ),
            "revision": revision,
            "status": "ACTIVE",
        }
        revisions.append(record)
        return {"taskDefinition": copy.deepcopy(record)}

    def _find_task_definition(self, reference: str) -> dict[str, Any] | None:
        for revisions in self.task_definitions.values():
            for record in revisions:
                label = f"{record['family']}:{record['revision']}"
                if reference in (record["taskDefinitionArn"], label):
                    return record
        active = [r for r in self.task_definitions.get(reference, []) if r["status"] == "ACTIVE"]
        return active[-1] if active else None

    def describe_task_definition(self, taskDefinition: str) -> dict[str, Any]:
        record = self._find_task_definition(taskDefinition)
        if record is None:
            raise client_error(
                "ClientException", "DescribeTaskDefinition", "Unable to describe task definition."
            )
        return {"taskDefinition": copy.deepcopy(record)}

    def list_task_definitions(self, familyPrefix: str, status: str = "ACTIVE") -> dict[str, Any]:
        arns = [
            record["taskDefinitionArn"]
            for family, revisions in self.task_definitions.items()
            if family.startswith(familyPrefix)
            for record in revisions
            if record["status"] == status
        ]
        return {"taskDefinitionArns": arns}

    def deregister_task_definition(self, taskDefinition: str) -> dict[str, Any]:
        record = self._find_task_definition(taskDefinition)
        if record is None:
            raise client_error("ClientException", "DeregisterTaskDefinition")
        record["status"] = "INACTIVE"
        return {"taskDefinition": copy.deepcopy(record)}

    # Services

    def _deployment(self, task_definition: str, desired: int) -> dict[str, Any]:
        return {
            "id": f"ecs-svc/{next(self._deployment_ids)}",
            "status": "PRIMARY",
            "taskDefinition": task_definition,
            "desiredCount": desired,
            "runningCount": 0,
            "rolloutState": "IN_PROGRESS",
        }

    def create_service(
        self,
        cluster: str,
        serviceName: str,
        taskDefinition: str,
        desiredCount: int,
        **kwargs: Any,
    ) -> dict[str, Any]:
        if cluster not in self.clusters:
            raise client_error("ClusterNotFoundException", "CreateService")
        self.services[serviceName] = {
            "serviceName": serviceName,
            "serviceArn": f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:service/{cluster}/{serviceName}",
            "clusterArn": self.clusters[cluster]["clusterArn"],
            "status": "ACTIVE",
            "desiredCount": desiredCount,
            "runningCount": 0,
            "pendingCount": 0,
            "taskDefinition": taskDefinition,
            "deployments": [self._deployment(taskDefinition, desiredCount)],
            **kwargs,
        }
        return {"service": copy.deepcopy(self.services[serviceName])}

    def update_service(
        self,
        cluster: str,
        service: str,
        taskDefinition: str | None = None,
        desiredCount: int | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        record = self.services.get(service)
        if record is None or record["status"] != "ACTIVE":
            raise client_error("ServiceNotFoundException", "UpdateService")
        if desiredCount is not None:
            record["desiredCount"] = desiredCount
        if taskDefinition is not None and taskDefinition != record["taskDefinition"]:
            for deployment in record["deployments"]:
                deployment["status"] = "ACTIVE"
            rollout = self._deployment(taskDefinition, record["desiredCount"])
            record["deployments"].insert(0, rollout)
            record["taskDefinition"] = taskDefinition
        for deployment in record["deployments"]:
            if deployment["status"] == "PRIMARY":
                deployment["desiredCount"] = record["desiredCount"]
        return {"service": copy.deepcopy(record)}

    def delete_service(self, cluster: str, service: str, force: bool = False) -> None:
        self.services[service]["status"] = "INACTIVE"
        self.services[service]["deployments"] = []
        self.services[service]["runningCount"] = 0

    def _advance(self, record: dict[str, Any]) -> None:
        if record["status"] != "ACTIVE":
            return
        primary = next(d for d in record["deployments"] if d["status"] == "PRIMARY")
        if primary["taskDefinition"] in self.failing_task_definitions:
            primary["runningCount"] = 0
        else:
            primary["runningCount"] = record["desiredCount"]
            primary["rolloutState"] = "COMPLETED"
            record["deployments"] = [primary]
        record["runningCount"] = sum(d["runningCount"] for d in record["deployments"])

    def describe_services(self, cluster: str, services: list[str]) -> dict[str, Any]:
        if cluster not in self.clusters:
            raise client_error("ClusterNotFoundException", "DescribeServices")
        found = []
        for name in services:
            if name in self.services:
                self._advance(self.services[name])
                found.append(copy.deepcopy(self.services[name]))
        return {"services": found}

    def running_task_definitions(self, service: str) -> set[str]:
        return {
            d["taskDefinition"]
            for d in self.services[service]["deployments"]
            if d["runningCount"] > 0
        }

    def list_tasks(
        self, cluster: str, serviceName: str, desiredStatus: str = "RUNNING"
    ) -> dict[str, Any]:
        record = self.services.get(serviceName)
        if record is None:
            return {"taskArns": []}
        count = record["runningCount"]
        prefix = f"arn:aws:ecs:{REGION}:{ACCOUNT_ID}:task/{cluster}"
        return {"taskArns": [f"{prefix}/{i}" for i in range(count)]}

    def describe_tasks(self, cluster: str, tasks: list[str]) -> dict[str, Any]:
        return {
            "tasks": [
                {
                    "taskArn": arn,
                    "lastStatus": "RUNNING",
                    "attachments": [
                        {
                            "type": "ElasticNetworkInterface",
                            "details": [{"name": "networkInterfaceId", "value": f"eni-{index}"}],
                        }
                    ],
                }
                for index, arn in enumerate(tasks)
            ]
        }


class FakeLogs:
    def __init__(self) -> None:
        self.groups: set[str] = set()

    def create_log_group(self, logGroupName: str) -> None:
        if logGroupName in self.groups:
            raise client_error("ResourceAlreadyExistsException", "CreateLogGroup")
        self.groups.add(logGroupName)

    def describe_log_groups(self, logGroupNamePrefix: str) -> dict[str, Any]:
        return {
            "logGroups": [
                {"logGroupName": name}
                for name in sorted(self.groups)
                if name.startswith(logGroupNamePrefix)
            ]
        }

    def delete_log_group(self, logGroupName: str) -> None:
        if logGroupName not in self.groups:
            raise client_error("ResourceNotFoundException", "DeleteLogGroup")
        self.groups.remove(logGroupName)


class FakeEcr:
    def __init__(self) -> None:
        self.repositories: dict[str, str] = {}

    def describe_repositories(self, repositoryNames: list[str]) -> dict[str, Any]:
        missing = [name for name in repositoryNames if name not in self.repositories]
        if missing:
            raise client_error("RepositoryNotFoundException", "DescribeRepositories")
        return {
            "repositories": [
                {"repositoryName": name, "repositoryUri": self.repositories[name]}
                for name in repositoryNames
            ]
        }

    def create_repository(self, repositoryName: str) -> dict[str, Any]:
        uri = f"{ACCOUNT_ID}.dkr.ecr.{REGION}.amazonaws.com/{repositoryName}"
        self.repositories[repositoryName] = uri
        return {"repository": {"repositoryName": repositoryName, "repositoryUri": uri}}

    def delete_repository(self, repositoryName: str, force: bool = False) -> dict[str, Any]:
        if repositoryName not in self.repositories:
            raise client_error("RepositoryNotFoundException", "DeleteRepository")
        uri = self.repositories.pop(repositoryName)
        return {"repository": {"repositoryName": repositoryName, "repositoryUri": uri}}

    def get_authorization_token(self) -> dict[str, Any]:
        token = base64.b64encode(b"AWS:ecr-password").decode("utf-8")
        return {
            "authorizationData": [
                {
                    "authorizationToken": token,
                    "proxyEndpoint": f"https://{ACCOUNT_ID}.dkr.ecr.{REGION}.amazonaws.com",
                }
            ]
        }


class FakeSts:
    def __init__(self) -> None:
        self.error_code: str | None = None

    def get_caller_identity(self) -> dict[str, str]:
        if self.error_code:
            raise client_error(self.error_code, "GetCallerIdentity")
        return {
            "Account": ACCOUNT_ID,
            "Arn": f"arn:aws:iam::{ACCOUNT_ID}:user/deployer",
            "UserId": "AIDAEXAMPLE",
        }


class FakeSession:
    def __init__(self) -> None:
        self.ec2 = FakeEc2()
        self.iam = FakeIam()
        self.ecs = FakeEcs()
        self.logs = FakeLogs()
        self.ecr = FakeEcr()
        self.sts = FakeSts()

    def client(self, name: str) -> Any:
        return getattr(self, name)


def make_config(**overrides: Any) -> EcsDeploymentConfig:
    values: dict[str, Any] = {
        "aws_region": REGION,
        "aws_profile": None,
        "project_name": "hello-fargate",
        "cluster_name": "hello-fargate-cluster",
        "service_name": "hello-fargate-service",
        "task_family": "hello-fargate-task",
        "task_cpu": "256",
        "task_memory": "512",
        "container_name": "hello-fargate",
        "container_port": 80,
        "desired_count": 1,
        "vpc_cidr": "10.0.0.0/16",
        "subnet_cidr": "10.0.1.0/24",
        "log_group_name": "/ecs/hello-fargate",
        "execution_role_name": "hello-fargate-task-execution",
        "image": None,
        "image_repository": "hello-fargate",
        "image_tag": "latest",
        "registry_url": None,
        "registry_username": None,
        "registry_password": None,
        "container_definitions_path": None,
        "stability_timeout_seconds": 0,
        "poll_interval_seconds": 0,
    }
    values.update(overrides)
    return EcsDeploymentConfig(**values)
