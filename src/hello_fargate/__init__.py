"""hello-fargate - provision and deploy a one-route web service on ECS Fargate."""

from hello_fargate.core.settings import DeploymentSettings, get_settings

__all__ = ["DeploymentSettings", "get_settings"]
