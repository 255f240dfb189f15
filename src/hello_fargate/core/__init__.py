"""hello-fargate core modules."""

from hello_fargate.core.settings import (
    AppSettings,
    DeploymentSettings,
    ecs_config_from_settings,
    get_settings,
    pipeline_options_from_settings,
)

__all__ = [
    "AppSettings",
    "DeploymentSettings",
    "ecs_config_from_settings",
    "get_settings",
    "pipeline_options_from_settings",
]
