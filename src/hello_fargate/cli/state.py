"""Persisted deployment state for the CLI."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from hello_fargate.config.paths import state_path
from hello_fargate.core.deployments.aws_ecs import ProvisioningOutputs


class ConfigError(RuntimeError):
    """State file related errors."""


class DeploymentState(BaseModel):
    """Identifiers recorded by the last provisioning or deployment run."""

    model_config = ConfigDict(extra="ignore")

    vpc_id: str | None = None
    subnet_id: str | None = None
    cluster_arn: str | None = None
    security_group_id: str | None = None
    execution_role_arn: str | None = None
    task_definition_arn: str | None = None
    service_arn: str | None = None
    image: str | None = None

    def outputs(self) -> dict[str, str]:
        """Return recorded identifiers, skipping unset ones."""
        return {key: value for key, value in self.model_dump().items() if value}


def load_state() -> DeploymentState:
    """Load deployment state from disk.

    Returns:
        The loaded state, or an empty state when no file exists.
    """
    path = state_path()
    if not path.exists():
        return DeploymentState()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid state file: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("State file must contain a JSON object.")

    try:
        return DeploymentState.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid state values: {exc}") from exc


def save_state(state: DeploymentState) -> Path:
    """Save deployment state to disk.

    Args:
        state: State object to save.

    Returns:
        The saved state file path.
    """
    path = state_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state.model_dump(mode="json"), indent=2), encoding="utf-8")
    return path


def record_outputs(outputs: ProvisioningOutputs) -> DeploymentState:
    """Merge provisioning outputs into the saved state."""
    state = load_state().model_copy(update=outputs.as_dict())
    save_state(state)
    return state
