"""Locations of per-user hello-fargate files."""

from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "hello-fargate"


def config_dir() -> Path:
    """Return the per-user configuration directory."""
    return Path(user_config_dir(APP_NAME, appauthor=False))


def state_path() -> Path:
    """Return the file recording identifiers from the last provisioning run."""
    return config_dir() / "state.json"


def env_path() -> Path:
    """Return the optional ``.env`` file read by the settings classes."""
    return config_dir() / ".env"
