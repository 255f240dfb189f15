"""User configuration paths."""

from hello_fargate.config.paths import config_dir, env_path, state_path

__all__ = ["config_dir", "env_path", "state_path"]
