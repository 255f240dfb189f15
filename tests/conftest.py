"""Shared fixtures for the deployment tests."""

from collections.abc import Callable
from pathlib import Path

import pytest
from fakes import FakeSession, make_config

from hello_fargate.core.deployments.aws_ecs import ecs_services
from hello_fargate.core.deployments.aws_ecs.models import EcsDeploymentConfig


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep stability polling from sleeping."""
    monkeypatch.setattr(ecs_services.time, "sleep", lambda _seconds: None)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the CLI state file at a temporary directory."""
    path = tmp_path / "config" / "state.json"
    monkeypatch.setattr("hello_fargate.cli.state.state_path", lambda: path)
    return path


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def config() -> EcsDeploymentConfig:
    return make_config()


@pytest.fixture
def messages() -> list[str]:
    return []


@pytest.fixture
def reporter(messages: list[str]) -> Callable[[str], None]:
    return messages.append
