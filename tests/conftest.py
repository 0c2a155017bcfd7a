"""Pytest fixtures for sprintpoker tests."""

import logging
import os
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner
from rich.logging import RichHandler

from sprintpoker.clients.jira import JiraClient
from sprintpoker.config import JiraSettings, PlanningConfig
from sprintpoker.core.output import OutputFormatter


BASE_URL = "https://x.atlassian.net"


def sprint_payload(
    sprint_id: int,
    name: str,
    state: str = "future",
    start: str | None = None,
    end: str | None = None,
) -> dict[str, Any]:
    """Build a sprint as returned by the Agile API."""
    payload: dict[str, Any] = {"id": sprint_id, "name": name, "state": state}
    if start:
        payload["startDate"] = start
    if end:
        payload["endDate"] = end
    return payload


def issue_payload(
    key: str,
    summary: str,
    status: str = "Ready to Size",
    parent: tuple[str, str] | None = None,
) -> dict[str, Any]:
    """Build an issue as returned by JQL search."""
    fields: dict[str, Any] = {"summary": summary, "status": {"name": status}}
    if parent:
        fields["parent"] = {"key": parent[0], "fields": {"summary": parent[1]}}
    return {"id": key.split("-")[-1], "key": key, "fields": fields}


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def settings() -> JiraSettings:
    """Resolved Jira settings for tests."""
    return JiraSettings(
        url=BASE_URL,
        email="dev@example.com",
        api_token="test-token",
        board_id="42",
    )


@pytest.fixture
def planning() -> PlanningConfig:
    return PlanningConfig()


@pytest.fixture
def mock_jira() -> MagicMock:
    """A JiraClient stand-in with every endpoint mocked."""
    return MagicMock(spec=JiraClient)


@pytest.fixture
def quiet_output() -> OutputFormatter:
    return OutputFormatter(color=False, quiet=True)


@pytest.fixture
def jira_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Set every required environment variable and isolate file lookups."""
    monkeypatch.setenv("JIRA_BASE_URL", BASE_URL)
    monkeypatch.setenv("JIRA_EMAIL", "dev@example.com")
    monkeypatch.setenv("JIRA_API_TOKEN", "test-token")
    monkeypatch.setenv("JIRA_BOARD_ID", "42")
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Clean environment variables before each test."""
    env_vars = [
        "SPRINTPOKER_JIRA_URL",
        "SPRINTPOKER_JIRA_EMAIL",
        "SPRINTPOKER_JIRA_API_TOKEN",
        "SPRINTPOKER_JIRA_BOARD_ID",
        "SPRINTPOKER_CONFIG",
        "JIRA_BASE_URL",
        "JIRA_URL",
        "JIRA_EMAIL",
        "JIRA_API_TOKEN",
        "JIRA_BOARD_ID",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers installed by setup_logging so they do not outlive a test."""
    yield

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if type(handler) in (logging.StreamHandler, RichHandler):
            root_logger.removeHandler(handler)
    logging.getLogger("sprintpoker").setLevel(logging.NOTSET)
