"""Configuration management for sprintpoker using Pydantic."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from sprintpoker.core.exceptions import ConfigError
from sprintpoker.core.logging import LogLevel


# Environment variable names for each required Jira setting, highest priority first
URL_ENV_VARS = ("SPRINTPOKER_JIRA_URL", "JIRA_BASE_URL", "JIRA_URL")
EMAIL_ENV_VARS = ("SPRINTPOKER_JIRA_EMAIL", "JIRA_EMAIL")
API_TOKEN_ENV_VARS = ("SPRINTPOKER_JIRA_API_TOKEN", "JIRA_API_TOKEN")
BOARD_ID_ENV_VARS = ("SPRINTPOKER_JIRA_BOARD_ID", "JIRA_BOARD_ID")


def _first_env(names: tuple[str, ...]) -> str | None:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


class JiraSettings(BaseModel):
    """Resolved, immutable Jira connection settings for one run."""

    model_config = {"frozen": True}

    url: str
    email: str
    api_token: str
    board_id: str
    timeout: int = 30
    sprint_field_id: int = 10007

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def sprint_field(self) -> str:
        """Field name holding a ticket's sprint memberships."""
        return f"cf[{self.sprint_field_id}]"

    @property
    def sprint_field_key(self) -> str:
        """REST field id of the sprint field, as accepted by the issue endpoint."""
        return f"customfield_{self.sprint_field_id}"


class JiraConfig(BaseModel):
    """Jira Cloud configuration."""

    url: str | None = None
    email: str | None = None
    api_token: str | None = None
    board_id: str | None = None
    timeout: int = 30
    sprint_field_id: int = 10007

    @field_validator("board_id", mode="before")
    @classmethod
    def coerce_board_id(cls, v: Any) -> Any:
        # YAML reads bare board ids as integers
        if isinstance(v, int):
            return str(v)
        return v

    def get_url(self) -> str | None:
        """Get Jira URL from config or environment."""
        return _first_env(URL_ENV_VARS) or self.url

    def get_email(self) -> str | None:
        """Get Jira email from config or environment."""
        return _first_env(EMAIL_ENV_VARS) or self.email

    def get_api_token(self) -> str | None:
        """Get Jira API token from config or environment."""
        token = _first_env(API_TOKEN_ENV_VARS)
        if token:
            return token
        # "from_env" is a placeholder for a token only set in the environment
        if self.api_token == "from_env":
            return None
        return self.api_token

    def get_board_id(self) -> str | None:
        """Get default board ID from config or environment."""
        return _first_env(BOARD_ID_ENV_VARS) or self.board_id

    def resolve(self) -> JiraSettings:
        """Check that every required setting is present and freeze them.

        Raises:
            ConfigError: If any required setting is missing
        """
        values = {
            "url": self.get_url(),
            "email": self.get_email(),
            "api_token": self.get_api_token(),
            "board_id": self.get_board_id(),
        }
        env_names = {
            "url": URL_ENV_VARS,
            "email": EMAIL_ENV_VARS,
            "api_token": API_TOKEN_ENV_VARS,
            "board_id": BOARD_ID_ENV_VARS,
        }

        missing = [env_names[key][1] for key, value in values.items() if not value]
        if missing:
            raise ConfigError(
                "Missing required configuration. Set these environment variables "
                "or add them to your .env file",
                details={"missing": ", ".join(missing)},
            )

        return JiraSettings(
            timeout=self.timeout,
            sprint_field_id=self.sprint_field_id,
            **values,
        )


class PlanningConfig(BaseModel):
    """Poker-planning behaviour."""

    model_config = {"frozen": True}

    ready_status: str = "Ready to Size"
    excluded_sprint_marker: str = "DevOps"
    output_file: str = "slack-commands.md"
    sprint_page_size: int = 50
    max_sprints: int = 1000
    max_issues: int = 100

    @field_validator("sprint_page_size", "max_sprints", "max_issues")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


class GlobalConfig(BaseModel):
    """Global settings."""

    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.INFO

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class SprintPokerConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    jira: JiraConfig = Field(default_factory=JiraConfig)
    planning: PlanningConfig = Field(default_factory=PlanningConfig)


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["sprintpoker.yaml", "sprintpoker.yml", ".sprintpoker.yaml", ".sprintpoker.yml"]

    def __init__(self, user_config_path: Path | None = None):
        self._user_config_path = user_config_path or Path.home() / ".sprintpoker" / "config.yaml"
        self._config: SprintPokerConfig | None = None

    def load(self, config_file: str | Path | None = None) -> SprintPokerConfig:
        """Load configuration from files.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./sprintpoker.yaml)
        3. User config (~/.sprintpoker/config.yaml)

        Environment variables override all of these when the Jira
        settings are read.

        Args:
            config_file: Optional explicit config file path

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        if self._user_config_path.exists():
            configs.append(self._load_yaml_file(self._user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged = self._merge_configs(configs)

        try:
            self._config = SprintPokerConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")

        if not isinstance(content, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return content

    def _merge_configs(self, configs: list[dict[str, Any]]) -> dict[str, Any]:
        """Deep merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = self._deep_merge(result, config)
        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def load_config(config_file: str | Path | None = None) -> SprintPokerConfig:
    """Load sprintpoker configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return ConfigLoader().load(config_file)


def get_default_config() -> SprintPokerConfig:
    """Get default configuration without loading from files."""
    return SprintPokerConfig()
