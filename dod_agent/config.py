"""
Environment configuration and project config file loading.

Precedence when resolving: explicit overrides (CLI/API) > environment and
.env > .dodrc.json > defaults.
"""
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from dod_agent.models.enums import TicketType

# Load environment variables from .env file at module import time
load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".dodrc.json"


class ConfigError(Exception):
    """Raised when the project config file cannot be read."""
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_title: str = "Definition of Done Generator"
    api_version: str = "1.0.0"

    # Jira Configuration
    jira_base_url: str = "https://jira.atlassian.com"
    jira_email: Optional[str] = None
    jira_api_token: Optional[str] = None

    # GitLab Configuration
    gitlab_base_url: str = "https://gitlab.com"
    gitlab_token: Optional[str] = None

    # Generation defaults
    default_ticket_type: Optional[TicketType] = None
    default_post_comment: bool = False

    # Application Configuration
    request_timeout: int = 30
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class _ServiceSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    base_url: Optional[str] = Field(None, alias="baseUrl")
    token: Optional[str] = None
    email: Optional[str] = None


class _DefaultsSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ticket_type: Optional[TicketType] = Field(None, alias="ticketType")
    post_comment: Optional[bool] = Field(None, alias="postComment")


class DodrcConfig(BaseModel):
    """Structure of the .dodrc.json project file."""

    model_config = ConfigDict(extra="ignore")

    jira: _ServiceSection = Field(default_factory=_ServiceSection)
    gitlab: _ServiceSection = Field(default_factory=_ServiceSection)
    defaults: _DefaultsSection = Field(default_factory=_DefaultsSection)

    def to_settings_values(self) -> Dict[str, Any]:
        """Flatten into Settings field names, dropping unset values."""
        values = {
            "jira_base_url": self.jira.base_url,
            "jira_api_token": self.jira.token,
            "jira_email": self.jira.email,
            "gitlab_base_url": self.gitlab.base_url,
            "gitlab_token": self.gitlab.token,
            "default_ticket_type": self.defaults.ticket_type,
            "default_post_comment": self.defaults.post_comment,
        }
        return {key: value for key, value in values.items() if value is not None}


class ConfigLoader:
    """Loads and merges configuration from all sources."""

    def load_config_file(self, start_dir: Optional[Union[str, Path]] = None) -> Optional[DodrcConfig]:
        """
        Load .dodrc.json, searching from start_dir up to the filesystem root.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Parsed config, or None when no file exists

        Raises:
            ConfigError: If the file exists but is not valid
        """
        current = Path(start_dir or Path.cwd()).resolve()
        for directory in (current, *current.parents):
            config_path = directory / CONFIG_FILE_NAME
            if not config_path.is_file():
                continue
            try:
                data = json.loads(config_path.read_text(encoding="utf-8"))
                config = DodrcConfig.model_validate(data)
            except (json.JSONDecodeError, ValidationError, OSError) as e:
                raise ConfigError(f"Failed to parse config file at {config_path}: {e}") from e
            logger.info("Loaded config file %s", config_path)
            return config
        return None

    def load_env_config(self) -> Dict[str, Any]:
        """Return only the settings explicitly provided by the environment or .env."""
        env_settings = Settings()
        return env_settings.model_dump(include=env_settings.model_fields_set)

    def resolve_config(
        self,
        overrides: Optional[Dict[str, Any]] = None,
        config_dir: Optional[Union[str, Path]] = None
    ) -> Settings:
        """
        Merge all configuration sources.

        Args:
            overrides: Highest-priority values (e.g., from CLI arguments); None values are ignored
            config_dir: Directory to start searching for .dodrc.json

        Returns:
            Resolved Settings
        """
        resolved: Dict[str, Any] = {}

        file_config = self.load_config_file(config_dir)
        if file_config:
            resolved.update(file_config.to_settings_values())

        resolved.update(self.load_env_config())
        resolved.update({key: value for key, value in (overrides or {}).items() if value is not None})

        return Settings(**resolved)


# Global settings instance
settings = Settings()
