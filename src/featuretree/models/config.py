"""Configuration models."""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_IGNORE_PATTERNS = [
    "SUBREPO:IGNORE",
    "ARTIFACT:IGNORE",
    "RECORD REFERENCE TO LIFERAY-PORTAL",
]


class BranchConfig(BaseModel):
    """A branch checkout whose history is matched against tickets."""

    name: str = Field(..., description="Branch name")
    path: Path = Field(..., description="Path to the local checkout")
    ref_from: str = Field("", description="Start of the commit range (exclusive)")
    ref_to: str = Field("HEAD", description="End of the commit range (inclusive)")
    sync: bool = Field(False, description="Check out and pull the branch before reading history")
    remote: str = Field("upstream", description="Remote to pull from when syncing")

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "name": "master",
                "path": "/src/portal",
                "ref_from": "7.0.x",
                "ref_to": "HEAD",
                "sync": False,
                "remote": "upstream",
            }
        }


class ProfileConfig(BaseModel):
    """A named report: one tracker query, one feature tree, one export."""

    name: str = Field(..., description="Profile name, used in export file names")
    query: str = Field(..., description="JQL query selecting candidate tickets")
    max_results: Optional[int] = Field(None, description="Override for the search result limit")


class Settings(BaseSettings):
    """Application settings loaded from environment variables or a config file."""

    model_config = SettingsConfigDict(
        env_prefix="FEATURETREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Jira
    jira_server: str = "https://issues.liferay.com"
    jira_username: Optional[str] = None
    jira_password: Optional[str] = None
    epic_link_field: str = "customfield_12821"
    max_results: int = 500

    # Git history
    branches: List[BranchConfig] = Field(default_factory=list)
    ignore_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))

    # Reports
    profiles: List[ProfileConfig] = Field(default_factory=list)
    output_dir: Path = Path("./reports")

    # Logging
    log_level: str = "INFO"

    def get_profile(self, name: str) -> ProfileConfig:
        """Look up a profile by name.

        Raises:
            KeyError: If no profile has that name
        """
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise KeyError(f"Unknown profile: {name}")


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings, letting values from a JSON config file override the environment.

    Args:
        config_path: Optional JSON file with settings values

    Returns:
        Settings object

    Raises:
        ValueError: If the config file cannot be parsed
    """
    if config_path is None:
        return Settings()

    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid config file {config_path}: {e}") from e

    return Settings(**data)
