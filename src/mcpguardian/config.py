"""
Configuration for mcp-guardian.

Settings come from explicit arguments or from environment variables:

- ``MCP_GUARDIAN_DATA_DIR``: manifest and backup directory
  (default ``~/.mcp-guardian``)
- ``MCP_GUARDIAN_PATTERNS``: custom pattern file (JSON or YAML)
- ``MCP_GUARDIAN_ALLOWLIST``: allowlist file
- ``MCP_GUARDIAN_CUSTOM_ONLY``: use only custom patterns
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mcpguardian.adapters.store import MANIFEST_FILENAME
from mcpguardian.domain.exceptions import ConfigError

ENV_DATA_DIR = "MCP_GUARDIAN_DATA_DIR"
ENV_PATTERNS = "MCP_GUARDIAN_PATTERNS"
ENV_ALLOWLIST = "MCP_GUARDIAN_ALLOWLIST"
ENV_CUSTOM_ONLY = "MCP_GUARDIAN_CUSTOM_ONLY"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def default_data_dir() -> Path:
    return Path.home() / ".mcp-guardian"


class GuardianConfig(BaseModel):
    """Resolved settings for a Guardian instance."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(default_factory=default_data_dir)
    patterns_file: Path | None = Field(default=None, description="Custom pattern file")
    allowlist_file: Path | None = Field(default=None, description="Allowlist file")
    custom_patterns_only: bool = Field(
        default=False, description="Exclude the built-in rules"
    )

    @field_validator("data_dir", "patterns_file", "allowlist_file")
    @classmethod
    def validate_path(cls, v: Path | None) -> Path | None:
        """Expand ``~`` and anchor relative paths to the current directory."""
        if v is None:
            return None
        return v.expanduser().absolute()

    @property
    def manifest_path(self) -> Path:
        return self.data_dir / MANIFEST_FILENAME

    @property
    def backup_dir(self) -> Path:
        return self.data_dir / "backups"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GuardianConfig:
        """
        Build a configuration from environment variables.

        Args:
            environ: Environment mapping. Defaults to ``os.environ``.

        Raises:
            ConfigError: If a value cannot be interpreted.
        """
        env = os.environ if environ is None else environ

        data_dir = env.get(ENV_DATA_DIR)
        patterns = env.get(ENV_PATTERNS)
        allowlist = env.get(ENV_ALLOWLIST)

        return cls(
            data_dir=Path(data_dir) if data_dir else default_data_dir(),
            patterns_file=Path(patterns) if patterns else None,
            allowlist_file=Path(allowlist) if allowlist else None,
            custom_patterns_only=_parse_bool(env.get(ENV_CUSTOM_ONLY, ""), ENV_CUSTOM_ONLY),
        )


def _parse_bool(raw: str, key: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}", config_key=key)
