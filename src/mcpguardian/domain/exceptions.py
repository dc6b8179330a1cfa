"""
Exception hierarchy for mcp-guardian.

All exceptions inherit from GuardianError for easy catching.
"""

from __future__ import annotations


class GuardianError(Exception):
    """Base exception for all mcp-guardian errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PatternError(GuardianError):
    """Raised when a custom pattern batch or pattern file is invalid."""

    def __init__(
        self,
        message: str,
        pattern_id: str | None = None,
        index: int | None = None,
        source: str | None = None,
    ) -> None:
        super().__init__(message, {"pattern_id": pattern_id, "index": index, "source": source})
        self.pattern_id = pattern_id
        self.index = index
        self.source = source


class ManifestNotFoundError(GuardianError):
    """Raised when a mutation is requested but no manifest exists."""

    def __init__(self, message: str, manifest_path: str | None = None) -> None:
        super().__init__(message, {"manifest_path": manifest_path})
        self.manifest_path = manifest_path


class CollectionNotFoundError(GuardianError):
    """Raised when a mutation targets a collection missing from the manifest."""

    def __init__(self, message: str, collection_name: str) -> None:
        super().__init__(message, {"collection_name": collection_name})
        self.collection_name = collection_name


class ConfigError(GuardianError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None) -> None:
        super().__init__(message, {"config_key": config_key})
        self.config_key = config_key
