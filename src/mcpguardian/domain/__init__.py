"""
Domain layer for mcp-guardian.

Contains all core data structures with zero external dependencies
beyond Pydantic.
"""

from mcpguardian.domain.exceptions import (
    CollectionNotFoundError,
    ConfigError,
    GuardianError,
    ManifestNotFoundError,
    PatternError,
)
from mcpguardian.domain.manifest import (
    BackupRecord,
    ChangedItem,
    CollectionManifestEntry,
    DiffResult,
    FingerprintEntry,
    LegacyManifest,
    Manifest,
    ManifestSummary,
    ManifestUpdate,
    RollbackResult,
    UpdateAction,
    VerifyResult,
    VerifyStatus,
)
from mcpguardian.domain.models import (
    CollectionScanResult,
    Finding,
    ItemScanResult,
    ScanStatus,
    ScanSummary,
    Severity,
    ToolDefinition,
)

__all__ = [
    # Scan models
    "CollectionScanResult",
    "Finding",
    "ItemScanResult",
    "ScanStatus",
    "ScanSummary",
    "Severity",
    "ToolDefinition",
    # Manifest models
    "BackupRecord",
    "ChangedItem",
    "CollectionManifestEntry",
    "DiffResult",
    "FingerprintEntry",
    "LegacyManifest",
    "Manifest",
    "ManifestSummary",
    "ManifestUpdate",
    "RollbackResult",
    "UpdateAction",
    "VerifyResult",
    "VerifyStatus",
    # Exceptions
    "GuardianError",
    "PatternError",
    "ManifestNotFoundError",
    "CollectionNotFoundError",
    "ConfigError",
]
