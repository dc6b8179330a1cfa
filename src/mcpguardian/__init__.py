"""
mcp-guardian — Injection Scanner and Tool Pinning for MCP Definitions

Scans tool descriptions for prompt injection techniques and pins tool
definitions against silent modification.

Usage:
    from mcpguardian import Guardian, GuardianConfig

    guardian = Guardian.from_config(GuardianConfig(data_dir=Path("./.guardian")))

    report = guardian.scan_collection(tools, "filesystem")
    print(report.status)

    result = guardian.verify(tools, "filesystem")
    if result.status == "changed":
        print(result.message)
"""

from mcpguardian.config import GuardianConfig
from mcpguardian.domain.exceptions import (
    CollectionNotFoundError,
    ConfigError,
    GuardianError,
    ManifestNotFoundError,
    PatternError,
)
from mcpguardian.domain.manifest import DiffResult, VerifyResult, VerifyStatus
from mcpguardian.domain.models import (
    CollectionScanResult,
    Finding,
    ItemScanResult,
    ScanStatus,
    Severity,
    ToolDefinition,
)
from mcpguardian.engine.fingerprint import fingerprint
from mcpguardian.engine.guardian import Guardian
from mcpguardian.engine.scanner import (
    DescriptionScanner,
    ScannerConfig,
    is_description_safe,
    scan_collection,
    scan_description,
)
from mcpguardian.rules.registry import PatternRegistry
from mcpguardian.version import __version__

__all__ = [
    # Version
    "__version__",
    # Facade
    "Guardian",
    "GuardianConfig",
    # Domain models
    "CollectionScanResult",
    "DiffResult",
    "Finding",
    "ItemScanResult",
    "ScanStatus",
    "Severity",
    "ToolDefinition",
    "VerifyResult",
    "VerifyStatus",
    # Scanning
    "DescriptionScanner",
    "PatternRegistry",
    "ScannerConfig",
    "is_description_safe",
    "scan_collection",
    "scan_description",
    # Fingerprints
    "fingerprint",
    # Exceptions
    "GuardianError",
    "PatternError",
    "ManifestNotFoundError",
    "CollectionNotFoundError",
    "ConfigError",
]
