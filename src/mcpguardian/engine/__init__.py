"""
Engine layer for mcp-guardian.

Contains the description scanner, the fingerprint engine and the
verify/diff engine.
"""

from mcpguardian.engine.fingerprint import canonicalize, fingerprint, fingerprint_entry
from mcpguardian.engine.pinning import PinningEngine
from mcpguardian.engine.scanner import (
    DescriptionScanner,
    ScannerConfig,
    is_description_safe,
    scan_collection,
    scan_description,
)

__all__ = [
    # Scanning
    "DescriptionScanner",
    "ScannerConfig",
    "is_description_safe",
    "scan_collection",
    "scan_description",
    # Fingerprints
    "canonicalize",
    "fingerprint",
    "fingerprint_entry",
    # Pinning
    "PinningEngine",
]
