"""
Adapters layer for mcp-guardian.

Contains all infrastructure: filesystem access, manifest persistence and
backups.
"""

from mcpguardian.adapters.backup import MAX_BACKUPS, BackupManager
from mcpguardian.adapters.fs import FileSystemAdapter
from mcpguardian.adapters.store import MANIFEST_FILENAME, ManifestStore, decode_manifest

__all__ = [
    "BackupManager",
    "FileSystemAdapter",
    "MANIFEST_FILENAME",
    "MAX_BACKUPS",
    "ManifestStore",
    "decode_manifest",
]
