"""
Persistence of the trust baseline (the manifest file).

Loading is a tagged decode: the document is decoded strictly as the
current multi-collection shape, then as the legacy single-collection
shape (upgraded and written back immediately), and anything else is
treated as "no manifest". Loading never raises; saving always does when
the disk refuses.

The store performs no locking. Callers must serialize concurrent
invocations against the same data directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from mcpguardian.adapters.backup import BackupManager
from mcpguardian.adapters.fs import FileSystemAdapter
from mcpguardian.domain.manifest import LegacyManifest, Manifest
from mcpguardian.version import __version__

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "tool-manifest.json"


def decode_manifest(
    data: Any, format_version: str = __version__
) -> tuple[Manifest | None, bool]:
    """
    Decode raw JSON data into a manifest.

    Args:
        data: Parsed JSON content of a manifest file.
        format_version: Version stamped on manifests upgraded from the
            legacy shape.

    Returns:
        ``(manifest, migrated)``. ``manifest`` is None when the data
        matches neither the current nor the legacy shape.
    """
    try:
        return Manifest.model_validate(data), False
    except ValidationError:
        pass

    try:
        legacy = LegacyManifest.model_validate(data)
    except ValidationError:
        return None, False

    return legacy.upgrade(format_version), True


class ManifestStore:
    """
    Loads and saves ``<data_dir>/tool-manifest.json``.

    Every save snapshots the existing file through the backup manager
    before overwriting it. Saves are last-write-wins.
    """

    def __init__(
        self,
        data_dir: Path,
        fs: FileSystemAdapter | None = None,
        backups: BackupManager | None = None,
        format_version: str = __version__,
    ) -> None:
        """
        Initialize the manifest store.

        Args:
            data_dir: Directory holding the manifest and its backups.
                Relative paths are made absolute.
            fs: Filesystem adapter.
            backups: Backup manager. Defaults to one using
                ``<data_dir>/backups``.
            format_version: Version written into new manifests.
        """
        self.data_dir = Path(data_dir).expanduser().absolute()
        self.fs = fs or FileSystemAdapter()
        self.backups = backups or BackupManager(
            self.manifest_path, backup_dir=self.data_dir / "backups", fs=self.fs
        )
        self.format_version = format_version

    @property
    def manifest_path(self) -> Path:
        return self.data_dir / MANIFEST_FILENAME

    def exists(self) -> bool:
        """Whether a manifest file is present (valid or not)."""
        return self.fs.is_file(self.manifest_path)

    def load(self) -> Manifest | None:
        """
        Load the manifest, upgrading a legacy one in place.

        Returns:
            The manifest, or None if it is missing, unreadable, or has an
            unrecognized structure.

        Raises:
            OSError: Only if writing back a migrated legacy manifest fails.
        """
        path = self.manifest_path
        if not self.fs.is_file(path):
            return None

        try:
            data = self.fs.read_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load manifest %s: %s", path, e)
            return None

        manifest, migrated = decode_manifest(data, self.format_version)
        if manifest is None:
            logger.warning("Invalid manifest structure in %s; ignoring it", path)
            return None

        if migrated:
            logger.warning("Upgrading legacy single-collection manifest %s", path)
            self.save(manifest)

        return manifest

    def save(self, manifest: Manifest) -> None:
        """
        Persist the manifest as pretty-printed JSON.

        Raises:
            OSError: If the backup or the write fails.
        """
        self.fs.ensure_dir(self.data_dir)
        self.backups.backup()
        self.fs.write_json(self.manifest_path, manifest.model_dump(mode="json", by_alias=True))

    def new_manifest(self) -> Manifest:
        """Create an empty manifest stamped with this store's version."""
        return Manifest.empty(self.format_version)
