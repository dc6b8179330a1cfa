"""
Backup and rollback of the manifest file.

Every manifest overwrite is preceded by a verbatim copy of the current
file into ``<data_dir>/backups/tool-manifest.<ms>.json``. Only the
``MAX_BACKUPS`` most recent snapshots are retained.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Callable

from mcpguardian.adapters.fs import FileSystemAdapter
from mcpguardian.domain.manifest import BackupRecord, RollbackResult, iso_from_millis

logger = logging.getLogger(__name__)

MAX_BACKUPS = 10
BACKUP_GLOB = "tool-manifest.*.json"
_BACKUP_NAME = re.compile(r"^tool-manifest\.(\d+)\.json$")


def _now_millis() -> int:
    return int(time.time() * 1000)


class BackupManager:
    """
    Timestamped manifest snapshots with retention and restore.

    Timestamps handed out by one manager are strictly increasing, so two
    backups taken within the same millisecond never collide.
    """

    def __init__(
        self,
        manifest_path: Path,
        backup_dir: Path | None = None,
        fs: FileSystemAdapter | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """
        Initialize the backup manager.

        Args:
            manifest_path: The manifest file to snapshot and restore.
            backup_dir: Where snapshots live. Defaults to a ``backups``
                directory next to the manifest.
            fs: Filesystem adapter.
            clock: Source of millisecond timestamps.
        """
        self.manifest_path = Path(manifest_path).expanduser().absolute()
        self.backup_dir = (
            Path(backup_dir).expanduser().absolute()
            if backup_dir is not None
            else self.manifest_path.parent / "backups"
        )
        self.fs = fs or FileSystemAdapter()
        self._clock = clock or _now_millis

    def backup(self) -> BackupRecord | None:
        """
        Copy the current manifest file into the backup store.

        Returns:
            The new record, or None when there is no manifest file yet.

        Raises:
            OSError: If the copy fails.
        """
        if not self.fs.is_file(self.manifest_path):
            return None

        content = self.fs.read_bytes(self.manifest_path)
        timestamp = self._next_timestamp()
        path = self.backup_dir / f"tool-manifest.{timestamp}.json"
        self.fs.write_bytes(path, content)
        logger.debug("Backed up manifest to %s", path)

        self.prune()
        return self._record(timestamp, path)

    def list_backups(self) -> list[BackupRecord]:
        """List available backups, newest first."""
        records: list[BackupRecord] = []
        for path in self.fs.glob(self.backup_dir, BACKUP_GLOB):
            match = _BACKUP_NAME.match(path.name)
            if match:
                records.append(self._record(int(match.group(1)), path))

        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    def prune(self) -> list[BackupRecord]:
        """Delete backups beyond the retention limit, oldest first."""
        expired = self.list_backups()[MAX_BACKUPS:]
        for record in expired:
            self.fs.unlink(record.path)
            logger.debug("Pruned backup %s", record.path)
        return expired

    def rollback(self, timestamp: int | None = None) -> RollbackResult:
        """
        Restore the manifest from a backup.

        The current manifest is backed up first, so a rollback can itself
        be rolled back.

        Args:
            timestamp: Exact backup timestamp to restore. Defaults to the
                most recent backup.

        Returns:
            RollbackResult. Missing backups are reported, not raised. When
            the safety backup prunes the restored snapshot (it was the
            oldest at full retention), ``restored`` still describes it but
            ``restored.path`` no longer exists.

        Raises:
            OSError: If reading the backup or writing the manifest fails.
        """
        backups = self.list_backups()
        if not backups:
            return RollbackResult(success=False, message="No backups available")

        if timestamp is None:
            target = backups[0]
        else:
            target = next((b for b in backups if b.timestamp == timestamp), None)
            if target is None:
                return RollbackResult(success=False, message=f"Backup not found: {timestamp}")

        # Read first: the safety backup below may prune the target.
        content = self.fs.read_bytes(target.path)
        safety_backup = self.backup()
        self.fs.write_bytes(self.manifest_path, content)
        logger.info("Restored manifest from backup %s", target.iso_date)

        return RollbackResult(
            success=True,
            message=f"Manifest restored from backup {target.iso_date}",
            restored=target,
            safety_backup=safety_backup,
        )

    def _next_timestamp(self) -> int:
        now = self._clock()
        existing = self.list_backups()
        if existing and existing[0].timestamp >= now:
            return existing[0].timestamp + 1
        return now

    @staticmethod
    def _record(timestamp: int, path: Path) -> BackupRecord:
        return BackupRecord(timestamp=timestamp, path=path, iso_date=iso_from_millis(timestamp))
