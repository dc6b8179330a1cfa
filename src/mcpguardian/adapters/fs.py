"""
Filesystem adapter for mcp-guardian.

Handles reading and writing the manifest and its backups.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class FileSystemAdapter:
    """
    Adapter for filesystem operations.

    All manifest and backup I/O goes through this adapter, making it
    easy to substitute in tests.
    """

    def __init__(self, base_path: Path | None = None) -> None:
        """
        Initialize the filesystem adapter.

        Args:
            base_path: Base path for relative file operations.
        """
        self.base_path = base_path or Path.cwd()

    def read_json(self, path: Path | str) -> Any:
        """
        Read and parse a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist.
            json.JSONDecodeError: If file isn't valid JSON.
        """
        return json.loads(self.read_text(path))

    def read_text(self, path: Path | str) -> str:
        """Read a UTF-8 text file."""
        return self._resolve_path(path).read_text(encoding="utf-8")

    def read_bytes(self, path: Path | str) -> bytes:
        """Read a file verbatim."""
        return self._resolve_path(path).read_bytes()

    def write_json(self, path: Path | str, data: Any) -> None:
        """Write pretty-printed UTF-8 JSON, creating parent directories."""
        self.write_text(path, json.dumps(data, indent=2, ensure_ascii=False))

    def write_text(self, path: Path | str, content: str) -> None:
        """Write a UTF-8 text file, creating parent directories."""
        path = self._resolve_path(path)
        self.ensure_dir(path.parent)
        path.write_text(content, encoding="utf-8")

    def write_bytes(self, path: Path | str, content: bytes) -> None:
        """Write a file verbatim, creating parent directories."""
        path = self._resolve_path(path)
        self.ensure_dir(path.parent)
        path.write_bytes(content)

    def ensure_dir(self, path: Path | str) -> Path:
        """Create a directory (and parents) if it does not exist."""
        path = self._resolve_path(path)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def exists(self, path: Path | str) -> bool:
        """Check if a path exists."""
        return self._resolve_path(path).exists()

    def is_file(self, path: Path | str) -> bool:
        """Check if path is a file."""
        return self._resolve_path(path).is_file()

    def unlink(self, path: Path | str) -> None:
        """Delete a file."""
        self._resolve_path(path).unlink()

    def glob(self, directory: Path | str, pattern: str) -> list[Path]:
        """
        Find files in a directory matching a glob pattern.

        Returns an empty list when the directory does not exist.
        """
        directory = self._resolve_path(directory)
        if not directory.is_dir():
            return []
        return list(directory.glob(pattern))

    def _resolve_path(self, path: Path | str) -> Path:
        """Resolve a path relative to base_path."""
        if isinstance(path, str):
            path = Path(path)

        if path.is_absolute():
            return path

        return self.base_path / path
