"""
The interface offered to embedding hosts.

Wires the pattern registry, scanner, manifest store, backup manager and
pinning engine together from a single configuration. All inputs are
in-memory definition lists and collection names; there is no network or
process boundary inside.
"""

from __future__ import annotations

from typing import Iterable

from mcpguardian.adapters.backup import BackupManager
from mcpguardian.adapters.fs import FileSystemAdapter
from mcpguardian.adapters.store import ManifestStore
from mcpguardian.config import GuardianConfig
from mcpguardian.domain.manifest import (
    BackupRecord,
    DiffResult,
    ManifestSummary,
    ManifestUpdate,
    RollbackResult,
    VerifyResult,
)
from mcpguardian.domain.models import CollectionScanResult, ItemScanResult, ScanSummary
from mcpguardian.engine.pinning import PinningEngine
from mcpguardian.engine.scanner import DefinitionLike, DescriptionScanner, ScannerConfig
from mcpguardian.rules.allowlist import load_allowlist
from mcpguardian.rules.base import DetectionRule
from mcpguardian.rules.registry import PatternRegistry


class Guardian:
    """
    Scans definitions for injection and pins them against tampering.

    The active rules and allowlist are snapshotted at construction; to
    change them, build a new Guardian.

    Example:
        >>> guardian = Guardian.from_config(GuardianConfig(data_dir=tmp))
        >>> guardian.verify(tools, "filesystem").status
        <VerifyStatus.CREATED: 'created'>
    """

    def __init__(self, scanner: DescriptionScanner, store: ManifestStore) -> None:
        self.scanner = scanner
        self.store = store
        self.pinning = PinningEngine(store)

    @property
    def rules(self) -> tuple[DetectionRule, ...]:
        """Rules the scanner evaluates. Fixed when the Guardian is built."""
        return self.scanner.rules

    @classmethod
    def from_config(cls, config: GuardianConfig | None = None) -> Guardian:
        """
        Build a Guardian from configuration.

        Raises:
            PatternError: If the pattern file is invalid.
            ConfigError: If the allowlist file cannot be read.
        """
        config = config or GuardianConfig.from_env()

        registry = PatternRegistry(custom_only=config.custom_patterns_only)
        if config.patterns_file is not None:
            registry.load_file(config.patterns_file)

        allowlist = load_allowlist(config.allowlist_file) if config.allowlist_file else ()
        scanner = DescriptionScanner(ScannerConfig.from_registry(registry, allowlist))

        fs = FileSystemAdapter()
        backups = BackupManager(config.manifest_path, backup_dir=config.backup_dir, fs=fs)
        store = ManifestStore(config.data_dir, fs=fs, backups=backups)

        return cls(scanner=scanner, store=store)

    # -- Scanning -----------------------------------------------------------

    def scan(self, name: str, text: str) -> ItemScanResult:
        return self.scanner.scan(name, text)

    def scan_collection(
        self, items: Iterable[DefinitionLike], collection_name: str = "unknown"
    ) -> CollectionScanResult:
        return self.scanner.scan_collection(items, collection_name)

    def summarize(self, results: Iterable[CollectionScanResult]) -> ScanSummary:
        return self.scanner.summarize(results)

    # -- Pinning ------------------------------------------------------------

    def verify(self, items: Iterable[DefinitionLike], collection_name: str) -> VerifyResult:
        return self.pinning.verify(items, collection_name)

    def diff(self, items: Iterable[DefinitionLike], collection_name: str) -> DiffResult:
        return self.pinning.diff(items, collection_name)

    def approve(self, collection_name: str, item: DefinitionLike) -> ManifestUpdate:
        return self.pinning.approve(collection_name, item)

    def approve_all(
        self, collection_name: str, items: Iterable[DefinitionLike]
    ) -> ManifestUpdate:
        return self.pinning.approve_all(collection_name, items)

    def remove(self, collection_name: str, item_name: str) -> ManifestUpdate:
        return self.pinning.remove(collection_name, item_name)

    def remove_collection(self, collection_name: str) -> ManifestUpdate:
        return self.pinning.remove_collection(collection_name)

    def summary(self) -> ManifestSummary:
        return self.pinning.summary()

    # -- Backups ------------------------------------------------------------

    def list_backups(self) -> list[BackupRecord]:
        return self.store.backups.list_backups()

    def rollback(self, timestamp: int | None = None) -> RollbackResult:
        return self.store.backups.rollback(timestamp)
