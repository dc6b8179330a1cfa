"""
Diff/verify engine — compares current definitions with the trust baseline.

The first verify of a collection pins it and always succeeds. Later
verifies classify every item as new, changed, removed or unchanged.
Verification never rewrites an existing baseline; only approve and remove
do, and both require a manifest to exist.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from mcpguardian.domain.exceptions import CollectionNotFoundError, ManifestNotFoundError
from mcpguardian.domain.manifest import (
    ChangedItem,
    CollectionManifestEntry,
    CollectionSummary,
    DiffResult,
    FingerprintEntry,
    Manifest,
    ManifestSummary,
    ManifestUpdate,
    UpdateAction,
    VerifyResult,
    VerifyStatus,
    utc_now_iso,
)
from mcpguardian.domain.models import ToolDefinition
from mcpguardian.engine.fingerprint import fingerprint, fingerprint_entry, utf16_length
from mcpguardian.engine.scanner import DefinitionLike, coerce_definitions

if TYPE_CHECKING:
    from mcpguardian.adapters.store import ManifestStore

logger = logging.getLogger(__name__)


def index_definitions(items: Iterable[DefinitionLike]) -> dict[str, ToolDefinition]:
    """Index definitions by name. A repeated name keeps the last definition."""
    indexed: dict[str, ToolDefinition] = {}
    for definition in coerce_definitions(items):
        if definition.name in indexed:
            logger.warning("Duplicate definition name %r; keeping the last one", definition.name)
        indexed[definition.name] = definition
    return indexed


def build_collection_entry(definitions: dict[str, ToolDefinition]) -> CollectionManifestEntry:
    """Pin every definition with a single shared timestamp."""
    now = utc_now_iso()
    return CollectionManifestEntry(
        pinned_at=now,
        entries={name: fingerprint_entry(d, pinned_at=now) for name, d in definitions.items()},
    )


def compare_entries(
    definitions: dict[str, ToolDefinition],
    stored: dict[str, FingerprintEntry],
) -> tuple[list[str], list[ChangedItem], list[str], int]:
    """
    Classify current definitions against stored fingerprints.

    Returns:
        ``(added, changed, removed, unchanged_count)``. ``added`` and
        ``changed`` follow input order; ``removed`` follows stored order.
    """
    added: list[str] = []
    changed: list[ChangedItem] = []
    unchanged = 0

    for name, definition in definitions.items():
        entry = stored.get(name)
        if entry is None:
            added.append(name)
            continue

        current_hash = fingerprint(name, definition.description, definition.input_schema)
        if current_hash == entry.hash:
            unchanged += 1
        else:
            changed.append(
                ChangedItem(
                    name=name,
                    old_hash=entry.hash,
                    new_hash=current_hash,
                    old_len=entry.description_length,
                    new_len=utf16_length(definition.description),
                    old_pinned_at=entry.pinned_at,
                )
            )

    removed = [name for name in stored if name not in definitions]
    return added, changed, removed, unchanged


class PinningEngine:
    """
    Verifies, diffs and updates pinned fingerprints.

    Each call performs its own load-modify-save sequence against the
    store; no state is cached between calls.
    """

    def __init__(self, store: ManifestStore) -> None:
        self.store = store

    def verify(self, items: Iterable[DefinitionLike], collection_name: str) -> VerifyResult:
        """
        Verify definitions against the pinned baseline.

        Behavior:
        - No manifest, or collection not in it: pin the collection and
          return ``created``.
        - All fingerprints match: return ``verified``.
        - Any difference: return ``changed`` with details. The baseline is
          not modified.

        Args:
            items: Current definitions.
            collection_name: Collection the definitions belong to.

        Returns:
            VerifyResult.
        """
        definitions = index_definitions(items)
        manifest = self.store.load()

        if manifest is None or collection_name not in manifest.collections:
            manifest = manifest or self.store.new_manifest()
            manifest.collections[collection_name] = build_collection_entry(definitions)
            self.store.save(manifest)
            logger.info("Pinned %d definitions for %r", len(definitions), collection_name)
            return VerifyResult(
                status=VerifyStatus.CREATED,
                collection_name=collection_name,
                message=f"Tool manifest created for '{collection_name}' with {len(definitions)} tools",
            )

        stored = manifest.collections[collection_name].entries
        added, changed, removed, _ = compare_entries(definitions, stored)
        changed_names = [c.name for c in changed]

        if not (added or changed or removed):
            return VerifyResult(
                status=VerifyStatus.VERIFIED,
                collection_name=collection_name,
                message=f"All {len(definitions)} tool definitions verified successfully",
            )

        parts: list[str] = []
        if changed_names:
            parts.append(f"{len(changed_names)} modified: {', '.join(changed_names)}")
        if added:
            parts.append(f"{len(added)} new: {', '.join(added)}")
        if removed:
            parts.append(f"{len(removed)} removed: {', '.join(removed)}")

        return VerifyResult(
            status=VerifyStatus.CHANGED,
            collection_name=collection_name,
            message=f"Tool definition changes detected: {'; '.join(parts)}",
            changed_tools=changed_names,
            new_tools=added,
            removed_tools=removed,
        )

    def diff(self, items: Iterable[DefinitionLike], collection_name: str) -> DiffResult:
        """
        Compare definitions with the baseline without modifying it.

        With no baseline for the collection, every current item is
        reported as added.
        """
        definitions = index_definitions(items)
        manifest = self.store.load()
        collection = manifest.collections.get(collection_name) if manifest else None
        stored = collection.entries if collection else {}

        added, changed, removed, unchanged = compare_entries(definitions, stored)

        return DiffResult(
            collection_name=collection_name,
            added=added,
            removed=removed,
            changed=changed,
            unchanged_count=unchanged,
            manifest_exists=manifest is not None,
            collection_exists=collection is not None,
        )

    def approve(self, collection_name: str, item: DefinitionLike) -> ManifestUpdate:
        """
        Re-pin a single item after an intentional change.

        Raises:
            ManifestNotFoundError: If no manifest exists.
            CollectionNotFoundError: If the collection is not pinned.
        """
        (definition,) = coerce_definitions([item])
        manifest = self._require_manifest("approve tool change")
        collection = self._require_collection(manifest, collection_name)

        collection.entries[definition.name] = fingerprint_entry(definition)
        self.store.save(manifest)
        logger.info("Approved %r in %r", definition.name, collection_name)

        return ManifestUpdate(
            action=UpdateAction.APPROVED,
            collection_name=collection_name,
            item_names=[definition.name],
            message=f"Approved '{definition.name}' in '{collection_name}'",
        )

    def approve_all(
        self, collection_name: str, items: Iterable[DefinitionLike]
    ) -> ManifestUpdate:
        """
        Re-pin a whole collection, replacing its stored entries.

        Other collections are untouched.

        Raises:
            ManifestNotFoundError: If no manifest exists.
            CollectionNotFoundError: If the collection is not pinned.
        """
        definitions = index_definitions(items)
        manifest = self._require_manifest("approve tools")
        self._require_collection(manifest, collection_name)

        manifest.collections[collection_name] = build_collection_entry(definitions)
        self.store.save(manifest)
        logger.info("Approved %d definitions in %r", len(definitions), collection_name)

        return ManifestUpdate(
            action=UpdateAction.APPROVED,
            collection_name=collection_name,
            item_names=list(definitions),
            message=f"Approved {len(definitions)} tools in '{collection_name}'",
        )

    def remove(self, collection_name: str, item_name: str) -> ManifestUpdate:
        """
        Remove an item from a collection's baseline.

        Removing an unknown item or an item of an unknown collection is a
        no-op.

        Raises:
            ManifestNotFoundError: If no manifest exists.
        """
        manifest = self._require_manifest("remove tool")
        collection = manifest.collections.get(collection_name)

        if collection is None or item_name not in collection.entries:
            return ManifestUpdate(
                action=UpdateAction.UNCHANGED,
                collection_name=collection_name,
                message=f"'{item_name}' is not pinned in '{collection_name}'",
            )

        del collection.entries[item_name]
        self.store.save(manifest)
        logger.info("Removed %r from %r", item_name, collection_name)

        return ManifestUpdate(
            action=UpdateAction.REMOVED,
            collection_name=collection_name,
            item_names=[item_name],
            message=f"Removed '{item_name}' from '{collection_name}'",
        )

    def remove_collection(self, collection_name: str) -> ManifestUpdate:
        """
        Remove a whole collection from the baseline.

        Raises:
            ManifestNotFoundError: If no manifest exists.
        """
        manifest = self._require_manifest("remove collection")
        collection = manifest.collections.pop(collection_name, None)

        if collection is None:
            return ManifestUpdate(
                action=UpdateAction.UNCHANGED,
                collection_name=collection_name,
                message=f"Collection '{collection_name}' is not pinned",
            )

        self.store.save(manifest)
        logger.info("Removed collection %r", collection_name)

        return ManifestUpdate(
            action=UpdateAction.REMOVED,
            collection_name=collection_name,
            item_names=list(collection.entries),
            message=f"Removed collection '{collection_name}' ({len(collection.entries)} tools)",
        )

    def summary(self) -> ManifestSummary:
        """Summarize the stored baseline."""
        manifest = self.store.load()
        if manifest is None:
            return ManifestSummary(exists=False)

        return ManifestSummary(
            exists=True,
            format_version=manifest.format_version,
            collection_count=len(manifest.collections),
            item_count=manifest.item_count,
            collections=[
                CollectionSummary(name=name, item_count=len(c.entries), pinned_at=c.pinned_at)
                for name, c in manifest.collections.items()
            ],
        )

    def list_collections(self) -> list[str]:
        """Names of the pinned collections."""
        manifest = self.store.load()
        return list(manifest.collections) if manifest else []

    def _require_manifest(self, action: str) -> Manifest:
        manifest = self.store.load()
        if manifest is None:
            raise ManifestNotFoundError(
                f"Cannot {action}: no manifest exists",
                manifest_path=str(self.store.manifest_path),
            )
        return manifest

    @staticmethod
    def _require_collection(manifest: Manifest, collection_name: str) -> CollectionManifestEntry:
        collection = manifest.collections.get(collection_name)
        if collection is None:
            raise CollectionNotFoundError(
                f"Collection '{collection_name}' is not pinned", collection_name=collection_name
            )
        return collection
