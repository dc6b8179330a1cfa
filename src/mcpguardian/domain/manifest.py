"""
Manifest domain models.

Defines the on-disk trust baseline (current multi-collection shape and the
legacy single-collection shape it migrates from) together with the
structured results of verify, diff, approve/remove and rollback.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SCHEMA_TAG = "multi-collection"

_HASH_PATTERN = r"^[0-9a-f]{64}$"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def iso_from_millis(timestamp: int) -> str:
    """Render milliseconds since epoch as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    moment = _EPOCH + timedelta(milliseconds=timestamp)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    """Current UTC time in the format used for ``pinnedAt``."""
    return iso_from_millis(int(datetime.now(timezone.utc).timestamp() * 1000))


class FingerprintEntry(BaseModel):
    """Pinned fingerprint of a single item."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    hash: str = Field(..., pattern=_HASH_PATTERN, description="SHA-256 hex digest")
    description_length: int = Field(..., ge=0, description="Description length in characters")
    field_count: int = Field(..., ge=0, description="Top-level key count of the schema")
    pinned_at: str = Field(..., description="ISO timestamp when the item was pinned")


class CollectionManifestEntry(BaseModel):
    """Pinned fingerprints of every item in one collection."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pinned_at: str = Field(..., description="ISO timestamp when the collection was pinned")
    entries: dict[str, FingerprintEntry] = Field(default_factory=dict)


class Manifest(BaseModel):
    """The trust baseline stored on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    format_version: str = Field(..., description="Package version that wrote the manifest")
    schema_tag: Literal["multi-collection"] = Field(..., description="Format discriminator")
    collections: dict[str, CollectionManifestEntry] = Field(...)

    @classmethod
    def empty(cls, format_version: str) -> Manifest:
        """Create a manifest with no collections."""
        return cls(format_version=format_version, schema_tag=SCHEMA_TAG, collections={})

    @property
    def item_count(self) -> int:
        return sum(len(c.entries) for c in self.collections.values())


class LegacyManifest(BaseModel):
    """
    Legacy single-collection manifest.

    Read-only: it is only ever decoded so it can be upgraded to
    ``Manifest``. Unknown keys are rejected so malformed documents are
    not mistaken for a legacy baseline.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    collection: str = Field(..., min_length=1)
    format_version: str
    pinned_at: str
    entries: dict[str, FingerprintEntry]

    def upgrade(self, format_version: str) -> Manifest:
        """Convert to the multi-collection shape, keeping every entry as-is."""
        return Manifest(
            format_version=format_version,
            schema_tag=SCHEMA_TAG,
            collections={
                self.collection: CollectionManifestEntry(
                    pinned_at=self.pinned_at,
                    entries=dict(self.entries),
                )
            },
        )


class VerifyStatus(str, Enum):
    """Outcome of verifying definitions against the baseline."""

    CREATED = "created"
    VERIFIED = "verified"
    CHANGED = "changed"


class VerifyResult(BaseModel):
    """Result of verifying a collection's definitions."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    status: VerifyStatus
    collection_name: str
    message: str
    changed_tools: list[str] = Field(default_factory=list)
    new_tools: list[str] = Field(default_factory=list)
    removed_tools: list[str] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.status == VerifyStatus.CHANGED


class ChangedItem(BaseModel):
    """An item whose fingerprint differs from the baseline."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    old_hash: str
    new_hash: str
    old_len: int
    new_len: int
    old_pinned_at: str


class DiffResult(BaseModel):
    """Read-only comparison of current definitions with the baseline."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    collection_name: str
    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    changed: list[ChangedItem] = Field(default_factory=list)
    unchanged_count: int = Field(default=0, ge=0)
    manifest_exists: bool = False
    collection_exists: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.changed)


class UpdateAction(str, Enum):
    """What an approve/remove call did to the baseline."""

    APPROVED = "approved"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


class ManifestUpdate(BaseModel):
    """Structured result of approve/remove operations."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    action: UpdateAction
    collection_name: str
    item_names: list[str] = Field(default_factory=list)
    message: str


class CollectionSummary(BaseModel):
    """Per-collection line of a manifest summary."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str
    item_count: int
    pinned_at: str


class ManifestSummary(BaseModel):
    """Overview of the stored baseline for status displays."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    exists: bool
    format_version: str | None = None
    collection_count: int = 0
    item_count: int = 0
    collections: list[CollectionSummary] = Field(default_factory=list)


class BackupRecord(BaseModel):
    """A timestamped manifest snapshot on disk."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    timestamp: int = Field(..., ge=0, description="Capture time in milliseconds since epoch")
    path: Path
    iso_date: str


class RollbackResult(BaseModel):
    """
    Outcome of restoring the manifest from a backup.

    ``restored`` records the snapshot that was copied back. Its file may
    already be pruned by the time the result is returned.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    success: bool
    message: str
    restored: BackupRecord | None = None
    safety_backup: BackupRecord | None = None
