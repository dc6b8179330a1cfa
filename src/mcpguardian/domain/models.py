"""
Domain models for mcp-guardian scanning.

This module contains the data structures produced and consumed by the
description scanner. All models are Pydantic v2 for validation and
serialization; JSON output uses camelCase keys.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Severity level of a detection rule and the findings it produces."""

    CRITICAL = "critical"  # Highly likely malicious, should be blocked
    WARNING = "warning"  # Suspicious, warrants review
    INFO = "info"  # Informational, never elevates status


class ScanStatus(str, Enum):
    """Overall verdict for a scanned item or collection."""

    CRITICAL = "critical"
    WARNING = "warning"
    CLEAN = "clean"

    @property
    def rank(self) -> int:
        return [ScanStatus.CLEAN, ScanStatus.WARNING, ScanStatus.CRITICAL].index(self)

    @classmethod
    def worst(cls, statuses: list[ScanStatus]) -> ScanStatus:
        """Return the most severe status, or CLEAN for an empty list."""
        return max(statuses, key=lambda s: s.rank, default=cls.CLEAN)

    @classmethod
    def from_findings(cls, findings: list[Finding]) -> ScanStatus:
        """Derive a status from findings. INFO findings never elevate it."""
        if any(f.severity == Severity.CRITICAL for f in findings):
            return cls.CRITICAL
        if any(f.severity == Severity.WARNING for f in findings):
            return cls.WARNING
        return cls.CLEAN


class ToolDefinition(BaseModel):
    """
    A named definition as reported by an external source.

    This is the shape consumed from the discovery collaborator:
    ``{name, description, schema}``. ``inputSchema`` is accepted as
    the schema key as well, since that is how MCP servers report it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Definition name", min_length=1)
    description: str = Field(default="", description="Free-text description")
    input_schema: Any = Field(
        default_factory=dict,
        validation_alias=AliasChoices("schema", "inputSchema", "input_schema"),
        serialization_alias="schema",
        description="Input schema, usually a JSON Schema object",
    )

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: str | None) -> str:
        return v or ""


class Finding(BaseModel):
    """A single pattern match flagged during scanning."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    rule_id: str = Field(..., description="Identifier of the rule that matched")
    severity: Severity = Field(..., description="Severity of the matching rule")
    matched_text: str = Field(..., description="The text the rule matched")
    offset: int = Field(..., ge=0, description="Character offset of the match")
    category: str | None = Field(default=None, description="Rule category, if any")


class ItemScanResult(BaseModel):
    """Result of scanning one item's description."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    item_name: str = Field(..., description="Name of the scanned item")
    status: ScanStatus = Field(..., description="Worst finding severity, or clean")
    findings: list[Finding] = Field(default_factory=list, description="Unsuppressed findings")

    @property
    def is_clean(self) -> bool:
        return self.status == ScanStatus.CLEAN


class CollectionScanResult(BaseModel):
    """
    Result of scanning every item of a collection.

    Only non-clean items are enumerated in ``results``; the number of clean
    items is ``item_count - len(results)``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    collection_name: str = Field(..., description="Name of the scanned collection")
    item_count: int = Field(..., ge=0, description="Number of items scanned")
    status: ScanStatus = Field(..., description="Worst item status")
    results: list[ItemScanResult] = Field(
        default_factory=list, description="Results for non-clean items only"
    )

    @property
    def clean_count(self) -> int:
        return self.item_count - len(self.results)

    def findings_by_severity(self, severity: Severity) -> list[Finding]:
        """Get findings across all items filtered by severity."""
        return [f for r in self.results for f in r.findings if f.severity == severity]


class ScanSummary(BaseModel):
    """Roll-up of several collection scans."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    collections: list[CollectionScanResult] = Field(default_factory=list)
    total: int = Field(default=0, ge=0, description="Items scanned across all collections")
    clean: int = Field(default=0, ge=0, description="Collections with status clean")
    warning: int = Field(default=0, ge=0, description="Collections with status warning")
    critical: int = Field(default=0, ge=0, description="Collections with status critical")

    @classmethod
    def from_results(cls, results: list[CollectionScanResult]) -> ScanSummary:
        """Create a summary from a list of collection results."""
        counts = {ScanStatus.CLEAN: 0, ScanStatus.WARNING: 0, ScanStatus.CRITICAL: 0}
        for result in results:
            counts[result.status] += 1

        return cls(
            collections=list(results),
            total=sum(r.item_count for r in results),
            clean=counts[ScanStatus.CLEAN],
            warning=counts[ScanStatus.WARNING],
            critical=counts[ScanStatus.CRITICAL],
        )

    @property
    def status(self) -> ScanStatus:
        return ScanStatus.worst([r.status for r in self.collections])

    def to_json(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return self.model_dump(mode="json", by_alias=True)
