"""
Description scanner — the core of the injection classifier.

Evaluates description text against the active rule set, suppresses
allowlisted matches, and rolls per-item results up into collection
results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mcpguardian.domain.models import (
    CollectionScanResult,
    Finding,
    ItemScanResult,
    ScanStatus,
    ScanSummary,
    ToolDefinition,
)
from mcpguardian.rules.allowlist import is_allowlisted, normalize_phrases
from mcpguardian.rules.base import DetectionRule
from mcpguardian.rules.builtin import BUILTIN_RULES

if TYPE_CHECKING:
    from mcpguardian.rules.registry import PatternRegistry

DefinitionLike = ToolDefinition | dict[str, Any]


def scan_description(name: str, text: str) -> ItemScanResult:
    """
    Scan one description with the built-in rules and no allowlist.

    Example:
        >>> result = scan_description("add", "Adds two numbers.")
        >>> result.status
        <ScanStatus.CLEAN: 'clean'>
    """
    return DescriptionScanner().scan(name, text)


def scan_collection(
    items: Iterable[DefinitionLike],
    collection_name: str = "unknown",
) -> CollectionScanResult:
    """Scan every definition of a collection with the built-in rules."""
    return DescriptionScanner().scan_collection(items, collection_name)


def is_description_safe(text: str) -> bool:
    """Quick check that a description has no critical findings."""
    return DescriptionScanner().is_safe(text)


def coerce_definitions(items: Iterable[DefinitionLike]) -> list[ToolDefinition]:
    """Accept ``ToolDefinition`` instances or raw ``{name, description, schema}`` dicts."""
    return [
        item if isinstance(item, ToolDefinition) else ToolDefinition.model_validate(item)
        for item in items
    ]


class ScannerConfig(BaseModel):
    """
    Explicit scanner configuration.

    Holds the rules to evaluate and the allowlisted phrases. A scanner
    never consults shared state, so independent scanners cannot
    interfere with each other.
    """

    model_config = ConfigDict(frozen=True)

    rules: tuple[DetectionRule, ...] = Field(default=tuple(BUILTIN_RULES))
    allowlist: tuple[str, ...] = Field(default=())

    @field_validator("allowlist", mode="before")
    @classmethod
    def validate_allowlist(cls, v: Iterable[str] | None) -> tuple[str, ...]:
        return normalize_phrases(tuple(v or ()))

    @classmethod
    def from_registry(
        cls, registry: PatternRegistry, allowlist: Iterable[str] = ()
    ) -> ScannerConfig:
        """Snapshot a registry's active rules together with an allowlist."""
        return cls(rules=tuple(registry.active_rules), allowlist=tuple(allowlist))


class DescriptionScanner:
    """
    Scans description text for injection techniques.

    Every non-overlapping match of every active rule becomes a finding
    unless it is allowlisted. Findings are ordered by rule, then offset.
    """

    def __init__(self, config: ScannerConfig | None = None) -> None:
        """
        Initialize the scanner.

        Args:
            config: Rules and allowlist. Defaults to the built-in rules
                with an empty allowlist.
        """
        self.config = config or ScannerConfig()

    @property
    def rules(self) -> tuple[DetectionRule, ...]:
        return self.config.rules

    def scan(self, name: str, text: str | None) -> ItemScanResult:
        """
        Scan a single item's description.

        Args:
            name: The item's name.
            text: The description text. ``None`` is treated as empty.

        Returns:
            ItemScanResult with the unsuppressed findings and the status
            derived from their severities.
        """
        text = text or ""
        findings: list[Finding] = []

        for rule in self.config.rules:
            for match in rule.matches(text):
                if is_allowlisted(match.group(), self.config.allowlist):
                    continue
                findings.append(rule.to_finding(match))

        return ItemScanResult(
            item_name=name,
            status=ScanStatus.from_findings(findings),
            findings=findings,
        )

    def scan_collection(
        self,
        items: Iterable[DefinitionLike],
        collection_name: str = "unknown",
    ) -> CollectionScanResult:
        """
        Scan every item of a collection.

        Only non-clean items are enumerated in the result, in input order.
        """
        definitions = coerce_definitions(items)
        flagged: list[ItemScanResult] = []

        for definition in definitions:
            result = self.scan(definition.name, definition.description)
            if not result.is_clean:
                flagged.append(result)

        return CollectionScanResult(
            collection_name=collection_name,
            item_count=len(definitions),
            status=ScanStatus.worst([r.status for r in flagged]),
            results=flagged,
        )

    def is_safe(self, text: str) -> bool:
        """Whether the text produces no critical findings."""
        return self.scan("_check", text).status != ScanStatus.CRITICAL

    @staticmethod
    def summarize(results: Iterable[CollectionScanResult]) -> ScanSummary:
        """Roll several collection results into a single summary."""
        return ScanSummary.from_results(list(results))
