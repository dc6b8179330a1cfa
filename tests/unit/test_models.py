"""
Unit tests for domain models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from mcpguardian.domain.manifest import SCHEMA_TAG, LegacyManifest, Manifest, iso_from_millis
from mcpguardian.domain.models import (
    CollectionScanResult,
    Finding,
    ItemScanResult,
    ScanStatus,
    Severity,
    ToolDefinition,
)


class TestSeverity:
    """Tests for the Severity enum."""

    def test_severity_values(self) -> None:
        """Should parse and serialize severities as lowercase strings."""
        assert Severity("critical") is Severity.CRITICAL
        assert [s.value for s in Severity] == ["critical", "warning", "info"]

    def test_rejects_unknown_severity(self) -> None:
        """Should reject severities outside critical, warning and info."""
        with pytest.raises(ValueError):
            Severity("high")


class TestScanStatus:
    """Tests for ScanStatus aggregation."""

    def test_rank(self) -> None:
        """Should rank statuses clean < warning < critical."""
        assert ScanStatus.CLEAN.rank < ScanStatus.WARNING.rank < ScanStatus.CRITICAL.rank

    def test_worst(self) -> None:
        """Should pick the most severe status, clean for none."""
        assert ScanStatus.worst([ScanStatus.CLEAN, ScanStatus.CRITICAL, ScanStatus.WARNING]) == (
            ScanStatus.CRITICAL
        )
        assert ScanStatus.worst([]) == ScanStatus.CLEAN

    def test_from_findings(self) -> None:
        """Should ignore info findings when deriving the status."""
        info = Finding(rule_id="i", severity=Severity.INFO, matched_text="x", offset=0)
        warn = Finding(rule_id="w", severity=Severity.WARNING, matched_text="y", offset=1)

        assert ScanStatus.from_findings([]) == ScanStatus.CLEAN
        assert ScanStatus.from_findings([info]) == ScanStatus.CLEAN
        assert ScanStatus.from_findings([info, warn]) == ScanStatus.WARNING


class TestToolDefinition:
    """Tests for the ToolDefinition model."""

    @pytest.mark.parametrize("key", ["schema", "inputSchema", "input_schema"])
    def test_schema_aliases(self, key: str) -> None:
        """Should accept schema, inputSchema and input_schema."""
        definition = ToolDefinition.model_validate({"name": "t", key: {"type": "object"}})

        assert definition.input_schema == {"type": "object"}

    def test_null_description(self) -> None:
        """Should treat a null description as empty."""
        assert ToolDefinition.model_validate({"name": "t", "description": None}).description == ""

    def test_empty_name_rejected(self) -> None:
        """Should reject an empty name."""
        with pytest.raises(ValidationError):
            ToolDefinition(name="")

    def test_serializes_schema_key(self) -> None:
        """Should serialize the input schema under "schema"."""
        data = ToolDefinition(name="t", input_schema={"a": 1}).model_dump(by_alias=True)

        assert data == {"name": "t", "description": "", "schema": {"a": 1}}


class TestFinding:
    """Tests for the Finding model."""

    def test_finding_is_frozen(self) -> None:
        """Should reject mutation of a finding."""
        finding = Finding(rule_id="r", severity=Severity.WARNING, matched_text="x", offset=0)

        with pytest.raises(ValidationError):
            finding.offset = 3  # type: ignore[misc]

    def test_finding_is_hashable(self) -> None:
        """Should hash equal findings alike so they can be deduplicated."""
        f1 = Finding(rule_id="r", severity=Severity.WARNING, matched_text="x", offset=0)
        f2 = Finding(rule_id="r", severity=Severity.WARNING, matched_text="x", offset=0)
        f3 = Finding(
            rule_id="r", severity=Severity.WARNING, matched_text="x", offset=0, category="c"
        )

        assert hash(f1) == hash(f2)
        assert len({f1, f2, f3}) == 2

    def test_negative_offset_rejected(self) -> None:
        """Should reject a negative offset."""
        with pytest.raises(ValidationError):
            Finding(rule_id="r", severity=Severity.WARNING, matched_text="x", offset=-1)


class TestCollectionScanResult:
    """Tests for CollectionScanResult helpers."""

    def test_findings_by_severity(self) -> None:
        """Should collect findings of one severity across items."""
        crit = Finding(rule_id="c", severity=Severity.CRITICAL, matched_text="a", offset=0)
        warn = Finding(rule_id="w", severity=Severity.WARNING, matched_text="b", offset=2)
        result = CollectionScanResult(
            collection_name="x",
            item_count=4,
            status=ScanStatus.CRITICAL,
            results=[
                ItemScanResult(item_name="a", status=ScanStatus.CRITICAL, findings=[crit, warn]),
                ItemScanResult(item_name="b", status=ScanStatus.WARNING, findings=[warn]),
            ],
        )

        assert result.findings_by_severity(Severity.WARNING) == [warn, warn]
        assert result.findings_by_severity(Severity.CRITICAL) == [crit]
        assert result.clean_count == 2


class TestManifestModels:
    """Tests for manifest shapes."""

    def test_iso_from_millis(self) -> None:
        """Should format epoch milliseconds as ISO-8601 UTC."""
        assert iso_from_millis(0) == "1970-01-01T00:00:00.000Z"
        assert iso_from_millis(1_700_000_000_123) == "2023-11-14T22:13:20.123Z"

    def test_empty_manifest(self) -> None:
        """Should build an empty tagged manifest."""
        manifest = Manifest.empty("1.2.3")

        assert manifest.schema_tag == SCHEMA_TAG
        assert manifest.collections == {}
        assert manifest.item_count == 0

    def test_hash_must_be_hex_digest(self) -> None:
        """Should reject a hash that is not a SHA-256 hex digest."""
        with pytest.raises(ValidationError):
            LegacyManifest.model_validate(
                {
                    "collection": "x",
                    "formatVersion": "1",
                    "pinnedAt": "t",
                    "entries": {
                        "a": {"hash": "nothex", "descriptionLength": 0, "fieldCount": 0, "pinnedAt": "t"}
                    },
                }
            )

    def test_upgrade_keeps_entries(self, legacy_manifest_json: dict) -> None:
        """Should keep legacy entries when upgrading."""
        legacy = LegacyManifest.model_validate(legacy_manifest_json)

        manifest = legacy.upgrade("2.0.0")

        assert manifest.format_version == "2.0.0"
        assert manifest.collections["filesystem"].entries == legacy.entries
        assert manifest.item_count == 2
