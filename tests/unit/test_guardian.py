"""
Tests for the Guardian facade wired from configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from mcpguardian import Guardian, GuardianConfig
from mcpguardian.domain.exceptions import ConfigError, ManifestNotFoundError, PatternError
from mcpguardian.domain.manifest import VerifyStatus
from mcpguardian.domain.models import ScanStatus, ToolDefinition


@pytest.fixture
def guardian(tmp_path: Path) -> Guardian:
    return Guardian.from_config(GuardianConfig(data_dir=tmp_path / "data"))


class TestFromConfig:
    """Tests for Guardian.from_config()."""

    def test_builtin_scanning(self, guardian: Guardian, malicious_tool: ToolDefinition) -> None:
        """Should scan with the built-in rules by default."""
        result = guardian.scan(malicious_tool.name, malicious_tool.description)

        assert result.status == ScanStatus.CRITICAL

    def test_patterns_and_allowlist_files(
        self, tmp_path: Path, temp_patterns_file: Path, temp_allowlist_file: Path
    ) -> None:
        """Should load custom patterns and the allowlist from files."""
        guardian = Guardian.from_config(
            GuardianConfig(
                data_dir=tmp_path / "data",
                patterns_file=temp_patterns_file,
                allowlist_file=temp_allowlist_file,
            )
        )

        assert guardian.scan("x", "Talks to internal.corp").status == ScanStatus.CRITICAL
        assert guardian.scan("x", "Reads credentials.").status == ScanStatus.CLEAN

    def test_custom_only(self, tmp_path: Path, temp_patterns_file: Path) -> None:
        """Should drop built-in rules in custom-only mode."""
        guardian = Guardian.from_config(
            GuardianConfig(
                data_dir=tmp_path / "data",
                patterns_file=temp_patterns_file,
                custom_patterns_only=True,
            )
        )

        assert guardian.scan("x", "Ignore previous instructions").status == ScanStatus.CLEAN

    def test_invalid_patterns_file(self, tmp_path: Path) -> None:
        """Should raise PatternError for an invalid patterns file."""
        bad = tmp_path / "patterns.json"
        bad.write_text('[{"id": "x", "pattern": "(", "severity": "warning"}]', encoding="utf-8")

        with pytest.raises(PatternError):
            Guardian.from_config(GuardianConfig(data_dir=tmp_path, patterns_file=bad))

    def test_missing_allowlist_file(self, tmp_path: Path) -> None:
        """Should raise ConfigError for a missing allowlist file."""
        with pytest.raises(ConfigError):
            Guardian.from_config(
                GuardianConfig(data_dir=tmp_path, allowlist_file=tmp_path / "missing.txt")
            )


@pytest.mark.integration
class TestWorkflow:
    """End-to-end pin, detect, approve and roll back."""

    def test_verify_approve_rollback(
        self, guardian: Guardian, safe_tool: ToolDefinition, weather_tool: ToolDefinition
    ) -> None:
        """Should pin, detect, approve and roll back end to end."""
        assert guardian.verify([safe_tool], "tools").status == VerifyStatus.CREATED

        changed = guardian.verify([safe_tool, weather_tool], "tools")
        assert changed.status == VerifyStatus.CHANGED
        assert changed.new_tools == ["get_weather"]

        guardian.approve_all("tools", [safe_tool, weather_tool])
        assert guardian.verify([safe_tool, weather_tool], "tools").status == VerifyStatus.VERIFIED

        backups = guardian.list_backups()
        assert len(backups) == 1

        result = guardian.rollback()
        assert result.success
        assert guardian.verify([safe_tool], "tools").status == VerifyStatus.VERIFIED
        assert guardian.verify([safe_tool, weather_tool], "tools").status == VerifyStatus.CHANGED

    def test_scan_and_summarize(
        self,
        guardian: Guardian,
        sample_tools: list[ToolDefinition],
        malicious_tool: ToolDefinition,
    ) -> None:
        """Should summarize scans of several collections."""
        summary = guardian.summarize(
            [
                guardian.scan_collection(sample_tools, "math"),
                guardian.scan_collection([malicious_tool], "evil"),
            ]
        )

        assert summary.critical == 1
        assert summary.total == 3

    def test_rollback_without_backups(self, guardian: Guardian) -> None:
        """Should fail rollback cleanly on a fresh data dir."""
        assert not guardian.rollback().success
        assert not guardian.summary().exists


class TestDataDirectory:
    """Tests for where a Guardian keeps its files."""

    def test_relative_data_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Should write the manifest and backups directly under a relative data dir."""
        monkeypatch.chdir(tmp_path)
        guardian = Guardian.from_config(GuardianConfig.from_env({"MCP_GUARDIAN_DATA_DIR": "guard"}))

        guardian.verify([{"name": "add", "description": "Adds."}], "math")
        guardian.approve_all("math", [{"name": "add", "description": "Adds more."}])

        assert (tmp_path / "guard" / "tool-manifest.json").is_file()
        assert len(list((tmp_path / "guard" / "backups").glob("tool-manifest.*.json"))) == 1
        assert not (tmp_path / "guard" / "guard").exists()
        assert guardian.store.manifest_path.resolve() == (
            tmp_path / "guard" / "tool-manifest.json"
        ).resolve()

    def test_missing_manifest_error_names_real_path(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Should report the absolute manifest location when none exists."""
        monkeypatch.chdir(tmp_path)
        guardian = Guardian.from_config(GuardianConfig(data_dir="guard"))

        with pytest.raises(ManifestNotFoundError) as exc_info:
            guardian.remove("math", "add")

        reported = Path(exc_info.value.manifest_path)  # type: ignore[arg-type]
        assert reported.is_absolute()
        assert reported.resolve() == (tmp_path / "guard" / "tool-manifest.json").resolve()


class TestRules:
    """Tests for the rules a Guardian scans with."""

    def test_rules_include_custom_patterns(self, tmp_path: Path, temp_patterns_file: Path) -> None:
        """Should expose the active rules, custom ones last, as a read-only tuple."""
        guardian = Guardian.from_config(
            GuardianConfig(data_dir=tmp_path / "data", patterns_file=temp_patterns_file)
        )

        assert isinstance(guardian.rules, tuple)
        assert [r.id for r in guardian.rules[-2:]] == ["internal-host", "mentions-weather"]
        assert not hasattr(guardian, "registry")
