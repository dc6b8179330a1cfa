"""
Allowlist loading and matching.

An allowlist is an operator-maintained list of phrases that suppress
known-safe matches. Matching is case-insensitive and bidirectional: a
match is suppressed when it contains a phrase or is contained in one.
"""

from __future__ import annotations

from pathlib import Path

from mcpguardian.domain.exceptions import ConfigError


def normalize_phrases(phrases: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Strip and case-fold phrases, dropping blanks."""
    return tuple(p.strip().casefold() for p in phrases if p.strip())


def parse_allowlist(content: str) -> tuple[str, ...]:
    """Parse newline-delimited allowlist content; ``#`` lines are comments."""
    lines = [line for line in content.splitlines() if not line.strip().startswith("#")]
    return normalize_phrases(lines)


def load_allowlist(path: Path | str) -> tuple[str, ...]:
    """
    Load an allowlist file.

    Raises:
        ConfigError: If the file cannot be read.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Error reading allowlist {path}: {e}", config_key="allowlist_file")
    return parse_allowlist(content)


def is_allowlisted(matched_text: str, allowlist: tuple[str, ...]) -> bool:
    """Check whether a match is suppressed by any allowlisted phrase."""
    folded = matched_text.casefold()
    return any(phrase in folded or folded in phrase for phrase in allowlist)
