"""
Built-in and operator-supplied detection rules.

Custom rules are loaded from JSON or YAML pattern files. A batch is
validated in full before any of it becomes active: one bad entry rejects
the whole batch and leaves the previously active rules untouched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from mcpguardian.domain.exceptions import PatternError
from mcpguardian.rules.base import DetectionRule
from mcpguardian.rules.builtin import BUILTIN_RULES

YAML_SUFFIXES = (".yaml", ".yml")


def parse_custom_rules(
    definitions: list[dict[str, Any]],
    source: str | None = None,
) -> list[DetectionRule]:
    """
    Validate and compile a batch of custom rule definitions.

    Args:
        definitions: Entries of the form ``{id, pattern, severity,
            description?, category?, cwe?}``.
        source: Where the definitions came from, for error messages.

    Returns:
        The compiled rules, in input order.

    Raises:
        PatternError: If any entry is invalid. No rules are returned.
    """
    if not isinstance(definitions, list):
        raise PatternError("Custom patterns must be a list", source=source)

    rules: list[DetectionRule] = []
    for index, entry in enumerate(definitions):
        if not isinstance(entry, dict):
            raise PatternError(
                f"Pattern #{index} must be an object, got {type(entry).__name__}",
                index=index,
                source=source,
            )
        pattern_id = entry.get("id")
        try:
            rules.append(DetectionRule.model_validate(entry))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'entry'}: {err['msg']}"
                for err in e.errors()
            )
            raise PatternError(
                f"Invalid pattern #{index} ({pattern_id or 'no id'}): {problems}",
                pattern_id=pattern_id if isinstance(pattern_id, str) else None,
                index=index,
                source=source,
            )

    return rules


def read_pattern_file(path: Path | str) -> list[dict[str, Any]]:
    """
    Read raw pattern definitions from a JSON or YAML file.

    Both a bare array and an object with a ``patterns`` array are accepted.

    Raises:
        PatternError: If the file cannot be read or parsed.
    """
    path = Path(path)

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise PatternError(f"Pattern file not found: {path}", source=str(path))
    except OSError as e:
        raise PatternError(f"Error reading pattern file: {e}", source=str(path))

    if path.suffix.lower() in YAML_SUFFIXES:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise PatternError(f"Invalid YAML in pattern file: {e}", source=str(path))
    else:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise PatternError(
                f"Invalid JSON in pattern file: {e.msg} (line {e.lineno})",
                source=str(path),
            )

    if isinstance(data, dict) and "patterns" in data:
        data = data["patterns"]

    if not isinstance(data, list):
        raise PatternError(
            "Pattern file must contain an array or an object with a 'patterns' array",
            source=str(path),
        )

    return data


class PatternRegistry:
    """
    Holds the built-in rules and the operator's custom rules.

    The active rule set is built-in critical, built-in warning, then custom
    rules, in that order. In custom-only mode the built-ins are excluded.
    """

    def __init__(
        self,
        custom_rules: list[DetectionRule] | None = None,
        custom_only: bool = False,
    ) -> None:
        self._custom_rules: tuple[DetectionRule, ...] = tuple(custom_rules or ())
        self.custom_only = custom_only

    @classmethod
    def from_file(cls, path: Path | str, custom_only: bool = False) -> PatternRegistry:
        """Create a registry with custom rules loaded from a pattern file."""
        registry = cls(custom_only=custom_only)
        registry.load_file(path)
        return registry

    @property
    def builtin_rules(self) -> list[DetectionRule]:
        return list(BUILTIN_RULES)

    @property
    def custom_rules(self) -> list[DetectionRule]:
        return list(self._custom_rules)

    @property
    def active_rules(self) -> list[DetectionRule]:
        if self.custom_only:
            return list(self._custom_rules)
        return [*BUILTIN_RULES, *self._custom_rules]

    def load_custom(
        self, definitions: list[dict[str, Any]], source: str | None = None
    ) -> list[DetectionRule]:
        """
        Replace the custom rules with a validated batch.

        Raises:
            PatternError: If any definition is invalid; the current custom
                rules stay active.
        """
        rules = parse_custom_rules(definitions, source=source)
        self._custom_rules = tuple(rules)
        return rules

    def load_file(self, path: Path | str) -> list[DetectionRule]:
        """Replace the custom rules with those defined in a pattern file."""
        return self.load_custom(read_pattern_file(path), source=str(path))

    def __len__(self) -> int:
        return len(self.active_rules)
