"""
Base rule infrastructure.

A detection rule is a compiled, case-insensitive regular expression with a
severity. Rules are validated when they are built, so matching them
against arbitrary text never fails.
"""

from __future__ import annotations

import re
from typing import Iterator

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from mcpguardian.domain.models import Finding, Severity


class DetectionRule(BaseModel):
    """
    A single detection rule.

    Rules are immutable once loaded. The ``pattern`` source is compiled
    with ``re.IGNORECASE`` when the rule is constructed; an invalid
    expression fails validation.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Rule identifier reported in findings")
    pattern: str = Field(..., description="Regular expression source")
    severity: Severity = Field(..., description="Severity of findings from this rule")
    description: str | None = Field(default=None, description="What the rule detects")
    category: str | None = Field(default=None, description="Technique category")
    cwe: str | None = Field(default=None, description="CWE mapping, e.g. CWE-77")

    _regex: re.Pattern[str] = PrivateAttr()

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("rule id must not be empty")
        return v

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        if not v:
            raise ValueError("pattern must not be empty")
        try:
            re.compile(v, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e
        return v

    def model_post_init(self, __context: object) -> None:
        self._regex = re.compile(self.pattern, re.IGNORECASE)

    @property
    def regex(self) -> re.Pattern[str]:
        return self._regex

    def matches(self, text: str) -> Iterator[re.Match[str]]:
        """Yield every non-overlapping, non-empty match in ``text``."""
        for match in self._regex.finditer(text):
            if match.group():
                yield match

    def to_finding(self, match: re.Match[str]) -> Finding:
        """Build a finding for a match produced by this rule."""
        return Finding(
            rule_id=self.id,
            severity=self.severity,
            matched_text=match.group(),
            offset=match.start(),
            category=self.category,
        )

    def __repr__(self) -> str:
        return f"<DetectionRule {self.id} {self.severity.value}>"
