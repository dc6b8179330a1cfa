"""
Detection rules for mcp-guardian.

Built-in rules, the registry that combines them with operator-supplied
rules, and allowlist handling.
"""

from mcpguardian.rules.allowlist import is_allowlisted, load_allowlist, parse_allowlist
from mcpguardian.rules.base import DetectionRule
from mcpguardian.rules.builtin import BUILTIN_RULES, CRITICAL_RULES, WARNING_RULES
from mcpguardian.rules.registry import PatternRegistry, parse_custom_rules, read_pattern_file

__all__ = [
    # Base
    "DetectionRule",
    # Built-in ruleset
    "BUILTIN_RULES",
    "CRITICAL_RULES",
    "WARNING_RULES",
    # Registry
    "PatternRegistry",
    "parse_custom_rules",
    "read_pattern_file",
    # Allowlist
    "is_allowlisted",
    "load_allowlist",
    "parse_allowlist",
]
