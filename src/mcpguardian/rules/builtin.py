"""
Built-in detection rules.

Detects prompt injection techniques embedded in tool descriptions.

Critical categories (likely malicious):
- cross_tool_instruction: attempts to chain or pre-empt other tool calls
- privilege_escalation: attempts to override the model's instructions
- exfiltration: attempts to move data to an external destination

Warning categories (suspicious, may be legitimate):
- sensitive_path: references to credentials and secret-bearing files
- encoded_content: base64 runs and escape sequences that may hide text
"""

from __future__ import annotations

from mcpguardian.domain.models import Severity
from mcpguardian.rules.base import DetectionRule


def _category(
    category: str,
    severity: Severity,
    description: str,
    patterns: list[str],
    cwe: str | None = None,
) -> list[DetectionRule]:
    """Build one rule per pattern; built-in rules are identified by category."""
    return [
        DetectionRule(
            id=category,
            pattern=pattern,
            severity=severity,
            description=description,
            category=category,
            cwe=cwe,
        )
        for pattern in patterns
    ]


CRITICAL_RULES: list[DetectionRule] = [
    *_category(
        "cross_tool_instruction",
        Severity.CRITICAL,
        "Instructs the model to call other tools before or after this one",
        [
            r"\bbefore\s+using\s+this\s+tool\b",
            r"\bfirst\s+call\b",
            r"\bthen\s+execute\b",
            r"\bafter\s+this\s+tool\b",
            r"\balways\s+call\b",
            r"\byou\s+must\s+(call|use|execute|run)\b",
            r"\bmust\s+first\b",
        ],
        cwe="CWE-77",
    ),
    *_category(
        "privilege_escalation",
        Severity.CRITICAL,
        "Attempts to override system or safety instructions",
        [
            r"\bignore\s+(previous|prior|all)\s+instructions?\b",
            r"\bdisregard\s+(prior|previous|all)\b",
            r"\boverride\s+(system|safety|security)\b",
            r"\bbypass\s+(security|safety|restrictions?)\b",
            r"\bnew\s+system\s+prompt\b",
            r"\byou\s+are\s+now\b",
            r"\bforget\s+(everything|all|previous)\b",
        ],
        cwe="CWE-77",
    ),
    *_category(
        "exfiltration",
        Severity.CRITICAL,
        "Directs data to an external destination",
        [
            r"https?://[^\s]+",
            r"\bsend\s+to\b",
            r"\bpost\s+to\b",
            r"\bforward\s+to\b",
            r"\bupload\s+to\b",
            r"\btransmit\s+to\b",
            r"\bexfiltrate\b",
        ],
        cwe="CWE-200",
    ),
]

WARNING_RULES: list[DetectionRule] = [
    *_category(
        "sensitive_path",
        Severity.WARNING,
        "References credentials or secret-bearing file locations",
        [
            r"~/\.ssh\b",
            r"~/\.aws\b",
            r"~/\.config\b",
            r"\bcredentials?\b",
            r"/etc/passwd\b",
            r"/etc/shadow\b",
            r"\.env\b",
            r"\bprivate[_-]?key\b",
            r"\bapi[_-]?key\b",
            r"\bsecret[_-]?key\b",
        ],
        cwe="CWE-538",
    ),
    *_category(
        "encoded_content",
        Severity.WARNING,
        "Contains encoded content that may hide instructions",
        [
            # Base64: at least 20 chars of the alphabet with optional padding
            r"[A-Za-z0-9+/]{20,}={0,2}",
            r"\\u00[0-9a-fA-F]{2}",
            r"\\x[0-9a-fA-F]{2}",
        ],
    ),
]

BUILTIN_RULES: list[DetectionRule] = [*CRITICAL_RULES, *WARNING_RULES]
