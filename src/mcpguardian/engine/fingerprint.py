"""
Fingerprint engine — content hashes of named definitions.

A fingerprint is the SHA-256 of the compact JSON serialization of
``{"name", "description", "schema"}``, where the schema has its object
keys sorted recursively. Array order is significant and preserved, so the
hash depends on every schema value but not on key order.
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any

from mcpguardian.domain.manifest import FingerprintEntry, utc_now_iso
from mcpguardian.domain.models import ToolDefinition

# JSON.stringify switches integral numbers to exponent notation from here on.
_EXPONENT_THRESHOLD = 1e21


def canonicalize(value: Any) -> Any:
    """
    Recursively sort mapping keys. Sequences keep their order.

    Numbers are rendered the way JavaScript serializes them: integral
    floats lose their fraction (``1.0`` becomes ``1``) and non-finite
    floats become ``null``.
    """
    if isinstance(value, dict):
        return {str(k): canonicalize(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(v) for v in value]
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < _EXPONENT_THRESHOLD:
            return int(value)
    return value


def canonical_payload(name: str, description: str, schema: Any) -> str:
    """Serialize a definition to its canonical compact JSON form."""
    payload = {
        "name": name,
        "description": description,
        "schema": canonicalize(schema),
    }
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def fingerprint(name: str, description: str, schema: Any) -> str:
    """
    Compute the fingerprint of a definition.

    Args:
        name: Definition name.
        description: Description text.
        schema: Input schema (any JSON value).

    Returns:
        64-character lowercase hex SHA-256 digest.

    Example:
        >>> a = fingerprint("add", "Adds.", {"b": 1, "a": 2})
        >>> a == fingerprint("add", "Adds.", {"a": 2, "b": 1})
        True
    """
    payload = canonical_payload(name, description, schema)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def utf16_length(text: str) -> int:
    """Length of ``text`` in UTF-16 code units, as JavaScript counts it."""
    return len(text.encode("utf-16-le", errors="surrogatepass")) // 2


def count_fields(schema: Any) -> int:
    """Shallow field count: top-level keys of an object schema, else 0."""
    if isinstance(schema, dict):
        return len(schema)
    return 0


def fingerprint_entry(
    definition: ToolDefinition, pinned_at: str | None = None
) -> FingerprintEntry:
    """Fingerprint a definition together with its diff-assist metrics."""
    return FingerprintEntry(
        hash=fingerprint(definition.name, definition.description, definition.input_schema),
        description_length=utf16_length(definition.description),
        field_count=count_fields(definition.input_schema),
        pinned_at=pinned_at or utc_now_iso(),
    )
