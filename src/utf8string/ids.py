"""Stable identifiers for canonical text.

Every `EncodedText` has exactly one byte form, so its digest is simply the
SHA-256 of those bytes. Reports are rendered with sorted keys and compact
separators so that the same text always produces the same report bytes.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Dict

DIGEST_PREFIX = "sha256"


def digest_utf8(utf8: bytes) -> str:
    """Return "sha256:<64-hex>" for canonical UTF-8 bytes."""

    if not isinstance(utf8, (bytes, bytearray, memoryview)):
        raise TypeError(f"digest_utf8 expects bytes-like input, got {type(utf8).__name__}")
    return f"{DIGEST_PREFIX}:{hashlib.sha256(bytes(utf8)).hexdigest()}"


def report_bytes(report: Dict[str, Any]) -> bytes:
    # ensure_ascii=False keeps the "text" field in its own encoding.
    return json.dumps(report, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
