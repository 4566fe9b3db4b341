"""Malformed-input error shared by every decode path."""

from __future__ import annotations

from enum import Enum


class Violation(Enum):
    BAD_LEAD_BYTE = "bad lead byte"
    TRUNCATED_SEQUENCE = "truncated sequence"
    BAD_CONTINUATION_BYTE = "bad continuation byte"
    OVERLONG_SEQUENCE = "overlong sequence"
    SURROGATE = "surrogate code point"
    OUT_OF_RANGE = "out-of-range scalar"
    LONE_HIGH_SURROGATE = "lone high surrogate"
    LONE_LOW_SURROGATE = "lone low surrogate"
    BAD_UNIT = "unit out of range for encoding"


class MalformedInputError(ValueError):
    """Raised (or carried in a failed Outcome) when input is not well-formed.

    `offset` is the index of the first unit of the offending sequence.
    """

    def __init__(self, encoding: str, violation: Violation, offset: int) -> None:
        self.encoding = encoding
        self.violation = violation
        self.offset = offset
        # args must match __init__ so pickle and copy can rebuild the error.
        super().__init__(encoding, violation, offset)

    def __str__(self) -> str:
        return f"malformed {self.encoding}: {self.violation.value} at offset {self.offset}"

    def to_dict(self) -> dict:
        return {
            "encoding": self.encoding,
            "violation": self.violation.name,
            "offset": self.offset,
            "message": str(self),
        }
