"""Code point codec.

Decoders turn a zero-terminated unit sequence into a tuple of Unicode scalar
values and report ill-formed input through a failed `Outcome` rather than by
raising. Encoders take scalars that are already known to be valid and do not
check them again.

A Python sequence knows its own length, so decoding stops at the first zero
unit or at the end of the sequence, whichever comes first.
"""

from __future__ import annotations

import operator
from typing import Iterable, List, Sequence, Tuple

from .config import WCHAR_BITS
from .errors import MalformedInputError, Violation
from .outcome import Outcome

UTF8 = "UTF-8"
UTF16 = "UTF-16"
UTF32 = "UTF-32"

MAX_SCALAR = 0x10FFFF

HIGH_SURROGATE_MIN = 0xD800
HIGH_SURROGATE_MAX = 0xDBFF
LOW_SURROGATE_MIN = 0xDC00
LOW_SURROGATE_MAX = 0xDFFF

Scalars = Tuple[int, ...]

# (lead mask, lead marker, payload mask, sequence length, smallest value for that length)
_UTF8_LEADS = (
    (0xE0, 0xC0, 0x1F, 2, 0x80),
    (0xF0, 0xE0, 0x0F, 3, 0x800),
    (0xF8, 0xF0, 0x07, 4, 0x10000),
)


def is_surrogate(cp: int) -> bool:
    return HIGH_SURROGATE_MIN <= cp <= LOW_SURROGATE_MAX


def _fail(encoding: str, violation: Violation, offset: int) -> Outcome[Scalars]:
    return Outcome.failure(MalformedInputError(encoding, violation, offset))


def _until_terminator(units: Iterable[int]) -> List[int]:
    out: List[int] = []
    for u in units:
        u = operator.index(u)
        if u == 0:
            break
        out.append(u)
    return out


def decode_utf8(data: bytes) -> Outcome[Scalars]:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"decode_utf8 expects bytes-like input, got {type(data).__name__}")

    buf = bytes(data)
    end = buf.find(0)
    if end < 0:
        end = len(buf)

    out: List[int] = []
    i = 0
    while i < end:
        lead = buf[i]
        if lead < 0x80:
            out.append(lead)
            i += 1
            continue

        for mask, marker, payload, length, minimum in _UTF8_LEADS:
            if lead & mask == marker:
                break
        else:
            return _fail(UTF8, Violation.BAD_LEAD_BYTE, i)

        cp = lead & payload
        for k in range(1, length):
            if i + k >= end:
                return _fail(UTF8, Violation.TRUNCATED_SEQUENCE, i)
            b = buf[i + k]
            if b & 0xC0 != 0x80:
                return _fail(UTF8, Violation.BAD_CONTINUATION_BYTE, i)
            cp = (cp << 6) | (b & 0x3F)

        if cp < minimum:
            return _fail(UTF8, Violation.OVERLONG_SEQUENCE, i)
        if is_surrogate(cp):
            return _fail(UTF8, Violation.SURROGATE, i)
        if cp > MAX_SCALAR:
            return _fail(UTF8, Violation.OUT_OF_RANGE, i)

        out.append(cp)
        i += length

    return Outcome.success(tuple(out))


def decode_utf16(units: Iterable[int]) -> Outcome[Scalars]:
    seq = _until_terminator(units)
    end = len(seq)

    out: List[int] = []
    i = 0
    while i < end:
        u = seq[i]
        if not 0 <= u <= 0xFFFF:
            return _fail(UTF16, Violation.BAD_UNIT, i)

        if HIGH_SURROGATE_MIN <= u <= HIGH_SURROGATE_MAX:
            if i + 1 < end and LOW_SURROGATE_MIN <= seq[i + 1] <= LOW_SURROGATE_MAX:
                out.append(0x10000 + ((u - HIGH_SURROGATE_MIN) << 10) + (seq[i + 1] - LOW_SURROGATE_MIN))
                i += 2
                continue
            return _fail(UTF16, Violation.LONE_HIGH_SURROGATE, i)

        # A low surrogate here never follows a high one; pairs are consumed above.
        if LOW_SURROGATE_MIN <= u <= LOW_SURROGATE_MAX:
            return _fail(UTF16, Violation.LONE_LOW_SURROGATE, i)

        out.append(u)
        i += 1

    return Outcome.success(tuple(out))


def decode_utf32(units: Iterable[int]) -> Outcome[Scalars]:
    seq = _until_terminator(units)

    for i, u in enumerate(seq):
        if not 0 <= u <= 0xFFFFFFFF:
            return _fail(UTF32, Violation.BAD_UNIT, i)
        if is_surrogate(u):
            return _fail(UTF32, Violation.SURROGATE, i)
        if u > MAX_SCALAR:
            return _fail(UTF32, Violation.OUT_OF_RANGE, i)

    return Outcome.success(tuple(seq))


def encode_utf8(scalars: Iterable[int], terminated: bool = False) -> bytes:
    out = bytearray()
    for cp in scalars:
        if cp < 0x80:
            out.append(cp)
        elif cp < 0x800:
            out += bytes((0xC0 | (cp >> 6), 0x80 | (cp & 0x3F)))
        elif cp < 0x10000:
            out += bytes((0xE0 | (cp >> 12), 0x80 | ((cp >> 6) & 0x3F), 0x80 | (cp & 0x3F)))
        else:
            out += bytes(
                (
                    0xF0 | (cp >> 18),
                    0x80 | ((cp >> 12) & 0x3F),
                    0x80 | ((cp >> 6) & 0x3F),
                    0x80 | (cp & 0x3F),
                )
            )
    if terminated:
        out.append(0)
    return bytes(out)


def encode_utf16(scalars: Iterable[int], terminated: bool = False) -> Tuple[int, ...]:
    out: List[int] = []
    for cp in scalars:
        if cp < 0x10000:
            out.append(cp)
        else:
            v = cp - 0x10000
            out.append(HIGH_SURROGATE_MIN + (v >> 10))
            out.append(LOW_SURROGATE_MIN + (v & 0x3FF))
    if terminated:
        out.append(0)
    return tuple(out)


def encode_utf32(scalars: Iterable[int], terminated: bool = False) -> Tuple[int, ...]:
    out = list(scalars)
    if terminated:
        out.append(0)
    return tuple(out)


# wchar_t width is a property of the platform, so the variant is bound once here.
if WCHAR_BITS == 16:

    def encode_wide(scalars: Iterable[int], terminated: bool = False) -> Tuple[int, ...]:
        """Encode as native wide units (16-bit wchar_t: UTF-16)."""
        return encode_utf16(scalars, terminated)

else:

    def encode_wide(scalars: Iterable[int], terminated: bool = False) -> Tuple[int, ...]:
        """Encode as native wide units (32-bit wchar_t: UTF-32)."""
        return encode_utf32(scalars, terminated)


def scalars_to_str(scalars: Sequence[int]) -> str:
    return "".join(map(chr, scalars))
