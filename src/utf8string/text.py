"""EncodedText: immutable Unicode text with a canonical UTF-8 form.

The UTF-8 bytes are the only state that matters for equality and hashing.
UTF-16, UTF-32 and wide-character units are derived from them once, during
construction, so a constructed instance never changes afterwards.

Two ways to build one:

  - `EncodedText.from_utf16(units)` and friends raise `MalformedInputError`.
  - `EncodedText.try_from_utf16(units)` and friends return an `Outcome`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Tuple

import structlog

from . import codec
from .config import WCHAR_SUPPORT
from .errors import MalformedInputError
from .ids import digest_utf8
from .outcome import Outcome

logger = structlog.get_logger()


def _log_rejection(err: MalformedInputError) -> None:
    logger.debug(
        "malformed_input",
        encoding=err.encoding,
        violation=err.violation.name,
        offset=err.offset,
    )


@dataclass(frozen=True)
class EncodedText:
    utf8: bytes
    _scalars: Tuple[int, ...] = field(init=False, repr=False, compare=False)
    _utf16: Tuple[int, ...] = field(init=False, repr=False, compare=False)
    _utf32: Tuple[int, ...] = field(init=False, repr=False, compare=False)
    _wide: Tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        result = codec.decode_utf8(self.utf8)
        if not result.ok:
            _log_rejection(result.error)
        scalars = result.unwrap()

        # Keep only what precedes the terminator; bytes() also freezes bytearray input.
        data = bytes(self.utf8)
        end = data.find(0)
        object.__setattr__(self, "utf8", data if end < 0 else data[:end])
        object.__setattr__(self, "_scalars", scalars)
        object.__setattr__(self, "_utf16", codec.encode_utf16(scalars))
        object.__setattr__(self, "_utf32", codec.encode_utf32(scalars))
        if WCHAR_SUPPORT:
            object.__setattr__(self, "_wide", codec.encode_wide(scalars, terminated=True))

    # ---- construction ----

    @classmethod
    def _build(
        cls,
        encoding: str,
        decode: Callable[[Any], Outcome[Tuple[int, ...]]],
        data: Any,
    ) -> Outcome["EncodedText"]:
        result = decode(data)
        if not result.ok:
            _log_rejection(result.error)
            return Outcome.failure(result.error)
        if encoding == codec.UTF8:
            return Outcome.success(cls(bytes(data)))
        return Outcome.success(cls(codec.encode_utf8(result.value)))

    @classmethod
    def try_from_utf8(cls, data: bytes) -> Outcome["EncodedText"]:
        return cls._build(codec.UTF8, codec.decode_utf8, data)

    @classmethod
    def try_from_utf16(cls, units: Iterable[int]) -> Outcome["EncodedText"]:
        return cls._build(codec.UTF16, codec.decode_utf16, units)

    @classmethod
    def try_from_utf32(cls, units: Iterable[int]) -> Outcome["EncodedText"]:
        return cls._build(codec.UTF32, codec.decode_utf32, units)

    @classmethod
    def try_from_str(cls, s: str) -> Outcome["EncodedText"]:
        """Build from a Python str, rejecting lone surrogates it may carry."""
        if not isinstance(s, str):
            raise TypeError(f"expected str, got {type(s).__name__}")
        return cls.try_from_utf32([ord(c) for c in s])

    @classmethod
    def from_utf8(cls, data: bytes) -> "EncodedText":
        return cls.try_from_utf8(data).unwrap()

    @classmethod
    def from_utf16(cls, units: Iterable[int]) -> "EncodedText":
        return cls.try_from_utf16(units).unwrap()

    @classmethod
    def from_utf32(cls, units: Iterable[int]) -> "EncodedText":
        return cls.try_from_utf32(units).unwrap()

    @classmethod
    def from_str(cls, s: str) -> "EncodedText":
        return cls.try_from_str(s).unwrap()

    # ---- accessors ----

    def get_utf8(self) -> bytes:
        return self.utf8

    def get_utf16(self) -> Tuple[int, ...]:
        return self._utf16

    def get_utf32(self) -> Tuple[int, ...]:
        return self._utf32

    if WCHAR_SUPPORT:

        def get_wide(self) -> Tuple[int, ...]:
            """Native wchar_t units, zero-terminated."""
            return self._wide

    def get_character_count(self) -> int:
        return len(self._scalars)

    def get_byte_count(self) -> int:
        return len(self.utf8)

    def digest(self) -> str:
        return digest_utf8(self.utf8)

    def __len__(self) -> int:
        return len(self._scalars)

    def __str__(self) -> str:
        return codec.scalars_to_str(self._scalars)
