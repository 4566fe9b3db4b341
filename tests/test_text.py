from __future__ import annotations

import threading

import pytest
from structlog.testing import capture_logs

from utf8string import EncodedText, MalformedInputError, Violation
from utf8string.config import WCHAR_BITS, WCHAR_SUPPORT

requires_wide = pytest.mark.skipif(not WCHAR_SUPPORT, reason="wide-character export disabled")


def test_from_utf8_counts_characters_and_bytes() -> None:
    t = EncodedText.from_utf8(b"\xc3\xa9")
    assert t.get_character_count() == 1
    assert t.get_byte_count() == 2
    assert len(t) == 1
    assert str(t) == "é"


def test_from_utf32_supplementary_exports() -> None:
    t = EncodedText.from_utf32([0x1F600])
    assert t.get_utf16() == (0xD83D, 0xDE00)
    assert t.get_utf8() == b"\xf0\x9f\x98\x80"
    assert t.get_utf32() == (0x1F600,)
    assert t.get_character_count() == 1
    assert t.get_byte_count() == 4


def test_from_utf16_stores_canonical_utf8() -> None:
    t = EncodedText.from_utf16([0x48, 0x69, 0xD83D, 0xDE00])
    assert t.get_utf8() == "Hi😀".encode("utf-8")
    assert t.get_utf32() == (0x48, 0x69, 0x1F600)


def test_get_utf8_is_idempotent() -> None:
    t = EncodedText.from_utf8("añb".encode("utf-8"))
    first = t.get_utf8()
    assert t.get_utf8() == first
    assert EncodedText.from_utf8("añb".encode("utf-8")) == t


def test_equality_and_hash_follow_canonical_bytes() -> None:
    a = EncodedText.from_utf8(b"\xe2\x82\xac")
    b = EncodedText.from_utf16([0x20AC])
    c = EncodedText.from_utf32([0x20AC])
    assert a == b == c
    assert len({a, b, c}) == 1
    assert a != EncodedText.from_utf8(b"$")


def test_terminator_truncates_input() -> None:
    t = EncodedText.from_utf8(b"abc\x00def")
    assert t.get_utf8() == b"abc"
    assert t.get_byte_count() == 3
    assert EncodedText.from_utf16([0x61, 0, 0x62]).get_utf8() == b"a"


def test_direct_construction_validates() -> None:
    assert EncodedText(b"ok").get_utf8() == b"ok"
    with pytest.raises(MalformedInputError):
        EncodedText(b"\xc0\x80")


def test_bytearray_input_is_frozen() -> None:
    buf = bytearray(b"abc")
    t = EncodedText.from_utf8(buf)
    buf[0] = ord("z")
    assert t.get_utf8() == b"abc"
    assert isinstance(t.get_utf8(), bytes)


def test_instances_are_immutable() -> None:
    t = EncodedText.from_utf8(b"abc")
    with pytest.raises(AttributeError):
        t.utf8 = b"xyz"  # type: ignore[misc]


@pytest.mark.parametrize(
    "build, arg, encoding",
    [
        (EncodedText.from_utf8, b"\xc0\x80", "UTF-8"),
        (EncodedText.from_utf16, [0xD800], "UTF-16"),
        (EncodedText.from_utf16, [0xDC00, 0x41], "UTF-16"),
        (EncodedText.from_utf32, [0x110000], "UTF-32"),
    ],
)
def test_malformed_input_raises(build, arg, encoding) -> None:
    with pytest.raises(MalformedInputError) as exc:
        build(arg)
    assert exc.value.encoding == encoding
    assert str(exc.value).startswith(f"malformed {encoding}: ")


def test_try_from_returns_outcome() -> None:
    ok = EncodedText.try_from_utf16([0x41])
    assert ok.ok
    assert ok.value.get_utf8() == b"A"

    bad = EncodedText.try_from_utf16([0xD800])
    assert not bad.ok
    assert bad.value is None
    assert bad.error.violation is Violation.LONE_HIGH_SURROGATE


def test_from_str_rejects_lone_surrogates() -> None:
    assert EncodedText.from_str("naïve").get_character_count() == 5

    smuggled = b"a\xff".decode("utf-8", "surrogateescape")
    r = EncodedText.try_from_str(smuggled)
    assert not r.ok
    assert r.error.violation is Violation.SURROGATE
    assert r.error.offset == 1

    with pytest.raises(TypeError):
        EncodedText.from_str(b"bytes")  # type: ignore[arg-type]


@requires_wide
def test_wide_export_is_terminated_native_units() -> None:
    t = EncodedText.from_utf32([0x41, 0x1F600])
    wide = t.get_wide()
    assert wide[-1] == 0
    if WCHAR_BITS == 16:
        assert wide == (0x41, 0xD83D, 0xDE00, 0)
    else:
        assert wide == (0x41, 0x1F600, 0)


def test_empty_text() -> None:
    t = EncodedText.from_utf16([])
    assert t.get_utf8() == b""
    assert t.get_character_count() == 0
    assert t.get_byte_count() == 0


@requires_wide
def test_empty_text_wide_is_just_terminator() -> None:
    assert EncodedText.from_utf16([]).get_wide() == (0,)


def test_digest_is_sha256_of_canonical_bytes() -> None:
    import hashlib

    t = EncodedText.from_utf16([0xE9])
    assert t.digest() == "sha256:" + hashlib.sha256(b"\xc3\xa9").hexdigest()


def test_concurrent_reads_see_identical_buffers() -> None:
    t = EncodedText.from_str("Ωmega 😀" * 50)
    seen = []

    def read() -> None:
        wide = t.get_wide() if WCHAR_SUPPORT else ()
        seen.append((t.get_utf8(), t.get_utf16(), t.get_utf32(), wide))

    threads = [threading.Thread(target=read) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert len(seen) == 8
    assert all(s == seen[0] for s in seen)


def test_direct_construction_logs_rejection() -> None:
    with capture_logs() as logs:
        with pytest.raises(MalformedInputError):
            EncodedText(b"\xc0\x80")
    assert logs == [
        {
            "event": "malformed_input",
            "log_level": "debug",
            "encoding": "UTF-8",
            "violation": "OVERLONG_SEQUENCE",
            "offset": 0,
        }
    ]


def test_try_from_logs_rejection_once() -> None:
    with capture_logs() as logs:
        assert not EncodedText.try_from_utf16([0xDC00]).ok
    assert [e["violation"] for e in logs] == ["LONE_LOW_SURROGATE"]
