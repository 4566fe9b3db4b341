from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, List, Sequence, Tuple

import structlog

from . import codec
from .config import WCHAR_BITS, WCHAR_SUPPORT
from .errors import MalformedInputError
from .ids import report_bytes
from .outcome import Outcome
from .schema import SchemaError, validate_or_raise
from .text import EncodedText

logger = structlog.get_logger()

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_MALFORMED_INPUT = 10
EXIT_INTERNAL_ERROR = 99

ENCODINGS = {"utf-8": codec.UTF8, "utf-16": codec.UTF16, "utf-32": codec.UTF32}
TARGETS = ("utf-8", "utf-16", "utf-32") + (("wide",) if WCHAR_SUPPORT else ())


class UsageError(Exception):
    pass


def configure_logging(verbose: bool = False) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer() if verbose else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def hex_unit(token: str) -> int:
    try:
        v = int(token, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hexadecimal unit: {token!r}") from None
    if v < 0:
        raise argparse.ArgumentTypeError(f"negative unit: {token!r}")
    return v


def _hex(units: Sequence[int], width: int) -> List[str]:
    return [f"{u:0{width}X}" for u in units]


def _decode_args(args: argparse.Namespace) -> Tuple[str, Outcome[EncodedText]]:
    if args.text is not None:
        if args.units or args.encoding is not None:
            raise UsageError("--text cannot be combined with units or a source encoding")
        return "str", EncodedText.try_from_str(args.text)

    encoding = ENCODINGS[args.encoding or "utf-8"]
    if encoding == codec.UTF8:
        bad = [u for u in args.units if u > 0xFF]
        if bad:
            raise UsageError(f"UTF-8 input takes byte units, got {bad[0]:X}")
        return encoding, EncodedText.try_from_utf8(bytes(args.units))
    if encoding == codec.UTF16:
        return encoding, EncodedText.try_from_utf16(args.units)
    return encoding, EncodedText.try_from_utf32(args.units)


def build_report(text: EncodedText, source: str) -> Dict[str, Any]:
    report: Dict[str, Any] = {
        "ok": True,
        "source_encoding": source,
        "text": str(text),
        "utf8": _hex(text.get_utf8(), 2),
        "utf16": _hex(text.get_utf16(), 4),
        "utf32": _hex(text.get_utf32(), 4),
        "character_count": text.get_character_count(),
        "byte_count": text.get_byte_count(),
        "digest": text.digest(),
    }
    if WCHAR_SUPPORT:
        # drop the terminator; JSON arrays carry their length
        report["wide"] = _hex(text.get_wide()[:-1], 4)
        report["wide_bits"] = WCHAR_BITS
    return report


def _report_error(err: MalformedInputError) -> int:
    logger.warning("malformed_input", encoding=err.encoding, violation=err.violation.name, offset=err.offset)
    envelope = {"ok": False, "error": err.to_dict()}
    validate_or_raise(envelope, which="error")
    print(report_bytes(envelope).decode("utf-8"))
    return EXIT_MALFORMED_INPUT


def cmd_inspect(args: argparse.Namespace) -> int:
    source, outcome = _decode_args(args)
    if not outcome.ok:
        return _report_error(outcome.error)

    report = build_report(outcome.value, source)
    validate_or_raise(report, which="report")
    print(report_bytes(report).decode("utf-8"))
    return EXIT_OK


def cmd_transcode(args: argparse.Namespace) -> int:
    _, outcome = _decode_args(args)
    if not outcome.ok:
        return _report_error(outcome.error)

    text = outcome.value
    if args.to == "utf-8":
        out = _hex(text.get_utf8(), 2)
    elif args.to == "utf-16":
        out = _hex(text.get_utf16(), 4)
    elif args.to == "utf-32":
        out = _hex(text.get_utf32(), 4)
    else:
        out = _hex(text.get_wide()[:-1], 4)

    logger.debug("transcoded", target=args.to, units=len(out))
    print(" ".join(out))
    return EXIT_OK


def _add_source_args(p: argparse.ArgumentParser, flag: str) -> None:
    p.add_argument(
        flag,
        dest="encoding",
        choices=sorted(ENCODINGS),
        default=None,
        help="Encoding of the given units (default: utf-8).",
    )
    p.add_argument("--text", help="Use a literal string instead of hexadecimal units.")
    p.add_argument("units", nargs="*", type=hex_unit, help="Code units in hexadecimal, e.g. C3 A9 or D83D DE00.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="utf8string", description="Validate and transcode UTF-8/16/32 text.")
    p.add_argument("-v", "--verbose", action="store_true", help="Human-readable debug logging on stderr.")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ins = sub.add_parser("inspect", help="Validate input and print every encoding as a JSON report.")
    _add_source_args(p_ins, "--encoding")
    p_ins.set_defaults(fn=cmd_inspect)

    p_tr = sub.add_parser("transcode", help="Validate input and print it in another encoding.")
    _add_source_args(p_tr, "--from")
    p_tr.add_argument("--to", choices=TARGETS, required=True, help="Target encoding.")
    p_tr.set_defaults(fn=cmd_transcode)

    return p


def main(argv: List[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    configure_logging(args.verbose)

    try:
        return args.fn(args)
    except UsageError as e:
        print(f"usage error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except SchemaError as e:
        logger.error("report_schema_mismatch", error=str(e))
        return EXIT_INTERNAL_ERROR
    except KeyboardInterrupt:
        return 130
    except Exception:
        logger.exception("internal_error", command=args.cmd)
        return EXIT_INTERNAL_ERROR
