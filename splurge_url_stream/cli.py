"""Command line interface: rewrite URLs in a CSS file.

Examples::

    splurge-url-stream styles.css out.css --prefix https://cdn.example.com/
    splurge-url-stream styles.css --replace logo.png=logo@2x.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from urllib.parse import urlsplit

from splurge_url_stream import __version__
from splurge_url_stream.constants import DEFAULT_BUFFER_SIZE, DEFAULT_ENCODING, NON_RELATIVE_PREFIXES
from splurge_url_stream.exceptions import SplurgeUrlStreamError, SplurgeUrlStreamRewriteError
from splurge_url_stream.pipeline import rewrite_file, rewrite_file_to
from splurge_url_stream.url_rewriter import Replacer

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_REWRITE_ERRORS = 2


def is_relative_url(url: str) -> bool:
    if url.startswith(NON_RELATIVE_PREFIXES):
        return False
    return not urlsplit(url).scheme


def build_replacer(replacements: dict[str, str], prefix: str | None = None) -> Replacer:
    """Build the URL mapping from exact replacements and an optional prefix."""

    def replace(url: str) -> str:
        if url in replacements:
            return replacements[url]
        if prefix and is_relative_url(url):
            return prefix + url
        return url

    return replace


def _parse_replacement(value: str) -> tuple[str, str]:
    old, sep, new = value.partition("=")
    if not sep or not old:
        raise argparse.ArgumentTypeError(f"expected OLD=NEW, got {value!r}")
    return old, new


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="splurge-url-stream", description="Rewrite URLs in CSS text.")
    parser.add_argument("src", help="Source CSS file")
    parser.add_argument("dst", nargs="?", help="Destination file (default: stdout)")
    parser.add_argument(
        "--replace",
        action="append",
        type=_parse_replacement,
        default=[],
        metavar="OLD=NEW",
        help="Replace the exact URL OLD with NEW (repeatable)",
    )
    parser.add_argument("--prefix", help="Prepend PREFIX to relative URLs")
    parser.add_argument("--buffer-size", type=int, default=DEFAULT_BUFFER_SIZE, help="Raw read size in bytes")
    parser.add_argument("--encoding", default=DEFAULT_ENCODING)
    parser.add_argument("--fail-fast", action="store_true", help="Abort on the first rewrite error")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _log_rewrite_error(error: SplurgeUrlStreamRewriteError) -> None:
    logger.error("batch %s not rewritten: %s", error.details.get("batch_index"), error.message)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    replacer = build_replacer(dict(args.replace), args.prefix)
    try:
        if args.dst:
            report = rewrite_file(
                args.src,
                args.dst,
                replacer,
                buffer_size=args.buffer_size,
                encoding=args.encoding,
                fail_fast=args.fail_fast,
                on_error=_log_rewrite_error,
            )
        else:
            report = rewrite_file_to(
                args.src,
                sys.stdout,
                replacer,
                buffer_size=args.buffer_size,
                encoding=args.encoding,
                fail_fast=args.fail_fast,
                on_error=_log_rewrite_error,
            )
    except SplurgeUrlStreamRewriteError:
        # already logged through the error channel
        return EXIT_FAILED
    except SplurgeUrlStreamError as exc:
        logger.error("%s", exc)
        return EXIT_FAILED
    except OSError as exc:
        logger.error("cannot write output: %s", exc)
        return EXIT_FAILED

    return EXIT_OK if report.ok else EXIT_REWRITE_ERRORS


if __name__ == "__main__":
    raise SystemExit(main())
