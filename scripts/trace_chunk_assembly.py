"""Trace UrlRewriteStream chunk assembly for debugging.

Feeds a file (or a built-in sample) through a stream in fixed-size raw reads
and prints every chunk, the pending buffer after each accept, each released
batch and each rewrite error, so you can see exactly where line boundaries
cut the input.
"""

import argparse
from pathlib import Path

from splurge_url_stream import CssUrlRewriter, UrlRewriteStream

SAMPLE = b"a{background:url(a.png)}\nb{color:red}\nc{background:url('c.png')}"


class TracingRewriter(CssUrlRewriter):
    def rewrite(self, text, replacer):
        print(f"  batch ({len(text)} chars): {text!r}")
        out = super().rewrite(text, replacer)
        print(f"  rewritten ({self.replacements} urls): {out!r}")
        return out


def trace(data: bytes, buffer_size: int) -> None:
    stream = UrlRewriteStream(lambda url: "cdn/" + url, rewriter_factory=TracingRewriter)
    stream.on_data(lambda unit: None)
    stream.on_error(lambda err: print(f"  error: {err}"))

    for read_no, start in enumerate(range(0, len(data), buffer_size), start=1):
        raw = data[start : start + buffer_size]
        print(f"--- raw read #{read_no}: {raw!r} ---")
        stream.accept(raw)
        print(f"  pending: {stream.pending!r}")

    print("--- finish ---")
    stream.finish()
    print(f"batches dispatched: {stream.batches_dispatched}, errors: {len(stream.errors)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("path", nargs="?", type=Path, help="File to trace (default: built-in sample)")
    parser.add_argument("--buffer-size", type=int, default=16)
    args = parser.parse_args()
    trace(args.path.read_bytes() if args.path else SAMPLE, args.buffer_size)
