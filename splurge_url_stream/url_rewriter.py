"""CSS URL rewriter used as the default line rewriter.

The rewriter scans a piece of CSS text for ``url(...)`` tokens and
``@import "..."`` string imports, hands each literal URL to a replacer and
reassembles the text with the replacements applied. Quoting and whitespace
around the URL are preserved; only the URL body changes. Comments that open
and close on the same line are copied through untouched.

Any object with a ``rewrite(text, replacer) -> str`` method can be used in its
place by passing a ``rewriter_factory`` to :class:`UrlRewriteStream`.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Callable
from typing import Protocol

Replacer = Callable[[str], str]

# No alternative may consume a newline: rewriting a batch must give the same
# result as rewriting each of its lines separately.
_TOKEN_RE = re.compile(
    r"""
    (?P<comment>/\*[^\n]*?\*/)
    |
    (?P<url_open>\burl\([ \t]*)
    (?:
        (?P<quote>['"])(?P<quoted>[^\n]*?)(?P=quote)
        |
        (?P<bare>[^'"()\s]*)
    )
    (?P<url_close>[ \t]*\))
    |
    (?P<import_open>@import[ \t]+)(?P<import_quote>['"])(?P<import_url>[^\n]*?)(?P=import_quote)
    """,
    re.IGNORECASE | re.VERBOSE,
)


class UrlRewriter(Protocol):
    """Contract for line rewriters driven by :class:`UrlRewriteStream`."""

    def rewrite(self, text: str, replacer: Replacer) -> str: ...


class CssUrlRewriter:
    """Rewrite URLs found in CSS text.

    Instances count the replacements they perform in ``replacements``, so a
    fresh instance should be used for every independent piece of text.

    Example:
        >>> CssUrlRewriter().rewrite("a{background:url(a.png)}", lambda u: "img/" + u)
        'a{background:url(img/a.png)}'
    """

    def __init__(self) -> None:
        self.replacements = 0

    def rewrite(self, text: str, replacer: Replacer) -> str:
        """Return ``text`` with every URL replaced by ``replacer(url)``.

        Args:
            text: CSS text, one or more lines.
            replacer: Called once per URL found, in order of appearance.

        Returns:
            The rewritten text.

        Raises:
            Whatever ``replacer`` raises, and ``TypeError`` when it returns a
            non-string value.
        """
        return _TOKEN_RE.sub(functools.partial(self._replace_match, replacer), text)

    def _replace_match(self, replacer: Replacer, match: re.Match[str]) -> str:
        if match.group("comment") is not None:
            return match.group(0)

        if match.group("import_open") is not None:
            url = match.group("import_url")
            if not url:
                return match.group(0)
            quote = match.group("import_quote")
            return match.group("import_open") + quote + self._map(replacer, url) + quote

        quote = match.group("quote") or ""
        url = match.group("quoted") if quote else match.group("bare")
        if not url:
            return match.group(0)
        return match.group("url_open") + quote + self._map(replacer, url) + quote + match.group("url_close")

    def _map(self, replacer: Replacer, url: str) -> str:
        replaced = replacer(url)
        if not isinstance(replaced, str):
            raise TypeError(f"replacer must return str, got {type(replaced).__name__} for {url!r}")
        self.replacements += 1
        return replaced


__all__ = ["CssUrlRewriter", "Replacer", "UrlRewriter"]
