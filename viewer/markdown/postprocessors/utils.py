# viewer/markdown/postprocessors/utils.py
"""
One parsed tree shared by the HTML passes of a single render.

The tree travels in the processor context as a ``ParsedHtml`` record that
remembers the markup it stands for. A pass that edits the tree hands it on
with ``serialize_tree``; a pass that rewrites the string instead (the
sanitizer) leaves the record stale, and the next ``parsed_tree`` call parses
again.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, NamedTuple

from bs4 import BeautifulSoup

PARSED_HTML_KEY = "parsed_html"


class ParsedHtml(NamedTuple):
    source: str
    soup: BeautifulSoup


def parsed_tree(html: str, context: dict) -> BeautifulSoup:
    parsed = context.get(PARSED_HTML_KEY)
    if parsed is None or parsed.source != html:
        parsed = ParsedHtml(html, BeautifulSoup(html, "html.parser"))
        context[PARSED_HTML_KEY] = parsed
    return parsed.soup


def serialize_tree(context: dict, soup: BeautifulSoup | None = None) -> str:
    if soup is None:
        parsed = context.get(PARSED_HTML_KEY)
        if parsed is None:
            return ""
        soup = parsed.soup
    html = str(soup)
    context[PARSED_HTML_KEY] = ParsedHtml(html, soup)
    return html


@contextmanager
def html_pass_context() -> Iterator[dict]:
    """A fresh processor context; the parsed tree is dropped on exit."""
    context: dict = {}
    try:
        yield context
    finally:
        context.pop(PARSED_HTML_KEY, None)
