from __future__ import annotations

import re
from typing import Iterable, Sequence, TypedDict

from bs4 import BeautifulSoup, Tag
from markdown_it.token import Token

from .heading_keys import inline_text

TOC_TAGS = ("h1", "h2", "h3")
_TOC_TAG_PATTERN = re.compile(r"^h([1-3])$", re.IGNORECASE)


class TocItem(TypedDict):
    indent: int
    text: str
    tag_name: str
    key: str


def _normalize_indents(entries: list[tuple[int, str, str, str]]) -> list[TocItem]:
    """Turn (level, text, tag, key) entries into items indented relative to the shallowest level."""
    if not entries:
        return []
    min_level = min(level for level, _, _, _ in entries)
    return [
        {"indent": level - min_level, "text": text, "tag_name": tag, "key": key}
        for level, text, tag, key in entries
    ]


def extract_toc(tokens: Sequence[Token]) -> list[TocItem]:
    """
    Build the table of contents from a parsed markdown-it token stream.

    Only h1-h3 headings are part of the TOC; deeper headings are skipped
    entirely and do not influence the indentation. Items are returned in
    document order with ``indent`` relative to the shallowest heading present.
    """
    entries: list[tuple[int, str, str, str]] = []
    for idx, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        match = _TOC_TAG_PATTERN.match(token.tag)
        if not match:
            continue
        following = tokens[idx + 1] if idx + 1 < len(tokens) else None
        entries.append(
            (
                int(match.group(1)),
                inline_text(following),
                token.tag.lower(),
                str(token.attrGet("key") or ""),
            )
        )
    return _normalize_indents(entries)


def extract_toc_from_html(html: str, container_class: str = "markdown-body") -> list[TocItem]:
    """
    Given mounted HTML, return the TOC for the ``.markdown-body`` subtree.

    Used when only rendered HTML is at hand (e.g. stored output). Returns an
    empty list when there is no container to walk.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    container = soup.find(class_=container_class)
    if not isinstance(container, Tag):
        return []

    entries: list[tuple[int, str, str, str]] = []
    for heading in container.find_all(_TOC_TAG_PATTERN):
        level = int(heading.name[1])  # "h2" -> 2
        entries.append((level, heading.get_text(), heading.name.lower(), heading.get("key") or ""))
    return _normalize_indents(entries)


def is_toc_empty(items: Iterable[TocItem] | None) -> bool:
    """A TOC with fewer than two entries is not worth showing."""
    return items is None or len(list(items)) < 2


def is_toc_visible(
    items: Iterable[TocItem] | None,
    *,
    enabled: bool = True,
    disabled_by_user: bool = False,
    scroll_y: float = 0,
    threshold: float = 100,
) -> bool:
    """Visibility rule for the floating TOC panel."""
    if not enabled or disabled_by_user:
        return False
    return scroll_y > threshold and not is_toc_empty(items)
