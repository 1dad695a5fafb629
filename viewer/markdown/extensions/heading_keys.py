# viewer/markdown/extensions/heading_keys.py
"""
A markdown-it plugin that gives every heading a stable ``key`` attribute.

The key is derived from the heading text, so the TOC built from the token
stream and the rendered ``<hN key="...">`` elements can be matched up again
when navigating. Duplicate headings get uniquified keys by appending -2, -3, ...
"""

from __future__ import annotations

from django.utils.text import slugify
from markdown_it import MarkdownIt
from markdown_it.rules_core import StateCore
from markdown_it.token import Token

_TEXT_TOKENS = {"text", "code_inline", "math_inline", "math_inline_double"}
_BREAK_TOKENS = {"softbreak", "hardbreak"}


def inline_text(token: Token | None) -> str:
    """Plain text of an inline token, as the browser's textContent would see it."""
    if token is None or token.type != "inline":
        return ""
    parts: list[str] = []
    for child in token.children or []:
        if child.type in _TEXT_TOKENS:
            parts.append(child.content)
        elif child.type in _BREAK_TOKENS:
            parts.append("\n")
    return "".join(parts)


class _KeyRegistry:
    def __init__(self) -> None:
        self._used: dict[str, int] = {}

    def unique_key(self, base: str) -> str:
        count = self._used.get(base, 0)
        if count == 0:
            self._used[base] = 1
            return base
        count += 1
        self._used[base] = count
        return f"{base}-{count}"


def _assign_heading_keys(state: StateCore) -> None:
    registry = _KeyRegistry()
    tokens = state.tokens
    for idx, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        following = tokens[idx + 1] if idx + 1 < len(tokens) else None
        base = slugify(inline_text(following), allow_unicode=True) or "section"
        token.attrSet("key", registry.unique_key(base))


def heading_keys_plugin(md: MarkdownIt) -> None:
    md.core.ruler.push("heading_keys", _assign_heading_keys)
