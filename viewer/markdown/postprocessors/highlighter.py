# viewer/markdown/postprocessors/highlighter.py
"""
Syntax highlighting for code blocks in mounted HTML.

Runs after the HTML has been revealed, over every ``<pre><code
class="language-*">`` block. Highlighted blocks are marked with
``data-highlighted="yes"`` so running the pass again is a no-op.

Diagram fences are left alone: the diagram engine needs their raw text.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .utils import parsed_tree, serialize_tree

logger = logging.getLogger(__name__)

SKIP_LANGUAGES = {"mermaid", "math"}

_FORMATTER = HtmlFormatter(nowrap=True)


def _code_language(code) -> str | None:
    for cls in code.get("class", []):
        if cls.startswith("language-"):
            return cls[len("language-"):]
    return None


def highlight_code_blocks(html: str, context: dict) -> str:
    soup = parsed_tree(html, context)

    for code in soup.select("pre > code"):
        if code.get("data-highlighted") == "yes":
            continue

        language = _code_language(code)
        if not language or language.lower() in SKIP_LANGUAGES:
            continue

        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            logger.debug("No lexer for language %r, leaving block as-is", language)
            continue

        highlighted = highlight(code.get_text(), lexer, _FORMATTER)
        code.clear()
        code.append(BeautifulSoup(highlighted, "html.parser"))
        code["data-highlighted"] = "yes"
        if "highlight" not in code["class"]:
            code["class"].append("highlight")

    return serialize_tree(context, soup)


def highlighter_default(html: str, context: dict) -> str:
    """Default configuration for highlighter."""
    return highlight_code_blocks(html, context)
