import re

from django.conf import settings

DEFAULTS = {
    # Prepended to every rewritten image URL: <CONTENT_BASE_PATH>/d/<root><path>
    "CONTENT_BASE_PATH": "",
    "STORAGE_ROOT": "/",
    "MATH_STYLESHEET_URL": "https://cdn.jsdelivr.net/npm/katex@0.16.11/dist/katex.min.css",
    # Typesetter for the \( \) and \[ \] spans left by the math stage
    "MATH_SCRIPT_URL": "https://cdn.jsdelivr.net/npm/katex@0.16.11/dist/katex.min.js",
    "MATH_AUTORENDER_URL": "https://cdn.jsdelivr.net/npm/katex@0.16.11/dist/contrib/auto-render.min.js",
    "DIAGRAM_SCRIPT_URL": "https://cdn.jsdelivr.net/npm/mermaid@10.9.1/dist/mermaid.min.js",
    # True when the host page already bundles the diagram engine
    "DIAGRAM_ENGINE_PRESENT": False,
    "SCRIPT_TIMEOUT": None,
    "SANITIZER_STRIP": False,
    "TOC_SCROLL_THRESHOLD": 100,
}

LANGUAGE_CLASS = re.compile(r"language-[\w-]+")
MATH_CLASSES = ("math-inline", "math-display")


def get_markdown_config():
    """
    Configuration for the markdown viewer.

    Values come from the ``MARKDOWN_VIEWER`` dict in Django settings, merged
    over ``DEFAULTS``. The asset URLs are opaque: whatever CDN resolution the
    deployment uses is expected to have produced them already.
    """
    config = dict(DEFAULTS)
    config.update(getattr(settings, "MARKDOWN_VIEWER", {}) or {})
    return config


def get_engine_options():
    """Options handed to markdown-it when the parser is built."""
    return {
        # Raw HTML is kept in the tree; the sanitizer decides what survives.
        "html": True,
        "linkify": False,
        "typographer": False,
    }


def _allow_code_attribute(tag, name, value):
    return name == "class" and (bool(LANGUAGE_CLASS.fullmatch(value)) or value in MATH_CLASSES)


def _allow_list_item_attribute(tag, name, value):
    return name == "class" and value == "task-list-item"


def _allow_list_attribute(tag, name, value):
    if name == "start":
        return tag == "ol"
    return name == "class" and value == "contains-task-list"


def _allow_input_attribute(tag, name, value):
    if name == "type":
        return value == "checkbox"
    return name in ("checked", "disabled")


def get_sanitizer_schema():
    """
    Allow-list used by the sanitizer.

    The base is a conservative subset close to GitHub's: no inline styles, no
    event handlers, no ids. The single extension is ``class`` on ``<code>``,
    accepted only for ``language-*`` or the two math markers.
    """
    allowed_tags = {
        # text
        "p",
        "br",
        "hr",
        "div",
        "span",
        "b",
        "i",
        "strong",
        "em",
        "s",
        "del",
        "ins",
        "mark",
        "sup",
        "sub",
        "kbd",
        "samp",
        "var",
        "q",
        "blockquote",
        "details",
        "summary",
        # headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        # lists
        "ul",
        "ol",
        "li",
        "dl",
        "dt",
        "dd",
        # code
        "pre",
        "code",
        # tables
        "table",
        "thead",
        "tbody",
        "tfoot",
        "tr",
        "th",
        "td",
        "caption",
        # media and links
        "a",
        "img",
        "picture",
        "source",
        # task lists
        "input",
    }

    heading_attrs = ["key"]
    allowed_attrs = {
        "a": ["href", "title"],
        "img": ["src", "alt", "title", "width", "height"],
        "source": ["srcset", "media", "type"],
        "h1": heading_attrs,
        "h2": heading_attrs,
        "h3": heading_attrs,
        "h4": heading_attrs,
        "h5": heading_attrs,
        "h6": heading_attrs,
        "th": ["colspan", "rowspan"],
        "td": ["colspan", "rowspan"],
        "ol": _allow_list_attribute,
        "ul": _allow_list_attribute,
        "li": _allow_list_item_attribute,
        "input": _allow_input_attribute,
        "code": _allow_code_attribute,
    }

    allowed_protocols = ["http", "https", "mailto", "tel"]

    return allowed_tags, allowed_attrs, allowed_protocols
