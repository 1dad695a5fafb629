"""
Preprocessor that shows non-markdown files as source.

Converts (ext="json"):
    {"a":1}        → ```json
                     {"a":1}
                     ```
"""

import re

MARKDOWN_EXTENSIONS = {"md", "markdown"}

_BACKTICK_RUN = re.compile(r"`+")


def is_markdown_extension(ext) -> bool:
    return not ext or ext.lower() in MARKDOWN_EXTENSIONS


def wrap_fenced_code(text: str, context: dict) -> str:
    """
    Wrap the whole text in a fenced code block tagged with ``context['ext']``.

    Markdown (or no extension at all) passes through unchanged. The fence is
    made longer than any backtick run inside the text so that the content is
    never cut short and always ends up verbatim in a single block.
    """
    ext = context.get("ext")
    if is_markdown_extension(ext):
        return text

    longest = max((len(run) for run in _BACKTICK_RUN.findall(text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}{ext}\n{text}\n{fence}"


def fence_wrapper_default(text: str, context: dict) -> str:
    """
    Default configuration for fence_wrapper.

    Register this in PREPROCESSORS.
    """
    return wrap_fenced_code(text, context)
