# viewer/markdown/postprocessors/__init__.py

from .highlighter import highlighter_default
from .math_renderer import math_renderer_default
from .sanitizer import sanitize_html

POSTPROCESSORS = [
    sanitize_html,  # Always first: nothing below may see untrusted markup
    # Order matters - they run sequentially
]

MATH_POSTPROCESSORS = [
    math_renderer_default,  # Rewrite sanitized math markers for the typesetter
]

# Run over mounted HTML after it has been revealed, not as part of rendering
MOUNT_POSTPROCESSORS = [
    highlighter_default,
]


def get_postprocessors(has_math=False):
    """Postprocessors for one render, in order."""
    processors = list(POSTPROCESSORS)
    if has_math:
        processors.extend(MATH_POSTPROCESSORS)
    return processors


def apply_postprocessors(html, context, processors=None):
    """Apply all postprocessors in order"""
    for processor in processors if processors is not None else POSTPROCESSORS:
        html = processor(html, context)
    return html
