# viewer/markdown/postprocessors/sanitizer.py

import logging
from functools import lru_cache

import bleach

from ..config import get_markdown_config, get_sanitizer_schema

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _get_bleach_config():
    """Cache bleach configuration for better performance."""
    return get_sanitizer_schema()


def sanitize_html(html, context):
    """
    Sanitize HTML output using bleach.
    This is the FIRST post-processor: everything after it works on trusted markup.

    Errors are not swallowed; returning unsanitized HTML is never an option.
    """
    allowed_tags, allowed_attrs, allowed_protocols = _get_bleach_config()
    strip = bool(get_markdown_config()["SANITIZER_STRIP"])

    logger.debug("Sanitizing %d chars of HTML (strip=%s)", len(html), strip)
    return bleach.clean(
        html,
        tags=allowed_tags,
        attributes=allowed_attrs,
        protocols=allowed_protocols,
        strip=strip,
        strip_comments=True,
    )
