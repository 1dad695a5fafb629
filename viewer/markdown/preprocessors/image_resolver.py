"""
Preprocessor that resolves relative image references to served asset URLs.

Converts (path="/docs/page.md", base="/api", root="/alice"):
    ![Alt](./img.png)              → ![Alt](/api/d/alice/docs/img.png)
    ![Alt](/shared/logo.png)       → ![Alt](/api/d/alice/shared/logo.png)
    ![Alt](https://x.com/i.png)    → unchanged
"""

import logging
import posixpath
import re

from ..config import get_markdown_config
from .fence_wrapper import is_markdown_extension

logger = logging.getLogger(__name__)

IMAGE_PATTERN = re.compile(r"!\[(.*?)\]\((.*?)\)")

PASSTHROUGH_PREFIXES = ("data:image/", "http://", "https://", "//")


def join_paths(*parts: str) -> str:
    """Join URL path segments, collapsing slashes; always absolute."""
    segments = [segment for part in parts for segment in part.split("/") if segment]
    return "/" + "/".join(segments)


def resolve_target(target: str, path: str, readme: bool = False) -> str:
    """
    Resolve an image target against the document at ``path``.

    A README is shown for its own location, so its links are anchored to
    ``path`` itself rather than to its parent directory.
    """
    if target.startswith("/"):
        return target
    base = path if readme else posixpath.dirname(path)
    return posixpath.normpath(posixpath.join(base or "/", target))


def build_asset_url(resolved: str, base_path: str, storage_root: str) -> str:
    return f"{base_path.rstrip('/')}/d{join_paths(storage_root, resolved)}"


def resolve_image_links(text: str, context: dict) -> str:
    """
    Rewrite every ``![alt](target)`` so the target is a served asset URL.

    Args:
        text: Markdown text
        context: May contain 'path', 'readme', 'base_path' and 'storage_root';
            missing values come from settings

    Returns:
        Markdown with rewritten image targets. Anything that does not match
        the image syntax is left exactly as it was.
    """
    if not is_markdown_extension(context.get("ext")):
        # Source files are shown verbatim.
        return text

    config = get_markdown_config()
    path = context.get("path") or "/"
    readme = bool(context.get("readme"))
    base_path = context.get("base_path")
    if base_path is None:
        base_path = config["CONTENT_BASE_PATH"]
    storage_root = context.get("storage_root") or config["STORAGE_ROOT"]

    def replace_image(match):
        alt, target = match.group(1), match.group(2)
        if target.startswith(PASSTHROUGH_PREFIXES):
            return match.group(0)

        url = build_asset_url(resolve_target(target, path, readme), base_path, storage_root)
        logger.debug("Image %r resolved to %s", target, url)
        return f"![{alt}]({url})"

    return IMAGE_PATTERN.sub(replace_image, text)


def image_resolver_default(text: str, context: dict) -> str:
    """
    Default configuration for image_resolver.

    Register this in PREPROCESSORS.
    """
    return resolve_image_links(text, context)
