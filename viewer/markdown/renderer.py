# viewer/markdown/renderer.py

import logging
from dataclasses import dataclass

from asgiref.sync import sync_to_async

from .assets import AssetLoadError, get_asset_loader
from .extensions.toc_extractor import TocItem, extract_toc
from .pipeline import PipelineFeatureFlags, RenderFailure, build_pipeline
from .preprocessors import apply_preprocessors, decode_payload

logger = logging.getLogger(__name__)

DIAGRAM_LOAD_FAILED_MESSAGE = (
    "Failed to load the diagram engine, mermaid diagrams will not be rendered"
)

__all__ = [
    "AssetLoadError",
    "RenderFailure",
    "RenderResult",
    "load_assets",
    "render_content",
    "render_markdown",
    "required_assets",
]


@dataclass(frozen=True)
class RenderResult:
    html: str
    has_diagrams: bool
    has_math: bool = False
    toc: tuple[TocItem, ...] = ()
    # Head markup this document needs on its page, in order
    assets: tuple[str, ...] = ()


def _log_notification(message):
    logger.warning(message)


async def load_assets(flags, loader, notify=None):
    """
    Make sure the assets ``flags`` call for are available and return the
    markup that brings them into a page.

    Each asset is prepared at most once per process by ``loader``; the
    returned markup is what this one document needs, whoever loaded it.
    A failed diagram engine load is reported through ``notify`` and leaves
    the diagram script out.
    """
    notify = notify or _log_notification
    assets = []

    if flags.has_math:
        assets.extend(loader.insert_math_stylesheet())

    if flags.has_diagrams:
        try:
            script = await loader.load_diagram_engine()
        except AssetLoadError as exc:
            logger.warning("Diagram engine unavailable: %s", exc)
            notify(DIAGRAM_LOAD_FAILED_MESSAGE)
        else:
            if script:
                assets.append(script)

    return tuple(assets)


async def render_content(content, context=None):
    """
    Render already-preprocessed markdown.

    Math and diagrams get their assets before anything is stringified, so the
    result never reaches a page ahead of the styling it depends on. A failed
    diagram engine load is reported through ``context['notify']`` and
    rendering carries on, leaving the diagram fences as plain code blocks.

    Args:
        content: Markdown text
        context: Optional dict; 'loader' overrides the process-wide asset
            loader and 'notify' receives user-facing warnings

    Raises:
        RenderFailure: any pipeline stage failed
    """
    context = context or {}
    loader = context.get("loader") or get_asset_loader()

    flags = PipelineFeatureFlags.detect(content)
    pipeline = build_pipeline(flags)

    assets = await load_assets(flags, loader, context.get("notify"))

    html, tokens = await sync_to_async(pipeline.process, thread_sensitive=False)(content)

    return RenderResult(
        html=html,
        has_diagrams=flags.has_diagrams,
        has_math=flags.has_math,
        toc=tuple(extract_toc(tokens)),
        assets=assets,
    )


def derive_content(text, context):
    """Decode and preprocess ``text`` into the markdown the pipeline sees."""
    text = decode_payload(text, context.get("encoding") or "utf-8")

    # Pre-processing: before markdown conversion
    return apply_preprocessors(text, context)


async def render_markdown(text, context=None):
    """
    Main rendering function with pre/post processing pipeline

    Args:
        text: Markdown text, or a byte buffer decoded with context['encoding']
        context: Optional dict for processors that need additional data
            ('ext', 'readme', 'path', 'base_path', 'storage_root', ...)
    """
    context = context or {}
    return await render_content(derive_content(text, context), context)


async def required_assets(text, context=None):
    """Head markup ``text`` will need once rendered, without rendering it."""
    context = context or {}
    loader = context.get("loader") or get_asset_loader()
    flags = PipelineFeatureFlags.detect(derive_content(text, context))
    return await load_assets(flags, loader, context.get("notify"))
