# viewer/markdown/pipeline.py
"""
Feature detection and conditional assembly of the rendering pipeline.

    parse (commonmark + tables, strikethrough, task lists)
      → [math syntax]                       only when math was detected
      → HTML with raw HTML kept
      → sanitize
      → [math markers → typesetter markup]  only when math was detected
      → string
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.tasklists import tasklists_plugin

from .config import get_engine_options
from .extensions.heading_keys import heading_keys_plugin
from .extensions.math_markers import math_markers_plugin
from .postprocessors import apply_postprocessors, get_postprocessors
from .postprocessors.utils import html_pass_context

MERMAID_PATTERN = re.compile(r"```mermaid[\s\S]*?```", re.IGNORECASE)
MATH_PATTERN = re.compile(r"\$\$[\s\S]+?\$\$|\$[^$\n]+?\$")


class RenderFailure(Exception):
    """A pipeline stage failed; the render cycle produced nothing."""


@dataclass(frozen=True)
class PipelineFeatureFlags:
    has_math: bool = False
    has_diagrams: bool = False

    @classmethod
    def detect(cls, content: str) -> "PipelineFeatureFlags":
        return cls(
            has_math=has_math(content),
            has_diagrams=has_diagrams(content),
        )


def has_math(content: str) -> bool:
    """``$$...$$`` anywhere, or a single-line ``$...$`` without embedded ``$``."""
    return MATH_PATTERN.search(content) is not None


def has_diagrams(content: str) -> bool:
    return MERMAID_PATTERN.search(content) is not None


class MarkdownPipeline:
    def __init__(self, md: MarkdownIt, postprocessors: list, flags: PipelineFeatureFlags):
        self.md = md
        self.postprocessors = postprocessors
        self.flags = flags

    def process(self, content: str) -> tuple[str, list[Token]]:
        """
        Run every stage over ``content``.

        Returns the final HTML string and the token stream it was rendered
        from. Any stage error is raised as ``RenderFailure``.
        """
        try:
            env: dict = {}
            tokens = self.md.parse(content, env)
            html = self.md.renderer.render(tokens, self.md.options, env)
            with html_pass_context() as context:
                html = apply_postprocessors(html, context, self.postprocessors)
        except Exception as exc:
            raise RenderFailure(f"Markdown rendering failed: {exc}") from exc
        return html, tokens


def build_markdown_engine(flags: PipelineFeatureFlags) -> MarkdownIt:
    md = (
        MarkdownIt("commonmark", get_engine_options())
        .enable(["table", "strikethrough"])
        .use(tasklists_plugin)
    )
    if flags.has_math:
        md.use(math_markers_plugin)
    md.use(heading_keys_plugin)
    return md


def build_pipeline(flags: PipelineFeatureFlags) -> MarkdownPipeline:
    return MarkdownPipeline(
        build_markdown_engine(flags),
        get_postprocessors(has_math=flags.has_math),
        flags,
    )
