# viewer/markdown/session.py
"""
Render-cycle state for one mounted markdown view.

A cycle runs whenever the derived markdown or the color theme changes: the
current content is hidden, the pipeline is awaited, the new HTML is stored
and revealed, and only then do the mount passes run (code highlighting,
diagram initialization) followed by the ``on_render`` hooks.

Cycles may overlap. Each one takes a number from a monotonically increasing
counter and only applies its result if no newer cycle was started meanwhile,
so the last requested content always wins.
"""

import logging

from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .assets import get_asset_loader
from .config import get_markdown_config
from .extensions.toc_extractor import is_toc_visible
from .navigation import AnchorNavigator
from .pipeline import RenderFailure
from .postprocessors import MOUNT_POSTPROCESSORS, apply_postprocessors
from .postprocessors.utils import html_pass_context
from .renderer import derive_content, render_content

logger = logging.getLogger(__name__)

DIAGRAM_THEMES = {"light": "default", "dark": "dark"}


def diagram_theme(color_mode: str) -> str:
    return DIAGRAM_THEMES.get(color_mode, "default")


class RenderSession:
    """
    Hosts that keep a view alive across edits (a live preview, an editor
    pane) drive it through ``update``; the ``markdown_view`` template tag
    runs a single cycle per page.
    """

    def __init__(self, context=None, *, show_toc=False, toc_disabled=True, on_render=None):
        self.context = dict(context or {})
        self.loader = self.context.get("loader") or get_asset_loader()
        self.context["loader"] = self.loader

        self.show_toc = show_toc
        self.toc_disabled = toc_disabled
        self.on_render = list(on_render or [])

        self.visible = False
        self.html = ""
        self.result = None
        self.scripts: list[str] = []

        self._cycle = 0
        self._inputs = None

    @property
    def cycle(self) -> int:
        return self._cycle

    @property
    def toc(self):
        return list(self.result.toc) if self.result is not None else []

    @property
    def assets(self) -> list[str]:
        return list(self.result.assets) if self.result is not None else []

    def derive_content(self, payload) -> str:
        return derive_content(payload, self.context)

    async def update(self, payload, color_mode="light") -> bool:
        """
        Re-render if the derived content or the theme changed.

        Returns True when this call's cycle ended up on screen, False when
        nothing changed or a newer cycle superseded it.
        """
        content = self.derive_content(payload)
        theme = diagram_theme(color_mode)
        if (content, theme) == self._inputs:
            return False
        self._inputs = (content, theme)
        return await self.run_cycle(content, theme)

    async def run_cycle(self, content: str, theme: str = "default") -> bool:
        self._cycle += 1
        cycle = self._cycle
        self.visible = False

        try:
            result = await render_content(content, self.context)
        except RenderFailure:
            if cycle == self._cycle:
                # Let the same input be retried by the next update
                self._inputs = None
            raise

        if cycle != self._cycle:
            logger.debug("Discarding stale render cycle %d (latest is %d)", cycle, self._cycle)
            return False

        self.result = result
        self.html = result.html
        self.scripts = []
        self.visible = True

        self._after_reveal(theme)
        return True

    def _after_reveal(self, theme: str) -> None:
        with html_pass_context() as context:
            self.html = apply_postprocessors(self.html, context, MOUNT_POSTPROCESSORS)

        if self.result.has_diagrams and self.loader.diagram_engine_ready:
            self.scripts.append(self.loader.initialize_diagrams(theme))

        for hook in self.on_render:
            hook(self)

    def mounted_html(self):
        """The view as inserted into the page; empty while a cycle is in flight."""
        if not self.visible:
            return mark_safe("")
        return format_html('<div class="markdown-body">{}</div>', mark_safe(self.html))

    def toc_visible(self, scroll_y: float) -> bool:
        return is_toc_visible(
            self.toc,
            enabled=self.show_toc,
            disabled_by_user=self.toc_disabled,
            scroll_y=scroll_y,
            threshold=get_markdown_config()["TOC_SCROLL_THRESHOLD"],
        )

    def navigator(self, viewport) -> AnchorNavigator:
        return AnchorNavigator(self.mounted_html(), viewport)
