# viewer/markdown/assets.py
"""
Lazily loaded page assets for rendered markdown.

Math needs the typesetter (stylesheet, script and auto-render hook) and
mermaid fences need the diagram engine script. Both are only wanted once a
document actually uses them. ``LazyAssetLoader`` makes sure each is prepared
or fetched at most once per process, no matter how many render cycles ask;
which of them a given page needs is recorded on that page's ``RenderResult``.

A single instance is built at app start (see ``ViewerConfig.ready``) and
handed to every render through its context.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache

import requests
from asgiref.sync import sync_to_async
from django.utils.html import format_html

from .config import get_markdown_config
from .once import OnceGuard

logger = logging.getLogger(__name__)

DIAGRAM_SELECTOR = ".language-mermaid"

# KaTeX auto-render picks up \( \) and \[ \] by default
MATH_AUTORENDER_CALL = "renderMathInElement(document.body);"


class AssetLoadError(Exception):
    """The diagram engine script could not be loaded."""


def fetch_script(url, timeout=None):
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


class LazyAssetLoader:
    def __init__(
        self,
        stylesheet_url: str,
        script_url: str,
        *,
        math_script_url: str | None = None,
        math_autorender_url: str | None = None,
        engine_present: bool = False,
        fetch=None,
        timeout=None,
    ):
        self.stylesheet_url = stylesheet_url
        self.script_url = script_url
        self.math_script_url = math_script_url
        self.math_autorender_url = math_autorender_url
        self._engine_present = engine_present
        self._fetch = fetch or fetch_script
        self._timeout = timeout

        self.insert_math_stylesheet = OnceGuard(self._insert_math_stylesheet)
        self.load_diagram_engine = OnceGuard(self._load_diagram_engine)

    @classmethod
    def from_settings(cls, **kwargs):
        config = get_markdown_config()
        return cls(
            config["MATH_STYLESHEET_URL"],
            config["DIAGRAM_SCRIPT_URL"],
            math_script_url=config["MATH_SCRIPT_URL"],
            math_autorender_url=config["MATH_AUTORENDER_URL"],
            engine_present=config["DIAGRAM_ENGINE_PRESENT"],
            timeout=config["SCRIPT_TIMEOUT"],
            **kwargs,
        )

    @property
    def diagram_engine_ready(self) -> bool:
        return self._engine_present

    def _insert_math_stylesheet(self) -> tuple[str, ...]:
        """Head markup for math: the stylesheet, then the typesetter scripts."""
        markup = [format_html('<link rel="stylesheet" href="{}">', self.stylesheet_url)]
        if self.math_script_url:
            markup.append(format_html('<script defer src="{}"></script>', self.math_script_url))
        if self.math_autorender_url:
            markup.append(
                format_html(
                    '<script defer src="{}" onload="{}"></script>',
                    self.math_autorender_url,
                    MATH_AUTORENDER_CALL,
                )
            )
        logger.debug("Math assets prepared: %s", self.stylesheet_url)
        return tuple(markup)

    async def _load_diagram_engine(self):
        """
        Fetch the diagram engine unless the host page already bundles it.

        Returns the script markup a page needs to include, or None when the
        engine was present from the start.
        """
        if self._engine_present:
            return None

        try:
            await sync_to_async(self._fetch, thread_sensitive=False)(
                self.script_url, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise AssetLoadError(f"Failed to load diagram engine from {self.script_url}") from exc

        self._engine_present = True
        logger.info("Diagram engine loaded from %s", self.script_url)
        return format_html('<script src="{}"></script>', self.script_url)

    def initialize_diagrams(self, theme: str, selector: str = DIAGRAM_SELECTOR) -> str:
        """
        Return the inline script that initializes the diagram engine with
        ``theme`` and runs it over ``selector`` only.
        """
        return (
            "mermaid.initialize({\"startOnLoad\": false, \"theme\": %s});"
            "mermaid.run({\"querySelector\": %s});"
        ) % (json.dumps(theme), json.dumps(selector))


@lru_cache(maxsize=1)
def get_asset_loader() -> LazyAssetLoader:
    """The process-wide loader, built from settings on first use."""
    return LazyAssetLoader.from_settings()
