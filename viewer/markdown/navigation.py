# viewer/markdown/navigation.py
"""
Scrolling from a TOC entry to its heading.

Layout is owned by whatever displays the HTML, so positions and scrolling go
through a ``Viewport``. The navigator only decides whether the heading exists
in the mounted HTML and how far to scroll so the heading lands just below the
fixed navigation bar.
"""

from __future__ import annotations

from typing import Optional, Protocol

from bs4 import BeautifulSoup, Tag

from .extensions.toc_extractor import TocItem


class Viewport(Protocol):
    def element_top(self, tag_name: str, key: str) -> float:
        """Vertical position of the element relative to the viewport."""

    def nav_bottom(self) -> Optional[float]:
        """Bottom edge of the fixed navigation bar, or None without one."""

    def scroll_by(self, top: float, behavior: str = "smooth") -> None:
        ...


def find_heading(html: str, item: TocItem) -> Tag | None:
    soup = BeautifulSoup(html or "", "html.parser")
    target = soup.find(item["tag_name"], attrs={"key": item["key"]})
    return target if isinstance(target, Tag) else None


class AnchorNavigator:
    def __init__(self, html: str, viewport: Viewport):
        self.html = html
        self.viewport = viewport

    def navigate(self, item: TocItem) -> None:
        if find_heading(self.html, item) is None:
            return

        nav_bottom = max(self.viewport.nav_bottom() or 0, 0)
        top = self.viewport.element_top(item["tag_name"], item["key"]) - nav_bottom
        self.viewport.scroll_by(top, behavior="smooth")
