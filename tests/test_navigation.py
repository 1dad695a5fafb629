from django.test import SimpleTestCase

from tests.fakes import FakeViewport
from viewer.markdown.navigation import AnchorNavigator, find_heading

HTML = '<div class="markdown-body"><h1 key="intro">Intro</h1><h2 key="usage">Usage</h2></div>'

USAGE = {"indent": 1, "text": "Usage", "tag_name": "h2", "key": "usage"}


class AnchorNavigatorTests(SimpleTestCase):
    def test_scrolls_below_navigation_bar(self):
        viewport = FakeViewport(top=500, nav_bottom=64)

        AnchorNavigator(HTML, viewport).navigate(USAGE)

        self.assertEqual(viewport.scrolls, [(436, "smooth")])

    def test_missing_or_negative_nav_bar_counts_as_zero(self):
        for nav_bottom in (None, -30):
            with self.subTest(nav_bottom=nav_bottom):
                viewport = FakeViewport(top=500, nav_bottom=nav_bottom)

                AnchorNavigator(HTML, viewport).navigate(USAGE)

                self.assertEqual(viewport.scrolls, [(500, "smooth")])

    def test_missing_target_is_ignored(self):
        viewport = FakeViewport()
        navigator = AnchorNavigator(HTML, viewport)

        navigator.navigate({**USAGE, "key": "nope"})
        navigator.navigate({**USAGE, "tag_name": "h3"})
        AnchorNavigator("", viewport).navigate(USAGE)

        self.assertEqual(viewport.scrolls, [])

    def test_find_heading_matches_tag_and_key(self):
        heading = find_heading(HTML, USAGE)

        self.assertEqual(heading.get_text(), "Usage")
        self.assertIsNone(find_heading(HTML, {**USAGE, "tag_name": "h1"}))
