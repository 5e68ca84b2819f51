import itertools
import unittest

from portfoliowatch.ingestion.interactions import (
    SCROLL_HEIGHT_JS,
    InfiniteScrollInteraction,
    LoadMoreInteraction,
    NoInteraction,
    build_interactions,
)
from portfoliowatch.ingestion.source_types import Interaction


class ScrollPage:
    """Fake page whose document height follows a given sequence."""

    def __init__(self, heights):
        self._heights = iter(heights)
        self._last = 0
        self.scrolls = 0
        self.waits = []

    def evaluate(self, js):
        if js == SCROLL_HEIGHT_JS:
            self._last = next(self._heights, self._last)
            return self._last
        self.scrolls += 1
        return None

    def wait_for_timeout(self, ms):
        self.waits.append(ms)


class FakeButton:
    def __init__(self):
        self.clicks = 0

    def click(self):
        self.clicks += 1


class ButtonPage:
    def __init__(self, buttons, broken=()):
        self.buttons = buttons
        self.broken = set(broken)
        self.queried = []
        self.waits = []

    def query_selector(self, selector):
        self.queried.append(selector)
        if selector in self.broken:
            raise RuntimeError("selector engine error")
        return self.buttons.get(selector)

    def wait_for_timeout(self, ms):
        self.waits.append(ms)


class TestInfiniteScroll(unittest.TestCase):
    def test_stops_when_height_stabilizes(self):
        page = ScrollPage([1000, 2000, 3000, 3000])
        scrolls = InfiniteScrollInteraction(settle_ms=0).apply(page, "https://example.vc/")
        self.assertEqual(scrolls, 3)
        self.assertEqual(page.scrolls, 3)

    def test_bounded_when_height_keeps_growing(self):
        page = ScrollPage(itertools.count(1000, 500))
        scrolls = InfiniteScrollInteraction(settle_ms=10, max_iterations=5).apply(page, "https://example.vc/")
        self.assertEqual(scrolls, 5)
        self.assertEqual(page.scrolls, 5)
        self.assertEqual(page.waits, [10] * 5)

    def test_static_page_scrolls_once(self):
        page = ScrollPage([800, 800])
        self.assertEqual(InfiniteScrollInteraction(settle_ms=0).apply(page, "https://example.vc/"), 1)


class TestLoadMore(unittest.TestCase):
    def test_clicks_first_matching_control_once(self):
        show_more = FakeButton()
        view_all = FakeButton()
        page = ButtonPage({'button:has-text("Show More")': show_more, 'button:has-text("View All")': view_all})
        clicked = LoadMoreInteraction(settle_ms=250).apply(page, "https://example.vc/")
        self.assertTrue(clicked)
        self.assertEqual(show_more.clicks, 1)
        self.assertEqual(view_all.clicks, 0)
        self.assertEqual(page.waits, [250])

    def test_no_control_is_not_an_error(self):
        page = ButtonPage({})
        self.assertFalse(LoadMoreInteraction(settle_ms=0).apply(page, "https://example.vc/"))
        self.assertEqual(page.waits, [])

    def test_failing_selector_moves_on(self):
        button = FakeButton()
        page = ButtonPage({".load-more": button}, broken=['button:has-text("Load More")'])
        self.assertTrue(LoadMoreInteraction(settle_ms=0).apply(page, "https://example.vc/"))
        self.assertEqual(button.clicks, 1)


class TestRegistry(unittest.TestCase):
    def test_every_interaction_has_a_strategy(self):
        registry = build_interactions(settle_ms=5, max_scroll_iterations=7)
        self.assertEqual(set(registry), set(Interaction))
        self.assertIsInstance(registry[Interaction.NONE], NoInteraction)
        self.assertEqual(registry[Interaction.INFINITE_SCROLL].max_iterations, 7)
        self.assertEqual(registry[Interaction.LOAD_MORE].settle_ms, 5)


if __name__ == "__main__":
    unittest.main()
