import pytest

from vodpulse.fetcher import FetchResult
from vodpulse.histogram import Histogram
from vodpulse.render import BAR_COLOR, GRAPH_BLOCKS, GraphRenderer, compute_bars, render_text


class _FakeSurface:
    """Records calls the way a Tk canvas would receive them."""

    def __init__(self):
        self.items = []
        self.clears = 0

    def delete(self, tag):
        assert tag == "all"
        self.clears += 1
        self.items = []

    def create_rectangle(self, x0, y0, x1, y1, **options):
        self.items.append(((x0, y0, x1, y1), options))


def test_compute_bars_skips_empty_bins_and_aligns_to_bottom():
    histogram = Histogram(4, 10.0, [4, 0, 2, 1])

    bars = compute_bars(histogram, height=100)

    assert bars == [
        (0, 0, 2, 100),
        (4, 75, 6, 100),
        (6, 93.75, 8, 100),
    ]


def test_compute_bars_keeps_tiny_bins_visible():
    histogram = Histogram(2, 1.0, [1000, 1])

    bars = compute_bars(histogram, height=50)

    assert bars[1] == (2, 49, 4, 50)


def test_renderer_draws_one_rectangle_per_non_empty_bin():
    surface = _FakeSurface()
    renderer = GraphRenderer(surface)

    renderer.draw(FetchResult([5, 300], 600), width=4, height=20)

    assert surface.clears == 1
    assert [rect for rect, _ in surface.items] == [(0, 0, 2, 20), (2, 0, 4, 20)]
    assert all(options == {"fill": BAR_COLOR, "outline": ""} for _, options in surface.items)


def test_renderer_redraw_is_idempotent_and_follows_size():
    surface = _FakeSurface()
    renderer = GraphRenderer(surface)
    renderer.draw(FetchResult([1, 2, 3, 50], 100), width=10, height=40)
    first = list(surface.items)

    renderer.redraw(10, 40)
    assert surface.items == first

    renderer.redraw(200, 40)
    assert surface.clears == 3
    assert max(rect[2] for rect, _ in surface.items) <= 200
    assert len(surface.items) == 4


def test_renderer_without_data_only_clears():
    surface = _FakeSurface()
    renderer = GraphRenderer(surface)

    renderer.redraw(100, 100)

    assert surface.clears == 1
    assert surface.items == []


def test_renderer_clear_forgets_retained_result():
    surface = _FakeSurface()
    renderer = GraphRenderer(surface)
    renderer.draw(FetchResult([1], 10), width=10, height=10)

    renderer.clear()
    renderer.redraw(10, 10)

    assert renderer.graph_data is None
    assert surface.items == []


def test_render_text_draws_full_column_for_peak_and_partial_for_others():
    histogram = Histogram(3, 1.0, [4, 2, 0])

    text = render_text(histogram, rows=2)

    assert text.split("\n") == [
        GRAPH_BLOCKS[8] + "  ",
        GRAPH_BLOCKS[8] + GRAPH_BLOCKS[4] + " ",
    ]


def test_render_text_rejects_non_positive_rows():
    with pytest.raises(ValueError, match="Row count must be positive"):
        render_text(Histogram(1, 1.0, [1]), rows=0)
