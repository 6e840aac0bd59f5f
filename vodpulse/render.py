import logging
import math
from typing import List, Optional, Tuple

from .fetcher import FetchResult
from .histogram import BAR_WIDTH, Histogram, build_histogram

BAR_COLOR = '#a970ff'

# Unicode block characters for terminal output (8 levels per cell)
GRAPH_BLOCKS = " ▁▂▃▄▅▆▇█"
DEFAULT_TEXT_ROWS = 8

Rect = Tuple[float, float, float, float]


def compute_bars(histogram: Histogram, height: float) -> List[Rect]:
    """Return ``(x0, y0, x1, y1)`` rectangles for every non-empty bin, bottom aligned."""
    bars = []
    for i, count in enumerate(histogram.counts):
        if not count:
            continue
        bar_height = max(histogram.bar_height(count, height), 1)
        x0 = i * BAR_WIDTH
        bars.append((x0, height - bar_height, x0 + BAR_WIDTH, height))
    return bars


class GraphRenderer:
    """Draws the comment histogram onto a Tk-style canvas.

    The surface only needs ``delete("all")`` and ``create_rectangle``. The last
    fetch result is kept so the graph can be redrawn on resize without
    fetching again.
    """

    def __init__(self, surface, color: str = BAR_COLOR):
        self.surface = surface
        self.color = color
        self.graph_data: Optional[FetchResult] = None

    def draw(self, result: FetchResult, width: float, height: float):
        self.graph_data = result
        self.redraw(width, height)

    def redraw(self, width: float, height: float):
        self.surface.delete('all')
        if self.graph_data is None or width <= 0 or height <= 0:
            return

        histogram = build_histogram(self.graph_data.timestamps, self.graph_data.duration, width)
        bars = compute_bars(histogram, height)
        for x0, y0, x1, y1 in bars:
            self.surface.create_rectangle(x0, y0, x1, y1, fill=self.color, outline='')
        logging.debug(f'Rendered {len(bars)}/{histogram.bin_count} bars at {width:.0f}x{height:.0f}')

    def clear(self):
        self.graph_data = None
        self.surface.delete('all')


def _render_text_row(histogram: Histogram, row: int, total_rows: int) -> str:
    # Row 0 is top, total_rows - 1 is bottom
    row_bottom = (total_rows - row - 1) * 8
    row_top = row_bottom + 8
    chars = []
    for count in histogram.counts:
        normalized = histogram.bar_height(count, total_rows * 8)
        if count and normalized < 1:
            normalized = 1
        if normalized <= row_bottom:
            chars.append(' ')
        elif normalized >= row_top:
            chars.append(GRAPH_BLOCKS[8])
        else:
            level = math.ceil(normalized - row_bottom)
            chars.append(GRAPH_BLOCKS[min(level, 8)])
    return ''.join(chars)


def render_text(histogram: Histogram, rows: int = DEFAULT_TEXT_ROWS) -> str:
    """Render the histogram as lines of Unicode blocks, one column per bin."""
    if rows < 1:
        raise ValueError(f'Row count must be positive, got {rows}')
    return '\n'.join(_render_text_row(histogram, row, rows) for row in range(rows))
