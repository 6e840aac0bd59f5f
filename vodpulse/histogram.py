import math
from dataclasses import dataclass
from typing import List, Sequence

# Display units covered by one bin
BAR_WIDTH = 2
HEIGHT_EXPONENT = 2


@dataclass(frozen=True)
class Histogram:
    bin_count: int
    bin_width: float
    counts: List[int]

    @property
    def max_count(self) -> int:
        return max(max(self.counts, default=0), 1)

    def bar_height(self, count: int, available_height: float) -> float:
        """Scale a bin count to display height, compressing quiet bins and accentuating peaks."""
        return (count / self.max_count) ** HEIGHT_EXPONENT * available_height

    def peak_bin(self) -> int:
        """Index of the busiest bin, -1 when every bin is empty."""
        if not self.counts:
            return -1
        peak = max(range(len(self.counts)), key=self.counts.__getitem__)
        return peak if self.counts[peak] else -1


def bin_count_for_width(display_width: float) -> int:
    return max(math.ceil(display_width / BAR_WIDTH), 0)


def build_histogram(timestamps: Sequence[float], duration: float, display_width: float) -> Histogram:
    """Bin comment offsets into one fixed-width bucket per ``BAR_WIDTH`` display units.

    Offsets that land at or past the last bin (``duration`` itself, or
    floating point spill-over) are dropped.
    """
    if duration <= 0:
        raise ValueError(f'Duration must be positive, got {duration}')

    bin_count = bin_count_for_width(display_width)
    if bin_count == 0:
        return Histogram(0, 0.0, [])

    bin_width = duration / bin_count
    counts = [0] * bin_count
    for t in timestamps:
        index = math.floor(t / bin_width)
        if 0 <= index < bin_count:
            counts[index] += 1
    return Histogram(bin_count, bin_width, counts)
