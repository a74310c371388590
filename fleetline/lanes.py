from functools import lru_cache

from fleetline.logger import logger
import fleetline.settings as settings
from fleetline.model import CapacityClass, RowLayout


def row_height(lane_count: int,
               item_height: float = settings.ITEM_HEIGHT,
               lane_gap: float = settings.LANE_GAP,
               padding: float = settings.ROW_PADDING,
               standard: float = settings.ROW_HEIGHT_STD) -> float:
    """
    Height of a pooled row holding `lane_count` lanes. An empty pool is
    sized as one lane, and no row is shorter than a standard row.
    """
    lanes = max(1, lane_count)
    return max(standard, padding + lanes * (item_height + lane_gap) + padding)


def assign_lanes(spans: tuple) -> tuple:
    """
    Greedy first-fit interval coloring.

    `spans` is a tuple of (start, end) pairs. Returns the lane index for each
    span, in input order. Spans are visited by start (stable on ties); each
    lane remembers the end of its most recent occupant and a span goes into
    the first lane that has already ended, else opens a new lane. Visiting in
    start order makes the lane count equal the peak number of concurrent
    spans.
    """
    order = sorted(range(len(spans)), key=lambda i: spans[i][0])
    lane_ends = []
    assignments = [0] * len(spans)
    for idx in order:
        start, end = spans[idx]
        for li, last_end in enumerate(lane_ends):
            if last_end <= start:
                lane_ends[li] = end
                assignments[idx] = li
                break
        else:
            lane_ends.append(end)
            assignments[idx] = len(lane_ends) - 1
    return tuple(assignments)


@lru_cache(maxsize=1024)
def _pooled_lanes(spans: tuple) -> tuple:
    return assign_lanes(spans)


def pack_row(items, capacity=CapacityClass.POOLED, **height_kw) -> RowLayout:
    """
    Lane assignment and height for one row.

    Exclusive rows put everything on lane 0 at the standard height; overlaps
    there are a data problem and are drawn stacked. Pooled rows are packed
    into the minimum number of non-overlapping lanes.
    """
    items = tuple(items)
    standard = height_kw.get("standard", settings.ROW_HEIGHT_STD)

    if capacity is not CapacityClass.POOLED:
        return RowLayout(
            height=standard,
            items_with_lane=tuple((item, 0) for item in items),
            lane_count=1 if items else 0,
        )

    lanes = _pooled_lanes(tuple((item.start, item.end) for item in items))
    lane_count = max(lanes) + 1 if lanes else 0
    order = sorted(range(len(items)), key=lambda i: items[i].start)

    logger.log("LAYOUT", "Packed {} items into {} lanes", len(items), lane_count)
    return RowLayout(
        height=row_height(lane_count, **height_kw),
        items_with_lane=tuple((items[i], lanes[i]) for i in order),
        lane_count=lane_count,
    )


def clear_cache() -> None:
    _pooled_lanes.cache_clear()
