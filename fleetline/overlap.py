def overlaps_range(start1, end1, start2, end2) -> bool:
    """Half-open overlap: touching endpoints do not overlap."""
    return start1 < end2 and start2 < end1


def overlaps(a, b) -> bool:
    """
    Overlap predicate for anything with ``start``/``end``
    (Interval, ScheduleItem, Column).
    """
    return a.start < b.end and b.start < a.end


def max_concurrency(intervals) -> int:
    """
    Largest number of intervals covering a single instant.
    Ends sort before starts at the same instant, so touching intervals
    are not counted together.
    """
    points = []
    for iv in intervals:
        points.append((iv.start, 1))
        points.append((iv.end, -1))
    points.sort(key=lambda p: (p[0], p[1]))

    current = best = 0
    for _, delta in points:
        current += delta
        best = max(best, current)
    return best
