from datetime import datetime, date, time, timedelta

import fleetline.settings as settings
from fleetline.kinds import ItemKind
from fleetline.layout import ViewScale
from fleetline.model import ResourceState
from fleetline.overlap import overlaps_range


def eligible_resources(resources) -> list:
    """Exclusive resources that are not parked as backup."""
    return [r for r in resources
            if not r.is_pooled and r.state is not ResourceState.BACKUP]


def daily_utilization(day: date, resources, items, tz_local=settings.TZ_LOCAL) -> float:
    """
    Percentage of eligible resources carrying an assigned booking at any
    point during `day` (half-open [00:00, next 00:00)). Rounded to two
    decimals; 0.0 when nothing is eligible.
    """
    eligible = eligible_resources(resources)
    total = len(eligible)
    if total == 0:
        return 0.0

    day_start = datetime.combine(day, time.min).replace(tzinfo=tz_local)
    day_end = day_start + timedelta(days=1)

    booked = {}
    for item in items:
        if item.kind is ItemKind.BOOKING_ASSIGNED and item.resource_id is not None:
            booked.setdefault(item.resource_id, []).append(item)

    occupied = 0
    for res in eligible:
        if any(overlaps_range(e.start, e.end, day_start, day_end) for e in booked.get(res.id, [])):
            occupied += 1
    return round(occupied / total * 100, 2)


def column_utilization(axis, resources, items) -> list:
    """One percentage per day column; hour windows have no per-column statistic."""
    if axis.scale is not ViewScale.DAY:
        return [None] * axis.columns
    return [daily_utilization(col.start.date(), resources, items, axis.origin.tzinfo)
            for col in axis.columns_list()]
