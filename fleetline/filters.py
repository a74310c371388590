from dataclasses import dataclass

from fleetline.kinds import ItemKind

STATUS_KEYS = ("PENDING", "ASSIGNED", "PICKED_UP", "RETURNED", "MAINT", "STOP", "INTERNAL", "OPS_LOCK")


@dataclass(frozen=True)
class FilterCriteria:
    store: str = ""
    sipp: str = ""
    plate: str = ""
    group: str = ""
    notes: str = ""
    order_id: str = ""
    only_with_bookings: bool = False
    one_way_only: bool = False
    cross_store_only: bool = False
    status_keys: frozenset = frozenset()


def filter_resources(resources, items, criteria: FilterCriteria) -> list:
    booked = {i.resource_id for i in items if i.kind is ItemKind.BOOKING_ASSIGNED}
    kept = []
    for res in resources:
        if criteria.store and res.store_id != criteria.store:
            continue
        if criteria.sipp and res.sipp != criteria.sipp:
            continue
        if criteria.plate and criteria.plate not in res.label:
            continue
        if criteria.group and res.group_id != criteria.group:
            continue
        if criteria.only_with_bookings and res.id not in booked:
            continue
        kept.append(res)
    return kept


def status_keys_for(item) -> set:
    """Legend keys an item answers to."""
    status = item.status.upper()
    kind = item.kind
    keys = set()
    if kind is ItemKind.BOOKING_UNASSIGNED:
        keys.add("PENDING")
    if kind is ItemKind.BOOKING_ASSIGNED and "PICKED UP" not in status and "RETURNED" not in status:
        keys.add("ASSIGNED")
    if "PICKED UP" in status:
        keys.add("PICKED_UP")
    if "RETURNED" in status or "COMPLETED" in status:
        keys.add("RETURNED")
    if kind is ItemKind.MAINTENANCE:
        keys.add("MAINT")
    if kind is ItemKind.STOP_SALE:
        keys.add("STOP")
    if kind is ItemKind.BLOCK:
        keys.add("OPS_LOCK" if item.is_ops_lock else "INTERNAL")
    return keys


def is_cross_store(item, resource) -> bool:
    """Picked up somewhere other than the assigned vehicle's home store."""
    return bool(resource is not None and not resource.is_pooled and item.origin
                and resource.store_id not in item.origin)


def filter_items(items, resources, criteria: FilterCriteria) -> list:
    by_id = {r.id: r for r in resources}
    kept = []
    for item in items:
        if criteria.status_keys and not (status_keys_for(item) & set(criteria.status_keys)):
            continue
        if criteria.notes and criteria.notes.lower() not in item.notes.lower():
            continue
        if criteria.order_id and criteria.order_id.lower() not in item.reference.lower():
            continue
        if criteria.one_way_only and not item.is_one_way:
            continue
        if criteria.cross_store_only and item.kind is ItemKind.BOOKING_ASSIGNED:
            if not is_cross_store(item, by_id.get(item.resource_id)):
                continue
        kept.append(item)
    return kept


def groups_to_show(groups, visible_resources, items) -> list:
    """Groups with a visible resource or a pending booking, in original order."""
    visible = {r.group_id for r in visible_resources}
    visible.update(i.group_id for i in items if i.kind is ItemKind.BOOKING_UNASSIGNED)
    return [g for g in groups if g.id in visible]
