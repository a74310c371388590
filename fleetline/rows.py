from collections import defaultdict
from dataclasses import dataclass

from fleetline.logger import logger
from fleetline.lanes import pack_row
from fleetline.model import CapacityClass, Group, Row, RowKind, RowLayout

UNKNOWN_CATEGORY = "Unknown Model"
UNKNOWN_ORIGIN = "Unknown Loc"


@dataclass(frozen=True)
class GroupSection:
    group: Group
    rows: tuple
    collapsed: bool = False


def queue_key(item) -> tuple:
    """(category, origin) key that sorts a pending item into its queue row."""
    return (item.category or UNKNOWN_CATEGORY, item.origin or UNKNOWN_ORIGIN)


def _queue_rows(group: Group, pending: list) -> list[Row]:
    queues = {}
    for item in pending:
        queues.setdefault(queue_key(item), []).append(item)

    rows = []
    for (category, origin), queued in queues.items():
        rows.append(Row(
            key=f"queue_{group.id}_{category}|{origin}",
            kind=RowKind.QUEUE,
            group_id=group.id,
            resource_id=None,
            capacity=CapacityClass.POOLED,
            label=f"{category} @ {origin}",
            items=tuple(queued),
        ))
    return rows


def build_rows(groups, resources, items, force_visible: bool = False,
               collapsed_groups=()) -> list[GroupSection]:
    """
    Ordered rows for a group/resource/item snapshot.

    Per group: pending queue rows first, then exclusive resource rows, then
    pooled buffer rows. A buffer row is only present when it holds items or
    when `force_visible` is set (the host passes the drag state here).
    Items pointing at an unknown resource or group end up in no row.
    """
    group_ids = {g.id for g in groups}
    collapsed_groups = set(collapsed_groups)

    by_group = defaultdict(list)
    for res in resources:
        if res.group_id in group_ids:
            by_group[res.group_id].append(res)

    by_resource = defaultdict(list)
    pending_by_group = defaultdict(list)
    for item in items:
        if item.resource_id is None:
            if item.group_id in group_ids:
                pending_by_group[item.group_id].append(item)
        else:
            by_resource[item.resource_id].append(item)

    sections = []
    for group in groups:
        if group.id in collapsed_groups:
            sections.append(GroupSection(group=group, rows=(), collapsed=True))
            continue

        rows = _queue_rows(group, pending_by_group[group.id])
        exclusive = [r for r in by_group[group.id] if not r.is_pooled]
        pooled = [r for r in by_group[group.id] if r.is_pooled]

        for res in exclusive:
            rows.append(Row(
                key=res.id,
                kind=RowKind.RESOURCE,
                group_id=group.id,
                resource_id=res.id,
                capacity=CapacityClass.EXCLUSIVE,
                label=res.label or res.id,
                items=tuple(by_resource[res.id]),
            ))
        for res in pooled:
            held = by_resource[res.id]
            if not held and not force_visible:
                continue
            rows.append(Row(
                key=res.id,
                kind=RowKind.BUFFER,
                group_id=group.id,
                resource_id=res.id,
                capacity=CapacityClass.POOLED,
                label=res.label or "Swap Buffer",
                items=tuple(held),
            ))

        logger.log("LAYOUT", "Group {}: {} rows", group.id, len(rows))
        sections.append(GroupSection(group=group, rows=tuple(rows)))

    return sections


def flatten(sections) -> list[Row]:
    return [row for section in sections for row in section.rows]


def layout_rows(sections, **height_kw) -> dict[str, RowLayout]:
    """Run the lane packer over every visible row, keyed by row key."""
    return {row.key: pack_row(row.items, row.capacity, **height_kw)
            for row in flatten(sections)}
