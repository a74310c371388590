from dataclasses import replace
from datetime import datetime
from itertools import count

from loguru import logger

from fleetline.interaction import MoveCommitted, MoveRequested, RangeSelected
from fleetline.kinds import ItemKind
from fleetline.model import ScheduleItem


class ItemNotFoundError(KeyError):
    pass


class ScheduleStore:
    """
    Host-side owner of the item collection. The board never mutates items;
    it hands intents to `apply`, which performs at most one change each.
    """

    def __init__(self, items=(), resources=()):
        self._items = {item.id: item for item in items}
        self._resources = {r.id: r for r in resources}
        self._seq = count(1)

    def items(self) -> tuple:
        return tuple(self._items.values())

    def get(self, item_id: str):
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFoundError(item_id) from None

    def apply(self, intent):
        if isinstance(intent, MoveCommitted):
            return self.move_item(intent.item_id, intent.target_resource_id,
                                  intent.new_start, intent.new_end)
        if isinstance(intent, RangeSelected):
            return self.create_item(intent)
        if isinstance(intent, MoveRequested):
            # Needs confirmation first; nothing to apply yet.
            return None
        raise TypeError(f"Unsupported intent: {intent!r}")

    def create_item(self, selection: RangeSelected, kind=ItemKind.BLOCK, **fields):
        res = self._resources.get(selection.resource_id)
        item_id = fields.pop("id", None) or f"new_{next(self._seq)}"
        item = ScheduleItem(
            id=item_id,
            kind=kind,
            group_id=fields.pop("group_id", res.group_id if res else ""),
            resource_id=selection.resource_id,
            start=selection.start,
            end=selection.end,
            **fields,
        )
        self._items[item.id] = item
        logger.info("Created {} {} on {}", kind.value, item.id, selection.resource_id)
        return item

    def move_item(self, item_id: str, resource_id, new_start: datetime | None = None,
                  new_end: datetime | None = None):
        """
        Reassign an item. A locked item stays on its resource when asked to
        move elsewhere (time edits still apply); a pending booking placed on
        a resource becomes a confirmed assignment; moving to None sends it
        back to the pending queue.
        """
        item = self.get(item_id)
        changes = {}

        if item.locked and resource_id is not None and resource_id != item.resource_id:
            logger.warning("Item {} is locked; keeping it on {}", item_id, item.resource_id)
        else:
            changes["resource_id"] = resource_id
            if item.kind is ItemKind.BOOKING_UNASSIGNED and resource_id is not None:
                changes["kind"] = ItemKind.BOOKING_ASSIGNED
                changes["status"] = "Confirmed"
            if resource_id is None:
                changes["kind"] = ItemKind.BOOKING_UNASSIGNED
                changes["status"] = "Pending Assignment"

        if new_start is not None and new_end is not None:
            changes["start"] = new_start
            changes["end"] = new_end

        updated = replace(item, **changes)
        self._items[item_id] = updated
        logger.info("Moved {} to {}", item_id, updated.resource_id)
        return updated

    def update_item(self, item_id: str, **changes):
        updated = replace(self.get(item_id), **changes)
        self._items[item_id] = updated
        return updated

    def toggle_lock(self, item_id: str):
        item = self.get(item_id)
        return self.update_item(item_id, locked=not item.locked)

    def set_note(self, item_id: str, note: str):
        return self.update_item(item_id, notes=note)

    def complete_maintenance(self, item_id: str):
        item = self.get(item_id)
        if item.kind is not ItemKind.MAINTENANCE:
            raise ValueError(f"{item_id} is not a maintenance item")
        return self.update_item(item_id, status="Completed")

    def remove_item(self, item_id: str):
        item = self.get(item_id)
        del self._items[item_id]
        logger.info("Removed {}", item_id)
        return item
