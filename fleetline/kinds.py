from enum import Enum


class ItemKind(str, Enum):
    BOOKING_ASSIGNED = "BOOKING_ASSIGNED"
    BOOKING_UNASSIGNED = "BOOKING_UNASSIGNED"  # pending queue
    MAINTENANCE = "MAINTENANCE"
    STOP_SALE = "STOP_SALE"  # temporary hold
    BLOCK = "BLOCK"  # internal use or operational lock


class MenuAction(str, Enum):
    DETAILS = "DETAILS"
    ASSIGN = "ASSIGN"
    NOTES = "NOTES"
    LOCK = "LOCK"
    COMPLETE = "COMPLETE"
    RELEASE = "RELEASE"
    DELETE = "DELETE"


KIND_LABELS = {
    ItemKind.BOOKING_ASSIGNED:   "Reservation",
    ItemKind.BOOKING_UNASSIGNED: "Pending",
    ItemKind.MAINTENANCE:        "Maintenance",
    ItemKind.STOP_SALE:          "Temp Hold",
    ItemKind.BLOCK:              "Block",
}

MENU_ACTIONS = {
    ItemKind.BOOKING_ASSIGNED:   (MenuAction.DETAILS, MenuAction.ASSIGN, MenuAction.NOTES, MenuAction.LOCK),
    ItemKind.BOOKING_UNASSIGNED: (MenuAction.DETAILS, MenuAction.ASSIGN, MenuAction.NOTES, MenuAction.LOCK),
    ItemKind.MAINTENANCE:        (MenuAction.DETAILS, MenuAction.NOTES, MenuAction.COMPLETE),
    ItemKind.STOP_SALE:          (MenuAction.DETAILS, MenuAction.RELEASE),
    ItemKind.BLOCK:              (MenuAction.DETAILS, MenuAction.NOTES, MenuAction.DELETE),
}

# Fill colors; anything css_color_to_hex understands is accepted.
KIND_COLORS = {
    ItemKind.BOOKING_ASSIGNED:   "#3B82F6",
    ItemKind.BOOKING_UNASSIGNED: "#FEF3C7",
    ItemKind.MAINTENANCE:        "#475569",
    ItemKind.STOP_SALE:          "#F97316",
    ItemKind.BLOCK:              "#0891B2",
}

PICKED_UP_COLOR = "#4F46E5"
RETURNED_COLOR  = "#E0F2FE"
OPS_LOCK_COLOR  = "#9333EA"


def _check_exhaustive(table: dict, name: str) -> None:
    missing = [k.name for k in ItemKind if k not in table]
    if missing:
        raise TypeError(f"{name} has no entry for: {', '.join(missing)}")


for _name, _table in (("KIND_LABELS", KIND_LABELS),
                      ("MENU_ACTIONS", MENU_ACTIONS),
                      ("KIND_COLORS", KIND_COLORS)):
    _check_exhaustive(_table, _name)


def parse_kind(raw) -> ItemKind:
    """Accept an ItemKind, its name, or its value in any case."""
    if isinstance(raw, ItemKind):
        return raw
    try:
        return ItemKind(str(raw).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown item kind: {raw!r}") from None


def item_label(item) -> str:
    """Bar title: reservation id for bookings, work-order id for maintenance, reason otherwise."""
    kind = item.kind
    if kind in (ItemKind.BOOKING_ASSIGNED, ItemKind.BOOKING_UNASSIGNED):
        return item.reference or "New Res"
    if kind is ItemKind.MAINTENANCE:
        return item.id if len(item.id) < 10 else "WO-" + item.id[:6]
    if kind is ItemKind.STOP_SALE:
        return item.reason or KIND_LABELS[kind]
    if kind is ItemKind.BLOCK:
        return "Ops Lock" if item.is_ops_lock else (item.reason or "Internal Use")
    raise TypeError(f"Unhandled item kind: {kind!r}")


def item_color(item, overrides: dict | None = None) -> str:
    """Fill color for an item, taking status and reason into account."""
    colors = {**KIND_COLORS, **(overrides or {})}
    if item.is_returned:
        return RETURNED_COLOR
    kind = item.kind
    if kind is ItemKind.BOOKING_ASSIGNED:
        status = (item.status or "").lower()
        if "picked up" in status or "active" in status:
            return PICKED_UP_COLOR
        return colors[kind]
    if kind is ItemKind.BLOCK:
        return OPS_LOCK_COLOR if item.is_ops_lock else colors[kind]
    if kind in (ItemKind.BOOKING_UNASSIGNED, ItemKind.MAINTENANCE, ItemKind.STOP_SALE):
        return colors[kind]
    raise TypeError(f"Unhandled item kind: {kind!r}")


def menu_actions(item) -> tuple:
    return MENU_ACTIONS[item.kind]
