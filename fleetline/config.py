from dataclasses import dataclass, field
from pathlib import Path

import requests
import yaml
from dateutil import parser as dateparser
from loguru import logger

import fleetline.settings as settings
from fleetline.kinds import ItemKind, parse_kind
from fleetline.model import CapacityClass, Group, Resource, ResourceState, ScheduleItem
from fleetline.utils import css_color_to_hex


class SnapshotError(ValueError):
    """A snapshot entry could not be turned into a model object."""


@dataclass(frozen=True)
class Snapshot:
    groups: tuple = ()
    resources: tuple = ()
    items: tuple = ()
    colors: dict = field(default_factory=dict, compare=False, hash=False)


def download_snapshot(source: str) -> bytes:
    """
    Fetch a snapshot document from a URL or file path.
    """
    if source.startswith("http"):
        logger.debug("Fetching snapshot from {}", source)
        resp = requests.get(source, timeout=30)
        resp.raise_for_status()
        return resp.content
    path = Path(source)
    if not path.is_file():
        logger.error("Snapshot file not found: {}", source)
        raise FileNotFoundError(f"Snapshot file not found: {source}")
    logger.debug("Loading snapshot from {}", source)
    return path.read_bytes()


def _enum(cls, raw, entry_id, field_name):
    try:
        return cls(str(raw).strip().lower())
    except ValueError:
        msg = f"{entry_id}: invalid {field_name} {raw!r}"
        logger.error("{}", msg)
        raise SnapshotError(msg) from None


def _instant(raw, entry_id, field_name, tz_local):
    try:
        dt = raw if hasattr(raw, "tzinfo") else dateparser.isoparse(str(raw))
    except (ValueError, OverflowError):
        msg = f"{entry_id}: unparsable {field_name} {raw!r}"
        logger.error("{}", msg)
        raise SnapshotError(msg) from None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz_local)
    return dt.astimezone(tz_local)


def parse_group(entry: dict) -> Group:
    return Group(id=str(entry["id"]), name=str(entry.get("name", "")))


def parse_resource(entry: dict) -> Resource:
    rid = str(entry["id"])
    capacity = entry.get("capacity")
    if capacity is None:
        capacity = "pooled" if entry.get("virtual") else "exclusive"
    return Resource(
        id=rid,
        group_id=str(entry["group_id"]),
        capacity=_enum(CapacityClass, capacity, rid, "capacity"),
        state=_enum(ResourceState, entry.get("state", "available"), rid, "state"),
        label=str(entry.get("label", "")),
        model=str(entry.get("model", "")),
        sipp=str(entry.get("sipp", "")),
        store_id=str(entry.get("store_id", "")),
        features=tuple(entry.get("features") or ()),
    )


def parse_item(entry: dict, tz_local=settings.TZ_LOCAL) -> ScheduleItem:
    iid = str(entry["id"])
    try:
        kind = parse_kind(entry.get("kind", ItemKind.BOOKING_ASSIGNED))
    except ValueError as e:
        logger.error("{}: {}", iid, e)
        raise SnapshotError(f"{iid}: {e}") from None

    start = _instant(entry.get("start"), iid, "start", tz_local)
    end = _instant(entry.get("end"), iid, "end", tz_local)
    if end <= start:
        # Kept as-is; the grid draws it as a minimum-width sliver.
        logger.warning("{}: end {} is not after start {}", iid, end, start)

    resource_id = entry.get("resource_id")
    known = {"id", "kind", "group_id", "resource_id", "start", "end", "status", "locked",
             "reason", "category", "origin", "destination", "reference", "customer", "notes"}
    return ScheduleItem(
        id=iid,
        kind=kind,
        group_id=str(entry.get("group_id", "")),
        resource_id=str(resource_id) if resource_id not in (None, "") else None,
        start=start,
        end=end,
        status=str(entry.get("status", "")),
        locked=bool(entry.get("locked", False)),
        reason=str(entry.get("reason", "")),
        category=str(entry.get("category", "")),
        origin=str(entry.get("origin", "")),
        destination=str(entry.get("destination", "")),
        reference=str(entry.get("reference", "")),
        customer=str(entry.get("customer", "")),
        notes=str(entry.get("notes", "")),
        meta={k: v for k, v in entry.items() if k not in known},
    )


def parse_snapshot(data: dict, tz_local=settings.TZ_LOCAL) -> Snapshot:
    data = data or {}
    colors = {}
    for name, value in (data.get("colors") or {}).items():
        colors[parse_kind(name)] = css_color_to_hex(str(value))
    snapshot = Snapshot(
        groups=tuple(parse_group(g) for g in data.get("groups") or ()),
        resources=tuple(parse_resource(r) for r in data.get("resources") or ()),
        items=tuple(parse_item(i, tz_local) for i in data.get("items") or ()),
        colors=colors,
    )
    logger.debug("Snapshot: {} groups, {} resources, {} items",
                 len(snapshot.groups), len(snapshot.resources), len(snapshot.items))
    return snapshot


def load_snapshot(source=None, tz_local=settings.TZ_LOCAL) -> Snapshot:
    """Load the board snapshot (groups, resources, items) from YAML."""
    source = str(source or settings.CONFIG_PATH)
    raw = download_snapshot(source)
    return parse_snapshot(yaml.safe_load(raw), tz_local)
