from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from fleetline.kinds import ItemKind


class CapacityClass(str, Enum):
    EXCLUSIVE = "exclusive"
    POOLED = "pooled"


class ResourceState(str, Enum):
    AVAILABLE = "available"
    MAINTENANCE = "maintenance"
    BACKUP = "backup"


class RowKind(str, Enum):
    QUEUE = "queue"
    RESOURCE = "resource"
    BUFFER = "buffer"


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Group:
    id: str
    name: str = ""


@dataclass(frozen=True)
class Resource:
    id: str
    group_id: str
    capacity: CapacityClass = CapacityClass.EXCLUSIVE
    state: ResourceState = ResourceState.AVAILABLE
    label: str = ""  # plate, or "Swap Buffer" for pooled rows
    model: str = ""
    sipp: str = ""
    store_id: str = ""
    features: Tuple[str, ...] = ()

    @property
    def is_pooled(self) -> bool:
        return self.capacity is CapacityClass.POOLED


@dataclass(frozen=True)
class ScheduleItem:
    id: str
    kind: ItemKind
    group_id: str
    resource_id: Optional[str]  # None: waiting in the group's pending queue
    start: datetime
    end: datetime
    status: str = ""
    locked: bool = False
    reason: str = ""
    category: str = ""  # requested model
    origin: str = ""  # pickup location
    destination: str = ""  # drop-off location
    reference: str = ""  # reservation / work-order id
    customer: str = ""
    notes: str = ""
    meta: dict = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_pending(self) -> bool:
        return self.resource_id is None

    @property
    def is_booking(self) -> bool:
        return self.kind in (ItemKind.BOOKING_ASSIGNED, ItemKind.BOOKING_UNASSIGNED)

    @property
    def is_returned(self) -> bool:
        status = self.status.lower()
        return "returned" in status or "completed" in status

    @property
    def is_ops_lock(self) -> bool:
        if self.kind is not ItemKind.BLOCK:
            return False
        reason = self.reason.lower()
        return any(word in reason for word in ("operation", "ops", "lock"))

    @property
    def is_one_way(self) -> bool:
        return bool(self.origin and self.destination and self.origin != self.destination)


@dataclass(frozen=True)
class Row:
    key: str
    kind: RowKind
    group_id: str
    resource_id: Optional[str]
    capacity: CapacityClass
    label: str
    items: Tuple[ScheduleItem, ...] = ()


@dataclass(frozen=True)
class RowLayout:
    height: float
    items_with_lane: Tuple[Tuple[ScheduleItem, int], ...]
    lane_count: int

    def lanes(self) -> dict:
        """item id -> lane index"""
        return {item.id: lane for item, lane in self.items_with_lane}


@dataclass(frozen=True)
class ItemGeometry:
    left: float
    width: float
    top: float
    height: float
    cropped_left: bool = False
    cropped_right: bool = False
