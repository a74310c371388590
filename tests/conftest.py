from datetime import datetime, timedelta

import pytest
from dateutil import tz

from fleetline.kinds import ItemKind
from fleetline.layout import TimeAxis
from fleetline.model import CapacityClass, Group, Resource, ResourceState, ScheduleItem


# Sunday; the week window runs Sun 7th .. Sat 13th.
DAY0 = datetime(2024, 1, 7, tzinfo=tz.UTC)


def at(day: int, hour: int = 0, minute: int = 0) -> datetime:
    """Instant `day` days after DAY0 at hh:mm UTC."""
    return DAY0 + timedelta(days=day, hours=hour, minutes=minute)


def make_item(item_id, start, end, kind=ItemKind.BOOKING_ASSIGNED,
              resource_id="r1", group_id="g1", **fields):
    return ScheduleItem(id=item_id, kind=kind, group_id=group_id,
                        resource_id=resource_id, start=start, end=end, **fields)


@pytest.fixture
def day0():
    return DAY0


@pytest.fixture
def week_axis():
    """Seven day columns starting on DAY0."""
    return TimeAxis(DAY0, "day", columns=7, cell_width=140)


@pytest.fixture
def hour_axis():
    return TimeAxis(DAY0, "hour", cell_width=60)


@pytest.fixture
def groups():
    return [Group("g1", "Economy"), Group("g2", "SUV")]


@pytest.fixture
def resources():
    return [
        Resource("r1", "g1", label="ABC-123", model="Corolla", sipp="ECAR", store_id="LAX"),
        Resource("r2", "g1", label="XYZ-789", model="Yaris", sipp="ECAR", store_id="SFO"),
        Resource("r3", "g1", state=ResourceState.BACKUP, label="BAK-001", store_id="LAX"),
        Resource("buf1", "g1", capacity=CapacityClass.POOLED, label="Swap Buffer"),
        Resource("r4", "g2", label="SUV-555", model="RAV4", sipp="SFAR", store_id="LAX"),
        Resource("orphan", "g9", label="NO-GROUP"),
    ]


@pytest.fixture
def items():
    return [
        make_item("b1", at(0, 10), at(2, 10), reference="RES-1", status="Confirmed",
                  origin="LAX Airport", destination="LAX Airport"),
        make_item("b2", at(3, 9), at(4, 9), resource_id="r2", reference="RES-2",
                  origin="LAX Airport", destination="SFO Downtown"),
        make_item("m1", at(1, 8), at(1, 17), kind=ItemKind.MAINTENANCE, resource_id="r2",
                  reason="Oil change"),
        make_item("p1", at(2, 9), at(3, 9), kind=ItemKind.BOOKING_UNASSIGNED, resource_id=None,
                  category="Corolla", origin="LAX"),
        make_item("p2", at(2, 12), at(4, 12), kind=ItemKind.BOOKING_UNASSIGNED, resource_id=None),
        make_item("x1", at(1), at(2), resource_id="ghost"),
    ]
