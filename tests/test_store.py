import pytest

from fleetline.interaction import MoveCommitted, MoveProposal, MoveRequested, RangeSelected
from fleetline.kinds import ItemKind
from fleetline.store import ItemNotFoundError, ScheduleStore

from conftest import at, make_item


@pytest.fixture
def store(items, resources):
    return ScheduleStore(items, resources)


class TestApply:
    """Intents from the board applied to the host store."""

    def test_range_selection_creates_block(self, store):
        created = store.apply(RangeSelected("r4", at(1), at(2)))
        assert created.id == "new_1"
        assert created.kind is ItemKind.BLOCK
        assert created.group_id == "g2"
        assert store.get("new_1") == created

    def test_commit_moves_item(self, store):
        moved = store.apply(MoveCommitted("b1", "r2"))
        assert moved.resource_id == "r2"
        assert store.get("b1").resource_id == "r2"

    def test_requested_move_is_not_applied(self, store):
        proposal = MoveProposal("b1", "r1", "r2", False, False, False)
        assert store.apply(MoveRequested("b1", "r2", "r1", proposal)) is None
        assert store.get("b1").resource_id == "r1"

    def test_unknown_intent(self, store):
        with pytest.raises(TypeError):
            store.apply("not an intent")


class TestMoveItem:
    def test_pending_booking_becomes_assigned(self, store):
        moved = store.move_item("p1", "r1")
        assert moved.kind is ItemKind.BOOKING_ASSIGNED
        assert moved.status == "Confirmed"

    def test_unassign_returns_to_queue(self, store):
        moved = store.move_item("b1", None)
        assert moved.kind is ItemKind.BOOKING_UNASSIGNED
        assert moved.status == "Pending Assignment"
        assert moved.is_pending

    def test_locked_item_keeps_resource_but_takes_new_times(self, store):
        store.toggle_lock("b1")
        moved = store.move_item("b1", "r2", at(3), at(4))
        assert moved.resource_id == "r1"
        assert (moved.start, moved.end) == (at(3), at(4))

    def test_partial_time_edit_ignored(self, store):
        moved = store.move_item("b1", "r1", new_start=at(5))
        assert moved.start == at(0, 10)

    def test_missing_item(self, store):
        with pytest.raises(ItemNotFoundError):
            store.move_item("nope", "r1")


class TestEdits:
    def test_complete_maintenance(self, store):
        assert store.complete_maintenance("m1").status == "Completed"
        with pytest.raises(ValueError):
            store.complete_maintenance("b1")

    def test_notes_and_lock(self, store):
        store.set_note("b2", "VIP")
        assert store.get("b2").notes == "VIP"
        assert store.toggle_lock("b2").locked
        assert not store.toggle_lock("b2").locked

    def test_remove(self, store):
        removed = store.remove_item("m1")
        assert removed.id == "m1"
        with pytest.raises(KeyError):
            store.get("m1")

    def test_create_with_fields(self, store):
        item = store.create_item(RangeSelected("r1", at(0), at(1)),
                                 kind=ItemKind.STOP_SALE, reason="Recall")
        assert item.reason == "Recall"
        assert item in store.items()

    def test_unknown_resource_creates_without_group(self):
        store = ScheduleStore([make_item("a", at(0), at(1))])
        assert store.create_item(RangeSelected("zz", at(0), at(1))).group_id == ""
