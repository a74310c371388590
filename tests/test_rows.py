from fleetline.kinds import ItemKind
from fleetline.model import RowKind
from fleetline.rows import build_rows, flatten, layout_rows, queue_key

from conftest import at, make_item


def _keys(section):
    return [row.key for row in section.rows]


class TestBuildRows:
    """Row ordering and visibility per group."""

    def test_queue_rows_come_first(self, groups, resources, items):
        sections = build_rows(groups, resources, items)
        g1 = sections[0]
        kinds = [row.kind for row in g1.rows]
        assert kinds[:2] == [RowKind.QUEUE, RowKind.QUEUE]
        assert kinds[2:] == [RowKind.RESOURCE] * 3

    def test_queue_keys_fall_back_to_unknown(self, groups, resources, items):
        sections = build_rows(groups, resources, items)
        labels = [row.label for row in sections[0].rows if row.kind is RowKind.QUEUE]
        assert labels == ["Corolla @ LAX", "Unknown Model @ Unknown Loc"]

    def test_empty_buffer_hidden_until_forced(self, groups, resources, items):
        hidden = build_rows(groups, resources, items)
        assert "buf1" not in _keys(hidden[0])

        forced = build_rows(groups, resources, items, force_visible=True)
        assert _keys(forced[0])[-1] == "buf1"
        assert forced[0].rows[-1].kind is RowKind.BUFFER

    def test_occupied_buffer_always_shown(self, groups, resources):
        held = [make_item("s1", at(0), at(1), resource_id="buf1")]
        sections = build_rows(groups, resources, held)
        buffer_row = sections[0].rows[-1]
        assert buffer_row.key == "buf1"
        assert [i.id for i in buffer_row.items] == ["s1"]

    def test_exclusive_rows_present_without_items(self, groups, resources):
        sections = build_rows(groups, resources, [])
        assert _keys(sections[0]) == ["r1", "r2", "r3"]
        assert _keys(sections[1]) == ["r4"]

    def test_dangling_references_are_dropped(self, groups, resources, items):
        rows = flatten(build_rows(groups, resources, items))
        placed = {item.id for row in rows for item in row.items}
        assert "x1" not in placed
        assert "orphan" not in {row.key for row in rows}

    def test_pending_item_in_unknown_group_dropped(self, groups, resources):
        stray = [make_item("p9", at(0), at(1), kind=ItemKind.BOOKING_UNASSIGNED,
                           resource_id=None, group_id="g9")]
        rows = flatten(build_rows(groups, resources, stray))
        assert not any(row.kind is RowKind.QUEUE for row in rows)

    def test_collapsed_group_has_no_rows(self, groups, resources, items):
        sections = build_rows(groups, resources, items, collapsed_groups={"g1"})
        assert sections[0].collapsed and sections[0].rows == ()
        assert _keys(sections[1]) == ["r4"]

    def test_group_order_follows_input(self, groups, resources, items):
        sections = build_rows(list(reversed(groups)), resources, items)
        assert [s.group.id for s in sections] == ["g2", "g1"]

    def test_queue_key(self):
        item = make_item("p", at(0), at(1), resource_id=None, category="", origin="SFO")
        assert queue_key(item) == ("Unknown Model", "SFO")


class TestLayoutRows:
    def test_every_visible_row_gets_a_layout(self, groups, resources, items):
        sections = build_rows(groups, resources, items)
        layouts = layout_rows(sections)
        assert set(layouts) == {row.key for row in flatten(sections)}
        assert layouts["r1"].height == 50

    def test_overlapping_pending_bookings_stack_in_their_queue(self, groups, resources):
        pending = [
            make_item("p1", at(0), at(2), kind=ItemKind.BOOKING_UNASSIGNED, resource_id=None),
            make_item("p2", at(1), at(3), kind=ItemKind.BOOKING_UNASSIGNED, resource_id=None),
        ]
        sections = build_rows(groups, resources, pending)
        queue = sections[0].rows[0]
        layout = layout_rows(sections)[queue.key]
        assert layout.lane_count == 2
        assert layout.height == 12 + 2 * 44 + 12
