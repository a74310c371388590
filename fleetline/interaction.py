"""
Pointer interaction for the board, as three independent state machines:

  RangeSelection  IDLE -> SELECTING -> IDLE            (drag empty space to create)
  CanvasPan       IDLE -> PANNING -> IDLE              (pan-modifier drag scrolls)
  ItemDrag        IDLE -> DRAGGING -> IDLE | PENDING_CONFIRM -> IDLE

They work on grid pixels and instants only and never touch the item store;
finished gestures produce intents (RangeSelected, MoveRequested,
MoveCommitted) for the host to apply.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from fleetline.logger import logger
import fleetline.settings as settings
from fleetline.kinds import ItemKind
from fleetline.layout import TimeAxis

PRIMARY_BUTTON = 0


class SelectionState(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"


class PanState(str, Enum):
    IDLE = "idle"
    PANNING = "panning"


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    PENDING_CONFIRM = "pending_confirm"


@dataclass(frozen=True)
class RangeSelected:
    resource_id: str
    start: datetime
    end: datetime


@dataclass(frozen=True)
class MoveProposal:
    item_id: str
    source_resource_id: Optional[str]
    target_resource_id: str
    to_buffer: bool
    from_buffer: bool
    one_way: bool


@dataclass(frozen=True)
class MoveRequested:
    item_id: str
    target_resource_id: str
    source_resource_id: Optional[str]
    proposal: MoveProposal


@dataclass(frozen=True)
class MoveCommitted:
    item_id: str
    target_resource_id: Optional[str]
    new_start: Optional[datetime] = None
    new_end: Optional[datetime] = None


def drag_eligible(item) -> bool:
    """
    Whether an item may be picked up at all: not locked, not maintenance,
    not returned/completed, not a temporary hold, not an operational lock.
    """
    return not (
        item.locked
        or item.kind is ItemKind.MAINTENANCE
        or item.is_returned
        or item.kind is ItemKind.STOP_SALE
        or item.is_ops_lock
    )


class RangeSelection:
    def __init__(self, axis: TimeAxis, threshold: float = settings.CREATION_THRESHOLD):
        self.axis = axis
        self.threshold = threshold
        self._reset()

    def _reset(self):
        self.state = SelectionState.IDLE
        self.resource_id = None
        self.anchor_x = 0.0
        self.current_x = 0.0

    def press(self, resource_id, x: float, button: int = PRIMARY_BUTTON,
              pan_modifier: bool = False, over_item: bool = False) -> bool:
        if self.state is not SelectionState.IDLE:
            logger.debug("Selection press ignored in state {}", self.state.value)
            return False
        if resource_id is None or button != PRIMARY_BUTTON or pan_modifier or over_item:
            return False
        self.state = SelectionState.SELECTING
        self.resource_id = resource_id
        self.anchor_x = self.current_x = max(0.0, x)
        logger.log("GESTURE", "Selecting on {} from x={:.1f}", resource_id, self.anchor_x)
        return True

    def move(self, x: float) -> None:
        if self.state is SelectionState.SELECTING:
            self.current_x = max(0.0, x)

    def preview(self):
        """(left, width) of the live selection band, or None when idle."""
        if self.state is not SelectionState.SELECTING:
            return None
        left = min(self.anchor_x, self.current_x)
        return left, abs(self.current_x - self.anchor_x)

    def release(self) -> Optional[RangeSelected]:
        if self.state is not SelectionState.SELECTING:
            return None
        left = min(self.anchor_x, self.current_x)
        right = max(self.anchor_x, self.current_x)
        resource_id = self.resource_id
        self._reset()

        if right - left <= self.threshold:
            logger.log("GESTURE", "Selection of {:.1f}px below threshold; treated as a click", right - left)
            return None
        intent = RangeSelected(
            resource_id=resource_id,
            start=self.axis.to_instant(left),
            end=self.axis.to_instant(right),
        )
        logger.log("GESTURE", "RangeSelected {} {} -> {}", resource_id, intent.start, intent.end)
        return intent


class CanvasPan:
    def __init__(self, gain: float = settings.PAN_GAIN):
        self.gain = gain
        self.state = PanState.IDLE
        self.anchor_x = 0.0
        self.anchor_scroll = 0.0
        self.scroll_offset = 0.0
        self.max_scroll = None

    def press(self, x: float, scroll_offset: float, pan_modifier: bool = True,
              max_scroll: float | None = None) -> bool:
        """`max_scroll` is the scroll range of the viewport; None leaves the right end open."""
        if not pan_modifier or self.state is not PanState.IDLE:
            return False
        self.state = PanState.PANNING
        self.anchor_x = x
        self.anchor_scroll = self.scroll_offset = scroll_offset
        self.max_scroll = max_scroll
        logger.log("GESTURE", "Panning from x={:.1f} scroll={:.1f}", x, scroll_offset)
        return True

    def move(self, x: float) -> Optional[float]:
        if self.state is not PanState.PANNING:
            return None
        offset = max(0.0, self.anchor_scroll - (x - self.anchor_x) * self.gain)
        if self.max_scroll is not None:
            offset = min(offset, max(0.0, self.max_scroll))
        self.scroll_offset = offset
        return self.scroll_offset

    def release(self) -> None:
        if self.state is PanState.PANNING:
            logger.log("GESTURE", "Pan ended at scroll={:.1f}", self.scroll_offset)
        self.state = PanState.IDLE


class ItemDrag:
    def __init__(self, resolve_resource: Callable[[str], object] = lambda _id: None):
        self.resolve_resource = resolve_resource
        self._reset()

    def _reset(self):
        self.state = DragState.IDLE
        self.item = None
        self.source_resource_id = None
        self.pending = None

    @property
    def force_visible(self) -> bool:
        """Buffer rows are shown for as long as an item is being dragged."""
        return self.state is DragState.DRAGGING

    def start(self, item) -> bool:
        if self.state is not DragState.IDLE:
            logger.debug("Drag start ignored in state {}", self.state.value)
            return False
        if not drag_eligible(item):
            logger.log("GESTURE", "Item {} is not draggable", item.id)
            return False
        self.state = DragState.DRAGGING
        self.item = item
        self.source_resource_id = item.resource_id
        logger.log("GESTURE", "Dragging {} from {}", item.id, item.resource_id)
        return True

    def drop(self, target_resource_id):
        """
        Drop over a resource row. Same resource commits at once; another
        resource waits for confirmation. An unknown target ends the gesture
        with nothing emitted.
        """
        if self.state is not DragState.DRAGGING:
            logger.debug("Drop ignored in state {}", self.state.value)
            return None
        target = self.resolve_resource(target_resource_id) if target_resource_id is not None else None
        if target is None:
            self.abandon()
            return None

        item = self.item
        if target_resource_id == self.source_resource_id:
            self._reset()
            logger.log("GESTURE", "{} dropped on its own row; committed", item.id)
            return MoveCommitted(item_id=item.id, target_resource_id=target_resource_id)

        source = self.resolve_resource(self.source_resource_id) if self.source_resource_id else None
        proposal = MoveProposal(
            item_id=item.id,
            source_resource_id=self.source_resource_id,
            target_resource_id=target_resource_id,
            to_buffer=bool(getattr(target, "is_pooled", False)),
            from_buffer=bool(getattr(source, "is_pooled", False)),
            one_way=item.is_one_way,
        )
        self.pending = MoveRequested(
            item_id=item.id,
            target_resource_id=target_resource_id,
            source_resource_id=self.source_resource_id,
            proposal=proposal,
        )
        self.state = DragState.PENDING_CONFIRM
        logger.log("GESTURE", "Move {} {} -> {} awaiting confirmation",
                   item.id, self.source_resource_id, target_resource_id)
        return self.pending

    def confirm(self) -> Optional[MoveCommitted]:
        if self.state is not DragState.PENDING_CONFIRM:
            logger.debug("Confirm ignored in state {}", self.state.value)
            return None
        pending = self.pending
        self._reset()
        logger.log("GESTURE", "Move {} confirmed", pending.item_id)
        return MoveCommitted(item_id=pending.item_id, target_resource_id=pending.target_resource_id)

    def cancel(self) -> None:
        if self.state is DragState.PENDING_CONFIRM:
            logger.log("GESTURE", "Move {} cancelled", self.pending.item_id)
        self._reset()

    def abandon(self) -> None:
        """Released outside any drop target."""
        if self.state is DragState.DRAGGING:
            logger.log("GESTURE", "Drag of {} abandoned", self.item.id)
            self._reset()


class TimelineController:
    """
    Routes raw pointer input to the three machines and forwards finished
    intents to `on_intent`. `pointer_x` is the raw pointer position (used for
    panning); `grid_x` is the grid-relative offset (see layout.grid_relative_x).
    """

    def __init__(self, axis: TimeAxis, resources=(), on_intent: Callable | None = None,
                 threshold: float = settings.CREATION_THRESHOLD,
                 pan_gain: float = settings.PAN_GAIN):
        self.on_intent = on_intent
        self._resources = {}
        self.set_resources(resources)
        self.selection = RangeSelection(axis, threshold=threshold)
        self.pan = CanvasPan(gain=pan_gain)
        self.drag = ItemDrag(resolve_resource=self._resources.get)

    @property
    def axis(self) -> TimeAxis:
        return self.selection.axis

    def set_axis(self, axis: TimeAxis) -> None:
        self.selection.axis = axis

    def set_resources(self, resources) -> None:
        self._resources.clear()
        self._resources.update({r.id: r for r in resources})

    @property
    def force_visible(self) -> bool:
        return self.drag.force_visible

    def _emit(self, intent):
        if intent is not None and self.on_intent is not None:
            self.on_intent(intent)
        return intent

    def pointer_down(self, pointer_x: float, grid_x: float, resource_id=None,
                     button: int = PRIMARY_BUTTON, pan_modifier: bool = False,
                     over_item: bool = False, scroll_offset: float = 0.0,
                     max_scroll: float | None = None) -> bool:
        if pan_modifier:
            return self.pan.press(pointer_x, scroll_offset, pan_modifier=True,
                                  max_scroll=max_scroll)
        if resource_id not in self._resources:
            logger.debug("Press on unknown row {!r} ignored", resource_id)
            return False
        return self.selection.press(resource_id, grid_x, button=button,
                                    pan_modifier=False, over_item=over_item)

    def pointer_move(self, pointer_x: float, grid_x: float) -> Optional[float]:
        """Returns the new scroll offset while panning, else None."""
        if self.selection.state is SelectionState.SELECTING:
            self.selection.move(grid_x)
            return None
        return self.pan.move(pointer_x)

    def pointer_up(self) -> Optional[RangeSelected]:
        intent = self.selection.release()
        self.pan.release()
        return self._emit(intent)

    def drag_start(self, item) -> bool:
        return self.drag.start(item)

    def drop_on(self, resource_id):
        return self._emit(self.drag.drop(resource_id))

    def drag_end(self) -> None:
        """Native drag finished; a drag still in flight had no valid target."""
        self.drag.abandon()

    def confirm_move(self) -> Optional[MoveCommitted]:
        return self._emit(self.drag.confirm())

    def cancel_move(self) -> None:
        self.drag.cancel()
