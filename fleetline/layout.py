import math
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta, timezone
from enum import Enum

from reportlab.lib.pagesizes import A4, landscape

from fleetline.logger import logger
import fleetline.settings as settings
from fleetline.model import ItemGeometry


class ViewScale(str, Enum):
    DAY = "day"
    HOUR = "hour"


def parse_scale(raw) -> ViewScale:
    if isinstance(raw, ViewScale):
        return raw
    try:
        return ViewScale(str(raw).strip().lower())
    except ValueError:
        raise ValueError(f"Unknown view scale: {raw!r} (expected 'day' or 'hour')") from None


def default_cell_width(scale: ViewScale) -> float:
    return settings.CELL_WIDTH_DAY if scale is ViewScale.DAY else settings.CELL_WIDTH_HOUR


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0, fold=0)


def _as_origin_local(instant: datetime, origin: datetime) -> datetime:
    # Express the instant on the origin's wall clock so calendar-day math lines up.
    if origin.tzinfo is not None and instant.tzinfo is not None:
        return instant.astimezone(origin.tzinfo)
    return instant


def _to_utc(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc) if dt.tzinfo is not None else dt


def _from_utc(dt: datetime, origin: datetime) -> datetime:
    return dt.astimezone(origin.tzinfo) if origin.tzinfo is not None else dt


def local_midnight(origin: datetime, days: int) -> datetime:
    """Midnight on the origin's wall clock, `days` calendar days after the origin's date."""
    return datetime.combine(origin.date() + timedelta(days=days), time.min, tzinfo=origin.tzinfo)


def elapsed(start: datetime, end: datetime) -> timedelta:
    """Real time between two instants, ignoring wall-clock folds and gaps."""
    return _to_utc(end) - _to_utc(start)


def days_between(origin: datetime, instant: datetime) -> int:
    """Whole calendar days from the origin's date to the instant's date."""
    return (_as_origin_local(instant, origin).date() - origin.date()).days


def hours_between(origin: datetime, instant: datetime) -> float:
    return elapsed(origin, instant).total_seconds() / 3600


def fraction_of_day(instant: datetime, day_start: datetime) -> float:
    """
    Share of its calendar day that has passed at `instant`. The day is
    measured from `day_start` to the next local midnight, so 23h and 25h
    days still map onto one column.
    """
    day_len = elapsed(day_start, local_midnight(day_start, 1))
    return elapsed(day_start, instant) / day_len


def to_pixel(instant: datetime, scale, origin: datetime, cell_width: float) -> float:
    """
    Horizontal offset of an instant, in pixels from the axis origin.

    Both scales anchor the axis at the start of the origin's day: day columns
    are calendar days and an hour window always starts at midnight. Hour
    columns are real hours, so a repeated or skipped wall-clock hour does not
    collapse two instants onto one pixel.
    """
    scale = parse_scale(scale)
    anchor = start_of_day(origin)
    if scale is ViewScale.DAY:
        days = days_between(anchor, instant)
        return (days + fraction_of_day(instant, local_midnight(anchor, days))) * cell_width
    return hours_between(anchor, instant) * cell_width


def to_instant(offset: float, scale, origin: datetime, cell_width: float) -> datetime:
    """
    Inverse of to_pixel. The whole unit count is stepped from the anchor and
    the fractional remainder is added back as whole minutes (nearest) of real
    time, so a round trip is exact to the minute and drops anything finer.
    """
    scale = parse_scale(scale)
    anchor = start_of_day(origin)
    units = offset / cell_width
    whole = math.floor(units)
    remainder = units - whole
    if scale is ViewScale.DAY:
        day_start = local_midnight(anchor, whole)
        day_minutes = elapsed(day_start, local_midnight(anchor, whole + 1)).total_seconds() / 60
        shifted = _to_utc(day_start) + timedelta(minutes=round(remainder * day_minutes))
    else:
        shifted = _to_utc(anchor) + timedelta(hours=whole, minutes=round(remainder * 60))
    return _from_utc(shifted, anchor)


@dataclass(frozen=True)
class Column:
    index: int
    start: datetime
    end: datetime
    is_weekend: bool
    is_today: bool


class TimeAxis:
    """
    The visible window: origin, scale and column count, with the
    coordinate mapping bound to them.
    """

    def __init__(self, origin: datetime, scale="day", columns: int = 7,
                 cell_width: float | None = None):
        self.scale = parse_scale(scale)
        self.origin = start_of_day(origin)
        # An hour window is one day wide.
        self.columns = 24 if self.scale is ViewScale.HOUR else int(columns)
        self.cell_width = float(cell_width if cell_width is not None else default_cell_width(self.scale))

    def __repr__(self):
        return (f"TimeAxis(origin={self.origin.isoformat()}, scale={self.scale.value}, "
                f"columns={self.columns}, cell_width={self.cell_width})")

    @property
    def total_width(self) -> float:
        return self.columns * self.cell_width

    @property
    def end(self) -> datetime:
        return self.to_instant(self.total_width)

    def to_pixel(self, instant: datetime) -> float:
        return to_pixel(instant, self.scale, self.origin, self.cell_width)

    def to_instant(self, offset: float) -> datetime:
        return to_instant(offset, self.scale, self.origin, self.cell_width)

    def columns_list(self, today: date | None = None) -> list[Column]:
        if today is None:
            today = datetime.now(self.origin.tzinfo).date()
        cols = []
        for i in range(self.columns):
            if self.scale is ViewScale.DAY:
                start = local_midnight(self.origin, i)
                end = local_midnight(self.origin, i + 1)
            else:
                # Real hours: a fall-back day repeats 01:00, a spring-forward day skips 02:00.
                start = _from_utc(_to_utc(self.origin) + timedelta(hours=i), self.origin)
                end = _from_utc(_to_utc(self.origin) + timedelta(hours=i + 1), self.origin)
            cols.append(Column(
                index=i,
                start=start,
                end=end,
                is_weekend=self.scale is ViewScale.DAY and start.weekday() >= 5,
                is_today=start.date() == today,
            ))
        return cols

    def anchor(self) -> str:
        """Stable identifier of the window, used for change detection."""
        return f"{self.scale.value}:{self.origin.date().isoformat()}:{self.columns}"


def item_geometry(
    item,
    lane: int,
    axis: TimeAxis,
    item_height: float = settings.ITEM_HEIGHT,
    lane_gap: float = settings.LANE_GAP,
    top_offset: float = settings.ITEM_TOP_OFFSET,
    min_width: float = settings.MIN_ITEM_WIDTH,
) -> ItemGeometry:
    """
    [left, width) rectangle for an item at its lane. Width is floored at the
    minimum bar width, so inverted intervals still draw as a sliver.
    """
    left = axis.to_pixel(item.start)
    right = axis.to_pixel(item.end)
    width = max(right - left, min_width)
    top = top_offset + lane * (item_height + lane_gap)
    return ItemGeometry(
        left=left,
        width=width,
        top=top,
        height=item_height,
        cropped_left=left < 0,
        cropped_right=left + width > axis.total_width,
    )


def grid_relative_x(client_x: float, container_left: float, scroll_left: float,
                    sidebar_width: float = settings.SIDEBAR_WIDTH) -> float:
    """Pointer X in grid coordinates (0 = left edge of the first column)."""
    return client_x - container_left + scroll_left - sidebar_width


def pixels_to_points(pixels, dpi):
    return pixels * 72 / dpi


def get_page_size():
    env_size = settings.PDF_PAGE_SIZE
    env_dpi = settings.PDF_DPI
    try:
        px_width, px_height = map(int, env_size.lower().split("x"))
        width_pt = pixels_to_points(px_width, dpi=env_dpi)
        height_pt = pixels_to_points(px_height, dpi=env_dpi)
        return width_pt, height_pt
    except Exception as e:
        logger.warning("Invalid DOC_PAGE_DIMENSIONS or DOC_PAGE_DPI: {}. Using A4 landscape.", e)
        return landscape(A4)


def get_layout_config(width, height, axis: TimeAxis, title_size=12):
    """
    Page geometry for one board. The board is laid out in screen pixels;
    `scale` converts those pixels to points so sidebar plus columns fill
    the printable width.
    """
    page_left   = settings.PDF_MARGIN_LEFT
    page_right  = width - settings.PDF_MARGIN_RIGHT
    page_top    = height - settings.PDF_MARGIN_TOP
    page_bottom = settings.PDF_MARGIN_BOTTOM

    element_pad   = 8
    text_padding  = 4
    footer_height = 10
    title_ascent  = title_size * 0.75

    content_px = settings.SIDEBAR_WIDTH + axis.total_width
    scale = (page_right - page_left) / content_px if content_px else 1.0

    sidebar_w   = settings.SIDEBAR_WIDTH * scale
    header_h    = settings.HEADER_HEIGHT * scale
    grid_left   = page_left + sidebar_w
    grid_right  = page_right
    header_top  = page_top - title_ascent - 2 * element_pad
    grid_top    = header_top - header_h
    grid_bottom = page_bottom + footer_height

    return {
        "scale":         scale,
        "page_left":     page_left,
        "page_right":    page_right,
        "page_top":      page_top,
        "page_bottom":   page_bottom,
        "sidebar_w":     sidebar_w,
        "header_top":    header_top,
        "header_h":      header_h,
        "grid_left":     grid_left,
        "grid_right":    grid_right,
        "grid_top":      grid_top,
        "grid_bottom":   grid_bottom,
        "title_size":    title_size,
        "title_ascent":  title_ascent,
        "element_pad":   element_pad,
        "text_padding":  text_padding,
    }


def x_to_page(offset: float, layout: dict[str, float]) -> float:
    """Convert a grid pixel offset to a horizontal page position."""
    return layout["grid_left"] + offset * layout["scale"]
