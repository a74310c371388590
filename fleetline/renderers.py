from datetime import datetime, date
import subprocess
from pathlib import Path

from reportlab.pdfgen import canvas
from reportlab.lib.colors import HexColor

from fleetline.logger import logger
import fleetline.settings as settings
from fleetline.kinds import item_color, item_label
from fleetline.layout import (
    TimeAxis, ViewScale, get_layout_config, get_page_size, item_geometry, x_to_page,
)
from fleetline.model import RowKind
from fleetline.utils import css_color_to_hex, fmt_duration, fmt_time

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
GROUP_BAND_PX = 24


def draw_rect_with_optional_round(c, x, y, w, h, radius,
                                  round_left=True, round_right=True,
                                  stroke=1, fill=1):
    """
    Draws a rectangle at (x,y) of width w, height h.
    Corners on a side are rounded with `radius` unless that side is cut
    off by the edge of the window, in which case they stay square.
    """
    radius = max(0, min(radius, w / 2, h / 2))
    p = c.beginPath()
    if round_left:
        p.moveTo(x + radius, y)
    else:
        p.moveTo(x, y)

    # bottom edge, right side
    if round_right:
        p.lineTo(x + w - radius, y)
        p.arcTo(x + w - 2*radius, y, x + w, y + 2*radius, startAng=270, extent=90)
        p.lineTo(x + w, y + h - radius)
        p.arcTo(x + w - 2*radius, y + h - 2*radius, x + w, y + h, startAng=0, extent=90)
    else:
        p.lineTo(x + w, y)
        p.lineTo(x + w, y + h)

    # top edge, left side
    if round_left:
        p.lineTo(x + radius, y + h)
        p.arcTo(x, y + h - 2*radius, x + 2*radius, y + h, startAng=90, extent=90)
        p.lineTo(x, y + radius)
        p.arcTo(x, y, x + 2*radius, y + 2*radius, startAng=180, extent=90)
    else:
        p.lineTo(x, y + h)
        p.lineTo(x, y)

    c.drawPath(p, stroke=stroke, fill=fill)


def ellipsize(c, text, font_name, font_size, max_w):
    if max_w <= 0:
        return ""
    if c.stringWidth(text, font_name, font_size) <= max_w:
        return text
    while text and c.stringWidth(text + "...", font_name, font_size) > max_w:
        text = text[:-1]
    return text.rstrip() + "..." if text else ""


def _hex(color: str):
    return HexColor(css_color_to_hex(color))


def _text_color_for(fill_hex: str):
    """Dark text on light fills, white on dark ones."""
    h = css_color_to_hex(fill_hex).lstrip("#")
    try:
        r, g, b = (int(h[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return HexColor("#000000")
    luminance = 0.299 * r + 0.587 * g + 0.114 * b
    return HexColor("#1F2937") if luminance > 160 else HexColor("#FFFFFF")


def board_title(axis: TimeAxis) -> str:
    if axis.scale is ViewScale.HOUR:
        return axis.origin.strftime("%A, %B %d, %Y")
    last = axis.columns_list()[-1].start if axis.columns else axis.origin
    return f"{axis.origin.strftime('%b %d, %Y')} - {last.strftime('%b %d, %Y')}"


def draw_title(c, axis, layout, page_w):
    c.setFillGray(0)
    c.setFont(FONT_BOLD, layout["title_size"])
    c.drawCentredString(page_w / 2, layout["page_top"] - layout["title_ascent"], board_title(axis))


def draw_header(c, axis, layout, utilization=None, today: date | None = None):
    """Column header: weekday/day or hour labels, today marker, utilisation."""
    scale = layout["scale"]
    top = layout["header_top"]
    bottom = layout["grid_top"]
    cell_w = axis.cell_width * scale
    grid_color = _hex(settings.GRIDLINE_COLOR)

    for col in axis.columns_list(today=today):
        x = x_to_page(col.index * axis.cell_width, layout)
        if col.is_weekend:
            c.setFillColor(_hex(settings.WEEKEND_FILL))
            c.rect(x, bottom, cell_w, top - bottom, stroke=0, fill=1)

        c.setStrokeColor(grid_color)
        c.setLineWidth(0.5)
        c.line(x + cell_w, bottom, x + cell_w, top)

        label_color = _hex(settings.TODAY_COLOR) if col.is_today else HexColor("#334155")
        c.setFillColor(label_color)
        cx = x + cell_w / 2
        if axis.scale is ViewScale.DAY:
            c.setFont(FONT_BOLD, max(4, 10 * scale))
            c.drawCentredString(cx, top - (top - bottom) * 0.30, col.start.strftime("%a").upper())
            c.setFont(FONT_BOLD, max(5, 18 * scale))
            c.drawCentredString(cx, top - (top - bottom) * 0.65, str(col.start.day))
            if utilization and utilization[col.index] is not None:
                c.setFont(FONT, max(4, 9 * scale))
                c.setFillColor(HexColor("#64748B"))
                c.drawCentredString(cx, bottom + (top - bottom) * 0.08, f"{utilization[col.index]:.2f}%")
        else:
            c.setFont(FONT_BOLD, max(4, 11 * scale))
            label = fmt_time(col.start)
            c.drawCentredString(cx, bottom + (top - bottom) * 0.4, label)

        if col.is_today:
            c.setStrokeColor(_hex(settings.TODAY_COLOR))
            c.setLineWidth(1.5)
            c.line(x, bottom, x + cell_w, bottom)

    c.setStrokeGray(0.4)
    c.setLineWidth(1)
    c.line(layout["page_left"], bottom, layout["grid_right"], bottom)
    logger.log("LAYOUT", "Header: {} columns of {:.2f}pt", axis.columns, cell_w)


def draw_row_background(c, axis, layout, y_top, height):
    scale = layout["scale"]
    cell_w = axis.cell_width * scale
    if axis.scale is ViewScale.DAY:
        c.setFillColor(_hex(settings.WEEKEND_FILL))
        for col in axis.columns_list():
            if col.is_weekend:
                c.rect(x_to_page(col.index * axis.cell_width, layout), y_top - height,
                       cell_w, height, stroke=0, fill=1)
    c.setStrokeColor(_hex(settings.GRIDLINE_COLOR))
    c.setLineWidth(0.33)
    for i in range(axis.columns + 1):
        x = x_to_page(i * axis.cell_width, layout)
        c.line(x, y_top - height, x, y_top)
    c.line(layout["page_left"], y_top - height, layout["grid_right"], y_top - height)


def draw_sidebar_label(c, row, layout, y_top, height, resources_by_id):
    scale = layout["scale"]
    x = layout["page_left"] + layout["text_padding"]
    max_w = layout["sidebar_w"] - 2 * layout["text_padding"]
    primary = row.label
    secondary = ""
    if row.kind is RowKind.QUEUE:
        primary = "Pending: " + row.label
    elif row.kind is RowKind.RESOURCE:
        res = resources_by_id.get(row.resource_id)
        if res is not None:
            secondary = " ".join(part for part in (res.model, res.sipp, res.state.value) if part)
    else:
        primary = "Swap Buffer"

    fs = max(4, 11 * scale)
    c.setFillColor(HexColor("#0F172A"))
    c.setFont(FONT_BOLD, fs)
    c.drawString(x, y_top - height / 2 + (fs * 0.2 if not secondary else fs * 0.6),
                 ellipsize(c, primary, FONT_BOLD, fs, max_w))
    if secondary:
        c.setFont(FONT, fs * 0.8)
        c.setFillColor(HexColor("#64748B"))
        c.drawString(x, y_top - height / 2 - fs * 0.8, ellipsize(c, secondary, FONT, fs * 0.8, max_w))


def draw_item(c, item, lane, axis, layout, row_top, colors=None):
    scale = layout["scale"]
    geom = item_geometry(item, lane, axis)

    left = max(geom.left, 0.0)
    right = min(geom.left + geom.width, axis.total_width)
    if right <= left:
        return
    x = x_to_page(left, layout)
    w = (right - left) * scale
    h = geom.height * scale
    y = row_top - geom.top * scale - h

    fill = item_color(item, colors)
    c.setFillColor(_hex(fill))
    c.setStrokeColor(HexColor("#1E293B"))
    c.setLineWidth(0.25)
    draw_rect_with_optional_round(c, x, y, w, h, 3 * scale,
                                  round_left=not geom.cropped_left,
                                  round_right=not geom.cropped_right,
                                  stroke=1, fill=1)

    pad = 4 * scale
    fs = max(3, h * 0.32)
    if w < 60 * scale:
        return
    c.setFillColor(_text_color_for(fill))
    title = item_label(item)
    if item.locked:
        title = "[L] " + title
    times = f"{fmt_time(item.start)} -> {fmt_time(item.end)} ({fmt_duration(item.start, item.end)})"
    c.setFont(FONT_BOLD, fs)
    c.drawString(x + pad, y + h * 0.58, ellipsize(c, title, FONT_BOLD, fs, w - 2 * pad))
    c.setFont(FONT, fs * 0.85)
    detail = times
    if item.is_booking and (item.origin or item.destination):
        detail = f"{item.origin} {times} {item.destination}".strip()
    c.drawString(x + pad, y + h * 0.18, ellipsize(c, detail, FONT, fs * 0.85, w - 2 * pad))
    logger.log("LAYOUT", "Item '{}' lane {} x={:.2f} w={:.2f}", item.id, lane, x, w)


def draw_footer(c, page_w, tz_local=settings.TZ_LOCAL):
    footer = settings.FOOTER
    if footer == "disabled":
        return
    if footer == "updatedat":
        footer_text = datetime.now(tz_local).strftime("Updated: %Y-%m-%d %H:%M %Z")
    else:
        footer_text = footer
    c.setFont(FONT, 6)
    c.setFillColor(_hex(settings.FOOTER_COLOR))
    c.drawCentredString(page_w / 2, settings.PDF_MARGIN_BOTTOM, footer_text)


def render_board_pdf(
    sections,
    layouts: dict,
    axis: TimeAxis,
    output_path: str,
    utilization: list | None = None,
    resources=(),
    colors: dict | None = None,
    today: date | None = None,
):
    """
    Draw one board window: title, column header, then every group band and
    row with its items at their packed lanes. Rows that do not fit continue
    on a new page with the header repeated.
    """
    width, height = get_page_size()
    c = canvas.Canvas(str(output_path), pagesize=(width, height))
    layout = get_layout_config(width, height, axis)
    scale = layout["scale"]
    resources_by_id = {r.id: r for r in resources}

    logger.log("LAYOUT", "Page size: {w:.2f}x{h:.2f}, scale {s:.3f}", w=width, h=height, s=scale)

    def new_page():
        draw_title(c, axis, layout, width)
        draw_header(c, axis, layout, utilization, today)
        return layout["grid_top"]

    y = new_page()
    for section in sections:
        band_h = GROUP_BAND_PX * scale
        if y - band_h < layout["grid_bottom"]:
            draw_footer(c, width)
            c.showPage()
            y = new_page()
        c.setFillColor(HexColor("#F1F5F9"))
        c.rect(layout["page_left"], y - band_h, layout["grid_right"] - layout["page_left"], band_h,
               stroke=0, fill=1)
        c.setFillColor(HexColor("#0F172A"))
        c.setFont(FONT_BOLD, max(4, 11 * scale))
        marker = "+" if section.collapsed else "-"
        c.drawString(layout["page_left"] + layout["text_padding"], y - band_h * 0.7,
                     f"{marker} {section.group.name or section.group.id}")
        y -= band_h

        for row in section.rows:
            row_layout = layouts[row.key]
            row_h = row_layout.height * scale
            if y - row_h < layout["grid_bottom"]:
                draw_footer(c, width)
                c.showPage()
                y = new_page()
            draw_row_background(c, axis, layout, y, row_h)
            draw_sidebar_label(c, row, layout, y, row_h, resources_by_id)
            for item, lane in row_layout.items_with_lane:
                draw_item(c, item, lane, axis, layout, y, colors)
            y -= row_h

    draw_footer(c, width)
    c.save()
    logger.debug("Rendered board {} to {}", axis.anchor(), output_path)
    return str(output_path)


def export_pdf_to_png(pdf_path: str,
                      output_dir: str = None,
                      dpi: int = 150):
    """
    Calls Poppler's pdftocairo to rasterize each page of `pdf_path` to PNG.
    Output files: fleetline_001.png, fleetline_002.png, ...
    """
    base = Path(pdf_path).with_suffix('')
    out_dir = Path(output_dir or f"{base}_png")
    out_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Rendering PNGs...")

    # pdftocairo appends -1.png, -2.png, ...
    prefix = str(out_dir / "page")
    subprocess.run([
        "pdftocairo",
        "-png",
        "-r", str(dpi),
        str(pdf_path),
        prefix
    ], check=True)

    for file in sorted(out_dir.glob("page-*.png")):
        idx = int(file.stem.split('-')[1])
        file.rename(out_dir / f"fleetline_{idx:03d}.png")

    return str(out_dir)
