import sys
import os
from datetime import datetime, time

from PyPDF2 import PdfMerger
from loguru import logger

import fleetline.settings as settings
from fleetline.config import load_snapshot
from fleetline.meta import load_meta, save_meta, compute_snapshot_hash
from fleetline.layout import TimeAxis, ViewScale, parse_scale
from fleetline.rows import build_rows, layout_rows
from fleetline.utilization import column_utilization
from fleetline.utils import parse_date_range
from fleetline.renderers import render_board_pdf, export_pdf_to_png
from fleetline.logger import configure_logging


def build_windows(date_list, scale, tz_local) -> list[TimeAxis]:
    """Day scale: one window across all dates. Hour scale: one window per date."""
    if not date_list:
        return []
    scale = parse_scale(scale)
    if scale is ViewScale.DAY:
        origin = datetime.combine(date_list[0], time.min).replace(tzinfo=tz_local)
        return [TimeAxis(origin, ViewScale.DAY, columns=len(date_list))]
    return [TimeAxis(datetime.combine(d, time.min).replace(tzinfo=tz_local), ViewScale.HOUR)
            for d in date_list]


def render_windows(windows, sections, layouts, snapshot, out_path, tmp_dir="/tmp") -> str:
    """
    Render each window to its own temp PDF and merge them into `out_path`.
    Temp files are removed whether or not rendering succeeds.
    """
    merger = PdfMerger()
    temp_files = []
    try:
        for axis in windows:
            utilization = column_utilization(axis, snapshot.resources, snapshot.items) \
                if settings.SHOW_UTILIZATION else None
            tmp = os.path.join(tmp_dir, f"fleetline_{axis.scale.value}_{axis.origin.date().isoformat()}.pdf")
            temp_files.append(tmp)
            render_board_pdf(sections, layouts, axis, tmp,
                             utilization=utilization,
                             resources=snapshot.resources,
                             colors=snapshot.colors)
            merger.append(tmp)

        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        with open(out_path, "wb") as f:
            merger.write(f)
    finally:
        merger.close()
        for fpath in temp_files:
            if os.path.exists(fpath):
                os.remove(fpath)

    logger.info("Wrote file to {}", out_path)
    return out_path


def main():
    # 0) Set up logs
    configure_logging()

    tz_local = settings.TZ_LOCAL
    logger.debug("Timezone: {}", settings.TIMEZONE)

    # 1) Windows to render
    date_list = parse_date_range(settings.DATE_RANGE, tz_local)
    windows = build_windows(date_list, settings.VIEW_SCALE, tz_local)
    if not windows:
        logger.warning("Empty date range {}, nothing to render.", settings.DATE_RANGE)
        return

    # 2) Snapshot and metadata
    snapshot = load_snapshot(tz_local=tz_local)
    meta = load_meta()

    # 3) Change detection
    anchor = ",".join(w.anchor() for w in windows)
    new_hash = compute_snapshot_hash(snapshot)
    last_anchor = meta.get("_last_anchor")
    prev_hash = meta.get("snapshot_hash")

    if not settings.FORCE_REFRESH and last_anchor == anchor and prev_hash == new_hash:
        logger.info("No changes for {}, skipping generation.", anchor)
        sys.exit(0)

    if settings.FORCE_REFRESH:
        logger.info("FORCE_REFRESH set, refreshing...")
    elif last_anchor != anchor:
        logger.info("Window changed: {} → {}, refreshing...", last_anchor, anchor)
    else:
        logger.info("Snapshot changed, refreshing...")

    # 4) Rows and lanes are independent of the window
    sections = build_rows(snapshot.groups, snapshot.resources, snapshot.items)
    layouts = layout_rows(sections)

    # 5) Render and merge
    out_path = render_windows(windows, sections, layouts, snapshot, settings.OUTPUT_PDF)

    if settings.FORMAT in ("png", "both"):
        export_pdf_to_png(out_path, settings.OUTPUT_PNG)
        if settings.FORMAT == "png":
            os.remove(out_path)

    # 6) Persist metadata
    save_meta({"_last_anchor": anchor, "snapshot_hash": new_hash})
    logger.info("✅ Completed generation for {}", anchor)


if __name__ == '__main__':
    main()
