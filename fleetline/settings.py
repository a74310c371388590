import os
from pathlib import Path

from dateutil import tz


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() not in ("0", "false", "no")


# Project root
BASE_DIR = Path(__file__).resolve().parent.parent

# File paths
CONFIG_PATH  = Path(os.getenv("APP_CONFIG_PATH", str(BASE_DIR / "board.yaml")))
META_FILE    = Path(os.getenv("APP_META_FILE_PATH", str(BASE_DIR / "board_meta.yaml")))
OUTPUT_PDF   = os.getenv("APP_OUTPUT_PDF_PATH", "output/fleetline.pdf")
OUTPUT_PNG   = os.getenv("APP_OUTPUT_PNG_DIR", "output/png")

TIMEZONE = os.getenv("TZ", "UTC")
DATE_RANGE = os.getenv("TIME_DATE_RANGE", "week")
TIME_FORMAT    = os.getenv("TIME_FORMAT", "24")
USE_24H        = TIME_FORMAT == "24"
VIEW_SCALE     = os.getenv("VIEW_SCALE", "day").lower()

TZ_LOCAL = tz.gettz(TIMEZONE) or tz.tzutc()

FORMAT = os.getenv("APP_OUTPUT_FORMAT", "pdf").lower()

# Grid geometry (screen pixels)
CELL_WIDTH_DAY   = float(os.getenv("GRID_CELL_WIDTH_DAY", 140))
CELL_WIDTH_HOUR  = float(os.getenv("GRID_CELL_WIDTH_HOUR", 60))
ROW_HEIGHT_STD   = float(os.getenv("GRID_ROW_HEIGHT", 50))
ITEM_HEIGHT      = float(os.getenv("GRID_ITEM_HEIGHT", 38))
LANE_GAP         = float(os.getenv("GRID_LANE_GAP", 6))
ROW_PADDING      = float(os.getenv("GRID_ROW_PADDING", 12))
ITEM_TOP_OFFSET  = float(os.getenv("GRID_ITEM_TOP_OFFSET", 5))
MIN_ITEM_WIDTH   = float(os.getenv("GRID_MIN_ITEM_WIDTH", 4))
SIDEBAR_WIDTH    = float(os.getenv("GRID_SIDEBAR_WIDTH", 200))
HEADER_HEIGHT    = float(os.getenv("GRID_HEADER_HEIGHT", 66))

# Interaction
CREATION_THRESHOLD = float(os.getenv("UI_CREATION_THRESHOLD", 20))
PAN_GAIN           = float(os.getenv("UI_PAN_GAIN", 1.5))

# Color defaults
GRIDLINE_COLOR  = os.getenv("DOC_GRID_LINE_COLOR", "gray(80%)")
WEEKEND_FILL    = os.getenv("DOC_WEEKEND_FILL_COLOR", "gray(95%)")
TODAY_COLOR     = os.getenv("DOC_TODAY_COLOR", "royalblue")
FOOTER_COLOR    = os.getenv("DOC_FOOTER_COLOR", "gray(60%)")

# Page layout
PDF_MARGIN_LEFT   = float(os.getenv("DOC_MARGIN_LEFT", 12))
PDF_MARGIN_RIGHT  = float(os.getenv("DOC_MARGIN_RIGHT", 12))
PDF_MARGIN_TOP    = float(os.getenv("DOC_MARGIN_TOP", 12))
PDF_MARGIN_BOTTOM = float(os.getenv("DOC_MARGIN_BOTTOM", 12))
PDF_PAGE_SIZE = os.getenv("DOC_PAGE_DIMENSIONS", "3508x2480")  # A4 landscape @ 300dpi
PDF_DPI = float(os.getenv("DOC_PAGE_DPI", "300"))
FOOTER = os.getenv("DOC_FOOTER_TEXT", "F L E E T L I N E")

# Behavior
FORCE_REFRESH = os.getenv("APP_FORCE_REFRESH", "false").lower() in ("1", "true", "yes")
SHOW_UTILIZATION = _env_flag("DOC_SHOW_UTILIZATION", "true")
