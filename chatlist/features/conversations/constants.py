from __future__ import annotations

UNKNOWN_DISPLAY_NAME = "Unknown"
MAX_PAGE_SIZE = 100
