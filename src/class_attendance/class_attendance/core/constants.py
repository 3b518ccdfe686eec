"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ROLL_SUFFIX_WIDTH = 2
D2D_ROLL_PREFIX = "d"
UNKNOWN_COHORT = "unknown"

REPORT_DATE_FORMAT = "%d/%m/%Y"
MONTH_LABEL_FORMAT = "%B %Y"
NOT_AVAILABLE = "N/A"
SUMMARY_ROW_LABEL = "Class Average"
D2D_NAME_SUFFIX = " (D2D)"

# Excel refuses sheet names longer than this.
MAX_SHEET_NAME_LENGTH = 31
