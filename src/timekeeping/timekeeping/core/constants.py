"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_LATE_GRACE_MINUTES = 5
DEFAULT_WORK_START = "09:00"
DEFAULT_STANDARD_WORK_HOURS = 8.0
REGULARIZED_NOTE = "Regularized"

# Width of the notes and decision_note columns.
MAX_NOTES_LENGTH = 500
