"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

NOTES_MAX_LENGTH = 500
