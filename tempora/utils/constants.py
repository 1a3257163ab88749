class ResponseMessages:
    """Standard API response messages"""

    # Success messages
    SUCCESS = "Success"
    CREATED = "Created successfully"
    UPDATED = "Updated successfully"
    DELETED = "Deleted successfully"


# Application Constants
class AppConstants:
    # Recurrence expansion window (display only, never persisted)
    DISPLAY_WINDOW_PAST_DAYS = 90
    DISPLAY_WINDOW_FUTURE_DAYS = 365
    MAX_OCCURRENCES_PER_SLOT = 500
    UNKNOWN_FREQUENCY_JUMP_YEARS = 100

    # Calendar view
    MINUTES_IN_DAY = 1440
    MIN_TIMELINE_BLOCK_MINUTES = 45
    UPCOMING_EVENTS_LIMIT = 4
    COLOR_TOKENS = ["primary", "secondary", "success", "warning", "danger"]

    # Schedules
    DEFAULT_SCHEDULE_NAME = "My Schedule"
    SAMPLE_EVENTS_PER_SCHEDULE = 5

    # Validation Limits
    MIN_PASSWORD_LENGTH = 8
    MAX_EVENT_NAME_LENGTH = 200
    MAX_DESCRIPTION_LENGTH = 2000
    MAX_SCHEDULE_NAME_LENGTH = 100
    MAX_TIME_SLOTS = 50

    # Friends
    MIN_SEARCH_QUERY_LENGTH = 2
    SEARCH_RESULTS_LIMIT = 10

