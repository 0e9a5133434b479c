"""
Map raw backend error text to messages a teacher can act on.

Rules are checked in order and the first match wins. Matching is
case-insensitive substring search on the raw text.
"""

from typing import Optional

GENERIC_MESSAGE = "An unexpected error occurred. Please try again."
MAX_RAW_LENGTH = 200

CHECK_CONSTRAINT_MESSAGES = [
    (
        "valid_dates",
        "Invalid dates: Due date must be before or equal to close date, "
        "and publish date must be before or equal to due date.",
    ),
    ("valid_max_score", "Maximum score must be greater than 0."),
    ("valid_late_penalty", "Late penalty must be between 0% and 100%."),
    ("valid_file_size_limit", "Maximum file size must be greater than 0."),
]
CHECK_CONSTRAINT_FALLBACK = "Data validation failed. Please check your input values."

FOREIGN_KEY_MESSAGES = [
    ("class_id", "Selected class does not exist or you don't have access to it."),
    ("teacher_id", "Teacher information is invalid. Please try again."),
    ("branch_id", "Branch information is invalid. Please try again."),
]
FOREIGN_KEY_FALLBACK = "Related data not found. Please check your selections."

# (keywords, message) pairs for everything after the constraint checks
KEYWORD_MESSAGES = [
    (("unique constraint",), "An assignment with similar details already exists."),
    (
        ("network", "timeout", "fetch"),
        "Network error. Please check your internet connection and try again.",
    ),
    (
        ("unauthorized", "forbidden", "401", "403"),
        "You don't have permission to perform this action.",
    ),
    (("500", "server error"), "Server error. Please try again in a few moments."),
    (("not found", "404"), "The requested resource was not found."),
    (("invalid", "validation"), "Invalid data provided. Please check your input and try again."),
    (("required", "missing"), "Required information is missing. Please fill all required fields."),
    (("deadline", "due date"), "Invalid date selection. Please check the assignment dates."),
]


def friendly_error_message(raw: Optional[str]) -> str:
    """
    Classify a raw error string into a user-facing message.

    Args:
        raw: Error text from the backend or transport layer.

    Returns:
        Friendly message; the raw text itself when no rule matches and it is
        short enough to show.
    """
    if not raw:
        return GENERIC_MESSAGE

    text = raw.lower()

    if "violates check constraint" in text:
        for constraint, message in CHECK_CONSTRAINT_MESSAGES:
            if constraint in text:
                return message
        return CHECK_CONSTRAINT_FALLBACK

    if "foreign key constraint" in text:
        for column, message in FOREIGN_KEY_MESSAGES:
            if column in text:
                return message
        return FOREIGN_KEY_FALLBACK

    for keywords, message in KEYWORD_MESSAGES:
        if any(k in text for k in keywords):
            return message

    if len(raw) > MAX_RAW_LENGTH:
        return GENERIC_MESSAGE
    return raw
