"""Telegram bot message templates and constants.

Contains all user-facing message templates, button labels, and the command
menu registered with Telegram. Centralizes message management for consistent
wording across handlers, the pipeline, and the pagination views.
"""

# Bot commands and descriptions
BOT_COMMANDS = (
    ("list", "List memos"),
    ("help", "Help"),
)

HELP_MESSAGE = "\n".join(
    [
        "Memogram",
        "Commands:",
        "/list - List memos",
        "Send a message to create a memo",
    ]
)

# Memo creation
EMPTY_MEMO_MESSAGE = "Please input memo content"
SAVED_MEMO_MESSAGE = "Saved memo: {link}"
SAVE_FAILED_MESSAGE = "Failed to save memo: {error}"
FILE_TOO_LARGE_MESSAGE = "{label} is larger than {limit_mb}MB and was skipped."
DOWNLOAD_FAILED_MESSAGE = "Failed to download {label}"

# Listing
NO_MEMOS_MESSAGE = "No memos found."
LIST_PROMPT_MESSAGE = "Select a memo:"
EMPTY_PLACEHOLDER = "(empty)"
PREV_BUTTON = "Prev"
NEXT_BUTTON = "Next"
BACK_BUTTON = "Back"

# Detail view
PINNED_LABEL = "📌 Pinned"
NOT_PINNED_LABEL = "Pinned: false"
VISIBILITY_LINE = "Visibility: {visibility}"
TAGS_LINE = "Tags: {tags}"
DISPLAY_TIME_LINE = "Display: {time}"
UPDATE_TIME_LINE = "Updated: {time}"
META_SEPARATOR = " | "
PIN_BUTTON = "Pin"
UNPIN_BUTTON = "Unpin"
CURRENT_MARK = "• {label}"
IMAGE_LINK_MESSAGE = "Image: {link}"

# Callback answers
INVALID_ACTION = "Invalid action"
ACTION_EXPIRED = "Action expired"
ACTION_FAILED = "Action failed: {error}"
VISIBILITY_CHANGED = "Visibility: {visibility}"
PINNED_ANSWER = "Pinned"
UNPINNED_ANSWER = "Unpinned"

UNKNOWN_ERROR = "Unknown error"
TRUNCATION_MARKER = "..."
