"""Constants for Hoarder -> Tana synchronization."""

# Cache keys
LAST_CURSOR_KEY = "last_cursor"
BOOKMARK_KEY_PREFIX = "bookmark_"
URL_KEY_PREFIX = "url_"
SYNCED_MARKER = True

DEFAULT_BATCH_SIZE = 50
DEFAULT_TEST_LIMIT = 5

# Target document text limits
UNTITLED_BOOKMARK = "Untitled Bookmark"
TITLE_MAX_LENGTH = 1_000
DESCRIPTION_MAX_LENGTH = 8_000
AI_TAGS_MAX_LENGTH = 1_000
