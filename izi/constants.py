"""Limits, URLs, and user-facing messages."""

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_CONTENT_SIZE = 100 * 1024  # bytes, UTF-8
MAX_TAG_LENGTH = 30
MAX_TAGS_COUNT = 10
DEFAULT_SEARCH_LIMIT = 10

API_TIMEOUT = 30  # seconds
RETRY_ATTEMPTS = 3
RETRY_DELAY = 1.0  # seconds, doubled per attempt

DEFAULT_API_URL = "https://gitizi.com/api"
TOKEN_SETTINGS_URL = "https://gitizi.com/settings/tokens"
MARKDOWN_EXTENSIONS = (".md", ".markdown")


def prompt_url(prompt_id: str) -> str:
    return f"https://gitizi.com/prompts/{prompt_id}"


NOT_AUTHENTICATED = "Not authenticated. Run `izi auth` to authenticate."
NAME_REQUIRED = "Name is required"
DESCRIPTION_REQUIRED = "Description is required"
NAME_TOO_LONG = f"Name must be {MAX_NAME_LENGTH} characters or less"
DESCRIPTION_TOO_LONG = f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less"
CONTENT_TOO_LARGE = "Content must be 100KB or less"
TOO_MANY_TAGS = f"Maximum {MAX_TAGS_COUNT} tags allowed"

GET_TOKEN_HELP = (
    "To get your API token:\n"
    f"  1. Visit {TOKEN_SETTINGS_URL}\n"
    "  2. Generate a new token\n"
    "  3. Run: izi auth --token YOUR_TOKEN"
)
