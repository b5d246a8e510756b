"""Records returned by the prompt service, and normalization of raw JSON.

The service has shipped a few response layouts (camelCase API routes,
snake_case database rows with a nested ``users`` join, wrapped lists).
Everything the CLI reads goes through one of the ``normalize_*`` functions
here first.
"""

from dataclasses import dataclass, field

from izi.util import ApiError


@dataclass
class Prompt:
    id: str
    name: str = ""
    description: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)
    author: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass
class SearchResult:
    prompts: list[Prompt]
    total: int


@dataclass
class User:
    username: str
    email: str | None = None


def _unexpected(raw) -> ApiError:
    return ApiError(
        f"Unexpected response from server: {type(raw).__name__}", kind="server"
    )


def _text(value) -> str:
    return "" if value is None else str(value)


def _author(raw: dict) -> str:
    author = raw.get("author")
    if isinstance(author, dict):
        author = author.get("username")
    if not author:
        users = raw.get("users") or raw.get("user")
        if isinstance(users, dict):
            author = users.get("username")
    return str(author) if author else ""


def normalize_prompt(raw) -> Prompt:
    """Build a Prompt from either camelCase or snake_case JSON."""
    if isinstance(raw, dict) and isinstance(raw.get("prompt"), dict):
        raw = raw["prompt"]
    if not isinstance(raw, dict) or raw.get("id") in (None, ""):
        raise _unexpected(raw)

    tags = raw.get("tags") or []
    if not isinstance(tags, list):
        tags = []

    return Prompt(
        id=str(raw["id"]),
        name=_text(raw.get("name")),
        description=_text(raw.get("description")),
        content=_text(raw.get("content")),
        tags=[str(t) for t in tags],
        author=_author(raw),
        created_at=_text(raw.get("createdAt") or raw.get("created_at")),
        updated_at=_text(raw.get("updatedAt") or raw.get("updated_at")),
    )


def normalize_prompt_list(raw) -> list[Prompt]:
    """Accept a bare list, or a dict wrapping it under prompts/data."""
    if isinstance(raw, dict):
        for key in ("prompts", "data"):
            if isinstance(raw.get(key), list):
                raw = raw[key]
                break
    if not isinstance(raw, list):
        raise _unexpected(raw)
    return [normalize_prompt(item) for item in raw]


def normalize_search(raw) -> SearchResult:
    """Build a SearchResult; ``total`` falls back to the number of hits."""
    prompts = normalize_prompt_list(raw)
    total = raw.get("total") if isinstance(raw, dict) else None
    if not isinstance(total, int) or total < len(prompts):
        total = len(prompts)
    return SearchResult(prompts=prompts, total=total)


def normalize_user(raw) -> User:
    if isinstance(raw, dict) and isinstance(raw.get("user"), dict):
        raw = raw["user"]
    if not isinstance(raw, dict) or not raw.get("username"):
        raise _unexpected(raw)
    return User(username=str(raw["username"]), email=raw.get("email") or None)
