"""Size and shape checks for prompt metadata and content.

Every check returns data instead of raising: single-field validators give a
``FieldError`` or ``None``, and ``validate_prompt_data`` gives a list.
"""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Literal

from izi import constants

Field = Literal["name", "description", "content", "tags", "file"]


@dataclass(frozen=True)
class FieldError:
    """A validation failure tagged with the field it belongs to."""

    field: Field
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


def validate_name(name: str) -> FieldError | None:
    if not name or not name.strip():
        return FieldError("name", constants.NAME_REQUIRED)
    if len(name) > constants.MAX_NAME_LENGTH:
        return FieldError("name", constants.NAME_TOO_LONG)
    return None


def validate_description(description: str) -> FieldError | None:
    if not description or not description.strip():
        return FieldError("description", constants.DESCRIPTION_REQUIRED)
    if len(description) > constants.MAX_DESCRIPTION_LENGTH:
        return FieldError("description", constants.DESCRIPTION_TOO_LONG)
    return None


def validate_content_size(content: str) -> FieldError | None:
    """Check the UTF-8 encoded size, not the character count."""
    if len(content.encode("utf-8")) > constants.MAX_CONTENT_SIZE:
        return FieldError("content", constants.CONTENT_TOO_LARGE)
    return None


def validate_tags(tags: list[str]) -> FieldError | None:
    if len(tags) > constants.MAX_TAGS_COUNT:
        return FieldError("tags", constants.TOO_MANY_TAGS)
    for tag in tags:
        if len(tag) > constants.MAX_TAG_LENGTH:
            return FieldError(
                "tags",
                f'Tag "{tag}" exceeds {constants.MAX_TAG_LENGTH} characters',
            )
    return None


def validate_file_extension(path: str) -> FieldError | None:
    suffix = PurePath(path).suffix.lower()
    if suffix not in constants.MARKDOWN_EXTENSIONS:
        return FieldError(
            "file", f"Invalid file extension. Expected .md, got: {path}"
        )
    return None


def validate_prompt_data(
    name: str | None = None,
    description: str | None = None,
    content: str | None = None,
    tags: list[str] | None = None,
) -> list[FieldError]:
    """Validate whichever fields are given, collecting every error.

    Falsy values (None, "", []) are skipped rather than reported, so a
    missing name can still be filled in interactively afterwards. Call
    ``validate_name`` directly to reject an empty name.
    """
    checks = [
        (name, validate_name),
        (description, validate_description),
        (content, validate_content_size),
        (tags, validate_tags),
    ]
    errors = []
    for value, check in checks:
        if not value:
            continue
        error = check(value)
        if error is not None:
            errors.append(error)
    return errors
