"""YAML frontmatter parsing and generation for prompt files."""

import re
from dataclasses import dataclass, field

import yaml

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*$", re.DOTALL | re.MULTILINE
)

_SCALAR_KEYS = ("name", "description", "author", "id")


@dataclass
class FrontmatterData:
    """Metadata carried in a prompt file's frontmatter block."""

    name: str | None = None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    author: str | None = None
    id: str | None = None


@dataclass
class ParsedPrompt:
    metadata: FrontmatterData
    content: str


def _scalar(value) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_inline_list(value: str) -> list:
    """Parse ``[a, 'b', "c"]`` into a list of unquoted strings."""
    value = value.strip()
    if not (value.startswith("[") and value.endswith("]")):
        return []
    inner = value[1:-1]
    if not inner.strip():
        return []
    return [item.strip().strip("'\"").strip() for item in inner.split(",")]


def _parse_lines(raw: str) -> dict:
    """Read flat ``key: value`` lines without a YAML parser.

    Used when the block isn't valid YAML (e.g. an unquoted colon inside a
    description). Lines without a colon are skipped.
    """
    data: dict = {}
    for line in raw.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        colon = line.find(":")
        if colon == -1:
            continue
        key = line[:colon].strip()
        value = line[colon + 1 :].strip()
        if not key:
            continue
        if key == "tags":
            data[key] = _parse_inline_list(value)
        else:
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                value = value[1:-1]
            data[key] = value
    return data


def _load_block(raw: str) -> dict | None:
    """Load the text between the delimiters. None means "not a metadata block"."""
    try:
        data = yaml.safe_load(raw)
    except (yaml.YAMLError, RecursionError):
        return _parse_lines(raw)
    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    return data


def _to_metadata(data: dict, raw: str) -> FrontmatterData:
    tags = data.get("tags")
    if isinstance(tags, list):
        tags = [str(t).strip() for t in tags if t is not None]
    else:
        tags = []
    scalars = {key: _scalar(data.get(key)) for key in _SCALAR_KEYS}
    # Unquoted ids keep their written form (`0123` is not octal 83).
    raw_id = data.get("id")
    if isinstance(raw_id, (int, float)) and not isinstance(raw_id, bool):
        scalars["id"] = _parse_lines(raw).get("id") or scalars["id"]
    return FrontmatterData(tags=tags, **scalars)


def parse_frontmatter(text: str) -> ParsedPrompt:
    """Split a prompt file into metadata and trimmed body content.

    Never raises. A file without a complete leading ``---`` block (or whose
    block isn't a mapping) is all body, with empty metadata.
    """
    match = _FRONTMATTER_RE.match(text)
    if match:
        data = _load_block(match.group(1))
        if data is not None:
            metadata = _to_metadata(data, match.group(1))
            return ParsedPrompt(metadata, text[match.end() :].strip())
    return ParsedPrompt(FrontmatterData(), text.strip())


def generate_frontmatter(metadata: FrontmatterData, content: str) -> str:
    """Render metadata and body back into a prompt file.

    Empty fields are left out. With nothing to write, the result is just
    the content, with no delimiter lines.
    """
    data: dict = {}
    if metadata.name and metadata.name.strip():
        data["name"] = metadata.name
    if metadata.description and metadata.description.strip():
        data["description"] = metadata.description
    if metadata.tags:
        data["tags"] = list(metadata.tags)
    if metadata.author and metadata.author.strip():
        data["author"] = metadata.author
    if metadata.id and str(metadata.id).strip():
        data["id"] = str(metadata.id)

    if not data:
        return content

    block = yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=None,
        width=1000,
    )
    return f"---\n{block}---\n\n{content}"
