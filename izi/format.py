"""Output mode selection and formatting helpers."""

import json
from dataclasses import asdict

from izi.models import Prompt


def get_output_mode(args) -> str:
    """Determine output mode from parsed args."""
    if getattr(args, "json", False):
        return "json"
    if getattr(args, "verbose", False):
        return "verbose"
    return "terse"


def format_json(**fields) -> str:
    """Serialize keyword fields as a JSON object (dataclasses expanded)."""
    def _default(obj):
        if hasattr(obj, "__dataclass_fields__"):
            return asdict(obj)
        raise TypeError(f"not JSON serializable: {type(obj).__name__}")

    return json.dumps(fields, default=_default, ensure_ascii=False)


def format_error(message: str) -> str:
    """Format an error message. Always plain text, always stderr."""
    return f"ERR: {message}"


def format_tags(tags: list[str]) -> str:
    return " ".join(f"#{t}" for t in tags)


def format_prompt_list(prompts: list[Prompt], mode: str, show_author: bool = False) -> str:
    """Render prompts for search/list output.

    Terse mode is one tab-separated line per prompt; verbose mode is a
    numbered multi-line block per prompt.
    """
    if not prompts:
        return ""

    lines = []
    for index, p in enumerate(prompts, start=1):
        if mode == "verbose":
            lines.append(f"{index}. {p.name}")
            lines.append(f"   ID: {p.id}")
            if p.description:
                lines.append(f"   {p.description}")
            if p.tags:
                lines.append(f"   {format_tags(p.tags)}")
            if show_author:
                lines.append(f"   By {p.author or '(unknown)'} {p.created_at[:10]}".rstrip())
            else:
                lines.append(f"   Updated: {p.updated_at[:10] or '(unknown)'}")
            lines.append("")
        else:
            date = p.created_at if show_author else p.updated_at
            lines.append(f"{p.id}\t{p.name}\t{date[:10]}")
    return "\n".join(lines).rstrip("\n")
