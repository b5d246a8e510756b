"""Error classes, config paths, and small shared helpers."""

import os
import sys
from pathlib import Path


class IziError(Exception):
    """Base error for izi CLI operations."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class AuthError(IziError):
    """Authentication error (exit code 2)."""

    def __init__(self, message: str):
        super().__init__(message, exit_code=2)


class ApiError(IziError):
    """A failed call to the remote service.

    ``kind`` is one of: validation, not_found, rate_limit, network, server.
    """

    def __init__(self, message: str, status: int | None = None, kind: str = "server"):
        super().__init__(message, exit_code=1)
        self.status = status
        self.kind = kind


CONFIG_DIR = Path(os.environ.get("IZI_CONFIG_DIR", Path.home() / ".config" / "izi"))
CONFIG_PATH = CONFIG_DIR / "config.json"


def read_text_file(path: str) -> str:
    """Read a local file, raising IziError(exit_code=3) when it can't be read."""
    if not os.path.exists(path):
        raise IziError(f"file not found: {path}", exit_code=3)
    if not os.path.isfile(path):
        raise IziError(f"not a file: {path}", exit_code=3)
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except PermissionError:
        raise IziError(f"permission denied: {path}", exit_code=3)
    except (OSError, UnicodeDecodeError) as e:
        raise IziError(f"cannot read file: {e}", exit_code=3)


def _require_tty(what: str) -> None:
    if not sys.stdin.isatty():
        raise IziError(
            f"{what} is required (stdin is not interactive)",
            exit_code=3,
        )


def ask(message: str, required: bool = True, default: str = "") -> str:
    """Prompt on stderr for a line of input.

    Re-asks until a non-empty answer is given when ``required``.
    """
    from izi.format import format_error

    if not sys.stdin.isatty():
        if not required:
            return default
        _require_tty(message.rstrip(":").strip())
    while True:
        print(f"{message} ", end="", file=sys.stderr, flush=True)
        answer = input().strip()
        if answer:
            return answer
        if not required:
            return default
        label = message.rstrip(":").strip()
        print(format_error(f"{label} is required"), file=sys.stderr)


def ask_secret(message: str) -> str:
    """Prompt for a hidden, non-empty value (e.g. an API token)."""
    import getpass

    from izi.format import format_error

    _require_tty("Token")
    while True:
        answer = getpass.getpass(f"{message} ").strip()
        if answer:
            return answer
        print(format_error("Token cannot be empty"), file=sys.stderr)


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question. Non-interactive stdin returns ``default``."""
    if not sys.stdin.isatty():
        return default
    hint = "[Y/n]" if default else "[y/N]"
    print(f"{message} {hint}: ", end="", file=sys.stderr, flush=True)
    answer = input().strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def split_tags(raw: str) -> list[str]:
    """Split a comma-separated tag string, dropping empty entries."""
    return [t.strip() for t in raw.split(",") if t.strip()]
