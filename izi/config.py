"""Persistent CLI configuration: API URL, token, and cached username."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from izi import constants
from izi.util import CONFIG_PATH

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Loaded once per invocation and passed to whatever needs it."""

    api_url: str = constants.DEFAULT_API_URL
    api_token: str | None = None
    username: str | None = None
    # field name -> (env value, file value) for IZI_* overrides; never saved
    _overrides: dict = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api_token)

    def masked_token(self) -> str | None:
        if not self.api_token:
            return None
        return f"{self.api_token[:10]}..."


_ENV_OVERRIDES = {"api_url": "IZI_API_URL", "api_token": "IZI_TOKEN"}
_FILE_KEYS = ("api_url", "api_token", "username")


def _path(path: Path | None) -> Path:
    return path if path is not None else CONFIG_PATH


def load_config(path: Path | None = None, env: dict | None = None) -> Config:
    """Load config from disk, then apply IZI_API_URL / IZI_TOKEN overrides.

    A missing or corrupt file yields the defaults. Overrides last for this
    process only: save_config writes the file values back in their place.
    """
    path = _path(path)
    env = os.environ if env is None else env
    config = Config()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            config = Config(**{k: v for k, v in data.items() if k in _FILE_KEYS})
        except (json.JSONDecodeError, TypeError, AttributeError, OSError) as e:
            logger.warning("ignoring unreadable config %s: %s", path, e)

    for name, var in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            config._overrides[name] = (value, getattr(config, name))
            setattr(config, name, value)
    return config


def _persisted(config: Config) -> dict:
    """Fields to write to disk, with env overrides swapped back for file values.

    A field the caller changed after loading keeps its new value.
    """
    data = {name: getattr(config, name) for name in _FILE_KEYS}
    for name, (env_value, file_value) in config._overrides.items():
        if data[name] == env_value:
            data[name] = file_value
    return data


def save_config(config: Config, path: Path | None = None) -> None:
    """Save config atomically (temp file + rename), readable by owner only."""
    path = _path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(_persisted(config), f, indent=2)
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
    logger.debug("saved config to %s", path)


def clear_config(path: Path | None = None) -> None:
    """Delete all stored settings, returning to defaults."""
    _path(path).unlink(missing_ok=True)


def setup_logging(level: str | None = None) -> None:
    """Send log records to stderr at ``level`` (default: IZI_LOG_LEVEL or WARNING)."""
    level = (level or os.environ.get("IZI_LOG_LEVEL") or "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
