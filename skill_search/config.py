"""Runtime settings: data directory resolution and optional ``config.yaml`` overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from skill_search import __version__
from skill_search.errors import ConfigError

DATA_DIR_ENV = "SKILL_SEARCH_DATA_DIR"
CONFIG_FILE = "config.yaml"


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at startup and passed to components."""

    data_dir: Path
    http_timeout: float = 30.0
    popularity_url: str = "https://clawhub.com/api/v1/skills"
    popularity_page_size: int = 100
    popularity_registry: str = "clawdhub"
    over_fetch: int = 4
    user_agent: str = f"skill-search/{__version__}"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "skills.db"

    @property
    def index_path(self) -> Path:
        return self.data_dir / "index"

    @property
    def repos_dir(self) -> Path:
        return self.data_dir / "repos"

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILE


def default_data_dir() -> Path:
    env = os.environ.get(DATA_DIR_ENV)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".local" / "share" / "skill-search"


def load_settings(data_dir: str | Path | None = None) -> Settings:
    """Resolve the data directory and apply ``config.yaml`` overrides.

    The directory comes from ``data_dir`` if given, then the
    ``SKILL_SEARCH_DATA_DIR`` environment variable, then
    ``~/.local/share/skill-search``. It is created if missing.

    Raises:
        ConfigError: If ``config.yaml`` exists but is malformed.
    """
    path = Path(data_dir).expanduser() if data_dir else default_data_dir()
    path.mkdir(parents=True, exist_ok=True)

    settings = Settings(data_dir=path)
    overrides = _read_overrides(settings.config_path)
    if overrides:
        settings = replace(settings, **overrides)
    return settings


def _read_overrides(config_path: Path) -> dict:
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        raise ConfigError(f"Failed to read {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping, got {type(data).__name__}")

    overrides = {}
    for f in fields(Settings):
        if f.name == "data_dir" or f.name not in data:
            continue
        overrides[f.name] = _coerce(f.name, data[f.name], f.default)
    return overrides


def _coerce(key: str, value, default):
    """Coerce a config value to the type of its default."""
    kind = type(default)
    try:
        coerced = kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key!r}: {value!r}") from e
    if kind in (int, float) and coerced <= 0:
        raise ConfigError(f"{key!r} must be positive, got {value!r}")
    return coerced
