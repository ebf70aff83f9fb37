"""Configuration for MetaDB generation runs.

Values come from three layers, later ones winning: built-in defaults, an
optional ``metadb.toml`` file, then explicit CLI options.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .errors import ConfigError

CONFIG_ENV_VAR = "METADB_CONFIG"
CONFIG_FILE = Path(os.environ.get(CONFIG_ENV_VAR, "metadb.toml"))

DEFAULT_INPUT = Path("db/database.py")
DEFAULT_OUT_DIR = Path("site/public/db")
DEFAULT_PAGES_DIR = Path("site/src/content/docs/classes")
DEFAULT_PRETTY = False
DEFAULT_PUBLIC_PREFIX = "/db"
DEFAULT_LINK_PREFIX = "/classes"
DEFAULT_COMPONENT_IMPORT = "../../../components/ClassDetails.astro"
DEFAULT_BRANCH = "main"
HASH_LENGTH = 12

# [generate] keys that hold filesystem paths.
_PATH_KEYS = {"input", "out_dir", "pages_dir"}
# TOML spellings accepted for each Settings field.
_ALIASES = {
    "in": "input",
    "out": "out_dir",
    "pages": "pages_dir",
    "mdx": "pages_dir",
}


@dataclass(frozen=True)
class Settings:
    input: Path = DEFAULT_INPUT
    out_dir: Path = DEFAULT_OUT_DIR
    pages_dir: Path = DEFAULT_PAGES_DIR
    pretty: bool = DEFAULT_PRETTY
    public_prefix: str = DEFAULT_PUBLIC_PREFIX
    link_prefix: str = DEFAULT_LINK_PREFIX
    component_import: str = DEFAULT_COMPONENT_IMPORT
    prune_json: bool = False
    repo_url: Optional[str] = None
    branch: str = DEFAULT_BRANCH

    @property
    def classes_dir(self) -> Path:
        return self.out_dir / "classes"


# TOML value type accepted for each Settings field; paths are given as strings.
_FIELD_TYPES = {
    "input": str,
    "out_dir": str,
    "pages_dir": str,
    "pretty": bool,
    "public_prefix": str,
    "link_prefix": str,
    "component_import": str,
    "prune_json": bool,
    "repo_url": str,
    "branch": str,
}


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the raw TOML config, or an empty dict when there is no file."""
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        raise ConfigError(f"Cannot load config file {config_path}: {exc}") from exc


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{name}] must be a table, got {type(section).__name__}")
    return section


def _check_type(section: str, key: str, value: Any) -> None:
    expected = _FIELD_TYPES[key]
    if not isinstance(value, expected):
        raise ConfigError(
            f"[{section}] option '{key}' must be a {expected.__name__}, got {type(value).__name__}"
        )


def _settings_from_mapping(raw: Dict[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}

    for key, value in _section(raw, "generate").items():
        key = _ALIASES.get(key, key)
        if key not in _FIELD_TYPES:
            raise ConfigError(f"Unknown [generate] option '{key}'")
        _check_type("generate", key, value)
        values[key] = Path(value) if key in _PATH_KEYS else value

    repo = _section(raw, "repo")
    for key in ("repo_url", "branch"):
        if key in repo:
            _check_type("repo", key, repo[key])
            values[key] = repo[key]
    return values


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> Settings:
    """Build settings from defaults, the config file and non-None overrides."""
    settings = replace(Settings(), **_settings_from_mapping(load_config_file(config_file)))
    explicit = {k: v for k, v in overrides.items() if v is not None}
    return replace(settings, **explicit)


def doc_edit_url(class_name: str, settings: Settings) -> Optional[str]:
    """URL of the repository editor for a class's hand-written docs file."""
    if not settings.repo_url:
        return None
    return f"{settings.repo_url.rstrip('/')}/edit/{settings.branch}/db/docs/{class_name}.yaml"
