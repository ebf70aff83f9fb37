"""Tests for configuration loading."""

from pathlib import Path

import pytest

from metadb_cli.config import (
    DEFAULT_INPUT,
    DEFAULT_OUT_DIR,
    DEFAULT_PAGES_DIR,
    Settings,
    doc_edit_url,
    load_config_file,
    load_settings,
)
from metadb_cli.errors import ConfigError


def test_defaults_without_config_file():
    settings = load_settings()

    assert settings.input == DEFAULT_INPUT
    assert settings.out_dir == DEFAULT_OUT_DIR
    assert settings.pages_dir == DEFAULT_PAGES_DIR
    assert settings.pretty is False
    assert settings.classes_dir == DEFAULT_OUT_DIR / "classes"


def test_config_file_values(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text(
        '[generate]\nin = "schema/db.py"\nout = "public/db"\nmdx = "docs/classes"\npretty = true\n'
        '[repo]\nrepo_url = "https://github.com/example/wiki"\nbranch = "dev"\n',
        encoding="utf-8",
    )

    settings = load_settings(config_file)

    assert settings.input == Path("schema/db.py")
    assert settings.out_dir == Path("public/db")
    assert settings.pages_dir == Path("docs/classes")
    assert settings.pretty is True
    assert settings.repo_url == "https://github.com/example/wiki"
    assert settings.branch == "dev"


def test_overrides_win_over_config_file(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text('[generate]\npretty = true\nout_dir = "from-file"\n', encoding="utf-8")

    settings = load_settings(config_file, pretty=False, out_dir=None)

    assert settings.pretty is False
    assert settings.out_dir == Path("from-file")


def test_default_config_file_location(temp_dir: Path, monkeypatch):
    config_file = temp_dir / "custom.toml"
    config_file.write_text('[generate]\npublic_prefix = "/static/db"\n', encoding="utf-8")
    monkeypatch.setattr("metadb_cli.config.CONFIG_FILE", config_file)

    assert load_settings().public_prefix == "/static/db"


def test_missing_config_file_is_empty(temp_dir: Path):
    assert load_config_file(temp_dir / "absent.toml") == {}


def test_malformed_config_raises(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text("[generate\npretty = ", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(config_file)


def test_unknown_option_raises(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text('[generate]\ncolour = "blue"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="colour"):
        load_settings(config_file)


def test_doc_edit_url():
    assert doc_edit_url("Foo", Settings()) is None
    settings = Settings(repo_url="https://github.com/example/wiki/", branch="main")
    assert doc_edit_url("Foo", settings) == "https://github.com/example/wiki/edit/main/db/docs/Foo.yaml"


def test_string_bool_option_raises(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text('[generate]\npretty = "false"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="'pretty' must be a bool"):
        load_settings(config_file)


def test_non_string_path_option_raises(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text("[generate]\nout = 3\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="'out_dir' must be a str"):
        load_settings(config_file)


@pytest.mark.parametrize("section", ["generate", "repo"])
def test_section_must_be_a_table(temp_dir: Path, section: str):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text(f"{section} = 1\n", encoding="utf-8")

    with pytest.raises(ConfigError, match=rf"\[{section}\] must be a table"):
        load_settings(config_file)


def test_repo_branch_must_be_string(temp_dir: Path):
    config_file = temp_dir / "metadb.toml"
    config_file.write_text("[repo]\nbranch = 2\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="'branch' must be a str"):
        load_settings(config_file)
