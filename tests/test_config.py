"""Tests for settings resolution."""

import tempfile
from pathlib import Path

import pytest

from skill_search.config import DATA_DIR_ENV, load_settings
from skill_search.errors import ConfigError


def test_explicit_data_dir_is_created():
    with tempfile.TemporaryDirectory() as tmpdir:
        data_dir = Path(tmpdir) / "data"
        settings = load_settings(data_dir)

        assert data_dir.is_dir()
        assert settings.db_path == data_dir / "skills.db"
        assert settings.index_path == data_dir / "index"
        assert settings.repos_dir == data_dir / "repos"
        assert settings.over_fetch == 4


def test_env_data_dir(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv(DATA_DIR_ENV, tmpdir)
        assert load_settings().data_dir == Path(tmpdir)


def test_config_file_overrides():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "config.yaml").write_text(
            "http_timeout: 5\n"
            "over_fetch: 8\n"
            "popularity_url: https://mirror.test/api\n"
            "unrelated: ignored\n"
        )
        settings = load_settings(tmpdir)

        assert settings.http_timeout == 5.0
        assert settings.over_fetch == 8
        assert settings.popularity_url == "https://mirror.test/api"
        assert settings.data_dir == Path(tmpdir)


def test_empty_config_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "config.yaml").write_text("")
        assert load_settings(tmpdir).over_fetch == 4


def test_malformed_config_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "config.yaml"
        for text in ("over_fetch: [1\n", "- a list\n", "over_fetch: lots\n", "over_fetch: 0\n"):
            path.write_text(text)
            with pytest.raises(ConfigError):
                load_settings(tmpdir)
