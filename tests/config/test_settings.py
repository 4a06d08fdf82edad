"""Tests for settings loading and prefix persistence."""

import os

import pytest
from dotenv import dotenv_values
from pydantic import ValidationError

from telebox.config.loader import load_settings, save_prefixes
from telebox.config.schema import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("TB_PREFIX", "TB_ENV", "TB_IGNORE_EDITED", "TB_RELAY__CACHE_TTL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_default_prefixes():
    assert Settings().prefixes == [".", "$"]


def test_development_prefixes(monkeypatch):
    monkeypatch.setenv("TB_ENV", "development")
    assert Settings().prefixes == ["!", "！"]


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TB_PREFIX", "! ? !")
    monkeypatch.setenv("TB_IGNORE_EDITED", "true")
    monkeypatch.setenv("TB_RELAY__CACHE_TTL", "3")

    settings = Settings()
    assert settings.prefixes == ["!", "?"]
    assert settings.ignore_edited is True
    assert settings.relay.cache_ttl == 3


def test_blank_prefix_is_rejected():
    with pytest.raises(ValidationError):
        Settings(prefix="   ")


def test_db_path_creates_directory(tmp_path):
    settings = Settings(assets_dir=str(tmp_path / "assets"))
    path = settings.db_path("sudo")
    assert path == tmp_path / "assets" / "sudo" / "sudo.db"
    assert path.parent.is_dir()


def test_load_settings_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text('TB_PREFIX="; ,"\n')
    assert load_settings(env_file).prefixes == [";", ","]


def test_save_prefixes_round_trip(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("OTHER=1\n")

    assert save_prefixes(["!", "."], env_file)
    values = dotenv_values(env_file)
    assert values["TB_PREFIX"] == "! ."
    assert values["OTHER"] == "1"
    assert os.environ["TB_PREFIX"] == "! ."
    assert Settings().prefixes == ["!", "."]


def test_save_prefixes_reports_unwritable_path(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    assert not save_prefixes(["!"], blocker / "sub" / ".env")
    assert os.environ["TB_PREFIX"] == "!"
