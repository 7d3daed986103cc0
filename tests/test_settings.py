"""Tests for runtime settings."""

import os
import stat
from dataclasses import replace
from datetime import timedelta

import pytest

from pdum.aws.settings import DEFAULT_REFRESH_WINDOW, Settings, ensure_storage, get_config_dir


def test_defaults_from_empty_environment():
    settings = Settings.from_env(environ={})

    assert settings.config_dir == get_config_dir()
    assert settings.config_file == get_config_dir() / "config.yaml"
    assert settings.cache_dir == get_config_dir() / "cache"
    assert settings.refresh_window == DEFAULT_REFRESH_WINDOW == timedelta(seconds=90)
    assert settings.debug is False
    assert settings.verbose is False


def test_environment_overrides(tmp_path):
    settings = Settings.from_env(
        environ={
            "PDUM_AWS_CONFIG_DIR": str(tmp_path / "conf"),
            "PDUM_AWS_CACHE_DIR": str(tmp_path / "tmpcache"),
            "PDUM_AWS_REFRESH_WINDOW": "300",
            "DEBUG": "TRUE",
            "VERBOSE": "true",
        }
    )

    assert settings.config_file == tmp_path / "conf" / "config.yaml"
    assert settings.cache_dir == tmp_path / "tmpcache"
    assert settings.refresh_window == timedelta(seconds=300)
    assert settings.debug is True
    assert settings.verbose is True


def test_explicit_arguments_win(tmp_path):
    settings = Settings.from_env(
        config_dir=tmp_path / "explicit",
        refresh_window=timedelta(seconds=10),
        environ={"PDUM_AWS_CONFIG_DIR": "/elsewhere", "PDUM_AWS_REFRESH_WINDOW": "300"},
    )
    assert settings.config_dir == tmp_path / "explicit"
    assert settings.cache_dir == tmp_path / "explicit" / "cache"
    assert settings.refresh_window == timedelta(seconds=10)


@pytest.mark.parametrize("value", ["abc", "-5", "99999999999999999"])
def test_invalid_refresh_window(value):
    with pytest.raises(ValueError):
        Settings.from_env(environ={"PDUM_AWS_REFRESH_WINDOW": value})


def test_debug_flag_only_for_true():
    assert Settings.from_env(environ={"DEBUG": "1"}).debug is False


def test_ensure_storage_creates_private_directories(settings):
    ensure_storage(settings)

    assert settings.config_dir.is_dir()
    assert settings.cache_dir.is_dir()
    assert stat.S_IMODE(os.stat(settings.cache_dir).st_mode) == 0o700


def test_ensure_storage_is_idempotent(settings):
    ensure_storage(settings)
    marker = settings.cache_dir / "keep.json"
    marker.write_text("{}")

    ensure_storage(settings)

    assert marker.exists()


def test_log_levels(settings, console_buffer):
    settings.log_verbose("verbose message")
    settings.log_debug("debug message")
    settings.warn("careful")

    output = console_buffer.getvalue()
    assert "verbose message" not in output
    assert "debug message" not in output
    assert "WARNING: careful" in output


def test_debug_implies_verbose(settings, console_buffer):
    noisy = replace(settings, debug=True)
    noisy.log_verbose("verbose message")
    noisy.log_debug("debug message")

    output = console_buffer.getvalue()
    assert "verbose message" in output
    assert "debug message" in output
