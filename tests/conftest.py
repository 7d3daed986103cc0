"""Shared fixtures."""

import io

import pytest
from rich.console import Console

from pdum.aws.settings import Settings


@pytest.fixture
def console_buffer():
    return io.StringIO()


@pytest.fixture
def settings(tmp_path, console_buffer):
    """Settings rooted in a temporary directory with captured diagnostics."""
    config_dir = tmp_path / "pdum_aws"
    return Settings(
        config_dir=config_dir,
        config_file=config_dir / "config.yaml",
        cache_dir=config_dir / "cache",
        console=Console(file=console_buffer, width=200),
    )
