"""Runtime settings shared by every pdum_aws component.

Settings are built once (by the CLI) and handed to each component at construction
time. Nothing in the package reads debug/verbose state from module globals.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional

from rich.console import Console
from rich.markup import escape

DEFAULT_REFRESH_WINDOW = timedelta(seconds=90)
CONFIG_FILE_NAME = "config.yaml"
CACHE_DIR_NAME = "cache"


def get_config_dir() -> Path:
    """Get the default configuration directory (``~/.config/pdum_aws``)."""
    home = Path.home()
    return home / ".config" / "pdum_aws"


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Configuration object passed into each component.

    Attributes
    ----------
    config_dir : Path
        Directory holding the config file and, by default, the cache.
    config_file : Path
        YAML file listing the configured roles.
    cache_dir : Path
        Directory holding one credential cache file per account/role pair.
    refresh_window : timedelta
        Cached credentials this close to expiry are treated as expired.
    debug, verbose : bool
        Extra diagnostic output.
    console : Console
        Where diagnostics are printed (stderr by default).
    """

    config_dir: Path
    config_file: Path
    cache_dir: Path
    refresh_window: timedelta = DEFAULT_REFRESH_WINDOW
    debug: bool = False
    verbose: bool = False
    console: Console = field(default_factory=lambda: Console(stderr=True), repr=False, compare=False)

    @classmethod
    def from_env(
        cls,
        *,
        config_dir: Optional[Path] = None,
        cache_dir: Optional[Path] = None,
        refresh_window: Optional[timedelta] = None,
        debug: bool = False,
        verbose: bool = False,
        console: Optional[Console] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Build settings from explicit values, falling back to the environment.

        Explicit arguments win over ``PDUM_AWS_CONFIG_DIR``, ``PDUM_AWS_CACHE_DIR``
        and ``PDUM_AWS_REFRESH_WINDOW``. ``DEBUG=true`` / ``VERBOSE=true`` switch the
        flags on even when the arguments are False.
        """
        env = os.environ if environ is None else environ

        if config_dir is None:
            env_dir = env.get("PDUM_AWS_CONFIG_DIR")
            config_dir = Path(env_dir).expanduser() if env_dir else get_config_dir()

        if cache_dir is None:
            env_cache = env.get("PDUM_AWS_CACHE_DIR")
            cache_dir = Path(env_cache).expanduser() if env_cache else config_dir / CACHE_DIR_NAME

        if refresh_window is None:
            env_window = env.get("PDUM_AWS_REFRESH_WINDOW")
            if env_window:
                try:
                    refresh_window = timedelta(seconds=int(env_window))
                except (ValueError, OverflowError) as e:
                    raise ValueError(
                        f"PDUM_AWS_REFRESH_WINDOW must be a whole number of seconds, got {env_window!r}"
                    ) from e
            else:
                refresh_window = DEFAULT_REFRESH_WINDOW

        if refresh_window < timedelta(0):
            raise ValueError("The refresh window cannot be negative")

        return cls(
            config_dir=config_dir,
            config_file=config_dir / CONFIG_FILE_NAME,
            cache_dir=cache_dir,
            refresh_window=refresh_window,
            debug=debug or _env_flag(env, "DEBUG"),
            verbose=verbose or _env_flag(env, "VERBOSE"),
            console=console or Console(stderr=True),
        )

    def log_verbose(self, message: str) -> None:
        if self.verbose or self.debug:
            self.console.print(message)

    def log_debug(self, message: str) -> None:
        if self.debug:
            self.console.print(f"[dim]{message}[/dim]")

    def warn(self, message: str) -> None:
        self.console.print(f"[bold yellow]WARNING:[/bold yellow] {escape(message)}")


def ensure_storage(settings: Settings) -> None:
    """Create the config and cache directories (mode 0700) if they don't exist.

    Idempotent; existing directories are left as they are.
    """
    for directory in (settings.config_dir, settings.cache_dir):
        if not directory.exists():
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            settings.log_debug(f"Created directory: {directory}")


__all__ = [
    "CACHE_DIR_NAME",
    "CONFIG_FILE_NAME",
    "DEFAULT_REFRESH_WINDOW",
    "Settings",
    "ensure_storage",
    "get_config_dir",
]
