"""Config file handling: loading, bootstrapping, and listing roles."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.table import Table

from pdum.aws.directory import RoleDirectory
from pdum.aws.types import ConfigError, RoleRecord

EXAMPLE_CONFIG = {
    "default_profile": "",
    "mfa_serial": "arn:aws:iam::000000000000:mfa/your_mfa_serial",
    "roles": [
        {
            "name": "one_of_your_accounts",
            "default": True,
            "arn": "arn:aws:iam::000000000000:role/DeleteOnly",
            "aliases": ["delete", "deleteprod"],
        },
        {
            "name": "another_one_of_your_accounts",
            "arn": "arn:aws:iam::111111111111:role/ReadOnly",
            "aliases": ["readonly", "ro"],
        },
    ],
}


@dataclass
class Config:
    """Parsed config file.

    Attributes
    ----------
    default_profile : str, optional
        Base AWS profile used to call STS when ``--profile`` is not given.
    mfa_serial : str
        ARN (or serial number) of the MFA device.
    roles : RoleDirectory
        Configured roles in declaration order.
    """

    default_profile: Optional[str] = None
    mfa_serial: str = ""
    roles: RoleDirectory = field(default_factory=RoleDirectory)


def _parse_role(index: int, entry: Any) -> RoleRecord:
    if not isinstance(entry, dict):
        raise ConfigError(f"Role #{index + 1} must be a mapping, got {type(entry).__name__}")

    aliases = entry.get("aliases") or []
    if isinstance(aliases, str):
        aliases = [aliases]
    if not isinstance(aliases, list):
        raise ConfigError(f"Role #{index + 1}: 'aliases' must be a list")

    target_profile = entry.get("target_aws_profile")
    return RoleRecord(
        name=str(entry.get("name") or ""),
        arn=str(entry.get("arn") or ""),
        aliases=tuple(str(alias) for alias in aliases),
        is_default=bool(entry.get("default", False)),
        target_profile=str(target_profile) if target_profile else None,
    )


def parse_config(data: Any) -> Config:
    """Build a Config from the mapping read out of the YAML file.

    Raises:
        ConfigError: If the document or any role entry has the wrong shape
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("The config file must contain a mapping at the top level")

    roles = data.get("roles") or []
    if not isinstance(roles, list):
        raise ConfigError("'roles' must be a list")

    default_profile = data.get("default_profile")
    return Config(
        default_profile=str(default_profile) if default_profile else None,
        mfa_serial=str(data.get("mfa_serial") or ""),
        roles=RoleDirectory(_parse_role(i, entry) for i, entry in enumerate(roles)),
    )


def load_config(config_file: Path) -> Config:
    """Load the config file.

    Args:
        config_file: Path to the YAML config file

    Returns:
        The parsed config

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise
    except OSError as e:
        raise ConfigError(f"An error occurred while trying to read the config file '{config_file}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"An error occurred while trying to parse the config file '{config_file}': {e}") from e

    return parse_config(data)


def bootstrap_config(config_file: Path) -> bool:
    """Write an example config file if none exists.

    Args:
        config_file: Path to the YAML config file

    Returns:
        True if a new file was written, False if one already existed
    """
    if config_file.exists():
        return False

    config_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    fd = os.open(config_file, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        yaml.dump(EXAMPLE_CONFIG, f, default_flow_style=False, sort_keys=False)

    return True


def list_roles(config: Config, console: Console) -> None:
    """Print the configured roles as a table."""
    if len(config.roles) == 0:
        console.print("[yellow]It looks like you haven't got any roles configured![/yellow]")
        return

    table = Table(title="Configured Roles")
    table.add_column("Name", style="cyan")
    table.add_column("ARN")
    table.add_column("Aliases")
    table.add_column("Default", justify="center")
    table.add_column("Target Profile", style="dim")

    for role in config.roles:
        table.add_row(
            role.name,
            role.arn,
            ", ".join(role.aliases),
            "✓" if role.is_default else "",
            role.target_profile or "",
        )

    console.print(table)

    if config.roles.default_count() > 1:
        console.print(
            "[bold yellow]WARNING:[/bold yellow] More than one role is flagged as default. "
            "The first one in the list is used when --role isn't given."
        )


__all__ = ["Config", "EXAMPLE_CONFIG", "bootstrap_config", "list_roles", "load_config", "parse_config"]
