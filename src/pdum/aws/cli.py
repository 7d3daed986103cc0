"""CLI entry point for pdum_aws."""

import json
import shlex
import sys
from pathlib import Path
from typing import Optional

import typer
from botocore.exceptions import BotoCoreError, ClientError
from rich.console import Console
from rich.markup import escape

from pdum.aws.assume import AssumeResult, obtain_credentials, resolve_role, verify_credentials
from pdum.aws.config import Config, bootstrap_config, list_roles, load_config
from pdum.aws.launcher import run_command, write_profile
from pdum.aws.settings import Settings
from pdum.aws.types import (
    AWSCommandError,
    ConfigError,
    MFACodeError,
    ProfileTargetError,
    RoleResolutionError,
)
from pdum.aws.utils import choose_role, prompt_one_time_code

app = typer.Typer(
    help="Assume AWS IAM roles with MFA and cache the temporary credentials",
    no_args_is_help=True,
)
console = Console(stderr=True)

EXIT_BOOTSTRAPPED = 100
EXIT_NO_COMMAND = 100

_EXPECTED_ERRORS = (
    AWSCommandError,
    ConfigError,
    MFACodeError,
    ProfileTargetError,
    RoleResolutionError,
    ClientError,
    BotoCoreError,
)

ROLE_OPTION = typer.Option(None, "--role", "-r", help="The role ARN, name, or alias to assume")
CODE_OPTION = typer.Option(
    None, "--code", "-c", help="MFA one-time code (prompted for when a refresh is needed)"
)
PROFILE_OPTION = typer.Option(
    None, "--profile", "-p", help="Base AWS profile used to call STS (default: default_profile from config)"
)
REFRESH_OPTION = typer.Option(False, "--refresh", help="Ignore cached credentials and assume the role again")


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enables debug output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enables verbose output"),
    config_dir: Optional[Path] = typer.Option(
        None, "--config-dir", help="Directory holding config.yaml (default: ~/.config/pdum_aws)"
    ),
    cache_dir: Optional[Path] = typer.Option(
        None, "--cache-dir", help="Directory holding cached credentials (default: <config-dir>/cache)"
    ),
):
    """Assume AWS IAM roles with MFA and cache the temporary credentials."""
    try:
        ctx.obj = Settings.from_env(
            config_dir=config_dir,
            cache_dir=cache_dir,
            debug=debug,
            verbose=verbose,
            console=console,
        )
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    ctx.obj.log_debug("Debug mode enabled.")


def _load_config(settings: Settings) -> Config:
    if bootstrap_config(settings.config_file):
        console.print("Hey there! I noticed you didn't have a configuration file, so I created one for you.")
        console.print(
            f"You can find it at [cyan]{settings.config_file}[/cyan] - "
            "you should probably modify it with the values you need!"
        )
        sys.exit(EXIT_BOOTSTRAPPED)
    return load_config(settings.config_file)


def _interactive() -> bool:
    return sys.stdin.isatty()


def _obtain(
    settings: Settings,
    role: Optional[str],
    code: Optional[str],
    profile: Optional[str],
    refresh: bool,
) -> AssumeResult:
    config = _load_config(settings)

    chooser = (lambda: choose_role(config.roles)) if _interactive() else None
    resolved = resolve_role(config, role, chooser=chooser)

    prompt = (lambda: prompt_one_time_code(console)) if _interactive() else None
    result = obtain_credentials(
        settings,
        config,
        resolved,
        code=code,
        base_profile=profile,
        force_refresh=refresh,
        prompt_code=prompt,
    )

    if settings.debug:
        try:
            verify_credentials(settings, result.credentials)
        except (ClientError, BotoCoreError) as e:
            settings.warn(f"Unable to verify the credentials with GetCallerIdentity: {e}")

    return result


@app.command("version")
def version(ctx: typer.Context):
    """Show the version of pdum_aws."""
    from pdum.aws import __version__

    settings: Settings = ctx.obj
    if settings.verbose:
        typer.echo(f"pdum_aws version {__version__}")
    else:
        typer.echo(__version__)


@app.command("init")
def init(ctx: typer.Context):
    """Create an example config file if there isn't one yet."""
    settings: Settings = ctx.obj
    if bootstrap_config(settings.config_file):
        console.print(f"[green]Created example config:[/green] {settings.config_file}")
    else:
        console.print(f"[yellow]Config file already exists:[/yellow] {settings.config_file}")


@app.command("list")
def list_command(ctx: typer.Context):
    """List the configured roles."""
    settings: Settings = ctx.obj
    try:
        config = _load_config(settings)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    list_roles(config, Console())


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run(
    ctx: typer.Context,
    command: Optional[list[str]] = typer.Argument(None, help="Command to run with the role's credentials"),
    role: Optional[str] = ROLE_OPTION,
    code: Optional[str] = CODE_OPTION,
    profile: Optional[str] = PROFILE_OPTION,
    refresh: bool = REFRESH_OPTION,
):
    """
    Run a command with the role's credentials in its environment.

    AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY and AWS_SESSION_TOKEN are exported
    to the command, which inherits the terminal. The exit code is the command's.

    Examples:
        # Use the default role
        pdum_aws run -- aws sts get-caller-identity

        # Pick a role by alias and pass the MFA code up front
        pdum_aws run --role ro --code 123456 -- aws s3 ls
    """
    settings: Settings = ctx.obj
    if not command:
        console.print("Please provide a command to execute, e.g.:")
        console.print("  pdum_aws run --role my_role_name -- aws sts get-caller-identity")
        sys.exit(EXIT_NO_COMMAND)

    try:
        result = _obtain(settings, role, code, profile, refresh)
    except _EXPECTED_ERRORS as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        sys.exit(130)

    sys.exit(run_command(command, result.credentials, settings))


@app.command("env")
def env(
    ctx: typer.Context,
    role: Optional[str] = ROLE_OPTION,
    code: Optional[str] = CODE_OPTION,
    profile: Optional[str] = PROFILE_OPTION,
    refresh: bool = REFRESH_OPTION,
    output_format: str = typer.Option(
        "export", "--format", "-f", help="Output format: 'export' (shell) or 'json'"
    ),
):
    """
    Print the role's credentials for use in the current shell.

    Examples:
        eval "$(pdum_aws env --role prod)"
    """
    settings: Settings = ctx.obj
    if output_format not in ("export", "json"):
        console.print(f"[bold red]Error:[/bold red] Unknown format: {escape(output_format)}")
        sys.exit(1)

    try:
        result = _obtain(settings, role, code, profile, refresh)
    except _EXPECTED_ERRORS as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        sys.exit(130)

    credentials = result.credentials
    if output_format == "json":
        payload = dict(credentials.as_environment())
        payload["Expiration"] = credentials.expires_at.isoformat()
        typer.echo(json.dumps(payload, indent=2))
    else:
        for name, value in credentials.as_environment().items():
            typer.echo(f"export {name}={shlex.quote(value)}")
        typer.echo(f"# Expires at: {credentials.expires_at.isoformat()}")


@app.command("write-profile")
def write_profile_command(
    ctx: typer.Context,
    role: Optional[str] = ROLE_OPTION,
    code: Optional[str] = CODE_OPTION,
    profile: Optional[str] = PROFILE_OPTION,
    refresh: bool = REFRESH_OPTION,
    target_profile: Optional[str] = typer.Option(
        None,
        "--target-profile",
        "-t",
        help="Profile to write the credentials to (default: target_aws_profile from config)",
    ),
):
    """
    Write the role's credentials to an AWS CLI profile.

    Uses `aws configure set`, so the aws CLI must be on PATH.

    Examples:
        pdum_aws write-profile --role prod --target-profile prod-admin
    """
    settings: Settings = ctx.obj
    try:
        result = _obtain(settings, role, code, profile, refresh)

        profile_name = target_profile or result.role.target_profile
        if not profile_name:
            raise ProfileTargetError(
                "Please specify a target profile with --target-profile, or with "
                "target_aws_profile in the config file."
            )

        settings.log_verbose(f"[cyan]Writing credentials to profile:[/cyan] {profile_name}")
        write_profile(profile_name, result.credentials, settings)
    except _EXPECTED_ERRORS as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        sys.exit(130)

    console.print(f"[green]Profile written:[/green] {profile_name}")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
