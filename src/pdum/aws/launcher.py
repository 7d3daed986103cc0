"""Hand credentials to other processes.

Either run a user command with the credentials in its environment, or write
them into a named AWS CLI profile.
"""

import os
import shutil
import subprocess
from typing import Mapping, Optional, Sequence

from pdum.aws.settings import Settings
from pdum.aws.types import AWSCommandError, CredentialRecord


def run_command(
    command: Sequence[str],
    credentials: CredentialRecord,
    settings: Settings,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Run a command with the credentials exported into its environment.

    The child inherits stdin, stdout, and stderr.

    Args:
        command: Program and arguments
        credentials: Credentials to export
        settings: Runtime settings
        environ: Base environment (defaults to the current process environment)

    Returns:
        The command's exit code (127 if the program cannot be found)
    """
    env = dict(os.environ if environ is None else environ)
    env.update(credentials.as_environment())

    settings.log_debug(f"Running command: {list(command)}")
    try:
        result = subprocess.run(list(command), env=env, check=False)
    except FileNotFoundError:
        settings.console.print(f"[bold red]Error:[/bold red] Command not found: {command[0]}")
        return 127
    return result.returncode


def find_aws_cli() -> str:
    """Locate the aws CLI executable.

    Raises:
        AWSCommandError: If aws is not on PATH
    """
    cli_path = shutil.which("aws")
    if not cli_path:
        raise AWSCommandError("Unable to find the AWS CLI executable (aws) in PATH")
    return cli_path


def run_aws(args: list[str], cli_path: str = "aws") -> None:
    """Run an aws CLI command, discarding its output.

    Args:
        args: Arguments to pass to aws
        cli_path: Path to the aws executable

    Raises:
        AWSCommandError: If the command exits non-zero
    """
    cmd = [cli_path] + args
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        # The command line holds secret values; report only the key being set.
        key = args[-2] if len(args) >= 2 else ""
        raise AWSCommandError(f"aws configure set {key} failed: {(e.stderr or '').strip()}") from e


def write_profile(profile_name: str, credentials: CredentialRecord, settings: Settings) -> None:
    """Write credentials into an AWS CLI profile via ``aws configure set``.

    Every key is attempted even if an earlier one fails; failures are reported
    as warnings and then raised together.

    Args:
        profile_name: Target AWS CLI profile
        credentials: Credentials to store
        settings: Runtime settings

    Raises:
        AWSCommandError: If aws is missing or any key could not be written
    """
    cli_path = find_aws_cli()
    settings.log_debug(f"Found aws CLI: {cli_path}")

    values = [
        ("aws_access_key_id", credentials.access_key_id),
        ("aws_secret_access_key", credentials.secret_access_key),
        ("aws_session_token", credentials.session_token),
        # Not read by the AWS CLI; lets the user see when the profile expires.
        ("expiration_time", credentials.expires_at.isoformat()),
    ]

    failed = []
    for key, value in values:
        try:
            run_aws(["--profile", profile_name, "configure", "set", key, value], cli_path=cli_path)
        except AWSCommandError as e:
            settings.warn(str(e))
            failed.append(key)

    if failed:
        raise AWSCommandError(f"Unable to write {', '.join(failed)} to profile '{profile_name}'")


__all__ = ["find_aws_cli", "run_aws", "run_command", "write_profile"]
