"""Interactive helpers for pdum_aws commands."""

from typing import Optional

from InquirerPy import inquirer

from pdum.aws.directory import RoleDirectory
from pdum.aws.types import RoleRecord

MIN_CODE_LENGTH = 6
MAX_CODE_PROMPTS = 3


def validate_one_time_code(code: str) -> Optional[str]:
    """Check an MFA one-time code.

    Args:
        code: The code as typed by the user

    Returns:
        None if the code is valid, otherwise a message describing the problem
    """
    if len(code) < MIN_CODE_LENGTH:
        return f"Code provided was less than {MIN_CODE_LENGTH} characters long"
    if not code.isdigit():
        return "Code provided must only contain digits"
    return None


def prompt_one_time_code(console, attempts: int = MAX_CODE_PROMPTS) -> Optional[str]:
    """Ask the user for an MFA one-time code.

    Args:
        console: Console used to report invalid codes
        attempts: Number of prompts before giving up

    Returns:
        A valid code, or None if every attempt was invalid
    """
    for _ in range(attempts):
        # Windows terminals may leave a trailing carriage return.
        code = inquirer.text(message="MFA Code:").execute().strip()
        problem = validate_one_time_code(code)
        if problem is None:
            return code
        console.print(f"[yellow]Invalid MFA Code:[/yellow] {problem}")
    return None


def choose_role(roles: RoleDirectory) -> Optional[RoleRecord]:
    """Interactively choose a configured role.

    Returns:
        The selected role, or None if no roles are configured
    """
    if len(roles) == 0:
        return None

    choices = []
    for role in roles:
        alias_text = f" [{', '.join(role.aliases)}]" if role.aliases else ""
        choices.append({
            "name": f"{role.name} ({role.arn}){alias_text}",
            "value": role,
        })

    return inquirer.select(
        message="Select role to assume:",
        choices=choices,
    ).execute()


__all__ = ["MAX_CODE_PROMPTS", "MIN_CODE_LENGTH", "choose_role", "prompt_one_time_code", "validate_one_time_code"]
