"""Resolve a role and return usable credentials for it.

This is the glue between the config, the role directory, the credential cache,
and STS:

1. resolve the requested (or default) role
2. derive the cache file from the role ARN
3. reuse cached credentials unless they are inside the refresh window
4. otherwise exchange an MFA code for new credentials and cache them
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from pdum.aws.cache import CredentialCache, cache_file_path
from pdum.aws.config import Config
from pdum.aws.settings import Settings, ensure_storage
from pdum.aws.sts import assume_role_with_mfa, get_caller_identity, sts_client, sts_client_for
from pdum.aws.types import (
    CacheWriteError,
    ConfigError,
    CredentialRecord,
    MFACodeError,
    RoleRecord,
    RoleResolutionError,
)
from pdum.aws.utils import validate_one_time_code


@dataclass(frozen=True)
class AssumeResult:
    """Outcome of :func:`obtain_credentials`."""

    role: RoleRecord
    credentials: CredentialRecord
    refreshed: bool


def resolve_role(
    config: Config,
    search_term: Optional[str],
    chooser: Optional[Callable[[], Optional[RoleRecord]]] = None,
) -> RoleRecord:
    """Turn the ``--role`` value (or its absence) into a usable role.

    Args:
        config: Loaded config
        search_term: ARN, name, or alias; None to use the default role
        chooser: Called when no role was requested and none is flagged default

    Returns:
        The resolved role

    Raises:
        RoleResolutionError: If no role matches or the match has no ARN
    """
    if search_term:
        role = config.roles.resolve(search_term)
        if role is None or not role.arn:
            raise RoleResolutionError(f"Unable to find role by ARN, name, or alias: {search_term}")
        return role

    role = config.roles.default_role()
    if role is None and chooser is not None:
        role = chooser()
    if role is None:
        raise RoleResolutionError("Role not provided (--role) and no default role is configured")
    if not role.arn:
        raise RoleResolutionError(f"Role '{role.name}' has no ARN configured")
    return role


def obtain_credentials(
    settings: Settings,
    config: Config,
    role: RoleRecord,
    *,
    code: Optional[str] = None,
    base_profile: Optional[str] = None,
    force_refresh: bool = False,
    prompt_code: Optional[Callable[[], Optional[str]]] = None,
    client_factory: Callable[[Optional[str]], object] = sts_client,
) -> AssumeResult:
    """Return credentials for a role, refreshing them through STS if needed.

    Args:
        settings: Runtime settings
        config: Loaded config (provides the MFA serial and default profile)
        role: The resolved role
        code: MFA one-time code given on the command line
        base_profile: AWS profile for the STS call (defaults to config.default_profile)
        force_refresh: Ignore any cached credentials
        prompt_code: Asks the user for a code when a refresh is needed and none was given
        client_factory: Builds an STS client from a profile name

    Returns:
        The role, its credentials, and whether they were refreshed

    Raises:
        RoleResolutionError: If the ARN has no account number or role name
        MFACodeError: If a refresh is needed and no valid code is available
        ConfigError: If a refresh is needed and no MFA serial is configured
        botocore.exceptions.ClientError: If STS rejects the exchange
    """
    settings.log_debug(f"Role: {role}")
    path = cache_file_path(settings.cache_dir, role)
    settings.log_debug(f"Account number: {role.account_id}")
    settings.log_debug(f"Role name:      {role.role_name}")
    settings.log_debug(f"Cache file:     {path}")

    ensure_storage(settings)
    cache = CredentialCache(path, settings)

    cached = cache.current()
    if cached is not None:
        settings.log_debug(f"Current access key ID: {cached.access_key_id}")

    needs_refresh = force_refresh or cache.needs_refresh()
    if not needs_refresh:
        settings.log_verbose("[green]Using cached credentials![/green]")
        return AssumeResult(role=role, credentials=cached, refreshed=False)

    settings.log_debug("Refresh required")

    if not config.mfa_serial:
        raise ConfigError("No mfa_serial is configured; it is required to assume a role")

    code = _get_one_time_code(code, prompt_code)

    profile = base_profile or config.default_profile
    client = client_factory(profile)
    if settings.verbose or settings.debug:
        caller_arn = get_caller_identity(client)
        settings.log_verbose(f"Hello world, I'm {caller_arn} - time to assume another role!")

    exchange = assume_role_with_mfa(client, role.arn, config.mfa_serial, code)
    settings.log_verbose(f"[green]Successfully assumed role:[/green] {exchange.assumed_role_arn}")

    try:
        record = cache.commit(
            exchange.access_key_id,
            exchange.secret_access_key,
            exchange.session_token,
            exchange.expires_at,
        )
    except CacheWriteError as e:
        settings.warn(f"{e}. Continuing with uncached credentials.")
        record = cache.current()

    return AssumeResult(role=role, credentials=record, refreshed=True)


def _get_one_time_code(
    code: Optional[str],
    prompt_code: Optional[Callable[[], Optional[str]]],
) -> str:
    if code:
        code = code.strip()
        problem = validate_one_time_code(code)
        if problem is not None:
            raise MFACodeError(f"Invalid MFA code: {problem}")
        return code

    if prompt_code is not None:
        code = prompt_code()
        if code:
            return code

    raise MFACodeError("Please provide the MFA token code (OTP) via the '--code' option")


def verify_credentials(settings: Settings, credentials: CredentialRecord) -> str:
    """Call GetCallerIdentity with the credentials and report who they belong to."""
    caller_arn = get_caller_identity(sts_client_for(credentials))
    settings.log_debug(f"Credentials belong to {caller_arn}")
    return caller_arn


__all__ = ["AssumeResult", "obtain_credentials", "resolve_role", "verify_credentials"]
