"""STS calls used to exchange an MFA code for role credentials.

These helpers centralize boto3 usage. Callers build the client once with
:func:`sts_client` and pass it in, which keeps the exchange easy to stub.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import boto3

from pdum.aws.types import CredentialRecord

SESSION_NAME_PREFIX = "pdum-aws"


@dataclass(frozen=True)
class ExchangeResult:
    """Credentials returned by ``AssumeRole`` and the identity they belong to."""

    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)
    expires_at: datetime
    assumed_role_arn: str


def sts_client(profile_name: Optional[str] = None, region_name: Optional[str] = None):
    """STS client for the base (identity account) credentials."""
    session = boto3.Session(profile_name=profile_name or None, region_name=region_name)
    return session.client("sts")


def sts_client_for(record: CredentialRecord, region_name: Optional[str] = None):
    """STS client authenticated with cached temporary credentials."""
    session = boto3.Session(
        aws_access_key_id=record.access_key_id,
        aws_secret_access_key=record.secret_access_key,
        aws_session_token=record.session_token,
        region_name=region_name,
    )
    return session.client("sts")


def generate_session_name() -> str:
    """Generate a unique role session name (``pdum-aws-<unix nanoseconds>``)."""
    return f"{SESSION_NAME_PREFIX}-{time.time_ns()}"


def get_caller_identity(client) -> str:
    """Return the ARN of the identity the client is authenticated as."""
    response = client.get_caller_identity()
    return response["Arn"]


def assume_role_with_mfa(
    client,
    role_arn: str,
    mfa_serial: str,
    token_code: str,
    *,
    session_name: Optional[str] = None,
    duration_seconds: Optional[int] = None,
) -> ExchangeResult:
    """Assume a role using an MFA one-time code.

    Args:
        client: boto3 STS client
        role_arn: ARN of the role to assume
        mfa_serial: MFA device serial number or ARN
        token_code: Current MFA one-time code
        session_name: Role session name (generated if not provided)
        duration_seconds: Requested credential lifetime (role default if not provided)

    Returns:
        The temporary credentials and the assumed-role ARN

    Raises:
        botocore.exceptions.ClientError: If STS rejects the request
        botocore.exceptions.NoCredentialsError: If no base credentials are configured
    """
    params = {
        "RoleArn": role_arn,
        "RoleSessionName": session_name or generate_session_name(),
        "SerialNumber": mfa_serial,
        "TokenCode": token_code,
    }
    if duration_seconds:
        params["DurationSeconds"] = duration_seconds

    response = client.assume_role(**params)
    credentials = response["Credentials"]

    return ExchangeResult(
        access_key_id=credentials["AccessKeyId"],
        secret_access_key=credentials["SecretAccessKey"],
        session_token=credentials["SessionToken"],
        expires_at=credentials["Expiration"],
        assumed_role_arn=response.get("AssumedRoleUser", {}).get("Arn", ""),
    )


__all__ = [
    "ExchangeResult",
    "SESSION_NAME_PREFIX",
    "assume_role_with_mfa",
    "generate_session_name",
    "get_caller_identity",
    "sts_client",
    "sts_client_for",
]
