"""Public exports for pdum.aws types."""

from __future__ import annotations

from .credentials import CredentialRecord
from .exceptions import (
    AWSCommandError,
    CacheWriteError,
    ConfigError,
    MFACodeError,
    ProfileTargetError,
    RoleResolutionError,
)
from .role import RoleRecord

__all__ = [
    "AWSCommandError",
    "CacheWriteError",
    "ConfigError",
    "CredentialRecord",
    "MFACodeError",
    "ProfileTargetError",
    "RoleRecord",
    "RoleResolutionError",
]
