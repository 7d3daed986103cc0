"""Custom exceptions for pdum.aws."""

from __future__ import annotations


class RoleResolutionError(Exception):
    """Raised when a role cannot be resolved to a usable configured role."""

    __slots__ = ()


class CacheWriteError(Exception):
    """Raised when new credentials cannot be persisted to the cache file."""

    __slots__ = ()


class ConfigError(Exception):
    """Raised when the config file cannot be read or has an invalid shape."""

    __slots__ = ()


class AWSCommandError(Exception):
    """Exception raised for aws CLI command errors."""

    __slots__ = ()


class MFACodeError(Exception):
    """Raised when no valid MFA one-time code is available for a refresh."""

    __slots__ = ()


class ProfileTargetError(Exception):
    """Raised when credentials should be written to a profile but none is named."""

    __slots__ = ()


__all__ = [
    "AWSCommandError",
    "CacheWriteError",
    "ConfigError",
    "MFACodeError",
    "ProfileTargetError",
    "RoleResolutionError",
]
