"""Assume AWS IAM roles with MFA and cache the temporary credentials"""

from pdum.aws.cache import CredentialCache, cache_file_path
from pdum.aws.config import Config, load_config
from pdum.aws.directory import RoleDirectory
from pdum.aws.settings import Settings, ensure_storage
from pdum.aws.types import (
    AWSCommandError,
    CacheWriteError,
    ConfigError,
    CredentialRecord,
    MFACodeError,
    ProfileTargetError,
    RoleRecord,
    RoleResolutionError,
)

__version__ = "0.1.0"


__all__ = [
    "__version__",
    "cache_file_path",
    "ensure_storage",
    "load_config",
    "AWSCommandError",
    "CacheWriteError",
    "Config",
    "ConfigError",
    "CredentialCache",
    "CredentialRecord",
    "MFACodeError",
    "ProfileTargetError",
    "RoleDirectory",
    "RoleRecord",
    "RoleResolutionError",
    "Settings",
]
