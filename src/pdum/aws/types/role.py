"""IAM role dataclass."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

_ACCOUNT_RE = re.compile(r"^arn:aws[\w-]*:iam::([0-9]{12}):")
_ROLE_NAME_RE = re.compile(r":role/(.+)$")


@dataclass(frozen=True)
class RoleRecord:
    """A configured role that can be assumed.

    Attributes
    ----------
    name : str
        Human-readable identifier (e.g., ``"prod"``).
    arn : str
        Role ARN, ``arn:aws:iam::<account>:role/<role-name>``.
    aliases : tuple of str
        Additional lookup keys, in declaration order.
    is_default : bool
        Whether the role is used when none is requested.
    target_profile : str, optional
        AWS CLI profile that receives the credentials with ``write-profile``.
    """

    name: str
    arn: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    is_default: bool = False
    target_profile: Optional[str] = None

    @property
    def account_id(self) -> Optional[str]:
        """12-digit account number embedded in the ARN, or ``None``."""
        match = _ACCOUNT_RE.match(self.arn)
        return match.group(1) if match else None

    @property
    def role_name(self) -> Optional[str]:
        """Role name (including any path) embedded in the ARN, or ``None``."""
        match = _ROLE_NAME_RE.search(self.arn)
        return match.group(1) if match else None

    def cache_key(self) -> Optional[str]:
        """Return ``"<account>-<role-name>"`` or ``None`` if the ARN is not a role ARN.

        Role paths are flattened (``/`` becomes ``-``) so the key is a single
        file name.
        """
        account_id = self.account_id
        role_name = self.role_name
        if not account_id or not role_name:
            return None
        return f"{account_id}-{role_name.replace('/', '-')}"


__all__ = ["RoleRecord"]
