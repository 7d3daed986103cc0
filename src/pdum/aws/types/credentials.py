"""Temporary credential record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

_FIELDS = ("expires_at", "access_key_id", "secret_access_key", "session_token")


@dataclass(frozen=True)
class CredentialRecord:
    """Temporary credentials plus their absolute expiry.

    Attributes
    ----------
    expires_at : datetime
        Timezone-aware instant after which the credentials are invalid.
    access_key_id : str
        ``AWS_ACCESS_KEY_ID`` value.
    secret_access_key : str
        ``AWS_SECRET_ACCESS_KEY`` value.
    session_token : str
        ``AWS_SESSION_TOKEN`` value.
    """

    expires_at: datetime
    access_key_id: str
    secret_access_key: str = field(repr=False)
    session_token: str = field(repr=False)

    def to_dict(self) -> dict[str, str]:
        return {
            "expires_at": self.expires_at.isoformat(),
            "access_key_id": self.access_key_id,
            "secret_access_key": self.secret_access_key,
            "session_token": self.session_token,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "CredentialRecord":
        """Build a record from its serialized form.

        Raises
        ------
        ValueError
            If any field is missing, empty, or of the wrong type. Partial records
            are never returned.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping, got {type(data).__name__}")
        for key in _FIELDS:
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError(f"Missing or invalid field: {key}")

        expires_at = datetime.fromisoformat(data["expires_at"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return cls(
            expires_at=expires_at,
            access_key_id=data["access_key_id"],
            secret_access_key=data["secret_access_key"],
            session_token=data["session_token"],
        )

    def as_environment(self) -> dict[str, str]:
        """Environment variables understood by the AWS CLI and SDKs."""
        return {
            "AWS_ACCESS_KEY_ID": self.access_key_id,
            "AWS_SECRET_ACCESS_KEY": self.secret_access_key,
            "AWS_SESSION_TOKEN": self.session_token,
        }


__all__ = ["CredentialRecord"]
