"""On-disk cache of temporary credentials.

One JSON file per account/role pair, named ``<account>-<role-name>.json`` and
stored under the configured cache directory with mode 0600. Files are written
with write-to-temp-then-rename so readers never observe a partial record.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from pdum.aws.settings import Settings
from pdum.aws.types import CacheWriteError, CredentialRecord, RoleRecord, RoleResolutionError

CACHE_FILE_SUFFIX = ".json"
CACHE_FILE_MODE = 0o600


def cache_file_path(cache_dir: Path, role: RoleRecord) -> Path:
    """Get the cache file path for a role.

    Args:
        cache_dir: Directory holding cache files
        role: The resolved role

    Returns:
        Path to ``<cache_dir>/<account>-<role-name>.json``

    Raises:
        RoleResolutionError: If the account number or role name cannot be
            determined from the role's ARN
    """
    key = role.cache_key()
    if key is None:
        raise RoleResolutionError(
            f"Unable to determine the account number and role name from ARN: {role.arn!r}"
        )
    return cache_dir / f"{key}{CACHE_FILE_SUFFIX}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class CredentialCache:
    """Credential cache bound to a single cache file.

    Attributes
    ----------
    path : Path
        The backing cache file.
    settings : Settings
        Provides the default refresh window and the diagnostics console.
    """

    def __init__(self, path: Path, settings: Settings):
        self.path = path
        self.settings = settings
        self._record: Optional[CredentialRecord] = None
        self._loaded = False

    def load(self) -> Optional[CredentialRecord]:
        """Read the cache file into memory.

        A missing file is not an error. An unreadable or malformed file is
        reported as a warning and treated as absent.

        Returns:
            The cached record, or None if there is no usable cache
        """
        self._loaded = True
        self._record = None

        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            self.settings.log_debug(f"No cache file at {self.path}")
            return None
        except OSError as e:
            self.settings.warn(f"Unable to read cache file {self.path}: {e}. Ignoring it.")
            return None

        try:
            self._record = CredentialRecord.from_dict(json.loads(raw.decode("utf-8")))
        except (ValueError, RecursionError) as e:
            self.settings.warn(f"Cache file {self.path} is corrupt ({e}). Ignoring it.")
            return None

        self.settings.log_debug(f"Loaded cached credentials from {self.path}")
        return self._record

    def current(self) -> Optional[CredentialRecord]:
        """Return the in-memory record, loading it from disk on first use."""
        if not self._loaded:
            self.load()
        return self._record

    def needs_refresh(
        self,
        refresh_window: Optional[timedelta] = None,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        """Whether new credentials should be obtained.

        True when nothing is cached or when ``now >= expires_at - refresh_window``.

        Args:
            refresh_window: Safety margin before expiry (defaults to the settings value)
            now: Current time, for tests

        Returns:
            True if the cached credentials must not be used
        """
        record = self.current()
        if record is None:
            return True

        window = self.settings.refresh_window if refresh_window is None else refresh_window
        now = _as_aware(now) if now is not None else _utcnow()
        try:
            latest_valid_time = record.expires_at - window
        except OverflowError:
            # expiry is too close to datetime.min to subtract the window from
            return True
        return now >= latest_valid_time

    def commit(
        self,
        access_key_id: str,
        secret_access_key: str,
        session_token: str,
        expires_at: datetime,
    ) -> CredentialRecord:
        """Replace the cached record with freshly issued credentials.

        The in-memory record is updated before the file is written, so callers
        can keep using the new credentials even if persisting them fails.

        Args:
            access_key_id: Temporary access key ID
            secret_access_key: Temporary secret access key
            session_token: Session token
            expires_at: Absolute expiry of the credentials

        Returns:
            The committed record

        Raises:
            CacheWriteError: If the cache file cannot be written
        """
        record = CredentialRecord(
            expires_at=_as_aware(expires_at),
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
        )

        now = _utcnow()
        try:
            latest_valid_time = record.expires_at - self.settings.refresh_window
        except OverflowError:
            latest_valid_time = datetime.min.replace(tzinfo=timezone.utc)
        if now >= latest_valid_time:
            self.settings.warn(
                "New credentials expire within the refresh window.\n"
                f"  Time now:              {now.isoformat()}\n"
                f"  Latest valid time:     {latest_valid_time.isoformat()}\n"
                f"  Credential expiration: {record.expires_at.isoformat()}"
            )

        self._record = record
        self._loaded = True

        try:
            self._write(record)
        except OSError as e:
            raise CacheWriteError(f"Unable to write cache file {self.path}: {e}") from e

        self.settings.log_debug(f"Wrote credentials for {record.access_key_id} to {self.path}")
        return record

    def _write(self, record: CredentialRecord) -> None:
        # mkstemp creates the file with mode 0600; the rename replaces any
        # existing file (and its permissions) in a single step.
        fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.chmod(temp_path, CACHE_FILE_MODE)
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise
        os.chmod(self.path, CACHE_FILE_MODE)


__all__ = ["CACHE_FILE_MODE", "CACHE_FILE_SUFFIX", "CredentialCache", "cache_file_path"]
