"""Role lookup over the configured roles."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from pdum.aws.types import RoleRecord


class RoleDirectory:
    """Ordered, read-only collection of configured roles.

    Resolution never raises on a miss; it returns ``None`` and leaves the decision
    to the caller.
    """

    def __init__(self, roles: Iterable[RoleRecord] = ()):
        self._roles: tuple[RoleRecord, ...] = tuple(roles)

    def __iter__(self) -> Iterator[RoleRecord]:
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    @property
    def roles(self) -> tuple[RoleRecord, ...]:
        return self._roles

    def resolve(self, search_term: str) -> Optional[RoleRecord]:
        """Resolve a search term to a configured role.

        Search precedence is ARN, then name, then aliases. Each pass walks the
        roles in declaration order and the first hit of a pass wins, so an alias
        can never beat an ARN or name match on a role declared later. Alias
        comparison is case-sensitive.

        Args:
            search_term: ARN, name, or alias of the role

        Returns:
            The matching role, or None if no pass matched
        """
        for role in self._roles:
            if role.arn == search_term:
                return role

        for role in self._roles:
            if role.name == search_term:
                return role

        for role in self._roles:
            if search_term in role.aliases:
                return role

        return None

    def default_role(self) -> Optional[RoleRecord]:
        """Return the first role flagged as default, or None."""
        return next((role for role in self._roles if role.is_default), None)

    def default_count(self) -> int:
        """Number of roles flagged as default."""
        return sum(1 for role in self._roles if role.is_default)


__all__ = ["RoleDirectory"]
