"""Actor abstraction for callers of the scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass

from .core.enums import ActorTier, RoleName, tier_for_role


@dataclass(frozen=True)
class Actor:
    """
    The authenticated account performing an operation.

    Authentication happens upstream; the engine trusts the id and role it is
    handed and only derives the authorization tier from the role.
    """

    id: str
    role: RoleName

    @property
    def tier(self) -> ActorTier:
        return tier_for_role(self.role)

    @property
    def is_manager(self) -> bool:
        return self.tier == ActorTier.MANAGER

    @classmethod
    def from_role_name(cls, actor_id: str, role: str) -> "Actor":
        return cls(id=actor_id, role=RoleName(role.upper()))
