"""Actor abstraction passed into the booking services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class ActorRole(str, Enum):
    CLIENT = "client"
    VENDOR = "vendor"
    ADMIN = "admin"
    SYSTEM = "system"


@dataclass(frozen=True)
class Actor:
    """The authenticated party performing an operation."""

    id: str
    role: ActorRole
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    def as_history_actor(self) -> Dict[str, Any]:
        return {"user_id": self.id, "user_type": self.role.value, "name": self.name}


SYSTEM_ACTOR = Actor(id="system", role=ActorRole.SYSTEM, name="Evenlyo scheduler")
