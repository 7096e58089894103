from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Protocol


class Privilege(str, Enum):
    MANAGE = "Manage Appointments"
    READ = "View Appointments"

    @classmethod
    def from_name(cls, name: str) -> Optional["Privilege"]:
        for privilege in cls:
            if name in (privilege.value, privilege.name):
                return privilege
        return None


class Principal(Protocol):
    user_id: Optional[str]

    def has_privilege(self, privilege: Privilege) -> bool:
        ...


@dataclass(frozen=True)
class UserPrincipal:
    user_id: Optional[str]
    privileges: FrozenSet[Privilege] = frozenset()

    @classmethod
    def with_privileges(cls, user_id: Optional[str], privileges: Iterable[Privilege]) -> "UserPrincipal":
        return cls(user_id=user_id, privileges=frozenset(privileges))

    def has_privilege(self, privilege: Privilege) -> bool:
        return privilege in self.privileges
