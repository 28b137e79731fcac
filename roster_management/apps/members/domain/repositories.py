from abc import ABC, abstractmethod
from typing import List
from roster_management.apps.members.domain.value_objects import MemberSnapshot


class RosterRepository(ABC):
    """
    Abstract record store behind the roster.
    The promotion rules never call it; application services fetch, hand the
    snapshots to the rules and persist what comes back.
    """
    @abstractmethod
    def fetch_all(self) -> List[MemberSnapshot]:
        pass

    @abstractmethod
    def get_by_id(self, row_id: str) -> MemberSnapshot:
        pass

    @abstractmethod
    def persist(self, member: MemberSnapshot) -> bool:
        pass

    @abstractmethod
    def delete(self, row_id: str):
        pass
