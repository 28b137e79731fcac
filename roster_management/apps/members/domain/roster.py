"""
Roster organisation rules: ordering, supervision chart and flight assignments.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from roster_management.apps.members.domain.ranks import SUPERVISOR_RANKS, rank_weight
from roster_management.apps.members.domain.value_objects import MemberSnapshot

FLIGHT_CHIEF = 'Flight Chief'
FLIGHT_COMMANDER = 'Flight Commander'
LEAD_DUTY_TITLES = (FLIGHT_CHIEF, FLIGHT_COMMANDER)
LEADS_TEAM = 'flight-leads'


@dataclass
class ChartNode:
    member: MemberSnapshot
    children: List['ChartNode'] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            'row_id': self.member.row_id,
            'rank': self.member.rank,
            'last_name': self.member.last_name,
            'duty_title': self.member.duty_title,
            'team': self.member.team,
            'is_supervisor': self.member.rank in SUPERVISOR_RANKS,
            'children': [child.as_dict() for child in self.children],
        }


def _seniority_key(member: MemberSnapshot):
    return -rank_weight(member.rank)


def sort_roster(members: Iterable[MemberSnapshot]) -> List[MemberSnapshot]:
    """Most senior first, then by last name."""
    return sorted(members, key=lambda m: (_seniority_key(m), m.last_name))


def build_supervision_tree(members: Iterable[MemberSnapshot]) -> List[ChartNode]:
    """
    Supervision chart as a forest.

    Members whose supervisor is unknown (or unset) become roots. Members
    caught in a supervision cycle are unreachable from any root and are left
    out of the chart.
    """
    nodes: Dict[str, ChartNode] = {}
    for member in members:
        if member.row_id:
            nodes[member.row_id] = ChartNode(member=member)

    roots = []
    for node in nodes.values():
        supervisor_id = node.member.supervisor
        if supervisor_id and supervisor_id in nodes:
            nodes[supervisor_id].children.append(node)
        else:
            roots.append(node)

    for node in nodes.values():
        node.children.sort(key=lambda child: _seniority_key(child.member))
    roots.sort(key=lambda root: _seniority_key(root.member))
    return roots


def supervisees_of(members: Iterable[MemberSnapshot], row_id: str) -> List[MemberSnapshot]:
    return [m for m in members if m.supervisor == row_id]


def supervisor_options(members: Iterable[MemberSnapshot], exclude_row_id: Optional[str] = None) -> List[MemberSnapshot]:
    """Members senior enough to supervise, alphabetical."""
    candidates = [
        m for m in members
        if m.row_id and m.rank in SUPERVISOR_RANKS and m.row_id != exclude_row_id
    ]
    return sorted(candidates, key=lambda m: m.last_name)


def creates_supervision_cycle(members: Iterable[MemberSnapshot], row_id: str, supervisor_id: str) -> bool:
    """True if making ``supervisor_id`` the supervisor of ``row_id`` closes a loop."""
    supervisors = {m.row_id: m.supervisor for m in members}
    visited = set()
    current = supervisor_id
    while current and current not in visited:
        if current == row_id:
            return True
        visited.add(current)
        current = supervisors.get(current)
    return False


def normalize_assignment(duty_title: str, team: Optional[str], status: Optional[str],
                         supervisor: Optional[str], default_team: str):
    """
    Apply the flight-lead assignment rules to a member's form data.

    Flight Chiefs and Commanders always sit on the flight-leads team and
    carry no duty status; a Flight Commander has no supervisor. Everyone else
    lands on ``default_team`` when no team was chosen.

    Returns ``(team, status, supervisor)``.
    """
    if duty_title in LEAD_DUTY_TITLES:
        team = LEADS_TEAM
        status = ''
    elif not team:
        team = default_team
    if duty_title == FLIGHT_COMMANDER:
        supervisor = None
    return team, status, supervisor
