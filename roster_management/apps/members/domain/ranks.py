"""
Rank ladder, display abbreviations and selection-board service minimums.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

PROMOTION_SEQUENCE: List[str] = ['E-1', 'E-2', 'E-3', 'E-4', 'E-5', 'E-6', 'E-7', 'E-8', 'E-9']

OFFICER_RANKS: List[str] = ['O-1', 'O-2', 'O-3', 'O-4']

ALL_RANKS: List[str] = PROMOTION_SEQUENCE + OFFICER_RANKS

RANK_ABBREVIATIONS: Dict[str, str] = {
    'E-1': 'AB', 'E-2': 'Amn', 'E-3': 'A1C', 'E-4': 'SrA', 'E-5': 'SSgt',
    'E-6': 'TSgt', 'E-7': 'MSgt', 'E-8': 'SMSgt', 'E-9': 'CMSgt',
    'O-1': '2d Lt', 'O-2': '1st Lt', 'O-3': 'Capt', 'O-4': 'Maj',
}

# Seniority used for roster and chart ordering
RANK_ORDER: Dict[str, int] = {rank: index + 1 for index, rank in enumerate(ALL_RANKS)}

SUPERVISOR_RANKS: List[str] = ['E-5', 'E-6', 'E-7', 'E-8', 'E-9', 'O-1', 'O-2', 'O-3', 'O-4']

BTZ_RANK = 'E-3'
BTZ_PROMOTION_RANK = 'E-4'


@dataclass(frozen=True)
class BoardRequirement:
    """Minimum time in service / time in grade (months) to meet a selection board."""
    tis_months: int
    tig_months: int


BOARD_REQUIREMENTS: Dict[str, BoardRequirement] = {
    'E-4': BoardRequirement(tis_months=36, tig_months=6),
    'E-5': BoardRequirement(tis_months=60, tig_months=23),
    'E-6': BoardRequirement(tis_months=96, tig_months=24),
    'E-7': BoardRequirement(tis_months=132, tig_months=20),
    'E-8': BoardRequirement(tis_months=168, tig_months=21),
}

BOARD_RANKS: List[str] = list(BOARD_REQUIREMENTS)


def next_rank(rank: str) -> Optional[str]:
    """Rank that follows ``rank`` on the enlisted ladder, or None at E-9 / off-ladder."""
    if rank not in PROMOTION_SEQUENCE:
        return None
    index = PROMOTION_SEQUENCE.index(rank)
    if index == len(PROMOTION_SEQUENCE) - 1:
        return None
    return PROMOTION_SEQUENCE[index + 1]


def is_officer(rank: Optional[str]) -> bool:
    return bool(rank) and rank.startswith('O-')


def rank_display(rank: Optional[str]) -> str:
    return RANK_ABBREVIATIONS.get(rank, rank or '')


def rank_weight(rank: Optional[str]) -> int:
    return RANK_ORDER.get(rank, 0)
