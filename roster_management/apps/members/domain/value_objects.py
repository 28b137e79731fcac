from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple


class BtzStatus(str, Enum):
    NONE = 'none'
    SELECTED = 'selected'
    NOT_SELECTED = 'not-selected'


class PromotionStatus(str, Enum):
    NONE = 'none'
    SELECTED = 'selected'
    NOT_SELECTED = 'not-selected'


class Classification(str, Enum):
    """Eligibility state of a member; drives card styling and the offered actions."""
    INFO_NEEDED = 'info-needed'
    MANUAL_REVIEW = 'manual-review'
    BTZ_SELECT = 'btz-select'
    ELIGIBLE = 'eligible'
    NOT_ELIGIBLE = 'not-eligible'
    BTZ_NOT_SELECTED = 'btz-not-selected'
    BTZ_TWO_Q = 'btz-two-q'
    BTZ_NEXT_Q = 'btz-next-q'
    BTZ_THIS_Q = 'btz-this-q'
    BOARD_CONCLUDED = 'board-concluded'
    PROMO_SELECTED = 'promo-selected'
    PROMO_NOT_SELECTED = 'promo-not-selected'
    PROMO_ELIGIBLE = 'promo-eligible'

    @property
    def awaits_btz_decision(self) -> bool:
        return self in (Classification.BTZ_THIS_Q, Classification.BOARD_CONCLUDED)

    @property
    def awaits_board_decision(self) -> bool:
        return self is Classification.PROMO_ELIGIBLE

    @property
    def actionable(self) -> bool:
        return self.awaits_btz_decision or self.awaits_board_decision


class PromotionFailure(str, Enum):
    INVALID_RANK = 'invalid-rank'
    LADDER_EXHAUSTED = 'ladder-exhausted'
    MISSING_DATA = 'missing-data'


FAILURE_MESSAGES = {
    PromotionFailure.INVALID_RANK: "Invalid current rank for this promotion action.",
    PromotionFailure.LADDER_EXHAUSTED: "Max rank reached.",
    PromotionFailure.MISSING_DATA: "A date is required to record a selection.",
}


@dataclass(frozen=True)
class MemberSnapshot:
    """Immutable view of a roster member as seen by the promotion rules."""
    row_id: str
    rank: str
    tis_date: Optional[date] = None
    dor_date: Optional[date] = None
    btz_status: BtzStatus = BtzStatus.NONE
    promotion_status: PromotionStatus = PromotionStatus.NONE
    promotion_date: Optional[date] = None
    original_dor: Optional[date] = None
    supervisor: Optional[str] = None
    sup_start_date: Optional[date] = None
    team: str = ''
    duty_title: str = ''
    first_name: str = ''
    last_name: str = ''

    def __str__(self):
        return f"{self.rank} {self.last_name}".strip()


@dataclass(frozen=True)
class EligibilityVerdict:
    status: str
    note: str
    classification: Classification
    promotable: bool = False
    board_promotion_date: Optional[date] = None

    def as_dict(self) -> dict:
        return {
            'status': self.status,
            'note': self.note,
            'classification': self.classification.value,
            'promotable': self.promotable,
            'actionable': self.classification.actionable,
            'board_promotion_date': (
                self.board_promotion_date.isoformat() if self.board_promotion_date else None
            ),
        }


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of a sequencer operation; ``member`` is the input itself on failure."""
    member: MemberSnapshot
    changed: bool = False
    failure: Optional[PromotionFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str:
        return FAILURE_MESSAGES[self.failure] if self.failure else ''


@dataclass(frozen=True)
class SweepResult:
    today: date
    updated: Tuple[MemberSnapshot, ...] = ()
    failed: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.updated)
