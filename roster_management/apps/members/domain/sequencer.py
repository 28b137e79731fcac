"""
Rank transitions along the enlisted ladder.

Every operation takes a ``MemberSnapshot`` and returns a ``PromotionResult``
holding a new snapshot; the input is never modified. A failed operation
returns the input unchanged together with the failure reason.
"""
import dataclasses
from datetime import date
from typing import Iterable, Optional

from roster_management.apps.members.domain.eligibility import (
    E1_MIN_TIG_MONTHS,
    E1_MIN_TIS_MONTHS,
    E2_MIN_TIG_MONTHS,
    e3_promotion_dates,
)
from roster_management.apps.members.domain.quarters import ONE_DAY, add_months, months_between
from roster_management.apps.members.domain.ranks import (
    BOARD_RANKS,
    BTZ_PROMOTION_RANK,
    BTZ_RANK,
    PROMOTION_SEQUENCE,
    next_rank,
)
from roster_management.apps.members.domain.value_objects import (
    BtzStatus,
    MemberSnapshot,
    PromotionFailure,
    PromotionResult,
    PromotionStatus,
    SweepResult,
)


def _unchanged(member: MemberSnapshot) -> PromotionResult:
    return PromotionResult(member=member)


def _failed(member: MemberSnapshot, failure: PromotionFailure) -> PromotionResult:
    return PromotionResult(member=member, failure=failure)


def _advance(member: MemberSnapshot, new_dor: date) -> PromotionResult:
    """
    Step one rank up the ladder.

    Any board outcome belongs to the old grade and is cleared. A BTZ selection
    is archived once the member leaves the grade it was pinned on at.
    """
    if member.rank not in PROMOTION_SEQUENCE:
        return _failed(member, PromotionFailure.INVALID_RANK)
    target = next_rank(member.rank)
    if target is None:
        return _failed(member, PromotionFailure.LADDER_EXHAUSTED)
    btz_status = member.btz_status
    if btz_status == BtzStatus.SELECTED and member.rank == BTZ_PROMOTION_RANK:
        btz_status = BtzStatus.NONE
    return PromotionResult(
        member=dataclasses.replace(
            member,
            rank=target,
            dor_date=new_dor,
            promotion_status=PromotionStatus.NONE,
            promotion_date=None,
            btz_status=btz_status,
        ),
        changed=True,
    )


def apply_board_promotion(member: MemberSnapshot, new_date: date) -> PromotionResult:
    """Manual promotion: next rank on the ladder with ``new_date`` as date of rank."""
    return _advance(member, new_date)


def automatic_promotion_date(member: MemberSnapshot, today: date) -> Optional[date]:
    """
    Date of rank an automatic promotion would carry, or None when none is due.

    Only E-1, E-2 and an E-3 passed over by the BTZ board advance on time
    alone; higher grades need a board selection.
    """
    if not member.tis_date or not member.dor_date:
        return None
    if member.btz_status == BtzStatus.SELECTED:
        return None

    if member.rank == 'E-1':
        if (months_between(member.tis_date, today) >= E1_MIN_TIS_MONTHS
                and months_between(member.dor_date, today) >= E1_MIN_TIG_MONTHS):
            tis_path = add_months(member.tis_date, E1_MIN_TIS_MONTHS) + ONE_DAY
            tig_path = add_months(member.dor_date, E1_MIN_TIG_MONTHS) + ONE_DAY
            return max(tis_path, tig_path)
        return None

    if member.rank == 'E-2':
        if months_between(member.dor_date, today) >= E2_MIN_TIG_MONTHS:
            return add_months(member.dor_date, E2_MIN_TIG_MONTHS) + ONE_DAY
        return None

    # TODO: members with no BTZ decision recorded are never auto-promoted past
    # their standard date; confirm with the personnel office whether to include them.
    if member.rank == BTZ_RANK and member.btz_status == BtzStatus.NOT_SELECTED:
        standard_promo_date, _ = e3_promotion_dates(member.tis_date, member.dor_date)
        if today >= standard_promo_date:
            return standard_promo_date

    return None


def apply_automatic_promotion(member: MemberSnapshot, today: date) -> PromotionResult:
    promotion_date = automatic_promotion_date(member, today)
    if promotion_date is None:
        return _unchanged(member)
    return _advance(member, promotion_date)


def apply_btz_selection(
    member: MemberSnapshot,
    selected: bool,
    new_dor_date: Optional[date] = None,
) -> PromotionResult:
    """Record the BTZ board outcome for an E-3."""
    if member.rank != BTZ_RANK:
        return _failed(member, PromotionFailure.INVALID_RANK)
    if not selected:
        return PromotionResult(
            member=dataclasses.replace(member, btz_status=BtzStatus.NOT_SELECTED),
            changed=True,
        )
    if new_dor_date is None:
        return _failed(member, PromotionFailure.MISSING_DATA)
    return PromotionResult(
        member=dataclasses.replace(
            member,
            btz_status=BtzStatus.SELECTED,
            original_dor=member.dor_date,
            dor_date=new_dor_date,
            rank=BTZ_PROMOTION_RANK,
        ),
        changed=True,
    )


def apply_board_selection(
    member: MemberSnapshot,
    selected: bool,
    promotion_date: Optional[date] = None,
) -> PromotionResult:
    """
    Record a selection-board outcome for E-4 through E-8.

    A selection only schedules the promotion; the sweep applies it once
    ``promotion_date`` arrives.
    """
    if member.rank not in BOARD_RANKS:
        return _failed(member, PromotionFailure.INVALID_RANK)
    if not selected:
        return PromotionResult(
            member=dataclasses.replace(
                member, promotion_status=PromotionStatus.NOT_SELECTED, promotion_date=None
            ),
            changed=True,
        )
    if promotion_date is None:
        return _failed(member, PromotionFailure.MISSING_DATA)
    return PromotionResult(
        member=dataclasses.replace(
            member, promotion_status=PromotionStatus.SELECTED, promotion_date=promotion_date
        ),
        changed=True,
    )


def apply_scheduled_promotion(member: MemberSnapshot, today: date) -> PromotionResult:
    """Pin on the rank of a board selection whose promotion date has arrived."""
    if member.promotion_status != PromotionStatus.SELECTED or member.promotion_date is None:
        return _unchanged(member)
    if today < member.promotion_date:
        return _unchanged(member)
    return _advance(member, member.promotion_date)


def process_auto_promotions(members: Iterable[MemberSnapshot], today: date) -> SweepResult:
    """
    One promotion pass over the whole roster.

    Each member is considered once: a due board promotion first, otherwise
    the time-based automatic promotion. At most one step is taken per member
    per pass.
    """
    seen = set()
    updated = []
    for member in members:
        if member.row_id in seen:
            continue
        seen.add(member.row_id)

        result = apply_scheduled_promotion(member, today)
        if not result.changed:
            result = apply_automatic_promotion(member, today)
        if result.changed:
            updated.append(result.member)
    return SweepResult(today=today, updated=tuple(updated))
