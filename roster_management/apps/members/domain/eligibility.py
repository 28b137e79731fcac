"""
Promotion eligibility rules.

``evaluate`` maps a member snapshot and a reference day to an
``EligibilityVerdict``. It never reads the wall clock and never mutates the
member: callers take "today" once from a ``Clock`` and pass it in.

Time in service (TIS) and time in grade (TIG) are counted in whole calendar
months with the day of month ignored, so a member can be counted a month
early or late near a month boundary.
"""
from datetime import date
from typing import Dict, Iterable, Tuple

from roster_management.apps.members.domain.quarters import (
    ONE_DAY,
    add_months,
    months_between,
    next_quarter,
    previous_quarter,
    quarter_of,
)
from roster_management.apps.members.domain.ranks import (
    BOARD_REQUIREMENTS,
    RANK_ABBREVIATIONS,
    is_officer,
    next_rank,
)
from roster_management.apps.members.domain.value_objects import (
    BtzStatus,
    Classification,
    EligibilityVerdict,
    MemberSnapshot,
    PromotionStatus,
)

E1_MIN_TIS_MONTHS = 6
E1_MIN_TIG_MONTHS = 6
E2_MIN_TIG_MONTHS = 10
E3_TIS_PATH_MONTHS = 36
E3_TIG_PATH_MONTHS = 28
BTZ_LEAD_MONTHS = 6


def e3_promotion_dates(tis_date: date, dor_date: date) -> Tuple[date, date]:
    """
    Standard and below-the-zone promotion dates for an E-3.

    The standard date is the earlier of TIS + 36 months and DOR + 28 months,
    plus one day since the full period has to be served. The BTZ date is six
    months before the unadjusted standard date, again plus one day.
    """
    tis_path = add_months(tis_date, E3_TIS_PATH_MONTHS)
    tig_path = add_months(dor_date, E3_TIG_PATH_MONTHS)
    earliest = min(tis_path, tig_path)
    standard_promo_date = earliest + ONE_DAY
    btz_promo_date = add_months(earliest, -BTZ_LEAD_MONTHS) + ONE_DAY
    return standard_promo_date, btz_promo_date


def _not_eligible(note: str) -> EligibilityVerdict:
    return EligibilityVerdict(status="Not Eligible", note=note, classification=Classification.NOT_ELIGIBLE)


def _evaluate_e3(member: MemberSnapshot, today: date) -> EligibilityVerdict:
    standard_promo_date, btz_promo_date = e3_promotion_dates(member.tis_date, member.dor_date)

    if member.btz_status == BtzStatus.NOT_SELECTED:
        if today >= standard_promo_date:
            return EligibilityVerdict(
                status="Eligible for E-4",
                note="Standard TIS/TIG met.",
                classification=Classification.ELIGIBLE,
                promotable=True,
            )
        return EligibilityVerdict(
            status="Not Selected for BTZ",
            note=f"Eligible for {RANK_ABBREVIATIONS['E-4']} on {standard_promo_date.isoformat()}",
            classification=Classification.BTZ_NOT_SELECTED,
        )

    # The board convenes one quarter before the BTZ promotion quarter
    board_quarter = previous_quarter(quarter_of(btz_promo_date))
    current_quarter = quarter_of(today)
    upcoming_quarter = next_quarter(current_quarter)
    two_quarters_out = next_quarter(upcoming_quarter)

    if board_quarter == two_quarters_out:
        return EligibilityVerdict(
            status="BTZ Board in 2 Quarters",
            note=f"Board for {board_quarter}",
            classification=Classification.BTZ_TWO_Q,
        )
    if board_quarter == upcoming_quarter:
        return EligibilityVerdict(
            status="BTZ Board Next Quarter!",
            note=f"Board for {board_quarter}",
            classification=Classification.BTZ_NEXT_Q,
        )
    if board_quarter == current_quarter:
        return EligibilityVerdict(
            status=f"In {board_quarter} BTZ Window",
            note="Board meets this quarter.",
            classification=Classification.BTZ_THIS_Q,
            board_promotion_date=btz_promo_date,
        )
    if board_quarter.ordinal < current_quarter.ordinal:
        return EligibilityVerdict(
            status="Board Concluded",
            note=f"Board was {board_quarter}",
            classification=Classification.BOARD_CONCLUDED,
            board_promotion_date=btz_promo_date,
        )
    return _not_eligible(f"BTZ board: {board_quarter}")


def _evaluate_board_rank(member: MemberSnapshot, months_tis: int, months_tig: int) -> EligibilityVerdict:
    target = next_rank(member.rank)
    target_title = RANK_ABBREVIATIONS[target]

    if member.promotion_status == PromotionStatus.SELECTED and member.promotion_date:
        return EligibilityVerdict(
            status=f"Selected for {target}",
            note=f"Promotes to {target_title} on {member.promotion_date.isoformat()}",
            classification=Classification.PROMO_SELECTED,
        )
    if member.promotion_status == PromotionStatus.NOT_SELECTED:
        return EligibilityVerdict(
            status="Not Selected",
            note="Eligible to compete next cycle.",
            classification=Classification.PROMO_NOT_SELECTED,
        )

    requirement = BOARD_REQUIREMENTS[member.rank]
    if months_tis >= requirement.tis_months and months_tig >= requirement.tig_months:
        return EligibilityVerdict(
            status=f"Board Eligible for {target}",
            note=f"TIS/TIG met for {target_title} board.",
            classification=Classification.PROMO_ELIGIBLE,
        )
    return _not_eligible(f"Req: {requirement.tis_months}m TIS & {requirement.tig_months}m TIG.")


def evaluate(member: MemberSnapshot, today: date) -> EligibilityVerdict:
    """Eligibility verdict for ``member`` as of ``today``."""
    if not member.tis_date or not member.dor_date:
        if is_officer(member.rank):
            return EligibilityVerdict(
                status="Officer Rank",
                note="Manual tracking.",
                classification=Classification.MANUAL_REVIEW,
            )
        return EligibilityVerdict(
            status="Info Needed",
            note="Enter TIS and DOR.",
            classification=Classification.INFO_NEEDED,
        )

    # Legacy state: the member already pinned on E-4 through a BTZ board
    if member.btz_status == BtzStatus.SELECTED:
        return EligibilityVerdict(
            status="BTZ Select!",
            note=f"New DOR: {member.dor_date.isoformat()}",
            classification=Classification.BTZ_SELECT,
        )

    months_tis = months_between(member.tis_date, today)
    months_tig = months_between(member.dor_date, today)

    if member.rank == 'E-1':
        if months_tis >= E1_MIN_TIS_MONTHS and months_tig >= E1_MIN_TIG_MONTHS:
            return EligibilityVerdict(
                status="Eligible for E-2",
                note="TIS/TIG met.",
                classification=Classification.ELIGIBLE,
                promotable=True,
            )
        return _not_eligible("Req: 6m TIS/TIG.")

    if member.rank == 'E-2':
        if months_tig >= E2_MIN_TIG_MONTHS:
            return EligibilityVerdict(
                status="Eligible for E-3",
                note="TIG met.",
                classification=Classification.ELIGIBLE,
                promotable=True,
            )
        return _not_eligible("Req: 10m TIG.")

    if member.rank == 'E-3':
        return _evaluate_e3(member, today)

    if member.rank in BOARD_REQUIREMENTS:
        return _evaluate_board_rank(member, months_tis, months_tig)

    if member.rank == 'E-9':
        return EligibilityVerdict(
            status="Chief!",
            note="Highest enlisted rank.",
            classification=Classification.MANUAL_REVIEW,
        )

    return EligibilityVerdict(status="Review Manually", note="", classification=Classification.MANUAL_REVIEW)


def evaluate_roster(members: Iterable[MemberSnapshot], today: date) -> Dict[str, EligibilityVerdict]:
    """Verdicts keyed by ``row_id``, every member judged against the same day."""
    return {member.row_id: evaluate(member, today) for member in members}
