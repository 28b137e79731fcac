import logging
from typing import List

from django.db import DatabaseError
from django.utils import timezone

from roster_management.apps.members.domain.repositories import RosterRepository
from roster_management.apps.members.domain.value_objects import BtzStatus, MemberSnapshot, PromotionStatus
from roster_management.apps.members.models import Member

logger = logging.getLogger(__name__)


def member_to_snapshot(member: Member) -> MemberSnapshot:
    return MemberSnapshot(
        row_id=member.row_id,
        rank=member.rank,
        tis_date=member.tis_date,
        dor_date=member.dor_date,
        btz_status=BtzStatus(member.btz_status or BtzStatus.NONE.value),
        promotion_status=PromotionStatus(member.promotion_status or PromotionStatus.NONE.value),
        promotion_date=member.promotion_date,
        original_dor=member.original_dor,
        supervisor=member.supervisor_id,
        sup_start_date=member.sup_start_date,
        team=member.team,
        duty_title=member.duty_title,
        first_name=member.first_name,
        last_name=member.last_name,
    )


def snapshot_fields(member: MemberSnapshot) -> dict:
    """Columns a snapshot owns; everything else on the row is left untouched."""
    return {
        'rank': member.rank,
        'tis_date': member.tis_date,
        'dor_date': member.dor_date,
        'btz_status': member.btz_status.value,
        'promotion_status': member.promotion_status.value,
        'promotion_date': member.promotion_date,
        'original_dor': member.original_dor,
        'supervisor_id': member.supervisor or None,
        'sup_start_date': member.sup_start_date,
        'team': member.team,
    }


class MemberRepositoryImpl(RosterRepository):
    """
    Roster repository backed by the Django ORM.
    Writes are last-write-wins: concurrent writers to one member are not serialised.
    """
    def fetch_all(self) -> List[MemberSnapshot]:
        return [member_to_snapshot(m) for m in Member.objects.all()]

    def get_by_id(self, row_id: str) -> MemberSnapshot:
        return member_to_snapshot(Member.objects.get(row_id=row_id))

    def persist(self, member: MemberSnapshot) -> bool:
        try:
            updated = Member.objects.filter(row_id=member.row_id).update(
                updated_at=timezone.now(),
                **snapshot_fields(member),
            )
        except DatabaseError:
            logger.exception("Failed to persist member %s", member.row_id)
            return False
        if not updated:
            logger.warning("Member %s no longer exists, nothing persisted", member.row_id)
        return bool(updated)

    def delete(self, row_id: str):
        Member.objects.filter(row_id=row_id).delete()
