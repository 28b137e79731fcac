"""
Application services for the roster: promotion processing and roster organisation
"""
import dataclasses
import logging
from datetime import date
from typing import List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from roster_management.apps.members.domain import eligibility, roster, sequencer
from roster_management.apps.members.domain.clock import Clock
from roster_management.apps.members.domain.ranks import SUPERVISOR_RANKS, rank_display
from roster_management.apps.members.domain.repositories import RosterRepository
from roster_management.apps.members.domain.value_objects import (
    MemberSnapshot,
    PromotionResult,
    SweepResult,
)
from roster_management.apps.members.infrastructure.clock import SystemClock
from roster_management.apps.members.infrastructure.repositories import MemberRepositoryImpl
from roster_management.apps.members.models import Member

logger = logging.getLogger(__name__)


class PromotionApplicationService:
    """Service for promotion actions and the daily promotion sweep"""

    def __init__(self, roster_repository: RosterRepository = MemberRepositoryImpl(), clock: Clock = SystemClock()):
        self.roster_repository = roster_repository
        self.clock = clock

    def _save(self, before: MemberSnapshot, result: PromotionResult) -> MemberSnapshot:
        if not result.ok:
            raise ValidationError(f"{before}: {result.message}")
        if result.changed and not self.roster_repository.persist(result.member):
            raise ValidationError(f"Could not save changes for {before}.")
        return result.member

    @transaction.atomic
    def promote(self, row_id: str, new_dor: date) -> MemberSnapshot:
        """
        Manual promotion to the next enlisted rank

        Args:
            row_id: Member identifier
            new_dor: Date of rank for the new grade

        Returns:
            MemberSnapshot: The promoted member
        """
        member = self.roster_repository.get_by_id(row_id)
        promoted = self._save(member, sequencer.apply_board_promotion(member, new_dor))
        logger.info("Promoted %s from %s to %s, DOR %s", row_id, member.rank, promoted.rank, new_dor)
        return promoted

    @transaction.atomic
    def record_btz_selection(self, row_id: str, selected: bool, new_dor: Optional[date] = None) -> MemberSnapshot:
        """
        Record the below-the-zone board outcome for an E-3

        When a selection arrives without a date, the BTZ promotion date the
        eligibility rules computed for the member is used.
        """
        member = self.roster_repository.get_by_id(row_id)
        if selected and new_dor is None:
            new_dor = eligibility.evaluate(member, self.clock.today()).board_promotion_date
        updated = self._save(member, sequencer.apply_btz_selection(member, selected, new_dor))
        logger.info("BTZ %s recorded for %s", updated.btz_status.value, row_id)
        return updated

    @transaction.atomic
    def record_board_selection(self, row_id: str, selected: bool,
                               promotion_date: Optional[date] = None) -> MemberSnapshot:
        """Record a selection-board outcome; a selection is applied by the daily sweep."""
        member = self.roster_repository.get_by_id(row_id)
        updated = self._save(member, sequencer.apply_board_selection(member, selected, promotion_date))
        logger.info(
            "Board %s recorded for %s (promotion date %s)",
            updated.promotion_status.value, row_id, updated.promotion_date,
        )
        return updated

    def process_auto_promotions(self, dry_run: bool = False) -> SweepResult:
        """
        Daily promotion sweep over the whole roster

        "Today" is read once so every member is judged against the same day.
        A member that fails to save is reported in ``failed`` and the sweep
        carries on with the rest.

        Returns:
            SweepResult: members actually changed (persisted unless ``dry_run``)
        """
        today = self.clock.today()
        members = self.roster_repository.fetch_all()
        before = {m.row_id: m for m in members}
        result = sequencer.process_auto_promotions(members, today)

        if dry_run:
            return result

        persisted = []
        failed = []
        for member in result.updated:
            if self.roster_repository.persist(member):
                previous = before[member.row_id]
                logger.info(
                    "Auto-promoted %s from %s to %s, DOR %s",
                    member.row_id, previous.rank, member.rank, member.dor_date,
                )
                persisted.append(member)
            else:
                logger.error("Auto-promotion of %s to %s was not saved", member.row_id, member.rank)
                failed.append(member.row_id)

        return SweepResult(today=today, updated=tuple(persisted), failed=tuple(failed))


class RosterApplicationService:
    """Service for team assignments and the supervision chain"""

    def __init__(self, roster_repository: RosterRepository = MemberRepositoryImpl(), clock: Clock = SystemClock()):
        self.roster_repository = roster_repository
        self.clock = clock

    def list_members(self) -> List[MemberSnapshot]:
        return roster.sort_roster(self.roster_repository.fetch_all())

    def supervision_chart(self) -> List[roster.ChartNode]:
        return roster.build_supervision_tree(self.roster_repository.fetch_all())

    def supervisor_options(self, exclude_row_id: Optional[str] = None) -> List[MemberSnapshot]:
        return roster.supervisor_options(self.roster_repository.fetch_all(), exclude_row_id)

    def move_member(self, row_id: str, team: str) -> MemberSnapshot:
        if team not in Member.Team.values:
            raise ValidationError(f"Unknown team '{team}'.")
        member = self.roster_repository.get_by_id(row_id)
        if member.team == team:
            return member
        moved = dataclasses.replace(member, team=team)
        if not self.roster_repository.persist(moved):
            raise ValidationError(f"An error occurred while moving {member}.")
        logger.info("Moved %s from %s to %s", row_id, member.team, team)
        return moved

    def assign_supervisor(self, row_id: str, supervisor_id: Optional[str]) -> MemberSnapshot:
        """
        Point ``row_id`` at a new supervisor; ``None`` clears the relation.

        The supervision start date is reset to today whenever the supervisor changes.
        """
        members = self.roster_repository.fetch_all()
        by_id = {m.row_id: m for m in members}
        if row_id not in by_id:
            raise Member.DoesNotExist(f"Member {row_id} does not exist.")
        member = by_id[row_id]

        if supervisor_id:
            if supervisor_id == row_id:
                raise ValidationError("A member cannot supervise themselves.")
            supervisor = by_id.get(supervisor_id)
            if supervisor is None:
                raise ValidationError(f"Supervisor {supervisor_id} does not exist.")
            if supervisor.rank not in SUPERVISOR_RANKS:
                raise ValidationError(f"{rank_display(supervisor.rank)} {supervisor.last_name} cannot supervise.")
            if roster.creates_supervision_cycle(members, row_id, supervisor_id):
                raise ValidationError("This assignment would create a circular supervision chain.")

        supervisor_id = supervisor_id or None
        if member.supervisor == supervisor_id:
            return member

        updated = dataclasses.replace(
            member,
            supervisor=supervisor_id,
            sup_start_date=self.clock.today() if supervisor_id else None,
        )
        if not self.roster_repository.persist(updated):
            raise ValidationError(f"Could not save the supervisor for {member}.")
        logger.info("Supervisor of %s set to %s", row_id, supervisor_id)
        return updated

    def delete_member(self, row_id: str):
        members = self.roster_repository.fetch_all()
        member = next((m for m in members if m.row_id == row_id), None)
        if member is None:
            raise Member.DoesNotExist(f"Member {row_id} does not exist.")
        if roster.supervisees_of(members, row_id):
            raise ValidationError(
                f"Cannot delete {member.last_name}. Please re-assign their supervisee(s) first."
            )
        self.roster_repository.delete(row_id)
        logger.info("Deleted member %s", row_id)
