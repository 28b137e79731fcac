import pytest
from datetime import date
from unittest.mock import patch

from roster_management.apps.members.infrastructure.clock import SystemClock
from roster_management.apps.members.tasks import process_auto_promotions_task
from tests.fixtures.factories import MemberFactory


@pytest.mark.django_db
class TestProcessAutoPromotionsTask:
    def test_runs_sweep_for_today(self):
        airman = MemberFactory(rank='E-2', tis_date=date(2024, 6, 1), dor_date=date(2024, 9, 15))
        MemberFactory(rank='E-7', tis_date=date(2012, 1, 1), dor_date=date(2021, 1, 1))

        with patch.object(SystemClock, 'today', return_value=date(2025, 8, 1)):
            result = process_auto_promotions_task.delay().get()

        assert result == {
            'success': True,
            'promoted_count': 1,
            'members': [airman.row_id],
            'failed': [],
        }
        airman.refresh_from_db()
        assert airman.rank == 'E-3'
        assert airman.dor_date == date(2025, 7, 16)

    def test_failure_is_reported(self):
        with patch(
            'roster_management.apps.members.tasks.PromotionApplicationService.process_auto_promotions',
            side_effect=RuntimeError('database unavailable'),
        ):
            result = process_auto_promotions_task()

        assert result == {'success': False, 'error': 'database unavailable'}
