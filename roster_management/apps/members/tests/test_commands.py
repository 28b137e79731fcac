import pytest
from datetime import date
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError

from roster_management.apps.members.models import Member
from tests.fixtures.factories import MemberFactory


@pytest.mark.django_db
class TestProcessPromotionsCommand:
    def setup_method(self):
        self.airman = MemberFactory(rank='E-1', tis_date=date(2025, 1, 1), dor_date=date(2025, 1, 1))
        self.ssgt = MemberFactory(rank='E-5', tis_date=date(2018, 1, 1), dor_date=date(2022, 1, 1))

    def test_promotes_members_due_on_date(self):
        out = StringIO()
        call_command('process_promotions', '--date', '2025-08-01', '--verbose', stdout=out)

        self.airman.refresh_from_db()
        assert self.airman.rank == 'E-2'
        assert self.airman.dor_date == date(2025, 7, 2)
        assert Member.objects.get(pk=self.ssgt.pk).rank == 'E-5'

        output = out.getvalue()
        assert 'Processing promotions for 2025-08-01' in output
        assert self.airman.row_id in output
        assert 'Promoted 1 member(s)' in output

    def test_dry_run_saves_nothing(self):
        out = StringIO()
        call_command('process_promotions', '--date', '2025-08-01', '--dry-run', stdout=out)

        self.airman.refresh_from_db()
        assert self.airman.rank == 'E-1'
        assert 'Would promote 1 member(s)' in out.getvalue()

    def test_nothing_due(self):
        out = StringIO()
        call_command('process_promotions', '--date', '2025-03-01', stdout=out)
        assert 'No promotions due' in out.getvalue()

    def test_invalid_date(self):
        with pytest.raises(CommandError):
            call_command('process_promotions', '--date', '08/01/2025')
