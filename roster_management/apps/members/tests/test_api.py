import pytest
from datetime import date
from unittest.mock import patch

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from roster_management.apps.members.infrastructure.clock import SystemClock
from roster_management.apps.members.models import Member
from tests.fixtures.factories import CustomFieldFactory, MemberFactory, UserFactory

TODAY = date(2025, 8, 1)


@pytest.mark.django_db
class TestMemberAPI:
    def setup_method(self):
        self.clock_patch = patch.object(SystemClock, 'today', return_value=TODAY)
        self.clock_patch.start()
        self.client = APIClient()
        self.user = UserFactory()
        self.client.force_authenticate(user=self.user)
        self.msgt = MemberFactory(rank='E-7', last_name='Adams', tis_date=date(2012, 1, 1), dor_date=date(2021, 1, 1))
        self.sra = MemberFactory(
            rank='E-4', last_name='Clark', supervisor=self.msgt,
            tis_date=date(2022, 7, 31), dor_date=date(2025, 1, 31),
        )

    def teardown_method(self):
        self.clock_patch.stop()

    def test_requires_authentication(self):
        response = APIClient().get(reverse('member-list'))
        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_list_is_sorted_and_carries_eligibility(self):
        MemberFactory(rank='E-2', last_name='Young')
        response = self.client.get(reverse('member-list'))
        assert response.status_code == status.HTTP_200_OK
        assert [m['last_name'] for m in response.data] == ['Adams', 'Clark', 'Young']

        sra = response.data[1]
        assert sra['rank_display'] == 'SrA'
        assert sra['supervisor'] == self.msgt.row_id
        assert sra['supervisor_name'] == 'MSgt Adams'
        assert sra['eligibility']['classification'] == 'promo-eligible'
        assert sra['eligibility']['actionable'] is True

    def test_list_filters_by_team(self):
        MemberFactory(team=Member.Team.BRASS)
        response = self.client.get(reverse('member-list'), {'team': 'brass'})
        assert len(response.data) == 1

    def test_create_member(self):
        data = {
            'rank': 'E-3',
            'last_name': 'Diaz',
            'first_name': 'Ana',
            'tis_date': '2023-04-15',
            'dor_date': '2024-01-01',
            'supervisor': self.msgt.row_id,
        }
        response = self.client.post(reverse('member-list'), data, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['row_id'].startswith('card-')
        assert response.data['team'] == 'inbound'
        assert response.data['eligibility']['classification'] == 'btz-this-q'
        assert response.data['eligibility']['board_promotion_date'] == '2025-10-16'

    def test_flight_commander_is_placed_on_leads_without_supervisor(self):
        data = {
            'rank': 'O-3',
            'last_name': 'Evans',
            'first_name': 'Kim',
            'duty_title': 'Flight Commander',
            'team': 'sbirs',
            'status': 'Leave',
            'supervisor': self.msgt.row_id,
        }
        response = self.client.post(reverse('member-list'), data, format='json')
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['team'] == 'flight-leads'
        assert response.data['status'] == ''
        assert response.data['supervisor'] is None
        assert response.data['eligibility']['status'] == 'Officer Rank'

    def test_malformed_date_is_rejected(self):
        data = {'rank': 'E-1', 'last_name': 'Ford', 'first_name': 'Jo', 'tis_date': '08/01/2025'}
        response = self.client.post(reverse('member-list'), data, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'tis_date' in response.data

    def test_junior_supervisor_is_rejected(self):
        data = {'rank': 'E-1', 'last_name': 'Ford', 'first_name': 'Jo', 'supervisor': self.sra.row_id}
        response = self.client.post(reverse('member-list'), data, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'supervisor' in response.data

    def test_circular_supervisor_is_rejected_on_edit(self):
        MemberFactory(rank='E-5', supervisor=self.sra)
        ssgt = Member.objects.get(rank='E-5')
        url = reverse('member-detail', kwargs={'row_id': self.msgt.row_id})
        response = self.client.patch(url, {'supervisor': ssgt.row_id}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_edit_merges_custom_data(self):
        size = CustomFieldFactory(name='Shirt size')
        call_sign = CustomFieldFactory(name='Call sign', show_on_card=False)
        self.sra.custom_data = {size.field_id: 'M'}
        self.sra.save()

        url = reverse('member-detail', kwargs={'row_id': self.sra.row_id})
        response = self.client.patch(url, {'custom_data': {call_sign.field_id: 'Falcon'}}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['custom_data'] == {size.field_id: 'M', call_sign.field_id: 'Falcon'}
        assert response.data['card_fields'] == [{'field_id': size.field_id, 'name': 'Shirt size', 'value': 'M'}]
        assert response.data['supervisor'] == self.msgt.row_id

    def test_unknown_custom_field_is_rejected(self):
        url = reverse('member-detail', kwargs={'row_id': self.sra.row_id})
        response = self.client.patch(url, {'custom_data': {'field_nope': 'x'}}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_promotion_state_is_read_only(self):
        url = reverse('member-detail', kwargs={'row_id': self.sra.row_id})
        self.client.patch(url, {'btz_status': 'selected', 'last_name': 'Clarke'}, format='json')
        self.sra.refresh_from_db()
        assert self.sra.btz_status == 'none'
        assert self.sra.last_name == 'Clarke'

    def test_delete_supervisor_with_supervisees_is_refused(self):
        url = reverse('member-detail', kwargs={'row_id': self.msgt.row_id})
        response = self.client.delete(url)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data
        assert Member.objects.filter(row_id=self.msgt.row_id).exists()

    def test_delete_member(self):
        url = reverse('member-detail', kwargs={'row_id': self.sra.row_id})
        response = self.client.delete(url)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Member.objects.filter(row_id=self.sra.row_id).exists()

    def test_unknown_member_is_404(self):
        url = reverse('member-promote', kwargs={'row_id': 'card-missing'})
        response = self.client.post(url, {'new_dor': '2025-06-01'}, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_promote(self):
        url = reverse('member-promote', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'new_dor': '2025-06-01'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['rank'] == 'E-5'
        assert response.data['dor_date'] == '2025-06-01'

    def test_promote_chief_returns_error(self):
        chief = MemberFactory(rank='E-9', tis_date=date(2000, 1, 1), dor_date=date(2020, 1, 1))
        url = reverse('member-promote', kwargs={'row_id': chief.row_id})
        response = self.client.post(url, {'new_dor': '2025-06-01'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'Max rank reached.' in response.data['error']

    def test_btz_selection_defaults_to_btz_date(self):
        a1c = MemberFactory(rank='E-3', tis_date=date(2023, 4, 15), dor_date=date(2024, 1, 1))
        url = reverse('member-btz-selection', kwargs={'row_id': a1c.row_id})
        response = self.client.post(url, {'selected': True}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['rank'] == 'E-4'
        assert response.data['dor_date'] == '2025-10-16'
        assert response.data['original_dor'] == '2024-01-01'
        assert response.data['eligibility']['classification'] == 'btz-select'

    def test_btz_selection_with_explicit_date(self):
        a1c = MemberFactory(rank='E-3', tis_date=date(2022, 10, 1), dor_date=date(2023, 6, 1))
        url = reverse('member-btz-selection', kwargs={'row_id': a1c.row_id})
        response = self.client.post(url, {'selected': True, 'new_dor': '2025-04-01'}, format='json')
        assert response.data['btz_status'] == 'selected'
        assert response.data['dor_date'] == '2025-04-01'

    def test_board_selection_then_sweep(self):
        url = reverse('member-board-selection', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'selected': True, 'promotion_date': '2025-08-01'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['eligibility']['classification'] == 'promo-selected'

        response = self.client.post(reverse('member-process-promotions'), {}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['changed'] is True
        assert response.data['promoted'][0]['row_id'] == self.sra.row_id
        assert response.data['promoted'][0]['rank'] == 'E-5'

        self.sra.refresh_from_db()
        assert self.sra.rank == 'E-5'
        assert self.sra.dor_date == date(2025, 8, 1)
        assert self.sra.promotion_status == 'none'

    def test_board_selection_needs_date(self):
        url = reverse('member-board-selection', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'selected': True}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_process_promotions_dry_run(self):
        airman = MemberFactory(rank='E-1', tis_date=date(2025, 1, 1), dor_date=date(2025, 1, 1))
        response = self.client.post(reverse('member-process-promotions'), {'dry_run': True}, format='json')
        assert response.data['changed'] is True
        assert response.data['today'] == '2025-08-01'
        airman.refresh_from_db()
        assert airman.rank == 'E-1'

    def test_move(self):
        url = reverse('member-move', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'team': 'brass'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['team'] == 'brass'

    def test_move_to_unknown_team(self):
        url = reverse('member-move', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'team': 'motor-pool'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_assign_supervisor(self):
        ssgt = MemberFactory(rank='E-5')
        url = reverse('member-supervisor', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'supervisor': ssgt.row_id}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['supervisor'] == ssgt.row_id
        assert response.data['sup_start_date'] == '2025-08-01'

    def test_clear_supervisor(self):
        url = reverse('member-supervisor', kwargs={'row_id': self.sra.row_id})
        response = self.client.post(url, {'supervisor': ''}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['supervisor'] is None

    def test_circular_supervisor_assignment(self):
        url = reverse('member-supervisor', kwargs={'row_id': self.msgt.row_id})
        ssgt = MemberFactory(rank='E-5', supervisor=self.sra)
        response = self.client.post(url, {'supervisor': ssgt.row_id}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'circular' in response.data['error']

    def test_supervision_chart(self):
        response = self.client.get(reverse('member-supervision-chart'))
        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['row_id'] == self.msgt.row_id
        assert response.data[0]['children'][0]['row_id'] == self.sra.row_id

    def test_supervisor_options(self):
        response = self.client.get(reverse('member-supervisor-options'), {'exclude': self.sra.row_id})
        assert response.status_code == status.HTTP_200_OK
        assert [o['row_id'] for o in response.data] == [self.msgt.row_id]
        assert response.data[0]['rank_display'] == 'MSgt'


@pytest.mark.django_db
class TestCustomFieldAPI:
    def setup_method(self):
        self.client = APIClient()
        self.client.force_authenticate(user=UserFactory())

    def test_create_custom_field(self):
        response = self.client.post(
            reverse('custom-field-list'),
            {'name': '  Shirt size ', 'field_type': 'text', 'show_on_card': True},
            format='json',
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Shirt size'
        assert response.data['field_id'].startswith('field_')

    def test_blank_name_is_rejected(self):
        response = self.client.post(reverse('custom-field-list'), {'name': '   '}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_update_and_delete(self):
        field = CustomFieldFactory()
        url = reverse('custom-field-detail', kwargs={'field_id': field.field_id})
        response = self.client.patch(url, {'show_on_card': False}, format='json')
        assert response.data['show_on_card'] is False
        assert self.client.delete(url).status_code == status.HTTP_204_NO_CONTENT
