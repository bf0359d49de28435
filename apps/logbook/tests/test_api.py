import pytest
from decimal import Decimal
from unittest.mock import patch
from uuid import uuid4
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from apps.logbook.models import Bundle, BundleStatus, LogEntry
from apps.logbook.services import submit_bundle


def detail_url(name, pk):
    return reverse(f'logbook:{name}', kwargs={'pk': pk})


# =============================================================================
# Log entry Tests
# =============================================================================

@pytest.mark.django_db
class TestLogEntryCreate:
    """Tests for POST /api/logs/"""

    def test_create_timed_entry(self, sailor_client, sailor):
        url = reverse('logbook:log-list')
        data = {
            'work_date': '2026-03-02',
            'start_time': '18:00',
            'end_time': '21:30',
            'note': 'Drill',
        }
        response = sailor_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Decimal(response.data['hours']) == Decimal('3.50')
        assert response.data['is_locked'] is False
        assert response.data['is_manual'] is False
        assert LogEntry.objects.filter(user=sailor).count() == 1

    def test_create_manual_entry(self, sailor_client):
        url = reverse('logbook:log-list')
        data = {'work_date': '2026-03-02', 'manual_hours': '2.25'}
        response = sailor_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['is_manual'] is True
        assert response.data['start'] == response.data['end']

    def test_create_invalid_time(self, sailor_client):
        url = reverse('logbook:log-list')
        data = {'work_date': '2026-03-02', 'start_time': '25:00', 'end_time': '10:00'}
        response = sailor_client.post(url, data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'start_time' in response.data
        assert LogEntry.objects.count() == 0

    def test_create_requires_auth(self, api_client):
        url = reverse('logbook:log-list')
        response = api_client.post(url, {'work_date': '2026-03-02', 'manual_hours': '1'}, format='json')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestLogEntryList:
    """Tests for GET /api/logs/"""

    def test_list_only_own_entries(self, sailor_client, sailor, other_sailor, make_log):
        mine = make_log(sailor, 1)
        make_log(other_sailor, 2)

        response = sailor_client.get(reverse('logbook:log-list'))

        assert response.status_code == status.HTTP_200_OK
        ids = [entry['id'] for entry in response.data['results']]
        assert ids == [str(mine.id)]

    def test_filter_unbundled(self, sailor_client, sailor, make_log, filed_date):
        make_log(sailor, 3)
        loose = make_log(sailor, 1)
        submit_bundle(user=sailor, filed_date=filed_date)

        response = sailor_client.get(reverse('logbook:log-list'), {'bundled': 'false'})

        assert response.status_code == status.HTTP_200_OK
        assert [entry['id'] for entry in response.data['results']] == [str(loose.id)]

    def test_invalid_filter(self, sailor_client):
        response = sailor_client.get(reverse('logbook:log-list'), {'bundle': 'nope'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestLogEntryChange:
    """Tests for PATCH/PUT/DELETE /api/logs/{id}/"""

    def test_patch_note(self, sailor_client, sailor, make_log):
        entry = make_log(sailor, 1.5)
        response = sailor_client.patch(
            detail_url('log-detail', entry.id), {'note': 'Admin day'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        entry.refresh_from_db()
        assert entry.note == 'Admin day'
        assert entry.hours == Decimal('1.50')

    def test_put_times(self, sailor_client, sailor, make_log):
        entry = make_log(sailor, 1)
        data = {'work_date': '2026-03-05', 'start_time': '09:00', 'end_time': '13:00'}
        response = sailor_client.put(detail_url('log-detail', entry.id), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        entry.refresh_from_db()
        assert entry.hours == Decimal('4.00')

    def test_delete_entry(self, sailor_client, sailor, make_log):
        entry = make_log(sailor, 1)
        response = sailor_client.delete(detail_url('log-detail', entry.id))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not LogEntry.objects.filter(id=entry.id).exists()

    def test_locked_entry_cannot_be_edited(self, sailor_client, sailor, make_log, filed_date):
        entry = make_log(sailor, 3)
        submit_bundle(user=sailor, filed_date=filed_date)

        response = sailor_client.patch(
            detail_url('log-detail', entry.id), {'note': 'Sneaky'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        entry.refresh_from_db()
        assert entry.note == ''

    def test_locked_entry_cannot_be_deleted(self, sailor_client, sailor, make_log, filed_date):
        entry = make_log(sailor, 3)
        submit_bundle(user=sailor, filed_date=filed_date)

        response = sailor_client.delete(detail_url('log-detail', entry.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert LogEntry.objects.filter(id=entry.id).exists()

    def test_other_users_entry_is_404(self, other_client, sailor, make_log):
        entry = make_log(sailor, 1)

        assert other_client.get(detail_url('log-detail', entry.id)).status_code == 404
        assert other_client.delete(detail_url('log-detail', entry.id)).status_code == 404
        assert LogEntry.objects.filter(id=entry.id).exists()


# =============================================================================
# Bundle Tests
# =============================================================================

@pytest.mark.django_db
class TestBundleSubmit:
    """Tests for POST /api/bundles/"""

    def test_submit_creates_bundle(self, sailor_client, sailor, make_log):
        make_log(sailor, 2, note='Drill')
        make_log(sailor, 2)

        response = sailor_client.post(
            reverse('logbook:bundle-list'), {'filed_date': '2026-03-20'}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['total_hours'] == '3.00'
        assert response.data['filed_date'] == '2026-03-20'
        assert response.data['status'] == BundleStatus.SUBMITTED
        assert response.data['notes'] == '• Drill'
        assert len(response.data['log_entries']) == 2

    def test_submit_below_quota_is_noop(self, sailor_client, sailor, make_log):
        make_log(sailor, 2.5)

        response = sailor_client.post(
            reverse('logbook:bundle-list'), {'filed_date': '2026-03-20'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bundle'] is None
        assert Decimal(response.data['balance']['unbundled_hours']) == Decimal('2.50')
        assert Bundle.objects.count() == 0

    def test_submit_invalid_date(self, sailor_client, sailor, make_log):
        make_log(sailor, 3)
        response = sailor_client.post(
            reverse('logbook:bundle-list'), {'filed_date': '20-03-2026'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Bundle.objects.count() == 0

    def test_storage_failure_returns_500(self, sailor_client, sailor, make_log):
        make_log(sailor, 3)

        with patch('apps.logbook.views.submit_bundle', side_effect=DatabaseError('disk full')):
            response = sailor_client.post(
                reverse('logbook:bundle-list'), {'filed_date': '2026-03-20'}, format='json'
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert 'disk full' not in str(response.data)


@pytest.mark.django_db
class TestBundleReadAndDelete:
    """Tests for GET/DELETE /api/bundles/{id}/"""

    @pytest.fixture
    def bundle(self, sailor, make_log, filed_date):
        make_log(sailor, 2)
        make_log(sailor, 2)
        return submit_bundle(user=sailor, filed_date=filed_date)

    def test_list_bundles(self, sailor_client, bundle):
        response = sailor_client.get(reverse('logbook:bundle-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [b['id'] for b in response.data['results']] == [str(bundle.id)]
        assert response.data['results'][0]['entry_count'] == 2

    def test_list_filtered_by_status(self, sailor_client, bundle):
        response = sailor_client.get(reverse('logbook:bundle-list'), {'status': 'paid'})
        assert response.data['results'] == []

    def test_retrieve_bundle(self, sailor_client, bundle):
        response = sailor_client.get(detail_url('bundle-detail', bundle.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_hours'] == '3.00'

    def test_delete_bundle_restores_entries(self, sailor_client, sailor, bundle):
        response = sailor_client.delete(detail_url('bundle-detail', bundle.id))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        hours = sorted(e.hours for e in LogEntry.objects.filter(user=sailor))
        assert hours == [Decimal('2.00'), Decimal('2.00')]
        assert not LogEntry.objects.filter(bundle__isnull=False).exists()

    def test_other_user_cannot_delete(self, other_client, bundle):
        response = other_client.delete(detail_url('bundle-detail', bundle.id))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert Bundle.objects.filter(id=bundle.id).exists()

    def test_unknown_bundle_is_404(self, sailor_client):
        response = sailor_client.get(detail_url('bundle-detail', uuid4()))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_set_status(self, sailor_client, bundle):
        response = sailor_client.post(
            detail_url('bundle-status', bundle.id), {'status': 'paid'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        bundle.refresh_from_db()
        assert bundle.status == BundleStatus.PAID

    def test_set_invalid_status(self, sailor_client, bundle):
        response = sailor_client.post(
            detail_url('bundle-status', bundle.id), {'status': 'lost'}, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_toggle_paid(self, sailor_client, bundle):
        url = detail_url('bundle-toggle-paid', bundle.id)

        assert sailor_client.post(url).data['status'] == BundleStatus.PAID
        assert sailor_client.post(url).data['status'] == BundleStatus.SUBMITTED


# =============================================================================
# Balance and summary Tests
# =============================================================================

@pytest.mark.django_db
class TestBalanceEndpoints:
    """Tests for GET /api/logbook/balance/ and /api/logbook/summary/"""

    def test_balance(self, sailor_client, sailor, make_log):
        make_log(sailor, 4)
        make_log(sailor, 3)

        response = sailor_client.get(reverse('logbook:balance'))

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['unbundled_hours']) == Decimal('7.00')
        assert response.data['available_bundles'] == 2

    def test_balance_empty(self, sailor_client):
        response = sailor_client.get(reverse('logbook:balance'))

        assert Decimal(response.data['unbundled_hours']) == Decimal('0')
        assert response.data['available_bundles'] == 0

    def test_summary(self, sailor_client, sailor, make_log, filed_date):
        make_log(sailor, 4)
        submit_bundle(user=sailor, filed_date=filed_date)

        response = sailor_client.get(reverse('logbook:summary'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pending_bundles'] == 1
        assert response.data['paid_bundles'] == 0
        assert Decimal(response.data['bundled_hours']) == Decimal('3.00')
        assert Decimal(response.data['unbundled_hours']) == Decimal('1.00')

    def test_balance_requires_auth(self, api_client):
        response = api_client.get(reverse('logbook:balance'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestPlainHttp:
    """Requests over plain HTTP reach the views under the test settings."""

    def test_health_check_is_not_redirected(self, api_client):
        response = api_client.get(reverse('health-check'))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'status': 'ok'}

    def test_locked_manual_entry_patch_is_forbidden(self, sailor_client):
        created = sailor_client.post(
            reverse('logbook:log-list'),
            {'work_date': '2026-03-01', 'manual_hours': '3', 'note': 'Drill'},
            format='json',
        )
        sailor_client.post(
            reverse('logbook:bundle-list'), {'filed_date': '2026-03-20'}, format='json'
        )

        response = sailor_client.patch(
            detail_url('log-detail', created.data['id']), {'note': 'Edited'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['detail'].code == 'log_entry_locked'
