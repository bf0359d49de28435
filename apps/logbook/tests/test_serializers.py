import pytest
from datetime import date
from decimal import Decimal
from apps.logbook.serializers import (
    LogEntryInputSerializer,
    BundleSubmitInputSerializer,
    BundleStatusInputSerializer,
    LogEntryFilterSerializer,
    BundleListSerializer,
)
from apps.logbook.services import submit_bundle


# =============================================================================
# LogEntryInputSerializer Tests
# =============================================================================

class TestLogEntryInputSerializer:
    """Tests for LogEntryInputSerializer."""

    def test_timed_entry_is_valid(self):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'start_time': '08:00',
            'end_time': '10:15',
            'note': '  Drill  ',
        })
        assert serializer.is_valid(), serializer.errors
        assert serializer.to_log_times().hours == Decimal('2.25')
        assert serializer.validated_data['note'] == 'Drill'

    def test_manual_entry_is_valid(self):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'manual_hours': '1.5',
        })
        assert serializer.is_valid(), serializer.errors
        times = serializer.to_log_times()
        assert times.is_manual
        assert times.hours == Decimal('1.50')

    def test_overnight_entry(self):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'start_time': '23:00',
            'end_time': '02:00',
        })
        assert serializer.is_valid(), serializer.errors
        assert serializer.to_log_times().hours == Decimal('3.00')

    @pytest.mark.parametrize('work_date', ['2026-02-30', '03/02/2026', '2026-3-2', '2026-03-02T08:00'])
    def test_invalid_work_date(self, work_date):
        serializer = LogEntryInputSerializer(data={'work_date': work_date, 'manual_hours': '1'})
        assert not serializer.is_valid()
        assert 'work_date' in serializer.errors

    @pytest.mark.parametrize('value', ['24:00', '8:00', '08:60', '08:00:00', 'noon'])
    def test_invalid_time(self, value):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'start_time': value,
            'end_time': '10:00',
        })
        assert not serializer.is_valid()
        assert 'start_time' in serializer.errors

    def test_missing_end_time(self):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'start_time': '08:00',
        })
        assert not serializer.is_valid()
        assert 'non_field_errors' in serializer.errors

    def test_equal_start_and_end_rejected(self):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'start_time': '08:00',
            'end_time': '08:00',
        })
        assert not serializer.is_valid()
        assert 'end_time' in serializer.errors

    @pytest.mark.parametrize('hours', ['-0.5', '24.01', 'abc'])
    def test_manual_hours_out_of_range(self, hours):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'manual_hours': hours,
        })
        assert not serializer.is_valid()
        assert 'manual_hours' in serializer.errors

    def test_manual_hours_boundaries(self):
        for hours in ('0', '24'):
            serializer = LogEntryInputSerializer(data={
                'work_date': '2026-03-02',
                'manual_hours': hours,
            })
            assert serializer.is_valid(), serializer.errors

    def test_note_too_long(self):
        serializer = LogEntryInputSerializer(data={
            'work_date': '2026-03-02',
            'manual_hours': '1',
            'note': 'x' * 501,
        })
        assert not serializer.is_valid()
        assert 'note' in serializer.errors

    def test_partial_note_only(self):
        serializer = LogEntryInputSerializer(data={'note': 'Updated'}, partial=True)
        assert serializer.is_valid(), serializer.errors
        assert serializer.to_log_times() is None

    def test_partial_times_require_work_date(self):
        serializer = LogEntryInputSerializer(data={'manual_hours': '2'}, partial=True)
        assert not serializer.is_valid()
        assert 'work_date' in serializer.errors


# =============================================================================
# Bundle input Tests
# =============================================================================

class TestBundleInputSerializers:
    """Tests for the bundle submission and status serializers."""

    def test_filed_date_valid(self):
        serializer = BundleSubmitInputSerializer(data={'filed_date': '2026-03-20'})
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['filed_date'] == date(2026, 3, 20)

    @pytest.mark.parametrize('value', ['', '2026-13-01', '2026-03-20T00:00:00Z'])
    def test_filed_date_invalid(self, value):
        serializer = BundleSubmitInputSerializer(data={'filed_date': value})
        assert not serializer.is_valid()
        assert 'filed_date' in serializer.errors

    def test_filed_date_required(self):
        serializer = BundleSubmitInputSerializer(data={})
        assert not serializer.is_valid()

    def test_status_choices(self):
        assert BundleStatusInputSerializer(data={'status': 'paid'}).is_valid()
        assert not BundleStatusInputSerializer(data={'status': 'pending'}).is_valid()


class TestLogEntryFilterSerializer:
    """Tests for LogEntryFilterSerializer."""

    def test_bundled_absent_is_none(self):
        serializer = LogEntryFilterSerializer(data={})
        assert serializer.is_valid()
        assert serializer.validated_data.get('bundled') is None

    def test_bundled_false(self):
        serializer = LogEntryFilterSerializer(data={'bundled': 'false'})
        assert serializer.is_valid()
        assert serializer.validated_data['bundled'] is False

    def test_invalid_bundle_id(self):
        serializer = LogEntryFilterSerializer(data={'bundle': 'not-a-uuid'})
        assert not serializer.is_valid()


# =============================================================================
# Output Tests
# =============================================================================

@pytest.mark.django_db
class TestBundleListSerializer:
    """Tests for BundleListSerializer."""

    def test_total_hours_formatted(self, sailor, make_log, filed_date):
        make_log(sailor, 1.25)
        make_log(sailor, 1.75)
        bundle = submit_bundle(user=sailor, filed_date=filed_date)

        data = BundleListSerializer(bundle).data
        assert data['total_hours'] == '3.00'
        assert data['entry_count'] == 2
        assert data['status'] == 'submitted'
