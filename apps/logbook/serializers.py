import re
from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from .models import LogEntry, Bundle, BundleStatus
from .services import compute_log_times


DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
TIME_FIELDS = ('work_date', 'start_time', 'end_time', 'manual_hours')


# =============================================================================
# Strict fields
# =============================================================================

class StrictDateField(serializers.DateField):
    """Calendar date in exactly ``YYYY-MM-DD`` form that parses to a real date."""

    default_error_messages = {
        'invalid': 'Date must be a valid calendar date in YYYY-MM-DD format.',
    }

    def __init__(self, **kwargs):
        kwargs.setdefault('input_formats', ['%Y-%m-%d'])
        super().__init__(**kwargs)

    def to_internal_value(self, value):
        if not isinstance(value, str) or not DATE_PATTERN.match(value):
            self.fail('invalid')
        return super().to_internal_value(value)


class StrictTimeField(serializers.TimeField):
    """24-hour clock time in exactly ``HH:MM`` form."""

    default_error_messages = {
        'invalid': 'Time must be in 24-hour HH:MM format.',
    }

    def __init__(self, **kwargs):
        kwargs.setdefault('input_formats', ['%H:%M'])
        super().__init__(**kwargs)

    def to_internal_value(self, value):
        if not isinstance(value, str) or not TIME_PATTERN.match(value):
            self.fail('invalid')
        return super().to_internal_value(value)


# =============================================================================
# Input Serializers
# =============================================================================

class LogEntryInputSerializer(serializers.Serializer):
    """
    Validate a log entry payload and compute its hours and timestamps.

    Fields:
        work_date (date): Day the work was done (YYYY-MM-DD)
        start_time (time): Clock-in, HH:MM (timed entries)
        end_time (time): Clock-out, HH:MM; earlier than start means next day
        manual_hours (decimal): Duration in [0, 24] (manual entries)
        note (str): Optional, at most 500 characters after trimming

    Manual hours take precedence over clock times. On success
    ``validated_data['times']`` holds the computed ``LogTimes``.
    """

    work_date = StrictDateField()
    start_time = StrictTimeField(required=False, allow_null=True)
    end_time = StrictTimeField(required=False, allow_null=True)
    manual_hours = serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=Decimal('0'),
        max_value=settings.LOGBOOK_MAX_HOURS,
        required=False,
        allow_null=True,
    )
    note = serializers.CharField(
        max_length=settings.LOGBOOK_MAX_NOTE_LENGTH,
        required=False,
        allow_blank=True,
        trim_whitespace=True,
    )

    def validate(self, attrs):
        """Require either manual hours or a full start/end pair."""
        if self.partial and not any(key in attrs for key in TIME_FIELDS):
            # Note-only update
            return attrs

        if attrs.get('work_date') is None:
            raise serializers.ValidationError({
                'work_date': 'This field is required.'
            })

        manual_hours = attrs.get('manual_hours')
        start_time = attrs.get('start_time')
        end_time = attrs.get('end_time')

        if manual_hours is None:
            if start_time is None or end_time is None:
                raise serializers.ValidationError(
                    'Provide either manual hours or both a start and an end time.'
                )
            if start_time == end_time:
                raise serializers.ValidationError({
                    'end_time': 'End time must differ from start time.'
                })

        times = compute_log_times(
            work_date=attrs['work_date'],
            start_time=start_time,
            end_time=end_time,
            manual_hours=manual_hours,
        )
        if times.hours > settings.LOGBOOK_MAX_HOURS:
            raise serializers.ValidationError({
                'end_time': 'An entry cannot exceed 24 hours.'
            })

        attrs['times'] = times
        return attrs

    def to_log_times(self):
        """Return the computed LogTimes (None for a note-only update)."""
        return self.validated_data.get('times')


class BundleSubmitInputSerializer(serializers.Serializer):
    """
    Validate input for filing an RMP.

    Fields:
        filed_date (date): Filing date (YYYY-MM-DD, no time component)
    """

    filed_date = StrictDateField()


class BundleStatusInputSerializer(serializers.Serializer):
    """Validate input for changing an RMP's payment status."""

    status = serializers.ChoiceField(choices=BundleStatus.choices)


class LogEntryFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for log entry filtering.

    Query Parameters:
        bundled (bool): Only bundled (true) or unbundled (false) entries
        bundle (UUID): Only entries of this bundle
    """

    bundled = serializers.BooleanField(required=False, allow_null=True, default=None)
    bundle = serializers.UUIDField(required=False)


class BundleFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for bundle filtering.

    Query Parameters:
        status (str): Filter by payment status
    """

    status = serializers.ChoiceField(
        choices=BundleStatus.choices,
        required=False
    )


# =============================================================================
# Output Serializers
# =============================================================================


class LogEntrySerializer(serializers.ModelSerializer):
    """Serializer for log entries."""

    is_locked = serializers.BooleanField(read_only=True)
    is_manual = serializers.BooleanField(read_only=True)

    class Meta:
        model = LogEntry
        fields = [
            'id',
            'hours',
            'start',
            'end',
            'note',
            'bundle',
            'is_locked',
            'is_manual',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class BundleListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    total_hours = serializers.SerializerMethodField()
    entry_count = serializers.SerializerMethodField()

    class Meta:
        model = Bundle
        fields = [
            'id',
            'filed_date',
            'status',
            'notes',
            'total_hours',
            'entry_count',
            'created_at',
        ]
        read_only_fields = fields

    def get_total_hours(self, obj):
        # Uses the prefetched entries instead of an aggregate query per row
        total = sum((entry.hours for entry in obj.log_entries.all()), Decimal('0.00'))
        return f"{total:.2f}"

    def get_entry_count(self, obj):
        return len(obj.log_entries.all())


class BundleSerializer(BundleListSerializer):
    """Main serializer for bundles, with their entries."""

    log_entries = LogEntrySerializer(many=True, read_only=True)

    class Meta(BundleListSerializer.Meta):
        fields = BundleListSerializer.Meta.fields + [
            'log_entries',
            'updated_at',
        ]
        read_only_fields = fields


class BalanceSerializer(serializers.Serializer):
    """Serializer for the unbundled balance."""

    unbundled_hours = serializers.DecimalField(max_digits=8, decimal_places=2)
    available_bundles = serializers.IntegerField()


class DashboardSummarySerializer(BalanceSerializer):
    """Serializer for the dashboard summary."""

    pending_bundles = serializers.IntegerField()
    paid_bundles = serializers.IntegerField()
    pending_recent_bundles = serializers.IntegerField()
    total_hours = serializers.DecimalField(max_digits=10, decimal_places=2)
    bundled_hours = serializers.DecimalField(max_digits=10, decimal_places=2)
