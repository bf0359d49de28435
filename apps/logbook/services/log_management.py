"""Log entry management service - CRUD operations for unbundled log entries."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID
import logging

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.logbook.models import LogEntry
from .bundling import clean_hours
from .exceptions import LogEntryNotFoundError, LogEntryLockedError

logger = logging.getLogger(__name__)

# Manual entries are anchored at local noon of the work date
MANUAL_ENTRY_TIME = time(12, 0)
SECONDS_PER_HOUR = Decimal(3600)


@dataclass(frozen=True)
class LogTimes:
    """Validated time payload of a log entry."""

    hours: Decimal
    start: datetime
    end: datetime

    @property
    def is_manual(self) -> bool:
        return self.start == self.end


def compute_log_times(
    *,
    work_date: date,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
    manual_hours: Optional[Decimal] = None,
    tz=None,
) -> LogTimes:
    """
    Turn a work date plus either manual hours or clock times into a LogTimes.

    Manual hours win when given: start and end are both set to noon of the
    work date. Otherwise the clock times are placed on the work date, and an
    end earlier than the start is moved to the next calendar day.

    Args:
        work_date: Calendar date of the work
        start_time: Clock-in time (timed entries)
        end_time: Clock-out time (timed entries)
        manual_hours: Duration for manual entries
        tz: Zone the date and times are expressed in (default: current zone)

    Raises:
        ValueError: If neither manual hours nor both clock times are given
    """
    tz = tz or timezone.get_current_timezone()

    if manual_hours is not None:
        moment = timezone.make_aware(datetime.combine(work_date, MANUAL_ENTRY_TIME), tz)
        return LogTimes(hours=clean_hours(manual_hours), start=moment, end=moment)

    if start_time is None or end_time is None:
        raise ValueError("Either manual hours or both start and end times are required")

    start_naive = datetime.combine(work_date, start_time)
    end_naive = datetime.combine(work_date, end_time)
    if end_naive < start_naive:
        end_naive += timedelta(days=1)

    start = timezone.make_aware(start_naive, tz)
    end = timezone.make_aware(end_naive, tz)
    # Elapsed real time, so DST transitions are counted correctly
    elapsed = end.astimezone(dt_timezone.utc) - start.astimezone(dt_timezone.utc)
    hours = clean_hours(Decimal(int(elapsed.total_seconds())) / SECONDS_PER_HOUR)
    return LogTimes(hours=hours, start=start, end=end)


@transaction.atomic
def create_log(*, user: User, times: LogTimes, note: str = '') -> LogEntry:
    """
    Create a new unbundled log entry.

    Args:
        user: Owner of the entry
        times: Validated time payload
        note: Optional free text (trimmed)

    Returns:
        Created LogEntry instance
    """
    entry = LogEntry.objects.create(
        user=user,
        hours=times.hours,
        start=times.start,
        end=times.end,
        note=(note or '').strip(),
    )
    logger.info("User %s logged %s hours (%s)", user.id, entry.hours, entry.id)
    return entry


def _get_unlocked_for_update(user: User, log_id: UUID) -> LogEntry:
    try:
        entry = LogEntry.objects.select_for_update().get(id=log_id, user=user)
    except LogEntry.DoesNotExist:
        raise LogEntryNotFoundError("Log entry not found")

    if entry.is_locked:
        raise LogEntryLockedError("Log entry is bundled into an RMP and cannot be changed")
    return entry


@transaction.atomic
def update_log(
    *,
    user: User,
    log_id: UUID,
    times: Optional[LogTimes] = None,
    note: Optional[str] = None
) -> LogEntry:
    """
    Change the time payload and/or the note of an unbundled entry.

    Fields passed as None are left untouched.

    Raises:
        LogEntryNotFoundError: If the entry doesn't exist for this user
        LogEntryLockedError: If the entry is bundled
    """
    entry = _get_unlocked_for_update(user, log_id)

    update_fields = ['updated_at']
    if times is not None:
        entry.hours = times.hours
        entry.start = times.start
        entry.end = times.end
        update_fields += ['hours', 'start', 'end']
    if note is not None:
        entry.note = note.strip()
        update_fields.append('note')
    entry.save(update_fields=update_fields)

    return entry


@transaction.atomic
def delete_log(*, user: User, log_id: UUID) -> None:
    """
    Delete an unbundled log entry.

    Raises:
        LogEntryNotFoundError: If the entry doesn't exist for this user
        LogEntryLockedError: If the entry is bundled
    """
    entry = _get_unlocked_for_update(user, log_id)
    entry.delete()
    logger.info("User %s deleted log entry %s", user.id, log_id)


def get_log_for_user(*, user: User, log_id: UUID) -> LogEntry:
    """
    Retrieve one of the user's log entries.

    Raises:
        LogEntryNotFoundError: If the entry doesn't exist for this user
    """
    try:
        return LogEntry.objects.select_related('bundle').get(id=log_id, user=user)
    except LogEntry.DoesNotExist:
        raise LogEntryNotFoundError("Log entry not found")


def get_user_logs(
    *,
    user: User,
    bundled: Optional[bool] = None,
    bundle_id: Optional[UUID] = None
) -> QuerySet:
    """User's log entries, newest first."""
    queryset = LogEntry.objects.filter(user=user).select_related('bundle')
    if bundled is not None:
        queryset = queryset.filter(bundle__isnull=not bundled)
    if bundle_id:
        queryset = queryset.filter(bundle_id=bundle_id)
    return queryset.order_by('-start', '-created_at')
