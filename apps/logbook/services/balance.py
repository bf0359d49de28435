"""
Balance and summary queries for the logbook.

Read-only aggregations over a user's entries and bundles; nothing here
modifies data.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.logbook.models import Bundle, BundleStatus, LogEntry
from .bundle_management import bundle_quota
from .bundling import clean_hours


def _sum_hours(queryset) -> Decimal:
    total = queryset.aggregate(total=Sum('hours'))['total']
    return clean_hours(total or Decimal('0.00'))


def get_balance(*, user: User) -> dict:
    """
    Unbundled hours and how many full RMPs they would make.

    Returns:
        dict with ``unbundled_hours`` (Decimal, 2 places) and
        ``available_bundles`` (int, floor of hours / quota). Both are zero
        when the user has no unbundled entries.
    """
    unbundled_hours = _sum_hours(LogEntry.objects.filter(user=user, bundle__isnull=True))
    return {
        'unbundled_hours': unbundled_hours,
        'available_bundles': int(unbundled_hours // bundle_quota()),
    }


def get_status_counts(*, user: User) -> dict:
    """Number of the user's bundles per status, zero-filled."""
    counts = {value: 0 for value in BundleStatus.values}
    rows = (
        Bundle.objects
        .filter(user=user)
        .values('status')
        .annotate(count=Count('id'))
    )
    for row in rows:
        counts[row['status']] = row['count']
    return counts


def get_dashboard_summary(*, user: User, today: Optional[date] = None) -> dict:
    """
    Everything the dashboard header shows.

    ``pending_recent_bundles`` counts submitted bundles filed on or after
    ``today - LOGBOOK_PENDING_WINDOW_DAYS``; future filing dates are included.
    """
    today = today or timezone.localdate()
    window_days = getattr(settings, 'LOGBOOK_PENDING_WINDOW_DAYS', 30)
    window_start = today - timedelta(days=window_days)

    balance = get_balance(user=user)
    counts = get_status_counts(user=user)
    pending_recent = Bundle.objects.filter(
        user=user,
        status=BundleStatus.SUBMITTED,
        filed_date__gte=window_start,
    ).count()

    return {
        **balance,
        'pending_bundles': counts[BundleStatus.SUBMITTED],
        'paid_bundles': counts[BundleStatus.PAID],
        'pending_recent_bundles': pending_recent,
        'total_hours': _sum_hours(LogEntry.objects.filter(user=user)),
        'bundled_hours': _sum_hours(LogEntry.objects.filter(user=user, bundle__isnull=False)),
    }
