"""Bundle management service - RMP allocation, release and status changes."""

from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID
import logging

from django.conf import settings
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.logbook.models import Bundle, BundleStatus, LogEntry
from .bundling import (
    BUNDLE_HOURS,
    MAX_ENTRY_HOURS,
    MAX_NOTE_LENGTH,
    ConsolidationPlan,
    EntrySnapshot,
    clean_hours,
    plan_bundle,
    plan_consolidation,
)
from .exceptions import BundleNotFoundError, InvalidBundleStatusError

logger = logging.getLogger(__name__)


def bundle_quota() -> Decimal:
    """Hours per RMP, overridable through ``LOGBOOK_BUNDLE_HOURS``."""
    return clean_hours(getattr(settings, 'LOGBOOK_BUNDLE_HOURS', BUNDLE_HOURS))


def _locked_unbundled_entries(user: User) -> list[LogEntry]:
    return list(
        LogEntry.objects
        .select_for_update()
        .filter(user=user, bundle__isnull=True)
        .order_by('start', 'created_at', 'id')
    )


@transaction.atomic
def submit_bundle(*, user: User, filed_date: date) -> Optional[Bundle]:
    """
    Bundle the user's oldest unbundled hours into one RMP.

    This operation:
    1. Locks and reads the user's unbundled entries, oldest start first
    2. Plans the greedy allocation (see ``bundling.plan_bundle``)
    3. Creates the Bundle with the collected notes
    4. Locks the consumed entries into it, shortening the boundary entry
    5. Creates the unbundled remainder entry of a split

    Everything happens in one transaction; a failure at any step leaves no
    Bundle and no modified entry behind.

    Args:
        user: Owner of the hours
        filed_date: Calendar date the RMP was filed

    Returns:
        The created Bundle, or None when fewer than a quota of unbundled
        hours is available (nothing is changed in that case).
    """
    entries = _locked_unbundled_entries(user)
    plan = plan_bundle(
        [EntrySnapshot.from_entry(entry) for entry in entries],
        quota=bundle_quota(),
    )
    if plan is None:
        logger.info("Bundle submission skipped for user %s: not enough unbundled hours", user.id)
        return None

    bundle = Bundle.objects.create(
        user=user,
        filed_date=filed_date,
        status=BundleStatus.SUBMITTED,
        notes=plan.notes,
    )

    entries_by_id = {entry.id: entry for entry in entries}
    for entry_id, hours in plan.assignments:
        entry = entries_by_id[entry_id]
        entry.bundle = bundle
        update_fields = ['bundle', 'updated_at']
        if entry_id == plan.split_entry_id:
            entry.hours = hours
            update_fields.append('hours')
        entry.save(update_fields=update_fields)

    if plan.remainder:
        LogEntry.objects.create(
            user=user,
            hours=plan.remainder.hours,
            start=plan.remainder.start,
            end=plan.remainder.end,
            note=plan.remainder.note,
        )

    logger.info(
        "Created bundle %s for user %s from %d entries (split: %s)",
        bundle.id, user.id, len(plan.assignments), bool(plan.remainder),
    )
    return bundle


@transaction.atomic
def delete_bundle(*, user: User, bundle_id: UUID) -> ConsolidationPlan:
    """
    Delete an RMP and return its hours to the unbundled pool.

    The bundle's entries are unlocked (never deleted), then the user's
    unbundled entries are consolidated: fragments sharing identical start
    and end timestamps are merged back into one entry, keeping every
    distinct note.

    Args:
        user: Owner of the bundle
        bundle_id: UUID of the bundle

    Returns:
        The ConsolidationPlan that was applied.

    Raises:
        BundleNotFoundError: If the bundle doesn't exist for this user
    """
    try:
        bundle = Bundle.objects.select_for_update().get(id=bundle_id, user=user)
    except Bundle.DoesNotExist:
        raise BundleNotFoundError("Bundle not found")

    now = timezone.now()
    released = LogEntry.objects.filter(bundle=bundle, user=user).update(
        bundle=None,
        updated_at=now,
    )
    bundle.delete()

    plan = plan_consolidation(
        [EntrySnapshot.from_entry(entry) for entry in _locked_unbundled_entries(user)],
        max_hours=getattr(settings, 'LOGBOOK_MAX_HOURS', MAX_ENTRY_HOURS),
        max_note_length=getattr(settings, 'LOGBOOK_MAX_NOTE_LENGTH', MAX_NOTE_LENGTH),
    )
    for entry_id, hours in plan.updates.items():
        fields = {'hours': hours, 'updated_at': now}
        if entry_id in plan.notes:
            fields['note'] = plan.notes[entry_id]
        LogEntry.objects.filter(id=entry_id, user=user).update(**fields)
    if plan.deletions:
        LogEntry.objects.filter(id__in=plan.deletions, user=user).delete()

    logger.info(
        "Deleted bundle %s for user %s: released %d entries, merged %d fragments",
        bundle_id, user.id, released, plan.merged_count,
    )
    return plan


def get_bundle_for_user(*, user: User, bundle_id: UUID) -> Bundle:
    """
    Retrieve one of the user's bundles with its entries.

    Raises:
        BundleNotFoundError: If the bundle doesn't exist for this user
    """
    try:
        return Bundle.objects.prefetch_related('log_entries').get(id=bundle_id, user=user)
    except Bundle.DoesNotExist:
        raise BundleNotFoundError("Bundle not found")


def get_user_bundles(*, user: User, status: Optional[str] = None) -> QuerySet:
    """User's bundles, newest filing date first, optionally by status."""
    queryset = Bundle.objects.filter(user=user).prefetch_related('log_entries')
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-filed_date', '-created_at')


@transaction.atomic
def set_bundle_status(*, user: User, bundle_id: UUID, status: str) -> Bundle:
    """
    Set the payment status of one of the user's bundles.

    Raises:
        InvalidBundleStatusError: If status is not submitted/paid
        BundleNotFoundError: If the bundle doesn't exist for this user
    """
    if status not in BundleStatus.values:
        raise InvalidBundleStatusError(f"Invalid bundle status: {status}")

    try:
        bundle = Bundle.objects.select_for_update().get(id=bundle_id, user=user)
    except Bundle.DoesNotExist:
        raise BundleNotFoundError("Bundle not found")

    if bundle.status != status:
        bundle.status = status
        bundle.save(update_fields=['status', 'updated_at'])
        logger.info("Bundle %s marked %s", bundle.id, status)
    return bundle


@transaction.atomic
def toggle_bundle_paid(*, user: User, bundle_id: UUID) -> Bundle:
    """Flip a bundle between submitted and paid."""
    try:
        bundle = Bundle.objects.select_for_update().get(id=bundle_id, user=user)
    except Bundle.DoesNotExist:
        raise BundleNotFoundError("Bundle not found")

    bundle.status = BundleStatus.SUBMITTED if bundle.is_paid else BundleStatus.PAID
    bundle.save(update_fields=['status', 'updated_at'])
    logger.info("Bundle %s toggled to %s", bundle.id, bundle.status)
    return bundle
