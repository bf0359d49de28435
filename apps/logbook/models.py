from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Sum
from decimal import Decimal
import uuid


class BundleStatus(models.TextChoices):
    SUBMITTED = 'submitted', 'Submitted'
    PAID = 'paid', 'Paid'


class Bundle(models.Model):
    """
    Filed RMP: exactly one quota (3.0 hrs) of training time.

    Created only by the bundle allocator; deleting it releases its log
    entries back to the unbundled pool.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='bundles'
    )

    # Calendar date the RMP was filed (no time component)
    filed_date = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=BundleStatus.choices,
        default=BundleStatus.SUBMITTED
    )

    # Bullet list of the bundled entries' notes, null when none had notes
    notes = models.TextField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bundles'
        indexes = [
            models.Index(fields=['user'], name='bundles_user_idx'),
            models.Index(fields=['user', 'status'], name='bundles_user_status_idx'),
            models.Index(fields=['filed_date'], name='bundles_filed_date_idx'),
        ]
        ordering = ['-filed_date', '-created_at']

    def __str__(self):
        return f"RMP filed {self.filed_date} ({self.status})"

    @property
    def is_paid(self):
        return self.status == BundleStatus.PAID

    def total_hours(self):
        """Sum of hours of the log entries locked into this bundle."""
        total = self.log_entries.aggregate(total=Sum('hours'))['total']
        return total or Decimal('0.00')


class LogEntry(models.Model):
    """
    One training-time record.

    Timed entries have ``end > start``; manual entries use ``start == end``
    and carry their duration only in ``hours``. An entry with a bundle is
    locked and may only be released by deleting that bundle.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='log_entries'
    )

    hours = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[
            MinValueValidator(Decimal('0.00')),
            MaxValueValidator(Decimal('24.00')),
        ]
    )
    start = models.DateTimeField()
    end = models.DateTimeField()
    note = models.CharField(max_length=500, blank=True)

    # Null means unbundled; deleting the bundle only clears the reference
    bundle = models.ForeignKey(
        Bundle,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='log_entries'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'log_entries'
        verbose_name_plural = 'log entries'
        indexes = [
            models.Index(fields=['user'], name='log_entries_user_idx'),
            models.Index(fields=['user', 'bundle'], name='log_entries_user_bundle_idx'),
            models.Index(fields=['start'], name='log_entries_start_idx'),
        ]
        ordering = ['start', 'created_at', 'id']

    def __str__(self):
        return f"{self.hours}h on {self.start:%Y-%m-%d}"

    @property
    def is_locked(self):
        return self.bundle_id is not None

    @property
    def is_manual(self):
        return self.start == self.end
