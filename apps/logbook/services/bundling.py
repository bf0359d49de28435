"""
Bundling core - pure allocation and consolidation planning.

Nothing in this module touches the database. Both planners take an ordered,
immutable sequence of ``EntrySnapshot`` objects (oldest ``start`` first) and
return a plan describing the rows to update, create and delete. The
``bundle_management`` service applies those plans inside one transaction.

Hours are handled as two-place ``Decimal`` values and re-cleaned after each
arithmetic step, so an allocated bundle always totals exactly the quota.

Example:
    Allocating one 5-hour entry::

        plan = plan_bundle([EntrySnapshot(id=a, hours=Decimal('5.00'), ...)])
        plan.assignments   # [(a, Decimal('3.00'))]
        plan.remainder     # Remainder(source_id=a, hours=Decimal('2.00'), ...)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence
from uuid import UUID


BUNDLE_HOURS = Decimal('3.00')
HOURS_QUANTUM = Decimal('0.01')
NOTE_BULLET = '• '
NOTE_SEPARATOR = '; '
MAX_ENTRY_HOURS = Decimal('24.00')
MAX_NOTE_LENGTH = 500


def clean_hours(value) -> Decimal:
    """Round a number of hours half-up to two decimal places."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(HOURS_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class EntrySnapshot:
    """Read-only view of a log entry as seen by the planners."""

    id: UUID
    hours: Decimal
    start: datetime
    end: datetime
    note: str = ''

    @classmethod
    def from_entry(cls, entry) -> 'EntrySnapshot':
        return cls(
            id=entry.id,
            hours=clean_hours(entry.hours),
            start=entry.start,
            end=entry.end,
            note=entry.note or '',
        )


@dataclass(frozen=True)
class Remainder:
    """Unbundled leftover created when the boundary entry is split."""

    source_id: UUID
    hours: Decimal
    start: datetime
    end: datetime
    note: str = ''


@dataclass(frozen=True)
class BundlePlan:
    assignments: list = field(default_factory=list)  # [(entry_id, hours)]
    remainder: Optional[Remainder] = None
    notes: Optional[str] = None

    @property
    def total_hours(self) -> Decimal:
        return clean_hours(sum((hours for _, hours in self.assignments), Decimal('0.00')))

    @property
    def split_entry_id(self) -> Optional[UUID]:
        return self.remainder.source_id if self.remainder else None


@dataclass(frozen=True)
class ConsolidationPlan:
    updates: dict = field(default_factory=dict)  # {surviving_id: new_hours}
    notes: dict = field(default_factory=dict)  # {surviving_id: joined_note}
    deletions: list = field(default_factory=list)

    @property
    def merged_count(self) -> int:
        return len(self.deletions)

    def is_empty(self) -> bool:
        return not self.updates and not self.notes and not self.deletions


def unbundled_total(entries: Iterable[EntrySnapshot]) -> Decimal:
    return clean_hours(sum((e.hours for e in entries), Decimal('0.00')))


def join_notes(notes: Iterable[str]) -> Optional[str]:
    """Bullet-join non-blank notes, one per line; None if there are none."""
    bullets = [f"{NOTE_BULLET}{note.strip()}" for note in notes if note and note.strip()]
    return '\n'.join(bullets) if bullets else None


def plan_bundle(
    entries: Sequence[EntrySnapshot],
    quota: Decimal = BUNDLE_HOURS,
) -> Optional[BundlePlan]:
    """
    Greedily allocate the oldest unbundled hours into one bundle.

    Entries are consumed in the given order until ``quota`` hours are
    covered. An entry that fits is assigned whole with its hours unchanged;
    the entry that overshoots is cut down to the hours still needed and the
    rest becomes a ``Remainder`` carrying the same start, end and note.

    Args:
        entries: Unbundled entries ordered by ``start`` ascending.
        quota: Hours per bundle.

    Returns:
        BundlePlan, or None when the entries total less than ``quota``.
    """
    quota = clean_hours(quota)
    if unbundled_total(entries) < quota:
        return None

    needed = quota
    assignments = []
    contributing_notes = []
    remainder = None

    for entry in entries:
        if needed <= 0:
            break
        if entry.hours <= needed:
            assignments.append((entry.id, entry.hours))
            needed = clean_hours(needed - entry.hours)
        else:
            assignments.append((entry.id, needed))
            remainder = Remainder(
                source_id=entry.id,
                hours=clean_hours(entry.hours - needed),
                start=entry.start,
                end=entry.end,
                note=entry.note,
            )
            needed = Decimal('0.00')
        contributing_notes.append(entry.note)

    return BundlePlan(
        assignments=assignments,
        remainder=remainder,
        notes=join_notes(contributing_notes),
    )


def merge_notes(kept: str, incoming: str) -> str:
    """Append ``incoming`` to ``kept`` unless it is blank or already present."""
    kept, incoming = (kept or '').strip(), (incoming or '').strip()
    if not incoming or incoming in kept.split(NOTE_SEPARATOR):
        return kept
    if not kept:
        return incoming
    return f"{kept}{NOTE_SEPARATOR}{incoming}"


def plan_consolidation(
    entries: Sequence[EntrySnapshot],
    max_hours: Decimal = MAX_ENTRY_HOURS,
    max_note_length: int = MAX_NOTE_LENGTH,
) -> ConsolidationPlan:
    """
    Merge adjacent fragments that share exactly the same start and end.

    Fragments produced by splitting one entry keep the original timestamps,
    so after a bundle is released they sit next to each other in ``start``
    order. The later fragment is folded into the earlier one and the scan
    stays on the survivor, so any number of fragments collapse into one.

    Distinct manual entries logged on the same day also share timestamps.
    Their notes are joined onto the survivor, and a merge that would exceed
    ``max_hours`` or ``max_note_length`` is skipped so both rows stay valid.
    """
    survivors = []  # [EntrySnapshot] with merged hours and note
    updates = {}
    notes = {}
    deletions = []

    for entry in entries:
        if survivors:
            last = survivors[-1]
            if entry.start == last.start and entry.end == last.end:
                merged_hours = clean_hours(last.hours + entry.hours)
                merged_note = merge_notes(last.note, entry.note)
                if merged_hours <= max_hours and len(merged_note) <= max_note_length:
                    survivors[-1] = replace(last, hours=merged_hours, note=merged_note)
                    updates[last.id] = merged_hours
                    if merged_note != last.note:
                        notes[last.id] = merged_note
                    deletions.append(entry.id)
                    continue
        survivors.append(entry)

    return ConsolidationPlan(updates=updates, notes=notes, deletions=deletions)
