"""Merge scheduled events, logged hours and pending hour logs into one calendar.

Pending ("optimistic") hour logs are entries a coach has just submitted and
that the client shows before the authoritative read includes them. They are
matched against authoritative hour-log entries by ``(date, hours, is_hour_log)``
and dropped once a match appears.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from orgdesk.core.database.entities.calendar import CoachDailyReport
from orgdesk.core.database.base import utc_now
from orgdesk.core.logging_config import get_logger
from orgdesk.core.models.io.calendar import CalendarEventView

logger = get_logger(__name__)

HOUR_LOG_COLOR = "#10B981"
HOUR_LOG_TYPE = "Hour Log"
DEFAULT_EVENT_COLOR = "#3B82F6"
ALL_DAY = "All Day"
UNKNOWN_LOCATION = "Unknown location"


def format_hours(hours: float) -> str:
    """Render hours the way they appear in titles: ``8`` or ``7.5``."""
    return f"{hours:g}"


@dataclass
class HourLogEntry:
    """An hour log submitted by a coach but not yet seen in an authoritative read."""

    id: str
    date: date
    hours: float
    activity: str
    location: str
    notes: Optional[str] = None
    coach_name: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)


def hour_log_to_event(
    report: CoachDailyReport,
    location_name: Optional[str],
    coach_initials: Optional[str] = None,
) -> CalendarEventView:
    """Display a persisted hour log as an all-day calendar entry."""
    hours = format_hours(report.hours_worked)
    location = location_name or UNKNOWN_LOCATION
    description = f"{hours} hours - {report.activity_type or 'Work'} at {location}"
    if report.notes:
        description += f"\n\nNotes: {report.notes}"
    return CalendarEventView(
        id=f"hour-log-{report.id}",
        title=f"{coach_initials or 'Coach'} {hours}h",
        description=description,
        event_date=report.report_date,
        start_time=ALL_DAY,
        end_time=ALL_DAY,
        event_type=HOUR_LOG_TYPE,
        color=HOUR_LOG_COLOR,
        status="completed",
        coach_id=report.coach_id,
        location=location,
        duration_minutes=round(report.hours_worked * 60),
        hours=report.hours_worked,
        is_hour_log=True,
    )


def optimistic_to_event(entry: HourLogEntry) -> CalendarEventView:
    """Display a pending hour log as a working-day calendar entry."""
    hours = format_hours(entry.hours)
    return CalendarEventView(
        id=f"hour-log-{entry.id}",
        title=f"{hours}h - {entry.activity}",
        description=entry.notes or f"Logged {hours} hours at {entry.location}",
        event_date=entry.date,
        start_time="09:00",
        end_time="17:00",
        event_type=HOUR_LOG_TYPE,
        color=HOUR_LOG_COLOR,
        status="completed",
        coach_name=entry.coach_name,
        location=entry.location,
        duration_minutes=round(entry.hours * 60),
        hours=entry.hours,
        is_hour_log=True,
    )


def _match_keys(events: Iterable[CalendarEventView]) -> set[Tuple[date, float, bool]]:
    return {(e.event_date, float(e.hours), True) for e in events if e.is_hour_log and e.hours is not None}


def _entry_key(entry: HourLogEntry) -> Tuple[date, float, bool]:
    return (entry.date, float(entry.hours), True)


def _sort_key(event: CalendarEventView) -> Tuple[date, int, str]:
    return (event.event_date, 0 if event.start_time == ALL_DAY else 1, event.start_time)


def merge_calendar(
    events: Sequence[CalendarEventView],
    hour_logs: Sequence[CalendarEventView] = (),
    optimistic: Sequence[HourLogEntry] = (),
) -> List[CalendarEventView]:
    """Combine the three sources into one list ordered by date and start time.

    Pending entries already matched by an authoritative hour log are left out.
    """
    authoritative = [*events, *hour_logs]
    confirmed = _match_keys(authoritative)
    pending = [optimistic_to_event(e) for e in optimistic if _entry_key(e) not in confirmed]
    return sorted([*authoritative, *pending], key=_sort_key)


class OptimisticHourLedger:
    """Pending hour logs per coach.

    A coach has at most one pending entry per date; adding another entry for
    the same date replaces it. Entries older than ``max_age`` are dropped on
    every add, so coaches who never read the calendar do not accumulate them.
    """

    def __init__(self, max_age: timedelta = timedelta(days=1)) -> None:
        self.max_age = max_age
        self._entries: Dict[str, List[HourLogEntry]] = {}

    def add(self, coach_id: str, entry: HourLogEntry) -> None:
        self.prune()
        kept = [e for e in self._entries.get(coach_id, []) if e.date != entry.date]
        kept.append(entry)
        self._entries[coach_id] = kept

    def remove(self, coach_id: str, entry_id: str) -> bool:
        entries = self._entries.get(coach_id, [])
        kept = [e for e in entries if e.id != entry_id]
        self._store(coach_id, kept)
        return len(kept) != len(entries)

    def prune(self, now: Optional[datetime] = None) -> int:
        """Drop entries older than ``max_age`` and return how many were dropped."""
        cutoff = (now or utc_now()) - self.max_age
        dropped = 0
        for coach_id in list(self._entries):
            entries = self._entries[coach_id]
            kept = [e for e in entries if e.timestamp >= cutoff]
            dropped += len(entries) - len(kept)
            self._store(coach_id, kept)
        return dropped

    def coach_ids(self) -> List[str]:
        return list(self._entries)

    def _store(self, coach_id: str, entries: List[HourLogEntry]) -> None:
        if entries:
            self._entries[coach_id] = entries
        else:
            self._entries.pop(coach_id, None)

    def clear(self, coach_id: Optional[str] = None) -> None:
        if coach_id is None:
            self._entries.clear()
        else:
            self._entries.pop(coach_id, None)

    def entries(self, coach_id: str) -> List[HourLogEntry]:
        return list(self._entries.get(coach_id, []))

    def reconcile(self, coach_id: str, events: Iterable[CalendarEventView]) -> List[HourLogEntry]:
        """Drop pending entries now present in an authoritative read.

        Args:
            coach_id: Coach whose pending entries are checked
            events: Authoritative calendar entries

        Returns:
            The entries removed by this call; empty when nothing matched
        """
        confirmed = _match_keys(events)
        entries = self._entries.get(coach_id, [])
        removed = [e for e in entries if _entry_key(e) in confirmed]
        if removed:
            self._store(coach_id, [e for e in entries if _entry_key(e) not in confirmed])
            logger.debug(f"Reconciled {len(removed)} pending hour logs for coach '{coach_id}'")
        return removed
