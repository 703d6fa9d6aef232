"""
Day-Bucket Scheduler

Distributes a project's pending tasks across working days. Tasks are taken in
urgency order (due date first, undated tasks last, creation time as the
tie-break) and packed into each working day of the span up to the daily
capacity. Whatever is left when the span runs out is appended to the last
working day so that no task is dropped.

Time Complexity: O(n log n + d) where:
    n = number of tasks
    d = number of calendar days in the span

The scheduler is a pure function: no I/O, no shared state. The wall clock is
read once per call unless `now` is supplied.
"""

from collections import deque
from datetime import date, datetime, timedelta, timezone
from typing import Deque, FrozenSet, Iterable, List, Optional, Sequence
from uuid import UUID

from tasky.models.entities import WORKWEEK, DayPlan, ScheduleConfig, ScheduleResult, Task, Weekday

DEFAULT_SPAN_DAYS = 7


def normalize_working_days(names: Optional[Sequence[Optional[str]]]) -> FrozenSet[Weekday]:
    """
    Build the working-day set from free-form day names.

    Absent or empty input falls back to Monday-Friday. Blank and unrecognised
    names are ignored, so a non-empty input made only of unknown names yields
    an empty set.
    """
    if not names:
        return frozenset(WORKWEEK)
    days = (Weekday.parse(name) for name in names)
    return frozenset(day for day in days if day is not None)


def as_date(value: Optional[date]) -> Optional[date]:
    """Drop the time part of a datetime; plain dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_working_day(d: date, working_days: FrozenSet[Weekday]) -> bool:
    return Weekday.of(d) in working_days


def pending_in_priority_order(tasks: Iterable[Task]) -> List[Task]:
    """
    Filter out completed tasks and sort the rest by urgency.

    Args:
        tasks: All tasks of a project

    Returns:
        Incomplete tasks ordered by due date ascending (undated last), then
        by creation time ascending
    """
    pending = [t for t in tasks if not t.is_completed]
    return sorted(pending, key=lambda t: (t.due_date is None, t.due_date or date.max, t.created_at))


def _add_days(d: date, days: int) -> date:
    """`d + days`, saturating at date.max."""
    if days >= (date.max - d).days:
        return date.max
    return d + timedelta(days=days)


def resolve_end_date(start: date, end: Optional[date], pending: Sequence[Task], span_days: int = DEFAULT_SPAN_DAYS) -> date:
    """
    Compute the last calendar day of the schedule span.

    An explicit end date wins. Otherwise the latest due date among pending
    tasks is used, or `start + span_days` when no task is dated. The result
    is never earlier than `start`.
    """
    if end is None:
        due_dates = [t.due_date for t in pending if t.due_date is not None]
        end = max(due_dates) if due_dates else _add_days(start, span_days)
    return max(end, start)


def build_schedule(
    project_id: UUID,
    tasks: Iterable[Task],
    config: ScheduleConfig,
    now: Optional[datetime] = None,
    span_days: int = DEFAULT_SPAN_DAYS,
) -> ScheduleResult:
    """
    Assign every pending task of a project to a working day.

    Args:
        project_id: Project the tasks belong to
        tasks: Task snapshot for the project (completed tasks are skipped)
        config: Span, capacity and working-day settings
        now: Timestamp used for `generated_at` and the default start date
        span_days: Span length used when neither an end date nor any due date exists

    Returns:
        ScheduleResult with one DayPlan per working day that received tasks.
        Every DayPlan except the last holds at most `daily_capacity` tasks.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    pending = pending_in_priority_order(tasks)
    if not pending:
        return ScheduleResult(project_id=project_id, generated_at=now, days=[])

    capacity = max(1, config.daily_capacity)
    working_days = normalize_working_days(config.working_days)
    today = now.astimezone(timezone.utc).date() if now.tzinfo else now.date()
    start = as_date(config.start_date) or today
    end = resolve_end_date(start, as_date(config.end_date), pending, span_days)

    # No working day can ever match, so nothing is placed
    if not working_days:
        return ScheduleResult(project_id=project_id, generated_at=now, days=[])

    queue: Deque[UUID] = deque(t.id for t in pending)
    days: List[DayPlan] = []
    cursor = start

    while cursor <= end and queue:
        if is_working_day(cursor, working_days):
            bucket = DayPlan(date=cursor)
            while queue and len(bucket.task_ids) < capacity:
                bucket.task_ids.append(queue.popleft())
            days.append(bucket)
        if cursor == date.max:
            break
        cursor += timedelta(days=1)

    # Leftovers land on the last working day; with no working day at all they stay unplaced.
    if queue and days:
        days[-1].task_ids.extend(queue)

    return ScheduleResult(project_id=project_id, generated_at=now, days=days)
