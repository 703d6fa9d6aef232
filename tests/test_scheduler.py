from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from tasky.engine.scheduler import build_schedule, pending_in_priority_order, resolve_end_date
from tasky.models.entities import ScheduleConfig, Weekday

from conftest import MONDAY, NOW


def flatten(result):
    return [tid for day in result.days for tid in day.task_ids]


class TestWorkedExamples:
    """The reference scenarios for capacity and overflow."""

    def test_capacity_one_two_working_days(self, three_tasks):
        """A fills Monday, B fills Tuesday, C overflows onto Tuesday."""
        a, b, c = three_tasks
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=1), daily_capacity=1)
        result = build_schedule(uuid4(), [c, b, a], config, now=NOW)

        assert [d.date for d in result.days] == [MONDAY, MONDAY + timedelta(days=1)]
        assert result.days[0].task_ids == [a.id]
        assert result.days[1].task_ids == [b.id, c.id]

    def test_capacity_two_single_working_day(self, three_tasks):
        """Span of one day: A and B at capacity, C appended as overflow."""
        a, b, c = three_tasks
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY, daily_capacity=2)
        result = build_schedule(uuid4(), [a, b, c], config, now=NOW)

        assert len(result.days) == 1
        assert result.days[0].date == MONDAY
        assert result.days[0].task_ids == [a.id, b.id, c.id]


class TestOrdering:
    """Priority order: due date ascending, undated last, creation time tie-break."""

    def test_due_date_then_created_at(self, make_task):
        late = make_task(due_date=MONDAY + timedelta(days=3))
        undated_old = make_task()
        early_new = make_task(due_date=MONDAY)
        undated_new = make_task()
        early_old = make_task(due_date=MONDAY, created_at=NOW - timedelta(days=90))

        ordered = pending_in_priority_order([late, undated_old, early_new, undated_new, early_old])
        assert [t.id for t in ordered] == [early_old.id, early_new.id, late.id, undated_old.id, undated_new.id]

    def test_output_preserves_priority_order(self, make_task):
        tasks = [make_task(due_date=MONDAY + timedelta(days=i % 4)) for i in range(12)] + [make_task() for _ in range(3)]
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=13), daily_capacity=2)
        result = build_schedule(uuid4(), list(reversed(tasks)), config, now=NOW)

        expected = [t.id for t in pending_in_priority_order(tasks)]
        assert flatten(result) == expected

    def test_completed_tasks_are_skipped(self, make_task):
        done = make_task(due_date=MONDAY, is_completed=True)
        open_task = make_task(due_date=MONDAY)
        result = build_schedule(uuid4(), [done, open_task], ScheduleConfig(start_date=MONDAY), now=NOW)

        assert flatten(result) == [open_task.id]


class TestInvariants:
    """Properties that hold for any input."""

    def test_no_loss_no_duplicates(self, make_task):
        tasks = [make_task(due_date=MONDAY + timedelta(days=i)) for i in range(9)]
        tasks += [make_task(is_completed=True) for _ in range(3)]
        tasks += [make_task() for _ in range(4)]
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=3), daily_capacity=2)
        result = build_schedule(uuid4(), tasks, config, now=NOW)

        placed = flatten(result)
        pending_ids = {t.id for t in tasks if not t.is_completed}
        assert len(placed) == len(set(placed))
        assert set(placed) == pending_ids

    def test_capacity_bound_except_last_day(self, make_task):
        tasks = [make_task() for _ in range(20)]
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=6), daily_capacity=3)
        result = build_schedule(uuid4(), tasks, config, now=NOW)

        # Mon-Fri hold 3 each, the 5 leftovers go onto Friday
        assert [len(d.task_ids) for d in result.days] == [3, 3, 3, 3, 8]
        assert all(len(d.task_ids) <= 3 for d in result.days[:-1])

    def test_only_working_days_appear(self, make_task):
        tasks = [make_task() for _ in range(10)]
        config = ScheduleConfig(
            start_date=MONDAY,
            end_date=MONDAY + timedelta(days=13),
            daily_capacity=1,
            working_days=["Sat", "sunday"],
        )
        result = build_schedule(uuid4(), tasks, config, now=NOW)

        assert result.days
        assert {Weekday.of(d.date) for d in result.days} <= {Weekday.SAT, Weekday.SUN}

    def test_stops_when_queue_empties(self, make_task):
        tasks = [make_task() for _ in range(3)]
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=30), daily_capacity=2)
        result = build_schedule(uuid4(), tasks, config, now=NOW)

        assert [d.date for d in result.days] == [MONDAY, MONDAY + timedelta(days=1)]
        assert [len(d.task_ids) for d in result.days] == [2, 1]

    def test_generated_at_is_supplied_now(self, make_task):
        project_id = uuid4()
        result = build_schedule(project_id, [make_task()], ScheduleConfig(start_date=MONDAY), now=NOW)
        assert result.project_id == project_id
        assert result.generated_at == NOW

    def test_deterministic_for_fixed_now(self, make_task):
        tasks = [make_task(due_date=MONDAY + timedelta(days=i % 3)) for i in range(8)]
        config = ScheduleConfig(daily_capacity=2)
        first = build_schedule(uuid4(), tasks, config, now=NOW)
        second = build_schedule(first.project_id, list(reversed(tasks)), config, now=NOW)
        assert first.days == second.days


class TestDefaults:
    """Normalisation of missing or out-of-range configuration."""

    def test_empty_project_returns_no_days(self, make_task):
        done = [make_task(is_completed=True) for _ in range(3)]
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=10), daily_capacity=0)
        assert build_schedule(uuid4(), done, config, now=NOW).days == []
        assert build_schedule(uuid4(), [], ScheduleConfig(), now=NOW).days == []

    def test_empty_config_matches_explicit_defaults(self, make_task):
        tasks = [make_task() for _ in range(17)]
        implicit = build_schedule(uuid4(), tasks, ScheduleConfig(), now=NOW)
        explicit = build_schedule(
            implicit.project_id,
            tasks,
            ScheduleConfig(
                start_date=NOW.date(),
                daily_capacity=5,
                working_days=["Mon", "Tue", "Wed", "Thu", "Fri"],
            ),
            now=NOW,
        )
        assert implicit.days == explicit.days
        assert implicit.days[0].date == NOW.date()

    def test_default_start_is_utc_today(self, make_task):
        # 23:30 on Sunday in UTC-5 is already Monday in UTC
        late_sunday = datetime(2025, 1, 6, 4, 30, tzinfo=timezone.utc)
        result = build_schedule(uuid4(), [make_task()], ScheduleConfig(), now=late_sunday)
        assert result.days[0].date == MONDAY

    def test_non_positive_capacity_collapses_to_one(self, make_task):
        tasks = [make_task() for _ in range(3)]
        for capacity in (0, -4):
            config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=4), daily_capacity=capacity)
            result = build_schedule(uuid4(), tasks, config, now=NOW)
            assert [len(d.task_ids) for d in result.days] == [1, 1, 1]

    def test_empty_working_days_falls_back_to_workweek(self, make_task):
        tasks = [make_task() for _ in range(7)]
        saturday = MONDAY + timedelta(days=5)
        config = ScheduleConfig(start_date=saturday, end_date=saturday + timedelta(days=9), daily_capacity=1, working_days=[])
        result = build_schedule(uuid4(), tasks, config, now=NOW)

        assert result.days[0].date == saturday + timedelta(days=2)
        assert all(Weekday.of(d.date) not in (Weekday.SAT, Weekday.SUN) for d in result.days)

    def test_end_date_from_latest_due_date(self, make_task):
        tasks = [make_task(due_date=MONDAY + timedelta(days=2)), make_task(due_date=MONDAY + timedelta(days=1))]
        assert resolve_end_date(MONDAY, None, tasks) == MONDAY + timedelta(days=2)

    def test_end_date_defaults_to_week_after_start(self, make_task):
        assert resolve_end_date(MONDAY, None, [make_task()]) == MONDAY + timedelta(days=7)
        assert resolve_end_date(MONDAY, None, [make_task()], span_days=3) == MONDAY + timedelta(days=3)

    def test_end_before_start_is_clamped(self, make_task):
        tasks = [make_task() for _ in range(4)]
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY - timedelta(days=5), daily_capacity=1)
        result = build_schedule(uuid4(), tasks, config, now=NOW)

        assert len(result.days) == 1
        assert result.days[0].date == MONDAY
        assert len(result.days[0].task_ids) == 4

    def test_overdue_tasks_clamp_to_start(self, make_task):
        """Every due date in the past: span collapses to the start day."""
        tasks = [make_task(due_date=MONDAY - timedelta(days=10)) for _ in range(3)]
        result = build_schedule(uuid4(), tasks, ScheduleConfig(start_date=MONDAY, daily_capacity=1), now=NOW)

        assert [d.date for d in result.days] == [MONDAY]
        assert len(result.days[0].task_ids) == 3

    def test_datetime_bounds_are_truncated(self, make_task):
        config = ScheduleConfig(
            start_date=datetime(2025, 1, 6, 18, 45),
            end_date=datetime(2025, 1, 7, 1, 0),
            daily_capacity=1,
        )
        result = build_schedule(uuid4(), [make_task(), make_task()], config, now=NOW)
        assert [d.date for d in result.days] == [MONDAY, MONDAY + timedelta(days=1)]

    def test_default_span_stops_at_last_representable_date(self, make_task):
        start = date(9999, 12, 28)
        assert resolve_end_date(start, None, [make_task()]) == date.max

        result = build_schedule(uuid4(), [make_task(), make_task()], ScheduleConfig(start_date=start), now=NOW)
        assert [d.date for d in result.days] == [start]

    def test_span_ending_on_date_max_overflows(self, make_task):
        a, b, c = [make_task() for _ in range(3)]
        config = ScheduleConfig(
            start_date=date(9999, 12, 30),
            end_date=date.max,
            daily_capacity=1,
            working_days=[d.value for d in Weekday],
        )
        result = build_schedule(uuid4(), [a, b, c], config, now=NOW)

        assert [d.date for d in result.days] == [date(9999, 12, 30), date.max]
        assert result.days[-1].task_ids == [b.id, c.id]

    def test_non_working_date_max_ends_walk(self, make_task):
        config = ScheduleConfig(start_date=date(9999, 12, 30), end_date=date.max, working_days=["Sat"])
        assert build_schedule(uuid4(), [make_task()], config, now=NOW).days == []


class TestNoWorkingDays:
    """Spans without a single working day leave tasks unplaced."""

    def test_weekend_span_with_workweek(self, make_task):
        saturday = MONDAY + timedelta(days=5)
        config = ScheduleConfig(start_date=saturday, end_date=saturday + timedelta(days=1))
        result = build_schedule(uuid4(), [make_task(), make_task()], config, now=NOW)
        assert result.days == []

    def test_only_unknown_day_names(self, make_task):
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=13), working_days=["xx", "  "])
        result = build_schedule(uuid4(), [make_task()], config, now=NOW)
        assert result.days == []

    def test_full_calendar_span_without_working_days(self, make_task):
        config = ScheduleConfig(start_date=date.min, end_date=date.max, working_days=["xx"])
        result = build_schedule(uuid4(), [make_task(), make_task()], config, now=NOW)
        assert result.days == []

    def test_null_entries_are_ignored(self, make_task):
        config = ScheduleConfig(start_date=MONDAY, end_date=MONDAY + timedelta(days=6), working_days=[None, "Wed"])
        result = build_schedule(uuid4(), [make_task()], config, now=NOW)
        assert [d.date for d in result.days] == [MONDAY + timedelta(days=2)]


class TestWeekday:
    """Day-name parsing."""

    def test_parse_variants(self):
        for name in ("Mon", "mon", "MON", "Monday", "  monday "):
            assert Weekday.parse(name) is Weekday.MON
        assert Weekday.parse("THURSDAY") is Weekday.THU

    def test_parse_rejects_unknown(self):
        for name in (None, "", "  ", "Mo", "xyz", "Funday"):
            assert Weekday.parse(name) is None

    def test_of_date(self):
        assert Weekday.of(MONDAY) is Weekday.MON
        assert Weekday.of(date(2025, 1, 12)) is Weekday.SUN
