"""
Example: Planning a project's backlog with the day-bucket scheduler

The scheduler is a plain function, so it can be used without the API or a
database. This plans six tasks over two working weeks, three per day, with
Fridays off.
"""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from tasky.engine.scheduler import build_schedule
from tasky.models.entities import ScheduleConfig, Task


now = datetime.now(timezone.utc)
start = date(2025, 3, 3)  # a Monday

# 1. Build a task snapshot (normally loaded by ProjectRepository.task_snapshot)
tasks = [
    Task(id=uuid4(), created_at=now, due_date=start + timedelta(days=1)),
    Task(id=uuid4(), created_at=now, due_date=start),
    Task(id=uuid4(), created_at=now, due_date=start + timedelta(days=8)),
    Task(id=uuid4(), created_at=now),
    Task(id=uuid4(), created_at=now),
    Task(id=uuid4(), created_at=now, is_completed=True),  # skipped
]

# 2. Describe the span and capacity
config = ScheduleConfig(
    start_date=start,
    end_date=start + timedelta(days=13),
    daily_capacity=3,
    working_days=["Monday", "Tuesday", "Wednesday", "Thursday"],
)

# 3. Plan
result = build_schedule(uuid4(), tasks, config)

for day in result.days:
    print(day.date.strftime("%a %Y-%m-%d"), [str(tid)[:8] for tid in day.task_ids])
