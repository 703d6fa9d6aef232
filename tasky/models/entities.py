from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Sequence
from uuid import UUID


class Weekday(str, Enum):
    MON = "Mon"
    TUE = "Tue"
    WED = "Wed"
    THU = "Thu"
    FRI = "Fri"
    SAT = "Sat"
    SUN = "Sun"

    @classmethod
    def parse(cls, name: Optional[str]) -> Optional["Weekday"]:
        """Match "Monday", "mon" or "MON" to MON; None for blank or unknown names."""
        if name is None:
            return None
        key = name.strip()[:3].lower()
        for day in cls:
            if day.value.lower() == key:
                return day
        return None

    @classmethod
    def of(cls, d: date) -> "Weekday":
        return list(cls)[d.weekday()]


WORKWEEK = (Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI)


@dataclass(frozen=True)
class Task:
    id: UUID
    created_at: datetime
    due_date: Optional[date] = None
    is_completed: bool = False


@dataclass(frozen=True)
class ScheduleConfig:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    daily_capacity: int = 5
    working_days: Optional[Sequence[Optional[str]]] = None  # day names, e.g. ["Mon", "Tuesday"]


@dataclass
class DayPlan:
    date: date
    task_ids: List[UUID] = field(default_factory=list)


@dataclass(frozen=True)
class ScheduleResult:
    project_id: UUID
    generated_at: datetime
    days: List[DayPlan]


@dataclass
class TodoItem:
    id: UUID
    description: str
    created_at_utc: datetime
    is_completed: bool = False
