"""
schemas.py — Domain records shared by the metrics engine, the dashboard
controller and the routes. Rows coming back from either store are parsed
into these models once, so every date below is a canonical calendar date.
"""

import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config import DEFAULT_HABIT_COLOR


class HabitStatus(str, Enum):
    COMPLETED = "completed"
    MISSED = "missed"
    SKIPPED = "skipped"


class ViewName(str, Enum):
    OVERVIEW = "overview"
    DAILY_FOCUS = "daily-focus"
    WEEKLY = "weekly"
    BADGES = "badges"


class Record(BaseModel):
    # Supabase hands out uuid strings, the local store integer keys
    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")


class Habit(Record):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    color: str = DEFAULT_HABIT_COLOR
    created_at: Optional[datetime.datetime] = None


class HabitLog(Record):
    id: Optional[str] = None
    habit_id: str
    user_id: Optional[str] = None
    date: datetime.date
    status: HabitStatus


class Task(Record):
    id: str
    user_id: str
    title: str
    date: datetime.date
    completed: bool = False
    created_at: Optional[datetime.datetime] = None


class Badge(BaseModel):
    id: str
    title: str
    description: str
    earned: Optional[bool] = None  # None → not computed yet

    @property
    def state(self) -> str:
        if self.earned is None:
            return "not_computed"
        return "earned" if self.earned else "locked"


class DaySummary(BaseModel):
    date: datetime.date
    completed: int
    total: int
    percentage: int


class WeeklyAggregate(BaseModel):
    week_start: datetime.date
    days: list[DaySummary] = Field(default_factory=list)
    completed: int = 0
    total: int = 0
    percentage: int = 0
