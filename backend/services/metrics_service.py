"""
metrics_service.py — Progress metrics
Pure aggregation over the loaded habits, logs and tasks: today's progress,
streaks (backward-looking), trailing 30-day rate, weekly grid and badges.
Nothing here reads the clock; every caller passes the reference date.
"""

import math
from collections.abc import Iterable
from datetime import date, timedelta

from schemas import Badge, DaySummary, Habit, HabitLog, HabitStatus, Task, WeeklyAggregate
from services.dates import trailing_days, week_start as monday_of

MONTH_WINDOW_DAYS = 30


def percent(part: int, whole: int) -> int:
    """Round-half-up percentage; 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def _completed_days(logs: Iterable[HabitLog], habit_id: str | None = None) -> set[date]:
    return {
        log.date for log in logs
        if log.status == HabitStatus.COMPLETED and (habit_id is None or log.habit_id == habit_id)
    }


class MetricsService:
    # ------------------------------------------------------------------
    @staticmethod
    def status_for(habit_id: str, day: date, logs: Iterable[HabitLog]) -> HabitStatus | None:
        """Status of the one log for (habit, day), or None when nothing was logged."""
        for log in logs:
            if log.habit_id == habit_id and log.date == day:
                return log.status
        return None

    @staticmethod
    def completed_on(logs: Iterable[HabitLog], day: date) -> int:
        return sum(1 for log in logs if log.date == day and log.status == HabitStatus.COMPLETED)

    @staticmethod
    def day_summary(habits: list[Habit], logs: Iterable[HabitLog], day: date) -> DaySummary:
        completed = MetricsService.completed_on(logs, day)
        total = len(habits)
        return DaySummary(date=day, completed=completed, total=total, percentage=percent(completed, total))

    @staticmethod
    def completion_rate(habits: list[Habit], logs: Iterable[HabitLog], day: date) -> int:
        return MetricsService.day_summary(habits, logs, day).percentage

    # ------------------------------------------------------------------
    @staticmethod
    def current_streak(logs: Iterable[HabitLog], reference: date) -> int:
        """Consecutive days ending at `reference` with at least one completion (any habit)."""
        done = _completed_days(logs)
        streak = 0
        curr_date = reference
        while curr_date in done:
            streak += 1
            curr_date -= timedelta(days=1)
        return streak

    @staticmethod
    def habit_streak(habit_id: str, logs: Iterable[HabitLog], reference: date) -> int:
        """Same backward walk, restricted to one habit's completions."""
        done = _completed_days(logs, habit_id)
        streak = 0
        curr_date = reference
        while curr_date in done:
            streak += 1
            curr_date -= timedelta(days=1)
        return streak

    @staticmethod
    def monthly_rate(habits: list[Habit], logs: Iterable[HabitLog], reference: date) -> int:
        """
        Completions in [reference - 30d, reference] over habits x 30 slots.
        The slot count is fixed, so habits younger than 30 days read low.
        """
        window_start = reference - timedelta(days=MONTH_WINDOW_DAYS)
        completed = sum(
            1 for log in logs
            if log.status == HabitStatus.COMPLETED and window_start <= log.date <= reference
        )
        return percent(completed, len(habits) * MONTH_WINDOW_DAYS)

    # ------------------------------------------------------------------
    @staticmethod
    def week_start(reference: date) -> date:
        return monday_of(reference)

    @staticmethod
    def weekly_aggregate(habits: list[Habit], logs: list[HabitLog], start: date) -> WeeklyAggregate:
        days = [
            MetricsService.day_summary(habits, logs, start + timedelta(days=i))
            for i in range(7)
        ]
        completed = sum(d.completed for d in days)
        total = sum(d.total for d in days)
        return WeeklyAggregate(
            week_start=start,
            days=days,
            completed=completed,
            total=total,
            percentage=percent(completed, total),
        )

    @staticmethod
    def weekly_series(habit_id: str, logs: list[HabitLog], reference: date) -> list[HabitStatus | None]:
        """Last seven statuses for one habit, oldest first, ending at `reference`."""
        by_day = {log.date: log.status for log in logs if log.habit_id == habit_id}
        return [by_day.get(day) for day in trailing_days(reference, 7)]

    # ------------------------------------------------------------------
    @staticmethod
    def task_summary(tasks: Iterable[Task], day: date) -> dict:
        day_tasks = [t for t in tasks if t.date == day]
        return {
            "completed": sum(1 for t in day_tasks if t.completed),
            "total": len(day_tasks),
        }

    @staticmethod
    def badges(habits: list[Habit]) -> list[Badge]:
        """
        Fixed badge catalogue. Only "first-habit" is evaluated; the streak
        badges are declared but not wired to any streak data, so they stay
        not-computed rather than locked.
        """
        return [
            Badge(
                id="first-habit",
                title="First Step",
                description="Create your first habit",
                earned=len(habits) > 0,
            ),
            Badge(
                id="3-day-streak",
                title="3-Day Streak",
                description="Complete habits for 3 days in a row",
            ),
            Badge(
                id="7-day-streak",
                title="7-Day Streak",
                description="Complete habits for 7 days in a row",
            ),
        ]

    @staticmethod
    def overview_kpis(habits: list[Habit], logs: list[HabitLog], reference: date) -> dict:
        today = MetricsService.day_summary(habits, logs, reference)
        return {
            "today": {
                "completed": today.completed,
                "total": today.total,
                "percentage": today.percentage,
            },
            "current_streak": MetricsService.current_streak(logs, reference),
            "monthly_rate": MetricsService.monthly_rate(habits, logs, reference),
            "total_habits": len(habits),
        }
