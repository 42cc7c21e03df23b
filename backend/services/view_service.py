"""
view_service.py — View models for the dashboard screens
Turns the controller's state into the JSON the front end renders for the
overview, daily-focus, weekly and badges views. Read-only over the state.
"""

from datetime import date, timedelta

from schemas import ViewName
from services.dashboard_service import DashboardController, DashboardState
from services.metrics_service import MetricsService, percent


def _status(value) -> str | None:
    return value.value if value is not None else None


class ViewService:
    @staticmethod
    def habit_rows(state: DashboardState, reference: date) -> list[dict]:
        """Habit list entries: today's status, last-7-days strip and the habit's own streak."""
        rows = []
        for h in state.habits:
            rows.append({
                "habit": h.model_dump(mode="json"),
                "today_status": _status(MetricsService.status_for(h.id, reference, state.logs)),
                "last_7_days": [_status(s) for s in MetricsService.weekly_series(h.id, state.logs, reference)],
                "streak": MetricsService.habit_streak(h.id, state.logs, reference),
            })
        return rows

    @staticmethod
    def overview(state: DashboardState, reference: date) -> dict:
        return {
            "view": ViewName.OVERVIEW.value,
            "date": reference.isoformat(),
            "kpis": MetricsService.overview_kpis(state.habits, state.logs, reference),
            "habits": ViewService.habit_rows(state, reference),
        }

    @staticmethod
    def daily_focus(state: DashboardState, reference: date) -> dict:
        day = state.selected_date
        summary = MetricsService.day_summary(state.habits, state.logs, day)
        day_tasks = [t for t in state.tasks if t.date == day]
        return {
            "view": ViewName.DAILY_FOCUS.value,
            "date": day.isoformat(),
            "weekday": day.strftime("%A"),
            "is_today": day == reference,
            "completion": summary.model_dump(mode="json"),
            "habits": [
                {
                    "habit": h.model_dump(mode="json"),
                    "status": _status(MetricsService.status_for(h.id, day, state.logs)),
                }
                for h in state.habits
            ],
            "tasks": [t.model_dump(mode="json") for t in day_tasks],
            "task_summary": MetricsService.task_summary(state.tasks, day),
            "note": state.notes.get(day.isoformat(), ""),
        }

    @staticmethod
    def weekly(state: DashboardState, reference: date) -> dict:
        start = MetricsService.week_start(reference)
        week = MetricsService.weekly_aggregate(state.habits, state.logs, start)
        days = [start + timedelta(days=i) for i in range(7)]
        return {
            "view": ViewName.WEEKLY.value,
            "week_start": start.isoformat(),
            "percentage": week.percentage,
            "completed": week.completed,
            "total": week.total,
            "days": [
                {
                    **d.model_dump(mode="json"),
                    "weekday": d.date.strftime("%a"),
                    "is_today": d.date == reference,
                }
                for d in week.days
            ],
            "grid": [
                {
                    "habit": h.model_dump(mode="json"),
                    "statuses": [_status(MetricsService.status_for(h.id, d, state.logs)) for d in days],
                }
                for h in state.habits
            ],
        }

    @staticmethod
    def badges(state: DashboardState) -> dict:
        badges = MetricsService.badges(state.habits)
        earned = sum(1 for b in badges if b.earned)
        return {
            "view": ViewName.BADGES.value,
            "earned": earned,
            "total": len(badges),
            "progress": percent(earned, len(badges)),
            "badges": [{**b.model_dump(), "state": b.state} for b in badges],
        }

    # ------------------------------------------------------------------
    @staticmethod
    def state_summary(controller: DashboardController) -> dict:
        s = controller.state
        return {
            "view": s.view.value,
            "selected_date": s.selected_date.isoformat(),
            "today": controller.today().isoformat(),
            "loading": s.loading,
            "loaded_at": s.loaded_at.isoformat() if s.loaded_at else None,
            "last_error": s.last_error.model_dump(mode="json") if s.last_error else None,
            "counts": {"habits": len(s.habits), "logs": len(s.logs), "tasks": len(s.tasks)},
        }

    @staticmethod
    def render(controller: DashboardController, view: ViewName | None = None) -> dict:
        state = controller.state
        reference = controller.today()
        view = ViewName(view) if view is not None else state.view
        if view == ViewName.DAILY_FOCUS:
            return ViewService.daily_focus(state, reference)
        if view == ViewName.WEEKLY:
            return ViewService.weekly(state, reference)
        if view == ViewName.BADGES:
            return ViewService.badges(state)
        return ViewService.overview(state, reference)
