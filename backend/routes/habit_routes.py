import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from routes.common import get_controller, success
from schemas import HabitStatus
from services.dashboard_service import DashboardController
from services.metrics_service import MetricsService
from services.view_service import ViewService

router = APIRouter(prefix="/api/v1/habits", tags=["Habits"])


class HabitCreate(BaseModel):
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class HabitUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class LogStatus(BaseModel):
    status: HabitStatus
    date: Optional[datetime.date] = None  # defaults to today


@router.get("")
async def list_habits(controller: DashboardController = Depends(get_controller)):
    return ViewService.habit_rows(controller.state, controller.today())


@router.post("")
async def create_habit(habit_data: HabitCreate, controller: DashboardController = Depends(get_controller)):
    result = await controller.add_habit(habit_data.name, habit_data.description, habit_data.color)
    return success(controller, result)


@router.put("/{habit_id}")
async def update_habit(habit_id: str, habit_data: HabitUpdate, controller: DashboardController = Depends(get_controller)):
    result = await controller.update_habit(habit_id, **habit_data.model_dump(exclude_unset=True))
    return success(controller, result)


@router.delete("/{habit_id}")
async def delete_habit(habit_id: str, controller: DashboardController = Depends(get_controller)):
    result = await controller.delete_habit(habit_id)
    return success(controller, result)


@router.post("/{habit_id}/logs")
async def log_habit_status(habit_id: str, data: LogStatus, controller: DashboardController = Depends(get_controller)):
    day = data.date or controller.today()
    result = await controller.log_status(habit_id, day, data.status)
    return success(controller, result)


@router.get("/{habit_id}/week")
async def habit_week(habit_id: str, controller: DashboardController = Depends(get_controller)):
    state = controller.state
    if not any(h.id == habit_id for h in state.habits):
        raise HTTPException(status_code=404, detail="Habit not found")
    reference = controller.today()
    series = MetricsService.weekly_series(habit_id, state.logs, reference)
    return {
        "habit_id": habit_id,
        "end": reference.isoformat(),
        "statuses": [s.value if s else None for s in series],
        "streak": MetricsService.habit_streak(habit_id, state.logs, reference),
    }
