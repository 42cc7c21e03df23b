import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from routes.common import get_controller, success
from services.dashboard_service import DashboardController
from services.metrics_service import MetricsService

router = APIRouter(prefix="/api/v1/tasks", tags=["Tasks"])


class TaskCreate(BaseModel):
    title: str
    date: Optional[datetime.date] = None  # defaults to the selected date


class TaskToggle(BaseModel):
    completed: bool


@router.get("")
async def list_tasks(date: Optional[datetime.date] = None, controller: DashboardController = Depends(get_controller)):
    day = date or controller.state.selected_date
    tasks = [t for t in controller.state.tasks if t.date == day]
    return {
        "date": day.isoformat(),
        "tasks": [t.model_dump(mode="json") for t in tasks],
        **MetricsService.task_summary(controller.state.tasks, day),
    }


@router.post("")
async def create_task(task_data: TaskCreate, controller: DashboardController = Depends(get_controller)):
    result = await controller.add_task(task_data.title, task_data.date)
    return success(controller, result)


@router.patch("/{task_id}")
async def toggle_task(task_id: str, data: TaskToggle, controller: DashboardController = Depends(get_controller)):
    result = await controller.toggle_task(task_id, data.completed)
    return success(controller, result)


@router.delete("/{task_id}")
async def delete_task(task_id: str, controller: DashboardController = Depends(get_controller)):
    result = await controller.delete_task(task_id)
    return success(controller, result)
