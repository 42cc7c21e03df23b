from fastapi import APIRouter, Depends

from routes.common import get_controller
from services.dashboard_service import DashboardController
from services.metrics_service import MetricsService
from services.view_service import ViewService

router = APIRouter(prefix="/api/v1/analytics", tags=["Analytics"])


@router.get("/overview")
async def get_overview(controller: DashboardController = Depends(get_controller)):
    return ViewService.overview(controller.state, controller.today())


@router.get("/weekly")
async def get_weekly(controller: DashboardController = Depends(get_controller)):
    return ViewService.weekly(controller.state, controller.today())


@router.get("/badges")
async def get_badges(controller: DashboardController = Depends(get_controller)):
    return ViewService.badges(controller.state)


@router.get("/streaks")
async def habit_streaks(controller: DashboardController = Depends(get_controller)):
    reference = controller.today()
    logs = controller.state.logs
    return {
        "current_streak": MetricsService.current_streak(logs, reference),
        "habits": [
            {"habit": h.name, "habit_id": h.id, "streak": MetricsService.habit_streak(h.id, logs, reference)}
            for h in controller.state.habits
        ],
    }
