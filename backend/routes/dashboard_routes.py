import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from routes.common import get_controller, raise_for_result
from schemas import ViewName
from services.dashboard_service import DashboardController
from services.view_service import ViewService

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


class ViewSelect(BaseModel):
    view: ViewName


class DateChange(BaseModel):
    delta_days: Optional[int] = None
    date: Optional[datetime.date] = None


class NoteUpdate(BaseModel):
    date: datetime.date
    text: str = ""


def _payload(controller: DashboardController) -> dict:
    return {"state": ViewService.state_summary(controller), "view": ViewService.render(controller)}


@router.get("")
async def get_dashboard(
    view: Optional[ViewName] = None,
    date: Optional[datetime.date] = None,
    tz: Optional[str] = None,
    controller: DashboardController = Depends(get_controller),
):
    if tz:
        controller.set_timezone(tz)
    if view is not None:
        controller.select_view(view)
    if date is not None:
        controller.set_date(date)
    return _payload(controller)


@router.post("/view")
async def select_view(data: ViewSelect, controller: DashboardController = Depends(get_controller)):
    controller.select_view(data.view)
    return _payload(controller)


@router.post("/date")
async def change_date(data: DateChange, controller: DashboardController = Depends(get_controller)):
    if data.date is not None:
        controller.set_date(data.date)
    elif data.delta_days is not None:
        controller.change_date(data.delta_days)
    else:
        raise HTTPException(status_code=422, detail="Provide either delta_days or date")
    return _payload(controller)


@router.post("/reload")
async def reload_dashboard(controller: DashboardController = Depends(get_controller)):
    raise_for_result(await controller.load())
    return _payload(controller)


@router.put("/notes")
async def update_note(data: NoteUpdate, controller: DashboardController = Depends(get_controller)):
    controller.set_note(data.date, data.text)
    return {"status": "success", "date": data.date.isoformat(), "note": controller.note_for(data.date)}
