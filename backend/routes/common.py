from fastapi import Depends, HTTPException

from auth import CurrentUser, get_current_user
from data_access.base import ErrorKind
from services.dashboard_service import DashboardController, OperationResult
from services.session_store import SessionStore, sessions
from services.view_service import ViewService

STATUS_FOR_KIND = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONSTRAINT: 409,
    ErrorKind.CONNECTIVITY: 503,
    ErrorKind.TIMEOUT: 504,
}


def get_sessions() -> SessionStore:
    return sessions


async def get_controller(
    user: CurrentUser = Depends(get_current_user),
    store: SessionStore = Depends(get_sessions),
) -> DashboardController:
    """The user's session controller, loaded on first use."""
    controller = store.get(user.id, user.access_token)
    result = await controller.ensure_loaded()
    # Nothing to show yet: surface the load failure instead of an empty dashboard
    if controller.state.loaded_at is None:
        raise_for_result(result)
    return controller


def raise_for_result(result: OperationResult) -> None:
    """Turn a failed OperationResult into an HTTPException with a typed detail."""
    if result.ok:
        return
    error = result.error
    headers = {"Retry-After": "1"} if error.retryable else None
    raise HTTPException(
        status_code=STATUS_FOR_KIND.get(error.kind, 500),
        detail=error.model_dump(mode="json"),
        headers=headers,
    )


def success(controller: DashboardController, result: OperationResult) -> dict:
    raise_for_result(result)
    return {
        "status": "success",
        "data": result.model_dump(mode="json")["data"],
        "view": ViewService.render(controller),
    }
