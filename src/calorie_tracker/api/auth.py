"""Google account connection endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from calorie_tracker.domain.errors import AuthorizationError

if TYPE_CHECKING:
    from calorie_tracker.containers import AppContainer

router = APIRouter(prefix="/auth", tags=["auth"])

_logger = logging.getLogger(__name__)


@router.get("/status")
async def auth_status(request: Request) -> dict[str, bool]:
    """Report whether a Google access token is held."""
    container: AppContainer = request.app.state.container
    return {"authenticated": container.authorization_service.status()}


@router.get("/google")
async def auth_google(request: Request) -> RedirectResponse:
    """Redirect the browser to Google's consent screen."""
    container: AppContainer = request.app.state.container
    return RedirectResponse(
        container.authorization_service.begin(), status_code=status.HTTP_302_FOUND
    )


@router.get("/google/callback")
async def auth_google_callback(
    request: Request, code: str | None = None
) -> RedirectResponse:
    """Exchange the authorization code and return to the front page."""
    container: AppContainer = request.app.state.container
    try:
        await container.authorization_service.callback(code)
    except (AuthorizationError, OSError, ValueError):
        _logger.exception("Error getting tokens")
        return RedirectResponse(
            "/?error=auth_failed", status_code=status.HTTP_302_FOUND
        )
    return RedirectResponse("/?authenticated=true", status_code=status.HTTP_302_FOUND)


@router.post("/disconnect", response_model=None)
async def auth_disconnect(request: Request) -> dict[str, bool] | JSONResponse:
    """Forget the stored Google credentials."""
    container: AppContainer = request.app.state.container
    try:
        container.authorization_service.disconnect()
    except OSError as exc:
        _logger.exception("Failed to remove token file")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )
    return {"success": True}
