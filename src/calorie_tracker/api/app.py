"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from calorie_tracker.api.auth import router as auth_router
from calorie_tracker.api.models import AnalyzeRequest, ConfirmRequest, MacrosPayload
from calorie_tracker.app_logging import configure_logging
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.errors import (
    CalorieTrackerError,
    NotAuthenticatedError,
    NotConfiguredError,
    RemoteStoreError,
    UpstreamMalformedError,
    ValidationError,
)
from calorie_tracker.domain.ledger import (
    LedgerEntry,
    Targets,
    format_entry_date,
    format_entry_time,
)
from calorie_tracker.domain.nutrition import Macros
from calorie_tracker.domain.stats import Summary
from calorie_tracker.services.ledger import to_number
from calorie_tracker.services.stats import resolve_timezone

_ERROR_STATUS: dict[type[CalorieTrackerError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotAuthenticatedError: status.HTTP_401_UNAUTHORIZED,
    NotConfiguredError: status.HTTP_401_UNAUTHORIZED,
    UpstreamMalformedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    RemoteStoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Calorie Tracker", lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(CalorieTrackerError)
    async def app_error_handler(
        request: Request, exc: CalorieTrackerError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "%s %s failed: %s", request.method, request.url.path, exc
            )
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning(
            "Validation error on %s %s: %s",
            request.method,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body"},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("%s %s failed", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    app.include_router(auth_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze")
    async def analyze(body: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Estimate nutrition without logging it."""
        state_container: AppContainer = request.app.state.container
        if not (body.food or "").strip() and not body.image:
            raise ValidationError("Food description or image is required")
        record = await state_container.nutrition_estimator.estimate(
            description=body.food, image=body.image
        )
        now = _local_now(body.timezone)
        return {
            "food": record.food,
            "calories": to_number(record.calories),
            "protein": to_number(record.protein_g),
            "carbs": to_number(record.carbs_g),
            "fat": to_number(record.fat_g),
            "date": body.date or format_entry_date(now),
            "time": format_entry_time(now),
            "logged": False,
        }

    @app.post("/confirm")
    async def confirm(body: ConfirmRequest, request: Request) -> dict[str, object]:
        """Append a confirmed estimate to the ledger."""
        state_container: AppContainer = request.app.state.container
        if not (body.food or "").strip():
            raise ValidationError("Food description is required")
        now = _local_now(body.timezone)
        entry = LedgerEntry(
            date=body.date or format_entry_date(now),
            time=body.time or format_entry_time(now),
            food=body.food,
            calories=to_number(body.calories),
            protein_g=to_number(body.protein),
            carbs_g=to_number(body.carbs),
            fat_g=to_number(body.fat),
        )
        ledger = state_container.ledger_service
        session = state_container.authorization_service.session()
        logged = False
        row_index: int | None = None
        try:
            await ledger.append(session, entry)
            logged = True
        except (NotAuthenticatedError, NotConfiguredError) as exc:
            logger.info("Entry not logged: %s", exc)
        except RemoteStoreError as exc:
            logger.error("Error logging to sheets: %s", exc)
        if logged:
            try:
                row_index = await ledger.latest_row_index(session, entry.date)
            except RemoteStoreError as exc:
                logger.warning("Could not re-read ledger after append: %s", exc)
        return {
            "food": entry.food,
            "calories": entry.calories,
            "protein": entry.protein_g,
            "carbs": entry.carbs_g,
            "fat": entry.fat_g,
            "date": entry.date,
            "time": entry.time,
            "logged": logged,
            "rowIndex": row_index,
        }

    @app.get("/summary")
    async def summary(
        request: Request, period: str = "daily", timezone: str | None = None
    ) -> dict[str, object]:
        """Return totals and daily averages for a period."""
        state_container: AppContainer = request.app.state.container
        session = state_container.authorization_service.session()
        try:
            result = await state_container.summary_service.summarize(
                session, period, timezone_name=timezone
            )
        except (NotAuthenticatedError, NotConfiguredError) as exc:
            return {"error": str(exc), "authenticated": False}
        return {**_serialize_summary(result), "authenticated": True}

    @app.get("/entries")
    async def list_entries(
        request: Request, date: str | None = None
    ) -> dict[str, object]:
        """Return ledger entries for a date."""
        state_container: AppContainer = request.app.state.container
        session = state_container.authorization_service.session()
        try:
            entries = await state_container.ledger_service.list_entries(session, date)
        except (NotAuthenticatedError, NotConfiguredError) as exc:
            return {"entries": [], "error": str(exc), "authenticated": False}
        return {
            "entries": [_serialize_entry(entry) for entry in entries],
            "authenticated": True,
        }

    @app.delete("/entries/{row_index}")
    async def delete_entry(row_index: int, request: Request) -> dict[str, bool]:
        """Delete a ledger row; later row indices shift down by one."""
        state_container: AppContainer = request.app.state.container
        _check_row_index(row_index)
        session = state_container.authorization_service.require_session()
        await state_container.ledger_service.delete(session, row_index)
        return {"success": True}

    @app.put("/entries/{row_index}")
    async def update_entry(
        row_index: int, body: MacrosPayload, request: Request
    ) -> dict[str, bool]:
        """Overwrite calories and macros of a ledger row."""
        state_container: AppContainer = request.app.state.container
        _check_row_index(row_index)
        session = state_container.authorization_service.require_session()
        await state_container.ledger_service.update(
            session, row_index, _to_macros(body)
        )
        return {"success": True}

    @app.get("/settings/targets")
    async def get_targets(request: Request) -> dict[str, object]:
        """Return daily macro targets."""
        state_container: AppContainer = request.app.state.container
        session = state_container.authorization_service.require_session()
        targets = await state_container.targets_service.get(session)
        return _serialize_targets(targets)

    @app.put("/settings/targets")
    async def put_targets(body: MacrosPayload, request: Request) -> dict[str, bool]:
        """Store daily macro targets."""
        state_container: AppContainer = request.app.state.container
        session = state_container.authorization_service.require_session()
        macros = _to_macros(body)
        await state_container.targets_service.set(
            session,
            Targets(
                calories=macros.calories,
                protein_g=macros.protein_g,
                carbs_g=macros.carbs_g,
                fat_g=macros.fat_g,
            ),
        )
        return {"success": True}

    static_dir = Path(container.settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


def _status_for(exc: CalorieTrackerError) -> int:
    for error_type, status_code in _ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _local_now(timezone_name: str | None) -> datetime:
    return datetime.now(tz=UTC).astimezone(resolve_timezone(timezone_name))


def _check_row_index(row_index: int) -> None:
    if row_index < 0:
        raise ValidationError("Row index must be zero or greater")


def _to_macros(body: MacrosPayload) -> Macros:
    return Macros(
        calories=to_number(body.calories),
        protein_g=to_number(body.protein),
        carbs_g=to_number(body.carbs),
        fat_g=to_number(body.fat),
    )


def _serialize_entry(entry: LedgerEntry) -> dict[str, object]:
    return {
        "date": entry.date,
        "time": entry.time,
        "food": entry.food,
        "calories": entry.calories,
        "protein": entry.protein_g,
        "carbs": entry.carbs_g,
        "fat": entry.fat_g,
        "rowIndex": entry.row_index,
    }


def _serialize_summary(summary: Summary) -> dict[str, object]:
    return {
        "period": summary.period,
        "totalCalories": summary.total_calories,
        "totalProtein": summary.total_protein_g,
        "totalCarbs": summary.total_carbs_g,
        "totalFat": summary.total_fat_g,
        "entryCount": summary.entry_count,
        "daysCount": summary.days_count,
        "avgCalories": summary.avg_calories,
        "avgProtein": summary.avg_protein_g,
        "avgCarbs": summary.avg_carbs_g,
        "avgFat": summary.avg_fat_g,
    }


def _serialize_targets(targets: Targets) -> dict[str, object]:
    return {
        "calories": targets.calories,
        "protein": targets.protein_g,
        "carbs": targets.carbs_g,
        "fat": targets.fat_g,
    }
