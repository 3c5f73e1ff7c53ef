from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lecrm.core.config import settings
from lecrm.core.logging import setup_logging
from lecrm.core.exceptions import LecrmException
from lecrm.routers import data_notifications, notification_snoozes, notifications, tasks, user_notification_states


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
    app.include_router(data_notifications.router, prefix="/api/data/notifications", tags=["data"])
    app.include_router(notification_snoozes.router, prefix="/api/data/notificationSnoozes", tags=["data"])
    app.include_router(user_notification_states.router, prefix="/api/data/userNotificationStates", tags=["data"])
    app.include_router(tasks.router, prefix="/api/data/tasks", tags=["data"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, object]:
        return {"success": True, "data": {"status": "ok", "env": settings.ENV}}

    @app.exception_handler(LecrmException)
    async def handle_lecrm_exception(_: Request, exc: LecrmException) -> JSONResponse:
        headers = exc.headers if getattr(exc, "headers", None) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    return app


app = create_app()
