"""FastAPI application exposing the study task endpoints."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import Settings
from ..engine import StudyTasks
from ..llm import create_llm_client
from .routes import create_router

logger = logging.getLogger(__name__)


class CSRFProtectionMiddleware(BaseHTTPMiddleware):
    """Reject state-changing requests from origins we don't serve.

    Requests without an Origin header (same-origin, server-to-server) pass.
    """

    def __init__(self, app, allowed_origins: set[str | None]):
        super().__init__(app)
        self.allowed_origins = allowed_origins

    async def dispatch(self, request: Request, call_next):
        if request.method in ("POST", "PUT", "DELETE", "PATCH"):
            origin = request.headers.get("origin")
            if origin is not None and origin not in self.allowed_origins:
                logger.warning(f"[API] Rejected {request.method} {request.url.path} from origin {origin}")
                return JSONResponse(
                    status_code=403,
                    content={"detail": "CSRF validation failed: invalid origin"},
                )

        return await call_next(request)


def create_app(settings: Settings, tasks: Optional[StudyTasks] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings
        tasks: Task layer to serve; built from ``settings`` when omitted
    """
    if tasks is None:
        tasks = StudyTasks(create_llm_client(settings))

    app = FastAPI(
        title="Notewise",
        description="Study companion: explanations, quizzes, flashcards, exams and more from your notes",
        version="0.1.0",
    )

    app.add_middleware(
        CSRFProtectionMiddleware,
        allowed_origins=settings.get_allowed_origins(),
    )

    app.state.settings = settings
    app.include_router(create_router(tasks))

    return app
