"""
FastAPI Application Entry Point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import router
from .config import Settings, load_settings
from .services.dispatcher import ActionDispatcher
from .services.plan_store import get_plan_store

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Console logging for the package logger."""
    logger = logging.getLogger("travel_planner")
    logger.setLevel(level.upper())
    # Prevent duplicate handlers when the app is reloaded
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[ActionDispatcher] = None,
) -> FastAPI:
    """Build the app; settings are read once here and passed down."""
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    if dispatcher is None:
        dispatcher = ActionDispatcher(settings, get_plan_store(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await dispatcher.store.close()

    app = FastAPI(
        title="Travel Planner",
        description="AI travel plan generation with streaming relay and saved plans",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Request body must be a JSON object with an 'action' string."},
        )

    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "travel_planner.main:app",
        host=app.state.settings.host,
        port=app.state.settings.port,
        reload=app.state.settings.debug,
    )
