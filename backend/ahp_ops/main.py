"""AHP Operations Agent API"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ahp_ops.core.config import get_settings
from ahp_ops.core.errors import ApiError
from ahp_ops.core.logging import configure_logging, logger
from ahp_ops.models.visit import ErrorResponse
from ahp_ops.routers import visits


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "AHP Operations Agent starting",
        version=settings.app_version,
        llm_model=settings.llm_model,
        max_iterations=settings.agent_max_iterations,
        google_configured=settings.google_configured(),
        llm_configured=settings.llm_configured(),
    )
    yield
    logger.info("AHP Operations Agent shutting down")


app = FastAPI(
    title="AHP Operations Agent",
    description="Processes plant-care service visits with a tool-using language model agent",
    version=get_settings().app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "x-api-key"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error, code=exc.code).as_dict(),
    )


app.include_router(visits.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "AHP Operations Agent",
        "version": get_settings().app_version,
        "endpoints": {
            "health": "/api/health",
            "process_visit": "/api/process-visit",
        },
    }
