"""
FastAPI application entry point.

Assembles the FastAPI app with the AI router.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from holiday_planner.api.ai_api import router as ai_router
from holiday_planner.persistence.database import create_tables, get_engine
from holiday_planner.shared.errors import HolidayPlannerError
from holiday_planner.shared.logging import setup_logging
from holiday_planner.shared.settings import get_settings


settings = get_settings()

# Logging configuration (single source of truth for the service)
setup_logging(level=settings.log_level, json_logs=settings.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables(get_engine())
    yield


# Create FastAPI app
app = FastAPI(
    title="Holiday Planner AI",
    description="AI research, comparison and planning endpoints with a persistent result cache",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HolidayPlannerError)
async def holiday_planner_error_handler(request: Request, exc: HolidayPlannerError):
    """Errors raised outside an operation run, e.g. by the auth dependency."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    logger.info(f"Rejected request body | path={request.url.path}, errors={details}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


# Include routers
app.include_router(ai_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Holiday Planner AI",
        "version": "0.1.0",
        "endpoints": {
            "research": "/api/ai/research",
            "compare": "/api/ai/compare",
            "optimise": "/api/ai/optimise",
            "suggestions": "/api/ai/suggestions",
            "plan_change": "/api/ai/plan-change",
            "generate_packing": "/api/ai/generate-packing",
            "extract_link": "/api/ai/extract-link",
            "generate_plan": "/api/ai/generate-plan",
            "add_to_plan": "/api/ai/add-to-plan",
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
