"""
main.py — FastAPI Application Entrypoint

Purpose:
- Initialize logging from settings.
- Register API routers.
- Define the root-level health endpoint.
- Provide `app` object used by ASGI server (uvicorn).

No business logic lives here.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from forecaster.api.v1 import forecasts, scenarios
from forecaster.core.config import settings
from forecaster.core.logging import configure_logging

# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------

configure_logging()

app = FastAPI(
    title="Forecaster Backend",
    description="Forecast time-series and scenario comparison engine",
    version="0.1.0",
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Router Registration
# -----------------------------------------------------------------------------

app.include_router(forecasts.router, prefix="/api/v1")
app.include_router(scenarios.router, prefix="/api/v1")

# -----------------------------------------------------------------------------
# Health Check
# -----------------------------------------------------------------------------

@app.get("/")
def root():
    return {"status": "ok", "message": "Forecaster backend running"}
