"""FastAPI application."""

from fastapi import FastAPI

from backend.app.api.routes.branding import router as branding_router
from backend.app.api.routes.documents import router as documents_router
from backend.app.api.routes.files import router as files_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router

app = FastAPI(title="Business Assistant Documents API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(documents_router)
app.include_router(files_router)
app.include_router(branding_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Business Assistant Documents API", "version": "0.1.0"}
