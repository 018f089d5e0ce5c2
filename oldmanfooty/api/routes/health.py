"""Health check routes for the FastAPI application."""

from fastapi import APIRouter, Request

from ... import __version__

router = APIRouter(tags=["health"])

@router.get("/")
async def health_check(request: Request):
    """Health check endpoint."""
    config = request.app.state.config
    return {
        "status": "healthy",
        "environment": "production" if config.is_production else "development",
        "version": __version__
    }
