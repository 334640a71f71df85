"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_api_key, get_city_directory
from api.models.responses import HealthResponse
from core.cities import CityDirectory
from core.config import API_VERSION

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    api_key: str = Depends(get_api_key),
    directory: CityDirectory = Depends(get_city_directory),
):
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if the Google API key is missing.
    """
    timestamp = datetime.now(timezone.utc).isoformat()

    if api_key:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            api_key_configured=True,
            cities=directory.cities,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                api_key_configured=False,
                cities=directory.cities,
                timestamp=timestamp,
                error="GOOGLE_API_KEY not configured",
            ).model_dump(),
        )
