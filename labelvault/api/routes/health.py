"""Health check and system endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from labelvault import __version__
from labelvault.api.dependencies.common import get_captcha, get_email_sender, get_storage
from labelvault.core.database import get_db_session
from labelvault.core.settings import get_settings
from labelvault.schemas.base import HealthCheckResponse
from labelvault.services.captcha import CaptchaVerifier
from labelvault.services.mailer import Mailer
from labelvault.services.storage import AssetStore

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    session: AsyncSession = Depends(get_db_session),
    asset_store: AssetStore = Depends(get_storage),
    mailer: Mailer = Depends(get_email_sender),
    captcha: CaptchaVerifier = Depends(get_captcha),
):
    """
    Service health check endpoint.

    Pings the database and reports which collaborator backends are active.
    Answers 503 when the database is unreachable.
    """
    settings = get_settings()
    health_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "version": __version__,
        "environment": settings.environment,
        "dependencies": {
            "storage": {"status": "healthy", "type": asset_store.backend},
            "email": {"status": "healthy", "type": mailer.backend},
            "captcha": {"status": "healthy", "type": captcha.backend},
        },
    }

    started = time.time()
    try:
        result = await session.execute(text("SELECT 1"))
        result.fetchone()
        health_data["dependencies"]["database"] = {
            "status": "healthy",
            "response_time_ms": round((time.time() - started) * 1000, 2),
        }
    except SQLAlchemyError as e:
        health_data["dependencies"]["database"] = {
            "status": "unhealthy",
            "error": str(e),
        }
        health_data["status"] = "unhealthy"

    response = HealthCheckResponse(**health_data)
    if health_data["status"] == "unhealthy":
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))
    return response


@router.get("/version")
async def version_info():
    """Get service version information."""
    return {
        "service": "labelvault",
        "version": __version__,
        "environment": get_settings().environment,
    }
