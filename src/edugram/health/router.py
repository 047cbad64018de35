"""Health, readiness, and deployment check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from edugram.config import get_settings
from edugram.store import get_redis

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, object]:
    """Liveness probe, plus the email suffixes signup accepts."""
    settings = get_settings()
    return {
        "status": "ok",
        "version": settings.app_version,
        "acceptedEmails": settings.accepted_email_suffixes,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/test")
async def deployment_check() -> dict[str, str]:
    return {
        "message": "Backend is running",
        "version": get_settings().app_version,
        "deployedAt": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness() -> dict[str, object]:
    """Readiness probe: checks the key-value store."""
    checks: dict[str, object] = {}
    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as exc:
        checks["redis"] = f"error: {exc}"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}
