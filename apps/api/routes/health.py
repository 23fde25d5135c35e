"""Health check routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from vidsum.config import Settings

router = APIRouter(tags=["health"])


@router.get("/health-check")
async def health_check(request: Request) -> dict[str, str]:
    settings: Settings | None = getattr(request.app.state, "settings", None)
    out = {"status": "ok"}
    if settings is not None:
        out["inference_provider"] = str(settings.inference.provider)
        out["inference_model"] = str(settings.inference.model)
    return out
