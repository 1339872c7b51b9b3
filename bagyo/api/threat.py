"""Threat state, alert history and settings endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from bagyo.domain import EMERGENCY_HOTLINES, Language, SignalLevel, threshold_range
from bagyo.models import Alert, LocationUpdate, SignalLevelInfo, ThreatState, UserSettings
from bagyo.services.orchestrator import ThreatAssessmentOrchestrator

router = APIRouter(prefix="/api/v1", tags=["threat"])

logger = logging.getLogger("bagyo.api.threat")


def get_orchestrator(request: Request) -> ThreatAssessmentOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Threat assessment is not running",
        )
    return orchestrator


@router.get("/threat", response_model=ThreatState, summary="Current threat state")
def read_threat(
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> ThreatState:
    return orchestrator.state


@router.post("/threat/refresh", response_model=ThreatState, summary="Refresh now")
async def refresh_threat(
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> ThreatState:
    """Run a refresh cycle now, or wait for the one already running."""

    return await orchestrator.refresh()


@router.put("/location", response_model=ThreatState, summary="Report device position")
async def update_location(
    update: LocationUpdate,
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> ThreatState:
    """Record the device coordinates and refresh against them."""

    try:
        orchestrator.update_position(update.latitude, update.longitude)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    logger.info("Device position set to %.4f, %.4f", update.latitude, update.longitude)
    return await orchestrator.refresh()


@router.get("/alerts", response_model=list[Alert], summary="Alert history")
def list_alerts(
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> list[Alert]:
    return orchestrator.state.alert_history


@router.post("/reset", response_model=ThreatState, summary="Clear history and settings")
def reset_data(
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> ThreatState:
    logger.warning("Bulk reset requested")
    return orchestrator.reset()


@router.get("/settings", response_model=UserSettings, summary="User settings")
def read_settings(
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> UserSettings:
    return orchestrator.user_settings


@router.put("/settings", response_model=UserSettings, summary="Replace user settings")
def update_settings(
    new_settings: UserSettings,
    orchestrator: ThreatAssessmentOrchestrator = Depends(get_orchestrator),
) -> UserSettings:
    return orchestrator.update_settings(new_settings)


@router.get("/signals", response_model=list[SignalLevelInfo], summary="Signal thresholds")
def list_signals(language: Language = Language.EN) -> list[SignalLevelInfo]:
    """Wind speed bands for every signal level, lowest first."""

    rows = []
    for level in SignalLevel:
        lower, upper = threshold_range(level)
        rows.append(
            SignalLevelInfo(
                level=int(level),
                description=level.describe(language),
                min_wind_speed_ms=lower,
                max_wind_speed_ms=upper,
            )
        )
    return rows


@router.get("/hotlines", summary="Emergency hotlines")
def list_hotlines() -> dict[str, str]:
    return dict(EMERGENCY_HOTLINES)


__all__ = ["get_orchestrator", "router"]
