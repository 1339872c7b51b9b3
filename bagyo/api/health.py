"""Health check endpoint."""

from fastapi import APIRouter, Request

from bagyo.config import settings

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check(request: Request) -> dict[str, str]:
    """Report the environment, the refresh scheduler and the current cycle stage."""

    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        return {"status": "starting", "env": settings.bagyo_env, "scheduler": "stopped"}

    return {
        "status": "stale" if orchestrator.state.stale else "ok",
        "env": settings.bagyo_env,
        "scheduler": "running" if orchestrator.scheduler_running else "stopped",
        "cycle": orchestrator.cycle_state.value,
    }
