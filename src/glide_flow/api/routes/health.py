"""Health check router for liveness endpoint."""

from fastapi import APIRouter

router = APIRouter()


@router.get("")
def get_health() -> dict[str, str]:
    """Return liveness status.

    Returns:
        A dictionary with status "ok".
    """
    return {"status": "ok"}
