"""Health check endpoint."""

from pydantic import BaseModel

from app.core.logger import LogIcon, logger
from app.core.router import Router
from app.core.settings import settings as st

router = Router(__file__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    store: str
    pending_writes: int


def build_health(state) -> HealthResponse:
    """Summarize service identity and background write backlog."""
    writer = state.get("writer")
    pending = writer.pending if writer is not None else 0

    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK, pending_writes=pending)
    return HealthResponse(
        status="healthy",
        service=st.API_NAME,
        version=st.API_VERSION,
        store=st.STORE_BACKEND,
        pending_writes=pending,
    )


@router.get("/health")
async def health_check(global_dependencies) -> HealthResponse:
    return build_health(global_dependencies["state"])
