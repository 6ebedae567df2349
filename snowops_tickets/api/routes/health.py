from fastapi import APIRouter

from snowops_tickets.core.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Public health probe")
async def health() -> dict[str, str]:
    return {"status": "ok", "service": get_settings().service_name}
