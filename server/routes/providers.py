"""AI provider availability endpoint."""

from fastapi import APIRouter, Depends

from server.dependencies import get_api_key, get_orchestrator
from server.schemas.responses import ProviderStatusDTO

router = APIRouter(prefix="/v1", tags=["Providers"])


@router.get("/providers", response_model=list[ProviderStatusDTO])
async def list_providers(
    api_key: str = Depends(get_api_key),
    orchestrator=Depends(get_orchestrator),
):
    """Router candidates in priority order with their cool-down state."""
    router_ = orchestrator.router
    out = []
    for status_ in router_.provider_status():
        spec = router_.get_spec(status_.provider_id)
        out.append(
            ProviderStatusDTO(
                id=status_.provider_id,
                name=spec.name if spec else status_.provider_id,
                model=spec.model if spec else "",
                priority=status_.priority,
                available=status_.available,
                unavailable_until=status_.unavailable_until,
            )
        )
    return out
