"""Search history endpoint."""

from fastapi import APIRouter, Depends, Query

from server.dependencies import get_api_key, get_store
from server.schemas.responses import SearchHistoryDTO

router = APIRouter(prefix="/v1", tags=["History"])


@router.get("/search-history", response_model=list[SearchHistoryDTO])
async def list_search_history(
    limit: int = Query(20, ge=1, le=100),
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    """Return recent searches (newest first)."""
    return [SearchHistoryDTO.from_item(item) for item in store.get_search_history(limit=limit)]
