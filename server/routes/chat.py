"""Research chat endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from models.errors import ConversationNotFoundError, InvalidSearchRequestError
from models.search_request import SearchRequest
from orchestrator.core import ResearchOrchestrator
from server.dependencies import get_api_key, get_orchestrator
from server.schemas.requests import ChatRequest
from server.schemas.responses import ChatResponseDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Chat"])


@router.post("/chat", response_model=ChatResponseDTO)
async def chat(
    request: Request,
    body: ChatRequest,
    api_key: str = Depends(get_api_key),
    orchestrator: ResearchOrchestrator = Depends(get_orchestrator),
):
    """Answer one research question with cited sources."""
    request_id = getattr(request.state, "request_id", "unknown")

    try:
        search_request = SearchRequest(
            query=body.message,
            sources=tuple(body.sources),
            max_sources=body.max_sources,
            archive_years=body.archive_years,
            conversation_id=body.conversation_id,
        )
    except InvalidSearchRequestError as e:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": ["body", e.field], "msg": e.message, "type": "value_error"}],
        ) from e

    logger.info(
        "Chat request",
        extra={
            "extra_fields": {
                "request_id": request_id,
                "conversation_id": body.conversation_id,
                "sources": list(search_request.sources),
                "max_sources": search_request.max_sources,
            }
        },
    )

    try:
        result = await orchestrator.answer(search_request)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return ChatResponseDTO.from_aggregate_result(result)
