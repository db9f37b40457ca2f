"""Bookmark endpoints: saved sources, independent of conversations."""

from fastapi import APIRouter, Depends, HTTPException, status

from server.dependencies import get_api_key, get_store
from server.schemas.requests import BookmarkCreateRequest
from server.schemas.responses import BookmarkDTO

router = APIRouter(prefix="/v1", tags=["Bookmarks"])


@router.get("/bookmarks", response_model=list[BookmarkDTO])
async def list_bookmarks(
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    """Return bookmarks, newest first."""
    return [BookmarkDTO.from_bookmark(b) for b in store.get_bookmarks()]


@router.post("/bookmarks", response_model=BookmarkDTO, status_code=status.HTTP_201_CREATED)
async def create_bookmark(
    body: BookmarkCreateRequest,
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    bookmark = store.create_bookmark(
        title=body.title,
        url=body.url,
        source_type=body.source_type,
        description=body.description,
        document_date=body.document_date,
        declassified_date=body.declassified_date,
        pages=body.pages,
    )
    return BookmarkDTO.from_bookmark(bookmark)


@router.delete("/bookmarks/{bookmark_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bookmark(
    bookmark_id: str,
    api_key: str = Depends(get_api_key),
    store=Depends(get_store),
):
    if not store.delete_bookmark(bookmark_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")
