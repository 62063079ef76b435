from typing import List

from fastapi import APIRouter, Depends, HTTPException

from services.newsfeed.app.dependencies import get_storage
from shared.app_logging.logger import get_logger
from shared.schemas.news import (
    Bookmark,
    BookmarkCreate,
    BookmarkedArticle,
    BookmarkStatus,
    DeleteResult,
)
from shared.storage.base import StorageBackend, run_storage

logger = get_logger("newsfeed.routes.bookmarks")

router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


def _bookmarked_articles(storage: StorageBackend) -> List[BookmarkedArticle]:
    bookmarked = []
    for bookmark in storage.list_bookmarks():
        article = storage.get_article(bookmark.article_id)
        if article is None:
            logger.debug(f"Bookmark {bookmark.id} points at missing article {bookmark.article_id}")
            continue
        bookmarked.append(BookmarkedArticle(**article.model_dump(), bookmarked_at=bookmark.created_at))
    return bookmarked


@router.get("", response_model=List[BookmarkedArticle])
async def list_bookmarks(storage: StorageBackend = Depends(get_storage)):
    """Bookmarked articles, most recently bookmarked first. Dangling bookmarks are skipped."""
    return await run_storage(storage, _bookmarked_articles, storage)


@router.post("", response_model=Bookmark)
async def create_bookmark(payload: BookmarkCreate, storage: StorageBackend = Depends(get_storage)):
    bookmark = await run_storage(storage, storage.create_bookmark, payload)
    logger.info(f"Bookmarked article {bookmark.article_id}")
    return bookmark


@router.delete("/{article_id}", response_model=DeleteResult)
async def delete_bookmark(article_id: str, storage: StorageBackend = Depends(get_storage)):
    if not await run_storage(storage, storage.delete_bookmark, article_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")
    logger.info(f"Removed bookmark for article {article_id}")
    return DeleteResult(success=True)


@router.get("/{article_id}/status", response_model=BookmarkStatus)
async def bookmark_status(article_id: str, storage: StorageBackend = Depends(get_storage)):
    return BookmarkStatus(is_bookmarked=await run_storage(storage, storage.is_bookmarked, article_id))
