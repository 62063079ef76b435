from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from services.newsfeed.app.dependencies import get_news_service, get_storage
from services.newsfeed.app.news_service import NewsQuery, NewsService
from shared.schemas.news import Article, NewsCategory
from shared.storage.base import StorageBackend, run_storage

router = APIRouter(prefix="/api", tags=["news"])


@router.get("/news", response_model=List[Article])
async def list_news(
    category: NewsCategory = NewsCategory.ALL,
    search: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    news: NewsService = Depends(get_news_service),
):
    """Cached or freshly fetched articles for a category and optional search term."""
    return await news.get_news(NewsQuery(category=category, search=search, limit=limit, offset=offset))


@router.get("/articles/{article_id}", response_model=Article)
async def get_article(article_id: str, storage: StorageBackend = Depends(get_storage)):
    article = await run_storage(storage, storage.get_article, article_id)
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article
