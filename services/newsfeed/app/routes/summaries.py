from fastapi import APIRouter, Depends, HTTPException

from services.newsfeed.app.dependencies import get_llm, get_storage
from services.newsfeed.app.llm_client import LLMClient
from services.newsfeed.app.summarize import get_or_create_summary
from shared.app_logging.logger import get_logger
from shared.schemas.news import Summary
from shared.storage.base import StorageBackend

logger = get_logger("newsfeed.routes.summaries")

router = APIRouter(prefix="/api", tags=["summaries"])


@router.post("/articles/{article_id}/summary", response_model=Summary)
async def create_summary(
    article_id: str,
    storage: StorageBackend = Depends(get_storage),
    llm: LLMClient = Depends(get_llm),
):
    """Return the article's TL;DR, generating it on first request."""
    try:
        summary = await get_or_create_summary(article_id, storage, llm)
    except Exception as e:
        logger.exception(f"Unexpected error summarizing article {article_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if summary is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return summary
