from typing import Optional

from services.newsfeed.app.fallbacks import fallback_summary
from services.newsfeed.app.llm_client import LLMClient
from services.newsfeed.app.metrics import LLM_COMPLETIONS
from shared.app_logging.logger import get_logger
from shared.schemas.news import Article, Summary, SummaryCreate
from shared.storage.base import StorageBackend, run_storage

logger = get_logger("newsfeed.summarize")

TLDR_PROMPT = """Please provide a concise TL;DR summary of this article in bullet points (3-4 points max). Focus on the key technical details and main takeaways for developers:

Title: {title}
Description: {description}
Content: {content}"""


def build_summary_prompt(article: Article) -> str:
    return TLDR_PROMPT.format(
        title=article.title,
        description=article.description or "",
        content=article.content or "",
    )


async def generate_summary_text(article: Article, llm: LLMClient) -> str:
    """Ask the language model for a TL;DR, falling back to extraction on any failure."""
    if not llm.configured:
        LLM_COMPLETIONS.labels(feature="summary", source="fallback").inc()
        return fallback_summary(article)

    try:
        text = await llm.complete(
            [{"role": "user", "content": build_summary_prompt(article)}],
            max_tokens=llm.settings.summary_max_tokens,
            temperature=llm.settings.summary_temperature,
        )
        LLM_COMPLETIONS.labels(feature="summary", source="llm").inc()
        return text
    except Exception as e:
        logger.error(f"Summary generation failed for article {article.id}: {e}")
        LLM_COMPLETIONS.labels(feature="summary", source="fallback").inc()
        return fallback_summary(article)


async def get_or_create_summary(article_id: str, storage: StorageBackend, llm: LLMClient) -> Optional[Summary]:
    """
    Return the stored TL;DR for an article, generating and persisting it on first use.

    Returns None when there is neither a summary nor an article to summarize.
    The store keeps one summary per article, so if a concurrent request stored
    one while we were waiting on the model, that one is returned.
    """
    existing = await run_storage(storage, storage.get_summary_for_article, article_id)
    if existing:
        return existing

    article = await run_storage(storage, storage.get_article, article_id)
    if article is None:
        return None

    text = await generate_summary_text(article, llm)
    summary = await run_storage(
        storage, storage.create_summary, SummaryCreate(article_id=article.id, summary=text)
    )
    logger.info(f"Stored summary {summary.id} for article {article.id}")
    return summary
