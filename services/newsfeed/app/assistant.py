from services.newsfeed.app.fallbacks import fallback_chat_response
from services.newsfeed.app.llm_client import LLMClient
from services.newsfeed.app.metrics import LLM_COMPLETIONS
from shared.app_logging.logger import get_logger

logger = get_logger("newsfeed.assistant")

SYSTEM_PROMPT = (
    "You are a helpful coding assistant for developers. Provide concise, practical answers about "
    "programming, debugging, and software development. Include code examples when relevant."
)


async def answer_question(message: str, llm: LLMClient) -> str:
    """One-shot answer; the conversation transcript lives in the browser."""
    if not llm.configured:
        LLM_COMPLETIONS.labels(feature="chat", source="fallback").inc()
        return fallback_chat_response(message)

    try:
        text = await llm.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
            max_tokens=llm.settings.chat_max_tokens,
            temperature=llm.settings.chat_temperature,
        )
        LLM_COMPLETIONS.labels(feature="chat", source="llm").inc()
        return text
    except Exception as e:
        logger.error(f"Chat completion failed: {e}")
        LLM_COMPLETIONS.labels(feature="chat", source="fallback").inc()
        return fallback_chat_response(message)
