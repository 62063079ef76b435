from fastapi import APIRouter, Depends

from services.newsfeed.app.assistant import answer_question
from services.newsfeed.app.dependencies import get_llm
from services.newsfeed.app.llm_client import LLMClient
from shared.schemas.news import ChatRequest, ChatResponse

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
async def chat(payload: ChatRequest, llm: LLMClient = Depends(get_llm)):
    """Answer a coding question. Each request stands alone."""
    return ChatResponse(response=await answer_question(payload.message, llm))
