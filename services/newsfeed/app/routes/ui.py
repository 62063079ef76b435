from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from services.newsfeed.app.dependencies import get_app_settings
from services.newsfeed.app.template_engine import render
from shared.config.settings import Settings
from shared.schemas.news import CATEGORY_LABELS

router = APIRouter(tags=["ui"])

APP_NAME = "DevBytes"
CHAT_WELCOME = (
    "Hi! I'm your coding assistant. Ask me about programming, debugging, "
    "or any tech questions you have!"
)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(settings: Settings = Depends(get_app_settings)):
    """Single-page shell. The browser script drives everything else through /api."""
    html = render(
        "index.html.j2",
        app_name=APP_NAME,
        categories=[(category.value, label) for category, label in CATEGORY_LABELS.items()],
        page_size=settings.service.page_size,
        debounce_ms=settings.service.search_debounce_ms,
        chat_welcome=CHAT_WELCOME,
        version=settings.version,
    )
    return HTMLResponse(html)
