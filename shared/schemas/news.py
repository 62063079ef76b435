from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic.alias_generators import to_camel


class NewsCategory(str, Enum):
    ALL = "all"
    AI = "ai"
    PROGRAMMING = "programming"
    STARTUPS = "startups"
    CLOUD = "cloud"
    CYBERSECURITY = "cybersecurity"
    DEVOPS = "devops"


CATEGORY_LABELS = {
    NewsCategory.ALL: "All",
    NewsCategory.AI: "AI",
    NewsCategory.PROGRAMMING: "Programming",
    NewsCategory.STARTUPS: "Startups",
    NewsCategory.CLOUD: "Cloud",
    NewsCategory.CYBERSECURITY: "Cybersecurity",
    NewsCategory.DEVOPS: "DevOps",
}


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleCreate(CamelModel):
    id: Optional[str] = Field(None, description="Assigned by the store when absent")
    title: str = Field(..., description="Headline")
    description: Optional[str] = Field(None, description="Short description from the provider")
    url: str = Field(..., description="Link to the full article")
    url_to_image: Optional[str] = Field(None, description="Lead image URL")
    published_at: datetime = Field(..., description="Publication timestamp")
    source: str = Field(..., description="Publisher name")
    category: str = Field(..., description="Category the article was fetched under")
    content: Optional[str] = Field(None, description="Truncated body text from the provider")


class Article(ArticleCreate):
    id: str = Field(..., description="Unique article identifier")


class SummaryCreate(CamelModel):
    article_id: str = Field(..., description="Article the summary belongs to")
    summary: str = Field(..., description="Bullet-point TL;DR text")


class Summary(SummaryCreate):
    id: str
    created_at: datetime


class BookmarkCreate(CamelModel):
    article_id: StrictStr = Field(..., min_length=1, description="Article to bookmark")


class Bookmark(BookmarkCreate):
    id: str
    created_at: datetime


class BookmarkedArticle(Article):
    bookmarked_at: datetime


class BookmarkStatus(CamelModel):
    is_bookmarked: bool


class DeleteResult(BaseModel):
    success: bool


class ChatRequest(BaseModel):
    message: StrictStr = Field(..., min_length=1, description="User question for the coding assistant")


class ChatResponse(BaseModel):
    response: str
