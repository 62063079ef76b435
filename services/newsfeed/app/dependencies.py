from fastapi import Request

from services.newsfeed.app.llm_client import LLMClient
from services.newsfeed.app.news_service import NewsService
from shared.config.settings import Settings
from shared.storage.base import StorageBackend
from shared.utils.health import HealthChecker


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


def get_news_service(request: Request) -> NewsService:
    return request.app.state.news_service


def get_llm(request: Request) -> LLMClient:
    return request.app.state.llm


def get_health_checker(request: Request) -> HealthChecker:
    return request.app.state.health_checker
