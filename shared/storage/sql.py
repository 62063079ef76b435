from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import func, or_, text
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from shared.app_logging.logger import get_logger
from shared.database.models.article import Article as ArticleRow
from shared.database.models.bookmark import Bookmark as BookmarkRow
from shared.database.models.summary import Summary as SummaryRow
from shared.schemas.news import (
    Article,
    ArticleCreate,
    Bookmark,
    BookmarkCreate,
    NewsCategory,
    Summary,
    SummaryCreate,
)
from shared.storage.base import StorageBackend, as_utc, build_article, new_id, utcnow
from shared.utils.retry import retry

logger = get_logger(__name__)


def _to_article(row: ArticleRow) -> Article:
    return Article(
        id=row.id,
        title=row.title,
        description=row.description,
        url=row.url,
        url_to_image=row.url_to_image,
        published_at=as_utc(row.published_at),
        source=row.source,
        category=row.category,
        content=row.content,
    )


def _to_summary(row: SummaryRow) -> Summary:
    return Summary(
        id=row.id,
        article_id=row.article_id,
        summary=row.summary,
        created_at=as_utc(row.created_at),
    )


def _to_bookmark(row: BookmarkRow) -> Bookmark:
    return Bookmark(id=row.id, article_id=row.article_id, created_at=as_utc(row.created_at))


class SqlStorage(StorageBackend):
    """SQLAlchemy-backed storage (PostgreSQL in production, SQLite locally)."""

    name = "sql"

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except Exception as e:
            session.rollback()
            logger.error(f"Database session error: {e}")
            raise
        finally:
            session.close()

    @retry(retryable_exceptions=(OperationalError,))
    def list_articles(self, category=None, search=None, limit=20, offset=0) -> List[Article]:
        with self._session() as session:
            query = session.query(ArticleRow)
            if category and category.lower() != NewsCategory.ALL.value:
                query = query.filter(func.lower(ArticleRow.category) == category.lower())
            if search:
                needle = search.lower()
                query = query.filter(
                    or_(
                        func.lower(ArticleRow.title).contains(needle, autoescape=True),
                        func.lower(ArticleRow.description).contains(needle, autoescape=True),
                        func.lower(ArticleRow.source).contains(needle, autoescape=True),
                    )
                )
            rows = (
                query.order_by(ArticleRow.published_at.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [_to_article(row) for row in rows]

    @retry(retryable_exceptions=(OperationalError,))
    def get_article(self, article_id: str) -> Optional[Article]:
        with self._session() as session:
            row = session.get(ArticleRow, article_id)
            return _to_article(row) if row else None

    @retry(retryable_exceptions=(OperationalError,))
    def get_article_by_url(self, url: str, category: str) -> Optional[Article]:
        with self._session() as session:
            row = (
                session.query(ArticleRow)
                .filter(ArticleRow.url == url, func.lower(ArticleRow.category) == category.lower())
                .first()
            )
            return _to_article(row) if row else None

    def create_article(self, data: ArticleCreate) -> Article:
        article = build_article(data)
        with self._session() as session:
            session.add(ArticleRow(**article.model_dump()))
            session.commit()
        return article

    def create_articles(self, items) -> List[Article]:
        articles = [build_article(item) for item in items]
        with self._session() as session:
            session.add_all([ArticleRow(**article.model_dump()) for article in articles])
            session.commit()
        logger.info(f"Stored {len(articles)} articles")
        return articles

    @retry(retryable_exceptions=(OperationalError,))
    def get_summary_for_article(self, article_id: str) -> Optional[Summary]:
        with self._session() as session:
            row = session.query(SummaryRow).filter(SummaryRow.article_id == article_id).first()
            return _to_summary(row) if row else None

    def create_summary(self, data: SummaryCreate) -> Summary:
        with self._session() as session:
            row = SummaryRow(
                id=new_id(),
                article_id=data.article_id,
                summary=data.summary,
                created_at=utcnow(),
            )
            session.add(row)
            try:
                session.commit()
                return _to_summary(row)
            except IntegrityError:
                session.rollback()
                logger.warning(f"Summary for article {data.article_id} already exists; keeping it")
        return self.get_summary_for_article(data.article_id)

    @retry(retryable_exceptions=(OperationalError,))
    def list_bookmarks(self) -> List[Bookmark]:
        with self._session() as session:
            rows = session.query(BookmarkRow).order_by(BookmarkRow.created_at.desc()).all()
            return [_to_bookmark(row) for row in rows]

    def create_bookmark(self, data: BookmarkCreate) -> Bookmark:
        with self._session() as session:
            row = BookmarkRow(id=new_id(), article_id=data.article_id, created_at=utcnow())
            session.add(row)
            try:
                session.commit()
                return _to_bookmark(row)
            except IntegrityError:
                session.rollback()
                logger.info(f"Article {data.article_id} already bookmarked")
        with self._session() as session:
            existing = session.query(BookmarkRow).filter(BookmarkRow.article_id == data.article_id).one()
            return _to_bookmark(existing)

    def delete_bookmark(self, article_id: str) -> bool:
        with self._session() as session:
            deleted = (
                session.query(BookmarkRow)
                .filter(BookmarkRow.article_id == article_id)
                .delete(synchronize_session=False)
            )
            session.commit()
            return deleted > 0

    @retry(retryable_exceptions=(OperationalError,))
    def is_bookmarked(self, article_id: str) -> bool:
        with self._session() as session:
            return (
                session.query(BookmarkRow.id)
                .filter(BookmarkRow.article_id == article_id)
                .first()
                is not None
            )

    def ping(self) -> bool:
        try:
            with self._session() as session:
                session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False

    def close(self) -> None:
        self._session_factory.kw["bind"].dispose()
