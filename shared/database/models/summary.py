import uuid

from sqlalchemy import Column, DateTime, String, Text, func

from shared.database.base import Base


class Summary(Base):
    """One TL;DR per article; the unique article_id backs that rule."""

    __tablename__ = "summaries"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    article_id = Column(String, nullable=False, unique=True, index=True)
    summary = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
