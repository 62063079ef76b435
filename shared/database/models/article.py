from sqlalchemy import Column, DateTime, Index, String, Text

from shared.database.base import Base


class Article(Base):
    __tablename__ = "articles"

    id = Column(String, primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    url = Column(Text, nullable=False)
    url_to_image = Column(Text, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=False, index=True)
    source = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=True)

    __table_args__ = (Index("ix_articles_category_url", "category", "url"),)
