"""SQLAlchemy adapter – paged chunk fetcher and async session factory."""
from stream_export.adapters.sqlalchemy.fetcher import SessionFactory, SqlAlchemyChunkFetcher
from stream_export.adapters.sqlalchemy.session import SqlAlchemySessionFactory

__all__ = ["SessionFactory", "SqlAlchemyChunkFetcher", "SqlAlchemySessionFactory"]
