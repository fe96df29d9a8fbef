"""Adapters – framework integrations (FastAPI / Starlette, SQLAlchemy)."""
