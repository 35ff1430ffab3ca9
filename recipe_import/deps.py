"""FastAPI dependencies.

Provides:
- Database session dependency
- Session factory for the taxonomy repository (one session per lookup)
- Shared parser registry
"""

from functools import lru_cache

from fastapi import Depends

from .db import get_db, session_factory
from .parsing import ParserRegistry
from .services.taxonomy import SqlTaxonomyRepository, TaxonomyRepository

__all__ = ["get_db", "get_session_factory", "get_registry", "get_taxonomy_repository"]


def get_session_factory():
    return session_factory()


@lru_cache
def get_registry() -> ParserRegistry:
    # Read-only after construction, safe to share
    return ParserRegistry()


def get_taxonomy_repository(session_factory=Depends(get_session_factory)) -> TaxonomyRepository:
    return SqlTaxonomyRepository(session_factory)
