from fastapi import Query
from typing import Optional

from erp_ledger.core.config import settings
from erp_ledger.core.database import SessionLocal


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class Pagination:
    """Common skip/limit query parameters for list endpoints."""

    def __init__(
        self,
        skip: int = Query(0, ge=0),
        limit: int = Query(25, ge=1, le=settings.PAGE_SIZE_LIMIT),
        search: Optional[str] = Query(None),
    ):
        self.skip = skip
        self.limit = limit
        self.search = search
