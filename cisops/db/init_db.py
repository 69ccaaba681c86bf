"""Schema creation and first-run seeding."""

import logging
from pathlib import Path

from sqlalchemy.engine import make_url

from cisops.core.config import settings
from cisops.db.base_class import Base
from cisops.db.session import SessionLocal, engine
from cisops.models import models  # noqa: F401  (registers tables on Base.metadata)
from cisops.services.auth_service import ensure_default_admin

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database or parsed.database == ":memory:":
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    if settings.DATABASE_URL:
        _ensure_sqlite_directory(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
    with SessionLocal() as db:
        ensure_default_admin(db)
