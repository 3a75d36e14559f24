from __future__ import annotations

import logging

from sqlalchemy import text

from libvault.db.models import Base
from libvault.db.session import get_engine

logger = logging.getLogger(__name__)


def initialize_database() -> None:
    """Create missing tables. Existing tables and rows are left untouched."""
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.debug("Schema ready at %s", engine.url.render_as_string(hide_password=True))

    if engine.dialect.name == "sqlite":
        with engine.begin() as connection:
            connection.execute(text("PRAGMA optimize;"))
