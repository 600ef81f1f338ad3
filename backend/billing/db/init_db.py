"""Create all tables. Run on app startup."""
import logging

from sqlalchemy.engine import Engine

from billing.db.base import Base
from billing.models import invoice, app_state  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind: Engine = None):
    if bind is None:
        from billing.db.session import engine
        bind = engine
    Base.metadata.create_all(bind=bind)
    logger.info(f"[DB] Tables ready on {bind.url.render_as_string(hide_password=True)}")
