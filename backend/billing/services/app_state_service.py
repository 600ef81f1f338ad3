"""Key-value JSON blobs for the catalog and company profile.

Each key is loaded once at startup and rewritten wholesale on every change.
No partial updates, no versioning.
"""
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from billing.core.exceptions import SyncError
from billing.models.app_state import AppState

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "products"
COMPANY_SETTINGS_KEY = "company_settings"


class BlobStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def load(self, key: str, default: Any = None) -> Any:
        db = self._session_factory()
        try:
            row = db.query(AppState).filter(AppState.key == key).first()
            return row.value if row else default
        except SQLAlchemyError as e:
            logger.error(f"[AppState] Failed to load '{key}': {e}")
            raise SyncError(f"Could not load {key}") from e
        finally:
            db.close()

    def save(self, key: str, value: Any) -> None:
        db = self._session_factory()
        try:
            row = db.query(AppState).filter(AppState.key == key).first()
            if row:
                row.value = value
            else:
                db.add(AppState(key=key, value=value))
            db.commit()
            logger.debug(f"[AppState] Saved '{key}'")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"[AppState] Failed to save '{key}': {e}")
            raise SyncError(f"Could not save {key}") from e
        finally:
            db.close()
