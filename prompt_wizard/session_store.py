# prompt_wizard/session_store.py

import json
import logging
import threading
import time
from typing import Optional

import pydantic
from sqlalchemy.orm import sessionmaker

from prompt_wizard.entities import Base, WizardSnapshot
from prompt_wizard.errors import ConfigurationError
from prompt_wizard.google_helpers import SESSION_STORE, SESSION_TTL_SECONDS, get_db_engine
from prompt_wizard.wizard_session import WizardSession

logger = logging.getLogger("prompt_wizard")


class SessionCache:
    """
    In-memory, per-browser-session wizard snapshots with:
    - sliding TTL (expires ttl_seconds after last touch)
    - snapshots kept as serialized JSON text, so a loaded session never
      aliases the object that was saved
    - thread-safe operations
    """

    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        # session_key -> {"snapshot": str, "expires_at": float}
        self._items: dict[str, dict[str, object]] = {}

    def save(self, key: str, session: WizardSession) -> None:
        data = json.dumps(session.to_snapshot())
        with self._lock:
            self._items[str(key)] = {"snapshot": data, "expires_at": time.time() + self.ttl_seconds}

    def load(self, key: str) -> Optional[WizardSession]:
        now = time.time()
        with self._lock:
            item = self._items.get(str(key))
            if item is None:
                return None
            if float(item["expires_at"]) <= now:
                del self._items[str(key)]
                return None
            item["expires_at"] = now + self.ttl_seconds
            data = item["snapshot"]
        return WizardSession.from_snapshot(json.loads(data))  # type: ignore[arg-type]

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(str(key), None)

    def sweep_expired(self) -> int:
        """
        Delete expired snapshots. Returns how many entries were removed.
        """
        now = time.time()
        removed = 0
        with self._lock:
            expired = [k for k, v in self._items.items() if float(v["expires_at"]) <= now]
            for k in expired:
                del self._items[k]
                removed += 1
        return removed


class SqlSessionStore:
    """
    Same contract as SessionCache, backed by the wizard_session_snapshot table.
    """

    def __init__(self, engine=None, ttl_seconds: int = SESSION_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds
        self.engine = engine if engine is not None else get_db_engine()
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine)

    def save(self, key: str, session: WizardSession) -> None:
        db = self.Session()
        try:
            row = db.get(WizardSnapshot, str(key))
            expires_at = time.time() + self.ttl_seconds
            if row is None:
                db.add(WizardSnapshot(session_key=str(key), payload=session.to_snapshot(), expires_at=expires_at))
            else:
                row.payload = session.to_snapshot()
                row.expires_at = expires_at
            db.commit()
        finally:
            db.close()

    def load(self, key: str) -> Optional[WizardSession]:
        db = self.Session()
        try:
            row = db.get(WizardSnapshot, str(key))
            if row is None:
                return None
            now = time.time()
            if row.expires_at <= now:
                db.delete(row)
                db.commit()
                return None
            row.expires_at = now + self.ttl_seconds
            payload = dict(row.payload)
            db.commit()
        finally:
            db.close()

        try:
            return WizardSession.from_snapshot(payload)
        except pydantic.ValidationError as e:
            logger.warning("[STORE] Discarding unreadable snapshot for %s: %s", key, e)
            return None

    def delete(self, key: str) -> None:
        db = self.Session()
        try:
            row = db.get(WizardSnapshot, str(key))
            if row is not None:
                db.delete(row)
                db.commit()
        finally:
            db.close()

    def sweep_expired(self) -> int:
        db = self.Session()
        try:
            removed = (
                db.query(WizardSnapshot)
                .filter(WizardSnapshot.expires_at <= time.time())
                .delete(synchronize_session=False)
            )
            db.commit()
        finally:
            db.close()
        return int(removed or 0)


def build_session_store(kind: str | None = None):
    kind = (kind or SESSION_STORE).lower()
    if kind == "memory":
        return SessionCache()
    if kind == "sql":
        return SqlSessionStore()
    raise ConfigurationError(f"Unknown session store: {kind}")
