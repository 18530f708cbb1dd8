import threading
from contextlib import contextmanager
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from promptswitch.errors import NotFoundError, SerializationError, StorageError
from promptswitch.extensions import cache, db
from promptswitch.models.prompt import Prompt

log = structlog.get_logger()

CACHE_KEY = "all_prompts"
CACHE_TIMEOUT = 3600


def _to_record(row: Prompt) -> dict:
    try:
        return row.to_dict()
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Malformed prompt row {getattr(row, 'id', None)!r}: {e}") from e


class PromptStore:
    """Keyed table of prompt records.

    All operations are serialized by one lock. The store does not enforce
    the single-active rule by itself: ``disable_all`` followed by
    ``enable_prompt`` is two transactions, ``set_active`` is one.
    Records are handed out as dict copies. Only ``list_prompts`` is cached;
    the cache is cleared by writes from this process, so anything another
    process may have changed is read with the uncached getters.
    """

    def __init__(self):
        self._lock = threading.Lock()

    @contextmanager
    def _reading(self, action: str):
        with self._lock:
            try:
                yield
            except SQLAlchemyError as e:
                db.session.rollback()
                raise StorageError(f"Failed to {action}: {e}") from e

    @contextmanager
    def _writing(self, action: str):
        with self._lock:
            try:
                yield
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                raise StorageError(f"Failed to {action}: {e}") from e
            except Exception:
                db.session.rollback()
                raise
            finally:
                cache.delete(CACHE_KEY)

    def list_prompts(self) -> list[dict]:
        """All prompts, most recently created first."""
        with self._reading("list prompts"):
            records = cache.get(CACHE_KEY)
            if records is None:
                rows = Prompt.query.order_by(Prompt.created_at.desc(), Prompt.id.desc()).all()
                records = [_to_record(row) for row in rows]
                cache.set(CACHE_KEY, records, timeout=CACHE_TIMEOUT)
        return [dict(record) for record in records]

    def get_prompt(self, prompt_id: str) -> Optional[dict]:
        with self._reading("load prompt"):
            row = db.session.get(Prompt, prompt_id)
            return _to_record(row) if row is not None else None

    def get_enabled(self) -> Optional[dict]:
        """The enabled prompt as stored right now (never served from the cache)."""
        with self._reading("load enabled prompt"):
            row = (
                Prompt.query.filter_by(enabled=True)
                .order_by(Prompt.created_at.desc(), Prompt.id.desc())
                .first()
            )
            return _to_record(row) if row is not None else None

    def list_contents(self) -> list[str]:
        """Content of every stored prompt, read from the database."""
        with self._reading("load prompt contents"):
            return [content for (content,) in db.session.query(Prompt.content).all()]

    def is_empty(self) -> bool:
        with self._reading("count prompts"):
            return db.session.query(Prompt.id).first() is None

    def save_prompt(self, prompt: dict) -> None:
        """Insert ``prompt`` or fully replace the row with the same id."""
        with self._writing("save prompt"):
            db.session.merge(Prompt.from_dict(prompt))
        log.debug("prompt.saved", prompt_id=prompt.get("id"))

    def delete_prompt(self, prompt_id: str) -> None:
        with self._writing("delete prompt"):
            row = db.session.get(Prompt, prompt_id)
            if row is not None:
                db.session.delete(row)

    def disable_all(self) -> None:
        with self._writing("disable prompts"):
            Prompt.query.update({Prompt.enabled: False})

    def enable_prompt(self, prompt_id: str) -> None:
        # Caller is responsible for calling disable_all() first
        with self._writing("enable prompt"):
            Prompt.query.filter_by(id=prompt_id).update({Prompt.enabled: True})

    def set_active(self, prompt_id: str) -> None:
        """Make ``prompt_id`` the only enabled prompt, in one transaction.

        Raises NotFoundError (and changes nothing) if the id does not exist.
        """
        with self._writing("set active prompt"):
            Prompt.query.filter(Prompt.id != prompt_id).update({Prompt.enabled: False})
            updated = Prompt.query.filter_by(id=prompt_id).update({Prompt.enabled: True})
            if not updated:
                raise NotFoundError(f"Prompt {prompt_id} not found")


# One store per process so every request shares the same lock
prompt_store = PromptStore()
