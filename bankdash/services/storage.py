"""
Ledger storage.

Each owner's ledger is one JSON document read and written whole. Services
never touch a backend directly: every mutation runs inside
``LedgerStorage.transaction(owner_id)``, which hands out a private copy of
the document and writes it back only if the block finishes without raising.
That block is the ledger's critical section: balances and log entries
changed inside it become visible together or not at all.
"""

import json
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bankdash.core.exceptions import PersistenceError, ValidationError
from bankdash.core.logging import get_logger
from bankdash.models.ledger_document import LedgerDocument
from bankdash.schemas.ledger import LedgerData

logger = get_logger(__name__)


def owner_key(owner_id: str) -> str:
    """Storage key for an owner's document."""
    if not isinstance(owner_id, str) or not owner_id.strip():
        raise ValidationError("Owner id is required")
    return f"ledger:{owner_id}"


class LedgerStorage(ABC):
    """
    Get-whole / put-whole persistence for per-owner ledger documents.

    Backends implement ``_read`` and ``_write``; ``transaction`` is built on
    top of them and may be overridden to add locking.
    """

    @abstractmethod
    def _read(self, key: str) -> Optional[dict]:
        """Return the raw stored document, or None if there is none."""

    @abstractmethod
    def _write(self, key: str, document: dict) -> None:
        """Replace the stored document."""

    def load(self, owner_id: str) -> LedgerData:
        return LedgerData.from_document(self._read(owner_key(owner_id)))

    def save(self, owner_id: str, ledger: LedgerData) -> None:
        self._write(owner_key(owner_id), ledger.to_document())

    @contextmanager
    def transaction(self, owner_id: str) -> Iterator[LedgerData]:
        """
        Yield a mutable copy of the owner's ledger and persist it on success.

        Raises:
            PersistenceError: If the document cannot be read or written
        """
        ledger = self.load(owner_id)
        yield ledger
        self.save(owner_id, ledger)


class InMemoryLedgerStorage(LedgerStorage):
    """
    Process-local storage, used for tests and demos.

    Documents are kept as JSON text so every read returns a fresh copy and
    a failed transaction leaves the stored bytes untouched.
    """

    def __init__(self):
        self._documents: Dict[str, str] = {}

    def _read(self, key: str) -> Optional[dict]:
        raw = self._documents.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise PersistenceError(f"Stored ledger document {key} is not valid JSON") from exc

    def _write(self, key: str, document: dict) -> None:
        self._documents[key] = json.dumps(document, sort_keys=True)

    def raw(self, owner_id: str) -> Optional[str]:
        """The stored JSON text for an owner, exactly as persisted."""
        return self._documents.get(owner_key(owner_id))

    def put_raw(self, owner_id: str, raw: str) -> None:
        self._documents[owner_key(owner_id)] = raw


class SQLAlchemyLedgerStorage(LedgerStorage):
    """
    Storage backed by the ``ledger_documents`` table.

    ``transaction`` locks the owner's row (SELECT ... FOR UPDATE) for the
    duration of the block and commits once; any exception rolls back.
    """

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, key: str, lock: bool = False) -> Optional[LedgerDocument]:
        query = self.db.query(LedgerDocument).filter(LedgerDocument.owner_key == key)
        if lock:
            query = query.with_for_update()
        return query.first()

    def _read(self, key: str) -> Optional[dict]:
        try:
            row = self._get_row(key)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Ledger store is unavailable") from exc
        return row.data if row is not None else None

    def _store(self, key: str, document: dict, row: Optional[LedgerDocument]) -> None:
        if row is None:
            row = LedgerDocument(owner_key=key, data=document, revision=1)
            self.db.add(row)
        else:
            row.data = document
            row.revision = (row.revision or 0) + 1
        self.db.commit()

    def _write(self, key: str, document: dict) -> None:
        try:
            self._store(key, document, self._get_row(key, lock=True))
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to write ledger document") from exc

    @contextmanager
    def transaction(self, owner_id: str) -> Iterator[LedgerData]:
        key = owner_key(owner_id)
        try:
            row = self._get_row(key, lock=True)
            ledger = LedgerData.from_document(row.data if row is not None else None)
            yield ledger
            self._store(key, ledger.to_document(), row)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("ledger_write_failed", owner_id=owner_id, error=str(exc))
            raise PersistenceError("Failed to write ledger document") from exc
        except Exception:
            # Expected errors (validation, funds) and anything unexpected
            self.db.rollback()
            raise
