"""
Ledger document database model.
Stores one owner's accounts, transactions and cards as a single JSON blob.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from bankdash.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class LedgerDocument(Base):
    """
    Ledger table - one row per owner, read and written whole.
    """
    __tablename__ = "ledger_documents"

    owner_key = Column(String(200), primary_key=True, index=True)
    data = Column(JSON, nullable=False)
    revision = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<LedgerDocument(owner_key={self.owner_key}, revision={self.revision})>"
