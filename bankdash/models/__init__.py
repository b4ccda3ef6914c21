"""
Database models package.
"""

from bankdash.models.ledger_document import LedgerDocument

__all__ = ["LedgerDocument"]
