"""
Ledger error taxonomy.

Services raise these; the API layer maps each one to an HTTP status code.
"""


class LedgerError(Exception):
    """Base class for every error the ledger surfaces to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Bad input shape or range."""

    status_code = 400


class NotFoundError(LedgerError):
    """Unknown account, card or transaction."""

    status_code = 404


class InsufficientFundsError(LedgerError):
    """A debit would take an account below zero."""

    status_code = 400

    def __init__(self, account_id: str, balance, required):
        super().__init__(
            f"Insufficient funds in account {account_id}. Balance: {balance}, Required: {required}"
        )
        self.account_id = account_id
        self.balance = balance
        self.required = required


class PaymentMethodError(LedgerError):
    """The payment collaborator could not tokenize the card."""

    status_code = 402


class PersistenceError(LedgerError):
    """The underlying store is unavailable or holds a corrupt document."""

    status_code = 503


class TransferInProgressError(LedgerError):
    """Another transfer for the same owner has not resolved yet."""

    status_code = 409
