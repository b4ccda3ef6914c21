"""
Transfer engine.

The only path by which money moves. Every operation validates its input,
then changes balances and appends log entries inside a single
``LedgerStorage.transaction`` so that both are committed together; any
error raised before the block ends leaves the stored ledger untouched.
"""

import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional, Set, Tuple

from fastapi.concurrency import run_in_threadpool

from bankdash.core.exceptions import (
    InsufficientFundsError,
    LedgerError,
    PaymentMethodError,
    TransferInProgressError,
    ValidationError,
)
from bankdash.core.logging import get_logger
from bankdash.core.money import positive_amount
from bankdash.core.utils import is_valid_email, new_id, utcnow
from bankdash.schemas.account import Account
from bankdash.schemas.transaction import (
    CardDetails,
    PaymentMethod,
    Transaction,
    TransactionDirection,
    TransactionDraft,
    TransactionKind,
    TransferResult,
)
from bankdash.services.accounts import apply_delta, default_account, find_account
from bankdash.services.cards import find_card
from bankdash.services.events import ChangeNotifier, LedgerChange
from bankdash.services.payments import PaymentGateway, PaymentMethodToken, is_expired, tokenize_card
from bankdash.services.storage import LedgerStorage
from bankdash.services.transactions import append_entry, ensure_reference_unused

logger = get_logger(__name__)

# Sync routes run on a thread pool, so in-flight sets are shared across threads
_in_flight_lock = threading.Lock()


def _snapshot(account: Account) -> Account:
    return account.model_copy()


class TransferEngine:
    """
    Moves money between accounts, to external recipients and to card
    merchants.
    """

    def __init__(
        self,
        storage: LedgerStorage,
        gateway: Optional[PaymentGateway] = None,
        notifier: Optional[ChangeNotifier] = None,
        clock: Callable[[], datetime] = utcnow,
        payment_timeout: Optional[float] = None,
        in_flight: Optional[Set[str]] = None,
    ):
        self.storage = storage
        self.gateway = gateway
        self.notifier = notifier
        self.clock = clock
        self.payment_timeout = payment_timeout
        # May be shared between engine instances
        self._in_flight: Set[str] = in_flight if in_flight is not None else set()

    @contextmanager
    def _submission(self, owner_id: str, operation: str):
        """
        Reject a second transfer for an owner while one is still running,
        and log any rejection.
        """
        with _in_flight_lock:
            if owner_id in self._in_flight:
                logger.warning("transfer_rejected", owner_id=owner_id, operation=operation, reason="in_progress")
                raise TransferInProgressError("A transfer is already in progress; wait for it to finish")
            self._in_flight.add(owner_id)
        try:
            yield
        except LedgerError as exc:
            logger.warning(
                "transfer_rejected",
                owner_id=owner_id,
                operation=operation,
                error=type(exc).__name__,
                reason=exc.message,
            )
            raise
        finally:
            with _in_flight_lock:
                self._in_flight.discard(owner_id)

    def transfer_internal(
        self,
        owner_id: str,
        from_account_id: str,
        to_account_id: str,
        amount,
        description: str = "",
        reference_id: Optional[str] = None,
    ) -> TransferResult:
        """
        Move ``amount`` between two of the owner's accounts.

        Records a debit and a credit sharing one correlation id.

        Raises:
            ValidationError: Non-positive amount, same account, or reused reference
            NotFoundError: Either account does not exist
            InsufficientFundsError: The source balance is below ``amount``
        """
        with self._submission(owner_id, "transfer_internal"):
            amount = positive_amount(amount)
            if from_account_id == to_account_id:
                raise ValidationError("Cannot transfer to the same account")

            correlation_id = new_id()
            with self.storage.transaction(owner_id) as ledger:
                ensure_reference_unused(ledger, reference_id)
                source = find_account(ledger, from_account_id)
                destination = find_account(ledger, to_account_id)

                apply_delta(ledger, source.id, -amount)
                apply_delta(ledger, destination.id, amount)

                timestamp = self.clock()
                common = dict(
                    amount=amount,
                    description=description or "",
                    category="Transfer",
                    correlation_id=correlation_id,
                    reference_id=reference_id,
                    payment_method=PaymentMethod.BANK,
                )
                debit = append_entry(ledger, owner_id, TransactionDraft(
                    kind=TransactionKind.INTERNAL_TRANSFER_DEBIT,
                    direction=TransactionDirection.DEBIT,
                    counterparty=destination.id,
                    account_id=source.id,
                    **common,
                ), timestamp)
                credit = append_entry(ledger, owner_id, TransactionDraft(
                    kind=TransactionKind.INTERNAL_TRANSFER_CREDIT,
                    direction=TransactionDirection.CREDIT,
                    counterparty=source.id,
                    account_id=destination.id,
                    **common,
                ), timestamp)
                accounts = [_snapshot(source), _snapshot(destination)]

        logger.info(
            "transfer_completed",
            owner_id=owner_id,
            kind="internal",
            correlation_id=correlation_id,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=str(amount),
        )
        result = TransferResult(correlation_id=correlation_id, transactions=[debit, credit], accounts=accounts)
        self._notify(owner_id, "transfer_internal", result)
        return result

    async def transfer_external(
        self,
        owner_id: str,
        recipient_email: str,
        amount,
        description: str = "",
        method=PaymentMethod.BANK,
        card: Optional[CardDetails] = None,
        from_account_id: Optional[str] = None,
        category: str = "Transfer",
        reference_id: Optional[str] = None,
    ) -> TransferResult:
        """
        Send money to a recipient outside the ledger.

        One ``external-transfer`` debit is recorded against
        ``from_account_id`` (or the owner's first account). With
        ``method='card'`` the card is tokenized first; only the token,
        brand and last four digits are recorded.

        Raises:
            ValidationError: Bad amount, email, method, or missing card details
            NotFoundError: No account to debit
            InsufficientFundsError: The account balance is below ``amount``
            PaymentMethodError: Tokenization failed or timed out
        """
        with self._submission(owner_id, "transfer_external"):
            amount = positive_amount(amount)
            recipient_email = (recipient_email or "").strip()
            if not is_valid_email(recipient_email):
                raise ValidationError("Please enter a valid recipient email")
            try:
                method = PaymentMethod(method)
            except ValueError as exc:
                raise ValidationError(f"Unsupported payment method: {method}") from exc
            if method == PaymentMethod.CARD and card is None:
                raise ValidationError("Card details are required for card transfers")

            # Storage calls block, so they run on the thread pool rather than the event loop.
            # Fail before contacting the payment provider if the debit cannot succeed.
            source_id = await run_in_threadpool(
                self._external_source, owner_id, amount, from_account_id, reference_id
            )

            token: Optional[PaymentMethodToken] = None
            if method == PaymentMethod.CARD:
                if self.gateway is None:
                    raise PaymentMethodError("No payment provider is configured")
                token = await tokenize_card(self.gateway, card, self.payment_timeout)

            correlation_id = new_id()
            draft = TransactionDraft(
                kind=TransactionKind.EXTERNAL_TRANSFER,
                direction=TransactionDirection.DEBIT,
                amount=amount,
                counterparty=recipient_email,
                description=description or "",
                category=category or "Transfer",
                account_id=source_id,
                correlation_id=correlation_id,
                reference_id=reference_id,
                payment_method=method,
                card_last4=token.last4 if token else None,
                card_brand=token.brand if token else None,
                payment_token=token.token if token else None,
            )
            entry, accounts = await run_in_threadpool(self._commit_debit, owner_id, draft)

        logger.info(
            "transfer_completed",
            owner_id=owner_id,
            kind="external",
            method=method.value,
            transaction_id=entry.id,
            amount=str(amount),
        )
        result = TransferResult(correlation_id=correlation_id, transactions=[entry], accounts=accounts)
        self._notify(owner_id, "transfer_external", result)
        return result

    def _external_source(
        self, owner_id: str, amount: Decimal, from_account_id: Optional[str], reference_id: Optional[str]
    ) -> str:
        """Id of the account an external transfer will debit, if it can cover ``amount``."""
        ledger = self.storage.load(owner_id)
        ensure_reference_unused(ledger, reference_id)
        source = default_account(ledger, from_account_id)
        if source.balance < amount:
            raise InsufficientFundsError(source.id, source.balance, amount)
        return source.id

    def _commit_debit(self, owner_id: str, draft: TransactionDraft) -> Tuple[Transaction, List[Account]]:
        with self.storage.transaction(owner_id) as ledger:
            ensure_reference_unused(ledger, draft.reference_id)
            account = apply_delta(ledger, draft.account_id, -draft.amount)
            entry = append_entry(ledger, owner_id, draft, self.clock())
            accounts = [_snapshot(account)]
        return entry, accounts

    def pay_with_card(
        self,
        owner_id: str,
        card_id: str,
        amount,
        merchant: str,
        description: str = "",
        category: str = "Shopping",
        from_account_id: Optional[str] = None,
    ) -> TransferResult:
        """
        Pay a merchant with a registered debit card.

        Raises:
            NotFoundError: Unknown card or no account to debit
            PaymentMethodError: The card has expired
            InsufficientFundsError: The account balance is below ``amount``
        """
        with self._submission(owner_id, "pay_with_card"):
            amount = positive_amount(amount)
            merchant = (merchant or "").strip()
            if not merchant:
                raise ValidationError("Merchant is required")

            correlation_id = new_id()
            with self.storage.transaction(owner_id) as ledger:
                card = find_card(ledger, card_id)
                if is_expired(card.expiry_month, card.expiry_year):
                    raise PaymentMethodError(f"{card.brand} card ending {card.last4} has expired")
                account = apply_delta(ledger, default_account(ledger, from_account_id).id, -amount)
                entry = append_entry(ledger, owner_id, TransactionDraft(
                    kind=TransactionKind.CARD_PAYMENT,
                    direction=TransactionDirection.DEBIT,
                    amount=amount,
                    counterparty=merchant,
                    description=description or f"Card payment to {merchant}",
                    category=category or "Shopping",
                    account_id=account.id,
                    correlation_id=correlation_id,
                    payment_method=PaymentMethod.CARD,
                    card_id=card.id,
                    card_last4=card.last4,
                    card_brand=card.brand,
                ), self.clock())
                accounts = [_snapshot(account)]

        logger.info("card_payment_completed", owner_id=owner_id, card_id=card_id, transaction_id=entry.id, amount=str(amount))
        result = TransferResult(correlation_id=correlation_id, transactions=[entry], accounts=accounts)
        self._notify(owner_id, "card_payment", result)
        return result

    def record_manual_entry(
        self,
        owner_id: str,
        account_id: str,
        direction,
        amount,
        description: str,
        category: str,
        counterparty: str = "",
    ) -> TransferResult:
        """
        Record an income or expense the owner enters by hand and apply it to
        the account balance.
        """
        with self._submission(owner_id, "record_manual_entry"):
            amount = positive_amount(amount)
            try:
                direction = TransactionDirection(direction)
            except ValueError as exc:
                raise ValidationError(f"Unknown direction: {direction}") from exc
            if not description or not category:
                raise ValidationError("Description and category are required")

            delta: Decimal = amount if direction == TransactionDirection.CREDIT else -amount
            correlation_id = new_id()
            with self.storage.transaction(owner_id) as ledger:
                account = apply_delta(ledger, account_id, delta)
                entry = append_entry(ledger, owner_id, TransactionDraft(
                    kind=TransactionKind.MANUAL_ENTRY,
                    direction=direction,
                    amount=amount,
                    counterparty=counterparty or "",
                    description=description,
                    category=category,
                    account_id=account.id,
                    correlation_id=correlation_id,
                ), self.clock())
                accounts = [_snapshot(account)]

        logger.info("manual_entry_recorded", owner_id=owner_id, transaction_id=entry.id, direction=direction.value)
        result = TransferResult(correlation_id=correlation_id, transactions=[entry], accounts=accounts)
        self._notify(owner_id, "manual_entry", result)
        return result

    def _notify(self, owner_id: str, action: str, result: TransferResult) -> None:
        if self.notifier is None:
            return
        self.notifier.publish(LedgerChange(
            owner_id=owner_id,
            action=action,
            account_ids=tuple(a.id for a in result.accounts),
            transaction_ids=tuple(t.id for t in result.transactions),
        ))
