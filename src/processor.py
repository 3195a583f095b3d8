import logging
from decimal import localcontext
from typing import Optional

from account_store import AccountStore
from config import EngineConfig
from errors import PaymentsEngineError, ErrorKind, RejectionReason
from ledger import TransactionLedger
from models import (
    Transaction,
    TransactionType,
    TransactionRecord,
    ClientAccount,
    Disposition,
    ProcessingResult,
    AMOUNT_CONTEXT,
)

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to the ledger and account store, one at a time.
    Every command either fully applies or is rejected with no balance change.
    Caller is responsible for feeding commands in input order.
    """

    def __init__(
        self,
        ledger: TransactionLedger,
        accounts: AccountStore,
        config: Optional[EngineConfig] = None,
    ):
        self._ledger = ledger
        self._accounts = accounts
        self._config = config or EngineConfig()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns a ProcessingResult whose error is set when the command was
        rejected. Rejections are logged and never raised.
        """
        # The account is created even when the command is then rejected, so every
        # client seen in the input shows up in the output with zero balances.
        account = self._accounts.get_or_create(transaction.client_id)

        try:
            with localcontext(AMOUNT_CONTEXT):
                match transaction.transaction_type:
                    case TransactionType.DEPOSIT:
                        self._handle_deposit(account, transaction)
                    case TransactionType.WITHDRAWAL:
                        self._handle_withdrawal(account, transaction)
                    case TransactionType.DISPUTE:
                        self._handle_dispute(account, transaction)
                    case TransactionType.RESOLVE:
                        self._handle_resolve(account, transaction)
                    case TransactionType.CHARGEBACK:
                        self._handle_chargeback(account, transaction)
        except PaymentsEngineError as error:
            if error.kind != ErrorKind.COMMAND_REJECTED:
                raise
            logger.warning(f"Rejected {transaction}: {error.reason.value}: {error.message}")
            return ProcessingResult(transaction, error)

        return ProcessingResult(transaction)

    def _reject(self, reason: RejectionReason, transaction: Transaction, message: str) -> PaymentsEngineError:
        return PaymentsEngineError.rejected(
            reason,
            message,
            transaction_id=transaction.transaction_id,
            client_id=transaction.client_id,
        )

    def _check_new_funds_movement(self, account: ClientAccount, transaction: Transaction) -> None:
        label = transaction.transaction_type.value.capitalize()

        if transaction.amount is None or transaction.amount <= 0:
            raise self._reject(
                RejectionReason.NEGATIVE_OR_ZERO_AMOUNT,
                transaction,
                f"{label} tx {transaction.transaction_id}: invalid amount {transaction.amount}",
            )

        if account.locked:
            raise self._reject(
                RejectionReason.ACCOUNT_LOCKED,
                transaction,
                f"{label} tx {transaction.transaction_id}: client {transaction.client_id} is locked",
            )

        if transaction.transaction_id in self._ledger:
            raise self._reject(
                RejectionReason.DUPLICATE_ID,
                transaction,
                f"{label} tx {transaction.transaction_id}: transaction ID already used",
            )

    def _handle_deposit(self, account: ClientAccount, transaction: Transaction) -> None:
        self._check_new_funds_movement(account, transaction)

        self._ledger.record(TransactionRecord.from_transaction(transaction))
        account.credit(transaction.amount)

    def _handle_withdrawal(self, account: ClientAccount, transaction: Transaction) -> None:
        self._check_new_funds_movement(account, transaction)

        if account.available < transaction.amount:
            raise self._reject(
                RejectionReason.INSUFFICIENT_FUNDS,
                transaction,
                f"Withdrawal tx {transaction.transaction_id}: requested {transaction.amount}, available {account.available}",
            )

        self._ledger.record(TransactionRecord.from_transaction(transaction))
        account.debit(transaction.amount)

    def _find_disputable_record(self, account: ClientAccount, transaction: Transaction) -> TransactionRecord:
        """Shared preconditions of dispute, resolve and chargeback."""
        label = transaction.transaction_type.value.capitalize()

        if account.locked and not self._config.locked_allows_disputes:
            raise self._reject(
                RejectionReason.ACCOUNT_LOCKED,
                transaction,
                f"{label} for tx {transaction.transaction_id}: client {transaction.client_id} is locked",
            )

        original = self._ledger.lookup(transaction.transaction_id)

        if original is None:
            raise self._reject(
                RejectionReason.UNKNOWN_TRANSACTION,
                transaction,
                f"{label} for tx {transaction.transaction_id}: transaction not found",
            )

        if original.client_id != transaction.client_id:
            raise self._reject(
                RejectionReason.WRONG_CLIENT,
                transaction,
                f"{label} for tx {transaction.transaction_id}: client mismatch (expected {original.client_id}, got {transaction.client_id})",
            )

        return original

    def _handle_dispute(self, account: ClientAccount, transaction: Transaction) -> None:
        original = self._find_disputable_record(account, transaction)

        if original.kind == TransactionType.WITHDRAWAL and not self._config.dispute_withdrawals:
            raise self._reject(
                RejectionReason.NOT_DISPUTABLE,
                transaction,
                f"Dispute for tx {transaction.transaction_id}: withdrawals cannot be disputed",
            )

        if original.disposition != Disposition.NORMAL:
            raise self._reject(
                RejectionReason.ALREADY_DISPUTED,
                transaction,
                f"Dispute for tx {transaction.transaction_id}: transaction is {original.disposition.value}",
            )

        self._ledger.mark(transaction.transaction_id, Disposition.DISPUTED)
        account.hold(original.amount)

    def _handle_resolve(self, account: ClientAccount, transaction: Transaction) -> None:
        original = self._find_disputable_record(account, transaction)
        self._require_disputed(original, transaction)

        self._ledger.mark(transaction.transaction_id, Disposition.RESOLVED)
        account.release_hold(original.amount)

    def _handle_chargeback(self, account: ClientAccount, transaction: Transaction) -> None:
        original = self._find_disputable_record(account, transaction)
        self._require_disputed(original, transaction)

        self._ledger.mark(transaction.transaction_id, Disposition.CHARGED_BACK)
        account.remove_held(original.amount)
        account.locked = True
        logger.info(f"Chargeback for tx {transaction.transaction_id}: client {transaction.client_id} locked")

    def _require_disputed(self, original: TransactionRecord, transaction: Transaction) -> None:
        if original.disposition != Disposition.DISPUTED:
            raise self._reject(
                RejectionReason.NOT_DISPUTED,
                transaction,
                f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: transaction is {original.disposition.value}, not disputed",
            )
