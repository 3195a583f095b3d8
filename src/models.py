from dataclasses import dataclass
from decimal import Context, Decimal, DivisionByZero, InvalidOperation, Overflow
from enum import Enum
from typing import Optional

from errors import PaymentsEngineError

# Balances stay far below this precision as long as amounts respect the decoder's MAX_AMOUNT.
AMOUNT_CONTEXT = Context(prec=50, traps=[InvalidOperation, DivisionByZero, Overflow])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class Disposition(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    RESOLVED = "resolved"
    CHARGED_BACK = "charged_back"


# Disposition only ever advances NORMAL -> DISPUTED -> RESOLVED | CHARGED_BACK.
ALLOWED_TRANSITIONS = {
    Disposition.NORMAL: frozenset({Disposition.DISPUTED}),
    Disposition.DISPUTED: frozenset({Disposition.RESOLVED, Disposition.CHARGED_BACK}),
    Disposition.RESOLVED: frozenset(),
    Disposition.CHARGED_BACK: frozenset(),
}


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """A deposit or withdrawal as stored in the ledger. Only disposition changes after creation."""

    transaction_id: int
    client_id: int
    kind: TransactionType
    amount: Decimal
    disposition: Disposition = Disposition.NORMAL

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRecord":
        return cls(
            transaction_id=transaction.transaction_id,
            client_id=transaction.client_id,
            kind=transaction.transaction_type,
            amount=transaction.amount,
        )

    def can_advance_to(self, disposition: Disposition) -> bool:
        return disposition in ALLOWED_TRANSITIONS[self.disposition]


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return AMOUNT_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount


@dataclass
class ProcessingResult:
    """Outcome of applying one command: the command itself plus the rejection, if any."""

    transaction: Transaction
    error: Optional[PaymentsEngineError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.processed = 0
        self.rejected = 0
        self.malformed = 0

    def record_success(self):
        self.processed += 1

    def record_rejection(self):
        self.rejected += 1

    def record_malformed(self):
        self.malformed += 1

    def __repr__(self) -> str:
        return f"Processed: {self.processed}, Rejected: {self.rejected}, Malformed: {self.malformed}"
