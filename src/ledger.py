from typing import Dict, Optional

from errors import PaymentsEngineError, RejectionReason
from models import TransactionRecord, Disposition


class TransactionLedger:
    """
    Append-only store of every applied deposit and withdrawal, keyed by transaction ID.
    Records are never removed; only their disposition is updated in place.
    """

    def __init__(self):
        self._records: Dict[int, TransactionRecord] = {}

    def record(self, record: TransactionRecord) -> None:
        """Store a new record. Transaction IDs are unique across the whole stream."""
        if record.transaction_id in self._records:
            raise PaymentsEngineError.rejected(
                RejectionReason.DUPLICATE_ID,
                f"tx {record.transaction_id} already recorded",
                transaction_id=record.transaction_id,
                client_id=record.client_id,
            )
        self._records[record.transaction_id] = record

    def lookup(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored record by ID."""
        return self._records.get(transaction_id)

    def mark(self, transaction_id: int, disposition: Disposition) -> TransactionRecord:
        """
        Advance a record's disposition and return the record so the caller
        can apply its amount to the owning account.
        """
        record = self._records.get(transaction_id)
        if record is None:
            raise PaymentsEngineError.rejected(
                RejectionReason.UNKNOWN_TRANSACTION,
                f"tx {transaction_id} not found",
                transaction_id=transaction_id,
            )

        if not record.can_advance_to(disposition):
            raise PaymentsEngineError.rejected(
                RejectionReason.INVALID_TRANSITION,
                f"tx {transaction_id} cannot move from {record.disposition.value} to {disposition.value}",
                transaction_id=transaction_id,
                client_id=record.client_id,
            )

        record.disposition = disposition
        return record

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._records

    def __len__(self) -> int:
        return len(self._records)
