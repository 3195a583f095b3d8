import logging
from typing import Dict, Iterable, Optional, TextIO

from account_store import AccountStore
from config import EngineConfig
from decoder import TransactionDecoder
from errors import PaymentsEngineError
from ledger import TransactionLedger
from models import Transaction, ClientAccount, ProcessingStats
from processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Single forward pass over a transaction stream.
    Each transaction is decoded and fully applied before the next one is read,
    since withdrawals and disputes depend on everything that came before them.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._ledger = TransactionLedger()
        self._accounts = AccountStore()
        self._processor = TransactionProcessor(self._ledger, self._accounts, self._config)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    @property
    def accounts(self) -> AccountStore:
        return self._accounts

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        try:
            f = open(filepath, "r", newline="", encoding="utf-8-sig")
        except OSError as e:
            raise PaymentsEngineError.source_error(f"Cannot open {filepath}: {e}") from e

        with f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        """Process CSV text stream and return final account states."""
        decoder = TransactionDecoder(stream, on_error=self._on_malformed_row)
        return self.process_transactions(decoder)

    def process_transactions(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply already decoded transactions in order and return final account states."""
        logger.info("Starting processing")

        for transaction in transactions:
            result = self._processor.process_transaction(transaction)
            if result.succeeded:
                self._stats.record_success()
            else:
                self._stats.record_rejection()

        logger.info(f"Processing complete. {self._stats}")
        return self._accounts.snapshot()

    def _on_malformed_row(self, error: PaymentsEngineError) -> None:
        self._stats.record_malformed()
