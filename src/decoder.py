import csv
import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, Iterator, List, Optional, TextIO

from errors import PaymentsEngineError
from models import Transaction, TransactionType

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Keeps any balance reachable from MAX_TRANSACTION_ID deposits well inside AMOUNT_CONTEXT.
MAX_AMOUNT = Decimal("999999999999999.9999")

REQUIRED_COLUMNS = ("type", "client", "tx")

ErrorCallback = Callable[[PaymentsEngineError], None]


def _parse_id(value: str, field: str, maximum: int) -> int:
    if not value.isdigit():
        raise ValueError(f"{field} must be an unsigned integer, got {value!r}")
    parsed = int(value)
    if parsed > maximum:
        raise ValueError(f"{field} {parsed} out of range (max {maximum})")
    return parsed


def _parse_amount(value: str, transaction_type: TransactionType) -> Decimal:
    if not value:
        raise ValueError(f"{transaction_type.value} requires an amount")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}")
    if not amount.is_finite():
        raise ValueError(f"amount must be finite, got {value!r}")
    if amount.copy_abs() > MAX_AMOUNT:
        raise ValueError(f"amount {value!r} exceeds {MAX_AMOUNT}")
    return amount


class TransactionDecoder:
    """
    Lazily decodes CSV rows into Transactions, one row at a time.

    Malformed rows are logged, passed to on_error and skipped. Problems with
    the source itself (unreadable bytes, broken CSV, missing columns) raise an
    INPUT_FATAL PaymentsEngineError.
    """

    def __init__(self, stream: TextIO, on_error: Optional[ErrorCallback] = None):
        self._stream = stream
        self._on_error = on_error

    def __iter__(self) -> Iterator[Transaction]:
        reader = csv.reader(self._stream)
        try:
            columns = self._read_header(reader)
            for row in reader:
                if not any(field.strip() for field in row):
                    continue
                transaction = self._decode_row(row, columns, reader.line_num)
                if transaction:
                    yield transaction
        except (csv.Error, UnicodeDecodeError, OSError) as e:
            raise PaymentsEngineError.source_error(f"Failed to read input at line {reader.line_num}: {e}") from e

    def _read_header(self, reader) -> Dict[str, int]:
        header = next(reader, None)
        if header is None:
            raise PaymentsEngineError.source_error("Input is empty, expected a header row")

        columns = {name.strip().lower(): index for index, name in enumerate(header)}
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise PaymentsEngineError.source_error(f"Input header is missing columns: {', '.join(missing)}")
        return columns

    def _decode_row(self, row: List[str], columns: Dict[str, int], line_number: int) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""

        def field(name: str) -> str:
            index = columns.get(name)
            if index is None or index >= len(row):
                return ""
            return row[index].strip()

        try:
            transaction_type = TransactionType(field("type").lower())
            client_id = _parse_id(field("client"), "client", MAX_CLIENT_ID)
            transaction_id = _parse_id(field("tx"), "tx", MAX_TRANSACTION_ID)

            amount = None
            if transaction_type.carries_amount:
                amount = _parse_amount(field("amount"), transaction_type)

            return Transaction(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except ValueError as e:
            error = PaymentsEngineError.malformed_row(f"Failed to parse row {row}: {e}", line_number=line_number)
            logger.warning(f"Line {line_number}: {error.message}")
            if self._on_error:
                self._on_error(error)
            return None
