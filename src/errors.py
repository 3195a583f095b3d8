from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    INPUT_FATAL = "input_fatal"
    ROW_MALFORMED = "row_malformed"
    COMMAND_REJECTED = "command_rejected"


class RejectionReason(Enum):
    NEGATIVE_OR_ZERO_AMOUNT = "negative_or_zero_amount"
    ACCOUNT_LOCKED = "account_locked"
    DUPLICATE_ID = "duplicate_id"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    WRONG_CLIENT = "wrong_client"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    INVALID_TRANSITION = "invalid_transition"
    NOT_DISPUTABLE = "not_disputable"


class PaymentsEngineError(Exception):
    """
    Single error type for every failure the engine reports.
    The kind tells callers whether to stop (INPUT_FATAL) or skip and continue.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        reason: Optional[RejectionReason] = None,
        transaction_id: Optional[int] = None,
        client_id: Optional[int] = None,
        line_number: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.reason = reason
        self.transaction_id = transaction_id
        self.client_id = client_id
        self.line_number = line_number

    @property
    def is_fatal(self) -> bool:
        return self.kind == ErrorKind.INPUT_FATAL

    @classmethod
    def source_error(cls, message: str) -> "PaymentsEngineError":
        return cls(ErrorKind.INPUT_FATAL, message)

    @classmethod
    def malformed_row(cls, message: str, line_number: Optional[int] = None) -> "PaymentsEngineError":
        return cls(ErrorKind.ROW_MALFORMED, message, line_number=line_number)

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        message: str,
        transaction_id: Optional[int] = None,
        client_id: Optional[int] = None,
    ) -> "PaymentsEngineError":
        return cls(
            ErrorKind.COMMAND_REJECTED,
            message,
            reason=reason,
            transaction_id=transaction_id,
            client_id=client_id,
        )

    def __repr__(self) -> str:
        detail = self.reason.value if self.reason else self.kind.value
        return f"PaymentsEngineError({detail}: {self.message})"
