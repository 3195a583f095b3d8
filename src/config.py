import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Union

LOG_LEVEL_ENV = "PAYMENTS_ENGINE_LOG_LEVEL"
DISPUTE_WITHDRAWALS_ENV = "PAYMENTS_ENGINE_DISPUTE_WITHDRAWALS"
LOCKED_ALLOWS_DISPUTES_ENV = "PAYMENTS_ENGINE_LOCKED_ALLOWS_DISPUTES"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_flag(name: str, value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{name}: expected a boolean, got {value!r}")


@dataclass(frozen=True)
class EngineConfig:
    """
    Policy switches for the dispute workflow.

    dispute_withdrawals: disputes against withdrawals move the amount from
        available to held just like deposits (available may go negative).
        When False they are rejected as NOT_DISPUTABLE.
    locked_allows_disputes: dispute, resolve and chargeback keep working on a
        locked account's recorded transactions. When False they are rejected
        as ACCOUNT_LOCKED, same as deposits and withdrawals.
    """

    dispute_withdrawals: bool = True
    locked_allows_disputes: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        environ = os.environ if environ is None else environ
        return cls(
            dispute_withdrawals=_parse_flag(
                DISPUTE_WITHDRAWALS_ENV, environ.get(DISPUTE_WITHDRAWALS_ENV), True
            ),
            locked_allows_disputes=_parse_flag(
                LOCKED_ALLOWS_DISPUTES_ENV, environ.get(LOCKED_ALLOWS_DISPUTES_ENV), True
            ),
        )


def resolve_log_level(level: Union[int, str, None] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """Turn a level name or number into a logging level, falling back to the environment, then WARNING."""
    if isinstance(level, int):
        return level
    if level is None:
        environ = os.environ if environ is None else environ
        level = environ.get(LOG_LEVEL_ENV)
        if not level:
            return logging.WARNING
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    if isinstance(numeric, int):
        return numeric
    raise ValueError(f"Unknown log level: {level}")
