import argparse
import logging
import sys
from typing import Optional, Sequence

from config import EngineConfig, resolve_log_level
from engine import PaymentsEngine
from errors import PaymentsEngineError
from renderer import render_accounts

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="Apply a CSV of transactions and print the resulting client balances as CSV.",
    )
    parser.add_argument("input", help="Path to the transactions CSV.")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Diagnostic log level on stderr (default: $PAYMENTS_ENGINE_LOG_LEVEL or WARNING).",
    )
    parser.add_argument(
        "--reject-withdrawal-disputes",
        action="store_true",
        help="Reject disputes that reference a withdrawal instead of holding its amount.",
    )
    parser.add_argument(
        "--lock-blocks-disputes",
        action="store_true",
        help="Reject dispute, resolve and chargeback on locked accounts.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.from_env()
    return EngineConfig(
        dispute_withdrawals=config.dispute_withdrawals and not args.reject_withdrawal_disputes,
        locked_allows_disputes=config.locked_allows_disputes and not args.lock_blocks_disputes,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        level = resolve_log_level(args.log_level)
        config = build_config(args)
    except ValueError as e:
        print(f"payments-engine: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(config)
    try:
        engine.process_file(args.input)
    except PaymentsEngineError as e:
        logger.error(e.message)
        return 1

    render_accounts(engine.accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
