import csv
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Iterable, TextIO

from models import ClientAccount, AMOUNT_CONTEXT

OUTPUT_PRECISION = Decimal("0.0001")
OUTPUT_COLUMNS = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal with up to 4 decimal places, removing trailing zeros."""
    normalized = value.quantize(OUTPUT_PRECISION, rounding=ROUND_HALF_EVEN, context=AMOUNT_CONTEXT).normalize(AMOUNT_CONTEXT)
    # normalize() keeps the sign of a negative zero
    if normalized.is_zero():
        normalized = abs(normalized)
    return f"{normalized:f}"


def render_accounts(accounts: Iterable[ClientAccount], stream: TextIO) -> None:
    """Write one CSV row per account, in the order given."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_COLUMNS)
    for account in accounts:
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
