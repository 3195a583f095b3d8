import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import ClientAccount
from renderer import format_decimal, render_accounts


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("1.5000"), "1.5"),
        (Decimal("100"), "100"),
        (Decimal("0"), "0"),
        (Decimal("-0.00"), "0"),
        (Decimal("-30"), "-30"),
        (Decimal("0.0001"), "0.0001"),
        (Decimal("1.23456"), "1.2346"),
        (Decimal("2.00005"), "2"),
    ],
)
def test_format_decimal(value, expected):
    assert format_decimal(value) == expected


def test_render_accounts():
    accounts = [
        ClientAccount(client_id=1, available=Decimal("1.5"), held=Decimal("0")),
        ClientAccount(client_id=2, available=Decimal("1.0"), held=Decimal("5.0"), locked=True),
    ]
    out = io.StringIO()

    render_accounts(accounts, out)

    assert out.getvalue() == (
        "client,available,held,total,locked\n"
        "1,1.5,0,1.5,false\n"
        "2,1,5,6,true\n"
    )


def test_render_no_accounts():
    out = io.StringIO()
    render_accounts([], out)
    assert out.getvalue() == "client,available,held,total,locked\n"
