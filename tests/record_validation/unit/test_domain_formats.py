"""Domain value format tests."""

from __future__ import annotations

from decimal import Decimal

import pytest
from attest_schema.record_validation import is_valid_address, parse_amount

ACCOUNT_ADDRESS = "GAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAWHF"


def test_checksummed_account_address_is_valid() -> None:
    assert is_valid_address(ACCOUNT_ADDRESS) is True


@pytest.mark.parametrize(
    "value",
    [
        ACCOUNT_ADDRESS[:-1] + "G",
        ACCOUNT_ADDRESS.lower(),
        ACCOUNT_ADDRESS[:-1],
        "S" + ACCOUNT_ADDRESS[1:],
        "",
        None,
        42,
    ],
)
def test_malformed_addresses_are_rejected(value: object) -> None:
    assert is_valid_address(value) is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("10.5", Decimal("10.5")),
        (0, Decimal(0)),
        (2.25, Decimal("2.25")),
        ("-1", None),
        ("ten", None),
        (True, None),
        (float("nan"), None),
        ("Infinity", None),
    ],
)
def test_parse_amount(value: object, expected: Decimal | None) -> None:
    assert parse_amount(value) == expected
