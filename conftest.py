"""
Shared fixtures for the whale flow signal tests.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure the repository root is importable when pytest runs from elsewhere
sys.path.insert(0, str(Path(__file__).parent))

from rule_engine.models.transaction import Transaction


def build_transaction(
    transaction_type="transfer",
    symbol="btc",
    amount_usd=1_000_000.0,
    from_type="unknown",
    to_type="unknown",
    from_owner="",
    to_owner="",
    blockchain="bitcoin",
    from_address="from-addr",
    to_address="to-addr",
    tx_hash="0xabc",
):
    return Transaction(**{
        "blockchain": blockchain,
        "symbol": symbol,
        "id": tx_hash,
        "transaction_type": transaction_type,
        "hash": tx_hash,
        "from": {"address": from_address, "owner": from_owner, "owner_type": from_type},
        "to": {"address": to_address, "owner": to_owner, "owner_type": to_type},
        "timestamp": 1_600_000_000,
        "amount": 1.0,
        "amount_usd": amount_usd,
        "transaction_count": 1,
    })


def build_response(body, status_code=200):
    """requests.Response stand-in carrying a JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    response.text = str(body)
    return response


@pytest.fixture
def make_tx():
    return build_transaction


@pytest.fixture
def make_response():
    return build_response
