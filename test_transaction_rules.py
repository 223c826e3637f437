#!/usr/bin/env python3
"""
Rule-by-rule tests for the whale transaction classifier.
"""

import pytest

from rule_engine import ClassificationType, RuleEngine, create_default_engine, default_rules
from rule_engine.rules.common_rules import (
    BurnRule,
    ExchangeInflowRule,
    ExchangeOutflowRule,
    InternalTransferRule,
    MintRule,
    UnhandledKindRule,
)


@pytest.fixture
def engine():
    return create_default_engine()


def test_default_rule_order():
    names = [rule.name for rule in default_rules()]
    assert names == [
        "mint_rule",
        "burn_rule",
        "unhandled_kind_rule",
        "internal_transfer_rule",
        "exchange_outflow_rule",
        "exchange_inflow_rule",
    ]


def test_mint_rule_matches_only_mints(make_tx):
    assert MintRule().apply(make_tx(transaction_type="mint")).classification == ClassificationType.MINT
    assert MintRule().apply(make_tx(transaction_type="burn")) is None


def test_burn_rule_matches_only_burns(make_tx):
    assert BurnRule().apply(make_tx(transaction_type="burn")).classification == ClassificationType.BURN
    assert BurnRule().apply(make_tx(transaction_type="transfer")) is None


def test_unhandled_rule_passes_transfers(make_tx):
    assert UnhandledKindRule().apply(make_tx(transaction_type="transfer")) is None
    result = UnhandledKindRule().apply(make_tx(transaction_type="lock"))
    assert result.classification == ClassificationType.UNHANDLED


def test_internal_rule_needs_equal_categories(make_tx):
    assert InternalTransferRule().apply(make_tx(from_type="other", to_type="unknown")) is None
    result = InternalTransferRule().apply(make_tx(from_type="exchange", to_type="exchange"))
    assert result.classification == ClassificationType.INTERNAL


def test_exchange_rules_look_at_their_own_side(make_tx):
    withdrawal = make_tx(from_type="exchange", to_type="unknown")
    deposit = make_tx(from_type="unknown", to_type="exchange")

    assert ExchangeOutflowRule().apply(withdrawal).classification == ClassificationType.EXCHANGE_OUTFLOW
    assert ExchangeOutflowRule().apply(deposit) is None
    assert ExchangeInflowRule().apply(deposit).classification == ClassificationType.EXCHANGE_INFLOW
    assert ExchangeInflowRule().apply(withdrawal) is None


@pytest.mark.parametrize("kind, from_type, to_type, expected, rule", [
    ("mint", "unknown", "unknown", ClassificationType.MINT, "mint_rule"),
    ("mint", "exchange", "unknown", ClassificationType.MINT, "mint_rule"),
    ("burn", "unknown", "exchange", ClassificationType.BURN, "burn_rule"),
    ("freeze", "exchange", "unknown", ClassificationType.UNHANDLED, "unhandled_kind_rule"),
    ("transfer", "exchange", "exchange", ClassificationType.INTERNAL, "internal_transfer_rule"),
    ("transfer", "unknown", "unknown", ClassificationType.INTERNAL, "internal_transfer_rule"),
    ("transfer", "exchange", "unknown", ClassificationType.EXCHANGE_OUTFLOW, "exchange_outflow_rule"),
    ("transfer", "exchange", "other", ClassificationType.EXCHANGE_OUTFLOW, "exchange_outflow_rule"),
    ("transfer", "unknown", "exchange", ClassificationType.EXCHANGE_INFLOW, "exchange_inflow_rule"),
    ("transfer", "unknown", "other", ClassificationType.PEER_TO_PEER, "peer_to_peer_fallback"),
    ("transfer", "other", "fund", ClassificationType.PEER_TO_PEER, "peer_to_peer_fallback"),
])
def test_engine_first_match_wins(engine, make_tx, kind, from_type, to_type, expected, rule):
    result = engine.classify(make_tx(transaction_type=kind, from_type=from_type, to_type=to_type))
    assert result.classification == expected
    assert result.triggered_rule == rule


def test_kind_match_is_exact(engine, make_tx):
    # "Transfer" is not a known kind
    result = engine.classify(make_tx(transaction_type="Transfer", from_type="exchange", to_type="unknown"))
    assert result.classification == ClassificationType.UNHANDLED


def test_empty_engine_falls_back(make_tx):
    result = RuleEngine().classify(make_tx(transaction_type="mint"))
    assert result.classification == ClassificationType.PEER_TO_PEER
