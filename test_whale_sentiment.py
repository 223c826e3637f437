#!/usr/bin/env python3
"""
🐋 TEST WHALE SENTIMENT 🐋

Bull/bear heuristic, significance floor and report rendering.
"""

import pytest

from utils.summary import summarize_transactions
from whale_sentiment_aggregator import (
    Sentiment,
    SignalSection,
    WhaleSentimentAggregator,
    format_signal,
    render_report,
)

STABLECOINS = ["usdt", "USDC"]


@pytest.fixture
def aggregator():
    return WhaleSentimentAggregator(STABLECOINS, significance_floor=1_000_000)


def section_lines(report_text, header):
    """Set of lines under one header of a rendered report."""
    lines = report_text.split("\n")
    start = lines.index(f"{header}:") + 1
    collected = set()
    for line in lines[start:]:
        if not line.startswith("  "):
            break
        collected.add(line)
    return collected


@pytest.mark.parametrize("symbol, value, section, sentiment", [
    ("usdt", 5_000_000, SignalSection.MINTS, Sentiment.BULL),
    ("btc", 5_000_000, SignalSection.MINTS, Sentiment.BEAR),
    ("usdt", -5_000_000, SignalSection.BURNS, Sentiment.BEAR),
    ("btc", -5_000_000, SignalSection.BURNS, Sentiment.BULL),
])
def test_supply_truth_table(aggregator, symbol, value, section, sentiment):
    signal = aggregator.supply_signal(symbol, value)
    assert signal.section == section
    assert signal.sentiment == sentiment


@pytest.mark.parametrize("symbol, value, section, sentiment", [
    ("usdc", 5_000_000, SignalSection.EXCHANGE_INFLOW, Sentiment.BULL),
    ("eth", 5_000_000, SignalSection.EXCHANGE_INFLOW, Sentiment.BEAR),
    ("usdc", -5_000_000, SignalSection.EXCHANGE_OUTFLOW, Sentiment.BEAR),
    ("eth", -5_000_000, SignalSection.EXCHANGE_OUTFLOW, Sentiment.BULL),
])
def test_flow_truth_table(aggregator, symbol, value, section, sentiment):
    signal = aggregator.flow_signal(symbol, value)
    assert signal.section == section
    assert signal.sentiment == sentiment


def test_stablecoin_match_is_case_insensitive_and_exact(aggregator):
    assert aggregator.is_stablecoin("USDT")
    assert aggregator.is_stablecoin("usdc")
    assert not aggregator.is_stablecoin("usd")
    assert not aggregator.is_stablecoin("usdtx")
    assert not aggregator.is_stablecoin("btc")


def test_significance_floor_boundary(aggregator):
    report = aggregator.analyze(
        supply={"AT": 1_000_000, "BELOW": 999_999.99, "NEG": -1_000_000, "ZERO": 0},
        flow={"IN": 999_999, "OUT": -1_000_001},
    )
    mints = {s.symbol for s in report.signals(SignalSection.MINTS)}
    burns = {s.symbol for s in report.signals(SignalSection.BURNS)}
    inflow = {s.symbol for s in report.signals(SignalSection.EXCHANGE_INFLOW)}
    outflow = {s.symbol for s in report.signals(SignalSection.EXCHANGE_OUTFLOW)}

    assert mints == {"AT"}
    assert burns == {"NEG"}
    assert inflow == set()
    assert outflow == {"OUT"}


def test_format_signal(aggregator):
    assert format_signal(aggregator.supply_signal("xyz", 2_000_000)) == "  `XYZ  `: $2,000,000 (bear)"
    assert format_signal(aggregator.flow_signal("usdt", -12_345_678.6)) == "  `USDT `: $12,345,679 (bear)"


def test_sections_render_in_fixed_order(aggregator):
    text = aggregator.render(
        supply={"usdt": 3_000_000, "eth": -2_000_000},
        flow={"btc": -4_000_000, "usdc": 6_000_000},
    )
    headers = [line for line in text.split("\n") if not line.startswith("  ")]
    assert headers == ["Mints:", "Burns:", "Exchange Inflow:", "Exchange Outflow:"]


def test_empty_sections_are_omitted(aggregator):
    text = aggregator.render(supply={}, flow={"btc": 4_000_000, "dust": 10})
    assert text.split("\n") == ["Exchange Inflow:", "  `BTC  `: $4,000,000 (bear)"]


def test_nothing_significant_renders_empty(aggregator):
    assert aggregator.render(supply={"btc": 10}, flow={"eth": -20}) == ""
    assert not aggregator.analyze({}, {})
    assert render_report(aggregator.analyze({}, {})) == ""


def test_lines_within_a_section(aggregator):
    text = aggregator.render(
        supply={},
        flow={"btc": 2_000_000, "eth": 5_000_000, "usdt": 3_000_000},
    )
    assert section_lines(text, "Exchange Inflow") == {
        "  `BTC  `: $2,000,000 (bear)",
        "  `ETH  `: $5,000,000 (bear)",
        "  `USDT `: $3,000,000 (bull)",
    }


def test_end_to_end_example(aggregator, make_tx):
    summary = summarize_transactions([
        make_tx(transaction_type="mint", symbol="XYZ", amount_usd=2_000_000),
        make_tx(transaction_type="transfer", symbol="XYZ", amount_usd=3_000_000,
                from_type="exchange", to_type="unknown"),
    ])
    text = aggregator.render_summary(summary)

    assert section_lines(text, "Mints") == {"  `XYZ  `: $2,000,000 (bear)"}
    assert section_lines(text, "Exchange Outflow") == {"  `XYZ  `: $3,000,000 (bull)"}
    assert "Burns:" not in text
    assert "Exchange Inflow:" not in text
