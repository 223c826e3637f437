#!/usr/bin/env python3
"""
🐋 WHALE SENTIMENT AGGREGATION 🐋

Turns the per-asset supply and exchange-flow totals of one window into
bullish / bearish annotations.

Heuristic:
- Minting a stablecoin means fiat is coming in (bull); minting anything
  else dilutes supply (bear).
- Burning a stablecoin means conversion back to fiat (bear); burning
  anything else shrinks supply (bull).
- Stablecoins flowing into exchanges are dry powder for buying (bull);
  other assets flowing in are about to be sold (bear).
- Outflows read the other way round.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping

from config.logging_config import get_logger
from config.settings import SIGNIFICANCE_FLOOR_USD
from utils.summary import FlowSummary

logger = get_logger("whale_sentiment_aggregator")


class Sentiment(str, Enum):
    BULL = "bull"
    BEAR = "bear"


class SignalSection(str, Enum):
    """Report sections, in the order they are rendered"""
    MINTS = "Mints"
    BURNS = "Burns"
    EXCHANGE_INFLOW = "Exchange Inflow"
    EXCHANGE_OUTFLOW = "Exchange Outflow"


SECTION_ORDER = [
    SignalSection.MINTS,
    SignalSection.BURNS,
    SignalSection.EXCHANGE_INFLOW,
    SignalSection.EXCHANGE_OUTFLOW,
]


@dataclass
class Signal:
    """One significant net change of one asset"""
    symbol: str
    value_usd: float
    sentiment: Sentiment
    section: SignalSection

    @property
    def abs_value(self) -> float:
        return abs(self.value_usd)


@dataclass
class SignalReport:
    """Significant signals grouped by section"""
    sections: Dict[SignalSection, List[Signal]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return any(self.sections.values())

    def signals(self, section: SignalSection) -> List[Signal]:
        return self.sections.get(section, [])


def format_signal(signal: Signal) -> str:
    """Markdown line: ticker in backticks, absolute USD value, sentiment tag."""
    return f"  `{signal.symbol.upper():<5}`: ${signal.abs_value:,.0f} ({signal.sentiment.value})"


class WhaleSentimentAggregator:
    """
    Applies the significance floor and the bull/bear heuristic to a window's
    supply and flow totals, and renders the report text.
    """

    def __init__(self, stablecoins: Iterable[str], significance_floor: float = SIGNIFICANCE_FLOOR_USD):
        self.stablecoins = {ticker.lower() for ticker in stablecoins}
        self.significance_floor = significance_floor

    def is_stablecoin(self, symbol: str) -> bool:
        return symbol.lower() in self.stablecoins

    def is_significant(self, value: float) -> bool:
        # exactly at the floor still counts
        return value != 0 and abs(value) >= self.significance_floor

    def supply_signal(self, symbol: str, value: float) -> Signal:
        stable = self.is_stablecoin(symbol)
        if value > 0:
            sentiment = Sentiment.BULL if stable else Sentiment.BEAR
            section = SignalSection.MINTS
        else:
            sentiment = Sentiment.BEAR if stable else Sentiment.BULL
            section = SignalSection.BURNS
        return Signal(symbol.upper(), value, sentiment, section)

    def flow_signal(self, symbol: str, value: float) -> Signal:
        stable = self.is_stablecoin(symbol)
        if value > 0:
            sentiment = Sentiment.BULL if stable else Sentiment.BEAR
            section = SignalSection.EXCHANGE_INFLOW
        else:
            sentiment = Sentiment.BEAR if stable else Sentiment.BULL
            section = SignalSection.EXCHANGE_OUTFLOW
        return Signal(symbol.upper(), value, sentiment, section)

    def analyze(self, supply: Mapping[str, float], flow: Mapping[str, float]) -> SignalReport:
        """
        Build the signal report for one window.

        Args:
            supply: Net minted (+) / burned (-) USD per asset
            flow: Net exchange inflow (+) / outflow (-) USD per asset

        Returns:
            SignalReport with only the assets at or above the floor
        """
        report = SignalReport(sections={section: [] for section in SECTION_ORDER})
        skipped = 0

        for symbol, value in supply.items():
            if not self.is_significant(value):
                skipped += 1
                continue
            signal = self.supply_signal(symbol, value)
            report.sections[signal.section].append(signal)

        for symbol, value in flow.items():
            if not self.is_significant(value):
                skipped += 1
                continue
            signal = self.flow_signal(symbol, value)
            report.sections[signal.section].append(signal)

        for signals in report.sections.values():
            signals.sort(key=lambda s: (-s.abs_value, s.symbol))

        logger.info("Whale sentiment analyzed",
                    extra={'extra_fields': {
                        'significance_floor': self.significance_floor,
                        'below_floor': skipped,
                        'sections': {section.value: len(signals) for section, signals in report.sections.items()}
                    }})
        return report

    def render(self, supply: Mapping[str, float], flow: Mapping[str, float]) -> str:
        """Report text for the notifier, empty when nothing is significant."""
        return render_report(self.analyze(supply, flow))

    def render_summary(self, summary: FlowSummary) -> str:
        return self.render(summary.supply, summary.flow)


def render_report(report: SignalReport) -> str:
    lines: List[str] = []
    for section in SECTION_ORDER:
        signals = report.signals(section)
        if not signals:
            continue
        lines.append(f"{section.value}:")
        lines.extend(format_signal(signal) for signal in signals)
    return "\n".join(lines)
