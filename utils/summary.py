# utils/summary.py
"""Per-asset supply and exchange-flow totals for one fetch window"""
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from config.logging_config import get_logger
from rule_engine import RuleEngine, create_default_engine
from rule_engine.models.transaction import ClassificationType, Transaction

logger = get_logger(__name__)


@dataclass
class FlowSummary:
    """
    Aggregated view of one window.

    supply: positive = net minted, negative = net burned (USD)
    flow: positive = net inflow to exchanges, negative = net outflow (USD)
    unhandled: one line per transaction of an unknown kind
    """
    supply: Dict[str, float] = field(default_factory=dict)
    flow: Dict[str, float] = field(default_factory=dict)
    unhandled: List[str] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)

    def __iter__(self):
        # lets callers unpack: supply, flow, unhandled = summary
        return iter((self.supply, self.flow, self.unhandled))


def resolve_symbol(symbol: str, remap: Optional[Mapping[str, str]] = None) -> str:
    """
    Canonical upper-case ticker for a raw feed symbol.

    Exact remap keys win over case-insensitive matches.
    """
    if remap:
        if symbol in remap:
            symbol = remap[symbol]
        else:
            lowered = symbol.lower()
            for raw, canonical in remap.items():
                if raw.lower() == lowered:
                    symbol = canonical
                    break
    return symbol.upper()


def format_unhandled(transaction: Transaction) -> str:
    return "  %s:  %s (%s) -> %s (%s)" % (
        transaction.transaction_type,
        transaction.from_wallet.owner_type, transaction.from_wallet.owner,
        transaction.to_wallet.owner_type, transaction.to_wallet.owner,
    )


def summarize_transactions(
    transactions: Iterable[Transaction],
    remap: Optional[Mapping[str, str]] = None,
    engine: Optional[RuleEngine] = None
) -> FlowSummary:
    """
    Classify every transaction once and accumulate its USD amount.

    Args:
        transactions: Transactions from one fetch window
        remap: Raw symbol -> canonical symbol
        engine: Rule engine to classify with (standard rules when omitted)

    Returns:
        FlowSummary built from scratch for these transactions
    """
    engine = engine or create_default_engine()
    supply = defaultdict(float)
    flow = defaultdict(float)
    unhandled: List[str] = []
    counts = Counter()

    for transaction in transactions:
        symbol = resolve_symbol(transaction.symbol, remap)
        result = engine.classify(transaction)
        classification = result.classification
        counts[classification.value] += 1

        if classification == ClassificationType.MINT:
            supply[symbol] += transaction.amount_usd
        elif classification == ClassificationType.BURN:
            supply[symbol] -= transaction.amount_usd
        elif classification == ClassificationType.EXCHANGE_INFLOW:
            flow[symbol] += transaction.amount_usd
        elif classification == ClassificationType.EXCHANGE_OUTFLOW:
            flow[symbol] -= transaction.amount_usd
        elif classification == ClassificationType.UNHANDLED:
            unhandled.append(format_unhandled(transaction))
        # INTERNAL and PEER_TO_PEER do not move either total

    logger.info("Transactions summarized",
                extra={'extra_fields': {'classifications': dict(counts),
                                        'supply_assets': len(supply),
                                        'flow_assets': len(flow)}})

    return FlowSummary(
        supply=dict(supply),
        flow=dict(flow),
        unhandled=unhandled,
        counts=dict(counts)
    )
