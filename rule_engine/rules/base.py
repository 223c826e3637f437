"""
Rule engine core

A rule looks at one transaction and either claims it with a
ClassificationResult or passes with None. The engine walks its rules in
registration order and stops at the first claim.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from config.logging_config import get_logger, get_transaction_logger
from ..models.transaction import (
    Transaction,
    ClassificationResult,
    ClassificationType,
)

logger = get_logger(__name__)


class BaseRule(ABC):
    """Single classification rule; subclasses set ``name`` and implement ``apply``."""
    name = "base_rule"
    description = ""

    @abstractmethod
    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        """Return a result to claim the transaction, None to pass it on."""

    def create_result(
        self,
        transaction: Transaction,
        classification: ClassificationType,
        explanation: str
    ) -> ClassificationResult:
        return ClassificationResult(
            classification=classification,
            triggered_rule=self.name,
            explanation=explanation,
            transaction=transaction
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class RuleEngine:
    """
    Ordered, first-match-wins rule list.

    A transaction no rule claims is PEER_TO_PEER: a transfer that touches
    no exchange and so moves neither supply nor exchange flow.
    """

    fallback_rule = "peer_to_peer_fallback"

    def __init__(self, rules: Optional[Iterable[BaseRule]] = None):
        self.rules: List[BaseRule] = []
        if rules:
            self.register_rules(rules)

    def register_rule(self, rule: BaseRule) -> None:
        """Append a rule; it runs after every rule registered before it."""
        self.rules.append(rule)
        logger.debug(f"Registered rule: {rule.name}")

    def register_rules(self, rules: Iterable[BaseRule]) -> None:
        for rule in rules:
            self.register_rule(rule)

    def _fallback(self, transaction: Transaction) -> ClassificationResult:
        return ClassificationResult(
            classification=ClassificationType.PEER_TO_PEER,
            triggered_rule=self.fallback_rule,
            explanation=(
                f"Transfer between {transaction.from_wallet.owner_type} and "
                f"{transaction.to_wallet.owner_type} does not touch an exchange"
            ),
            transaction=transaction
        )

    def classify(self, transaction: Transaction) -> ClassificationResult:
        """
        Classify one transaction.

        Args:
            transaction: Transaction from the feed

        Returns:
            Result of the first matching rule, or the peer-to-peer fallback
        """
        tx_logger = get_transaction_logger(transaction.hash or transaction.id)

        result = next(
            (claimed for claimed in (rule.apply(transaction) for rule in self.rules) if claimed is not None),
            None
        )
        if result is None:
            result = self._fallback(transaction)

        tx_logger.rule_matched(result.triggered_rule, result.classification.value, result.explanation)
        return result
