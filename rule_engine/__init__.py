"""
rule engine package

exports the rule engine and pydantic models for convenient imports.
"""

from .rules.base import RuleEngine, BaseRule
from .rules.common_rules import default_rules
from .models.transaction import (
    Transaction,
    Wallet,
    WhaleAlertResponse,
    ClassificationResult,
    ClassificationType,
    TransactionType,
)


def create_default_engine() -> RuleEngine:
    """Rule engine loaded with the standard mint/burn/exchange-flow rules."""
    return RuleEngine(default_rules())


__all__ = [
    "RuleEngine",
    "BaseRule",
    "create_default_engine",
    "default_rules",
    "Transaction",
    "Wallet",
    "WhaleAlertResponse",
    "ClassificationResult",
    "ClassificationType",
    "TransactionType",
]

__version__ = "1.0.0"
