"""
Standard classification rules

This module implements the rules that sort Whale Alert transactions into
supply changes (mint, burn) and exchange flow (inflow, outflow).

Order matters: the engine stops at the first rule that matches, so
default_rules() must keep the order below.
"""
from typing import Optional, List

from .base import BaseRule
from ..models.transaction import (
    Transaction,
    ClassificationResult,
    ClassificationType,
    TransactionType,
)


class MintRule(BaseRule):
    """
    Rule 1: Mint → supply increase

    IF transaction_type == "mint" THEN classification = "mint"
    """
    name = "mint_rule"
    description = "New supply of an asset"

    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        if transaction.transaction_type != TransactionType.MINT.value:
            return None
        return self.create_result(
            transaction=transaction,
            classification=ClassificationType.MINT,
            explanation=f"{transaction.symbol} minted by {transaction.to_wallet.owner or 'unknown owner'}"
        )


class BurnRule(BaseRule):
    """
    Rule 2: Burn → supply decrease

    IF transaction_type == "burn" THEN classification = "burn"
    """
    name = "burn_rule"
    description = "Supply of an asset destroyed"

    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        if transaction.transaction_type != TransactionType.BURN.value:
            return None
        return self.create_result(
            transaction=transaction,
            classification=ClassificationType.BURN,
            explanation=f"{transaction.symbol} burned by {transaction.from_wallet.owner or 'unknown owner'}"
        )


class UnhandledKindRule(BaseRule):
    """
    Rule 3: Anything that is not a transfer at this point is unrecognised

    IF transaction_type != "transfer" THEN classification = "unhandled"
    """
    name = "unhandled_kind_rule"
    description = "Transaction kinds the engine has no rule for"

    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        if transaction.transaction_type == TransactionType.TRANSFER.value:
            return None
        return self.create_result(
            transaction=transaction,
            classification=ClassificationType.UNHANDLED,
            explanation=f"No rule for transaction type '{transaction.transaction_type}'"
        )


class InternalTransferRule(BaseRule):
    """
    Rule 4: Same owner category on both sides → ignored

    IF from_owner_type == to_owner_type THEN classification = "internal"

    Covers exchange → exchange as well: funds stay on exchanges.
    """
    name = "internal_transfer_rule"
    description = "Movement inside one owner category"

    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        owner_type = transaction.from_wallet.owner_type
        if owner_type != transaction.to_wallet.owner_type:
            return None
        return self.create_result(
            transaction=transaction,
            classification=ClassificationType.INTERNAL,
            explanation=f"Internal {owner_type} movement"
        )


class ExchangeOutflowRule(BaseRule):
    """
    Rule 5: Exchange withdrawals → outflow

    IF from_owner_type == "exchange" THEN classification = "exchange_outflow"
    """
    name = "exchange_outflow_rule"
    description = "Funds leaving an exchange"

    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        if not transaction.from_wallet.is_exchange:
            return None
        return self.create_result(
            transaction=transaction,
            classification=ClassificationType.EXCHANGE_OUTFLOW,
            explanation=(
                f"Withdrawal from {transaction.from_wallet.owner or 'an exchange'} "
                f"to {transaction.to_wallet.owner_type}"
            )
        )


class ExchangeInflowRule(BaseRule):
    """
    Rule 6: Exchange deposits → inflow

    IF to_owner_type == "exchange" THEN classification = "exchange_inflow"
    """
    name = "exchange_inflow_rule"
    description = "Funds arriving at an exchange"

    def apply(self, transaction: Transaction) -> Optional[ClassificationResult]:
        if not transaction.to_wallet.is_exchange:
            return None
        return self.create_result(
            transaction=transaction,
            classification=ClassificationType.EXCHANGE_INFLOW,
            explanation=(
                f"Deposit from {transaction.from_wallet.owner_type} "
                f"to {transaction.to_wallet.owner or 'an exchange'}"
            )
        )


def default_rules() -> List[BaseRule]:
    """Fresh instances of the standard rule set, in evaluation order."""
    return [
        MintRule(),
        BurnRule(),
        UnhandledKindRule(),
        InternalTransferRule(),
        ExchangeOutflowRule(),
        ExchangeInflowRule(),
    ]
