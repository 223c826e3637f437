"""
Transaction Models Module

This module defines the Pydantic models for the Whale Alert feed payload
and for transaction classification results.
"""
from pydantic import BaseModel, Field, validator
from typing import List, Optional
from enum import Enum


EXCHANGE_OWNER_TYPE = "exchange"


class TransactionType(str, Enum):
    """Transaction kinds the classifier understands"""
    MINT = "mint"
    BURN = "burn"
    TRANSFER = "transfer"


class ClassificationType(str, Enum):
    """Economic effect of a transaction"""
    MINT = "mint"
    BURN = "burn"
    EXCHANGE_INFLOW = "exchange_inflow"
    EXCHANGE_OUTFLOW = "exchange_outflow"
    INTERNAL = "internal"  # same owner category on both sides, ignored
    PEER_TO_PEER = "peer_to_peer"  # neither side is an exchange, ignored
    UNHANDLED = "unhandled"  # unknown transaction kind, diagnostic only


class Wallet(BaseModel):
    """One side of a transaction"""
    address: str = ""
    owner: str = ""
    owner_type: str = Field(default="unknown", description="exchange, unknown, other, ...")

    @validator("address", "owner", pre=True)
    def _null_as_empty_string(cls, value):
        return "" if value is None else value

    @validator("owner_type", pre=True)
    def _null_as_unknown(cls, value):
        return "unknown" if value is None else value

    class Config:
        extra = "allow"

    @property
    def is_exchange(self) -> bool:
        return self.owner_type == EXCHANGE_OWNER_TYPE


class Transaction(BaseModel):
    """Transaction as reported by the Whale Alert feed"""
    blockchain: str = ""
    symbol: str
    id: str = ""
    transaction_type: str
    hash: str = ""
    from_wallet: Wallet = Field(default_factory=Wallet, alias="from")
    to_wallet: Wallet = Field(default_factory=Wallet, alias="to")
    timestamp: int = 0
    amount: float = 0.0
    amount_usd: float = 0.0
    transaction_count: int = Field(default=1, description="Batched p2p transfers share one record")

    @validator("from_wallet", "to_wallet", pre=True)
    def _null_wallet_as_unlabelled(cls, value):
        return {} if value is None else value

    @validator("blockchain", "id", "hash", pre=True)
    def _null_as_empty_string(cls, value):
        return "" if value is None else value

    @validator("timestamp", "amount", "amount_usd", pre=True)
    def _null_as_zero(cls, value):
        return 0 if value is None else value

    class Config:
        extra = "allow"
        frozen = True
        populate_by_name = True


class WhaleAlertResponse(BaseModel):
    """One page of GET /v1/transactions"""
    result: str
    message: str = ""
    cursor: str = ""
    count: Optional[int] = None
    transactions: List[Transaction] = Field(default_factory=list)

    @validator("message", "cursor", pre=True)
    def _null_as_empty_string(cls, value):
        return "" if value is None else value

    @validator("transactions", pre=True)
    def _null_as_empty_list(cls, value):
        # the feed sends null instead of an empty list on empty pages
        return [] if value is None else value

    class Config:
        extra = "allow"

    @property
    def is_success(self) -> bool:
        return self.result == "success"

    @property
    def page_count(self) -> int:
        """Item count reported by the server, or the page length when absent."""
        if self.count is None:
            return len(self.transactions)
        return self.count


class ClassificationResult(BaseModel):
    """Outcome of running the rule engine on one transaction"""
    classification: ClassificationType
    triggered_rule: str
    explanation: str = Field(..., description="Human-readable explanation of the classification")
    transaction: Transaction
