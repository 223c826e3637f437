#!/usr/bin/env python3
"""
Whale Wallet Registry
Keeps a supabase table of every wallet seen in the feed with its latest
owner label, keyed by (blockchain, address).

Best-effort only: nothing here may stop the signal report from going out.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from supabase import create_client

from config.logging_config import get_logger
from config.settings import WhaleRegistryConfig
from rule_engine.models.transaction import Transaction, Wallet

logger = get_logger(__name__)


class WhaleRegistry:
    """
    Upserts wallet owner metadata observed in whale transactions.

    Table layout:
        blockchain text, address text, owner text null, owner_type text,
        unique (blockchain, address)
    """

    def __init__(self, supabase_url: str, supabase_key: str, table: str = "whales", client=None):
        self.supabase_url = supabase_url
        self.supabase_key = supabase_key
        self.table = table
        self.supabase = client

    @classmethod
    def from_config(cls, config: WhaleRegistryConfig) -> Optional["WhaleRegistry"]:
        """Registry for the configured table, or None when not configured."""
        if not config.enabled:
            return None
        return cls(config.supabase_url, config.supabase_key, config.table)

    def _get_client(self):
        if self.supabase is None:
            self.supabase = create_client(self.supabase_url, self.supabase_key)
        return self.supabase

    @staticmethod
    def build_rows(transactions: Iterable[Transaction]) -> List[Dict]:
        """
        One row per distinct (blockchain, address); the last sighting wins.

        Postgres rejects an upsert batch that touches the same key twice.
        """
        rows: Dict[Tuple[str, str], Dict] = {}
        for transaction in transactions:
            for wallet in (transaction.from_wallet, transaction.to_wallet):
                row = _wallet_row(transaction.blockchain, wallet)
                if row is not None:
                    rows[(row['blockchain'], row['address'])] = row
        return list(rows.values())

    def record_wallets(self, transactions: Iterable[Transaction]) -> int:
        """
        Upsert both sides of every transaction.

        Returns:
            Number of rows sent, 0 when nothing was written
        """
        rows = self.build_rows(transactions)
        if not rows:
            return 0

        try:
            self._get_client().table(self.table).upsert(
                rows,
                on_conflict='blockchain,address'
            ).execute()
        except Exception as e:
            logger.warning("Whale registry upsert failed",
                           extra={'extra_fields': {'table': self.table, 'rows': len(rows), 'error': str(e)}})
            return 0

        logger.info("Whale registry updated", extra={'extra_fields': {'table': self.table, 'rows': len(rows)}})
        return len(rows)


def _wallet_row(blockchain: str, wallet: Wallet) -> Optional[Dict]:
    if not wallet.address:
        return None
    return {
        'blockchain': blockchain,
        'address': wallet.address,
        'owner': wallet.owner or None,
        'owner_type': wallet.owner_type,
    }
