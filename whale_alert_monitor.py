#!/usr/bin/env python3
"""
Whale Flow Signal Monitor

This script, run once per cron tick:
 - Pulls every Whale Alert transaction in a fixed [start, end] window
 - Records observed wallet labels in the whale registry (optional)
 - Classifies transactions as mints, burns, exchange inflows or outflows
 - Aggregates the USD amounts per asset
 - Posts a bullish / bearish signal report to Telegram
"""

import argparse
import sys
import time
from typing import List, Optional

from chains.whale_alert import WhaleAlertClient
from config.logging_config import production_logger, setup_production_logging
from config.settings import AppConfig, ConfigError, DEFAULT_INTERVAL_MINUTES, load_config
from utils.summary import summarize_transactions
from utils.telegram_notifier import TelegramNotifier
from utils.whale_registry import WhaleRegistry
from whale_sentiment_aggregator import WhaleSentimentAggregator


def default_window(interval_minutes: int, now: Optional[float] = None):
    """
    Window that ends just before the current minute.

    Rounded down to the minute so consecutive cron runs tile the timeline
    without gaps or overlap. Whale Alert treats end as inclusive, hence -1.
    """
    now = time.time() if now is None else now
    current_minute = int(now) - int(now) % 60
    start = current_minute - interval_minutes * 60
    end = start + interval_minutes * 60 - 1
    return start, end


class PrintNotifier:
    """Stand-in for TelegramNotifier with --dry-run: writes to stdout."""

    def send_report(self, text: str) -> bool:
        print(text)
        return True

    def send_log(self, text: str) -> bool:
        print(text, file=sys.stderr)
        return True


def run(
    config: AppConfig,
    start: int,
    end: int,
    client: WhaleAlertClient,
    notifier,
    registry: Optional[WhaleRegistry] = None
) -> Optional[str]:
    """
    One fetch → classify → report cycle.

    Returns:
        The report text that was sent, or None when there was nothing to report
    """
    production_logger.info("Whale flow run started", extra={'extra_fields': {'start': start, 'end': end}})

    _, transactions, error = client.fetch_transactions(start, end)
    if error is not None:
        # keep going with whatever pages did arrive
        notifier.send_log(str(error))

    if not transactions:
        production_logger.info("No whale transactions in window",
                               extra={'extra_fields': {'start': start, 'end': end}})
        return None

    if registry is not None:
        registry.record_wallets(transactions)

    summary = summarize_transactions(transactions, config.remap)
    if summary.unhandled:
        notifier.send_log("unhandled:\n" + "\n".join(summary.unhandled))

    aggregator = WhaleSentimentAggregator(config.stable_coins, config.significance_floor)
    report = aggregator.render_summary(summary)
    if not report:
        production_logger.info("No significant supply or flow changes",
                               extra={'extra_fields': {'transactions': len(transactions)}})
        return None

    notifier.send_report(report)
    production_logger.info("Whale flow run finished",
                           extra={'extra_fields': {'transactions': len(transactions), 'report_length': len(report)}})
    return report


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Whale Alert supply and exchange-flow signal report")
    parser.add_argument("-c", "--config", type=str, default="config.json",
                        help="config file")
    parser.add_argument("--interval", type=int, default=None,
                        help=f"minutes between start and end if not provided (default {DEFAULT_INTERVAL_MINUTES})")
    parser.add_argument("--start", type=int, default=None,
                        help="start time in unix seconds for fetching transactions")
    parser.add_argument("--end", type=int, default=None,
                        help="end time in unix seconds for fetching transactions, inclusive")
    parser.add_argument("--dry-run", action="store_true",
                        help="print the report instead of sending it")
    parser.add_argument("--log-level", type=str, default=None,
                        help="override the configured log level")
    return parser.parse_args(argv)


def resolve_window(args: argparse.Namespace, config: AppConfig, now: Optional[float] = None):
    interval = args.interval or config.interval_minutes
    start, end = default_window(interval, now)
    if args.start is not None:
        start = args.start
        end = start + interval * 60 - 1
    if args.end is not None:
        end = args.end
    return start, end


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        production_logger.critical("Cannot load configuration", extra={'extra_fields': {'error': str(e)}})
        return 1

    setup_production_logging(args.log_level or config.log_level)
    start, end = resolve_window(args, config)
    if end < start:
        production_logger.critical("Window end is before start", extra={'extra_fields': {'start': start, 'end': end}})
        return 1

    client = WhaleAlertClient.from_config(config.whale_alert)
    notifier = PrintNotifier() if args.dry_run else TelegramNotifier.from_config(config)
    registry = None if args.dry_run else WhaleRegistry.from_config(config.whale_registry)

    try:
        run(config, start, end, client, notifier, registry)
    finally:
        client.close()
        if isinstance(notifier, TelegramNotifier):
            notifier.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
