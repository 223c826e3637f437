#!/usr/bin/env python3
"""
Structured Logging
==================

JSON log lines for the whale flow signal job, one object per line on
stderr, ready for any log shipper.

Every line carries the service name and version. Lines written through a
transaction logger also carry the transaction hash and a short trace id, so
one classification can be followed with a single filter.

Context goes in as ``extra={'extra_fields': {...}}`` and comes out as
top-level keys of the JSON object.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, MutableMapping, Optional, Tuple

from pythonjsonlogger import jsonlogger

SERVICE_NAME = 'whale-flow-signals'
SERVICE_VERSION = '1.0.0'
LOGGER_NAME = 'whale_signals'

LOG_FORMAT = '%(timestamp)s %(level)s %(service)s %(version)s %(name)s %(message)s'


class WhaleSignalFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps service identity and lifts ``extra_fields``."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        log_record['service'] = SERVICE_NAME
        log_record['version'] = SERVICE_VERSION
        log_record['level'] = log_record.get('level') or record.levelname

        extra_fields = log_record.pop('extra_fields', None)
        if isinstance(extra_fields, dict):
            log_record.update(extra_fields)


class TransactionLogger(logging.LoggerAdapter):
    """
    Logger bound to one transaction.

    Keyword arguments passed to the logging calls are merged into the
    line's context next to ``transaction_hash`` and ``trace_id``:

        tx_logger.debug("Rule matched", rule="mint_rule")
    """

    def __init__(self, base_logger: logging.Logger, transaction_hash: str, trace_id: Optional[str] = None):
        self.transaction_hash = transaction_hash
        self.trace_id = trace_id or uuid.uuid4().hex[:8]
        super().__init__(base_logger, {'transaction_hash': transaction_hash, 'trace_id': self.trace_id})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        context = dict(self.extra)
        for key in list(kwargs):
            if key not in ('exc_info', 'stack_info', 'stacklevel', 'extra'):
                context[key] = kwargs.pop(key)
        kwargs['extra'] = {'extra_fields': context}
        return msg, kwargs

    def rule_matched(self, rule_name: str, classification: str, explanation: str) -> None:
        """Audit line: which rule put this transaction where it is."""
        self.debug(
            f"Rule matched: {rule_name}",
            rule=rule_name,
            classification=classification,
            explanation=explanation
        )


def setup_production_logging(log_level: str = 'INFO') -> logging.Logger:
    """
    (Re)configure the service logger.

    Safe to call more than once: the handler is replaced, not added twice.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL

    Returns:
        The ``whale_signals`` logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(WhaleSignalFormatter(LOG_FORMAT))
    logger.handlers = [handler]

    # child loggers report here only
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the service logger, e.g. ``whale_signals.chains.whale_alert``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def get_transaction_logger(transaction_hash: str, trace_id: Optional[str] = None) -> TransactionLogger:
    return TransactionLogger(get_logger("rule_engine"), transaction_hash, trace_id)


production_logger = setup_production_logging()
