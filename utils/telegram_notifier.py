"""
Telegram Notifier

Posts the signal report to the recipient chat and errors / diagnostics to
a separate log chat through the Bot API sendMessage endpoint.

A failed send is logged and reported through the return value only:
there is no further channel to report a failed report on.
"""
from typing import List, Optional

import requests

from config.logging_config import get_logger
from config.settings import TELEGRAM_API_URL, REQUEST_TIMEOUT_SECONDS, AppConfig

logger = get_logger(__name__)

# Bot API limit for a single message text
MAX_MESSAGE_LENGTH = 4096


def split_message(text: str, limit: int = MAX_MESSAGE_LENGTH) -> List[str]:
    """
    Split text on line boundaries into chunks no longer than limit.

    Joining the chunks with newlines gives back the text, unless a single
    line was longer than limit and had to be cut.
    """
    if len(text) <= limit:
        return [text]

    chunks: List[str] = []
    current: Optional[str] = None
    for line in text.split("\n"):
        if len(line) > limit:
            if current is not None:
                chunks.append(current)
                current = None
            while len(line) > limit:
                chunks.append(line[:limit])
                line = line[limit:]
        candidate = line if current is None else f"{current}\n{line}"
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current is not None:
        chunks.append(current)
    return chunks


class TelegramNotifier:
    """
    Telegram Bot API sender with two destinations.

    Features:
    - report chat for the rendered signal report
    - log chat for feed errors and unhandled transactions
    - long texts split on line boundaries
    """

    def __init__(
        self,
        bot_token: str,
        recipient_id: str,
        log_id: str,
        api_url: str = TELEGRAM_API_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None
    ):
        self.bot_token = bot_token
        self.recipient_id = recipient_id
        self.log_id = log_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.enabled = bool(self.bot_token)
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: AppConfig, session: Optional[requests.Session] = None) -> "TelegramNotifier":
        return cls(
            bot_token=config.telegram.bot_id,
            recipient_id=config.telegram.recipient_id,
            log_id=config.telegram.log_id,
            api_url=config.telegram_api_url,
            timeout=config.whale_alert.timeout,
            session=session
        )

    def close(self) -> None:
        self.session.close()

    @property
    def send_url(self) -> str:
        return f"{self.api_url}/bot{self.bot_token}/sendMessage"

    @staticmethod
    def build_payload(chat_id: str, text: str) -> dict:
        return {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "markdown",
        }

    def _post(self, chat_id: str, text: str) -> bool:
        try:
            response = self.session.post(self.send_url, json=self.build_payload(chat_id, text), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Telegram send failed", extra={'extra_fields': {'chat_id': chat_id, 'error': str(e)}})
            return False

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.ok or not body.get("ok", False):
            logger.error("Telegram rejected message",
                         extra={'extra_fields': {'chat_id': chat_id,
                                                 'status_code': response.status_code,
                                                 'description': body.get("description", response.text)}})
            return False

        logger.info("Telegram message sent", extra={'extra_fields': {'chat_id': chat_id, 'length': len(text)}})
        return True

    def send_message(self, chat_id: str, text: str) -> bool:
        """
        Send text to one chat, splitting it when it exceeds the Bot API limit.

        Returns:
            True when every part was accepted
        """
        if not self.enabled or not chat_id:
            logger.warning("Telegram not configured, message dropped",
                           extra={'extra_fields': {'chat_id': chat_id, 'text': text}})
            return False
        if not text:
            return False

        sent = True
        for chunk in split_message(text):
            sent = self._post(chat_id, chunk) and sent
        return sent

    def send_report(self, text: str) -> bool:
        return self.send_message(self.recipient_id, text)

    def send_log(self, text: str) -> bool:
        return self.send_message(self.log_id, text)
