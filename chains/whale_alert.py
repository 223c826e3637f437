"""
Whale Alert REST client

Pulls every transaction in a closed [start, end] window from
GET /v1/transactions, following the server cursor page by page.
"""
from typing import List, Optional, Tuple

import requests
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from config.logging_config import get_logger
from config.settings import WHALE_ALERT_URL, REQUEST_TIMEOUT_SECONDS, WhaleAlertConfig
from rule_engine.models.transaction import Transaction, WhaleAlertResponse

logger = get_logger(__name__)


class WhaleAlertError(Exception):
    """Base class for feed failures."""


class WhaleAlertRequestError(WhaleAlertError):
    """Transport failure: connection, timeout or HTTP error status."""


class WhaleAlertDecodeError(WhaleAlertError):
    """Response body is not JSON or does not look like a transactions page."""


class WhaleAlertUpstreamError(WhaleAlertError):
    """The feed answered with result != "success"."""


FetchResult = Tuple[str, List[Transaction], Optional[WhaleAlertError]]


class WhaleAlertClient:
    """
    Paginated Whale Alert transactions feed.

    Each page gets one retry when the feed reports a failure or the request
    does not go through. Errors never discard pages that were already
    fetched: they are returned next to the partial transaction list.
    """

    def __init__(
        self,
        api_key: str,
        min_value: int = 500_000,
        limit: int = 100,
        base_url: str = WHALE_ALERT_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        retry_wait: float = 0,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.min_value = min_value
        self.limit = limit
        self.base_url = base_url
        self.timeout = timeout
        self.retry_wait = retry_wait
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: WhaleAlertConfig, session: Optional[requests.Session] = None) -> "WhaleAlertClient":
        return cls(
            api_key=config.api_key,
            min_value=config.min,
            limit=config.limit,
            base_url=config.base_url,
            timeout=config.timeout,
            retry_wait=config.retry_wait,
            session=session
        )

    def close(self) -> None:
        self.session.close()

    def _params(self, start: int, end: int, cursor: str) -> dict:
        params = {
            'api_key': self.api_key,
            'min_value': self.min_value,
            'start': start,
            'end': end,
            'limit': self.limit,
        }
        if cursor:
            params['cursor'] = cursor
        return params

    def page_url(self, start: int, end: int, cursor: str = "") -> str:
        """Full request URL for one page, for the operator's debugging."""
        return requests.Request('GET', self.base_url, params=self._params(start, end, cursor)).prepare().url

    def _request_page(self, start: int, end: int, cursor: str) -> WhaleAlertResponse:
        """
        Issue one GET and parse it.

        Returns:
            The parsed page, whether or not the feed reported success.

        Raises:
            WhaleAlertRequestError, WhaleAlertDecodeError
        """
        params = self._params(start, end, cursor)
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise WhaleAlertRequestError(f"Whale Alert request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            if not response.ok:
                raise WhaleAlertRequestError(
                    f"Whale Alert returned HTTP {response.status_code}"
                ) from e
            raise WhaleAlertDecodeError(f"Whale Alert returned a non-JSON body: {e}") from e

        # The feed reports failures in the body, often with a 4xx status as well
        try:
            page = WhaleAlertResponse(**body)
        except (TypeError, ValidationError) as e:
            raise WhaleAlertDecodeError(f"Unexpected Whale Alert response: {e}") from e
        return page

    def _fetch_page(self, start: int, end: int, cursor: str, retry: bool) -> WhaleAlertResponse:
        """One page, tried twice at most when retry is set. Raises WhaleAlertError."""

        def log_retry(retry_state):
            error = retry_state.outcome.exception()
            logger.warning("Whale Alert page failed, retrying",
                           extra={'extra_fields': {'error': str(error), 'error_type': type(error).__name__,
                                                   'cursor': cursor}})

        for attempt in Retrying(
            stop=stop_after_attempt(2 if retry else 1),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type((WhaleAlertRequestError, WhaleAlertUpstreamError)),
            before_sleep=log_retry,
            reraise=True
        ):
            with attempt:
                page = self._request_page(start, end, cursor)
                if not page.is_success:
                    raise WhaleAlertUpstreamError(page.message or f"Whale Alert result: {page.result}")
        return page

    def fetch_transactions(self, start: int, end: int, retry: bool = True) -> FetchResult:
        """
        Fetch all transactions between start and end (unix seconds, end inclusive).

        Args:
            start: Window start
            end: Window end, inclusive
            retry: Allow one retry per page

        Returns:
            (request_url, transactions, error): URL of the last request made,
            every transaction from the pages that succeeded, and the error
            that stopped the fetch or None.
        """
        transactions: List[Transaction] = []
        cursor = ""
        pages = 0

        while True:
            request_url = self.page_url(start, end, cursor)
            try:
                page = self._fetch_page(start, end, cursor, retry)
            except WhaleAlertError as e:
                logger.error("Whale Alert fetch stopped",
                             extra={'extra_fields': {'error': str(e), 'error_type': type(e).__name__,
                                                     'pages': pages, 'transactions': len(transactions)}})
                return request_url, transactions, e

            pages += 1
            transactions.extend(page.transactions)
            logger.info("Whale Alert page fetched",
                        extra={'extra_fields': {'page': pages, 'count': page.page_count,
                                                'total': len(transactions)}})

            if page.page_count < self.limit:
                break
            if not page.cursor:
                logger.warning("Whale Alert page is full but has no cursor, stopping",
                               extra={'extra_fields': {'page': pages}})
                break
            cursor = page.cursor

        return request_url, transactions, None
