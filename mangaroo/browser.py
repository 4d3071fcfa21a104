"""A lightweight page browser: fetches HTML pages and queries them with CSS selectors."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import requests
from bs4 import BeautifulSoup, Tag

_log = logging.getLogger(__name__)


class BrowserError(Exception):
    """Raised when the browser is not ready or a page cannot be loaded."""


class PageBrowser:
    """Loads one page at a time and answers selector queries against it."""

    def __init__(
        self,
        user_agent: str = "",
        *,
        session: requests.Session | None = None,
        timeout: float | None = 30.0,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.url: str | None = None
        self._sleeper = sleeper
        self._given_session = session
        self._session: requests.Session | None = None
        self._document: BeautifulSoup | None = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def __enter__(self) -> PageBrowser:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def open(self) -> PageBrowser:
        """Start a fresh browsing session, discarding any previous one."""
        if self.is_open:
            self.close()
        _log.info("Starting browser...")
        self._session = self._given_session if self._given_session is not None else requests.Session()
        self._document = None
        self.url = None
        _log.info("Browser started successfully")
        return self

    def close(self) -> None:
        """Release the session and forget the loaded page; safe to call twice."""
        session = self._session
        self._session = None
        self._document = None
        self.url = None
        if session is not None and session is not self._given_session:
            try:
                session.close()
            except Exception as exc:  # noqa: BLE001 - closing must never fail
                _log.warning("Recovered from error while closing session: %s", exc)
        _log.info("Browser resources have been safely released")

    def navigate(self, url: str) -> None:
        """Load ``url`` and make it the current page."""
        if self._session is None:
            _log.warning("Cannot navigate: browser is not open")
            raise BrowserError("cannot navigate: browser not properly initialized")

        _log.info("Navigating to: %s", url)
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}
        try:
            response = self._session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            _log.warning("Error navigating to %s: %s", url, exc)
            raise BrowserError(f"error navigating to {url}: {exc}") from exc
        if response.status_code >= 400:
            raise BrowserError(
                f"error navigating to {url}: HTTP {response.status_code} {response.reason}"
            )

        self._document = BeautifulSoup(response.text, "html.parser")
        self.url = response.url
        _log.info("Successfully navigated to %s", url)

    def _page(self) -> BeautifulSoup:
        if self._session is None:
            raise BrowserError("browser is not open, call open first")
        if self._document is None:
            raise BrowserError("no page loaded, call navigate first")
        return self._document

    def select(self, selector: str) -> list[Tag]:
        """Return every element of the current page matching ``selector``."""
        return list(self._page().select(selector))

    def select_one(self, selector: str) -> Tag | None:
        """Return the first element matching ``selector``, or None."""
        return self._page().select_one(selector)

    def title(self) -> str:
        """Return the text of the current page's title element."""
        title = self._page().title
        return title.get_text() if title is not None else ""

    def sleep(self, seconds: float) -> None:
        """Wait ``seconds``; does nothing for zero or less."""
        if self._session is None:
            raise BrowserError("browser is not open, call open first")
        if seconds > 0:
            self._sleeper(seconds)