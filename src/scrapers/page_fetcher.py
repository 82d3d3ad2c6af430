# src/scrapers/page_fetcher.py

"""Fetches the gold price page as raw markup."""

import logging
import time
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from src.config.settings import Settings


class PageFetcher:
    """GET a page with browser impersonation and retries.

    curl_cffi is tried first; cloudscraper (JS challenge solver) is the
    fallback. Returns the decoded page text, or None once both give up.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self, url: str | None = None) -> None:
        self.settings = Settings()
        self.url = url or self.settings.SOURCE_URL
        self.logger = logging.getLogger("gold_watch.fetcher")
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._current_delay: float = self.settings.REQUEST_DELAY
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _headers(self) -> dict[str, str]:
        return {**self.settings.DEFAULT_HEADERS, "Referer": self.url}

    def _is_real_page(self, text: str) -> bool:
        """Reject Cloudflare challenges and CAPTCHA interstitials."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "Cloudflare challenge detected (marker: '%s')",
                    marker,
                )
                return False

        # Long pages mention "captcha" in scripts without being one
        if "<body" in lower and len(text) > 5000:
            return True
        for keyword in self.settings.CAPTCHA_KEYWORDS:
            if keyword in lower:
                self.logger.warning(
                    "CAPTCHA keyword '%s' detected", keyword
                )
                return False
        return True

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY
            * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        self.logger.warning(
            "Rate-limited, delay escalated to %.1fs",
            self._current_delay,
        )

    def _fetch_primary(self) -> str | None:
        """curl_cffi GET with retries and adaptive delay."""
        headers = self._headers()
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    self.url,
                    headers=headers,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    if not self._is_real_page(resp.text):
                        self._escalate_delay()
                        time.sleep(self._current_delay)
                        continue
                    return resp.text
                self.logger.warning(
                    "HTTP %d on attempt %d",
                    resp.status_code,
                    attempt + 1,
                )
                if resp.status_code in (429, 403):
                    self._escalate_delay()
                    time.sleep(self._current_delay)
            except Exception as exc:
                self.logger.warning(
                    "Request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self._current_delay * (attempt + 1))
        return None

    def _fetch_fallback(self) -> str | None:
        """cloudscraper GET, used once curl_cffi is exhausted."""
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                self.url,
                headers=self._headers(),
                timeout=self._request_timeout,
            )
            if resp.status_code == 200:
                text = str(resp.text)
                if self._is_real_page(text):
                    return text
            else:
                self.logger.warning(
                    "cloudscraper HTTP %d", resp.status_code
                )
        except Exception as exc:
            self.logger.error(
                "cloudscraper fallback failed: %s",
                exc,
                exc_info=True,
            )
        return None

    def fetch(self) -> str | None:
        """Return the page markup, or None if it could not be fetched."""
        time.sleep(self._current_delay)

        self.logger.info("Fetching %s", self.url)
        text = self._fetch_primary()
        if text is None:
            self.logger.info(
                "curl_cffi exhausted, falling back to cloudscraper"
            )
            text = self._fetch_fallback()

        if text is None:
            return None
        self._current_delay = self.settings.REQUEST_DELAY
        self.logger.info("Fetched %d characters", len(text))
        return text
