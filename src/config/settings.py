# src/config/settings.py

"""Central configuration for the gold_watch monitor."""

import os
from decimal import Decimal
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the gold_watch monitor."""

    # --- Source ---
    SOURCE_ID: str = "harga-emas.org"
    SOURCE_URL: str = os.getenv(
        "GOLD_WATCH_URL", "https://harga-emas.org"
    )

    # --- Fetching ---
    REQUEST_DELAY: float = 1.0          # Seconds before a fetch
    REQUEST_TIMEOUT: int = 30           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Resilience ---
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/webp,*/*;q=0.8"
        ),
        "Accept-Language": "id-ID,id;q=0.9,en-US;q=0.8,en;q=0.7",
        "Cache-Control": "no-cache",
    }

    # --- Plausibility bands (IDR) ---
    PRICE_PER_GRAM_MIN: int = 2_000_000
    PRICE_PER_GRAM_MAX: int = 5_000_000
    UNWEIGHTED_PRICE_MIN: int = 500_000
    UNWEIGHTED_PRICE_MAX: int = 10_000_000_000
    BUYBACK_PRICE_MIN: int = 2_000_000
    BUYBACK_PRICE_MAX: int = 5_000_000

    # --- Extraction ---
    KNOWN_WEIGHTS: list[Decimal] = [
        Decimal(w)
        for w in (
            "1000", "500", "250", "100", "50",
            "25", "10", "5", "2", "1", "0.5",
        )
    ]
    TABLE_WINDOW_CHARS: int = 50        # Max non-digit gap weight -> price
    MAX_TEXT_SCAN_RESULTS: int = 5
    RECORD_LABEL_TEMPLATE: str = "Antam {weight}g"
    LIVE_PRICE_LABEL: str = "Live price"
    BUYBACK_LABEL: str = "Buyback per gram"
    BUYBACK_CHANGE_LABEL: str = "Harga Buyback"

    # Merge precedence, highest first
    STRATEGY_PRIORITY: list[str] = [
        "structured",
        "embedded",
        "table",
        "text_scan",
    ]

    # --- Delivery ---
    WEBHOOK_URL: str = os.getenv("N8N_WEBHOOK_URL", "")
    WEBHOOK_TIMEOUT: int = 30
    WEBHOOK_USER_AGENT: str = "GoldPriceMonitor/1.0"
    WEBHOOK_EVENT: str = "GOLD_PRICE_UPDATE"

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LAST_SNAPSHOT_PATH: Path = Path(
        os.getenv(
            "GOLD_WATCH_DATA_FILE",
            str(DATA_DIR / "last-price.json"),
        )
    )
    LOGS_DIR: Path = BASE_DIR / "logs"
