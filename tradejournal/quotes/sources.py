"""
Live quote sources.

Open positions are marked against a current price fetched from a quote
provider.  Providers are tried in order and the first one that returns
a price wins; a symbol that no provider can price is reported back to
the caller so the trader can enter the price manually.

Fetching is per symbol and independent: one failing symbol never
blocks or corrupts the quotes of the others.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from ..config.schema import QuoteConfig


logger = logging.getLogger(__name__)

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}"
FINNHUB_QUOTE_URL = "https://finnhub.io/api/v1/quote"


@dataclass
class Quote:
    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    source: str = ""


@dataclass
class QuoteError(Exception):
    symbol: str
    message: str
    source: Optional[str] = None

    def __str__(self) -> str:
        source_str = f" [{self.source}]" if self.source else ""
        return f"QuoteError{source_str}: {self.symbol}: {self.message}"


class QuoteSource:
    """Interface for anything that can price a symbol."""

    name = "base"

    def get_quote(self, symbol: str) -> Quote:
        raise NotImplementedError


class _HttpQuoteSource(QuoteSource):
    def __init__(self, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        self.timeout = timeout
        self.session = session

    def _get_json(self, symbol: str, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        getter = self.session.get if self.session is not None else requests.get
        try:
            r = getter(url, params=params, timeout=self.timeout, headers={"User-Agent": "tradejournal"})
            r.raise_for_status()
            return r.json()
        except requests.RequestException as exc:
            raise QuoteError(symbol, f"request failed: {exc}", self.name) from exc
        except ValueError as exc:
            raise QuoteError(symbol, "invalid JSON in response", self.name) from exc

    def _number(self, symbol: str, value: Any, label: str) -> float:
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise QuoteError(symbol, f"non-numeric {label} in response: {value!r}", self.name) from exc


class YahooQuoteSource(_HttpQuoteSource):
    """Quotes from the Yahoo Finance chart endpoint."""

    name = "yahoo"

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip()
        raw = self._get_json(
            symbol,
            YAHOO_CHART_URL.format(symbol=symbol),
            params={"interval": "1d", "range": "1d"},
        )
        try:
            meta = raw["chart"]["result"][0]["meta"]
        except (KeyError, IndexError, TypeError):
            raise QuoteError(symbol, "no chart data in response", self.name)
        if not isinstance(meta, dict):
            raise QuoteError(symbol, "no chart data in response", self.name)
        price = meta.get("regularMarketPrice")
        if not price:
            raise QuoteError(symbol, "no market price in response", self.name)
        price = self._number(symbol, price, "price")
        previous = meta.get("chartPreviousClose") or meta.get("previousClose")
        if previous:
            previous = self._number(symbol, previous, "previous close")
        change = price - previous if previous else 0.0
        change_percent = change / previous * 100 if previous else 0.0
        return Quote(
            symbol=str(meta.get("symbol") or symbol),
            price=price,
            change=change,
            change_percent=change_percent,
            source=self.name,
        )


class FinnhubQuoteSource(_HttpQuoteSource):
    """Quotes from Finnhub.  Requires an API token."""

    name = "finnhub"

    def __init__(self, api_key: str, timeout: float = 10.0, session: Optional[requests.Session] = None) -> None:
        super().__init__(timeout=timeout, session=session)
        self.api_key = api_key

    def get_quote(self, symbol: str) -> Quote:
        symbol = symbol.strip()
        raw = self._get_json(symbol, FINNHUB_QUOTE_URL, params={"symbol": symbol, "token": self.api_key})
        # Finnhub answers unknown symbols with c == 0
        if not isinstance(raw, dict) or not raw.get("c"):
            raise QuoteError(symbol, "no current price in response", self.name)
        return Quote(
            symbol=symbol,
            price=self._number(symbol, raw["c"], "price"),
            change=self._number(symbol, raw.get("d") or 0.0, "change"),
            change_percent=self._number(symbol, raw.get("dp") or 0.0, "change percent"),
            source=self.name,
        )


class FallbackQuoteSource(QuoteSource):
    """Try several sources in order; the first success wins."""

    name = "fallback"

    def __init__(self, sources: Sequence[QuoteSource]) -> None:
        self.sources = list(sources)

    def get_quote(self, symbol: str) -> Quote:
        failures: List[str] = []
        for source in self.sources:
            try:
                return source.get_quote(symbol)
            except QuoteError as exc:
                logger.warning("%s quote failed for %s: %s", source.name, symbol, exc.message)
                failures.append(f"{source.name}: {exc.message}")
        if not failures:
            raise QuoteError(symbol, "no quote providers configured")
        raise QuoteError(
            symbol,
            "unable to fetch quote from any source (" + "; ".join(failures) + ")",
        )


def build_quote_source(config: QuoteConfig, session: Optional[requests.Session] = None) -> FallbackQuoteSource:
    """Construct the provider chain described by the configuration."""
    sources: List[QuoteSource] = []
    for name in config.providers:
        if name == "yahoo":
            sources.append(YahooQuoteSource(timeout=config.timeout, session=session))
        elif name == "finnhub":
            if not config.finnhub_api_key:
                logger.info("Finnhub provider skipped: no API key configured")
                continue
            sources.append(FinnhubQuoteSource(config.finnhub_api_key, timeout=config.timeout, session=session))
        else:
            raise ValueError(f"Unknown quote provider: {name}")
    return FallbackQuoteSource(sources)


def fetch_quotes(
    source: QuoteSource,
    symbols: Iterable[str],
    max_workers: int = 4,
) -> Tuple[Dict[str, Quote], Dict[str, QuoteError]]:
    """Fetch quotes for many symbols in parallel.

    Returns
    -------
    quotes : dict
        Symbol -> Quote for every symbol that could be priced.
    errors : dict
        Symbol -> QuoteError for the rest.
    """
    unique = list(dict.fromkeys(symbols))
    quotes: Dict[str, Quote] = {}
    errors: Dict[str, QuoteError] = {}
    if not unique:
        return quotes, errors

    def _fetch(symbol: str) -> Tuple[str, Optional[Quote], Optional[QuoteError]]:
        try:
            return symbol, source.get_quote(symbol), None
        except QuoteError as exc:
            return symbol, None, exc

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        for symbol, quote, error in executor.map(_fetch, unique):
            if quote is not None:
                quotes[symbol] = quote
            else:
                errors[symbol] = error
    return quotes, errors
