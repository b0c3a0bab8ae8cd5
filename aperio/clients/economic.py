"""FRED economic indicator client."""

from __future__ import annotations

import asyncio
import logging

import httpx

from aperio.config import is_demo_key
from aperio.models import Indicator, ProviderError
from aperio.retry import retry_async

logger = logging.getLogger(__name__)

# key: (series id, label, unit, description)
FRED_SERIES = {
    "gdp": (
        "GDP", "Gross Domestic Product", "Billions of Dollars",
        "Total value of goods and services produced in the United States",
    ),
    "inflation": (
        "CPIAUCSL", "Consumer Price Index", "Index 1982-84=100",
        "Measure of average change in prices paid by consumers",
    ),
    "unemployment": (
        "UNRATE", "Unemployment Rate", "Percent",
        "Percentage of labor force that is unemployed",
    ),
    "federal_rate": (
        "FEDFUNDS", "Federal Funds Rate", "Percent",
        "Interest rate at which banks lend to each other overnight",
    ),
    "consumer_sentiment": (
        "UMCSENT", "Consumer Sentiment Index", "Index",
        "Measure of consumer confidence in economic conditions",
    ),
    "housing_starts": (
        "HOUST", "Housing Starts", "Thousands of Units",
        "Number of new residential construction projects begun",
    ),
    "industrial_production": (
        "INDPRO", "Industrial Production", "Index 2017=100",
        "Output of factories, mines, and utilities",
    ),
    "retail_sales": (
        "RSAFS", "Retail Sales", "Millions of Dollars",
        "Total receipts of retail stores",
    ),
    "personal_income": (
        "PI", "Personal Income", "Billions of Dollars",
        "Income received by persons from all sources",
    ),
    "savings_rate": (
        "PSAVERT", "Personal Savings Rate", "Percent",
        "Personal savings as percentage of disposable income",
    ),
}


def mock_indicators() -> dict[str, Indicator]:
    return {
        "gdp": Indicator("gdp", "GDP Growth Rate", 2.3, change=0.1, unit="Percent"),
        "inflation": Indicator("inflation", "Inflation Rate", 3.2, change=-0.2, unit="Percent"),
        "unemployment": Indicator("unemployment", "Unemployment Rate", 3.8, unit="Percent"),
        "federal_rate": Indicator("federal_rate", "Federal Funds Rate", 5.25, unit="Percent"),
    }


class EconomicClient:
    """Latest observation and change for a fixed set of FRED series."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.stlouisfed.org/fred",
        timeout: int = 30,
        max_retries: int = 0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries

    @property
    def is_demo(self) -> bool:
        return is_demo_key(self.api_key)

    async def _fetch_api(self, path: str, params: dict) -> dict:
        params = {**params, "api_key": self.api_key, "file_type": "json"}

        async def _get() -> dict:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(f"{self.base_url}/{path}", params=params)
                resp.raise_for_status()
                return resp.json()

        try:
            data = await retry_async(_get, max_retries=self.max_retries, label="fred")
        except (httpx.HTTPError, ValueError) as exc:
            raise ProviderError("fred", str(exc)) from exc
        if not isinstance(data, dict):
            raise ProviderError("fred", "unexpected response shape")
        return data

    async def get_indicator(self, key: str) -> Indicator:
        """Latest two observations of one series. Raises on any failure."""
        series_id, label, unit, description = FRED_SERIES[key]
        data = await self._fetch_api("series/observations", {
            "series_id": series_id, "limit": "2", "sort_order": "desc",
        })
        observations = data.get("observations") or []
        if len(observations) < 2:
            raise ProviderError("fred", f"{series_id}: fewer than two observations")

        latest, previous = observations[0], observations[1]
        try:
            current = float(latest["value"])
            prior = float(previous["value"])
        except (KeyError, ValueError) as exc:
            # FRED marks missing values with "."
            raise ProviderError("fred", f"{series_id}: bad value {exc}") from exc

        change = current - prior
        return Indicator(
            key=key,
            label=label,
            value=current,
            change=change,
            change_percent=(change / prior * 100) if prior else 0.0,
            date=latest.get("date"),
            unit=unit,
            description=description,
        )

    async def get_economic_indicators(
        self, keys: list[str] | None = None,
    ) -> dict[str, Indicator]:
        """Fetch series in parallel, keeping the ones that succeed.

        Raises ProviderError when every series fails.
        """
        if self.is_demo:
            return mock_indicators()

        keys = keys or list(FRED_SERIES)
        results = await asyncio.gather(
            *[self.get_indicator(k) for k in keys],
            return_exceptions=True,
        )

        indicators = {}
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                logger.warning("FRED series '%s' failed: %s", key, result)
            else:
                indicators[key] = result

        if not indicators:
            raise ProviderError("fred", "no indicator could be fetched")
        return indicators

    async def get_series_info(self, series_id: str) -> dict | None:
        data = await self._fetch_api("series", {"series_id": series_id})
        series = data.get("seriess") or []
        return series[0] if series else None
