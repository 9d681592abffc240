"""Currency service - exchange rates, conversion and display formatting."""
import logging
import re
from datetime import datetime, timezone
from typing import Optional

import httpx
from pydantic import Field

from agile_canvas.models.base import CamelModel
from agile_canvas.models.project import Currency


logger = logging.getLogger(__name__)

BASE_CURRENCY = Currency.BRL

# Units of the base currency per one unit of each currency
FALLBACK_RATES = {
    Currency.BRL: 1.0,
    Currency.USD: 5.50,
    Currency.EUR: 6.20,
}

# symbol, thousands separator, decimal separator, symbol goes first, space after symbol
_FORMATS = {
    Currency.BRL: ("R$", ".", ",", True, True),
    Currency.USD: ("$", ",", ".", True, False),
    Currency.EUR: ("€", ".", ",", False, True),
}


class CurrencyRates(CamelModel):
    """Exchange-rate table, refreshed in place by CurrencyService."""

    rates: dict[Currency, float] = Field(default_factory=lambda: dict(FALLBACK_RATES))
    base: Currency = BASE_CURRENCY
    updated_at: Optional[datetime] = None


class CurrencyService:
    """Service for currency conversion and formatting."""

    def __init__(
        self,
        rates: Optional[CurrencyRates] = None,
        api_url: str = "https://api.exchangerate-api.com/v4/latest/BRL",
        timeout: float = 10.0,
    ):
        """
        Initialize service.

        Args:
            rates: Rate table to read and refresh; fallback rates when omitted
            api_url: Endpoint returning ``{"rates": {code: units per base}}``
            timeout: Request timeout in seconds
        """
        self.rates = rates or CurrencyRates()
        self.api_url = api_url
        self.timeout = timeout

    def convert(self, amount: float, from_currency: Currency, to_currency: Currency) -> float:
        """
        Convert an amount between currencies through the base currency.

        Args:
            amount: Amount in from_currency
            from_currency: Source currency
            to_currency: Target currency

        Returns:
            Amount in to_currency (not rounded)
        """
        from_currency = Currency(from_currency)
        to_currency = Currency(to_currency)
        if from_currency == to_currency:
            return amount

        in_base = amount * self.rates.rates[from_currency]
        return in_base / self.rates.rates[to_currency]

    def format_currency(self, amount: float, currency: Currency) -> str:
        """
        Format an amount for display.

        Examples:
            >>> CurrencyService().format_currency(1234.5, Currency.BRL)
            'R$ 1.234,50'
            >>> CurrencyService().format_currency(1234.5, Currency.USD)
            '$1,234.50'
        """
        symbol, thousands, decimal, prefix, spaced = _FORMATS[Currency(currency)]

        digits = f"{abs(amount):,.2f}"
        whole, cents = digits.split(".")
        number = f"{whole.replace(',', thousands)}{decimal}{cents}"

        gap = " " if spaced else ""
        text = f"{symbol}{gap}{number}" if prefix else f"{number}{gap}{symbol}"
        return f"-{text}" if amount < 0 else text

    @staticmethod
    def parse_currency_input(text: str) -> float:
        """
        Read typed currency input as cents.

        Examples:
            >>> CurrencyService.parse_currency_input("R$ 12,34")
            12.34
            >>> CurrencyService.parse_currency_input("")
            0.0
        """
        digits = re.sub(r"\D", "", text or "")
        return int(digits) / 100 if digits else 0.0

    async def refresh_rates(self, client: Optional[httpx.AsyncClient] = None) -> bool:
        """
        Fetch fresh rates from the remote source.

        Any failure keeps the current rates; errors are logged, never raised.

        Args:
            client: HTTP client to use; a short-lived one is created when omitted

        Returns:
            True if rates were updated
        """
        try:
            if client is None:
                async with httpx.AsyncClient(timeout=self.timeout) as own_client:
                    response = await own_client.get(self.api_url)
            else:
                response = await client.get(self.api_url)
            response.raise_for_status()
            payload = response.json()

            remote = payload["rates"]
            rates = {self.rates.base: 1.0}
            for currency in Currency:
                if currency != self.rates.base:
                    rates[currency] = 1 / float(remote[currency.value])
        except (httpx.HTTPError, ValueError, KeyError, TypeError, ZeroDivisionError) as e:
            logger.warning("Failed to update currency rates, keeping current values: %s", e)
            return False

        self.rates.rates = rates
        self.rates.updated_at = datetime.now(timezone.utc)
        logger.info("Currency rates updated: %s", {c.value: r for c, r in rates.items()})
        return True
