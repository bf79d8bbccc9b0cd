"""
CurrencyConverter — converts an amount between currencies.

Calls ``GET {base_url}/convert?access_key&from&to&amount`` on the
configured exchange-rate service and reads the numeric ``result`` field
of the JSON body.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from config.settings import Settings
from core.exceptions import ConversionFailedError, ValidationFailedError

logger = logging.getLogger(__name__)


def normalise_currency(code: str) -> str:
    """Upper-case a currency code; it must be three letters."""
    cleaned = (code or "").strip().upper()
    if len(cleaned) != 3 or not cleaned.isalpha():
        raise ValidationFailedError(f"Invalid currency code: {code!r}")
    return cleaned


class CurrencyConverter:
    """Thin client for the exchange-rate service."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = settings.exchange_rate_base_url
        self.api_key = settings.exchange_rate_api_key
        self.timeout = settings.exchange_rate_timeout_seconds
        self._transport = transport

    async def convert(self, from_currency: str, to_currency: str, amount: Decimal) -> Decimal:
        """
        Convert ``amount`` from one currency to another.

        Raises ``ValidationFailedError`` for malformed input and
        ``ConversionFailedError`` when the service cannot produce a result.
        """
        source = normalise_currency(from_currency)
        target = normalise_currency(to_currency)
        if amount <= 0:
            raise ValidationFailedError("Amount must be greater than zero")

        params = {
            "access_key": self.api_key,
            "from": source,
            "to": target,
            "amount": str(amount),
        }
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.get("/convert", params=params)
        except httpx.HTTPError as exc:
            logger.warning("Exchange-rate request %s→%s failed: %s", source, target, exc)
            raise ConversionFailedError() from exc

        if not resp.is_success:
            logger.warning(
                "Exchange-rate service answered %d for %s→%s", resp.status_code, source, target,
            )
            raise ConversionFailedError()

        try:
            data: Dict[str, Any] = resp.json(parse_float=Decimal)
        except ValueError as exc:
            logger.warning("Exchange-rate service returned a non-JSON body")
            raise ConversionFailedError() from exc

        result = data.get("result") if isinstance(data, dict) else None
        if isinstance(result, bool) or not isinstance(result, (int, Decimal)):
            logger.warning("Exchange-rate response has no numeric result: %s", data)
            raise ConversionFailedError()

        return Decimal(result)
