"""Spot price client for elprisetjustnu.se"""

import logging
from datetime import date, datetime
from typing import Any, List

import aiohttp

from models import InvalidQuotationError, PriceQuotation, Zone

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.elprisetjustnu.se/api/v1/prices"
PRICE_FIELD = "SEK_per_kWh"


def parse_quotations(payload: Any) -> List[PriceQuotation]:
    """Convert the API's JSON list into quotations"""
    if not isinstance(payload, list):
        raise InvalidQuotationError(f"Expected a list of prices, got {type(payload).__name__}")

    quotations = []
    for entry in payload:
        try:
            start = datetime.fromisoformat(entry["time_start"])
            end = datetime.fromisoformat(entry["time_end"])
            price = float(entry[PRICE_FIELD])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidQuotationError(f"Malformed price entry {entry!r}: {e}") from e
        quotations.append(PriceQuotation(start, end, price))
    return quotations


class PriceFetcher:
    """Fetches raw quotations for a (date, zone) pair"""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def build_url(self, target_date: date, zone: Zone) -> str:
        return f"{self.base_url}/{target_date:%Y}/{target_date:%m-%d}_{zone.value}.json"

    async def fetch_quotations(self, target_date: date, zone: Zone) -> List[PriceQuotation]:
        """Fetch quotations; an unpublished day gives an empty list"""
        url = self.build_url(target_date, zone)
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=self.timeout)) as response:
                if response.status == 404:
                    logger.info(f"No prices published for {target_date} {zone.value}")
                    return []
                response.raise_for_status()
                try:
                    payload = await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise InvalidQuotationError(f"Unreadable price data for {target_date} {zone.value}: {e}") from e

        quotations = parse_quotations(payload)
        logger.debug(f"fetch_quotations date={target_date} zone={zone.value} quotations={len(quotations)}")
        return quotations
