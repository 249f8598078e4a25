"""Price lookups against the CoinGecko simple price endpoint."""
import asyncio
from typing import Dict, Iterable, List, Optional
from loguru import logger
import aiohttp

class PriceResolver:
    """Resolves fiat prices for a batch of CoinGecko asset ids."""

    def __init__(self,
                 currency: str = "eur",
                 base_url: str = "https://api.coingecko.com/api/v3",
                 api_key: Optional[str] = None,
                 timeout: float = 10.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self.currency = currency.lower()
        self.url = f"{base_url.rstrip('/')}/simple/price"
        self.api_key = api_key
        self.timeout = timeout
        self.session = session

    @staticmethod
    def normalize_ids(asset_ids: Iterable[str]) -> List[str]:
        """Distinct, non-empty ids in a stable order."""
        return sorted({asset_id.strip() for asset_id in asset_ids if asset_id and asset_id.strip()})

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def fetch_prices(self, asset_ids: Iterable[str]) -> Dict[str, float]:
        """Fetch current prices for all ids in one request.

        Args:
            asset_ids: CoinGecko ids; blanks and duplicates are ignored

        Returns:
            Mapping of id to price for the ids the source recognized. Any
            failure is logged and gives an empty mapping.
        """
        ids = self.normalize_ids(asset_ids)
        if not ids:
            return {}

        params = {"ids": ",".join(ids), "vs_currencies": self.currency}
        logger.debug(f"Requesting prices for {params['ids']} in {self.currency}")

        try:
            if self.session is not None:
                data = await self._request(self.session, params)
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    data = await self._request(session, params)
        except aiohttp.ClientResponseError as e:
            logger.error(f"CoinGecko returned HTTP {e.status} (network error or API rate limit exceeded)")
            return {}
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.error(f"Failed to fetch prices from CoinGecko: {e}")
            return {}

        prices = self._parse(data)
        missing = [asset_id for asset_id in ids if asset_id not in prices]
        if missing:
            logger.warning(f"No price for: {', '.join(missing)}")
        logger.info(f"Prices updated for {len(prices)} of {len(ids)} assets")
        return prices

    async def _request(self, session: aiohttp.ClientSession, params: Dict[str, str]) -> dict:
        async with session.get(self.url, params=params, headers=self._headers()) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    def _parse(self, data) -> Dict[str, float]:
        """Pick the session currency out of the `{id: {currency: price}}` payload."""
        prices: Dict[str, float] = {}
        if not isinstance(data, dict):
            logger.error(f"Unexpected price payload: {type(data).__name__}")
            return prices
        for asset_id, quotes in data.items():
            price = quotes.get(self.currency) if isinstance(quotes, dict) else None
            if isinstance(price, bool) or not isinstance(price, (int, float)):
                logger.debug(f"Skipping {asset_id}: no numeric {self.currency} price")
                continue
            prices[asset_id] = float(price)
        return prices
