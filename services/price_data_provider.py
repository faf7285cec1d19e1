"""
Оценка пула в USD по простым ценам CoinGecko.

USDC/USDT считаются равными 1.0 без запроса к API. Символы без
сопоставления с CoinGecko id получают нулевую цену.
"""

import asyncio
import functools
import logging
import time
from decimal import Decimal
from typing import Dict, Iterable

import requests

import config.config as app_config
from config.token_registry import get_coingecko_id, is_stablecoin
from processing.errors import PriceUnavailableError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 1


class PricingService:
    def __init__(self, api_url: str = None, timeout: float = None, executor=None):
        self.api_url = api_url or app_config.COINGECKO_SIMPLE_PRICE_URL
        self.timeout = timeout or app_config.PRICE_TIMEOUT_SECONDS
        self.executor = executor

    def _fetch_simple_prices(self, coingecko_ids: Iterable[str]) -> Dict[str, float]:
        params = {"ids": ",".join(sorted(set(coingecko_ids))), "vs_currencies": "usd"}
        for attempt in range(MAX_RETRIES):
            try:
                resp = requests.get(self.api_url, params=params, timeout=self.timeout,
                                    headers={"Accept": "application/json"})
                if resp.status_code == 200:
                    data = resp.json()
                    return {cg_id: float(entry["usd"]) for cg_id, entry in data.items() if entry.get("usd")}
                raise requests.RequestException(f"CoinGecko API status {resp.status_code}")
            except requests.RequestException as e:
                if attempt == MAX_RETRIES - 1:
                    logger.error(f"CoinGecko недоступен после {MAX_RETRIES} попыток: {e}")
                    break
                wait = INITIAL_BACKOFF_SECONDS * (2 ** attempt)
                logger.warning(f"Ошибка запроса к CoinGecko (попытка {attempt+1}/{MAX_RETRIES}): {e}. Жду {wait} сек...")
                time.sleep(wait)
        return {}

    def get_token_prices(self, symbols: Iterable[str]) -> Dict[str, float]:
        """
        Получает цены в USD для набора символов.

        Args:
            symbols: Символы токенов (регистр не важен)

        Returns:
            Словарь SYMBOL -> цена; неизвестные символы получают 0.0
        """
        prices: Dict[str, float] = {}
        to_fetch: Dict[str, str] = {}
        for symbol in {s.upper() for s in symbols}:
            if is_stablecoin(symbol):
                prices[symbol] = 1.0
                continue
            cg_id = get_coingecko_id(symbol)
            if cg_id is None:
                logger.debug(f"Нет CoinGecko id для {symbol}")
                prices[symbol] = 0.0
            else:
                to_fetch[symbol] = cg_id

        if to_fetch:
            fetched = self._fetch_simple_prices(to_fetch.values())
            for symbol, cg_id in to_fetch.items():
                prices[symbol] = fetched.get(cg_id, 0.0)
        return prices

    def calculate_pool_tvl(self, symbol_a: str, amount_a: Decimal, symbol_b: str, amount_b: Decimal) -> float:
        prices = self.get_token_prices([symbol_a, symbol_b])
        price_a = prices.get(symbol_a.upper(), 0.0)
        price_b = prices.get(symbol_b.upper(), 0.0)
        if not price_a and not price_b:
            raise PriceUnavailableError(f"no USD price for {symbol_a} or {symbol_b}", stage="normalize")
        tvl = float(amount_a) * price_a + float(amount_b) * price_b
        logger.info(f"TVL {symbol_a}/{symbol_b}: {float(amount_a):.2f} x ${price_a:.4f} + "
                    f"{float(amount_b):.2f} x ${price_b:.4f} = ${tvl:,.2f}")
        return tvl

    async def price_in_usd(self, symbol_a: str, amount_a: Decimal, symbol_b: str, amount_b: Decimal) -> float:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self.executor,
            functools.partial(self.calculate_pool_tvl, symbol_a, amount_a, symbol_b, amount_b),
        )
