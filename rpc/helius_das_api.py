# rpc/helius_das_api.py

import asyncio
import functools
import logging
from typing import Optional

from config.token_registry import get_token_info
from decoder.models import TokenDisplay
# Используем наш централизованный клиент для управления ключами и ретраями
from .client import RPCClient

logger = logging.getLogger(__name__)

FALLBACK_SYMBOL = "TOKEN"
FALLBACK_NAME = "Unknown Token"
FALLBACK_DECIMALS = 9


def fallback_display() -> TokenDisplay:
    return TokenDisplay(symbol=FALLBACK_SYMBOL, name=FALLBACK_NAME, decimals=FALLBACK_DECIMALS)


def parse_asset_display(asset: dict) -> Optional[TokenDisplay]:
    """
    Извлекает символ и имя из ответа DAS getAsset.

    Args:
        asset: Результат getAsset

    Returns:
        TokenDisplay или None, если в ответе нет символа
    """
    metadata = (asset.get("content") or {}).get("metadata") or {}
    token_info = asset.get("token_info") or {}
    symbol = (metadata.get("symbol") or token_info.get("symbol") or "").strip()
    if not symbol:
        return None
    name = (metadata.get("name") or "").strip() or symbol
    return TokenDisplay(symbol=symbol, name=name, decimals=token_info.get("decimals"))


class TokenMetadataService:
    """Символы и имена токенов: сначала локальный реестр, затем Helius DAS."""

    def __init__(self, client: Optional[RPCClient] = None, executor=None):
        self.client = client or RPCClient()
        self.executor = executor

    async def fetch_symbol_and_name(self, mint: str) -> TokenDisplay:
        known = get_token_info(mint)
        if known:
            return TokenDisplay(symbol=known["symbol"], name=known["name"], decimals=known["decimals"])

        loop = asyncio.get_running_loop()
        asset = await loop.run_in_executor(self.executor, functools.partial(self.client.get_asset, mint))
        if not asset:
            logger.warning(f"DAS не вернул метаданные для {mint}, используем значения по умолчанию")
            return fallback_display()

        display = parse_asset_display(asset)
        if display is None:
            logger.warning(f"В метаданных {mint} нет символа, используем значения по умолчанию")
            return fallback_display()
        return display
