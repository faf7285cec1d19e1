"""
Реестр известных токенов: символ, decimals и идентификатор CoinGecko.
Используется для нативного SOL в bonding curve и для оценки в USD.
"""
from typing import Dict, Any, Optional

NATIVE_SOL_MINT = "So11111111111111111111111111111111111111112"
NATIVE_SOL_DECIMALS = 9
# Токены Pump.fun по соглашению выпускаются с 6 знаками
PUMPFUN_TOKEN_DECIMALS = 6

KNOWN_TOKEN_REGISTRY: Dict[str, Dict[str, Any]] = {
    NATIVE_SOL_MINT: {
        "symbol": "SOL",
        "name": "Wrapped SOL",
        "decimals": NATIVE_SOL_DECIMALS,
        "coingecko_id": "solana",
    },
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v": {
        "symbol": "USDC",
        "name": "USD Coin",
        "decimals": 6,
        "coingecko_id": "usd-coin",
        "stablecoin": True,
    },
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB": {
        "symbol": "USDT",
        "name": "Tether USD",
        "decimals": 6,
        "coingecko_id": "tether",
        "stablecoin": True,
    },
    "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R": {
        "symbol": "RAY",
        "name": "Raydium",
        "decimals": 6,
        "coingecko_id": "raydium",
    },
    "orcaEKTdK7LKz57vaAYr9QeNsVEPfiu6QeMU1kektZE": {
        "symbol": "ORCA",
        "name": "Orca",
        "decimals": 6,
        "coingecko_id": "orca",
    },
    "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN": {
        "symbol": "JUP",
        "name": "Jupiter",
        "decimals": 6,
        "coingecko_id": "jupiter-exchange-solana",
    },
    "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263": {
        "symbol": "BONK",
        "name": "Bonk",
        "decimals": 5,
        "coingecko_id": "bonk",
    },
}

# Символ -> CoinGecko id (для сервиса цен, который работает по символам)
SYMBOL_TO_COINGECKO_ID: Dict[str, str] = {
    info["symbol"]: info["coingecko_id"] for info in KNOWN_TOKEN_REGISTRY.values()
}
SYMBOL_TO_COINGECKO_ID.update({
    "WSOL": "solana",
    "WIF": "dogwifcoin",
    "PYTH": "pyth-network",
    "JTO": "jito-governance-token",
})

STABLECOIN_SYMBOLS = {
    info["symbol"] for info in KNOWN_TOKEN_REGISTRY.values() if info.get("stablecoin")
}


def get_token_info(mint: str) -> Optional[Dict[str, Any]]:
    """
    Возвращает информацию об известном токене.

    Args:
        mint: Адрес mint токена

    Returns:
        Словарь с symbol/name/decimals или None, если токен не из реестра
    """
    return KNOWN_TOKEN_REGISTRY.get(mint)


def is_stablecoin(symbol: str) -> bool:
    return symbol.upper() in STABLECOIN_SYMBOLS


def get_coingecko_id(symbol: str) -> Optional[str]:
    return SYMBOL_TO_COINGECKO_ID.get(symbol.upper())
