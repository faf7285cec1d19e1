import asyncio
from unittest.mock import MagicMock

from config.token_registry import NATIVE_SOL_MINT
from rpc.helius_das_api import TokenMetadataService
from account_builders import MINT_B


def make_service(asset):
    client = MagicMock()
    client.get_asset.return_value = asset
    return TokenMetadataService(client), client


def test_registry_token_answered_locally():
    service, client = make_service(None)
    display = asyncio.run(service.fetch_symbol_and_name(NATIVE_SOL_MINT))
    assert display.symbol == "SOL"
    assert display.decimals == 9
    client.get_asset.assert_not_called()


def test_symbol_from_das_asset():
    asset = {"content": {"metadata": {"symbol": "WIF", "name": "dogwifhat"}}, "token_info": {"decimals": 6}}
    service, client = make_service(asset)
    display = asyncio.run(service.fetch_symbol_and_name(MINT_B))
    assert (display.symbol, display.name, display.decimals) == ("WIF", "dogwifhat", 6)
    client.get_asset.assert_called_once_with(MINT_B)


def test_fallback_when_das_fails():
    service, _ = make_service(None)
    display = asyncio.run(service.fetch_symbol_and_name(MINT_B))
    assert (display.symbol, display.name, display.decimals) == ("TOKEN", "Unknown Token", 9)


def test_fallback_when_asset_has_no_symbol():
    service, _ = make_service({"content": {"metadata": {"name": ""}}})
    display = asyncio.run(service.fetch_symbol_and_name(MINT_B))
    assert display.symbol == "TOKEN"
