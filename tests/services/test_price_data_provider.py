from decimal import Decimal
from unittest.mock import MagicMock, patch

import asyncio
import pytest
import requests

from processing.errors import PriceUnavailableError
from services.price_data_provider import PricingService


def make_response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    return response


@pytest.fixture
def pricing():
    return PricingService(api_url="https://prices.test/simple/price", timeout=1)


@patch("requests.get")
def test_stablecoins_priced_without_request(mock_get, pricing):
    prices = pricing.get_token_prices(["usdc", "USDT"])
    assert prices == {"USDC": 1.0, "USDT": 1.0}
    mock_get.assert_not_called()


@patch("requests.get")
def test_sol_usdc_pool_tvl(mock_get, pricing):
    mock_get.return_value = make_response(200, {"solana": {"usd": 150.0}})

    tvl = asyncio.run(pricing.price_in_usd("SOL", Decimal("2"), "USDC", Decimal("300")))
    assert tvl == pytest.approx(600.0)
    assert mock_get.call_args.kwargs["params"] == {"ids": "solana", "vs_currencies": "usd"}


@patch("requests.get")
def test_unknown_symbol_counts_as_zero(mock_get, pricing):
    mock_get.return_value = make_response(200, {"solana": {"usd": 100.0}})
    tvl = pricing.calculate_pool_tvl("SOL", Decimal("1.5"), "TOKEN", Decimal("1000"))
    assert tvl == pytest.approx(150.0)


@patch("services.price_data_provider.time.sleep")
@patch("requests.get")
def test_no_price_for_either_side_raises(mock_get, mock_sleep, pricing):
    mock_get.side_effect = requests.exceptions.ConnectionError("down")
    with pytest.raises(PriceUnavailableError):
        pricing.calculate_pool_tvl("SOL", Decimal("1"), "BONK", Decimal("1"))
    assert mock_get.call_count == 3
