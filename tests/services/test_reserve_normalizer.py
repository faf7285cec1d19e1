import asyncio
from decimal import Decimal

from config.token_registry import NATIVE_SOL_MINT
from decoder.models import NOT_APPLICABLE, AdjustedPoolReserves, HealthStatus, HealthVerdict, RawAccount, ResolvedReserves
from decoder.parsers.pumpfun import parse_pumpfun_bonding_curve
from decoder.parsers.raydium_amm import parse_raydium_amm_pool
from decoder.parsers.raydium_clmm import parse_raydium_clmm_pool
from processing.errors import PriceUnavailableError
from services.reserve_normalizer import ReserveNormalizer
from services.reserve_resolver import bonding_curve_reserves
from account_builders import (
    LP_MINT,
    MINT_A,
    MINT_B,
    POOL_ADDRESS,
    build_pumpfun,
    build_raydium_amm_v4,
    build_raydium_clmm,
)
from fakes import FakeMetadata, FakePricing

HEALTHY = HealthVerdict(status=HealthStatus.HEALTHY, issues=[])
RESERVES = ResolvedReserves(reserve_a=1_500_000_000, reserve_b=250_000_000, decimals_a=9, decimals_b=6)


def decode(parser, data):
    return parser(RawAccount(address=POOL_ADDRESS, data=data, owner=""))


def test_vault_pool_is_scaled_and_priced():
    metadata = FakeMetadata({MINT_A: "SOL", MINT_B: "USDC"})
    pricing = FakePricing(tvl=475.0)
    pool = decode(parse_raydium_clmm_pool, build_raydium_clmm(fee_rate=2500))

    result = asyncio.run(ReserveNormalizer(metadata, pricing).normalize(pool, RESERVES, HEALTHY))

    assert result.pool_type == "Raydium CLMM"
    assert result.token_a_amount == Decimal("1.5")
    assert result.token_b_amount == Decimal("250")
    assert (result.token_a_symbol, result.token_b_symbol) == ("SOL", "USDC")
    assert result.fee_info == "2.50%"
    assert result.lp_mint == NOT_APPLICABLE
    assert result.lp_supply == NOT_APPLICABLE
    assert result.pool_status == HealthStatus.HEALTHY
    assert result.tvl_usd == 475.0
    assert pricing.calls == [("SOL", Decimal("1.5"), "USDC", Decimal("250"))]


def test_constant_product_pool_carries_lp_fields():
    pool = decode(parse_raydium_amm_pool, build_raydium_amm_v4(lp_reserve=123456))
    result = asyncio.run(ReserveNormalizer(FakeMetadata()).normalize(pool, RESERVES, HEALTHY))
    assert result.lp_mint == LP_MINT
    assert result.lp_supply == "123456"
    assert result.pool_type == "Raydium AMM V4"
    assert result.tvl_usd is None


def test_pricing_failure_omits_value():
    pricing = FakePricing(error=PriceUnavailableError("no price"))
    pool = decode(parse_raydium_clmm_pool, build_raydium_clmm())
    result = asyncio.run(ReserveNormalizer(FakeMetadata(), pricing).normalize(pool, RESERVES, HEALTHY))
    assert result.tvl_usd is None
    assert result.token_a_amount == Decimal("1.5")


def test_metadata_failure_falls_back_to_defaults():
    metadata = FakeMetadata({MINT_B: "USDC"}, failing=[MINT_A])
    pool = decode(parse_raydium_clmm_pool, build_raydium_clmm())
    result = asyncio.run(ReserveNormalizer(metadata).normalize(pool, RESERVES, HEALTHY))
    assert result.token_a_symbol == "TOKEN"
    assert result.token_b_symbol == "USDC"
    assert sorted(metadata.calls) == sorted([MINT_A, MINT_B])


def test_bonding_curve_real_reserve_scaled_to_human_units():
    curve = decode(parse_pumpfun_bonding_curve, build_pumpfun(real_sol=5_000_000_000, real_token=1_000_000))
    verdict = HealthVerdict(status=HealthStatus.HEALTHY, issues=[])
    result = asyncio.run(ReserveNormalizer(FakeMetadata({NATIVE_SOL_MINT: "SOL"})).normalize(
        curve, bonding_curve_reserves(curve), verdict
    ))
    assert result.token_a_mint == NATIVE_SOL_MINT
    assert result.token_a_amount == Decimal("5.0")
    assert result.token_b_amount == Decimal("1")
    assert result.fee_info == "1.0% (Pump.fun standard)"
    assert result.lp_mint == NOT_APPLICABLE


def test_unified_record_has_same_shape_for_all_protocols():
    amm = decode(parse_raydium_amm_pool, build_raydium_amm_v4())
    curve = decode(parse_pumpfun_bonding_curve, build_pumpfun())
    normalizer = ReserveNormalizer(FakeMetadata())
    a = asyncio.run(normalizer.normalize(amm, RESERVES, HEALTHY))
    b = asyncio.run(normalizer.normalize(curve, bonding_curve_reserves(curve), HEALTHY))
    assert isinstance(a, AdjustedPoolReserves) and isinstance(b, AdjustedPoolReserves)
    assert set(a.model_dump()) == set(b.model_dump())
    assert "base_mint" not in a.model_dump()


def test_amm_warnings_and_status_text_are_carried():
    verdict = HealthVerdict(status=HealthStatus.HEALTHY, warnings=["High swap fee: 6.00% (standard is 0.25%)"],
                            status_text="Active")
    pool = decode(parse_raydium_amm_pool, build_raydium_amm_v4())
    result = asyncio.run(ReserveNormalizer(FakeMetadata()).normalize(pool, RESERVES, verdict))
    assert result.health_warnings == ["High swap fee: 6.00% (standard is 0.25%)"]
    assert result.status_text == "Active"
    assert result.pool_status == HealthStatus.HEALTHY


def test_status_text_defaults_to_health_status():
    pool = decode(parse_raydium_clmm_pool, build_raydium_clmm())
    result = asyncio.run(ReserveNormalizer(FakeMetadata()).normalize(pool, RESERVES, HEALTHY))
    assert result.status_text == "Healthy"
    assert result.health_warnings == []


def test_zero_value_estimate_is_omitted():
    pool = decode(parse_raydium_clmm_pool, build_raydium_clmm())
    result = asyncio.run(ReserveNormalizer(FakeMetadata(), FakePricing(tvl=0.0)).normalize(pool, RESERVES, HEALTHY))
    assert result.tvl_usd is None
