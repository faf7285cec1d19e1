import asyncio

import pytest

from config.token_registry import NATIVE_SOL_MINT
from decoder.models import RawAccount, ResolvedReserves
from decoder.parsers.meteora_dlmm import parse_meteora_dlmm_pool
from decoder.parsers.orca_whirlpool import parse_orca_whirlpool
from decoder.parsers.pumpfun import parse_pumpfun_bonding_curve
from decoder.parsers.raydium_amm import parse_raydium_amm_pool
from decoder.parsers.raydium_clmm import parse_raydium_clmm_pool
from processing.errors import CollaboratorUnavailableError
from services.reserve_resolver import ReserveResolver
from account_builders import (
    MINT_A,
    MINT_B,
    POOL_ADDRESS,
    VAULT_A,
    VAULT_B,
    build_meteora_dlmm,
    build_orca_whirlpool,
    build_pumpfun,
    build_raydium_amm_v4,
    build_raydium_clmm,
)
from fakes import FakeLedger


def make_ledger(**kwargs):
    return FakeLedger(
        balances={VAULT_A: 1_500_000_000, VAULT_B: 250_000_000},
        decimals={MINT_A: 9, MINT_B: 6},
        **kwargs,
    )


VAULT_POOLS = pytest.mark.parametrize("parser, builder", [
    (parse_raydium_amm_pool, build_raydium_amm_v4),
    (parse_raydium_clmm_pool, build_raydium_clmm),
    (parse_orca_whirlpool, build_orca_whirlpool),
    (parse_meteora_dlmm_pool, build_meteora_dlmm),
], ids=["amm_v4", "clmm", "whirlpool", "dlmm"])


def decode(parser, builder):
    return parser(RawAccount(address=POOL_ADDRESS, data=builder(), owner=""))


@VAULT_POOLS
def test_vault_pool_issues_four_concurrent_lookups(parser, builder):
    ledger = make_ledger()
    reserves = asyncio.run(ReserveResolver(ledger).resolve(decode(parser, builder)))

    assert reserves == ResolvedReserves(reserve_a=1_500_000_000, reserve_b=250_000_000, decimals_a=9, decimals_b=6)
    assert sorted(ledger.calls) == sorted([
        ("balance", VAULT_A), ("balance", VAULT_B), ("decimals", MINT_A), ("decimals", MINT_B),
    ])
    assert ledger.max_in_flight == 4


@VAULT_POOLS
@pytest.mark.parametrize("failing, label", [
    (VAULT_A, "vault A"),
    (VAULT_B, "vault B"),
    (MINT_A, "mint A"),
    (MINT_B, "mint B"),
])
def test_any_single_failure_fails_whole_resolution(parser, builder, failing, label):
    ledger = make_ledger(failing=[failing])
    with pytest.raises(CollaboratorUnavailableError) as exc_info:
        asyncio.run(ReserveResolver(ledger).resolve(decode(parser, builder)))

    error = exc_info.value
    assert error.stage == "resolve"
    assert error.account == POOL_ADDRESS
    assert label in error.message
    assert failing in error.message
    # все четыре запроса были отправлены
    assert len(ledger.calls) == 4


def test_bonding_curve_needs_no_lookups():
    ledger = make_ledger()
    curve = parse_pumpfun_bonding_curve(RawAccount(
        address=POOL_ADDRESS, data=build_pumpfun(real_sol=5_000_000_000, real_token=42), owner=""
    ))
    reserves = asyncio.run(ReserveResolver(ledger).resolve(curve))

    assert ledger.calls == []
    assert curve.token_a_mint == NATIVE_SOL_MINT
    assert reserves == ResolvedReserves(reserve_a=5_000_000_000, reserve_b=42, decimals_a=9, decimals_b=6)
