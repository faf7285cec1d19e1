"""
Декодер аккаунта пула Raydium AMM V4 (constant product).

Резервы лежат во внешних vault-аккаунтах; LP mint и LP supply читаются
прямо из аккаунта пула.
"""

import logging

from decoder.layouts import RAYDIUM_AMM_V4_LAYOUT
from decoder.models import RawAccount, RaydiumAmmPool
from decoder.parsers.base import build_record

logger = logging.getLogger(__name__)


def parse_raydium_amm_pool(raw: RawAccount) -> RaydiumAmmPool:
    fields = RAYDIUM_AMM_V4_LAYOUT.decode_fields(raw.data)
    pool = build_record(
        RaydiumAmmPool,
        address=raw.address,
        # base -> A, quote -> B
        token_a_mint=fields["base_mint"],
        token_b_mint=fields["quote_mint"],
        token_a_vault=fields["base_vault"],
        token_b_vault=fields["quote_vault"],
        status=fields["status"],
        base_decimals=fields["base_decimal"],
        quote_decimals=fields["quote_decimal"],
        swap_fee_numerator=fields["swap_fee_numerator"],
        swap_fee_denominator=fields["swap_fee_denominator"],
        pool_open_time=fields["pool_open_time"],
        lp_mint=fields["lp_mint"],
        lp_supply=fields["lp_reserve"],
        open_orders=fields["open_orders"],
        market_id=fields["market_id"],
    )
    logger.debug(f"Raydium AMM V4 {raw.address}: base={pool.token_a_mint} quote={pool.token_b_mint} "
                 f"status={pool.status}")
    return pool
