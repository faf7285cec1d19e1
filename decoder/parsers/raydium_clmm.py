import logging

from decoder.layouts import RAYDIUM_CLMM_LAYOUT
from decoder.models import RawAccount, RaydiumClmmPool
from decoder.parsers.base import build_record

logger = logging.getLogger(__name__)


def parse_raydium_clmm_pool(raw: RawAccount) -> RaydiumClmmPool:
    """Разбирает PoolState Raydium CLMM. Резервы - балансы vault A/B."""
    fields = RAYDIUM_CLMM_LAYOUT.decode_fields(raw.data)
    pool = build_record(
        RaydiumClmmPool,
        address=raw.address,
        token_a_mint=fields["token_mint_a"],
        token_b_mint=fields["token_mint_b"],
        token_a_vault=fields["token_vault_a"],
        token_b_vault=fields["token_vault_b"],
        amm_config=fields["amm_config"],
        fee_rate=fields["fee_rate"],
        protocol_fee_rate=fields["protocol_fee_rate"],
        liquidity=fields["liquidity"],
        sqrt_price_x64=fields["sqrt_price_x64"],
        tick_current=fields["tick_current"],
    )
    logger.debug(f"Raydium CLMM {raw.address}: fee_rate={pool.fee_rate} tick={pool.tick_current} "
                 f"liquidity={pool.liquidity}")
    return pool
