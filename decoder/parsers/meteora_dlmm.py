"""
Декодер LbPair Meteora DLMM.

Ликвидность распределена по бинам; полная математика bin-массивов не
восстанавливается, резервы берутся из балансов reserve_x/reserve_y.
"""

import logging

from decoder.layouts import METEORA_DLMM_LAYOUT
from decoder.models import MeteoraDlmmPool, RawAccount
from decoder.parsers.base import build_record

logger = logging.getLogger(__name__)


def parse_meteora_dlmm_pool(raw: RawAccount) -> MeteoraDlmmPool:
    fields = METEORA_DLMM_LAYOUT.decode_fields(raw.data)
    pool = build_record(
        MeteoraDlmmPool,
        address=raw.address,
        # token X -> A, token Y -> B
        token_a_mint=fields["token_x_mint"],
        token_b_mint=fields["token_y_mint"],
        token_a_vault=fields["reserve_x"],
        token_b_vault=fields["reserve_y"],
        bin_step=fields["bin_step"],
        pair_type=fields["pair_type"],
        active_bin_id=fields["active_id"],
        base_fee_rate=fields["base_fee_rate"],
        max_fee_rate=fields["max_fee_rate"],
        protocol_fee=fields["protocol_fee"],
    )
    logger.debug(f"Meteora DLMM {raw.address}: bin_step={pool.bin_step} active_bin={pool.active_bin_id}")
    return pool
