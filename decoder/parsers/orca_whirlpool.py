import logging

from decoder.layouts import ORCA_WHIRLPOOL_LAYOUT
from decoder.models import OrcaWhirlpool, RawAccount
from decoder.parsers.base import build_record

logger = logging.getLogger(__name__)


def parse_orca_whirlpool(raw: RawAccount) -> OrcaWhirlpool:
    fields = ORCA_WHIRLPOOL_LAYOUT.decode_fields(raw.data)
    pool = build_record(
        OrcaWhirlpool,
        address=raw.address,
        token_a_mint=fields["token_mint_a"],
        token_b_mint=fields["token_mint_b"],
        token_a_vault=fields["token_vault_a"],
        token_b_vault=fields["token_vault_b"],
        whirlpools_config=fields["whirlpools_config"],
        tick_spacing=fields["tick_spacing"],
        fee_rate=fields["fee_rate"],
        protocol_fee_rate=fields["protocol_fee_rate"],
        liquidity=fields["liquidity"],
        sqrt_price=fields["sqrt_price"],
        tick_current_index=fields["tick_current_index"],
    )
    logger.debug(f"Orca Whirlpool {raw.address}: tick_spacing={pool.tick_spacing} fee_rate={pool.fee_rate}")
    return pool
