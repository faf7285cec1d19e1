from typing import Callable, Dict

from decoder.models import PoolRecord, Protocol, RawAccount
from decoder.parsers.meteora_dlmm import parse_meteora_dlmm_pool
from decoder.parsers.orca_whirlpool import parse_orca_whirlpool
from decoder.parsers.pumpfun import parse_pumpfun_bonding_curve
from decoder.parsers.raydium_amm import parse_raydium_amm_pool
from decoder.parsers.raydium_clmm import parse_raydium_clmm_pool
from processing.errors import UnsupportedProtocolError

DECODERS: Dict[Protocol, Callable[[RawAccount], PoolRecord]] = {
    Protocol.RAYDIUM_AMM_V4: parse_raydium_amm_pool,
    Protocol.RAYDIUM_CLMM: parse_raydium_clmm_pool,
    Protocol.METEORA_DLMM: parse_meteora_dlmm_pool,
    Protocol.PUMPFUN_BONDING_CURVE: parse_pumpfun_bonding_curve,
    Protocol.ORCA_WHIRLPOOL: parse_orca_whirlpool,
}


def decode_pool(protocol: Protocol, raw: RawAccount) -> PoolRecord:
    """Направляет сырые байты в декодер выбранного протокола."""
    decoder = DECODERS.get(protocol)
    if decoder is None:
        raise UnsupportedProtocolError(
            f"no decoder for protocol '{protocol.value}'",
            reason=f"protocol {protocol.value}",
            stage="decode",
            account=raw.address,
        )
    return decoder(raw)
