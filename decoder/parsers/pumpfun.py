"""
Декодер bonding curve Pump.fun.

Пул самодостаточный: резервы - счетчики внутри аккаунта, vault-ов нет.
Сторона A - нативный SOL (не читается из буфера), сторона B - токен.
"""

import logging

from config.token_registry import NATIVE_SOL_MINT
from decoder.layouts import PUMPFUN_BONDING_CURVE_LAYOUT
from decoder.models import PumpfunBondingCurve, RawAccount
from decoder.parsers.base import build_record
from processing.errors import TruncatedDataError

logger = logging.getLogger(__name__)


def parse_pumpfun_bonding_curve(raw: RawAccount) -> PumpfunBondingCurve:
    """
    Разбирает аккаунт bonding curve.

    Короткий аккаунт (меньше минимальной длины) отвергается целиком. Если
    обязательная часть прочитана, а область резервов обрезана, резервы
    обнуляются и complete=False, разбор не падает.

    Args:
        raw: Сырые байты аккаунта

    Returns:
        PumpfunBondingCurve
    """
    fields = PUMPFUN_BONDING_CURVE_LAYOUT.decode_fields(raw.data)
    try:
        reserves = PUMPFUN_BONDING_CURVE_LAYOUT.decode_extended(raw.data)
        degraded = False
    except TruncatedDataError as e:
        logger.warning(f"Bonding curve {raw.address}: область резервов не читается ({e}), резервы обнулены")
        reserves = {}
        degraded = True

    return build_record(
        PumpfunBondingCurve,
        address=raw.address,
        token_a_mint=NATIVE_SOL_MINT,
        token_b_mint=fields["token_mint"],
        virtual_sol_reserves=reserves.get("virtual_sol_reserves", 0),
        virtual_token_reserves=reserves.get("virtual_token_reserves", 0),
        real_sol_reserves=reserves.get("real_sol_reserves", 0),
        real_token_reserves=reserves.get("real_token_reserves", 0),
        token_total_supply=reserves.get("token_total_supply", 0),
        # Только байт 1 означает завершенную кривую
        complete=reserves.get("complete", 0) == 1,
        reserves_degraded=degraded,
    )
