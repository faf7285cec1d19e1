"""
Приведение записей пяти протоколов к единой AdjustedPoolReserves.

Сырые резервы масштабируются делением на 10^decimals. Метаданные
токенов и оценка TVL - необязательные поля: сбой внешнего сервиса
заменяется значениями по умолчанию и не прерывает обработку.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional

from decoder.models import (
    NOT_APPLICABLE,
    PROTOCOL_DISPLAY_NAMES,
    AdjustedPoolReserves,
    HealthVerdict,
    PoolRecord,
    Protocol,
    ResolvedReserves,
    TokenDisplay,
)
from rpc.helius_das_api import fallback_display

logger = logging.getLogger(__name__)

PUMPFUN_FEE_INFO = "1.0% (Pump.fun standard)"


def scale_amount(raw_amount: int, decimals: int) -> Decimal:
    return Decimal(raw_amount).scaleb(-decimals)


def format_fee(record: PoolRecord) -> str:
    """
    Человекочитаемое описание комиссии пула.

    Args:
        record: Запись пула любого протокола

    Returns:
        Строка вида "0.250%"; нулевая ставка - "Variable" или "Dynamic"
    """
    if record.protocol == Protocol.RAYDIUM_AMM_V4:
        if not record.swap_fee_denominator:
            return "Variable"
        percent = Decimal(record.swap_fee_numerator) / Decimal(record.swap_fee_denominator) * 100
        return f"{percent:.3f}%"
    if record.protocol == Protocol.RAYDIUM_CLMM:
        # fee_rate в десятых долях базисного пункта
        return f"{Decimal(record.fee_rate) / 1000:.2f}%" if record.fee_rate else "Variable"
    if record.protocol == Protocol.ORCA_WHIRLPOOL:
        return f"{Decimal(record.fee_rate) / 10000:.4f}%" if record.fee_rate else "Variable"
    if record.protocol == Protocol.METEORA_DLMM:
        return f"{Decimal(record.base_fee_rate) / 100:.2f}%" if record.base_fee_rate else "Dynamic"
    if record.protocol == Protocol.PUMPFUN_BONDING_CURVE:
        return PUMPFUN_FEE_INFO
    raise ValueError(f"unknown protocol {record.protocol}")


class ReserveNormalizer:
    def __init__(self, metadata_service, pricing_service=None):
        self.metadata_service = metadata_service
        self.pricing_service = pricing_service

    async def _token_display(self, mint: str) -> TokenDisplay:
        try:
            return await self.metadata_service.fetch_symbol_and_name(mint)
        except Exception as e:
            logger.warning(f"Метаданные для {mint} недоступны: {e}. Используем значения по умолчанию")
            return fallback_display()

    async def _estimate_tvl(self, symbol_a: str, amount_a: Decimal, symbol_b: str, amount_b: Decimal) -> Optional[float]:
        if self.pricing_service is None:
            return None
        try:
            tvl = await self.pricing_service.price_in_usd(symbol_a, amount_a, symbol_b, amount_b)
        except Exception as e:
            logger.warning(f"TVL для {symbol_a}/{symbol_b} не рассчитан: {e}")
            return None
        # Нулевая оценка означает отсутствие цены, а не пустой пул
        if tvl is None or tvl <= 0:
            return None
        return tvl

    async def normalize(self, record: PoolRecord, reserves: ResolvedReserves,
                        verdict: HealthVerdict) -> AdjustedPoolReserves:
        display_a, display_b = await asyncio.gather(
            self._token_display(record.token_a_mint),
            self._token_display(record.token_b_mint),
        )
        amount_a = scale_amount(reserves.reserve_a, reserves.decimals_a)
        amount_b = scale_amount(reserves.reserve_b, reserves.decimals_b)
        tvl = await self._estimate_tvl(display_a.symbol, amount_a, display_b.symbol, amount_b)

        lp_mint, lp_supply = NOT_APPLICABLE, NOT_APPLICABLE
        if record.protocol == Protocol.RAYDIUM_AMM_V4:
            lp_mint, lp_supply = record.lp_mint, str(record.lp_supply)

        return AdjustedPoolReserves(
            pool_address=record.address,
            pool_type=PROTOCOL_DISPLAY_NAMES[record.protocol],
            token_a_mint=record.token_a_mint,
            token_b_mint=record.token_b_mint,
            token_a_symbol=display_a.symbol,
            token_b_symbol=display_b.symbol,
            token_a_amount=amount_a,
            token_b_amount=amount_b,
            token_a_decimals=reserves.decimals_a,
            token_b_decimals=reserves.decimals_b,
            fee_info=format_fee(record),
            lp_mint=lp_mint,
            lp_supply=lp_supply,
            pool_status=verdict.status,
            health_issues=list(verdict.issues),
            health_warnings=list(verdict.warnings),
            status_text=verdict.status_text or verdict.status.value,
            tvl_usd=tvl,
        )
