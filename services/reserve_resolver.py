"""
Получение сырых резервов пула.

Vault-пулы: четыре независимых запроса (баланс vault A/B, decimals mint
A/B) выполняются конкурентно, корутина ждет завершения всех четырех.
Любая ошибка проваливает весь расчет. Bonding curve: резервы уже лежат в
записи, decimals фиксированы протоколом.
"""

import asyncio
import logging

from config.token_registry import NATIVE_SOL_DECIMALS, PUMPFUN_TOKEN_DECIMALS
from decoder.models import PoolRecord, Protocol, PumpfunBondingCurve, ResolvedReserves, VAULT_BASED_PROTOCOLS
from processing.errors import CollaboratorUnavailableError, UnsupportedProtocolError

logger = logging.getLogger(__name__)


def bonding_curve_reserves(curve: PumpfunBondingCurve) -> ResolvedReserves:
    return ResolvedReserves(
        reserve_a=curve.real_sol_reserves,
        reserve_b=curve.real_token_reserves,
        decimals_a=NATIVE_SOL_DECIMALS,
        decimals_b=PUMPFUN_TOKEN_DECIMALS,
    )


class ReserveResolver:
    def __init__(self, ledger):
        """
        Args:
            ledger: Объект с корутинами fetch_token_balance(vault) и fetch_decimals(mint)
        """
        self.ledger = ledger

    async def resolve(self, record: PoolRecord) -> ResolvedReserves:
        if record.protocol == Protocol.PUMPFUN_BONDING_CURVE:
            return bonding_curve_reserves(record)
        if record.protocol in VAULT_BASED_PROTOCOLS:
            return await self._resolve_from_vaults(record)
        raise UnsupportedProtocolError(
            f"no reserve strategy for protocol '{record.protocol}'", stage="resolve", account=record.address
        )

    async def _resolve_from_vaults(self, record) -> ResolvedReserves:
        lookups = [
            (f"balance of vault A {record.token_a_vault}", self.ledger.fetch_token_balance(record.token_a_vault)),
            (f"balance of vault B {record.token_b_vault}", self.ledger.fetch_token_balance(record.token_b_vault)),
            (f"decimals of mint A {record.token_a_mint}", self.ledger.fetch_decimals(record.token_a_mint)),
            (f"decimals of mint B {record.token_b_mint}", self.ledger.fetch_decimals(record.token_b_mint)),
        ]
        results = await asyncio.gather(*(coro for _, coro in lookups), return_exceptions=True)

        for (label, _), result in zip(lookups, results):
            if isinstance(result, Exception):
                logger.error(f"Пул {record.address}: запрос '{label}' не выполнен: {result}")
                raise CollaboratorUnavailableError(
                    f"{label} lookup failed: {result}", stage="resolve", account=record.address
                ) from result
            if isinstance(result, BaseException):
                raise result

        balance_a, balance_b, decimals_a, decimals_b = results
        return ResolvedReserves(
            reserve_a=balance_a,
            reserve_b=balance_b,
            decimals_a=decimals_a,
            decimals_b=decimals_b,
        )
