"""
Проверки состояния пулов, по одной на протокол.

Вердикт: 0 проблем - Healthy, 1 - Warning, 2 и более - Critical.
Для bonding curve единственная проблема "migrated" не понижает статус.
Для AMM V4 дополнительно считаются предупреждения (высокая комиссия,
малая ликвидность), которые в классификацию не входят.
"""

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from decoder.models import (
    HealthStatus,
    HealthVerdict,
    MeteoraDlmmPool,
    OrcaWhirlpool,
    PoolRecord,
    Protocol,
    PumpfunBondingCurve,
    RaydiumAmmPool,
    RaydiumClmmPool,
    ResolvedReserves,
)
from processing.errors import UnsupportedProtocolError

logger = logging.getLogger(__name__)

MIN_FEE_BPS = 1
MAX_FEE_BPS = 10000

# Статусы Raydium AMM V4
AMM_STATUS_UNINITIALIZED = 0
AMM_STATUS_ACTIVE = 1
AMM_STATUS_DISABLED = 6

AMM_STATUS_TEXTS = {
    AMM_STATUS_UNINITIALIZED: "Uninitialized",
    AMM_STATUS_ACTIVE: "Active",
    AMM_STATUS_DISABLED: "Disabled",
}

# Предупреждения не влияют на статус вердикта
HIGH_FEE_PERCENT = Decimal(5)
LOW_LIQUIDITY_THRESHOLD = Decimal("0.01")
WARNING_LOW_LIQUIDITY = "Pool has very low liquidity on one or both sides"

ISSUE_ZERO_RESERVE = "One or both token reserves are zero"
ISSUE_ZERO_LIQUIDITY = "Pool liquidity is zero"
ISSUE_UNINITIALIZED = "Pool is uninitialized"
ISSUE_DISABLED = "Pool is disabled by authority"
ISSUE_ZERO_LP_SUPPLY = "Zero LP supply - pool might be drained or not initialized"
ISSUE_NO_SOL_RESERVE = "No SOL liquidity in bonding curve"
ISSUE_NO_TOKEN_RESERVE = "No token liquidity in bonding curve"
ISSUE_MIGRATED = "Bonding curve complete - token migrated to Raydium"


def unusual_fee_issue(fee_rate: int, unit: str = "basis points") -> str:
    return f"Unusual fee rate: {fee_rate} {unit}".rstrip()


def amm_status_text(status: int) -> str:
    return AMM_STATUS_TEXTS.get(status, f"Status {status}")


def high_fee_warning(fee_percent: Decimal) -> str:
    return f"High swap fee: {fee_percent:.2f}% (standard is 0.25%)"


def classify(issues: List[str]) -> HealthStatus:
    if not issues:
        return HealthStatus.HEALTHY
    if len(issues) == 1:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def _fee_out_of_range(fee_rate) -> bool:
    # Нулевая ставка считается "не задана" и не проверяется
    return bool(fee_rate) and not MIN_FEE_BPS <= fee_rate <= MAX_FEE_BPS


def _amm_fee_percent(pool: RaydiumAmmPool) -> Optional[Decimal]:
    if not pool.swap_fee_denominator:
        return None
    return Decimal(pool.swap_fee_numerator) / Decimal(pool.swap_fee_denominator) * 100


def _amm_warnings(pool: RaydiumAmmPool, reserves: ResolvedReserves) -> List[str]:
    warnings = []
    fee_percent = _amm_fee_percent(pool)
    if fee_percent is not None and fee_percent > HIGH_FEE_PERCENT:
        warnings.append(high_fee_warning(fee_percent))
    amount_a = Decimal(reserves.reserve_a).scaleb(-reserves.decimals_a)
    amount_b = Decimal(reserves.reserve_b).scaleb(-reserves.decimals_b)
    if amount_a < LOW_LIQUIDITY_THRESHOLD or amount_b < LOW_LIQUIDITY_THRESHOLD:
        warnings.append(WARNING_LOW_LIQUIDITY)
    return warnings


def _reserve_issues(reserves: ResolvedReserves) -> List[str]:
    if reserves.reserve_a == 0 or reserves.reserve_b == 0:
        return [ISSUE_ZERO_RESERVE]
    return []


def assess_raydium_amm(pool: RaydiumAmmPool, reserves: ResolvedReserves) -> HealthVerdict:
    issues = []
    if pool.status == AMM_STATUS_UNINITIALIZED:
        issues.append(ISSUE_UNINITIALIZED)
    elif pool.status == AMM_STATUS_DISABLED:
        issues.append(ISSUE_DISABLED)
    issues.extend(_reserve_issues(reserves))
    if pool.lp_supply == 0:
        issues.append(ISSUE_ZERO_LP_SUPPLY)
    if _fee_out_of_range(pool.fee_bps):
        issues.append(unusual_fee_issue(pool.fee_bps))
    return HealthVerdict(
        status=classify(issues),
        issues=issues,
        warnings=_amm_warnings(pool, reserves),
        status_text=amm_status_text(pool.status),
    )


def assess_raydium_clmm(pool: RaydiumClmmPool, reserves: ResolvedReserves) -> HealthVerdict:
    issues = _reserve_issues(reserves)
    if pool.liquidity == 0:
        issues.append(ISSUE_ZERO_LIQUIDITY)
    if _fee_out_of_range(pool.fee_rate):
        issues.append(unusual_fee_issue(pool.fee_rate))
    return HealthVerdict(status=classify(issues), issues=issues)


def assess_orca_whirlpool(pool: OrcaWhirlpool, reserves: ResolvedReserves) -> HealthVerdict:
    issues = _reserve_issues(reserves)
    if pool.liquidity == 0:
        issues.append(ISSUE_ZERO_LIQUIDITY)
    if _fee_out_of_range(pool.fee_rate):
        issues.append(unusual_fee_issue(pool.fee_rate, unit=""))
    return HealthVerdict(status=classify(issues), issues=issues)


def assess_meteora_dlmm(pool: MeteoraDlmmPool, reserves: ResolvedReserves) -> HealthVerdict:
    issues = _reserve_issues(reserves)
    if _fee_out_of_range(pool.base_fee_rate):
        issues.append(unusual_fee_issue(pool.base_fee_rate))
    return HealthVerdict(status=classify(issues), issues=issues)


def assess_pumpfun(curve: PumpfunBondingCurve, reserves: ResolvedReserves) -> HealthVerdict:
    issues = []
    if curve.complete:
        issues.append(ISSUE_MIGRATED)
    if reserves.reserve_a == 0:
        issues.append(ISSUE_NO_SOL_RESERVE)
    if reserves.reserve_b == 0:
        issues.append(ISSUE_NO_TOKEN_RESERVE)

    if issues == [ISSUE_MIGRATED]:
        # Миграция сама по себе - штатное завершение кривой
        return HealthVerdict(status=HealthStatus.HEALTHY, issues=issues)
    return HealthVerdict(status=classify(issues), issues=issues)


ASSESSORS: Dict[Protocol, Callable[..., HealthVerdict]] = {
    Protocol.RAYDIUM_AMM_V4: assess_raydium_amm,
    Protocol.RAYDIUM_CLMM: assess_raydium_clmm,
    Protocol.ORCA_WHIRLPOOL: assess_orca_whirlpool,
    Protocol.METEORA_DLMM: assess_meteora_dlmm,
    Protocol.PUMPFUN_BONDING_CURVE: assess_pumpfun,
}


def assess_pool_health(record: PoolRecord, reserves: ResolvedReserves) -> HealthVerdict:
    assessor = ASSESSORS.get(record.protocol)
    if assessor is None:
        raise UnsupportedProtocolError(
            f"no health rules for protocol '{record.protocol}'", stage="assess", account=record.address
        )
    verdict = assessor(record, reserves)
    if verdict.issues:
        logger.info(f"Пул {record.address}: {verdict.status.value}, проблемы: {'; '.join(verdict.issues)}")
    if verdict.warnings:
        logger.info(f"Пул {record.address}: предупреждения: {'; '.join(verdict.warnings)}")
    return verdict
