"""
Определение протокола пула по сырым байтам аккаунта.

Приоритет: точное совпадение программы-владельца (high), затем отпечатки
по длине и дискриминатору в фиксированном порядке (первое совпадение
побеждает), иначе unsupported с диагностикой. Функции чистые и ничего не
запрашивают из сети.
"""

import logging
from typing import Callable, List, Optional, Tuple

from decoder.binary_reader import DISCRIMINATOR_LENGTH, READERS, is_zero_bytes, read_discriminator
from decoder.layouts import METEORA_DLMM_LAYOUT, RAYDIUM_CLMM_LAYOUT, AccountLayout
from decoder.models import PoolDetection, Protocol, RawAccount

logger = logging.getLogger(__name__)

PROGRAM_IDS = {
    "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8": Protocol.RAYDIUM_AMM_V4,
    "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK": Protocol.RAYDIUM_CLMM,
    "LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo": Protocol.METEORA_DLMM,
    "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P": Protocol.PUMPFUN_BONDING_CURVE,
    "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc": Protocol.ORCA_WHIRLPOOL,
}

RAYDIUM_AMM_V4_ACCOUNT_SIZE = 752
ORCA_WHIRLPOOL_ACCOUNT_SIZE = 653
PUMPFUN_BONDING_CURVE_DISCRIMINATOR = "f19a6d0411b16dbc"
ORCA_WHIRLPOOL_DISCRIMINATOR = "3f95d10ce1806309"

MIN_FEE_RATE = 1
MAX_FEE_RATE = 10000

CLMM_KEY_FIELDS = ("token_mint_a", "token_mint_b", "token_vault_a", "token_vault_b")
DLMM_KEY_FIELDS = ("token_x_mint", "token_y_mint", "reserve_x", "reserve_y")

# (confidence, reason) или None
Fingerprint = Optional[Tuple[str, str]]


def _leading_discriminator(data: bytes) -> str:
    if len(data) < DISCRIMINATOR_LENGTH:
        return ""
    return read_discriminator(data, 0)


def _has_keys(layout: AccountLayout, names: Tuple[str, ...], data: bytes) -> bool:
    return not any(is_zero_bytes(data, layout.get_field(name).offset) for name in names)


def _read_field(layout: AccountLayout, name: str, data: bytes):
    spec = layout.get_field(name)
    return READERS[spec.kind](data, spec.offset)


def _match_raydium_amm_v4(data: bytes) -> Fingerprint:
    size = len(data)
    if size == RAYDIUM_AMM_V4_ACCOUNT_SIZE:
        return "medium", f"account size {size} matches Raydium AMM V4"
    if RAYDIUM_AMM_V4_ACCOUNT_SIZE - 10 <= size < RAYDIUM_AMM_V4_ACCOUNT_SIZE:
        return "low", f"account size {size} is close to Raydium AMM V4 ({RAYDIUM_AMM_V4_ACCOUNT_SIZE})"
    return None


def _match_raydium_clmm(data: bytes) -> Fingerprint:
    if not 800 <= len(data) <= 1200:
        return None
    if not _has_keys(RAYDIUM_CLMM_LAYOUT, CLMM_KEY_FIELDS, data):
        return None
    fee_rate = _read_field(RAYDIUM_CLMM_LAYOUT, "fee_rate", data)
    if not MIN_FEE_RATE <= fee_rate <= MAX_FEE_RATE:
        return None
    return "medium", f"account size {len(data)} with CLMM mints, vaults and fee rate {fee_rate}"


def _match_meteora_dlmm(data: bytes) -> Fingerprint:
    if not 358 <= len(data) <= 600:
        return None
    if not _has_keys(METEORA_DLMM_LAYOUT, DLMM_KEY_FIELDS, data):
        return None
    base_fee_rate = _read_field(METEORA_DLMM_LAYOUT, "base_fee_rate", data)
    if not MIN_FEE_RATE <= base_fee_rate <= MAX_FEE_RATE:
        return None
    return "medium", f"account size {len(data)} with DLMM mints, reserves and base fee {base_fee_rate}"


def _match_pumpfun(data: bytes) -> Fingerprint:
    if _leading_discriminator(data) == PUMPFUN_BONDING_CURVE_DISCRIMINATOR:
        return "medium", "bonding curve discriminator"
    return None


def _match_orca_whirlpool(data: bytes) -> Fingerprint:
    if len(data) == ORCA_WHIRLPOOL_ACCOUNT_SIZE and _leading_discriminator(data) == ORCA_WHIRLPOOL_DISCRIMINATOR:
        return "medium", "whirlpool account size and discriminator"
    return None


FINGERPRINTS: List[Tuple[Protocol, Callable[[bytes], Fingerprint]]] = [
    (Protocol.RAYDIUM_AMM_V4, _match_raydium_amm_v4),
    (Protocol.RAYDIUM_CLMM, _match_raydium_clmm),
    (Protocol.METEORA_DLMM, _match_meteora_dlmm),
    (Protocol.PUMPFUN_BONDING_CURVE, _match_pumpfun),
    (Protocol.ORCA_WHIRLPOOL, _match_orca_whirlpool),
]


def detect_pool_type(raw: RawAccount) -> PoolDetection:
    """
    Определяет протокол пула.

    Args:
        raw: Сырые байты аккаунта и программа-владелец

    Returns:
        PoolDetection с тегом протокола и уверенностью; для неизвестных
        аккаунтов - Protocol.UNSUPPORTED с причиной
    """
    data = raw.data
    discriminator = _leading_discriminator(data)

    protocol = PROGRAM_IDS.get(raw.owner)
    if protocol is not None:
        return PoolDetection(
            protocol=protocol,
            confidence="high",
            reason=f"owner program {raw.owner}",
            account_size=len(data),
            discriminator=discriminator,
        )

    for protocol, matcher in FINGERPRINTS:
        match = matcher(data)
        if match is not None:
            confidence, reason = match
            logger.debug(f"{raw.address}: {protocol.value} по отпечатку ({confidence}): {reason}")
            return PoolDetection(
                protocol=protocol,
                confidence=confidence,
                reason=reason,
                account_size=len(data),
                discriminator=discriminator,
            )

    return PoolDetection(
        protocol=Protocol.UNSUPPORTED,
        confidence="none",
        reason=(f"unknown pool layout: owner {raw.owner}, {len(data)} bytes, "
                f"discriminator {discriminator or 'n/a'}"),
        account_size=len(data),
        discriminator=discriminator,
    )
