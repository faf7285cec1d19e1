import pytest

from decoder.detector import detect_pool_type
from decoder.models import Protocol, RawAccount
from account_builders import (
    METEORA_DLMM_PROGRAM,
    ORCA_WHIRLPOOL_PROGRAM,
    POOL_ADDRESS,
    PUMPFUN_PROGRAM,
    RAYDIUM_AMM_V4_PROGRAM,
    RAYDIUM_CLMM_PROGRAM,
    UNKNOWN_PROGRAM,
    build_meteora_dlmm,
    build_orca_whirlpool,
    build_pumpfun,
    build_raydium_amm_v4,
    build_raydium_clmm,
)


def account(data: bytes, owner: str = UNKNOWN_PROGRAM) -> RawAccount:
    return RawAccount(address=POOL_ADDRESS, data=data, owner=owner)


@pytest.mark.parametrize("owner, data, expected", [
    (RAYDIUM_AMM_V4_PROGRAM, build_raydium_amm_v4(), Protocol.RAYDIUM_AMM_V4),
    (RAYDIUM_CLMM_PROGRAM, build_raydium_clmm(), Protocol.RAYDIUM_CLMM),
    (METEORA_DLMM_PROGRAM, build_meteora_dlmm(), Protocol.METEORA_DLMM),
    (PUMPFUN_PROGRAM, build_pumpfun(), Protocol.PUMPFUN_BONDING_CURVE),
    (ORCA_WHIRLPOOL_PROGRAM, build_orca_whirlpool(), Protocol.ORCA_WHIRLPOOL),
])
def test_owner_program_gives_high_confidence(owner, data, expected):
    detection = detect_pool_type(account(data, owner))
    assert detection.protocol == expected
    assert detection.confidence == "high"


def test_owner_program_outranks_discriminator():
    # Буфер с дискриминатором bonding curve, но владелец - Raydium CLMM
    data = build_pumpfun(size=1544)
    detection = detect_pool_type(account(data, RAYDIUM_CLMM_PROGRAM))
    assert detection.protocol == Protocol.RAYDIUM_CLMM
    assert detection.confidence == "high"
    assert detection.discriminator == "f19a6d0411b16dbc"


@pytest.mark.parametrize("data, expected, confidence", [
    (build_raydium_amm_v4(), Protocol.RAYDIUM_AMM_V4, "medium"),
    (build_raydium_amm_v4()[:745], Protocol.RAYDIUM_AMM_V4, "low"),
    (build_raydium_clmm(size=1000), Protocol.RAYDIUM_CLMM, "medium"),
    (build_meteora_dlmm(size=400), Protocol.METEORA_DLMM, "medium"),
    (build_pumpfun(), Protocol.PUMPFUN_BONDING_CURVE, "medium"),
    (build_orca_whirlpool(), Protocol.ORCA_WHIRLPOOL, "medium"),
], ids=["amm_v4", "amm_v4_near", "clmm", "dlmm", "pumpfun", "whirlpool"])
def test_fingerprint_without_known_owner(data, expected, confidence):
    detection = detect_pool_type(account(data))
    assert detection.protocol == expected
    assert detection.confidence == confidence


def test_clmm_fingerprint_requires_sane_fee():
    detection = detect_pool_type(account(build_raydium_clmm(size=1000, fee_rate=0)))
    assert detection.protocol == Protocol.UNSUPPORTED


def test_dlmm_fingerprint_requires_reserve_vaults_and_fee():
    data = bytearray(build_meteora_dlmm(size=400))
    data[326:358] = bytes(32)
    assert detect_pool_type(account(bytes(data))).protocol == Protocol.UNSUPPORTED

    detection = detect_pool_type(account(build_meteora_dlmm(size=400, base_fee_rate=0)))
    assert detection.protocol == Protocol.UNSUPPORTED


def test_unsupported_reason_names_length_and_discriminator():
    data = bytes.fromhex("0102030405060708") + b"\x00" * 92
    detection = detect_pool_type(account(data))
    assert not detection.supported
    assert detection.protocol == Protocol.UNSUPPORTED
    assert "100 bytes" in detection.reason
    assert "0102030405060708" in detection.reason


def test_detection_on_tiny_buffer_does_not_fail():
    detection = detect_pool_type(account(b"\x01\x02"))
    assert detection.protocol == Protocol.UNSUPPORTED
    assert "n/a" in detection.reason
