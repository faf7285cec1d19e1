"""
Чтение полей фиксированной ширины из сырых данных аккаунта Solana.

Все целые little-endian. u128 собирается из двух u64, адрес
кодируется в base58.
"""

import base58
from borsh_construct import U8, U16, U32, U64, I32

from processing.errors import TruncatedDataError

PUBKEY_LENGTH = 32
DISCRIMINATOR_LENGTH = 8

FIELD_SIZES = {
    "pubkey": PUBKEY_LENGTH,
    "discriminator": DISCRIMINATOR_LENGTH,
    "u8": 1,
    "u16": 2,
    "u32": 4,
    "u64": 8,
    "u128": 16,
    "i32": 4,
}

_INT_CODECS = {
    "u8": U8,
    "u16": U16,
    "u32": U32,
    "u64": U64,
    "i32": I32,
}


def _slice(data: bytes, offset: int, size: int) -> bytes:
    if offset < 0 or offset + size > len(data):
        raise TruncatedDataError(
            f"field at offset {offset} needs {size} bytes, buffer has {len(data)}"
        )
    return bytes(data[offset:offset + size])


def require_length(data: bytes, min_length: int, protocol: str = "") -> None:
    """Проверяет минимальную длину аккаунта до начала разбора."""
    if len(data) < min_length:
        prefix = f"{protocol} " if protocol else ""
        raise TruncatedDataError(
            f"{prefix}account too small: {len(data)} bytes, expected >= {min_length}"
        )


def read_pubkey(data: bytes, offset: int) -> str:
    return base58.b58encode(_slice(data, offset, PUBKEY_LENGTH)).decode()


def read_discriminator(data: bytes, offset: int = 0) -> str:
    return _slice(data, offset, DISCRIMINATOR_LENGTH).hex()


def read_int(data: bytes, offset: int, kind: str) -> int:
    codec = _INT_CODECS[kind]
    return codec.parse(_slice(data, offset, FIELD_SIZES[kind]))


def read_u8(data: bytes, offset: int) -> int:
    return read_int(data, offset, "u8")


def read_u16(data: bytes, offset: int) -> int:
    return read_int(data, offset, "u16")


def read_u32(data: bytes, offset: int) -> int:
    return read_int(data, offset, "u32")


def read_u64(data: bytes, offset: int) -> int:
    return read_int(data, offset, "u64")


def read_i32(data: bytes, offset: int) -> int:
    return read_int(data, offset, "i32")


def read_u128(data: bytes, offset: int) -> int:
    # младшие 8 байт + старшие 8 байт << 64
    _slice(data, offset, FIELD_SIZES["u128"])
    low = read_u64(data, offset)
    high = read_u64(data, offset + 8)
    return (high << 64) | low


def is_zero_bytes(data: bytes, offset: int, size: int = PUBKEY_LENGTH) -> bool:
    return not any(_slice(data, offset, size))


READERS = {
    "pubkey": read_pubkey,
    "discriminator": read_discriminator,
    "u8": read_u8,
    "u16": read_u16,
    "u32": read_u32,
    "u64": read_u64,
    "u128": read_u128,
    "i32": read_i32,
}
