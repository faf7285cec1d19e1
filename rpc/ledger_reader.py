"""
Асинхронный доступ к аккаунтам блокчейна поверх синхронного RPCClient.

Блокирующие HTTP-вызовы выполняются в executor, поэтому корутина
приостанавливается только на сетевом вводе-выводе.
"""

import asyncio
import base64
import functools
import logging
from typing import Any, Dict, Optional, Tuple

from borsh_construct import CStruct, U8, U32, U64

from decoder.models import RawAccount
from processing.errors import AccountNotFoundError, CollaboratorUnavailableError, TruncatedDataError
from rpc.client import RPCClient

logger = logging.getLogger(__name__)

# SPL Token account: mint(32) + owner(32) + amount(u64) ...
TokenAccountLayout = CStruct(
    "mint" / U8[32],
    "owner" / U8[32],
    "amount" / U64,
)
TOKEN_ACCOUNT_MIN_LENGTH = 72

# SPL Mint: COption<Pubkey> authority + supply(u64) + decimals(u8) ...
MintLayout = CStruct(
    "mint_authority_option" / U32,
    "mint_authority" / U8[32],
    "supply" / U64,
    "decimals" / U8,
)
MINT_MIN_LENGTH = 45


class LedgerReader:
    def __init__(self, client: Optional[RPCClient] = None, executor=None):
        self.client = client or RPCClient()
        # None - default executor цикла событий
        self.executor = executor

    async def _call(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(fn, *args))

    async def _load_account(self, address: str) -> Tuple[bytes, str]:
        result = await self._call(self.client.get_account_info, address)
        if result is None:
            raise CollaboratorUnavailableError(f"RPC provider failed to return account {address}", account=address)
        value: Optional[Dict[str, Any]] = result.get("value")
        if value is None:
            raise AccountNotFoundError(f"account {address} not found", account=address)
        try:
            encoded, encoding = value["data"][0], value["data"][1]
        except (KeyError, IndexError, TypeError) as e:
            raise CollaboratorUnavailableError(
                f"unexpected getAccountInfo payload for {address}", account=address
            ) from e
        if encoding != "base64":
            raise CollaboratorUnavailableError(
                f"unexpected account encoding '{encoding}' for {address}", account=address
            )
        return base64.b64decode(encoded), value.get("owner", "")

    async def fetch(self, address: str) -> RawAccount:
        """
        Загружает сырые байты аккаунта.

        Raises:
            AccountNotFoundError: аккаунт не существует
            CollaboratorUnavailableError: провайдер не ответил
        """
        data, owner = await self._load_account(address)
        logger.debug(f"Аккаунт {address}: {len(data)} байт, владелец {owner}")
        return RawAccount(address=address, data=data, owner=owner)

    async def fetch_token_balance(self, vault: str) -> int:
        """Баланс SPL token-аккаунта (vault) в минимальных единицах."""
        data, _ = await self._load_account(vault)
        if len(data) < TOKEN_ACCOUNT_MIN_LENGTH:
            raise TruncatedDataError(
                f"token account too small: {len(data)} bytes, expected >= {TOKEN_ACCOUNT_MIN_LENGTH}",
                account=vault,
            )
        return TokenAccountLayout.parse(data).amount

    async def fetch_decimals(self, mint: str) -> int:
        data, _ = await self._load_account(mint)
        if len(data) < MINT_MIN_LENGTH:
            raise TruncatedDataError(
                f"mint account too small: {len(data)} bytes, expected >= {MINT_MIN_LENGTH}",
                account=mint,
            )
        return MintLayout.parse(data).decimals
