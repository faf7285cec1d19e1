# Файл: processing/pool_processor.py
import asyncio
import logging
import sys
from typing import Optional

import base58

from config.logging_config import setup_console_run_logging, setup_stage_event_logging
from decoder.detector import detect_pool_type
from decoder.models import AdjustedPoolReserves, RawAccount
from decoder.router import decode_pool
from processing.errors import (
    CollaboratorUnavailableError,
    InvalidAddressError,
    PoolResolutionError,
    UnsupportedProtocolError,
)
from processing.stage_events import StageEventSink, StageTracker
from rpc.client import RPCClient
from rpc.helius_das_api import TokenMetadataService
from rpc.ledger_reader import LedgerReader
from services.pool_health import assess_pool_health
from services.price_data_provider import PricingService
from services.reserve_normalizer import ReserveNormalizer
from services.reserve_resolver import ReserveResolver

logger = logging.getLogger("processing.pool")

MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44


def validate_address(address: str) -> str:
    """
    Проверяет, что строка - адрес Solana (base58, 32 байта).

    Returns:
        Адрес без пробельных символов по краям

    Raises:
        InvalidAddressError: если адрес некорректен
    """
    candidate = (address or "").strip()
    if not MIN_ADDRESS_LENGTH <= len(candidate) <= MAX_ADDRESS_LENGTH:
        raise InvalidAddressError(
            f"address must be {MIN_ADDRESS_LENGTH}-{MAX_ADDRESS_LENGTH} characters, got {len(candidate)}",
            stage="fetch", account=candidate or None,
        )
    try:
        decoded = base58.b58decode(candidate)
    except ValueError as e:
        raise InvalidAddressError(f"address is not valid base58: {e}", stage="fetch", account=candidate) from e
    if len(decoded) != 32:
        raise InvalidAddressError(
            f"address decodes to {len(decoded)} bytes, expected 32", stage="fetch", account=candidate
        )
    return candidate


class PoolProcessor:
    """
    Конвейер разбора одного пула: fetch -> detect -> decode -> resolve -> assess -> normalize.

    Каждый вызов resolve_pool владеет своими байтами и записями, общего
    изменяемого состояния между вызовами нет.
    """

    def __init__(self, ledger, metadata_service, pricing_service=None, sink: Optional[StageEventSink] = None):
        self.ledger = ledger
        self.resolver = ReserveResolver(ledger)
        self.normalizer = ReserveNormalizer(metadata_service, pricing_service)
        self.sink = sink

    async def _fetch(self, address: str) -> RawAccount:
        try:
            return await self.ledger.fetch(address)
        except PoolResolutionError:
            raise
        except Exception as e:
            raise CollaboratorUnavailableError(f"ledger reader failed: {e}", account=address) from e

    async def resolve_pool(self, address: str) -> AdjustedPoolReserves:
        tracker = StageTracker(address, self.sink)

        with tracker.stage("fetch"):
            address = validate_address(address)
            tracker.account = address
            raw = await self._fetch(address)

        with tracker.stage("detect"):
            detection = detect_pool_type(raw)
            if not detection.supported:
                raise UnsupportedProtocolError(detection.reason, reason=detection.reason)
            tracker.protocol = detection.protocol.value
            if detection.confidence == "low":
                logger.warning(f"[{address}] {detection.protocol.value} определен с низкой уверенностью: {detection.reason}")

        with tracker.stage("decode"):
            record = decode_pool(detection.protocol, raw)

        with tracker.stage("resolve"):
            reserves = await self.resolver.resolve(record)

        with tracker.stage("assess"):
            verdict = assess_pool_health(record, reserves)

        with tracker.stage("normalize"):
            result = await self.normalizer.normalize(record, reserves, verdict)

        logger.info(f"[{address}] {result.pool_type}: {result.token_a_amount} {result.token_a_symbol} / "
                    f"{result.token_b_amount} {result.token_b_symbol}, статус {result.pool_status.value}")
        return result


def build_default_processor(sink: Optional[StageEventSink] = None) -> PoolProcessor:
    client = RPCClient()
    return PoolProcessor(
        ledger=LedgerReader(client),
        metadata_service=TokenMetadataService(client),
        pricing_service=PricingService(),
        sink=sink,
    )


async def resolve_pool(address: str, processor: Optional[PoolProcessor] = None) -> AdjustedPoolReserves:
    """Единственная публичная точка входа: адрес пула -> AdjustedPoolReserves."""
    processor = processor or build_default_processor()
    return await processor.resolve_pool(address)


if __name__ == "__main__":
    setup_console_run_logging()
    setup_stage_event_logging()
    if len(sys.argv) != 2:
        print("Usage: python -m processing.pool_processor <pool_address>")
        sys.exit(2)
    try:
        reserves = asyncio.run(resolve_pool(sys.argv[1]))
    except PoolResolutionError as e:
        logger.error(f"Не удалось разобрать пул: {e}")
        sys.exit(1)
    print(reserves.model_dump_json(indent=2))
