"""
Структурированные события этапов конвейера разбора пула.

Одно событие на этап (fetch, detect, decode, resolve, assess, normalize)
уходит во внешний sink. Sink по умолчанию пишет событие в JSON-лог
`pipeline.stages`.
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

from pydantic import BaseModel

import config.config as app_config
from config.logging_config import STAGE_EVENTS_LOGGER
from processing.errors import PoolResolutionError

stage_logger = logging.getLogger(STAGE_EVENTS_LOGGER)


class StageEvent(BaseModel):
    stage: str
    account: str
    protocol: Optional[str] = None
    duration_ms: float
    success: bool
    error: Optional[str] = None


StageEventSink = Callable[[StageEvent], None]


def log_stage_event(event: StageEvent) -> None:
    if not app_config.STAGE_EVENTS_LOG_ENABLED:
        return
    level = logging.INFO if event.success else logging.WARNING
    stage_logger.log(level, f"stage {event.stage} {'ok' if event.success else 'failed'}",
                     extra={"stage_event": event.model_dump()})


class StageTracker:
    """Замеряет длительность этапов и отправляет события в sink."""

    def __init__(self, account: str, sink: Optional[StageEventSink] = None):
        self.account = account
        self.sink = sink or log_stage_event
        self.protocol: Optional[str] = None

    @contextmanager
    def stage(self, name: str):
        started = time.perf_counter()
        try:
            yield
        except Exception as e:
            if isinstance(e, PoolResolutionError):
                e.with_context(name, self.account)
            self._emit(name, started, success=False, error=str(e))
            raise
        self._emit(name, started, success=True)

    def _emit(self, name: str, started: float, success: bool, error: Optional[str] = None):
        self.sink(StageEvent(
            stage=name,
            account=self.account,
            protocol=self.protocol,
            duration_ms=round((time.perf_counter() - started) * 1000, 3),
            success=success,
            error=error,
        ))
