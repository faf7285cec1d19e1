import logging
import os
import json
import sys

import config.config as app_config

STAGE_EVENTS_LOGGER = "pipeline.stages"


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_object = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger_name": record.name,
        }
        # Структурированные поля события этапа
        event = getattr(record, "stage_event", None)
        if event is not None:
            log_object["event"] = event
        if record.exc_info:
            log_object['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(log_object, ensure_ascii=False)


def setup_console_run_logging(log_dir: str = None):
    log_dir = log_dir or app_config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(log_dir, 'console_run.log'), mode='w', encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('[%(asctime)s] [%(levelname)s] %(message)s')
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers = []
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)


def setup_stage_event_logging(log_dir: str = None):
    """
    Направляет события этапов конвейера (fetch/detect/decode/resolve/assess/normalize)
    в отдельный JSON-файл, без дублирования в корневой логгер.
    """
    log_dir = log_dir or app_config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    stage_handler = logging.FileHandler(os.path.join(log_dir, 'pipeline_stages.log'), mode='a', encoding='utf-8')
    stage_handler.setLevel(logging.INFO)
    stage_handler.setFormatter(JsonFormatter())
    stage_logger = logging.getLogger(STAGE_EVENTS_LOGGER)
    stage_logger.setLevel(logging.INFO)
    stage_logger.addHandler(stage_handler)
    stage_logger.propagate = False
    return stage_handler
