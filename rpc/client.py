import threading
import time
import logging
import requests
from typing import Optional, Dict, Any
import random
import config.config as app_config

# --- RateLimiter ---
class RateLimiter:
    """
    Простой и надежный ограничитель скорости, основанный на минимальном интервале между запросами.
    """
    def __init__(self, rate_per_sec: int):
        self.rate_per_sec = max(1, rate_per_sec)
        self.period = 1.0 / self.rate_per_sec
        self.lock = threading.Lock()
        self.last_request_time = 0
        self.logger = logging.getLogger("rpc.ratelimiter")

    def acquire(self):
        with self.lock:
            now = time.monotonic()
            time_since_last = now - self.last_request_time
            if time_since_last < self.period:
                sleep_time = self.period - time_since_last
                self.logger.debug(f"Rate limit: sleeping for {sleep_time:.3f} seconds to maintain {self.rate_per_sec} req/s.")
                time.sleep(sleep_time)
            self.last_request_time = time.monotonic()

# --- RPCClient with retry and key rotation ---
class RPCClient:
    PROVIDER_NAME = 'helius'

    # Retry configuration
    MAX_RETRIES = 5
    BASE_DELAY = 1.0  # секунд
    MAX_DELAY = 30.0  # секунд
    EXPONENTIAL_BASE = 2

    def __init__(self, base_url: str = None, api_keys=None, rate_per_sec: int = None, timeout: float = None):
        self.base_url = base_url or app_config.SOLANA_RPC_URL
        keys = api_keys if api_keys is not None else app_config.HELIUS_API_KEYS
        self.api_keys = [k for k in keys if k]
        self.key_index = 0
        self.key_lock = threading.Lock()
        self.rate_limiter = RateLimiter(rate_per_sec=rate_per_sec or app_config.RPC_REQUESTS_PER_SECOND)
        self.timeout = timeout or app_config.RPC_TIMEOUT_SECONDS
        self.logger = logging.getLogger("rpc.client.helius")
        if not self.api_keys:
            self.logger.critical("Ключи Helius API не найдены в конфигурации! Запросы к RPC выполняться не будут.")

    def _exponential_backoff_delay(self, attempt: int) -> float:
        """Вычисляет задержку с exponential backoff и jitter."""
        delay = min(self.BASE_DELAY * (self.EXPONENTIAL_BASE ** attempt), self.MAX_DELAY)
        # Добавляем jitter (±20%) для избежания thundering herd
        jitter = delay * 0.2 * (random.random() - 0.5)
        return delay + jitter

    def _is_retryable_error(self, error: Exception) -> bool:
        """Определяет, стоит ли повторить запрос при данной ошибке."""
        if isinstance(error, (requests.exceptions.ConnectionError,
                              requests.exceptions.Timeout,
                              requests.exceptions.ChunkedEncodingError)):
            return True
        if isinstance(error, requests.exceptions.HTTPError):
            if error.response is not None:
                # Retry только на временные ошибки сервера
                return error.response.status_code in [500, 502, 503, 504, 520, 521, 522, 524]
            return True
        return isinstance(error, requests.exceptions.RequestException)

    def _make_request(self, payload: dict) -> Optional[Any]:
        if not self.api_keys:
            self.logger.error("Нет доступных API ключей для выполнения запроса")
            return None

        method_name = payload.get('method', 'unknown')
        key_count = len(self.api_keys)
        with self.key_lock:
            start = self.key_index

        # Обходим ключи по локальному индексу: общий key_index только запоминает рабочий ключ
        for offset in range(key_count):
            key_pos = (start + offset) % key_count
            api_key = self.api_keys[key_pos]

            for retry_attempt in range(self.MAX_RETRIES):
                self.rate_limiter.acquire()
                url = f"{self.base_url}?api-key={api_key}"

                try:
                    resp = requests.post(url, json=payload, timeout=self.timeout)

                    # 429 - переключаемся на следующий ключ
                    if resp.status_code == 429:
                        self.logger.warning(f"429 Rate limit для ключа {key_pos+1}/{key_count} при выполнении {method_name}, переключаемся на следующий ключ...")
                        break

                    resp.raise_for_status()
                    json_resp = resp.json()

                    if "error" in json_resp:
                        error_code = json_resp.get('error', {}).get('code', 'unknown')
                        error_message = json_resp.get('error', {}).get('message', 'unknown')
                        self.logger.error(f"RPC Error от Helius при выполнении {method_name}: код {error_code}, сообщение: {error_message}")
                        return None

                    with self.key_lock:
                        self.key_index = key_pos
                    if retry_attempt > 0:
                        self.logger.info(f"Запрос {method_name} успешен после {retry_attempt} повторных попыток")
                    return json_resp.get('result')

                except requests.RequestException as e:
                    is_retryable = self._is_retryable_error(e)

                    if retry_attempt < self.MAX_RETRIES - 1 and is_retryable:
                        delay = self._exponential_backoff_delay(retry_attempt)
                        self.logger.warning(
                            f"Попытка {retry_attempt + 1}/{self.MAX_RETRIES} для {method_name} неудачна: {e}. "
                            f"Повтор через {delay:.1f}с..."
                        )
                        time.sleep(delay)
                        continue
                    if is_retryable:
                        self.logger.error(
                            f"Все {self.MAX_RETRIES} попыток для {method_name} с ключом {key_pos+1}/{key_count} исчерпаны. "
                            f"Последняя ошибка: {e}"
                        )
                    else:
                        self.logger.error(f"Неповторяемая ошибка для {method_name}: {e}")
                    break

                except ValueError as e:
                    # Ответ не является JSON
                    self.logger.error(f"Некорректный ответ на {method_name}: {e}")
                    break

        self.logger.error(f"Не удалось выполнить {method_name} ни с одним из {len(self.api_keys)} ключей")
        return None

    def get_account_info(self, address: str) -> Optional[Dict[str, Any]]:
        """
        Запрашивает аккаунт в кодировке base64.

        Returns:
            Результат RPC ({"context": ..., "value": ...}); value == None, если
            аккаунт не существует. None - если провайдер не ответил.
        """
        payload = {
            "jsonrpc": "2.0", "id": 1, "method": "getAccountInfo",
            "params": [address, {"encoding": "base64", "commitment": "confirmed"}]
        }
        return self._make_request(payload)

    def get_asset(self, mint: str) -> Optional[Dict[str, Any]]:
        """DAS getAsset: метаданные токена (символ, имя, decimals)."""
        payload = {"jsonrpc": "2.0", "id": "get-asset", "method": "getAsset", "params": {"id": mint}}
        return self._make_request(payload)
