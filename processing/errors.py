from typing import Optional


class PoolResolutionError(Exception):
    """Базовое исключение для ошибок разбора пула. Несёт этап и адрес аккаунта."""

    def __init__(self, message: str, stage: Optional[str] = None, account: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.account = account

    def with_context(self, stage: str, account: str) -> "PoolResolutionError":
        """Дополняет ошибку этапом и адресом, не затирая уже известные значения."""
        if self.stage is None:
            self.stage = stage
        if self.account is None:
            self.account = account
        return self

    def __str__(self):
        stage = self.stage or "unknown"
        if self.account:
            return f"[{stage}] {self.account}: {self.message}"
        return f"[{stage}] {self.message}"


class TruncatedDataError(PoolResolutionError):
    """Буфер короче, чем требует раскладка протокола."""
    pass


class InvalidPoolDataError(PoolResolutionError):
    """Поля прочитаны, но нарушают инварианты записи (например, одинаковые mint)."""
    pass


class UnsupportedProtocolError(PoolResolutionError):
    """Детектор не распознал аккаунт."""

    def __init__(self, message: str, reason: str = "", stage: Optional[str] = None, account: Optional[str] = None):
        super().__init__(message, stage=stage, account=account)
        self.reason = reason


class CollaboratorUnavailableError(PoolResolutionError):
    """Внешний сервис (RPC, метаданные, цены) не ответил."""
    pass


class AccountNotFoundError(CollaboratorUnavailableError):
    pass


class InvalidAddressError(PoolResolutionError):
    pass


class LayoutError(ValueError):
    """Некорректное описание раскладки (пересечения, выход за минимальную длину)."""
    pass


class PriceUnavailableError(CollaboratorUnavailableError):
    """Ни для одной из сторон пула не удалось получить цену в USD."""
    pass
