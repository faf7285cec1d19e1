from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from processing.errors import InvalidPoolDataError

RecordT = TypeVar("RecordT", bound=BaseModel)


def build_record(record_cls: Type[RecordT], **fields) -> RecordT:
    """
    Собирает неизменяемую запись пула из декодированных полей.

    Args:
        record_cls: Класс записи конкретного протокола
        **fields: Значения полей в именовании сторон A/B

    Returns:
        Экземпляр record_cls

    Raises:
        InvalidPoolDataError: если поля нарушают инварианты записи
            (например, одинаковые mint у сторон A и B)
    """
    try:
        return record_cls(**fields)
    except ValidationError as e:
        errors = "; ".join(err["msg"] for err in e.errors())
        raise InvalidPoolDataError(
            f"{record_cls.__name__} rejected decoded fields: {errors}",
            stage="decode",
            account=fields.get("address"),
        ) from e
