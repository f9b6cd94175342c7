class BoardError(Exception):
    """Базовая ошибка операций над доской"""


class NotFoundError(BoardError, LookupError):
    """Запрошенная запись не существует"""


class InvalidArgumentError(BoardError, ValueError):
    """Некорректные или несогласованные входные данные"""


class ConflictError(BoardError):
    """Транзакция не применена из-за параллельного изменения, можно повторить"""


class StoreUnavailableError(BoardError):
    """Сбой хранилища, повтор не выполняется"""


class InvariantViolationError(StoreUnavailableError):
    """Позиции раздела нарушили инвариант, транзакция отменена"""
