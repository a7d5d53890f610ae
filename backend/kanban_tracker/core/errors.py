"""
Доменные ошибки. Сервисы бросают их, обработчик в main.py отдаёт клиенту
{"message": ..., "code": ...} с нужным HTTP-статусом.
"""


class TrackerError(Exception):
    status_code = 400
    code = "Internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# 400: неполный или некорректный запрос
class InvalidRequestError(TrackerError):
    code = "InvalidRequest"


class InvalidQuantityError(InvalidRequestError):
    code = "InvalidQuantity"


class InvalidDateError(InvalidRequestError):
    code = "InvalidDate"


class InvalidRangeError(InvalidRequestError):
    code = "InvalidRange"


# 404
class NotFoundError(TrackerError):
    status_code = 404
    code = "NotFound"


class PartNotFoundError(NotFoundError):
    code = "PartNotFound"


class OrderNotFoundError(NotFoundError):
    code = "OrderNotFound"


# 400: нарушено предусловие машины состояний
class InvalidTransitionError(TrackerError):
    code = "InvalidTransition"


class OutOfSyncError(InvalidTransitionError):
    code = "OutOfSync"


class TerminalStateError(InvalidTransitionError):
    code = "Terminal"


class NoOpError(InvalidTransitionError):
    code = "NoOp"


class InvalidTargetError(InvalidTransitionError):
    code = "InvalidTarget"


class NotInProgressError(InvalidTransitionError):
    code = "NotInProgress"


class WorkflowUndefinedError(InvalidTransitionError):
    """Переход для станции не описан (сборочная линия: queue → progress)."""
    code = "WorkflowUndefined"


# 400: бизнес-правила
class PlanRequiredError(TrackerError):
    code = "PlanRequired"


class InsufficientStockError(TrackerError):
    code = "InsufficientStock"


class OrderLockedError(TrackerError):
    code = "OrderLocked"
