"""
Domain errors raised by the service layer.

Routers let these propagate; ``bookshop.main`` renders them as
``{"detail": message}`` with the status code carried by the class.
"""


class BookshopError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookshopError):
    status_code = 404


class BusinessRuleError(BookshopError):
    status_code = 400


class InsufficientStockError(BusinessRuleError):
    pass


class InvalidTransitionError(BusinessRuleError):
    pass


class UnauthorizedError(BookshopError):
    status_code = 401


class ForbiddenError(BookshopError):
    status_code = 403


class ConflictError(BookshopError):
    status_code = 409
