"""
Base exception class for the checkout broker.

Every checkout exception carries the HTTP status it answers with when it
reaches the API unhandled. Routers still map the exceptions they expect
explicitly, since the same exception can mean different things per endpoint
(InvalidOrderStateException is 409 on payment initiation, 404 on a callback).
"""


class CheckoutException(Exception):
    """
    Base exception for all checkout errors.

    Attributes:
        message: Human-readable error message
        details: Optional dict with additional context (order id, gateway status, amounts)
        http_status: Status code used by the application-level handler in server.create_app
    """
    http_status: int = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ', '.join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str}, http_status={self.http_status})"
        return f"{self.__class__.__name__}('{self.message}', http_status={self.http_status})"
