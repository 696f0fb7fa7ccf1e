class DomainException(Exception):
    pass


class BankServiceError(DomainException):
    pass


class InsufficientFundsError(BankServiceError):
    def __init__(self, required: int, available: int | None = None):
        self.required = required
        self.available = available
        super().__init__(f"Insufficient funds. Required: {required}, available: {available}")


class LogisticsServiceError(DomainException):
    pass


class PurchaseOrderNotFoundError(DomainException):
    pass


class InvalidOrderStateError(DomainException):
    def __init__(self, reference, current_status: str, required_status: str):
        self.current_status = current_status
        self.required_status = required_status
        super().__init__(
            f"Purchase order {reference} is in status '{current_status}', but requires '{required_status}'"
        )


class InvalidDeliveryError(DomainException):
    pass


class ConfigurationError(DomainException):
    pass
