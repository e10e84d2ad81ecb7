"""Exceptions raised by the customer directory, the banking facade and the driver."""


class BankGuardError(Exception):
    """Base class for all recoverable errors."""


class DuplicateCustomerError(BankGuardError):
    def __init__(self, customer_id: int) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer ID {customer_id} already exists")


class DuplicateTransactionIdError(BankGuardError):
    def __init__(self, customer_id: int, transaction_id: int) -> None:
        self.customer_id = customer_id
        self.transaction_id = transaction_id
        super().__init__(
            f"Transaction ID {transaction_id} already exists for customer {customer_id}"
        )


class CustomerNotFoundError(BankGuardError):
    def __init__(self, customer_id: int) -> None:
        self.customer_id = customer_id
        super().__init__(f"Customer ID {customer_id} not found")


class InvalidInputError(BankGuardError):
    """Malformed input at the driver layer (bad number, unknown type, ...)."""
