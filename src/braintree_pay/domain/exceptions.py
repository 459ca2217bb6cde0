class PaymentError(Exception):
    """Base exception for payment failures.

    `message` is what the caller should see (the gateway's own text when the
    gateway supplied one); `cause` is the lower-level error that triggered it.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class SessionInvalidError(PaymentError):
    """Raised when an operation is attempted on an ended or foreign session."""

    def __init__(self, operation: str, reason: str = "session is not valid") -> None:
        self.operation = operation
        super().__init__(f"Braintree: {reason} for {operation}")


class UnsupportedCredentialsError(PaymentError):
    """Raised when a credential type has no authorization header mapping."""

    def __init__(self, credentials_type: str) -> None:
        self.credentials_type = credentials_type
        super().__init__(f"Unsupported credentials type: {credentials_type}")


class GatewayRejectedError(PaymentError):
    """Raised when the gateway answered with a structured API error."""

    def __init__(self, message: str, status_code: int | None = None, cause: BaseException | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, cause)


class TransportFailureError(PaymentError):
    """Raised when the call failed without a structured gateway error body."""


class UnsupportedOperationError(PaymentError):
    """Raised for operations this gateway integration does not provide."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Braintree does not support {operation}")


class MalformedResponseError(PaymentError):
    """Raised when a gateway response lacks a field the operation depends on."""


class InvalidAmountError(PaymentError):
    """Raised when a payment amount is not acceptable for the operation."""

    def __init__(self, amount: object, reason: str) -> None:
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}")


class CurrencyMismatchError(PaymentError):
    """Raised when currencies don't match."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")


class TransactionStateError(PaymentError):
    """Raised when a transaction cannot take the requested transition."""

    def __init__(self, transaction_id: str, reason: str) -> None:
        self.transaction_id = transaction_id
        self.reason = reason
        super().__init__(f"Transaction {transaction_id}: {reason}")
