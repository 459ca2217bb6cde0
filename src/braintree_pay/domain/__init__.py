"""Domain layer - payment values, transaction records and errors."""

from braintree_pay.domain.credentials import (
    BasicCredentials,
    BearerCredentials,
    ConnectionParameters,
    Credentials,
)
from braintree_pay.domain.exceptions import (
    CurrencyMismatchError,
    GatewayRejectedError,
    InvalidAmountError,
    MalformedResponseError,
    PaymentError,
    SessionInvalidError,
    TransactionStateError,
    TransportFailureError,
    UnsupportedCredentialsError,
    UnsupportedOperationError,
)
from braintree_pay.domain.models import (
    Account,
    ActualAccountData,
    Amount,
    BillingAddress,
    OrderContext,
    OrderTransactionContext,
    Transaction,
    TransactionContext,
    TransactionKind,
)


__all__ = [
    "Account",
    "ActualAccountData",
    "Amount",
    "BasicCredentials",
    "BearerCredentials",
    "BillingAddress",
    "ConnectionParameters",
    "Credentials",
    "CurrencyMismatchError",
    "GatewayRejectedError",
    "InvalidAmountError",
    "MalformedResponseError",
    "OrderContext",
    "OrderTransactionContext",
    "PaymentError",
    "SessionInvalidError",
    "Transaction",
    "TransactionContext",
    "TransactionKind",
    "TransactionStateError",
    "TransportFailureError",
    "UnsupportedCredentialsError",
    "UnsupportedOperationError",
]
