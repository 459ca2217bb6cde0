"""Application layer - pay system orchestration and sessions."""

from braintree_pay.application.pay_system import BraintreeSystem
from braintree_pay.application.ports import (
    AccountResolver,
    PayMetrics,
    TransactionIdGenerator,
    UlidTransactionIdGenerator,
)
from braintree_pay.application.session import PaySession


__all__ = [
    "AccountResolver",
    "BraintreeSystem",
    "PayMetrics",
    "PaySession",
    "TransactionIdGenerator",
    "UlidTransactionIdGenerator",
]
