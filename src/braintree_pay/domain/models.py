from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Protocol, runtime_checkable


CORRELATION_TOKEN_SEPARATOR = ":"


class TransactionKind(Enum):
    CHARGE = "CHARGE"
    CAPTURE = "CAPTURE"
    REFUND = "REFUND"
    TRANSFER = "TRANSFER"


@dataclass(frozen=True)
class Amount:
    currency: str
    value: Decimal

    def __post_init__(self) -> None:
        if len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError("Currency must be ISO 4217 code (3 characters)")
        if isinstance(self.value, bool | float):
            raise TypeError(f"Amount value must be Decimal, int or str, not {type(self.value).__name__}")
        if not isinstance(self.value, Decimal):
            try:
                object.__setattr__(self, "value", Decimal(self.value))
            except InvalidOperation as e:
                raise ValueError(f"Amount value is not a decimal number: {self.value!r}") from e
        if not self.value.is_finite():
            raise ValueError("Amount value must be finite")
        object.__setattr__(self, "currency", self.currency.upper())

    def __str__(self) -> str:
        return f"{self.value} {self.currency}"


@dataclass(frozen=True)
class Account:
    identity: str
    is_web_terminal_token: bool = False


@dataclass(frozen=True)
class BillingAddress:
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country: str | None = None
    company: str | None = None


@dataclass(frozen=True)
class ActualAccountData:
    """Billing details resolved for an Account at call time."""

    account: Account
    token: str = field(repr=False)
    first_name: str | None = None
    last_name: str | None = None
    billing_address: BillingAddress = field(default_factory=BillingAddress)


@dataclass(frozen=True)
class TransactionContext:
    reference: str | None = None


@runtime_checkable
class OrderTransactionContext(Protocol):
    """Context capability for calls made on behalf of an order."""

    @property
    def order_id(self) -> str: ...

    @property
    def customer_id(self) -> str: ...

    @property
    def is_new_customer(self) -> bool: ...


@dataclass(frozen=True)
class OrderContext(TransactionContext):
    order_id: str = ""
    customer_id: str = ""
    is_new_customer: bool = False


@dataclass(frozen=True)
class Transaction:
    id: str
    system_name: str
    processor_token: str
    from_account: Account
    to_account: Account
    amount: Amount
    timestamp: datetime
    kind: TransactionKind
    description: str | None = None
    captured: bool = False

    @classmethod
    def charge(
        cls,
        transaction_id: str,
        system_name: str,
        processor_token: str,
        from_account: Account,
        to_account: Account,
        amount: Amount,
        timestamp: datetime,
        description: str | None = None,
        captured: bool = False,
    ) -> "Transaction":
        return cls(
            id=transaction_id,
            system_name=system_name,
            processor_token=processor_token,
            from_account=from_account,
            to_account=to_account,
            amount=amount,
            timestamp=timestamp,
            kind=TransactionKind.CHARGE,
            description=description,
            captured=captured,
        )

    def settled(self, amount: Amount, timestamp: datetime, description: str | None = None) -> "Transaction":
        """Return the captured counterpart of this charge."""
        return replace(
            self,
            amount=amount,
            timestamp=timestamp,
            kind=TransactionKind.CAPTURE,
            description=description if description is not None else self.description,
            captured=True,
        )

    @property
    def is_capturable(self) -> bool:
        return self.kind is TransactionKind.CHARGE and not self.captured


def correlation_token(customer_id: str | None, payment_method_token: str | None, gateway_transaction_id: str) -> str:
    return CORRELATION_TOKEN_SEPARATOR.join((customer_id or "", payment_method_token or "", gateway_transaction_id))


def gateway_transaction_id(processor_token: str) -> str | None:
    """Third segment of a correlation token, or None when it is not one."""
    parts = processor_token.split(CORRELATION_TOKEN_SEPARATOR)
    if len(parts) < 3 or not parts[2]:
        return None
    return parts[2]
