from typing import TYPE_CHECKING, Protocol

from ulid import ULID

from braintree_pay.domain.models import (
    Account,
    ActualAccountData,
    Amount,
    Transaction,
    TransactionContext,
    TransactionKind,
)


if TYPE_CHECKING:
    from braintree_pay.application.session import PaySession


class AccountResolver(Protocol):
    """Resolves an Account reference into billing data for a single call."""

    async def account_to_actual_data(
        self, context: TransactionContext | None, account: Account
    ) -> ActualAccountData: ...


class TransactionIdGenerator(Protocol):
    def generate(
        self, session: "PaySession", context: TransactionContext | None, kind: TransactionKind
    ) -> str: ...


class PayMetrics(Protocol):
    def record_charge(self, amount: Amount) -> None: ...

    def record_charge_error(self, operation: str) -> None: ...

    def record_capture(self, transaction: Transaction, amount: Amount | None) -> None: ...


class UlidTransactionIdGenerator:
    """Default generator: a fresh ULID per transaction."""

    def generate(
        self, session: "PaySession", context: TransactionContext | None, kind: TransactionKind
    ) -> str:
        return str(ULID())
