"""Shared pytest fixtures for Braintree pay system tests."""

import threading
from collections.abc import Iterator
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest

from braintree_pay.application.pay_system import BraintreeSystem
from braintree_pay.application.session import PaySession
from braintree_pay.domain.credentials import BasicCredentials, BearerCredentials, ConnectionParameters
from braintree_pay.domain.models import (
    Account,
    ActualAccountData,
    Amount,
    BillingAddress,
    Transaction,
    TransactionContext,
    TransactionKind,
)
from braintree_pay.infrastructure.gateway_client import GatewayClient, GatewayFailure, GatewaySuccess
from braintree_pay.infrastructure.gateway_schema import encode_body


API_URI = "https://api.test.braintreegateway.com"
MERCHANT_ID = "merchant-001"


class FakeAccountResolver:
    """AccountResolver returning preconfigured billing data."""

    def __init__(self, data: dict[str, ActualAccountData]) -> None:
        self._data = data
        self.calls: list[tuple[TransactionContext | None, Account]] = []

    async def account_to_actual_data(
        self, context: TransactionContext | None, account: Account
    ) -> ActualAccountData:
        self.calls.append((context, account))
        return self._data[account.identity]


class RecordingPayMetrics:
    """PayMetrics fake with lock-protected counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.charges = 0
        self.charge_errors: list[str] = []
        self.captures = 0
        self.charged_amounts: list[Amount] = []
        self.captured_amounts: list[Amount] = []

    def record_charge(self, amount: Amount) -> None:
        with self._lock:
            self.charges += 1
            self.charged_amounts.append(amount)

    def record_charge_error(self, operation: str) -> None:
        with self._lock:
            self.charge_errors.append(operation)

    def record_capture(self, transaction: Transaction, amount: Amount | None) -> None:
        with self._lock:
            self.captures += 1
            self.captured_amounts.append(amount or transaction.amount)


class SequentialIdGenerator:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next = 0
        self.calls: list[TransactionKind] = []

    def generate(self, session: PaySession, context: TransactionContext | None, kind: TransactionKind) -> str:
        with self._lock:
            self._next += 1
            self.calls.append(kind)
            return f"tx-{self._next:04d}"


@pytest.fixture
def basic_credentials() -> BasicCredentials:
    return BasicCredentials(public_key="public-key", private_key="private-key")


@pytest.fixture
def bearer_credentials() -> BearerCredentials:
    return BearerCredentials(access_token="access-token-xyz")


@pytest.fixture
def connection_params(basic_credentials: BasicCredentials) -> ConnectionParameters:
    return ConnectionParameters(
        merchant_id=MERCHANT_ID,
        credentials=basic_credentials,
        api_uri=API_URI,
        user_name="merchant-user",
    )


@pytest.fixture
def payer_account() -> Account:
    return Account(identity="payer-card-001")


@pytest.fixture
def web_payer_account() -> Account:
    return Account(identity="payer-nonce-001", is_web_terminal_token=True)


@pytest.fixture
def payee_account() -> Account:
    return Account(identity="merchant-account-001")


@pytest.fixture
def account_data(payer_account: Account, web_payer_account: Account) -> dict[str, ActualAccountData]:
    address = BillingAddress(
        address1="1 Main St",
        address2="Suite 5",
        city="Springfield",
        region="IL",
        postal_code="62701",
        country="USA",
        company="Acme",
    )
    return {
        payer_account.identity: ActualAccountData(
            account=payer_account,
            token="vaulted-token-abc",
            first_name="Jane",
            last_name="Doe",
            billing_address=address,
        ),
        web_payer_account.identity: ActualAccountData(
            account=web_payer_account,
            token="nonce-xyz",
            first_name="John",
            last_name="Roe",
            billing_address=address,
        ),
    }


@pytest.fixture
def account_resolver(account_data: dict[str, ActualAccountData]) -> FakeAccountResolver:
    return FakeAccountResolver(account_data)


@pytest.fixture
def metrics() -> RecordingPayMetrics:
    return RecordingPayMetrics()


@pytest.fixture
def id_generator() -> SequentialIdGenerator:
    return SequentialIdGenerator()


@pytest.fixture
def mock_gateway() -> AsyncMock:
    """GatewayClient mock; tests set `send.return_value` or `send.side_effect`."""
    gateway = AsyncMock(spec=GatewayClient)
    gateway.send = AsyncMock(return_value=success(charge_response_body()))
    return gateway


@pytest.fixture
def pay_system(
    mock_gateway: AsyncMock,
    account_resolver: FakeAccountResolver,
    connection_params: ConnectionParameters,
    id_generator: SequentialIdGenerator,
    metrics: RecordingPayMetrics,
) -> BraintreeSystem:
    return BraintreeSystem(
        "braintree-test",
        mock_gateway,
        account_resolver,
        default_params=connection_params,
        id_generator=id_generator,
        metrics=metrics,
    )


@pytest.fixture
def session(pay_system: BraintreeSystem) -> Iterator[PaySession]:
    with pay_system.start_session() as session:
        yield session


def charge_response_body(
    transaction_id: str = "gw-tx-123",
    customer_id: str | None = "customer-001",
    token: str | None = "card-token-789",
    created_at: str = "2024-05-01T12:30:00Z",
) -> dict[str, Any]:
    return {
        "transaction": {
            "id": transaction_id,
            "createdAt": created_at,
            "status": "authorized",
            "customer": {"id": customer_id},
            "creditCard": {"token": token},
        }
    }


def settlement_response_body(
    transaction_id: str = "gw-tx-123",
    amount: Decimal | None = None,
    updated_at: str | None = "2024-05-02T08:00:00Z",
) -> dict[str, Any]:
    transaction: dict[str, Any] = {"id": transaction_id, "status": "submitted_for_settlement"}
    if amount is not None:
        transaction["amount"] = amount
    if updated_at is not None:
        transaction["updatedAt"] = updated_at
    return {"transaction": transaction}


def success(body: dict[str, Any], status_code: int = 201) -> GatewaySuccess:
    return GatewaySuccess(status_code=status_code, content=encode_body(body))


def rejection(message: str | None, status_code: int = 422) -> GatewayFailure:
    return GatewayFailure(
        cause=RuntimeError(f"HTTP {status_code}"),
        status_code=status_code,
        error_message=message,
    )


def create_charge_transaction(
    payer: Account,
    payee: Account,
    amount: Amount | None = None,
    processor_token: str = "customer-001:card-token-789:gw-tx-123",
    captured: bool = False,
) -> Transaction:
    """Helper to create an uncaptured charge with custom values."""
    return Transaction.charge(
        transaction_id="tx-prior",
        system_name="braintree-test",
        processor_token=processor_token,
        from_account=payer,
        to_account=payee,
        amount=amount or Amount("USD", Decimal("25.00")),
        timestamp=datetime(2024, 5, 1, 12, 30, tzinfo=UTC),
        description="Order #1",
        captured=captured,
    )
