from datetime import UTC, datetime

import structlog

from braintree_pay.application.ports import (
    AccountResolver,
    PayMetrics,
    TransactionIdGenerator,
    UlidTransactionIdGenerator,
)
from braintree_pay.application.session import PaySession
from braintree_pay.domain.credentials import ConnectionParameters
from braintree_pay.domain.exceptions import (
    CurrencyMismatchError,
    GatewayRejectedError,
    InvalidAmountError,
    PaymentError,
    SessionInvalidError,
    TransactionStateError,
    TransportFailureError,
    UnsupportedOperationError,
)
from braintree_pay.domain.models import (
    Account,
    ActualAccountData,
    Amount,
    OrderTransactionContext,
    Transaction,
    TransactionContext,
    TransactionKind,
    correlation_token,
    gateway_transaction_id,
)
from braintree_pay.infrastructure.gateway_client import GatewayClient, GatewayFailure, GatewayResult
from braintree_pay.infrastructure.gateway_schema import (
    build_charge_request,
    build_client_token_request,
    build_settlement_request,
    client_token_path,
    customer_path,
    parse_charge_response,
    parse_client_token_response,
    parse_settlement_response,
    submit_for_settlement_path,
    transactions_path,
)
from braintree_pay.infrastructure.metrics import PrometheusPayMetrics


logger = structlog.get_logger()


class BraintreeSystem:
    """Drives charge and capture against the Braintree gateway.

    Each operation makes its gateway calls once; failures are mapped to a
    `PaymentError` subtype after the failure metric is recorded. Retrying is
    left to the caller.
    """

    COMPONENT_COMMON_NAME = "braintreepayments"

    def __init__(
        self,
        name: str,
        gateway: GatewayClient,
        account_resolver: AccountResolver,
        *,
        default_params: ConnectionParameters | None = None,
        id_generator: TransactionIdGenerator | None = None,
        metrics: PayMetrics | None = None,
    ) -> None:
        self.name = name
        self._gateway = gateway
        self._accounts = account_resolver
        self._default_params = default_params
        self._ids = id_generator or UlidTransactionIdGenerator()
        self._metrics = metrics or PrometheusPayMetrics(name)

    async def aclose(self) -> None:
        """Close the HTTP client used by the calling event loop."""
        await self._gateway.aclose()

    @property
    def default_params(self) -> ConnectionParameters | None:
        return self._default_params

    def start_session(self, params: ConnectionParameters | None = None) -> PaySession:
        params = params or self._default_params
        if params is None:
            raise SessionInvalidError("start_session", reason="no connection parameters configured")

        session = PaySession(self, params)
        logger.info(
            "session_started",
            system=self.name,
            session_id=session.id,
            merchant_id=params.merchant_id,
            user=params.user_name,
        )
        return session

    async def generate_client_token(self, session: PaySession) -> str:
        self._ensure_valid(session, "generate_client_token")

        result = await self._gateway.send(
            session.params,
            "POST",
            client_token_path(session.merchant_id),
            build_client_token_request(),
            operation="client_token",
        )
        failure_message = f"Braintree: cannot generate client token (session='{session.id}')"
        content = self._successful_content(result, failure_message)
        response = parse_client_token_response(content)
        logger.info("client_token_generated", system=self.name, session_id=session.id)
        return response.client_token.value

    async def charge(
        self,
        session: PaySession,
        context: TransactionContext | None,
        from_account: Account,
        to_account: Account,
        amount: Amount,
        capture: bool = True,
        description: str | None = None,
    ) -> Transaction:
        self._ensure_valid(session, "charge")
        if amount.value <= 0:
            raise InvalidAmountError(amount, "charge amount must be positive")

        log = logger.bind(
            system=self.name,
            session_id=session.id,
            from_account=from_account.identity,
            amount=str(amount.value),
            currency=amount.currency,
            capture=capture,
        )

        actual = await self._accounts.account_to_actual_data(context, from_account)
        order = context if isinstance(context, OrderTransactionContext) else None

        customer_exists = False
        if order is not None and not order.is_new_customer:
            customer_exists = await self._customer_exists(session, order.customer_id)

        request = build_charge_request(
            actual,
            amount,
            capture=capture,
            order=order,
            customer_exists=customer_exists,
        )
        log.info("charge_requested", order_id=order.order_id if order else None, customer_exists=customer_exists)

        result = await self._gateway.send(
            session.params,
            "POST",
            transactions_path(session.merchant_id),
            request,
            operation="charge",
        )
        try:
            content = self._successful_content(result, self._charge_failure(session, actual, amount))
            response = parse_charge_response(content)
        except PaymentError as e:
            self._metrics.record_charge_error("charge")
            log.warning("charge_failed", error_type=type(e).__name__, error=e.message)
            raise

        payload = response.transaction
        transaction = Transaction.charge(
            transaction_id=self._ids.generate(session, context, TransactionKind.CHARGE),
            system_name=self.name,
            processor_token=correlation_token(payload.customer_id, payload.payment_method_token, payload.id),
            from_account=from_account,
            to_account=to_account,
            amount=amount,
            timestamp=payload.created_at,
            description=description,
            captured=capture,
        )
        self._metrics.record_charge(amount)

        log.info("charge_completed", transaction_id=transaction.id, gateway_transaction_id=payload.id)
        return transaction

    async def capture(
        self,
        session: PaySession,
        context: TransactionContext | None,
        charge: Transaction,
        amount: Amount | None = None,
        description: str | None = None,
    ) -> Transaction:
        """Submit a prior charge for settlement.

        Returns a new CAPTURE transaction; `charge` itself is left untouched.
        Without `amount` the gateway settles the originally authorized amount.
        """
        self._ensure_valid(session, "capture")
        gateway_id = self._capturable_gateway_id(charge, amount)

        log = logger.bind(
            system=self.name,
            session_id=session.id,
            transaction_id=charge.id,
            gateway_transaction_id=gateway_id,
            amount=str(amount.value) if amount else None,
        )
        log.info("capture_requested")

        result = await self._gateway.send(
            session.params,
            "PUT",
            submit_for_settlement_path(session.merchant_id, gateway_id),
            build_settlement_request(amount),
            operation="capture",
        )
        try:
            content = self._successful_content(result, self._capture_failure(session, charge, amount))
            response = parse_settlement_response(content)
        except PaymentError as e:
            self._metrics.record_charge_error("capture")
            log.warning("capture_failed", error_type=type(e).__name__, error=e.message)
            raise

        payload = response.transaction
        if payload.amount is not None:
            settled_amount = Amount(charge.amount.currency, payload.amount)
        else:
            settled_amount = amount or charge.amount

        captured = charge.settled(
            amount=settled_amount,
            timestamp=payload.updated_at or datetime.now(UTC),
            description=description,
        )
        self._metrics.record_capture(captured, settled_amount)

        log.info("capture_completed", settled_amount=str(settled_amount.value))
        return captured

    async def refund(
        self,
        session: PaySession,
        context: TransactionContext | None,
        charge: Transaction,
        amount: Amount | None = None,
        description: str | None = None,
    ) -> Transaction:
        raise UnsupportedOperationError("refund")

    async def transfer(
        self,
        session: PaySession,
        context: TransactionContext | None,
        from_account: Account,
        to_account: Account,
        amount: Amount,
        description: str | None = None,
    ) -> Transaction:
        raise UnsupportedOperationError("transfer")

    async def verify_potential_transaction(
        self,
        session: PaySession,
        context: TransactionContext | None,
        transfer: bool,
        from_data: ActualAccountData,
        to_data: ActualAccountData,
        amount: Amount,
    ) -> PaymentError | None:
        raise UnsupportedOperationError("verify_potential_transaction")

    async def _customer_exists(self, session: PaySession, customer_id: str) -> bool:
        """Look up a customer in the vault; any failure counts as "not found"."""
        result = await self._gateway.send(
            session.params,
            "GET",
            customer_path(session.merchant_id, customer_id),
            operation="customer_lookup",
        )
        if isinstance(result, GatewayFailure):
            logger.info(
                "customer_lookup_failed",
                system=self.name,
                session_id=session.id,
                customer_id=customer_id,
                status_code=result.status_code,
            )
            return False
        return True

    def _ensure_valid(self, session: PaySession, operation: str) -> None:
        if not session.is_valid:
            raise SessionInvalidError(operation)
        if session.pay_system is not self:
            raise SessionInvalidError(operation, reason="session belongs to another pay system")

    def _capturable_gateway_id(self, charge: Transaction, amount: Amount | None) -> str:
        if not charge.is_capturable:
            state = "already captured" if charge.captured else f"a {charge.kind.value} transaction"
            raise TransactionStateError(charge.id, f"cannot capture {state}")

        gateway_id = gateway_transaction_id(charge.processor_token)
        if gateway_id is None:
            raise TransactionStateError(charge.id, "processor token does not carry a gateway transaction id")

        if amount is not None:
            if amount.currency != charge.amount.currency:
                raise CurrencyMismatchError(charge.amount.currency, amount.currency)
            if amount.value <= 0:
                raise InvalidAmountError(amount, "capture amount must be positive")

        return gateway_id

    def _charge_failure(self, session: PaySession, actual: ActualAccountData, amount: Amount) -> str:
        return (
            f"Braintree: cannot charge payment via {type(self).__name__}.charge"
            f"(session='{session.id}', account='{actual.account.identity}', amount='{amount}')"
        )

    def _capture_failure(self, session: PaySession, charge: Transaction, amount: Amount | None) -> str:
        return (
            f"Braintree: cannot capture payment via {type(self).__name__}.capture"
            f"(session='{session.id}', charge='{charge.id}', amount='{amount or charge.amount}')"
        )

    def _successful_content(self, result: GatewayResult, generic_message: str) -> bytes:
        if isinstance(result, GatewayFailure):
            raise self._failure_to_error(result, generic_message) from result.cause
        return result.content

    @staticmethod
    def _failure_to_error(failure: GatewayFailure, generic_message: str) -> PaymentError:
        if failure.error_message is not None:
            return GatewayRejectedError(failure.error_message, status_code=failure.status_code, cause=failure.cause)
        return TransportFailureError(generic_message, cause=failure.cause)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

