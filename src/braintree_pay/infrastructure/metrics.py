from prometheus_client import Counter, Histogram

from braintree_pay.domain.models import Amount, Transaction


PAY_CHARGES_TOTAL = Counter(
    "pay_charges_total",
    "Total number of successful charges",
    ["system", "currency"],
)

PAY_CHARGE_ERRORS_TOTAL = Counter(
    "pay_charge_errors_total",
    "Total number of failed charge or capture attempts",
    ["system", "operation"],
)

PAY_CAPTURES_TOTAL = Counter(
    "pay_captures_total",
    "Total number of successful captures",
    ["system", "currency"],
)

PAY_CHARGED_AMOUNT_TOTAL = Counter(
    "pay_charged_amount_total",
    "Sum of successfully charged amounts",
    ["system", "currency"],
)

PAY_CAPTURED_AMOUNT_TOTAL = Counter(
    "pay_captured_amount_total",
    "Sum of successfully captured amounts",
    ["system", "currency"],
)

GATEWAY_REQUEST_DURATION = Histogram(
    "gateway_request_duration_seconds",
    "Braintree gateway request duration",
    ["operation", "outcome"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)


class PrometheusPayMetrics:
    """PayMetrics backed by the process-wide Prometheus counters."""

    def __init__(self, system_name: str) -> None:
        self._system = system_name

    def record_charge(self, amount: Amount) -> None:
        PAY_CHARGES_TOTAL.labels(system=self._system, currency=amount.currency).inc()
        # Exposition is float; the Decimal on the transaction stays authoritative
        PAY_CHARGED_AMOUNT_TOTAL.labels(system=self._system, currency=amount.currency).inc(float(amount.value))

    def record_charge_error(self, operation: str) -> None:
        PAY_CHARGE_ERRORS_TOTAL.labels(system=self._system, operation=operation).inc()

    def record_capture(self, transaction: Transaction, amount: Amount | None) -> None:
        captured = amount or transaction.amount
        PAY_CAPTURES_TOTAL.labels(system=self._system, currency=captured.currency).inc()
        PAY_CAPTURED_AMOUNT_TOTAL.labels(system=self._system, currency=captured.currency).inc(float(captured.value))
