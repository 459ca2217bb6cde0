"""Mapping between domain values and the Braintree JSON API (version 4).

Nothing in here performs I/O. Request builders return plain dicts whose
amounts are still `Decimal`; `encode_body` writes those as JSON number
literals so the gateway sees exactly the value the caller passed in.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from urllib.parse import quote

import simplejson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from braintree_pay.domain.exceptions import MalformedResponseError
from braintree_pay.domain.models import ActualAccountData, Amount, OrderTransactionContext


API_VERSION = "4"
CLIENT_TOKEN_VERSION = "2"
JSON_CONTENT_TYPE = "application/json"


def path_segment(value: str) -> str:
    """Escape one URL path segment, including `/`, `?` and dot segments."""
    segment = quote(value, safe="")
    if segment in {".", ".."}:
        return segment.replace(".", "%2E")
    return segment


def merchant_path(merchant_id: str) -> str:
    return f"/merchants/{path_segment(merchant_id)}"


def client_token_path(merchant_id: str) -> str:
    return f"{merchant_path(merchant_id)}/client_token"


def transactions_path(merchant_id: str) -> str:
    return f"{merchant_path(merchant_id)}/transactions"


def submit_for_settlement_path(merchant_id: str, transaction_id: str) -> str:
    return f"{transactions_path(merchant_id)}/{path_segment(transaction_id)}/submit_for_settlement"


def customer_path(merchant_id: str, customer_id: str) -> str:
    return f"{merchant_path(merchant_id)}/customers/{path_segment(customer_id)}"


def encode_body(body: dict[str, Any]) -> bytes:
    return simplejson.dumps(body, use_decimal=True, separators=(",", ":")).encode("utf-8")


def decode_body(content: bytes) -> Any:
    return simplejson.loads(content, use_decimal=True)


# Requests


def build_client_token_request() -> dict[str, Any]:
    return {"client_token": {"version": CLIENT_TOKEN_VERSION}}


def build_charge_request(
    actual: ActualAccountData,
    amount: Amount,
    *,
    capture: bool,
    order: OrderTransactionContext | None = None,
    customer_exists: bool = False,
) -> dict[str, Any]:
    """Build the body of a "sale" transaction.

    With an order context the customer is referenced by `customer_id` only
    when it is known to exist at the gateway; otherwise it is created inline
    through `customer.id`.
    """
    is_web = actual.account.is_web_terminal_token

    transaction: dict[str, Any] = {
        "type": "sale",
        "amount": amount.value,
        "payment_method_nonce" if is_web else "payment_method_token": actual.token,
    }

    if order is not None:
        transaction["order_id"] = order.order_id
        if customer_exists and not order.is_new_customer:
            transaction["customer_id"] = order.customer_id
        else:
            transaction["customer"] = {"id": order.customer_id}

    transaction["billing"] = build_billing(actual)

    options: dict[str, Any] = {"submit_for_settlement": capture}
    if order is not None:
        options["store_in_vault_on_success"] = is_web
    transaction["options"] = options

    return {"transaction": transaction}


def build_billing(actual: ActualAccountData) -> dict[str, str]:
    address = actual.billing_address
    candidates = {
        "first_name": actual.first_name,
        "last_name": actual.last_name,
        "street_address": address.address1,
        "extended_address": address.address2,
        "locality": address.city,
        "country_code_alpha3": address.country,
        "region": address.region,
        "postal_code": address.postal_code,
        "company": address.company,
    }
    return {key: value for key, value in candidates.items() if value and value.strip()}


def build_settlement_request(amount: Amount | None = None) -> dict[str, Any]:
    transaction: dict[str, Any] = {}
    if amount is not None:
        transaction["amount"] = amount.value
    return {"transaction": transaction}


# Responses


class GatewayModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class CustomerPayload(GatewayModel):
    id: str | None = None


class CreditCardPayload(GatewayModel):
    token: str | None = None


class ChargeTransactionPayload(GatewayModel):
    id: str = Field(min_length=1)
    created_at: datetime = Field(alias="createdAt")
    customer: CustomerPayload | None = None
    credit_card: CreditCardPayload | None = Field(default=None, alias="creditCard")

    @property
    def customer_id(self) -> str | None:
        return self.customer.id if self.customer else None

    @property
    def payment_method_token(self) -> str | None:
        return self.credit_card.token if self.credit_card else None


class ChargeResponse(GatewayModel):
    transaction: ChargeTransactionPayload


class SettlementTransactionPayload(GatewayModel):
    id: str = Field(min_length=1)
    amount: Decimal | None = None
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class SettlementResponse(GatewayModel):
    transaction: SettlementTransactionPayload


class ClientTokenPayload(GatewayModel):
    value: str = Field(min_length=1)


class ClientTokenResponse(GatewayModel):
    client_token: ClientTokenPayload = Field(alias="clientToken")


class ApiErrorPayload(GatewayModel):
    message: str | None = None


class ApiErrorResponse(GatewayModel):
    api_error_response: ApiErrorPayload = Field(alias="apiErrorResponse")


def _parse[M: GatewayModel](model: type[M], content: bytes, what: str) -> M:
    try:
        return model.model_validate(decode_body(content))
    except (simplejson.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
        raise MalformedResponseError(f"Braintree: malformed {what} response", cause=e) from e


def parse_charge_response(content: bytes) -> ChargeResponse:
    return _parse(ChargeResponse, content, "transaction")


def parse_settlement_response(content: bytes) -> SettlementResponse:
    return _parse(SettlementResponse, content, "settlement")


def parse_client_token_response(content: bytes) -> ClientTokenResponse:
    return _parse(ClientTokenResponse, content, "client token")


def extract_error_message(content: bytes) -> str | None:
    """Return `apiErrorResponse.message` from an error body, if there is one."""
    if not content.strip():
        return None
    try:
        error = ApiErrorResponse.model_validate(decode_body(content))
    except (simplejson.JSONDecodeError, UnicodeDecodeError, ValidationError):
        return None
    message = error.api_error_response.message
    return message if message and message.strip() else None
