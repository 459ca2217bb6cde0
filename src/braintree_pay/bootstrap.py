from collections.abc import Callable
from functools import partial

import httpx
import structlog

from braintree_pay.application.pay_system import BraintreeSystem
from braintree_pay.application.ports import AccountResolver, PayMetrics, TransactionIdGenerator
from braintree_pay.config import Settings, settings
from braintree_pay.domain.credentials import (
    BasicCredentials,
    BearerCredentials,
    ConnectionParameters,
    Credentials,
)
from braintree_pay.infrastructure.gateway_client import GatewayClient


logger = structlog.get_logger()


def credentials_from_settings(config: Settings) -> Credentials:
    """An access token takes precedence over a key pair."""
    if config.gateway_access_token:
        return BearerCredentials(access_token=config.gateway_access_token)
    if config.gateway_public_key and config.gateway_private_key:
        return BasicCredentials(
            public_key=config.gateway_public_key,
            private_key=config.gateway_private_key,
        )
    raise ValueError("Gateway credentials are not configured: set an access token or a public/private key pair")


def connection_parameters_from_settings(config: Settings) -> ConnectionParameters:
    return ConnectionParameters(
        merchant_id=config.gateway_merchant_id,
        credentials=credentials_from_settings(config),
        api_uri=config.gateway_api_uri,
        user_name=config.gateway_user_name,
    )


def create_http_client(config: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.gateway_timeout_seconds)


def create_pay_system(
    account_resolver: AccountResolver,
    *,
    config: Settings | None = None,
    http_client_factory: Callable[[], httpx.AsyncClient] | None = None,
    id_generator: TransactionIdGenerator | None = None,
    metrics: PayMetrics | None = None,
) -> BraintreeSystem:
    """Wire a BraintreeSystem from settings.

    The gateway asks `http_client_factory` for one client per event loop it
    runs on; by default those clients get the configured timeout. Each loop
    that used the system should `await pay_system.aclose()` before it ends.
    """
    config = config or settings
    pay_system = BraintreeSystem(
        name=config.gateway_system_name,
        gateway=GatewayClient(http_client_factory or partial(create_http_client, config)),
        account_resolver=account_resolver,
        default_params=connection_parameters_from_settings(config),
        id_generator=id_generator,
        metrics=metrics,
    )
    logger.info(
        "pay_system_created",
        system=pay_system.name,
        api_uri=config.gateway_api_uri,
        merchant_id=config.gateway_merchant_id,
    )
    return pay_system
