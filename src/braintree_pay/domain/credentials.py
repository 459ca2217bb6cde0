from dataclasses import dataclass, field


@dataclass(frozen=True)
class BasicCredentials:
    """Static API key pair, sent as HTTP Basic auth."""

    public_key: str
    private_key: str = field(repr=False)


@dataclass(frozen=True)
class BearerCredentials:
    """OAuth access token, sent as HTTP Bearer auth."""

    access_token: str = field(repr=False)


type Credentials = BasicCredentials | BearerCredentials


@dataclass(frozen=True)
class ConnectionParameters:
    merchant_id: str
    credentials: Credentials
    api_uri: str = "https://api.sandbox.braintreegateway.com"
    user_name: str = ""

    def __post_init__(self) -> None:
        if not self.merchant_id.strip():
            raise ValueError("Merchant id is required")
        if not self.api_uri.strip():
            raise ValueError("Gateway API URI is required")
