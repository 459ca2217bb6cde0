from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    gateway_api_uri: str = "https://api.sandbox.braintreegateway.com"
    gateway_merchant_id: str = ""
    gateway_system_name: str = "braintree"
    gateway_user_name: str = ""
    gateway_timeout_seconds: float = 30.0

    # Either a key pair (Basic auth) or an OAuth access token (Bearer auth)
    gateway_public_key: str = ""
    gateway_private_key: str = ""
    gateway_access_token: str = ""

    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"


settings = Settings()
