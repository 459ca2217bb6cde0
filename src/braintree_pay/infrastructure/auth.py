import base64

from braintree_pay.domain.credentials import BasicCredentials, BearerCredentials, Credentials
from braintree_pay.domain.exceptions import UnsupportedCredentialsError


def basic_auth_string(credentials: BasicCredentials) -> str:
    raw = f"{credentials.public_key}:{credentials.private_key}".encode()
    return base64.b64encode(raw).decode("ascii")


def authorization_header(credentials: Credentials) -> str:
    """Build the Authorization header value for a credential variant."""
    match credentials:
        case BasicCredentials():
            return f"Basic {basic_auth_string(credentials)}"
        case BearerCredentials(access_token=access_token):
            return f"Bearer {access_token}"
        case _:
            raise UnsupportedCredentialsError(type(credentials).__name__)
