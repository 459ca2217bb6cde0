from types import TracebackType
from typing import TYPE_CHECKING, Self

import structlog
from ulid import ULID

from braintree_pay.domain.credentials import ConnectionParameters, Credentials


if TYPE_CHECKING:
    from braintree_pay.application.pay_system import BraintreeSystem


logger = structlog.get_logger()


class PaySession:
    """A short-lived, caller-scoped interaction with the gateway.

    Valid from construction until `end()` or the exit of a `with` block.
    Not meant to be shared between concurrent call sequences.
    """

    def __init__(self, pay_system: "BraintreeSystem", params: ConnectionParameters) -> None:
        self.id = str(ULID())
        self._pay_system = pay_system
        self._params = params
        self._is_valid = True

    @property
    def pay_system(self) -> "BraintreeSystem":
        return self._pay_system

    @property
    def params(self) -> ConnectionParameters:
        return self._params

    @property
    def merchant_id(self) -> str:
        return self._params.merchant_id

    @property
    def credentials(self) -> Credentials:
        return self._params.credentials

    @property
    def user_name(self) -> str:
        return self._params.user_name

    @property
    def is_valid(self) -> bool:
        return self._is_valid

    def end(self) -> None:
        if self._is_valid:
            self._is_valid = False
            logger.info("session_ended", session_id=self.id, merchant_id=self.merchant_id)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.end()

    def __repr__(self) -> str:
        return f"PaySession(id={self.id!r}, merchant_id={self.merchant_id!r}, valid={self._is_valid})"
