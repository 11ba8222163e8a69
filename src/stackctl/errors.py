"""Exception types raised by stackctl."""

from botocore.exceptions import ClientError, WaiterError


class StackctlError(Exception):
    """Base class for all stackctl errors."""


class InvalidInputError(StackctlError, ValueError):
    """Bad caller input, detected before any remote call is made."""


class TransportError(StackctlError):
    """A failure surfaced by the CloudFormation API.

    ``partial`` holds whatever a paginated call accumulated before the failing
    page, when the caller asked to keep it.
    """

    def __init__(self, message: str, code: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.code = code
        self.operation = operation
        self.partial: list | None = None

    @classmethod
    def from_client_error(cls, error: ClientError) -> "TransportError":
        err = error.response.get("Error", {})
        code = err.get("Code")
        message = err.get("Message") or str(error)
        error_cls = RemoteValidationError if code == "ValidationError" else cls
        return error_cls(message, code=code, operation=error.operation_name)

    @classmethod
    def from_waiter_error(cls, error: WaiterError) -> "TransportError":
        response = error.last_response or {}
        code = response.get("Error", {}).get("Code")
        return cls(str(error), code=code, operation=error.kwargs.get("name"))


class RemoteValidationError(TransportError):
    """The API's ``ValidationError`` class, e.g. "Stack with id X does not exist"."""
