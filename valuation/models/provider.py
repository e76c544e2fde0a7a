"""Tagged results returned by external provider clients.

Provider clients never raise for HTTP, network or parsing failures. They
return either ``Ok(value)`` or a ``ProviderError`` describing what went wrong,
and the owning component decides how to degrade.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ProviderErrorKind(str, Enum):
    NOT_CONFIGURED = "not_configured"
    INVALID_INPUT = "invalid_input"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    HTTP_ERROR = "http_error"
    NETWORK = "network"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class ProviderError:
    kind: ProviderErrorKind
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.detail}" if self.detail else self.kind.value


ProviderResult = Ok[T] | ProviderError


def error_kind_for_status(status_code: int) -> ProviderErrorKind:
    """Map an HTTP status code to a provider error kind."""
    if status_code in (401, 403):
        return ProviderErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ProviderErrorKind.NOT_FOUND
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMITED
    if status_code in (400, 422):
        return ProviderErrorKind.INVALID_INPUT
    return ProviderErrorKind.HTTP_ERROR
