"""Exception hierarchy for ARM request execution."""

from __future__ import annotations

from urllib.parse import urlparse

from arm_http.config import MANAGEMENT_HOST
from arm_http.responses import response_text

UNKNOWN_ERROR_CODE = "Unknown"
METHOD_NOT_ALLOWED_IN_PRICING_TIER = "MethodNotAllowedInPricingTier"
VALIDATION_ERROR = "ValidationError"


def is_management_request(uri: str) -> bool:
    """True if the URI targets the Azure Resource Manager host."""
    return (urlparse(uri).hostname or "").lower() == MANAGEMENT_HOST


def _require_management_uri(uri: str) -> None:
    if not is_management_request(uri):
        raise ValueError(f"The request URI host must be '{MANAGEMENT_HOST}', got {uri!r}.")


class ArmError(Exception):
    """Base exception for request execution errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class HttpRequestError(ArmError):
    """An HTTP request returned an error status.

    Raised as-is for hosts other than the resource manager, where the body carries
    no error code semantics.

    Attributes:
        status_code: HTTP status code from the response
        request_uri: URI of the request that failed
    """

    def __init__(self, message: str, status_code: int, request_uri: str,
                 inner: BaseException | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.request_uri = request_uri
        self.__cause__ = inner

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, status_code={self.status_code})"


class ManagementRequestError(HttpRequestError):
    """A resource manager request failed.

    Attributes:
        status_code: HTTP status code from the response
        error_code: Code from the JSON error envelope, "Unknown" if the body has none
        request_uri: URI of the request that failed
    """

    def __init__(self, message: str, status_code: int, error_code: str, request_uri: str,
                 inner: BaseException | None = None) -> None:
        _require_management_uri(request_uri)
        super().__init__(message, status_code, request_uri, inner)
        self.error_code = error_code

    @classmethod
    def from_response(cls, response, request_uri: str,
                      error_code: str | None = None) -> ManagementRequestError:
        """Build the error for a response. Raises ValueError if the URI is not a management URI."""
        _require_management_uri(request_uri)
        status = response.status_code
        return cls(
            f"The Azure Management request to URI {request_uri} failed with status code {status}. "
            f"Content is '{response_text(response)}'.",
            status_code=status,
            error_code=error_code or UNKNOWN_ERROR_CODE,
            request_uri=request_uri,
        )

    @property
    def is_method_not_allowed_in_pricing_tier(self) -> bool:
        return self.error_code.lower() == METHOD_NOT_ALLOWED_IN_PRICING_TIER.lower()

    @property
    def is_validation_error(self) -> bool:
        return self.error_code.lower() == VALIDATION_ERROR.lower()

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}({self.message!r}, status_code={self.status_code}, "
                f"error_code={self.error_code!r})")


class ResourceDeploymentError(ArmError):
    """A resource reported success but its location returned no body.

    Attributes:
        resource_path: Path of the resource that failed to deploy
    """

    def __init__(self, resource_path: str) -> None:
        super().__init__(
            f"The resource ({resource_path}) lacks a response body indicating it has failed to deploy."
        )
        self.resource_path = resource_path


class OperationCancelledError(ArmError):
    """The caller cancelled the operation before it completed."""

    pass
