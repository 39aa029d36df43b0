"""Turn error responses into typed exceptions.

Resource manager errors are JSON envelopes:
{
  "error": {
    "code": "ErrorCode",
    "message": "Error message",
    ...
  }
}
"""

from __future__ import annotations

import json
import logging

from azure.core.exceptions import AzureError

from arm_http.exceptions import HttpRequestError, ManagementRequestError, is_management_request
from arm_http.responses import is_error, read_body, response_text

logger = logging.getLogger(__name__)


def try_get_error_code(response) -> str | None:
    """Extract error.code from the response body.

    Returns None for an empty body, malformed JSON, an envelope of the wrong shape,
    or a body that can no longer be read.
    """
    try:
        data = json.loads(read_body(response))
    except (AzureError, ValueError, TypeError) as exc:
        logger.debug("No error code in response body: %s", exc)
        return None

    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if not isinstance(error, dict):
        return None
    code = error.get("code")
    return code if isinstance(code, str) else None


def has_specific_error(response, error_code: str) -> bool:
    """True if the response is an error whose code matches error_code, ignoring case."""
    if not is_error(response):
        return False
    code = try_get_error_code(response)
    return code is not None and code.lower() == error_code.lower()


def to_request_error(response, request_uri: str) -> HttpRequestError:
    """Build the exception for an error response to request_uri.

    Management URIs get a ManagementRequestError carrying the error code; any other
    host gets a plain HttpRequestError.
    """
    if is_management_request(request_uri):
        return ManagementRequestError.from_response(response, request_uri,
                                                    error_code=try_get_error_code(response))

    return HttpRequestError(
        f"HTTP request to URI {request_uri} failed with status code {response.status_code}. "
        f"Content is '{response_text(response)}'.",
        status_code=response.status_code,
        request_uri=request_uri,
    )
