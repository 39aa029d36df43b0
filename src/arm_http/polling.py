"""Long-running operation polling and post-deployment verification.

The resource manager answers a write it has not finished with 202 Accepted and a
Location header. The client waits (Retry-After seconds, or the configured default)
and GETs that location until the answer is something other than 202 + Location.

Both functions take ownership of the response they are given: it is closed once it
has been superseded, and the response they return belongs to the caller.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import closing
from typing import Callable
from urllib.parse import urlparse

from arm_http.classifier import to_request_error
from arm_http.config import DEFAULT_POLL_INTERVAL
from arm_http.exceptions import OperationCancelledError, ResourceDeploymentError
from arm_http.responses import ACCEPTED, get_location, is_error, parse_retry_after, read_body
from arm_http.results import Failure, Result, Success

logger = logging.getLogger(__name__)

Get = Callable[[str], object]


def raise_if_cancelled(cancellation: threading.Event | None) -> None:
    if cancellation is not None and cancellation.is_set():
        raise OperationCancelledError("The operation was cancelled.")


def wait(seconds: float, cancellation: threading.Event | None = None) -> None:
    """Sleep for seconds, aborting with OperationCancelledError as soon as cancellation is set."""
    if cancellation is None:
        time.sleep(seconds)
        return
    if cancellation.wait(seconds):
        raise OperationCancelledError("The operation was cancelled while waiting to poll.")


def _operation_location(response) -> str | None:
    if response.status_code != ACCEPTED:
        return None
    return get_location(response)


def wait_for_long_running_operation(get: Get, response, poll_interval: float = DEFAULT_POLL_INTERVAL,
                                    cancellation: threading.Event | None = None) -> Result:
    """Poll until the operation started by response reaches a terminal state.

    Args:
        get: Sends a GET to a URI and returns the raw response
        response: The response to the initial request (ownership is taken)
        poll_interval: Seconds to wait when the server sends no Retry-After
        cancellation: Set to abort the wait and the operation

    Returns:
        Success(response) holding the terminal response, or Failure with the error
        classified against the polled URI. A failed poll is never retried here.

    Raises:
        OperationCancelledError: If cancellation is set before the operation completes
    """
    current = response
    location = _operation_location(current)
    while location is not None:
        delay = parse_retry_after(current, poll_interval)
        current.close()

        logger.debug("Operation in progress, polling %s in %ss", location, delay)
        wait(delay, cancellation)

        current = get(location)
        if is_error(current):
            with closing(current):
                return Failure(to_request_error(current, location))
        location = _operation_location(current)

    return Success(current)


def _is_empty(body: bytes) -> bool:
    return body.strip() in (b"", b"null")


def verify_resource(get: Get, response) -> Result:
    """Confirm that a completed PUT produced a resource.

    If the terminal response points at the resource with a Location header, GET it:
    an error is classified against that URI and an empty body means the deployment
    failed even though the status was successful. Without a Location header the
    response is accepted as final.

    Takes ownership of response; on Success the returned response belongs to the caller.
    """
    location = get_location(response)
    if location is None:
        return Success(response)
    response.close()

    logger.debug("Verifying resource at %s", location)
    verified = get(location)
    if is_error(verified):
        with closing(verified):
            return Failure(to_request_error(verified, location))

    try:
        body = read_body(verified)
    except BaseException:
        verified.close()
        raise
    if _is_empty(body):
        verified.close()
        return Failure(ResourceDeploymentError(urlparse(location).path))

    return Success(verified)
