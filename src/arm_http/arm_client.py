"""Azure Resource Manager request execution."""

from __future__ import annotations

import json
import logging
import threading
from contextlib import closing
from typing import Any, Iterator

from azure.core.pipeline import Pipeline
from azure.core.rest import HttpRequest

from arm_http.classifier import to_request_error
from arm_http.config import ClientSettings
from arm_http.exceptions import ArmError, ManagementRequestError
from arm_http.pagination import list_json_objects
from arm_http.pipeline import build_pipeline, create_credential
from arm_http.polling import raise_if_cancelled, verify_resource, wait_for_long_running_operation
from arm_http.responses import NOT_FOUND, is_error, read_body
from arm_http.results import Failure, NotFound, Result, Success

logger = logging.getLogger(__name__)


def _is_pricing_tier_error(error: ArmError) -> bool:
    return isinstance(error, ManagementRequestError) and error.is_method_not_allowed_in_pricing_tier


def _parse_json_object(content: bytes) -> dict[str, Any]:
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


class ArmClient:
    """Execute get/put/patch/delete/list against the Azure Resource Manager.

    Each operation comes in two forms. try_* methods return a Result (Success,
    NotFound or Failure) and only raise for cancellation and transport errors. The
    plain methods return the value and raise the classified error.

    Writes that the service accepts as long-running operations are polled to
    completion. PUTs are then verified by reading the resource back.

    The one service error treated as success is MethodNotAllowedInPricingTier: the
    raising put/patch/delete return normally and listings end early. This mirrors
    how the resource manager rejects operations a SKU does not support and is kept
    to that single code.
    """

    def __init__(self, client_id: str | None = None, client_secret: str | None = None,
                 tenant_id: str | None = None, settings: ClientSettings | None = None,
                 pipeline: Pipeline | None = None) -> None:
        self.settings = settings or ClientSettings()
        if pipeline is None:
            credential = create_credential(client_id, client_secret, tenant_id)
            pipeline = build_pipeline(credential, self.settings)
        self._pipeline = pipeline

    @staticmethod
    def create_request(method: str, uri: str, body: Any = None) -> HttpRequest:
        """Build a request. A body is sent as JSON; str and bytes bodies are sent unchanged."""
        if body is None:
            return HttpRequest(method, uri)
        if isinstance(body, bytes):
            content = body
        elif isinstance(body, str):
            content = body.encode("utf-8")
        else:
            content = json.dumps(body).encode("utf-8")
        return HttpRequest(method, uri, headers={"Content-Type": "application/json"}, content=content)

    def _send(self, request: HttpRequest, cancellation: threading.Event | None = None):
        raise_if_cancelled(cancellation)
        return self._pipeline.run(request).http_response

    def _getter(self, cancellation: threading.Event | None):
        def get(uri: str):
            return self._send(self.create_request("GET", uri), cancellation)
        return get

    def execute(self, uri: str, method: str, body: Any = None,
                cancellation: threading.Event | None = None) -> Result:
        """Send one request.

        Returns:
            Success holding the raw response, which the caller must close. Error
            statuses are classified and the response is closed: a 404 on GET gives
            NotFound, anything else Failure.
        """
        response = self._send(self.create_request(method, uri, body), cancellation)
        if not is_error(response):
            return Success(response)

        with closing(response):
            error = to_request_error(response, uri)
            if method.upper() == "GET" and response.status_code == NOT_FOUND:
                return NotFound(error)
            return Failure(error)

    # -- reads --

    def try_get_content(self, uri: str, cancellation: threading.Event | None = None) -> Result:
        result = self.execute(uri, "GET", cancellation=cancellation)
        if not isinstance(result, Success):
            return result
        with closing(result.value) as response:
            return Success(read_body(response))

    def get_content(self, uri: str, cancellation: threading.Event | None = None) -> bytes:
        """GET the raw body. Raises the classified error on any error status, 404 included."""
        return self.try_get_content(uri, cancellation).unwrap()

    def get_content_or_none(self, uri: str, cancellation: threading.Event | None = None) -> bytes | None:
        """GET the raw body, or None if the resource does not exist."""
        result = self.try_get_content(uri, cancellation)
        if isinstance(result, NotFound):
            return None
        return result.unwrap()

    def try_get_json_object(self, uri: str, cancellation: threading.Event | None = None) -> Result:
        result = self.try_get_content(uri, cancellation)
        if not isinstance(result, Success):
            return result
        return Success(_parse_json_object(result.value))

    def get_json_object(self, uri: str, cancellation: threading.Event | None = None) -> dict[str, Any]:
        """GET a JSON object.

        Raises:
            ArmError: On any error status, 404 included
            ValueError: If the body is not a JSON object
        """
        return self.try_get_json_object(uri, cancellation).unwrap()

    def get_json_object_or_none(self, uri: str,
                                cancellation: threading.Event | None = None) -> dict[str, Any] | None:
        """GET a JSON object, or None if the resource does not exist."""
        result = self.try_get_json_object(uri, cancellation)
        if isinstance(result, NotFound):
            return None
        return result.unwrap()

    def list_json_objects(self, uri: str,
                          cancellation: threading.Event | None = None) -> Iterator[dict[str, Any]]:
        """Lazily yield the items of every page of a listing. See pagination.list_json_objects."""
        return list_json_objects(lambda page_uri: self.try_get_json_object(page_uri, cancellation),
                                 uri, cancellation)

    # -- writes --

    def _complete(self, result: Result) -> Result:
        """Release the terminal response of a successful operation."""
        if isinstance(result, Success):
            result.value.close()
            return Success()
        return result

    def try_put_content(self, uri: str, body: Any, wait_for_completion: bool = True,
                        cancellation: threading.Event | None = None) -> Result:
        """PUT body, then poll the operation and verify the resource unless wait_for_completion is False."""
        result = self.execute(uri, "PUT", body, cancellation)
        if not isinstance(result, Success) or not wait_for_completion:
            return self._complete(result)

        get = self._getter(cancellation)
        result = wait_for_long_running_operation(get, result.value, self.settings.poll_interval, cancellation)
        if isinstance(result, Success):
            result = verify_resource(get, result.value)
        return self._complete(result)

    def try_patch_content(self, uri: str, body: Any,
                          cancellation: threading.Event | None = None) -> Result:
        """PATCH body and poll the operation to completion."""
        result = self.execute(uri, "PATCH", body, cancellation)
        if not isinstance(result, Success):
            return result
        result = wait_for_long_running_operation(self._getter(cancellation), result.value,
                                                 self.settings.poll_interval, cancellation)
        return self._complete(result)

    def try_delete_resource(self, uri: str, wait_for_completion: bool = True,
                            cancellation: threading.Event | None = None) -> Result:
        """DELETE uri, polling the operation to completion unless wait_for_completion is False."""
        result = self.execute(uri, "DELETE", cancellation=cancellation)
        if isinstance(result, Success) and wait_for_completion:
            result = wait_for_long_running_operation(self._getter(cancellation), result.value,
                                                     self.settings.poll_interval, cancellation)
        return self._complete(result)

    def _raise_unless_pricing_tier(self, method: str, uri: str, result: Result) -> None:
        if isinstance(result, Success):
            return
        if _is_pricing_tier_error(result.error):
            logger.debug("Ignoring %s %s: method not allowed in pricing tier", method, uri)
            return
        raise result.error

    def put_content(self, uri: str, body: Any, wait_for_completion: bool = True,
                    cancellation: threading.Event | None = None) -> None:
        """PUT body and wait for the resource to deploy.

        Raises:
            ArmError: On failure, except MethodNotAllowedInPricingTier which is ignored
        """
        result = self.try_put_content(uri, body, wait_for_completion, cancellation)
        self._raise_unless_pricing_tier("PUT", uri, result)

    def patch_content(self, uri: str, body: Any, cancellation: threading.Event | None = None) -> None:
        result = self.try_patch_content(uri, body, cancellation)
        self._raise_unless_pricing_tier("PATCH", uri, result)

    def delete_resource(self, uri: str, wait_for_completion: bool = True,
                        cancellation: threading.Event | None = None) -> None:
        result = self.try_delete_resource(uri, wait_for_completion, cancellation)
        self._raise_unless_pricing_tier("DELETE", uri, result)
