"""Pipeline policies owned by this package."""

from __future__ import annotations

import logging
import time

from azure.core.pipeline import PipelineRequest, PipelineResponse
from azure.core.pipeline.policies import SansIOHTTPPolicy

from arm_http.responses import response_text

logger = logging.getLogger(__name__)

_START_KEY = "arm_http.request_start"


def _is_json(headers) -> bool:
    return "application/json" in (headers.get("Content-Type") or "").lower()


def _describe_content(headers, content) -> str:
    if not _is_json(headers):
        return "<non-json>"
    if not content:
        return "<null>"
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return str(content)


class RequestLoggingPolicy(SansIOHTTPPolicy):
    """Log every request and its response at DEBUG, with the round-trip duration.

    With log_content, JSON request and response bodies are logged as well. Other
    bodies are logged as "<non-json>" and missing ones as "<null>".
    """

    def __init__(self, log_content: bool = False) -> None:
        self.log_content = log_content

    def _should_log_content(self) -> bool:
        return self.log_content and logger.isEnabledFor(logging.DEBUG)

    def on_request(self, request: PipelineRequest) -> None:
        http_request = request.http_request
        logger.debug("Starting request %s %s", http_request.method, http_request.url)
        if self._should_log_content():
            logger.debug("Request content: %s", _describe_content(http_request.headers, http_request.content))
        request.context[_START_KEY] = time.monotonic()

    def on_response(self, request: PipelineRequest, response: PipelineResponse) -> None:
        start = request.context.get(_START_KEY)
        duration = time.monotonic() - start if start is not None else 0.0
        http_response = response.http_response
        logger.debug(
            "Received response %s %s: status %s in %.3fs",
            request.http_request.method, request.http_request.url,
            http_response.status_code, duration,
        )
        if self._should_log_content():
            content = response_text(http_response) if _is_json(http_response.headers) else None
            logger.debug("Response content: %s", _describe_content(http_response.headers, content))
