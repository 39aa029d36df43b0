"""Retry rules specific to the Azure Resource Manager.

ArmRetryPolicy keeps everything azure-core's RetryPolicy already retries (connection
errors, 408, 5xx, Retry-After on idempotent methods) and adds the cases ARM reports
as transient through status codes the base policy treats as final.
"""

from __future__ import annotations

import logging

from azure.core.exceptions import AzureError
from azure.core.pipeline.policies import RetryPolicy

from arm_http.classifier import has_specific_error
from arm_http.config import ClientSettings

logger = logging.getLogger(__name__)

MANAGEMENT_API_REQUEST_FAILED = "ManagementApiRequestFailed"


def should_retry(response, exception: BaseException | None = None) -> bool:
    """Decide whether an ARM response is transient, beyond the base policy's rules.

    Args:
        response: The HTTP response, or None if the request raised
        exception: The exception raised while sending, if any

    Returns:
        True for 412 and 429, and for 409/422 carrying ManagementApiRequestFailed.
        False otherwise, including when the response can no longer be inspected.
    """
    if response is None:
        return False

    try:
        status = response.status_code
        if status in (409, 422):
            return has_specific_error(response, MANAGEMENT_API_REQUEST_FAILED)
        return status in (412, 429)
    except (AzureError, ValueError, TypeError) as exc:
        logger.debug("Could not inspect response for retry: %s", exc)
        return False


class ArmRetryPolicy(RetryPolicy):
    """azure-core RetryPolicy extended with should_retry()."""

    def __init__(self, settings: ClientSettings | None = None, **kwargs) -> None:
        settings = settings or ClientSettings()
        kwargs.setdefault("retry_total", settings.retry_total)
        kwargs.setdefault("retry_backoff_factor", settings.retry_backoff_factor)
        kwargs.setdefault("retry_backoff_max", settings.retry_backoff_max)
        super().__init__(**kwargs)

    def is_retry(self, settings, response) -> bool:
        if should_retry(response.http_response):
            logger.debug("Retrying %s %s after status %s",
                         response.http_request.method, response.http_request.url,
                         response.http_response.status_code)
            return True
        return super().is_retry(settings, response)
