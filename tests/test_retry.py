"""Tests for the ARM retry rules."""

from unittest.mock import MagicMock

import pytest
from azure.core.exceptions import AzureError
from azure.core.rest import HttpRequest

from arm_http.config import ClientSettings
from arm_http.retry import ArmRetryPolicy, should_retry

from helpers import ARM, FakeResponse, error


class TestShouldRetry:
    # Tests that 429 is retried whatever the body.
    @pytest.mark.parametrize("body", [b"", b"garbage", {"error": {"code": "TooManyRequests"}}])
    def test_429(self, body):
        assert should_retry(FakeResponse(429, body))

    # Tests that 412 is retried.
    def test_412(self):
        assert should_retry(FakeResponse(412))

    # Tests that 409 and 422 are retried only for ManagementApiRequestFailed.
    @pytest.mark.parametrize("status", [409, 422])
    def test_management_api_request_failed(self, status):
        assert should_retry(error(status, "ManagementApiRequestFailed"))
        assert not should_retry(error(status, "Conflict"))
        assert not should_retry(FakeResponse(status))

    # Tests that the code alone is not enough on other statuses.
    def test_code_on_other_status(self):
        assert not should_retry(error(400, "ManagementApiRequestFailed"))

    # Tests that other statuses defer to the base policy.
    @pytest.mark.parametrize("status", [200, 400, 404, 500])
    def test_other_status(self, status):
        assert not should_retry(FakeResponse(status))

    # Tests that an exception without a response is left to the base policy.
    def test_no_response(self):
        assert not should_retry(None, ConnectionError("reset"))

    # Tests that failures while inspecting the response mean no retry.
    def test_inspection_failure(self):
        response = FakeResponse(409)
        response.read = MagicMock(side_effect=AzureError("stream consumed"))
        assert not should_retry(response)


def _pipeline_response(response, method="GET"):
    return MagicMock(http_request=HttpRequest(method, f"{ARM}/x"), http_response=response)


class TestArmRetryPolicy:
    # Tests that settings feed the base policy's counters.
    def test_settings(self):
        policy = ArmRetryPolicy(ClientSettings(retry_total=2, retry_backoff_factor=0.5, retry_backoff_max=3))
        assert policy.total_retries == 2
        assert policy.backoff_factor == 0.5
        assert policy.backoff_max == 3

    # Tests that ARM-specific statuses are retried even on methods the base policy skips.
    def test_arm_rule_on_patch(self):
        policy = ArmRetryPolicy()
        settings = policy.configure_retries({})
        response = _pipeline_response(error(409, "ManagementApiRequestFailed"), method="PATCH")
        assert policy.is_retry(settings, response)

    # Tests that the base policy's own rules still apply.
    def test_base_rule(self):
        policy = ArmRetryPolicy()
        settings = policy.configure_retries({})
        assert policy.is_retry(settings, _pipeline_response(FakeResponse(503)))

    # Tests that a plain conflict is not retried.
    def test_plain_conflict(self):
        policy = ArmRetryPolicy()
        settings = policy.configure_retries({})
        assert not policy.is_retry(settings, _pipeline_response(error(409, "Conflict")))
