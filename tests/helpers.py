"""Scripted stand-ins for the azure-core pipeline and its responses."""

import json
from types import SimpleNamespace

from requests.structures import CaseInsensitiveDict

ARM = "https://management.azure.com"
SERVICE_URI = (
    f"{ARM}/subscriptions/sub-1/resourceGroups/rg-1"
    "/providers/Microsoft.ApiManagement/service/apim-1"
)


class FakeResponse:
    """Minimal azure.core.rest.HttpResponse: status, headers, read() and close()."""

    def __init__(self, status_code=200, body=b"", headers=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.status_code = status_code
        self.headers = CaseInsensitiveDict(headers or {})
        self._body = body
        self.close_count = 0

    def read(self):
        return self._body

    def close(self):
        self.close_count += 1


def accepted(location, retry_after=None):
    headers = {"Location": location}
    if retry_after is not None:
        headers["Retry-After"] = retry_after
    return FakeResponse(202, headers=headers)


def error(status_code, code=None):
    body = {"error": {"code": code, "message": "failed"}} if code else b""
    return FakeResponse(status_code, body)


class FakePipeline:
    """Returns the scripted responses in order and records every request sent."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def run(self, request, **kwargs):
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return SimpleNamespace(http_request=request, http_response=response)

    @property
    def calls(self):
        return [(r.method, r.url) for r in self.requests]
