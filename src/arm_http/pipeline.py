"""Assemble the azure-core pipeline used by ArmClient."""

from __future__ import annotations

from azure.core.credentials import TokenCredential
from azure.core.pipeline import Pipeline
from azure.core.pipeline.policies import BearerTokenCredentialPolicy, UserAgentPolicy
from azure.core.pipeline.transport import HttpTransport, RequestsTransport
from azure.identity import ClientSecretCredential, DefaultAzureCredential

from arm_http.config import MANAGEMENT_SCOPE, USER_AGENT, ClientSettings
from arm_http.policies import RequestLoggingPolicy
from arm_http.retry import ArmRetryPolicy


def create_credential(client_id: str | None = None, client_secret: str | None = None,
                      tenant_id: str | None = None) -> TokenCredential:
    """Service principal credential when all three values are given, DefaultAzureCredential otherwise."""
    if client_id and client_secret and tenant_id:
        return ClientSecretCredential(tenant_id, client_id, client_secret)
    return DefaultAzureCredential()


def build_pipeline(credential: TokenCredential, settings: ClientSettings | None = None,
                   transport: HttpTransport | None = None) -> Pipeline:
    """Pipeline with user agent, ARM retry rules, bearer auth and request logging, in that order."""
    settings = settings or ClientSettings()
    if transport is None:
        transport = RequestsTransport(connection_timeout=settings.timeout, read_timeout=settings.timeout)
    policies = [
        UserAgentPolicy(user_agent=USER_AGENT),
        ArmRetryPolicy(settings),
        BearerTokenCredentialPolicy(credential, MANAGEMENT_SCOPE),
        RequestLoggingPolicy(log_content=settings.log_content),
    ]
    return Pipeline(transport=transport, policies=policies)
