"""Named defaults and client settings for ARM request execution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

VERSION = "0.1.0"
USER_AGENT = f"arm-http/{VERSION}"

MANAGEMENT_HOST = "management.azure.com"
MANAGEMENT_SCOPE = "https://management.azure.com/.default"

DEFAULT_POLL_INTERVAL = 1  # seconds
MAX_RETRIES = 5
INITIAL_BACKOFF = 1  # seconds
MAX_BACKOFF = 120  # seconds
REQUEST_TIMEOUT = 120  # seconds

ENV_PREFIX = "ARM_HTTP_"


@dataclass(frozen=True)
class ClientSettings:
    """Knobs shared by the retry policy, the transport and the LRO poller.

    Attributes:
        poll_interval: Seconds to wait between LRO polls when the server sends no Retry-After
        retry_total: Maximum number of retries performed by the retry policy
        retry_backoff_factor: Base of the retry policy's exponential backoff, in seconds
        retry_backoff_max: Upper bound of a single retry delay, in seconds
        timeout: Connection and read timeout of the transport, in seconds
        log_content: Log JSON request and response bodies at DEBUG
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    retry_total: int = MAX_RETRIES
    retry_backoff_factor: float = INITIAL_BACKOFF
    retry_backoff_max: float = MAX_BACKOFF
    timeout: float = REQUEST_TIMEOUT
    log_content: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientSettings:
        """Build settings from ARM_HTTP_* environment variables.

        Unset variables keep their defaults. Values that do not parse raise ValueError
        naming the variable.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            poll_interval=_read(env, "POLL_INTERVAL", float, defaults.poll_interval),
            retry_total=_read(env, "RETRY_TOTAL", int, defaults.retry_total),
            retry_backoff_factor=_read(env, "RETRY_BACKOFF_FACTOR", float, defaults.retry_backoff_factor),
            retry_backoff_max=_read(env, "RETRY_BACKOFF_MAX", float, defaults.retry_backoff_max),
            timeout=_read(env, "TIMEOUT", float, defaults.timeout),
            log_content=_read_flag(env, "LOG_CONTENT", defaults.log_content),
        )


def _read(env: Mapping[str, str], name: str, parse, default):
    key = f"{ENV_PREFIX}{name}"
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = parse(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{key} must not be negative, got {raw!r}")
    return value


def _read_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    key = f"{ENV_PREFIX}{name}"
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes"):
        return True
    if value in ("0", "false", "no"):
        return False
    raise ValueError(f"{key} must be true or false, got {raw!r}")
