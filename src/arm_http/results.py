"""Outcome of a single operation: a value, an absent resource, or a classified failure.

Expected branches (404 on a read, soft-ignorable service errors) are returned as
values instead of raised, so callers can match on them:

    result = client.try_get_json_object(uri)
    if isinstance(result, NotFound):
        ...
    value = result.unwrap()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from arm_http.exceptions import ArmError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """The operation completed. value is None for operations with no payload."""

    value: T = None  # type: ignore[assignment]

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class NotFound:
    """The resource does not exist (HTTP 404 on a read)."""

    error: ArmError

    def unwrap(self) -> Any:
        raise self.error


@dataclass(frozen=True)
class Failure:
    """The operation failed with a classified error."""

    error: ArmError

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Success[T], NotFound, Failure]
