"""Walk cursor-paginated list endpoints."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterator

from arm_http.exceptions import ManagementRequestError
from arm_http.polling import raise_if_cancelled
from arm_http.responses import parse_absolute_uri
from arm_http.results import Result, Success

logger = logging.getLogger(__name__)


def list_json_objects(fetch: Callable[[str], Result], uri: str,
                      cancellation: threading.Event | None = None) -> Iterator[dict[str, Any]]:
    """Yield every item of a paginated listing, one page request at a time.

    Pages look like {"value": [...], "nextLink": "https://..."}. Items that are not
    JSON objects are dropped. The walk stops when nextLink is missing or not an
    absolute URI, or when the service reports the listing is unavailable in its
    pricing tier; items already yielded stay valid in that case.

    Args:
        fetch: Returns the result of GETting a URI as a JSON object
        uri: First page
        cancellation: Checked before each page request

    Raises:
        ArmError: If a page request fails for any other reason
    """
    next_link: str | None = uri
    while next_link is not None:
        raise_if_cancelled(cancellation)
        result = fetch(next_link)
        if not isinstance(result, Success):
            error = result.error
            if isinstance(error, ManagementRequestError) and error.is_method_not_allowed_in_pricing_tier:
                logger.debug("Listing %s is not available in this pricing tier", next_link)
                return
            raise error

        page = result.value
        values = page.get("value")
        if not isinstance(values, list):
            values = []
        for value in values:
            if isinstance(value, dict):
                yield value

        next_link = parse_absolute_uri(page.get("nextLink"))
