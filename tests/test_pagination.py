"""Tests for walking paginated listings."""

import threading
from unittest.mock import MagicMock

import pytest

from arm_http.exceptions import ManagementRequestError, OperationCancelledError
from arm_http.pagination import list_json_objects
from arm_http.results import Failure, NotFound, Success

from helpers import ARM

PAGE_1 = f"{ARM}/apis?api-version=2024-05-01"
PAGE_2 = f"{ARM}/apis?api-version=2024-05-01&$skiptoken=2"
PAGE_3 = f"{ARM}/apis?api-version=2024-05-01&$skiptoken=3"


def _error(code, status=400, uri=PAGE_2):
    return ManagementRequestError("failed", status, code, uri)


def _fetcher(pages):
    """fetch() that serves pages by URI and records the order of requests."""
    return MagicMock(side_effect=lambda uri: pages[uri])


class TestListJsonObjects:
    # Tests that items from every page are yielded in order.
    def test_three_pages(self):
        fetch = _fetcher({
            PAGE_1: Success({"value": [{"name": "a"}, {"name": "b"}], "nextLink": PAGE_2}),
            PAGE_2: Success({"value": [{"name": "c"}], "nextLink": PAGE_3}),
            PAGE_3: Success({"value": [{"name": "d"}]}),
        })
        names = [item["name"] for item in list_json_objects(fetch, PAGE_1)]
        assert names == ["a", "b", "c", "d"]
        assert [c.args[0] for c in fetch.call_args_list] == [PAGE_1, PAGE_2, PAGE_3]

    # Tests that a pricing tier error ends the listing after the items already yielded.
    def test_pricing_tier_error_stops_cleanly(self):
        fetch = _fetcher({
            PAGE_1: Success({"value": [{"name": "a"}], "nextLink": PAGE_2}),
            PAGE_2: Failure(_error("MethodNotAllowedInPricingTier")),
            PAGE_3: Success({"value": [{"name": "never"}]}),
        })
        assert list(list_json_objects(fetch, PAGE_1)) == [{"name": "a"}]
        assert fetch.call_count == 2

    # Tests that other errors are raised.
    def test_other_error_raises(self):
        fetch = _fetcher({
            PAGE_1: Success({"value": [{"name": "a"}], "nextLink": PAGE_2}),
            PAGE_2: Failure(_error("ValidationError")),
        })
        items = list_json_objects(fetch, PAGE_1)
        assert next(items) == {"name": "a"}
        with pytest.raises(ManagementRequestError) as exc_info:
            next(items)
        assert exc_info.value.error_code == "ValidationError"

    # Tests that a missing first page is an error, not an empty listing.
    def test_not_found_raises(self):
        fetch = _fetcher({PAGE_1: NotFound(_error("ResourceNotFound", 404, PAGE_1))})
        with pytest.raises(ManagementRequestError):
            list(list_json_objects(fetch, PAGE_1))

    # Tests that a page without value is empty and non-object entries are dropped.
    def test_missing_value_and_malformed_items(self):
        fetch = _fetcher({
            PAGE_1: Success({"nextLink": PAGE_2}),
            PAGE_2: Success({"value": [1, "two", None, [3], {"name": "ok"}], "nextLink": PAGE_3}),
            PAGE_3: Success({"value": "not a list"}),
        })
        assert list(list_json_objects(fetch, PAGE_1)) == [{"name": "ok"}]

    # Tests that a relative or non-string nextLink ends the listing.
    @pytest.mark.parametrize("next_link", ["/apis?page=2", 42, "", None])
    def test_invalid_next_link_stops(self, next_link):
        fetch = _fetcher({PAGE_1: Success({"value": [{"name": "a"}], "nextLink": next_link})})
        assert list(list_json_objects(fetch, PAGE_1)) == [{"name": "a"}]
        assert fetch.call_count == 1

    # Tests that nothing is fetched until iteration starts and stopping early fetches no more pages.
    def test_lazy_and_early_stop(self):
        fetch = _fetcher({
            PAGE_1: Success({"value": [{"name": "a"}, {"name": "b"}], "nextLink": PAGE_2}),
            PAGE_2: Success({"value": [{"name": "c"}]}),
        })
        items = list_json_objects(fetch, PAGE_1)
        fetch.assert_not_called()
        assert next(items) == {"name": "a"}
        items.close()
        assert fetch.call_count == 1

    # Tests that cancellation is checked before each page.
    def test_cancellation_between_pages(self):
        cancellation = threading.Event()
        fetch = _fetcher({
            PAGE_1: Success({"value": [{"name": "a"}], "nextLink": PAGE_2}),
            PAGE_2: Success({"value": [{"name": "b"}]}),
        })
        items = list_json_objects(fetch, PAGE_1, cancellation)
        assert next(items) == {"name": "a"}
        cancellation.set()
        with pytest.raises(OperationCancelledError):
            next(items)
        assert fetch.call_count == 1
