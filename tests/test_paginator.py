"""Tests for NextToken page aggregation."""

from unittest.mock import MagicMock

import pytest

from stackctl.errors import TransportError
from stackctl.paginator import collect_pages


def test_collect_pages_follows_tokens_in_order():
    fetch = MagicMock(
        side_effect=[
            {"Items": ["a", "b"], "NextToken": "t1"},
            {"Items": ["c", "d"], "NextToken": "t2"},
            {"Items": ["e"]},
        ]
    )

    assert collect_pages(fetch, "Items") == ["a", "b", "c", "d", "e"]
    assert [c.args[0] for c in fetch.call_args_list] == [None, "t1", "t2"]


def test_collect_pages_tolerates_missing_items_key():
    fetch = MagicMock(side_effect=[{"NextToken": "t1"}, {"Items": ["a"], "NextToken": ""}])

    assert collect_pages(fetch, "Items") == ["a"]


def test_collect_pages_failure_drops_partial_by_default():
    fetch = MagicMock(
        side_effect=[{"Items": ["a"], "NextToken": "t1"}, TransportError("boom", code="Throttling")]
    )

    with pytest.raises(TransportError) as exc_info:
        collect_pages(fetch, "Items")

    assert exc_info.value.partial is None


def test_collect_pages_failure_can_keep_partial():
    fetch = MagicMock(
        side_effect=[
            {"Items": ["a", "b"], "NextToken": "t1"},
            TransportError("boom", code="Throttling"),
        ]
    )

    with pytest.raises(TransportError) as exc_info:
        collect_pages(fetch, "Items", keep_partial=True)

    assert exc_info.value.partial == ["a", "b"]
