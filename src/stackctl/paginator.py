"""Aggregate NextToken-paginated CloudFormation listings."""

from collections.abc import Callable

from stackctl.errors import TransportError


def collect_pages(
    fetch_page: Callable[[str | None], dict],
    items_key: str,
    keep_partial: bool = False,
) -> list:
    """Call ``fetch_page`` with each continuation token until none is returned.

    Items are accumulated in page order. If a fetch fails the TransportError is
    re-raised; with ``keep_partial`` the items gathered so far ride along on
    ``error.partial``.
    """
    items: list = []
    next_token = None

    while True:
        try:
            page = fetch_page(next_token)
        except TransportError as e:
            if keep_partial:
                e.partial = items
            raise

        items.extend(page.get(items_key, []))

        next_token = page.get("NextToken")
        if not next_token:
            break

    return items
