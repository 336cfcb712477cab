"""Navigation links for paginated responses."""

from typing import Dict, Optional

from starlette.datastructures import URL

from stationdesk.export.paginator import Page


def page_links(url: URL, page: Page) -> Dict[str, Optional[str]]:
    """Links to self/first/previous/next/last, keeping other query params."""

    def link(number: int) -> str:
        return str(url.include_query_params(page=number, per_page=page.per_page))

    last = max(page.total_pages, 1)
    return {
        "self": link(page.page),
        "first": link(1),
        "previous": link(page.page - 1) if page.page > 1 else None,
        "next": link(page.page + 1) if page.page < page.total_pages else None,
        "last": link(last),
    }


def with_links(url: URL, page: Page) -> Page:
    return page.model_copy(update={"links": page_links(url, page)})
