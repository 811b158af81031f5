"""Lazy, restartable listing of a folder's children."""

from __future__ import annotations

from typing import Callable, Iterator, Optional

from .drive_item import DriveFile, DriveFolder

PageFetcher = Callable[
    [Optional[str]],
    tuple[list[DriveFolder | DriveFile], Optional[str]],
]


class ChildListing:
    """
    Iterable over the children of one folder.

    Nothing is fetched until iteration starts, and every new iteration queries
    Drive again from the first page. By default only the first page is
    returned; with `all_pages=True` continuation tokens are followed until
    Drive reports no more pages.
    """

    def __init__(self, fetch_page: PageFetcher, *, all_pages: bool = False) -> None:
        self._fetch_page = fetch_page
        self._all_pages = all_pages

    def __iter__(self) -> Iterator[DriveFolder | DriveFile]:
        page_token: Optional[str] = None
        while True:
            items, page_token = self._fetch_page(page_token)
            yield from items
            if not self._all_pages or not page_token:
                return

    def to_list(self) -> list[DriveFolder | DriveFile]:
        return list(self)
