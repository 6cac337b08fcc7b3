"""Page number stamp."""

from __future__ import annotations

from typing import Any

from ..enums import PagePosition
from ..exceptions import InvalidArgumentError
from .base import StampContent
from .text import TextStamp


class PageNumbers(TextStamp):
    """Stamp ``"Page n of count"`` style labels.

    ``start_offset`` pages at the front and ``end_offset`` pages at the back
    are skipped and excluded from the numbering, so with a start offset of 1
    the second physical page is labelled page 1.  The offsets are a page
    selection of their own and cannot be combined with ``pages``.
    """

    PREFIX = "Page "
    DIVIDER = " of "
    POSTFIX = ""
    DEFAULT_POSITION = PagePosition.BOTTOM_RIGHT
    DEFAULT_OFFSET = (-30.0, 10.0)

    def __init__(
        self,
        prefix: str | None = None,
        divider: str | None = None,
        postfix: str | None = None,
        *,
        start_offset: int = 0,
        end_offset: int = 0,
        **options: Any,
    ) -> None:
        if options.get("pages") is not None and (start_offset or end_offset):
            raise InvalidArgumentError("Pass either pages or start/end offsets to PageNumbers, not both")
        super().__init__("", **options)
        self.prefix = self.PREFIX if prefix is None else prefix
        self.divider = self.DIVIDER if divider is None else divider
        self.postfix = self.POSTFIX if postfix is None else postfix
        if self.pages is None:
            self.set_page_offset(start_offset, end_offset)

    def set_prefix(self, prefix: str) -> "PageNumbers":
        self.prefix = prefix
        return self

    def set_divider(self, divider: str) -> "PageNumbers":
        self.divider = divider
        return self

    def set_postfix(self, postfix: str) -> "PageNumbers":
        self.postfix = postfix
        return self

    def label(self, page_number: int, page_count: int) -> str:
        offset = self.page_selector.get_offset()
        number = page_number - offset["start"]
        total = page_count - offset["start"] - offset["end"]
        return f"{self.prefix}{number}{self.divider}{total}{self.postfix}"

    def stamp_callback(self, page_number: int, page_count: int, page: Any, stamp: StampContent) -> bool:
        stamp.text = self.label(page_number, page_count)  # type: ignore[attr-defined]
        return bool(stamp.text)  # type: ignore[attr-defined]


__all__ = ["PageNumbers"]
