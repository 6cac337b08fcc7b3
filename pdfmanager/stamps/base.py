"""Shared placement logic for page stamps."""

from __future__ import annotations

import logging
from typing import Any

from ..backends.base import BackendDocument
from ..enums import Horizontal, PagePosition, Vertical
from ..pages import PageSelector

LOGGER = logging.getLogger("pdfmanager.stamps")


def _selector(pages: Any) -> PageSelector | None:
    if pages is None or isinstance(pages, PageSelector):
        return pages
    return PageSelector(pages)


def page_box(page: Any) -> tuple[float, float, float, float]:
    """Return ``(left, bottom, width, height)`` of the page media box."""

    box = page.mediabox
    return float(box.left), float(box.bottom), float(box.width), float(box.height)


def resolve_anchor(
    position: PagePosition,
    page_width: float,
    page_height: float,
    stamp_width: float,
    stamp_height: float,
) -> tuple[float, float]:
    """Lower-left corner of a stamp box anchored at *position*.

    Coordinates are relative to the media box origin, y pointing up.
    """

    if position.horizontal is Horizontal.LEFT:
        x = 0.0
    elif position.horizontal is Horizontal.CENTRE:
        x = (page_width - stamp_width) / 2
    else:
        x = page_width - stamp_width

    if position.vertical is Vertical.BOTTOM:
        y = 0.0
    elif position.vertical is Vertical.MIDDLE:
        y = (page_height - stamp_height) / 2
    else:
        y = page_height - stamp_height
    return x, y


class StampContent:
    """Renderable payload created once per stamping pass."""

    @property
    def width(self) -> float:
        raise NotImplementedError

    @property
    def height(self) -> float:
        raise NotImplementedError

    def draw(self, page: Any, x: float, y: float) -> None:
        """Draw the content with its lower-left corner at ``(x, y)``."""
        raise NotImplementedError


class Stampable:
    """Base class for anything that can be stamped onto document pages.

    Subclasses supply the content through :meth:`create_stamp` and may
    customise it per page in :meth:`stamp_callback`; the page walk, page
    selection and anchor resolution live here.
    """

    DEFAULT_POSITION = PagePosition.TOP_CENTRE
    DEFAULT_OFFSET = (0.0, 0.0)

    def __init__(
        self,
        *,
        position: PagePosition | str | None = None,
        offset_x: float | None = None,
        offset_y: float | None = None,
        pages: Any = None,
    ) -> None:
        self.position = PagePosition.parse(position) if position is not None else self.DEFAULT_POSITION
        self.offset_x = float(self.DEFAULT_OFFSET[0] if offset_x is None else offset_x)
        self.offset_y = float(self.DEFAULT_OFFSET[1] if offset_y is None else offset_y)
        self.pages: PageSelector | None = _selector(pages)

    def set_position(self, position: PagePosition | str) -> "Stampable":
        self.position = PagePosition.parse(position)
        return self

    def set_offset(self, x: float = 0, y: float = 0) -> "Stampable":
        self.offset_x = float(x)
        self.offset_y = float(y)
        return self

    def set_x_offset(self, x: float) -> "Stampable":
        self.offset_x = float(x)
        return self

    def set_y_offset(self, y: float) -> "Stampable":
        self.offset_y = float(y)
        return self

    def set_pages(self, pages: Any) -> "Stampable":
        self.pages = _selector(pages)
        return self

    def set_page_offset(self, start: int = 0, end: int = 0) -> "Stampable":
        self.pages = PageSelector().set_offset(start, end)
        return self

    @property
    def page_selector(self) -> PageSelector:
        return self.pages if self.pages is not None else PageSelector()

    def create_stamp(self, document: BackendDocument) -> StampContent:
        raise NotImplementedError

    def stamp_callback(self, page_number: int, page_count: int, page: Any, stamp: StampContent) -> bool:
        """Per-page hook; return ``False`` to leave the page untouched."""

        return True

    def stamp(self, document: BackendDocument) -> BackendDocument:
        content = self.create_stamp(document)
        page_count = document.page_count
        stamped = 0
        for page_number, page in enumerate(document.iter_pages(), start=1):
            if self.pages is not None and not self.pages.contains(page_number, page_count):
                continue
            if not self.stamp_callback(page_number, page_count, page, content):
                continue
            self.render(page, content)
            stamped += 1
        LOGGER.debug("%s stamped %d of %d pages", type(self).__name__, stamped, page_count)
        return document

    def render(self, page: Any, content: StampContent) -> None:
        left, bottom, width, height = page_box(page)
        x, y = resolve_anchor(self.position, width, height, content.width, content.height)
        content.draw(page, left + x + self.offset_x, bottom + y + self.offset_y)


__all__ = ["StampContent", "Stampable", "page_box", "resolve_anchor"]
