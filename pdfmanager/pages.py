"""Page selection predicates used to scope stamps to part of a document."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from .enums import Pages


@dataclass(frozen=True)
class OffsetRange:
    """Skip ``start`` pages at the front and ``end`` pages at the back."""

    start: int = 0
    end: int = 0

    def contains(self, page_number: int, page_count: int) -> bool:
        return self.start < page_number <= page_count - self.end


@dataclass(frozen=True)
class PageClass:
    kind: Pages

    def contains(self, page_number: int, page_count: int) -> bool:
        if self.kind is Pages.ALL:
            return True
        if self.kind is Pages.FIRST:
            return page_number == 1
        if self.kind is Pages.LAST:
            return page_number == page_count
        if self.kind is Pages.EVEN:
            return page_number % 2 == 0
        return page_number % 2 == 1


@dataclass(frozen=True)
class PageList:
    numbers: frozenset[int]

    def contains(self, page_number: int, page_count: int) -> bool:
        return page_number in self.numbers


SelectorMode = Union[OffsetRange, PageClass, PageList]


class PageSelector:
    """Predicate deciding whether a 1-based page is in scope.

    Exactly one mode is active at a time: an offset range (the default,
    covering every page), a named page class or an explicit set of page
    numbers.  Each setter replaces whatever mode was active before.

    The constructor accepts any of the shapes callers commonly pass around::

        PageSelector()                         # every page
        PageSelector(Pages.ODD)                # or "odd"
        PageSelector({"start": 1, "end": 0})   # skip the cover page
        PageSelector([1, 3, 5])
    """

    def __init__(self, pages: Any = None) -> None:
        self._mode: SelectorMode = OffsetRange()
        if pages is None:
            return
        if isinstance(pages, PageSelector):
            self._mode = pages.mode
        elif isinstance(pages, Pages):
            self.set_page(pages)
        elif isinstance(pages, str):
            self.set_page(Pages(pages.strip().lower()))
        elif isinstance(pages, Mapping):
            self.set_offset(pages.get("start", 0) or 0, pages.get("end", 0) or 0)
        elif isinstance(pages, Iterable):
            numbers = list(pages)
            if numbers:
                self.set_page_numbers(numbers)
        else:
            raise TypeError(f"Unsupported page selection: {pages!r}")

    @property
    def mode(self) -> SelectorMode:
        return self._mode

    def set_offset(self, start: int = 0, end: int = 0) -> "PageSelector":
        self._mode = OffsetRange(max(0, int(start)), max(0, int(end)))
        return self

    def set_page(self, page: Pages | str) -> "PageSelector":
        self._mode = PageClass(Pages(page))
        return self

    def set_page_numbers(self, numbers: Iterable[int]) -> "PageSelector":
        self._mode = PageList(frozenset(int(number) for number in numbers))
        return self

    def get_offset(self) -> dict[str, int]:
        if isinstance(self._mode, OffsetRange):
            return {"start": self._mode.start, "end": self._mode.end}
        return {"start": 0, "end": 0}

    @property
    def page(self) -> Pages | None:
        return self._mode.kind if isinstance(self._mode, PageClass) else None

    @property
    def page_numbers(self) -> list[int] | None:
        if isinstance(self._mode, PageList):
            return sorted(self._mode.numbers)
        return None

    def contains(self, page_number: int, page_count: int) -> bool:
        return self._mode.contains(page_number, page_count)

    def to_dict(self) -> dict[str, Any]:
        offset = None
        if isinstance(self._mode, OffsetRange):
            offset = {"start": self._mode.start, "end": self._mode.end}
        page = self.page.value if self.page is not None else None
        return {"offset": offset, "page": page, "pageNumbers": self.page_numbers}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PageSelector):
            return NotImplemented
        return self._mode == other._mode

    def __repr__(self) -> str:
        return f"PageSelector({self._mode!r})"


__all__ = ["OffsetRange", "PageClass", "PageList", "PageSelector"]
