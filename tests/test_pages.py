from __future__ import annotations

import pytest

from pdfmanager.enums import Pages
from pdfmanager.pages import OffsetRange, PageClass, PageList, PageSelector


def _selected(selector: PageSelector, count: int) -> list[int]:
    return [page for page in range(1, count + 1) if selector.contains(page, count)]


def test_default_selector_covers_every_page() -> None:
    selector = PageSelector()
    assert _selected(selector, 4) == [1, 2, 3, 4]
    assert selector.get_offset() == {"start": 0, "end": 0}
    assert selector.page is None
    assert selector.page_numbers is None


def test_offset_range_excludes_leading_and_trailing_pages() -> None:
    selector = PageSelector({"start": 1, "end": 2})
    assert _selected(selector, 6) == [2, 3, 4]


def test_offsets_that_cover_the_document_select_nothing() -> None:
    assert _selected(PageSelector({"start": 3, "end": 3}), 5) == []


def test_negative_offsets_are_clamped() -> None:
    selector = PageSelector().set_offset(-4, -1)
    assert selector.get_offset() == {"start": 0, "end": 0}


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (Pages.ALL, [1, 2, 3, 4, 5]),
        (Pages.FIRST, [1]),
        (Pages.LAST, [5]),
        (Pages.EVEN, [2, 4]),
        (Pages.ODD, [1, 3, 5]),
    ],
)
def test_page_classes(kind: Pages, expected: list[int]) -> None:
    assert _selected(PageSelector(kind), 5) == expected


def test_page_class_accepts_string_value() -> None:
    assert PageSelector("even").page is Pages.EVEN


def test_unknown_page_class_is_rejected() -> None:
    with pytest.raises(ValueError):
        PageSelector("sometimes")


def test_explicit_numbers() -> None:
    selector = PageSelector([3, 1, 9])
    assert _selected(selector, 5) == [1, 3]
    assert selector.page_numbers == [1, 3, 9]


def test_empty_iterable_keeps_default_mode() -> None:
    assert PageSelector([]).mode == OffsetRange(0, 0)


def test_setting_a_mode_replaces_the_previous_one() -> None:
    selector = PageSelector({"start": 2, "end": 0})
    selector.set_page(Pages.LAST)
    assert isinstance(selector.mode, PageClass)
    assert selector.get_offset() == {"start": 0, "end": 0}

    selector.set_page_numbers([2])
    assert isinstance(selector.mode, PageList)
    assert selector.page is None
    assert _selected(selector, 3) == [2]


def test_to_dict() -> None:
    assert PageSelector({"start": 1}).to_dict() == {
        "offset": {"start": 1, "end": 0},
        "page": None,
        "pageNumbers": None,
    }
    assert PageSelector(Pages.ODD).to_dict() == {"offset": None, "page": "odd", "pageNumbers": None}


def test_copy_constructor_and_equality() -> None:
    original = PageSelector([1, 2])
    assert PageSelector(original) == original
    assert PageSelector(original) != PageSelector(Pages.ALL)
