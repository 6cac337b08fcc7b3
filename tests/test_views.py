from __future__ import annotations

from pathlib import Path

import pytest

from conftest import read_pdf
from pdfmanager.exceptions import MissingFileError
from pdfmanager.views import ViewRenderer, template_name


def test_template_name_mapping() -> None:
    assert template_name("invoice.summary") == "invoice/summary.html"
    assert template_name("letter") == "letter.html"
    assert template_name("mail/letter.html") == "mail/letter.html"


def test_render_produces_a4_portrait_pages(views_dir: Path) -> None:
    data = ViewRenderer(views_dir).render("invoice.summary", {"number": "INV-7", "total": "12.00"})
    reader = read_pdf(data)

    assert len(reader.pages) == 2
    box = reader.pages[0].mediabox
    assert round(float(box.width)) == 595
    assert round(float(box.height)) == 842
    text = reader.pages[0].extract_text()
    assert "Invoice INV-7" in text
    assert "12.00" in text
    assert "Terms" in reader.pages[1].extract_text()


def test_render_escapes_data(views_dir: Path) -> None:
    data = ViewRenderer(views_dir).render("letter", {"name": "Smith & <Sons>"})
    assert "Smith & <Sons>" in read_pdf(data).pages[0].extract_text()


def test_missing_view(views_dir: Path) -> None:
    with pytest.raises(MissingFileError):
        ViewRenderer(views_dir).render("nope.missing")
