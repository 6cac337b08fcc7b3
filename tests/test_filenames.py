from __future__ import annotations

import re
from datetime import datetime

from pdfmanager.filenames import append_extension, generate_file_name


def test_append_extension_adds_missing_suffix() -> None:
    assert append_extension("report") == "report.pdf"


def test_append_extension_is_idempotent() -> None:
    assert append_extension(append_extension("report")) == "report.pdf"


def test_append_extension_never_replaces_another_extension() -> None:
    assert append_extension("notes.txt") == "notes.txt.pdf"
    assert append_extension("archive", ".zip") == "archive.zip"


def test_generate_file_name_layout() -> None:
    name = generate_file_name("pdf", prefix="invoice", postfix="draft", now=datetime(2024, 5, 1, 13, 45, 2))
    assert re.fullmatch(r"invoice_2024-05-01_134502_[0-9a-f-]{36}_draft\.pdf", name)


def test_generate_file_name_is_unique() -> None:
    assert generate_file_name("pdf") != generate_file_name("pdf")


def test_generate_file_name_custom_delimiter() -> None:
    name = generate_file_name("pdf", prefix="a", delimiter="-", now=datetime(2024, 1, 2, 3, 4, 5))
    assert name.startswith("a-2024-01-02-030405-")
