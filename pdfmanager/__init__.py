"""
PDF Manager - assemble, fill, stamp and store PDF documents.

Quick Start:
    >>> from pdfmanager import LocalStorage, PageNumbers, PdfManager
    >>> manager = PdfManager(LocalStorage("storage"))
    >>> manager.add_file("forms/application.pdf")
    >>> manager.set_data({"name": "Acme"}).set_page_numbers(PageNumbers())
    >>> manager.build("application")
    'pdf/generated/application.pdf'

Main Classes:
    - PdfManager: Build pipeline (merge, fill, modify fields, stamp, save)
    - LocalStorage: Filesystem disk used for sources and output
    - ViewRenderer: Render jinja2 templates to A4 PDFs

Stamps:
    - TextStamp, PageNumbers, PdfStamp

For CLI usage, use the 'pdf-manager' command after installation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from .backends import FieldSet, FormEditor, FormField, PypdfBackend, PypdfDocument
from .config import Settings, load_settings
from .enums import FieldModifier, PagePosition, Pages
from .exceptions import (
    FileMergeError,
    FileReadError,
    FileSaveError,
    InvalidArgumentError,
    InvalidFieldError,
    InvalidFileError,
    InvalidMimeTypeError,
    MissingFileError,
    PdfManagerError,
)
from .filenames import append_extension, generate_file_name
from .forms import FieldModifierPolicy
from .manager import PdfManager
from .pages import PageSelector
from .stamps import PageNumbers, PdfStamp, Stampable, TextStamp
from .storage import LocalStorage, Storage
from .views import ViewRenderer

__version__ = "1.0.0"


def build_pdf(
    files: Iterable[str | Path],
    file_name: str,
    *,
    storage_root: str | Path | None = None,
    data: Mapping[str, Any] | None = None,
    page_numbers: bool = False,
    ignore_missing_fields: bool = False,
) -> Path:
    """Build *files* into one PDF and return the absolute output path."""

    settings = load_settings()
    storage = LocalStorage(storage_root if storage_root is not None else settings.storage_root)
    manager = PdfManager(storage, settings=settings)
    manager.add_files(files)
    if data:
        manager.set_data(data)
    if page_numbers:
        manager.set_page_numbers()
    return storage.path(manager.build(file_name, ignore_missing_fields))


__all__ = [
    "FieldModifier",
    "FieldModifierPolicy",
    "FieldSet",
    "FileMergeError",
    "FileReadError",
    "FileSaveError",
    "FormEditor",
    "FormField",
    "InvalidArgumentError",
    "InvalidFieldError",
    "InvalidFileError",
    "InvalidMimeTypeError",
    "LocalStorage",
    "MissingFileError",
    "PageNumbers",
    "PagePosition",
    "PageSelector",
    "Pages",
    "PdfManager",
    "PdfManagerError",
    "PdfStamp",
    "PypdfBackend",
    "PypdfDocument",
    "Settings",
    "Stampable",
    "Storage",
    "TextStamp",
    "ViewRenderer",
    "append_extension",
    "build_pdf",
    "generate_file_name",
    "load_settings",
    "__version__",
]
