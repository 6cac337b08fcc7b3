"""
Custom exceptions for PDF Manager.

Every error raised by the library derives from :class:`PdfManagerError` so
callers can catch the whole family at once.  Subclasses carry the context
needed to report the failure (paths, field names, MIME types) and chain the
underlying engine error through ``__cause__``.
"""

from __future__ import annotations

from typing import Iterable


class PdfManagerError(Exception):
    """Base exception for all PDF Manager errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown PDF manager error occurred."


class MissingFileError(PdfManagerError):
    """Raised when a source file or view template does not exist."""

    def __init__(self, path: str | None = None, message: str = "") -> None:
        self.path = path
        if not message and path is not None:
            message = f"File not found: {path}"
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "File not found."


class InvalidMimeTypeError(PdfManagerError):
    """Raised when a source file is not of an allowed content type."""

    def __init__(self, mime_type: str, allowed_types: Iterable[str] = ("application/pdf",)) -> None:
        self.mime_type = mime_type
        self.allowed_types = tuple(allowed_types)
        allowed = ", ".join(f'"{value}"' for value in self.allowed_types)
        super().__init__(f"Invalid mime type `{mime_type}`. One of {allowed} expected")

    @property
    def default_message(self) -> str:
        return "Invalid mime type."


class FileReadError(PdfManagerError):
    """Raised when a file cannot be read at the stream level."""

    def __init__(self, path: str | None = None, message: str = "") -> None:
        self.path = path
        if not message and path is not None:
            message = f"Error reading file: {path}"
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "Error reading file."


class InvalidFileError(PdfManagerError):
    """Raised when a file was read but is not a structurally valid PDF."""

    def __init__(self, path: str | None = None, message: str = "") -> None:
        self.path = path
        if not message and path is not None:
            message = f"File is invalid: {path}"
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "File is invalid."


class InvalidFieldError(PdfManagerError):
    """Raised when a referenced form field does not exist in the document."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f'The field name "{field_name}" was not found in the document')

    @property
    def default_message(self) -> str:
        return "The field was not found in the document."


class FileMergeError(PdfManagerError):
    """Raised when documents cannot be merged."""

    @property
    def default_message(self) -> str:
        return "Error merging files."


class FileSaveError(PdfManagerError):
    """Raised when a document cannot be written or stored."""

    def __init__(self, path: str | None = None, message: str = "") -> None:
        self.path = path
        if not message and path is not None:
            message = f'Error saving file "{path}"'
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "Error saving file."


class InvalidArgumentError(PdfManagerError, ValueError):
    """Raised when an operation is called with arguments it cannot accept."""

    @property
    def default_message(self) -> str:
        return "Invalid argument."


__all__ = [
    "FileMergeError",
    "FileReadError",
    "FileSaveError",
    "InvalidArgumentError",
    "InvalidFieldError",
    "InvalidFileError",
    "InvalidMimeTypeError",
    "MissingFileError",
    "PdfManagerError",
]
