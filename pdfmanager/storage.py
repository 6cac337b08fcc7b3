"""Storage abstraction used to read sources and persist generated files."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Protocol

from .exceptions import MissingFileError
from .utils import coerce_path

LOGGER = logging.getLogger("pdfmanager.storage")

PDF_MIME_TYPE = "application/pdf"
_PDF_SIGNATURE = b"%PDF-"
_SNIFF_BYTES = 1024


class Storage(Protocol):
    """Protocol for the disk the manager reads from and writes to.

    Paths are relative to the disk root and use forward slashes.
    """

    def exists(self, path: str) -> bool:
        """Return whether *path* exists on the disk."""

    def get(self, path: str) -> bytes:
        """Return the contents of *path*."""

    def put(self, path: str, contents: bytes) -> bool:
        """Store *contents* at *path*, returning ``False`` on failure."""

    def mime_type(self, path: str) -> str:
        """Return the content type of *path*."""

    def make_directory(self, path: str) -> bool:
        """Create *path* (and parents), returning ``False`` on failure."""

    def path(self, path: str) -> Path:
        """Return the absolute location of *path*."""


class LocalStorage(Storage):
    """Storage backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = coerce_path(root).resolve()

    def path(self, path: str) -> Path:
        return self.root / str(path).lstrip("/")

    def exists(self, path: str) -> bool:
        return self.path(path).exists()

    def get(self, path: str) -> bytes:
        location = self.path(path)
        if not location.is_file():
            raise MissingFileError(path)
        return location.read_bytes()

    def put(self, path: str, contents: bytes) -> bool:
        location = self.path(path)
        try:
            location.parent.mkdir(parents=True, exist_ok=True)
            location.write_bytes(contents)
        except OSError as exc:
            LOGGER.error("Unable to store %s: %s", location, exc)
            return False
        LOGGER.debug("Stored %d bytes at %s", len(contents), location)
        return True

    def make_directory(self, path: str) -> bool:
        location = self.path(path)
        try:
            location.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.error("Unable to create directory %s: %s", location, exc)
            return False
        return True

    def mime_type(self, path: str) -> str:
        location = self.path(path)
        if not location.is_file():
            raise MissingFileError(path)
        with location.open("rb") as handle:
            head = handle.read(_SNIFF_BYTES)
        if _PDF_SIGNATURE in head:
            return PDF_MIME_TYPE
        guessed, _ = mimetypes.guess_type(location.name)
        return guessed or "application/octet-stream"

    def __repr__(self) -> str:
        return f"LocalStorage({str(self.root)!r})"


__all__ = ["LocalStorage", "PDF_MIME_TYPE", "Storage"]
