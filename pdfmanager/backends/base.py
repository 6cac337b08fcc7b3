"""Backend protocol for the document engine."""

from __future__ import annotations

from typing import Iterator, Protocol, Sequence


class FieldNotFound(KeyError):
    """Raised by a field set when no field carries the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class BackendDocument:
    """An open, mutable PDF document owned by a backend.

    Documents hold engine resources until :meth:`cleanup` is called; the
    manager releases every document it opens once a build finishes.
    """

    @property
    def page_count(self) -> int:
        raise NotImplementedError

    @property
    def source(self) -> str | None:
        raise NotImplementedError

    @property
    def closed(self) -> bool:
        raise NotImplementedError

    def iter_pages(self) -> Iterator[object]:
        raise NotImplementedError

    def get_page(self, index: int) -> object:
        raise NotImplementedError

    def fields(self) -> object:
        """Return a fresh snapshot of the form fields in the document."""
        raise NotImplementedError

    def save(self) -> bytes:
        """Finalize the document and return its serialized bytes."""
        raise NotImplementedError

    def cleanup(self) -> None:
        """Release engine resources. Safe to call more than once."""
        raise NotImplementedError

    def __enter__(self) -> "BackendDocument":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()


class PDFBackend(Protocol):
    """Protocol defining the engine operations used by the manager."""

    def load(self, data: bytes, source: str | None = None) -> BackendDocument:
        """Parse *data* into an open document."""

    def merge(self, documents: Sequence[BackendDocument], *, rename_fields: bool = False) -> BackendDocument:
        """Concatenate *documents* into a new open document."""
