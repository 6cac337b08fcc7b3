"""pypdf backend implementation for PDF Manager."""

from __future__ import annotations

import io
import logging
from typing import Any, Iterator, Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import EmptyFileError
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DecodedStreamObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    PdfObject,
    TextStringObject,
)

from ..exceptions import (
    FileMergeError,
    FileReadError,
    FileSaveError,
    InvalidArgumentError,
    InvalidFileError,
    PdfManagerError,
)
from .base import BackendDocument, PDFBackend
from .pypdf_forms import FieldSet, FormEditor

LOGGER = logging.getLogger("pdfmanager.backend")

DEFAULT_APPEARANCE = "/Helv 0 Tf 0 g"


def _resolve(obj: Any) -> Any:
    return obj.get_object() if obj is not None else None


class PypdfDocument(BackendDocument):
    """An open document backed by a :class:`pypdf.PdfWriter`."""

    def __init__(self, writer: PdfWriter, source: str | None = None) -> None:
        self._writer = writer
        self._source = source
        self._closed = False
        self._font: IndirectObject | None = None

    @property
    def writer(self) -> PdfWriter:
        if self._closed:
            raise PdfManagerError(f"Document {self._source or '<memory>'} has been closed")
        return self._writer

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def page_count(self) -> int:
        return len(self.writer.pages)

    def iter_pages(self) -> Iterator[Any]:
        return iter(self.writer.pages)

    def get_page(self, index: int) -> Any:
        return self.writer.pages[index]

    def fields(self) -> FieldSet:
        return FormEditor(self).fields

    def add_object(self, obj: PdfObject) -> IndirectObject:
        return self.writer._add_object(obj)  # type: ignore[attr-defined]

    def reference(self, obj: PdfObject) -> IndirectObject:
        ref = getattr(obj, "indirect_reference", None)
        if ref is not None and ref.pdf is self.writer:
            return ref
        return self.add_object(obj)

    def standard_font(self) -> IndirectObject:
        """Return the Helvetica font dictionary used for generated appearances."""

        if self._font is None:
            font = DictionaryObject(
                {
                    NameObject("/Type"): NameObject("/Font"),
                    NameObject("/Subtype"): NameObject("/Type1"),
                    NameObject("/BaseFont"): NameObject("/Helvetica"),
                    NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
                }
            )
            self._font = self.add_object(font)
        return self._font

    def acroform(self, create: bool = False) -> DictionaryObject | None:
        root = self.writer._root_object  # type: ignore[attr-defined]
        form = _resolve(root.get("/AcroForm"))
        if form is None and create:
            form = DictionaryObject({NameObject("/Fields"): ArrayObject()})
            root[NameObject("/AcroForm")] = self.add_object(form)
        return form

    def register_xobject(self, page: Any, xobject: IndirectObject) -> str:
        """Add *xobject* to the page resources and return its resource name."""

        resources = _resolve(page.get("/Resources"))
        if resources is None:
            resources = DictionaryObject()
            page[NameObject("/Resources")] = resources
        xobjects = _resolve(resources.get("/XObject"))
        if xobjects is None:
            xobjects = DictionaryObject()
            resources[NameObject("/XObject")] = xobjects
        index = len(xobjects)
        while f"/Fm{index}" in xobjects:
            index += 1
        name = f"Fm{index}"
        xobjects[NameObject("/" + name)] = xobject
        return name

    def append_content(self, page: Any, data: bytes) -> None:
        """Append a content stream to *page*, isolating the existing content."""

        existing = page.raw_get("/Contents") if "/Contents" in page else None
        stream = DecodedStreamObject()
        if existing is None:
            stream.set_data(data)
            page[NameObject("/Contents")] = ArrayObject([self.add_object(stream)])
            return

        resolved = _resolve(existing)
        if isinstance(resolved, ArrayObject):
            items = [item if isinstance(item, IndirectObject) else self.reference(item) for item in resolved]
        else:
            items = [existing if isinstance(existing, IndirectObject) else self.reference(resolved)]
        prefix = DecodedStreamObject()
        prefix.set_data(b"q\n")
        stream.set_data(b"Q\n" + data)
        page[NameObject("/Contents")] = ArrayObject([self.add_object(prefix), *items, self.add_object(stream)])

    def _add_standard_font(self, resources: DictionaryObject) -> None:
        fonts = _resolve(resources.get("/Font"))
        if fonts is None:
            fonts = DictionaryObject()
            resources[NameObject("/Font")] = fonts
        fonts.setdefault(NameObject("/Helv"), self.standard_font())

    def form_defaults(self) -> DictionaryObject:
        """Return the AcroForm with a default appearance and ``/Helv`` in its resources."""

        form = self.acroform(create=True)
        resources = _resolve(form.get("/DR"))
        if resources is None:
            resources = DictionaryObject()
            form[NameObject("/DR")] = resources
        self._add_standard_font(resources)
        if "/DA" not in form:
            form[NameObject("/DA")] = TextStringObject(DEFAULT_APPEARANCE)
        return form

    def rebuild_acroform(self, roots: Sequence[DictionaryObject], resources: DictionaryObject, appearance: str) -> None:
        self._add_standard_font(resources)
        form = DictionaryObject(
            {
                NameObject("/Fields"): ArrayObject([self.reference(root) for root in roots]),
                NameObject("/DA"): TextStringObject(appearance),
                NameObject("/DR"): resources,
                NameObject("/NeedAppearances"): BooleanObject(True),
            }
        )
        self.writer._root_object[NameObject("/AcroForm")] = self.add_object(form)  # type: ignore[attr-defined]

    def save(self) -> bytes:
        buffer = io.BytesIO()
        try:
            self.writer.write(buffer)
        except PdfManagerError:
            raise
        except Exception as exc:
            raise FileSaveError(self._source or "<memory>") from exc
        return buffer.getvalue()

    def cleanup(self) -> None:
        if self._closed:
            return
        self._writer.close()
        self._closed = True
        LOGGER.debug("Released document %s", self._source or "<memory>")

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"{len(self._writer.pages)} pages"
        return f"PypdfDocument({self._source!r}, {state})"


def _widget_roots(pages: Sequence[Any]) -> list[DictionaryObject]:
    roots: list[DictionaryObject] = []
    seen: set[int] = set()
    for page in pages:
        for item in _resolve(page.get("/Annots")) or []:
            annotation = _resolve(item)
            if annotation is None or annotation.get("/Subtype") != "/Widget":
                continue
            root = annotation
            for _ in range(32):
                parent = _resolve(root.get("/Parent"))
                if parent is None:
                    break
                root = parent
            if "/T" not in root or id(root) in seen:
                continue
            seen.add(id(root))
            roots.append(root)
    return roots


def _free_name(name: str, taken: set[str]) -> str:
    index = 1
    while f"{name}#{index}" in taken:
        index += 1
    return f"{name}#{index}"


class PypdfBackend(PDFBackend):
    """Backend implementation that uses `pypdf` under the hood."""

    def load(self, data: bytes, source: str | None = None) -> PypdfDocument:
        label = source or "<memory>"
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                reader.decrypt("")
            page_count = len(reader.pages)
        except (EmptyFileError, OSError) as exc:
            LOGGER.warning("Unable to read %s: %s", label, exc)
            raise FileReadError(label) from exc
        except Exception as exc:
            LOGGER.warning("Invalid PDF %s: %s", label, exc)
            raise InvalidFileError(label) from exc

        if page_count == 0:
            raise InvalidFileError(label, f"File is invalid: {label} contains no pages")

        writer = PdfWriter()
        try:
            writer.clone_reader_document_root(reader)
        except Exception as exc:
            raise InvalidFileError(label) from exc
        LOGGER.debug("Loaded %s (%d pages)", label, page_count)
        return PypdfDocument(writer, source)

    def merge(self, documents: Sequence[BackendDocument], *, rename_fields: bool = False) -> PypdfDocument:
        if not documents:
            raise InvalidArgumentError("At least one document is required to merge")

        merged = PypdfDocument(PdfWriter())
        writer = merged.writer
        roots: list[DictionaryObject] = []
        taken: set[str] = set()
        resources = DictionaryObject()
        appearance: str | None = None
        try:
            for document in documents:
                reader = PdfReader(io.BytesIO(document.save()))
                start = len(writer.pages)
                # append() keeps widget /Parent links; add_page() drops them.
                writer.append(reader, import_outline=False)

                source_form = _resolve(_resolve(reader.trailer["/Root"]).get("/AcroForm"))
                if source_form is not None:
                    appearance = appearance or source_form.get("/DA")
                    source_resources = _resolve(source_form.get("/DR")) or {}
                    for category, entries in source_resources.items():
                        entries = _resolve(entries)
                        if not isinstance(entries, DictionaryObject):
                            continue
                        target = resources.setdefault(NameObject(category), DictionaryObject())
                        for key, value in entries.items():
                            if key not in target:
                                target[NameObject(key)] = value.clone(writer)

                added = [writer.pages[index] for index in range(start, len(writer.pages))]
                for root in _widget_roots(added):
                    name = str(root["/T"])
                    if rename_fields and name in taken:
                        renamed = _free_name(name, taken)
                        LOGGER.info("Renaming field %s to %s", name, renamed)
                        root[NameObject("/T")] = TextStringObject(renamed)
                        name = renamed
                    taken.add(name)
                    roots.append(root)
        except Exception as exc:
            merged.cleanup()
            LOGGER.error("Merging %d documents failed: %s", len(documents), exc)
            raise FileMergeError(f"Error merging files: {exc}") from exc

        if roots:
            merged.rebuild_acroform(roots, resources, str(appearance or DEFAULT_APPEARANCE))
        LOGGER.info("Merged %d documents into %d pages", len(documents), merged.page_count)
        return merged


__all__ = ["PypdfBackend", "PypdfDocument"]
