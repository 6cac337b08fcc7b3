"""High level build pipeline.

:class:`PdfManager` collects source files, form data, field modifiers and
stamps, then :meth:`PdfManager.build` turns them into a single stored PDF::

    manager = PdfManager(LocalStorage("storage"))
    manager.add_file("templates/cover.pdf", order=1)
    manager.add_file("templates/form.pdf", order=2)
    manager.set_data({"name": "Acme"}).set_flatten_fields(["name"])
    manager.set_page_numbers(PageNumbers(start_offset=1))
    path = manager.build("contract")   # "pdf/generated/contract.pdf"
"""

from __future__ import annotations

import itertools
import logging
import posixpath
import re
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence, Union

from .backends.base import BackendDocument, PDFBackend
from .backends.pypdf_backend import PypdfBackend
from .backends.pypdf_forms import FieldSet, FormEditor
from .config import Settings, load_settings
from .exceptions import FileSaveError, InvalidArgumentError, InvalidMimeTypeError, MissingFileError, PdfManagerError
from .filenames import append_extension, generate_file_name
from .forms import FieldModifierPolicy, apply_field_modifiers, coerce_policy, field_names, fill_fields
from .stamps import PageNumbers, Stampable
from .storage import PDF_MIME_TYPE, LocalStorage, Storage
from .views import ViewRenderer

LOGGER = logging.getLogger("pdfmanager.manager")

FileSpec = Union[str, Path, Sequence[Any], Mapping[str, Any]]


@dataclass(frozen=True)
class FileEntry:
    """A registered source file."""

    path: str
    order: float | None
    sequence: int

    @property
    def sort_key(self) -> tuple[int, float, int]:
        if self.order is None:
            return (0, 0.0, self.sequence)
        return (1, float(self.order), self.sequence)


class PdfManager:
    """Assemble, fill, stamp and store PDF documents.

    Args:
        storage: Disk used for sources and output. Defaults to a
            :class:`LocalStorage` rooted at ``settings.storage_root``.
        backend: Document engine, :class:`PypdfBackend` by default.
        renderer: View renderer used by :meth:`build_view`. Created from
            ``settings.views_path`` on first use when omitted.
        settings: Runtime settings; read from the environment when omitted.
        rename_fields: Rename same-named fields when merging. Defaults to
            ``settings.rename_fields``.
    """

    STORAGE_PATH = "pdf/generated/"
    ALLOWED_MIME_TYPES = (PDF_MIME_TYPE,)

    def __init__(
        self,
        storage: Storage | None = None,
        *,
        backend: PDFBackend | None = None,
        renderer: ViewRenderer | None = None,
        settings: Settings | None = None,
        rename_fields: bool | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._storage = storage if storage is not None else LocalStorage(self.settings.storage_root)
        self._backend = backend or PypdfBackend()
        self._renderer = renderer
        self.output_root = self.settings.output_path or self.STORAGE_PATH
        self.rename_fields = self.settings.rename_fields if rename_fields is None else rename_fields

        self._files: list[FileEntry] = []
        self._sequence = itertools.count()
        self._data: dict[str, Any] = {}
        self._modifiers = FieldModifierPolicy()
        self._stamps: list[Stampable] = []
        self._page_numbers: PageNumbers | None = None
        self._editors: dict[BackendDocument, FormEditor] = {}

    # ------------------------------------------------------------------ #
    # Storage helpers
    # ------------------------------------------------------------------ #
    @property
    def storage(self) -> Storage:
        return self._storage

    def get_disk(self) -> Storage:
        return self._storage

    @property
    def renderer(self) -> ViewRenderer:
        if self._renderer is None:
            self._renderer = ViewRenderer(self.settings.views_path)
        return self._renderer

    def storage_path(self, path: str | None = None) -> str:
        """Return *path* under the output root, unless it already is."""

        if not path:
            return self.output_root
        path = str(path).lstrip("/")
        if path.rstrip("/") == self.output_root.rstrip("/"):
            return self.output_root
        if path.startswith(self.output_root):
            return path
        return self.output_root + path

    def full_storage_path(self, path: str | None = None) -> str:
        return str(self._storage.path(self.storage_path(path)))

    def _ensure_directory(self, path: str) -> bool:
        directory = posixpath.dirname(path)
        return not directory or self._storage.make_directory(directory)

    # ------------------------------------------------------------------ #
    # File registry
    # ------------------------------------------------------------------ #
    def _validate_file(self, path: str) -> None:
        if not self._storage.exists(path):
            raise MissingFileError(path)
        mime_type = self._storage.mime_type(path)
        if mime_type not in self.ALLOWED_MIME_TYPES:
            raise InvalidMimeTypeError(mime_type, self.ALLOWED_MIME_TYPES)

    def add_file(self, path: str | Path, order: float | None = None) -> "PdfManager":
        """Register a source file.

        Files without an order keep insertion order and come before ordered
        files. Registering a second file with the same order replaces the
        first.
        """

        path = str(path)
        self._validate_file(path)
        if order is not None:
            self._files = [entry for entry in self._files if entry.order != order]
        self._files.append(FileEntry(path, order, next(self._sequence)))
        LOGGER.debug("Added file %s (order=%s)", path, order)
        return self

    def add_files(self, files: Iterable[FileSpec]) -> "PdfManager":
        """Register several files given as paths, ``(path, order)`` pairs or mappings."""

        for item in files:
            if isinstance(item, (str, Path)):
                self.add_file(item)
            elif isinstance(item, Mapping):
                if "path" not in item:
                    raise InvalidArgumentError(f"File entry {item!r} has no path")
                self.add_file(item["path"], item.get("order"))
            else:
                path, order = item
                self.add_file(path, order)
        return self

    def remove_file(self, path: str | Path) -> "PdfManager":
        path = str(path)
        for index, entry in enumerate(self._files):
            if entry.path == path:
                del self._files[index]
                break
        return self

    @property
    def files(self) -> list[str]:
        return [entry.path for entry in sorted(self._files, key=lambda entry: entry.sort_key)]

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #
    def build_view(self, view: str, data: Mapping[str, Any] | None = None, file_name: str | None = None) -> str:
        """Render *view* to a PDF in the output root and return its path."""

        if file_name:
            name = append_extension(file_name)
        else:
            name = generate_file_name("pdf", prefix=re.sub(r"[./\\]", "-", view))
        output_path = self.storage_path(name)
        if not self._ensure_directory(output_path):
            raise MissingFileError(posixpath.dirname(output_path), "Unable to create the storage directory")

        contents = self.renderer.render(view, data)
        if not self._storage.put(output_path, contents):
            raise FileSaveError(output_path)
        LOGGER.info("Rendered view %s to %s", view, output_path)
        return output_path

    def add_view(
        self,
        view: str,
        data: Mapping[str, Any] | None = None,
        file_name: str | None = None,
        order: float | None = None,
    ) -> "PdfManager":
        return self.add_file(self.build_view(view, data, file_name), order)

    # ------------------------------------------------------------------ #
    # Build configuration
    # ------------------------------------------------------------------ #
    def set_data(self, data: Mapping[str, Any]) -> "PdfManager":
        self._data.update(data)
        return self

    def set_field_value(self, name: str, value: Any) -> "PdfManager":
        self._data[name] = value
        return self

    @property
    def data(self) -> dict[str, Any]:
        return dict(self._data)

    def set_field_modifiers(self, policy: FieldModifierPolicy | Mapping[str, Mapping[Any, bool]]) -> "PdfManager":
        self._modifiers = coerce_policy(policy)
        return self

    def set_flatten_fields(self, names: Iterable[str] | str) -> "PdfManager":
        self._modifiers.flatten(*field_names(names))
        return self

    def set_delete_fields(self, names: Iterable[str] | str) -> "PdfManager":
        self._modifiers.delete(*field_names(names))
        return self

    def set_read_only_fields(self, names: Iterable[str] | str, read_only: bool = True) -> "PdfManager":
        self._modifiers.read_only(*field_names(names), value=read_only)
        return self

    def set_required_fields(self, names: Iterable[str] | str, required: bool = True) -> "PdfManager":
        self._modifiers.required(*field_names(names), value=required)
        return self

    @property
    def field_modifiers(self) -> FieldModifierPolicy:
        return self._modifiers

    def set_page_numbers(self, page_numbers: PageNumbers | None = None) -> "PdfManager":
        """Stamp page numbers during :meth:`build`; ``None`` uses the defaults."""

        self._page_numbers = page_numbers if page_numbers is not None else PageNumbers()
        return self

    def clear_page_numbers(self) -> "PdfManager":
        self._page_numbers = None
        return self

    def set_stamp(self, *stamps: Stampable) -> "PdfManager":
        self._stamps.extend(stamps)
        return self

    @property
    def stamps(self) -> list[Stampable]:
        stamps = list(self._stamps)
        if self._page_numbers is not None:
            stamps.append(self._page_numbers)
        return stamps

    # ------------------------------------------------------------------ #
    # Documents
    # ------------------------------------------------------------------ #
    def load_file(self, path: str | Path) -> BackendDocument:
        path = str(path)
        self._validate_file(path)
        return self._backend.load(self._storage.get(path), source=path)

    def load_files(self, *paths: str | Path) -> list[BackendDocument]:
        if not paths:
            raise InvalidArgumentError("No files were given to load")
        documents: list[BackendDocument] = []
        try:
            for path in paths:
                documents.append(self.load_file(path))
        except PdfManagerError:
            for document in documents:
                self.release(document)
            raise
        return documents

    def merge(
        self,
        files: Iterable[str | Path | BackendDocument],
        rename_fields: bool | None = None,
    ) -> BackendDocument:
        """Merge paths and/or open documents, in the given order."""

        items = list(files)
        if not items:
            raise InvalidArgumentError("No files were given to merge")

        owned: list[BackendDocument] = []
        documents: list[BackendDocument] = []
        try:
            for item in items:
                if isinstance(item, BackendDocument):
                    documents.append(item)
                else:
                    document = self.load_file(item)
                    owned.append(document)
                    documents.append(document)
            rename = self.rename_fields if rename_fields is None else rename_fields
            return self._backend.merge(documents, rename_fields=rename)
        finally:
            for document in owned:
                self.release(document)

    def release(self, document: BackendDocument) -> None:
        """Release *document* and forget its form editor."""

        self._editors.pop(document, None)
        document.cleanup()

    def form_editor(self, document: BackendDocument) -> FormEditor:
        editor = self._editors.get(document)
        if editor is None:
            editor = FormEditor(document)  # type: ignore[arg-type]
            self._editors[document] = editor
        return editor

    def get_fields(self, document: BackendDocument) -> FieldSet:
        return self.form_editor(document).fields

    def get_field_names(self, document: BackendDocument) -> list[str]:
        return self.get_fields(document).names()

    def get_field_types(self, document: BackendDocument) -> dict[str, str]:
        return self.get_fields(document).types()

    def fill_form(
        self,
        document: BackendDocument,
        data: Mapping[str, Any],
        ignore_missing: bool = False,
    ) -> BackendDocument:
        fill_fields(self.form_editor(document), data, ignore_missing)
        return document

    def modify_fields(
        self,
        document: BackendDocument,
        policy: FieldModifierPolicy | Mapping[str, Mapping[Any, bool]],
        ignore_missing: bool = False,
    ) -> BackendDocument:
        policy = coerce_policy(policy)
        if len(policy):
            apply_field_modifiers(self.form_editor(document), policy, ignore_missing)
        return document

    def stamp(self, document: BackendDocument, *stamps: Stampable) -> BackendDocument:
        for stamp in stamps:
            stamp.stamp(document)
        return document

    def save_file(self, path: str, document: BackendDocument) -> bool:
        """Finalize *document*, release it and store it at *path*."""

        path = append_extension(str(path))
        try:
            contents = document.save()
        except PdfManagerError as exc:
            raise FileSaveError(path) from exc
        finally:
            self.release(document)
        if not self._storage.put(path, contents):
            raise FileSaveError(path)
        LOGGER.info("Saved %s (%d bytes)", path, len(contents))
        return True

    # ------------------------------------------------------------------ #
    # Build
    # ------------------------------------------------------------------ #
    def build(self, file_name: str, ignore_missing_fields: bool = False) -> str:
        """Run the full pipeline and return the stored output path.

        Sources are merged in order (or loaded when there is only one),
        then form data, field modifiers and stamps are applied before the
        result is saved under the output root.
        """

        if not file_name:
            raise InvalidArgumentError("A file name is required to build a document")
        paths = self.files
        if not paths:
            raise InvalidArgumentError("No files have been added to build from")

        output_path = self.storage_path(append_extension(file_name))
        LOGGER.info("Building %s from %d file(s)", output_path, len(paths))
        document = self.merge(paths) if len(paths) > 1 else self.load_file(paths[0])
        try:
            if self._data:
                self.fill_form(document, self._data, ignore_missing_fields)
            if len(self._modifiers):
                self.modify_fields(document, self._modifiers, ignore_missing_fields)
            self.stamp(document, *self.stamps)
            if not self._ensure_directory(output_path):
                raise FileSaveError(output_path)
            self.save_file(output_path, document)
        finally:
            self.release(document)
        return output_path

    def build_file(
        self,
        file_name: str,
        data: Mapping[str, Any] | None = None,
        page_numbers: PageNumbers | bool | None = None,
        ignore_missing_fields: bool = False,
    ) -> str:
        """Deprecated: use :meth:`set_data`, :meth:`set_page_numbers` and :meth:`build`."""

        warnings.warn(
            "PdfManager.build_file() is deprecated; use set_data(), set_page_numbers() and build()",
            DeprecationWarning,
            stacklevel=2,
        )
        if data:
            self.set_data(data)
        if isinstance(page_numbers, PageNumbers):
            self.set_page_numbers(page_numbers)
        elif page_numbers:
            self.set_page_numbers()
        return self.build(file_name, ignore_missing_fields)


__all__ = ["FileEntry", "PdfManager"]
