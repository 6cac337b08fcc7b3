from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Sequence
import sys

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DecodedStreamObject,
    DictionaryObject,
    NameObject,
    NumberObject,
    TextStringObject,
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pdfmanager.backends import PypdfBackend  # noqa: E402
from pdfmanager.config import Settings  # noqa: E402
from pdfmanager.manager import PdfManager  # noqa: E402
from pdfmanager.storage import LocalStorage  # noqa: E402


def _to_bytes(writer: PdfWriter) -> bytes:
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def blank_pdf(pages: int = 1, width: float = 200, height: float = 200) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=width, height=height)
    return _to_bytes(writer)


def _widget(rect: Sequence[float], **entries: object) -> DictionaryObject:
    widget = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Annot"),
            NameObject("/Subtype"): NameObject("/Widget"),
            NameObject("/Rect"): ArrayObject([NumberObject(value) for value in rect]),
            NameObject("/F"): NumberObject(4),
        }
    )
    widget.update({NameObject(key): value for key, value in entries.items()})
    return widget


def _checkbox_states(writer: PdfWriter) -> DictionaryObject:
    states = DictionaryObject()
    for state, content in (("/Yes", b"q 0 g 2 2 10 10 re f Q"), ("/Off", b"")):
        stream = DecodedStreamObject()
        stream.set_data(content)
        stream.update(
            {
                NameObject("/Type"): NameObject("/XObject"),
                NameObject("/Subtype"): NameObject("/Form"),
                NameObject("/BBox"): ArrayObject([NumberObject(0), NumberObject(0), NumberObject(14), NumberObject(14)]),
            }
        )
        states[NameObject(state)] = writer._add_object(stream)
    return DictionaryObject({NameObject("/N"): states})


def form_pdf(
    text_fields: Sequence[str] = ("name", "email"),
    checkbox: str | None = "agree",
    nested: bool = True,
    pages: int = 1,
) -> bytes:
    """A form with text fields, a check box and an ``address.city`` field on page 1."""

    writer = PdfWriter()
    first = writer.add_blank_page(width=300, height=400)
    for _ in range(pages - 1):
        writer.add_blank_page(width=300, height=400)

    font = DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject("/Helvetica"),
            NameObject("/Encoding"): NameObject("/WinAnsiEncoding"),
        }
    )
    font_ref = writer._add_object(font)

    fields = ArrayObject()
    annotations = ArrayObject()
    top = 360
    for name in text_fields:
        field = DictionaryObject(
            {
                NameObject("/FT"): NameObject("/Tx"),
                NameObject("/T"): TextStringObject(name),
                NameObject("/Ff"): NumberObject(0),
                NameObject("/V"): TextStringObject(""),
            }
        )
        field_ref = writer._add_object(field)
        widget_ref = writer._add_object(_widget([20, top - 24, 220, top], **{"/Parent": field_ref}))
        field[NameObject("/Kids")] = ArrayObject([widget_ref])
        fields.append(field_ref)
        annotations.append(widget_ref)
        top -= 40

    if checkbox:
        box = _widget(
            [20, top - 14, 34, top],
            **{
                "/FT": NameObject("/Btn"),
                "/T": TextStringObject(checkbox),
                "/V": NameObject("/Off"),
                "/AS": NameObject("/Off"),
                "/AP": _checkbox_states(writer),
            },
        )
        box_ref = writer._add_object(box)
        fields.append(box_ref)
        annotations.append(box_ref)
        top -= 40

    if nested:
        parent = DictionaryObject({NameObject("/T"): TextStringObject("address")})
        parent_ref = writer._add_object(parent)
        city = _widget(
            [20, top - 24, 220, top],
            **{"/FT": NameObject("/Tx"), "/T": TextStringObject("city"), "/Parent": parent_ref},
        )
        city_ref = writer._add_object(city)
        parent[NameObject("/Kids")] = ArrayObject([city_ref])
        fields.append(parent_ref)
        annotations.append(city_ref)

    first[NameObject("/Annots")] = annotations
    acro_form = DictionaryObject(
        {
            NameObject("/Fields"): fields,
            NameObject("/NeedAppearances"): BooleanObject(True),
            NameObject("/DA"): TextStringObject("/Helv 12 Tf 0 g"),
            NameObject("/DR"): DictionaryObject(
                {NameObject("/Font"): DictionaryObject({NameObject("/Helv"): font_ref})}
            ),
        }
    )
    writer._root_object.update({NameObject("/AcroForm"): writer._add_object(acro_form)})  # type: ignore[attr-defined]
    return _to_bytes(writer)


def read_pdf(data: bytes) -> PdfReader:
    return PdfReader(io.BytesIO(data))


@pytest.fixture()
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "disk"
    root.mkdir()
    return root


@pytest.fixture()
def storage(storage_root: Path) -> LocalStorage:
    return LocalStorage(storage_root)


@pytest.fixture()
def views_dir(tmp_path: Path) -> Path:
    views = tmp_path / "views"
    (views / "invoice").mkdir(parents=True)
    (views / "invoice" / "summary.html").write_text(
        "# Invoice {{ number }}\n\nTotal due: <b>{{ total }}</b>\n\n<pagebreak/>\n\n## Terms\n\nPayable in 30 days.\n",
        encoding="utf-8",
    )
    (views / "letter.html").write_text("Dear {{ name }},\n\nThank you.\n", encoding="utf-8")
    return views


@pytest.fixture()
def settings(storage_root: Path, views_dir: Path) -> Settings:
    return Settings(storage_root=storage_root, views_path=views_dir)


@pytest.fixture()
def manager(storage: LocalStorage, settings: Settings) -> PdfManager:
    return PdfManager(storage, settings=settings)


@pytest.fixture()
def backend() -> PypdfBackend:
    return PypdfBackend()


@pytest.fixture()
def pdf_factory(storage_root: Path) -> Callable[..., str]:
    def _create(filename: str, pages: int = 1, width: float = 200, height: float = 200) -> str:
        path = storage_root / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blank_pdf(pages, width, height))
        return filename

    return _create


@pytest.fixture()
def form_factory(storage_root: Path) -> Callable[..., str]:
    def _create(filename: str = "form.pdf", **options: object) -> str:
        path = storage_root / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(form_pdf(**options))  # type: ignore[arg-type]
        return filename

    return _create
