from __future__ import annotations

import io

import pytest
from pypdf import PdfWriter

from conftest import blank_pdf, form_pdf, read_pdf
from pdfmanager.backends import FieldNotFound, FormEditor, PypdfBackend
from pdfmanager.exceptions import FileMergeError, FileReadError, InvalidArgumentError, InvalidFileError, PdfManagerError


def test_load_reports_page_count(backend: PypdfBackend) -> None:
    document = backend.load(blank_pdf(pages=3), source="three.pdf")
    assert document.page_count == 3
    assert document.source == "three.pdf"


def test_load_empty_file_is_a_read_error(backend: PypdfBackend) -> None:
    with pytest.raises(FileReadError):
        backend.load(b"", source="empty.pdf")


def test_load_garbage_is_an_invalid_file(backend: PypdfBackend) -> None:
    with pytest.raises(InvalidFileError) as excinfo:
        backend.load(b"\x00" * 1024, source="dummy.pdf")
    assert excinfo.value.path == "dummy.pdf"
    assert excinfo.value.__cause__ is not None


@pytest.mark.parametrize("data", [b"hello world, not a pdf", b"%PDF-1.7\n%%EOF\n"])
def test_load_without_pdf_structure_is_an_invalid_file(backend: PypdfBackend, data: bytes) -> None:
    with pytest.raises(InvalidFileError):
        backend.load(data, source="broken.pdf")


def test_cleanup_is_idempotent_and_closes_document(backend: PypdfBackend) -> None:
    document = backend.load(blank_pdf())
    document.cleanup()
    document.cleanup()
    assert document.closed
    with pytest.raises(PdfManagerError):
        document.save()


def test_document_context_manager_releases(backend: PypdfBackend) -> None:
    with backend.load(blank_pdf()) as document:
        assert document.page_count == 1
    assert document.closed


def test_merge_keeps_document_order(backend: PypdfBackend) -> None:
    first = backend.load(blank_pdf(pages=2, width=100))
    second = backend.load(blank_pdf(pages=1, width=300))
    merged = backend.merge([second, first])

    reader = read_pdf(merged.save())
    assert [float(page.mediabox.width) for page in reader.pages] == [300, 100, 100]


def test_merge_requires_documents(backend: PypdfBackend) -> None:
    with pytest.raises(InvalidArgumentError):
        backend.merge([])


def test_merge_wraps_engine_failures(backend: PypdfBackend) -> None:
    closed = backend.load(blank_pdf())
    closed.cleanup()
    with pytest.raises(FileMergeError) as excinfo:
        backend.merge([backend.load(blank_pdf()), closed])
    assert excinfo.value.__cause__ is not None


def test_merge_keeps_form_fields(backend: PypdfBackend) -> None:
    merged = backend.merge([backend.load(blank_pdf()), backend.load(form_pdf())])
    assert set(merged.fields()) == {"name", "email", "agree", "address.city"}


def test_merged_nested_field_keeps_its_qualified_name(backend: PypdfBackend) -> None:
    merged = backend.merge([backend.load(blank_pdf()), backend.load(form_pdf())])
    FormEditor(merged).field("address.city").set_value("Leeds")

    fields = read_pdf(merged.save()).get_fields()
    assert fields["address.city"]["/V"] == "Leeds"
    assert "city" not in fields


def test_merge_without_renaming_addresses_same_named_fields_together(backend: PypdfBackend) -> None:
    merged = backend.merge(
        [backend.load(form_pdf(checkbox=None, nested=False)), backend.load(form_pdf(checkbox=None, nested=False))]
    )
    fields = merged.fields()
    assert sorted(fields) == ["email", "name"]
    assert len(fields["name"].widgets) == 2

    fields["name"].set_value("Acme")
    values = {str(field.get("/V")) for field in _root_fields(merged.save()) if field.get("/T") == "name"}
    assert values == {"Acme"}


def test_merge_with_renaming_gives_unique_names(backend: PypdfBackend) -> None:
    documents = [backend.load(form_pdf(checkbox=None, nested=False)) for _ in range(3)]
    merged = backend.merge(documents, rename_fields=True)
    assert set(merged.fields()) == {"name", "email", "name#1", "email#1", "name#2", "email#2"}


def _root_fields(data: bytes) -> list:
    reader = read_pdf(data)
    form = reader.trailer["/Root"]["/AcroForm"]
    return [item.get_object() for item in form["/Fields"]]


def test_field_set_lookup(backend: PypdfBackend) -> None:
    fields = FormEditor(backend.load(form_pdf())).fields
    assert fields.names() == ["name", "email", "agree", "address.city"]
    assert fields.types() == {"name": "text", "email": "text", "agree": "checkbox", "address.city": "text"}
    with pytest.raises(FieldNotFound):
        fields["missing"]
    assert fields.get("missing") is None


def test_text_value_round_trip(backend: PypdfBackend) -> None:
    document = backend.load(form_pdf())
    FormEditor(document).field("address.city").set_value("Leeds")

    reloaded = backend.load(document.save())
    assert reloaded.fields()["address.city"].value == "Leeds"
    assert read_pdf(document.save()).get_fields()["address.city"]["/V"] == "Leeds"


def test_text_value_generates_appearance(backend: PypdfBackend) -> None:
    document = backend.load(form_pdf())
    field = FormEditor(document).field("name")
    field.set_value("Acme Ltd")
    appearance = field.widgets[0]["/AP"]["/N"].get_object()
    data = appearance.get_data()
    assert b"Acme Ltd" in data
    assert b"Tj" in data
    assert "/Helv" in appearance["/Resources"]["/Font"]


def test_text_value_on_form_without_resources(backend: PypdfBackend) -> None:
    source = read_pdf(form_pdf(checkbox=None, nested=False))
    writer = PdfWriter(clone_from=source)
    form = writer._root_object["/AcroForm"]
    del form["/DR"]
    del form["/DA"]
    buffer = io.BytesIO()
    writer.write(buffer)

    document = backend.load(buffer.getvalue())
    FormEditor(document).field("name").set_value("Acme")
    reader = read_pdf(document.save())
    assert reader.get_fields()["name"]["/V"] == "Acme"
    assert "/Helv" in reader.trailer["/Root"]["/AcroForm"]["/DR"]["/Font"]


def test_checkbox_states(backend: PypdfBackend) -> None:
    document = backend.load(form_pdf())
    editor = FormEditor(document)

    editor.field("agree").set_value(True)
    widget = editor.field("agree").widgets[0]
    assert widget["/AS"] == "/Yes"
    assert editor.field("agree").value == "Yes"

    editor.field("agree").set_value("Off")
    assert widget["/AS"] == "/Off"
    assert editor.field("agree").value == "Off"


def test_read_only_and_required_flags(backend: PypdfBackend) -> None:
    document = backend.load(form_pdf())
    editor = FormEditor(document)
    editor.field("email").set_read_only()
    editor.field("email").set_required()
    editor.field("email").set_required(False)

    email = backend.load(document.save()).fields()["email"]
    assert email.read_only is True
    assert email.required is False


def test_delete_removes_field_and_widget(backend: PypdfBackend) -> None:
    document = backend.load(form_pdf())
    editor = FormEditor(document)
    editor.field("address.city").delete()
    assert "address.city" not in editor.fields

    reader = read_pdf(document.save())
    assert "address.city" not in (reader.get_fields() or {})
    assert len(reader.pages[0]["/Annots"]) == 3


def test_flatten_draws_value_into_page(backend: PypdfBackend) -> None:
    document = backend.load(form_pdf())
    editor = FormEditor(document)
    editor.field("name").set_value("Acme")
    editor.field("name").flatten()

    reader = read_pdf(document.save())
    assert "name" not in (reader.get_fields() or {})
    page = reader.pages[0]
    assert any(str(key).startswith("/Fm") for key in page["/Resources"]["/XObject"])
    assert "Acme" in page.extract_text()
