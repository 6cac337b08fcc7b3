from __future__ import annotations

from pathlib import Path

import pytest

from pdfmanager.config import load_settings
from pdfmanager.exceptions import MissingFileError
from pdfmanager.storage import LocalStorage


def test_put_creates_parents_and_get_reads_back(storage: LocalStorage) -> None:
    assert storage.put("a/b/c.bin", b"payload")
    assert storage.exists("a/b/c.bin")
    assert storage.get("/a/b/c.bin") == b"payload"


def test_get_missing_file_raises(storage: LocalStorage) -> None:
    with pytest.raises(MissingFileError) as excinfo:
        storage.get("nope.pdf")
    assert excinfo.value.path == "nope.pdf"


def test_mime_type_sniffs_pdf_signature(storage: LocalStorage) -> None:
    storage.put("document.bin", b"%PDF-1.7\n...")
    assert storage.mime_type("document.bin") == "application/pdf"


def test_mime_type_falls_back_to_extension(storage: LocalStorage) -> None:
    storage.put("notes.txt", b"hello")
    storage.put("fake.pdf", b"\x00" * 1024)
    storage.put("blob", b"\x00\x01")
    assert storage.mime_type("notes.txt") == "text/plain"
    assert storage.mime_type("fake.pdf") == "application/pdf"
    assert storage.mime_type("blob") == "application/octet-stream"


def test_make_directory(storage: LocalStorage, storage_root: Path) -> None:
    assert storage.make_directory("pdf/generated")
    assert (storage_root / "pdf" / "generated").is_dir()


def test_put_failure_returns_false(storage: LocalStorage, storage_root: Path) -> None:
    (storage_root / "blocker").write_bytes(b"file, not a directory")
    assert storage.put("blocker/out.pdf", b"data") is False


def test_settings_from_environment(tmp_path: Path) -> None:
    settings = load_settings(
        {
            "PDF_MANAGER_STORAGE_ROOT": str(tmp_path),
            "PDF_MANAGER_OUTPUT_PATH": "/exports",
            "PDF_MANAGER_RENAME_FIELDS": "yes",
            "PDF_MANAGER_LOG_LEVEL": "debug",
        }
    )
    assert settings.storage_root == tmp_path
    assert settings.output_path == "exports/"
    assert settings.rename_fields is True
    assert settings.log_level == "DEBUG"


def test_settings_defaults() -> None:
    settings = load_settings({})
    assert settings.output_path == "pdf/generated/"
    assert settings.rename_fields is False
    assert settings.log_level == "WARNING"
