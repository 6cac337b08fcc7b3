"""Helpers for naming generated files."""

from __future__ import annotations

import uuid
from datetime import datetime


def append_extension(file_name: str, extension: str = "pdf") -> str:
    """Append ``.extension`` to *file_name* unless it already ends with it.

    An existing, different extension is kept: ``"notes.txt"`` becomes
    ``"notes.txt.pdf"``.
    """

    suffix = "." + extension.lstrip(".")
    if file_name.endswith(suffix):
        return file_name
    return file_name + suffix


def generate_file_name(
    extension: str,
    prefix: str | None = None,
    postfix: str | None = None,
    delimiter: str = "_",
    *,
    now: datetime | None = None,
) -> str:
    """Return a unique name such as ``invoice_2024-05-01_134502_<uuid>.pdf``."""

    moment = now or datetime.now()
    parts = [moment.strftime("%Y-%m-%d"), moment.strftime("%H%M%S"), str(uuid.uuid4())]
    if prefix:
        parts.insert(0, prefix)
    if postfix:
        parts.append(postfix)
    return append_extension(delimiter.join(parts), extension)


__all__ = ["append_extension", "generate_file_name"]
