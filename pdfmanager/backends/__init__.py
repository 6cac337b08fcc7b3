"""Document engine backends."""

from .base import BackendDocument, FieldNotFound, PDFBackend
from .pypdf_backend import PypdfBackend, PypdfDocument
from .pypdf_forms import FieldSet, FormEditor, FormField

__all__ = [
    "BackendDocument",
    "FieldNotFound",
    "FieldSet",
    "FormEditor",
    "FormField",
    "PDFBackend",
    "PypdfBackend",
    "PypdfDocument",
]
