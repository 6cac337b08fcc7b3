"""Overlay another PDF's first page onto document pages."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

from pypdf import PdfReader, Transformation
from pypdf.errors import PdfReadError

from ..backends.base import BackendDocument
from ..exceptions import InvalidArgumentError, InvalidFileError, MissingFileError
from .base import StampContent, Stampable, page_box


def _dimension(value: float | None, name: str) -> float | None:
    if value is None:
        return None
    if value <= 0:
        raise InvalidArgumentError(f"Stamp {name} must be greater than 0, got {value!r}")
    return float(value)


class OverlayContent(StampContent):
    def __init__(self, page: Any, width: float, height: float) -> None:
        self.page = page
        self._width = width
        self._height = height

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def draw(self, page: Any, x: float, y: float) -> None:
        left, bottom, natural_width, natural_height = page_box(self.page)
        scale_x = self._width / natural_width if natural_width else 1.0
        scale_y = self._height / natural_height if natural_height else 1.0
        transformation = Transformation().translate(-left, -bottom).scale(scale_x, scale_y).translate(x, y)
        page.merge_transformed_page(self.page, transformation)


class PdfStamp(Stampable):
    """Stamp the first page of another PDF, optionally resized.

    Giving only one of ``width``/``height`` scales the other proportionally;
    giving neither keeps the overlay's natural size.
    """

    def __init__(
        self,
        source: str | Path | bytes,
        width: float | None = None,
        height: float | None = None,
        **placement: Any,
    ) -> None:
        super().__init__(**placement)
        self.source = source
        self.set_dimensions(width, height)

    def set_dimensions(self, width: float | None = None, height: float | None = None) -> "PdfStamp":
        self.width = _dimension(width, "width")
        self.height = _dimension(height, "height")
        return self

    def set_width(self, width: float | None) -> "PdfStamp":
        self.width = _dimension(width, "width")
        return self

    def set_height(self, height: float | None) -> "PdfStamp":
        self.height = _dimension(height, "height")
        return self

    def reset_dimensions(self) -> "PdfStamp":
        return self.set_dimensions(None, None)

    def reset_width(self) -> "PdfStamp":
        return self.set_width(None)

    def reset_height(self) -> "PdfStamp":
        return self.set_height(None)

    def _read_source(self) -> bytes:
        if isinstance(self.source, (bytes, bytearray)):
            return bytes(self.source)
        path = Path(self.source)
        if not path.is_file():
            raise MissingFileError(str(path))
        return path.read_bytes()

    def create_stamp(self, document: BackendDocument) -> OverlayContent:
        label = "<bytes>" if isinstance(self.source, (bytes, bytearray)) else str(self.source)
        try:
            overlay = PdfReader(io.BytesIO(self._read_source())).pages[0]
        except (PdfReadError, IndexError) as exc:
            raise InvalidFileError(label) from exc

        _, _, natural_width, natural_height = page_box(overlay)
        width, height = self.width, self.height
        if width is None and height is None:
            width, height = natural_width, natural_height
        elif height is None:
            height = natural_height * width / natural_width
        elif width is None:
            width = natural_width * height / natural_height
        return OverlayContent(overlay, width, height)

    def __repr__(self) -> str:
        return f"PdfStamp(source={self.source!r}, width={self.width!r}, height={self.height!r})"


__all__ = ["OverlayContent", "PdfStamp"]
