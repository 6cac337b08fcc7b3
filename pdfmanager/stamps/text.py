"""Text stamps rendered with reportlab."""

from __future__ import annotations

import io
import re
from typing import Any

from pypdf import PdfReader, Transformation
from reportlab.lib.colors import HexColor
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..backends.base import BackendDocument
from ..exceptions import InvalidArgumentError
from .base import StampContent, Stampable, page_box

_COLOUR = re.compile(r"^#?[0-9a-fA-F]{6}$")


class TextContent(StampContent):
    """A single line of text; the box spans the font's ascent and descent."""

    def __init__(self, text: str, font_name: str, font_size: float, font_colour: str) -> None:
        self.text = text
        self.font_name = font_name
        self.font_size = font_size
        self.font_colour = font_colour

    @property
    def width(self) -> float:
        return pdfmetrics.stringWidth(self.text, self.font_name, self.font_size)

    @property
    def height(self) -> float:
        ascent, descent = pdfmetrics.getAscentDescent(self.font_name, self.font_size)
        return ascent - descent

    def draw(self, page: Any, x: float, y: float) -> None:
        left, bottom, width, height = page_box(page)
        _, descent = pdfmetrics.getAscentDescent(self.font_name, self.font_size)

        packet = io.BytesIO()
        overlay = canvas.Canvas(packet, pagesize=(width, height))
        overlay.setFont(self.font_name, self.font_size)
        overlay.setFillColor(HexColor(self.font_colour))
        overlay.drawString(x - left, y - bottom - descent, self.text)
        overlay.save()
        packet.seek(0)

        page.merge_transformed_page(PdfReader(packet).pages[0], Transformation().translate(left, bottom))


class TextStamp(Stampable):
    """Stamp a line of text onto the selected pages."""

    FONT_NAME = "Helvetica"
    FONT_SIZE = 8
    FONT_COLOUR = "#888888"

    def __init__(
        self,
        text: str = "",
        *,
        font_size: float | None = None,
        font_colour: str | None = None,
        font_name: str | None = None,
        **placement: Any,
    ) -> None:
        super().__init__(**placement)
        self.text = text
        self.set_font_size(self.FONT_SIZE if font_size is None else font_size)
        self.set_font_colour(font_colour or self.FONT_COLOUR)
        self.set_font_name(font_name or self.FONT_NAME)

    def set_text(self, text: str) -> "TextStamp":
        self.text = text
        return self

    def set_font_size(self, size: float) -> "TextStamp":
        if size is None or size <= 0:
            raise InvalidArgumentError(f"Font size must be greater than 0, got {size!r}")
        self.font_size = size
        return self

    def set_font_colour(self, colour: str) -> "TextStamp":
        """Set the colour as six hex digits, with or without a leading ``#``."""

        if not isinstance(colour, str) or not _COLOUR.match(colour):
            raise InvalidArgumentError(f"Invalid font colour {colour!r}, expected a hex value such as #888888")
        self.font_colour = "#" + colour.lstrip("#").lower()
        return self

    def set_font_name(self, font_name: str) -> "TextStamp":
        try:
            pdfmetrics.getFont(font_name)
        except KeyError as exc:
            raise InvalidArgumentError(f"Unknown font {font_name!r}") from exc
        self.font_name = font_name
        return self

    def create_stamp(self, document: BackendDocument) -> TextContent:
        return TextContent(self.text, self.font_name, self.font_size, self.font_colour)

    def stamp_callback(self, page_number: int, page_count: int, page: Any, stamp: StampContent) -> bool:
        return bool(getattr(stamp, "text", ""))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(text={self.text!r}, position={self.position.value!r})"


__all__ = ["TextContent", "TextStamp"]
