"""Positioned page stamps: text, page numbers and PDF overlays."""

from .base import StampContent, Stampable, page_box, resolve_anchor
from .page_numbers import PageNumbers
from .pdf import OverlayContent, PdfStamp
from .text import TextContent, TextStamp

__all__ = [
    "OverlayContent",
    "PageNumbers",
    "PdfStamp",
    "StampContent",
    "Stampable",
    "TextContent",
    "TextStamp",
    "page_box",
    "resolve_anchor",
]
