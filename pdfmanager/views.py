"""Render templated views into A4 portrait PDF documents."""

from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import Any, Mapping, Sequence

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape
from reportlab.lib.pagesizes import A4, portrait
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from .exceptions import MissingFileError

LOGGER = logging.getLogger("pdfmanager.views")

TEMPLATE_SUFFIXES = (".html", ".j2", ".jinja", ".jinja2", ".txt")
_BLOCK_SPLIT = re.compile(r"\n\s*\n")
_PAGE_BREAK = re.compile(r"^<pagebreak\s*/?>$", re.IGNORECASE)


def template_name(view: str) -> str:
    """Map a dotted view id to a template path (``mail.invoice`` -> ``mail/invoice.html``)."""

    if view.endswith(TEMPLATE_SUFFIXES):
        return view
    return view.replace(".", "/") + ".html"


class ViewRenderer:
    """Render jinja2 templates and lay the result out on A4 portrait pages.

    The rendered text is split into blocks on blank lines.  Blocks starting
    with ``# `` or ``## `` become headings, a ``<pagebreak/>`` block starts a
    new page and every other block is a paragraph, which may use reportlab's
    inline markup (``<b>``, ``<i>``, ``<br/>``, ``<font>``).
    """

    def __init__(self, search_paths: str | Path | Sequence[str | Path], *, title: str | None = None) -> None:
        if isinstance(search_paths, (str, Path)):
            search_paths = [search_paths]
        self.search_paths = [str(path) for path in search_paths]
        self.title = title
        self.environment = Environment(
            loader=FileSystemLoader(self.search_paths),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.styles = getSampleStyleSheet()

    def render_text(self, view: str, data: Mapping[str, Any] | None = None) -> str:
        name = template_name(view)
        try:
            template = self.environment.get_template(name)
        except TemplateNotFound as exc:
            raise MissingFileError(name, f"View not found: {view}") from exc
        return template.render(**dict(data or {}))

    def _story(self, text: str) -> list[Any]:
        story: list[Any] = []
        for block in _BLOCK_SPLIT.split(text.strip()):
            content = " ".join(line.strip() for line in block.splitlines()).strip()
            if not content:
                continue
            if _PAGE_BREAK.match(content):
                story.append(PageBreak())
            elif content.startswith("## "):
                story.append(Paragraph(content[3:], self.styles["Heading2"]))
            elif content.startswith("# "):
                story.append(Paragraph(content[2:], self.styles["Title"]))
            else:
                story.append(Paragraph(content, self.styles["BodyText"]))
        return story or [Spacer(1, 1)]

    def render(self, view: str, data: Mapping[str, Any] | None = None) -> bytes:
        """Render *view* with *data* and return the PDF bytes."""

        text = self.render_text(view, data)
        buffer = io.BytesIO()
        document = SimpleDocTemplate(
            buffer,
            pagesize=portrait(A4),
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=self.title or view,
        )
        document.build(self._story(text))
        LOGGER.debug("Rendered view %s (%d bytes)", view, buffer.tell())
        return buffer.getvalue()


__all__ = ["TEMPLATE_SUFFIXES", "ViewRenderer", "template_name"]
