"""AcroForm access for documents opened with the pypdf backend.

Fields are addressed by their fully qualified name (partial names joined
with ``.``).  When several field objects share a name, which happens after
merging documents without renaming, every operation applies to all of them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NumberObject,
    StreamObject,
    TextStringObject,
)

from .base import FieldNotFound

if TYPE_CHECKING:
    from .pypdf_backend import PypdfDocument

LOGGER = logging.getLogger("pdfmanager.forms")

FLAG_READ_ONLY = 1
FLAG_REQUIRED = 1 << 1
FLAG_RADIO = 1 << 15
FLAG_PUSH_BUTTON = 1 << 16
FLAG_COMBO = 1 << 17

ANNOTATION_HIDDEN = 1 << 1

_MAX_DEPTH = 32
_OFF = NameObject("/Off")


def _resolve(obj: Any) -> Any:
    return obj.get_object() if obj is not None else None


def _parent(node: DictionaryObject) -> DictionaryObject | None:
    return _resolve(node.get("/Parent"))


def _inherited(node: DictionaryObject, key: str) -> Any:
    current: DictionaryObject | None = node
    for _ in range(_MAX_DEPTH):
        if current is None:
            return None
        if key in current:
            return _resolve(current[key])
        current = _parent(current)
    return None


def _qualified_name(node: DictionaryObject) -> str:
    parts: list[str] = []
    current: DictionaryObject | None = node
    for _ in range(_MAX_DEPTH):
        if current is None:
            break
        if "/T" in current:
            parts.append(str(current["/T"]))
        current = _parent(current)
    return ".".join(reversed(parts))


def _field_root(node: DictionaryObject) -> DictionaryObject:
    current = node
    for _ in range(_MAX_DEPTH):
        parent = _parent(current)
        if parent is None:
            break
        current = parent
    return current


def _is_widget(node: DictionaryObject) -> bool:
    return node.get("/Subtype") == "/Widget"


def _remove_from_array(array: ArrayObject, target: DictionaryObject) -> bool:
    removed = False
    for index in reversed(range(len(array))):
        if _resolve(array[index]) is target:
            del array[index]
            removed = True
    return removed


def _rect(widget: DictionaryObject) -> tuple[float, float, float, float]:
    x1, y1, x2, y2 = (float(value) for value in _resolve(widget["/Rect"]))
    return min(x1, x2), min(y1, y2), abs(x2 - x1), abs(y2 - y1)


def _on_states(widget: DictionaryObject) -> list[NameObject]:
    appearance = _resolve(widget.get("/AP"))
    if appearance is None:
        return []
    normal = _resolve(appearance.get("/N"))
    if normal is None or isinstance(normal, StreamObject):
        return []
    return [NameObject(state) for state in normal.keys() if state != "/Off"]


@dataclass
class _Terminal:
    node: DictionaryObject
    widgets: list[tuple[DictionaryObject, Any]] = field(default_factory=list)


class FormField:
    """Every field object in a document that shares one qualified name."""

    def __init__(self, editor: "FormEditor", name: str, terminals: list[_Terminal]) -> None:
        self._editor = editor
        self._terminals = terminals
        self.name = name

    @property
    def _node(self) -> DictionaryObject:
        return self._terminals[0].node

    @property
    def widgets(self) -> list[DictionaryObject]:
        return [widget for terminal in self._terminals for widget, _ in terminal.widgets]

    @property
    def flags(self) -> int:
        return int(_inherited(self._node, "/Ff") or 0)

    @property
    def field_type(self) -> str:
        kind = _inherited(self._node, "/FT")
        flags = self.flags
        if kind == "/Tx":
            return "text"
        if kind == "/Btn":
            if flags & FLAG_PUSH_BUTTON:
                return "push_button"
            return "radio" if flags & FLAG_RADIO else "checkbox"
        if kind == "/Ch":
            return "combo" if flags & FLAG_COMBO else "list"
        if kind == "/Sig":
            return "signature"
        return "unknown"

    @property
    def value(self) -> str | None:
        value = _inherited(self._node, "/V")
        if value is None:
            return None
        if isinstance(value, NameObject):
            return str(value)[1:]
        if isinstance(value, ArrayObject):
            return ", ".join(str(_resolve(item)) for item in value)
        return str(value)

    @property
    def read_only(self) -> bool:
        return bool(self.flags & FLAG_READ_ONLY)

    @property
    def required(self) -> bool:
        return bool(self.flags & FLAG_REQUIRED)

    def set_value(self, value: Any) -> None:
        kind = self.field_type
        if kind == "push_button":
            LOGGER.debug("Ignoring value for push button %s", self.name)
            return
        if kind in ("checkbox", "radio"):
            self._set_state(value, radio=kind == "radio")
        else:
            self._editor.fill_text(self, "" if value is None else str(value))
        self._editor.need_appearances()
        LOGGER.debug("Set value of field %s", self.name)

    def _set_state(self, value: Any, *, radio: bool) -> None:
        if isinstance(value, str) and value.strip().lower() in ("", "off", "/off", "false", "0", "no"):
            value = False
        if value is None or value is False:
            for terminal in self._terminals:
                terminal.node[NameObject("/V")] = _OFF
                for widget, _ in terminal.widgets:
                    widget[NameObject("/AS")] = _OFF
            return

        requested = None if value is True else NameObject("/" + str(value).lstrip("/"))
        for terminal in self._terminals:
            widgets = [widget for widget, _ in terminal.widgets]
            matched = requested is not None and any(requested in _on_states(widget) for widget in widgets)
            if requested is not None and (matched or radio):
                chosen = requested
                for widget in widgets:
                    widget[NameObject("/AS")] = requested if requested in _on_states(widget) else _OFF
            else:
                chosen = None
                for widget in widgets:
                    states = _on_states(widget) or [NameObject("/Yes")]
                    widget[NameObject("/AS")] = states[0]
                    chosen = chosen or states[0]
                chosen = chosen or NameObject("/Yes")
            terminal.node[NameObject("/V")] = chosen

    def set_read_only(self, read_only: bool = True) -> None:
        self._set_flag(FLAG_READ_ONLY, read_only)

    def set_required(self, required: bool = True) -> None:
        self._set_flag(FLAG_REQUIRED, required)

    def _set_flag(self, bit: int, enabled: bool) -> None:
        for terminal in self._terminals:
            flags = int(_inherited(terminal.node, "/Ff") or 0)
            flags = flags | bit if enabled else flags & ~bit
            terminal.node[NameObject("/Ff")] = NumberObject(flags)

    def delete(self) -> None:
        """Remove the field and its widgets from the document."""

        for terminal in self._terminals:
            for widget, page in terminal.widgets:
                if page is not None:
                    annotations = _resolve(page.get("/Annots"))
                    if annotations is not None:
                        _remove_from_array(annotations, widget)
            self._editor.detach(terminal.node)
        self._editor.refresh()
        LOGGER.debug("Deleted field %s", self.name)

    def flatten(self) -> None:
        """Draw the field's current appearance into the page and remove it."""

        for terminal in self._terminals:
            for widget, page in terminal.widgets:
                if page is None or int(_resolve(widget.get("/F")) or 0) & ANNOTATION_HIDDEN:
                    continue
                appearance = self._editor.normal_appearance(widget)
                if appearance is None and self.field_type in ("text", "combo", "list") and self.value:
                    self._editor.fill_text(self, self.value)
                    appearance = self._editor.normal_appearance(widget)
                if appearance is not None:
                    self._editor.draw_appearance(page, widget, appearance)
        self.delete()
        LOGGER.debug("Flattened field %s", self.name)

    def __repr__(self) -> str:
        return f"FormField(name={self.name!r}, type={self.field_type!r})"


class FieldSet(Mapping):
    """Read-only mapping of qualified field names to :class:`FormField`."""

    def __init__(self, fields: dict[str, FormField]) -> None:
        self._fields = fields

    def __getitem__(self, name: str) -> FormField:
        try:
            return self._fields[name]
        except KeyError:
            raise FieldNotFound(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def names(self) -> list[str]:
        return list(self._fields)

    def types(self) -> dict[str, str]:
        return {name: form_field.field_type for name, form_field in self._fields.items()}


class FormEditor:
    """Per-document session used to read and change form fields.

    The field index is built lazily and rebuilt after structural changes
    such as deleting or flattening a field.
    """

    def __init__(self, document: "PypdfDocument") -> None:
        self.document = document
        self._fields: FieldSet | None = None

    @property
    def fields(self) -> FieldSet:
        if self._fields is None:
            self._fields = self._build()
        return self._fields

    def field(self, name: str) -> FormField:
        return self.fields[name]

    def refresh(self) -> None:
        self._fields = None

    def _build(self) -> FieldSet:
        page_of: dict[int, Any] = {}
        widgets_in_order: list[DictionaryObject] = []
        for page in self.document.iter_pages():
            annotations = _resolve(page.get("/Annots"))
            for item in annotations or []:
                annotation = _resolve(item)
                if annotation is not None and _is_widget(annotation):
                    page_of[id(annotation)] = page
                    widgets_in_order.append(annotation)

        terminals: list[_Terminal] = []
        visited: set[int] = set()

        def visit(node: DictionaryObject, depth: int) -> None:
            if id(node) in visited or depth > _MAX_DEPTH:
                return
            visited.add(id(node))
            kids = [_resolve(kid) for kid in _resolve(node.get("/Kids")) or []]
            child_fields = [kid for kid in kids if "/T" in kid]
            child_widgets = [kid for kid in kids if "/T" not in kid]
            for child in child_fields:
                visit(child, depth + 1)
            if child_fields and not child_widgets:
                return
            own = child_widgets if kids else ([node] if _is_widget(node) or "/Rect" in node else [])
            terminals.append(_Terminal(node, [(widget, page_of.get(id(widget))) for widget in own]))

        form = self.document.acroform()
        if form is not None:
            for item in _resolve(form.get("/Fields")) or []:
                visit(_resolve(item), 0)
        for widget in widgets_in_order:
            root = _field_root(widget)
            if "/T" in root or "/FT" in root:
                visit(root, 0)

        grouped: dict[str, list[_Terminal]] = {}
        for terminal in terminals:
            name = _qualified_name(terminal.node)
            if name:
                grouped.setdefault(name, []).append(terminal)
        return FieldSet({name: FormField(self, name, group) for name, group in grouped.items()})

    def need_appearances(self) -> None:
        form = self.document.acroform(create=True)
        form[NameObject("/NeedAppearances")] = BooleanObject(True)

    def detach(self, node: DictionaryObject) -> None:
        parent = _parent(node)
        if parent is None:
            form = self.document.acroform()
            fields = _resolve(form.get("/Fields")) if form is not None else None
            if fields is not None:
                _remove_from_array(fields, node)
            return
        kids = _resolve(parent.get("/Kids"))
        if kids is not None:
            _remove_from_array(kids, node)
            if len(kids) == 0:
                self.detach(parent)

    def normal_appearance(self, widget: DictionaryObject) -> IndirectObject | None:
        appearance = _resolve(widget.get("/AP"))
        if appearance is None or "/N" not in appearance:
            return None
        container, key = appearance, "/N"
        normal = _resolve(appearance["/N"])
        if not isinstance(normal, StreamObject):
            state = widget.get("/AS")
            if state is None or state not in normal:
                return None
            container, key = normal, state
        raw = container.raw_get(key)
        if isinstance(raw, IndirectObject):
            return raw
        return self.document.add_object(_resolve(raw))

    def fill_text(self, form_field: FormField, text: str) -> None:
        """Set a text or choice value and let pypdf generate the widget appearances."""

        self.document.form_defaults()
        pages: dict[int, Any] = {}
        for terminal in form_field._terminals:
            terminal.node[NameObject("/V")] = TextStringObject(text)
            for _, page in terminal.widgets:
                if page is not None:
                    pages.setdefault(id(page), page)
        for page in pages.values():
            self.document.writer.update_page_form_field_values(page, {form_field.name: text}, auto_regenerate=True)

    def draw_appearance(self, page: Any, widget: DictionaryObject, appearance: IndirectObject) -> None:
        x, y, width, height = _rect(widget)
        xobject = _resolve(appearance)
        bbox = [float(value) for value in _resolve(xobject.get("/BBox")) or (0, 0, width, height)]
        box_width = bbox[2] - bbox[0]
        box_height = bbox[3] - bbox[1]
        scale_x = width / box_width if box_width else 1.0
        scale_y = height / box_height if box_height else 1.0

        name = self.document.register_xobject(page, appearance)
        content = (
            f"q {scale_x:g} 0 0 {scale_y:g} {x - bbox[0] * scale_x:g} {y - bbox[1] * scale_y:g} cm "
            f"/{name} Do Q\n"
        )
        self.document.append_content(page, content.encode("ascii"))


__all__ = ["FieldSet", "FormEditor", "FormField"]
