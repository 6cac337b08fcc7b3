"""Form filling and field modifier policies."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Optional, Tuple

from .backends.base import FieldNotFound
from .backends.pypdf_forms import FormEditor, FormField
from .enums import FieldModifier
from .exceptions import InvalidArgumentError, InvalidFieldError

LOGGER = logging.getLogger("pdfmanager.forms")

FieldAction = Tuple[FieldModifier, bool]


class FieldModifierPolicy:
    """Per-field structural changes to apply during a build.

    Each field maps to a set of :class:`FieldModifier` flags.  When a field
    carries several flags only one is acted upon, in the order ``DELETE``,
    ``FLATTEN``, ``READ_ONLY``, ``REQUIRED``.  ``DELETE`` and ``FLATTEN``
    only count when true; ``READ_ONLY`` and ``REQUIRED`` count whenever they
    are present, their value being the state to set.

    Example::

        policy = FieldModifierPolicy().flatten("name").read_only("email")
    """

    def __init__(self, modifiers: Mapping[str, Mapping[Any, bool]] | None = None) -> None:
        self._fields: dict[str, dict[FieldModifier, bool]] = {}
        for name, flags in (modifiers or {}).items():
            for modifier, value in flags.items():
                self.set(name, modifier, value)

    def set(self, field_name: str, modifier: FieldModifier | str, value: bool = True) -> "FieldModifierPolicy":
        self._fields.setdefault(field_name, {})[FieldModifier(modifier)] = bool(value)
        return self

    def delete(self, *field_names: str) -> "FieldModifierPolicy":
        for name in field_names:
            self.set(name, FieldModifier.DELETE)
        return self

    def flatten(self, *field_names: str) -> "FieldModifierPolicy":
        for name in field_names:
            self.set(name, FieldModifier.FLATTEN)
        return self

    def read_only(self, *field_names: str, value: bool = True) -> "FieldModifierPolicy":
        for name in field_names:
            self.set(name, FieldModifier.READ_ONLY, value)
        return self

    def required(self, *field_names: str, value: bool = True) -> "FieldModifierPolicy":
        for name in field_names:
            self.set(name, FieldModifier.REQUIRED, value)
        return self

    def update(self, other: "FieldModifierPolicy | Mapping[str, Mapping[Any, bool]]") -> "FieldModifierPolicy":
        items = other.to_dict() if isinstance(other, FieldModifierPolicy) else other
        for name, flags in items.items():
            for modifier, value in flags.items():
                self.set(name, modifier, value)
        return self

    def modifiers_for(self, field_name: str) -> dict[FieldModifier, bool]:
        return dict(self._fields.get(field_name, {}))

    def action_for(self, field_name: str) -> Optional[FieldAction]:
        flags = self._fields.get(field_name, {})
        if flags.get(FieldModifier.DELETE):
            return FieldModifier.DELETE, True
        if flags.get(FieldModifier.FLATTEN):
            return FieldModifier.FLATTEN, True
        if FieldModifier.READ_ONLY in flags:
            return FieldModifier.READ_ONLY, flags[FieldModifier.READ_ONLY]
        if FieldModifier.REQUIRED in flags:
            return FieldModifier.REQUIRED, flags[FieldModifier.REQUIRED]
        return None

    def to_dict(self) -> dict[str, dict[str, bool]]:
        return {
            name: {modifier.value: value for modifier, value in flags.items()}
            for name, flags in self._fields.items()
        }

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._fields))

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._fields

    def __repr__(self) -> str:
        return f"FieldModifierPolicy({self.to_dict()!r})"


def _lookup(editor: FormEditor, name: str, ignore_missing: bool) -> FormField | None:
    try:
        return editor.field(name)
    except FieldNotFound as exc:
        if ignore_missing:
            LOGGER.debug("Field %s not found, skipping", name)
            return None
        raise InvalidFieldError(name) from exc


def fill_fields(editor: FormEditor, data: Mapping[str, Any], ignore_missing: bool = False) -> None:
    """Write *data* into the form fields of the editor's document.

    Values are written verbatim; an empty string clears a field.
    """

    if not data:
        raise InvalidArgumentError("No form data was given")
    for name, value in data.items():
        form_field = _lookup(editor, name, ignore_missing)
        if form_field is not None:
            form_field.set_value(value)
    LOGGER.info("Filled %d form fields", len(data))


def apply_field_modifiers(
    editor: FormEditor,
    policy: FieldModifierPolicy,
    ignore_missing: bool = False,
) -> None:
    for name in policy:
        form_field = _lookup(editor, name, ignore_missing)
        action = policy.action_for(name)
        if form_field is None or action is None:
            continue
        modifier, value = action
        if modifier is FieldModifier.DELETE:
            form_field.delete()
        elif modifier is FieldModifier.FLATTEN:
            form_field.flatten()
        elif modifier is FieldModifier.READ_ONLY:
            form_field.set_read_only(value)
        else:
            form_field.set_required(value)
        LOGGER.debug("Applied %s to field %s", modifier.value, name)


def coerce_policy(policy: FieldModifierPolicy | Mapping[str, Mapping[Any, bool]] | None) -> FieldModifierPolicy:
    if policy is None:
        return FieldModifierPolicy()
    if isinstance(policy, FieldModifierPolicy):
        return policy
    return FieldModifierPolicy(policy)


def field_names(names: Iterable[str] | str) -> list[str]:
    return [names] if isinstance(names, str) else list(names)


__all__ = [
    "FieldModifierPolicy",
    "apply_field_modifiers",
    "coerce_policy",
    "field_names",
    "fill_fields",
]
