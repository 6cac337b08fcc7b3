"""Closed enumerations shared by the stamping and form modules."""

from __future__ import annotations

from enum import Enum


class Pages(str, Enum):
    """Named classes of pages a stamp can be restricted to."""

    ALL = "all"
    FIRST = "first"
    LAST = "last"
    EVEN = "even"
    ODD = "odd"


class Horizontal(str, Enum):
    LEFT = "left"
    CENTRE = "centre"
    RIGHT = "right"


class Vertical(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class PagePosition(str, Enum):
    """Nine anchor points on a page, coded as ``<horizontal><vertical>``."""

    LEFT_BOTTOM = "LB"
    CENTRE_BOTTOM = "CB"
    RIGHT_BOTTOM = "RB"
    LEFT_TOP = "LT"
    CENTRE_TOP = "CT"
    RIGHT_TOP = "RT"
    LEFT_MIDDLE = "LM"
    CENTRE_MIDDLE = "CM"
    RIGHT_MIDDLE = "RM"

    # Aliases matching the way positions are usually spoken about.
    BOTTOM_LEFT = "LB"
    BOTTOM_CENTRE = "CB"
    BOTTOM_RIGHT = "RB"
    TOP_LEFT = "LT"
    TOP_CENTRE = "CT"
    TOP_RIGHT = "RT"
    MIDDLE_LEFT = "LM"
    MIDDLE_CENTRE = "CM"
    MIDDLE_RIGHT = "RM"

    @property
    def horizontal(self) -> Horizontal:
        return _HORIZONTAL[self.value[0]]

    @property
    def vertical(self) -> Vertical:
        return _VERTICAL[self.value[1]]

    @classmethod
    def parse(cls, value: "PagePosition | str") -> "PagePosition":
        """Accept a member, its code (``"RB"``) or a name (``"bottom-right"``)."""

        if isinstance(value, PagePosition):
            return value
        text = str(value).strip()
        try:
            return cls(text.upper())
        except ValueError:
            pass
        key = text.upper().replace("-", "_").replace(" ", "_").replace("CENTER", "CENTRE")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown page position: {value!r}") from None


_HORIZONTAL = {"L": Horizontal.LEFT, "C": Horizontal.CENTRE, "R": Horizontal.RIGHT}
_VERTICAL = {"T": Vertical.TOP, "M": Vertical.MIDDLE, "B": Vertical.BOTTOM}


class FieldModifier(str, Enum):
    """Structural changes that can be applied to a form field.

    Members are declared in precedence order: when a field carries several
    flags only the first applicable one is acted upon.
    """

    DELETE = "delete"
    FLATTEN = "flatten"
    READ_ONLY = "readonly"
    REQUIRED = "required"


__all__ = ["FieldModifier", "Horizontal", "PagePosition", "Pages", "Vertical"]
