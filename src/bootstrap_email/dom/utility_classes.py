# src/bootstrap_email/dom/utility_classes.py
"""
Tokenizer for the utility classes the rewrite passes understand.

Class strings are only handled here; the passes work with the parsed records.
"""
import re
from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

SPACING_PATTERN = re.compile(
    r"^(?P<property>[mp])(?P<direction>[tblrxy])?-(?:(?P<breakpoint>lg)-)?(?P<size>\d+)$"
)
COLUMN_PATTERN = re.compile(r"^col(?:-(?P<breakpoint>lg))?(?:-(?P<size>.+))?$")

_PROPERTIES = {"m": "margin", "p": "padding"}


class SpacingClass(BaseModel):
    """A margin or padding class, e.g. `my-5` or `pt-lg-2`."""
    model_config = ConfigDict(frozen=True)

    token: str
    property: Literal["margin", "padding"]
    direction: Optional[str] = None
    breakpoint: Optional[str] = None
    size: int

    @property
    def neutral(self) -> str:
        """The class in the spacer namespace: `my-5` -> `sy-5`."""
        return "s" + self.token[1:]


class ColumnClass(BaseModel):
    """
    A grid column class. `size` is None for auto columns (`col`, `col-lg`);
    `malformed` is set when the suffix is not a usable number (`col-md-6`, `col-0`).
    """
    model_config = ConfigDict(frozen=True)

    token: str
    breakpoint: Optional[str] = None
    size: Optional[int] = None
    malformed: bool = False


def parse_spacing_class(token: str) -> Optional[SpacingClass]:
    match = SPACING_PATTERN.match(token)
    if not match:
        return None
    return SpacingClass(
        token=token,
        property=_PROPERTIES[match.group("property")],
        direction=match.group("direction"),
        breakpoint=match.group("breakpoint"),
        size=int(match.group("size")),
    )


def spacing_classes(tokens: Iterable[str], prop: Optional[str] = None) -> List[SpacingClass]:
    """Returns all spacing classes in `tokens`, optionally limited to 'margin' or 'padding'."""
    result = []
    for token in tokens:
        parsed = parse_spacing_class(token)
        if parsed and (prop is None or parsed.property == prop):
            result.append(parsed)
    return result


def parse_column_class(token: str) -> Optional[ColumnClass]:
    match = COLUMN_PATTERN.match(token)
    if not match:
        return None

    breakpoint = match.group("breakpoint")
    suffix = match.group("size")
    if suffix is None:
        return ColumnClass(token=token, breakpoint=breakpoint)
    if not suffix.isdigit() or int(suffix) < 1:
        return ColumnClass(token=token, breakpoint=breakpoint, malformed=True)
    return ColumnClass(token=token, breakpoint=breakpoint, size=int(suffix))


def is_column_token(token: str) -> bool:
    return COLUMN_PATTERN.match(token) is not None
