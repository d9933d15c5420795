# src/bootstrap_email/services/css_inline_service.py
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

import cssutils
import soupsieve
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Elements receiving presentational attributes besides the style attribute.
TABLE_ELEMENTS = ("table", "td", "th")
DIMENSION_ELEMENTS = ("table", "td", "th", "img")

_DIMENSION = re.compile(r"^\s*(\d+(?:\.\d+)?)(px|%)?\s*$")

# (important, specificity, source order)
Priority = Tuple[bool, Tuple[int, ...], int]


class _Declaration:
    __slots__ = ("name", "value", "priority")

    def __init__(self, name: str, value: str, priority: Priority):
        self.name = name
        self.value = value
        self.priority = priority


class CssInlineService:
    """
    Moves the rules of a stylesheet into style attributes.

    Declarations cascade by !important, selector specificity and source order.
    Styles already present in a style attribute always win over the stylesheet.
    """

    def __init__(self, css: str):
        cssutils.log.setLevel(logging.CRITICAL)
        self._rules = self._parse(css)

    @staticmethod
    def _parse(css: str) -> List[Tuple[str, Tuple[int, ...], List[Tuple[str, str, bool]]]]:
        """Flattens the stylesheet into (selector, specificity, declarations) entries."""
        rules = []
        sheet = cssutils.parseString(css or "", validate=False)
        for rule in sheet.cssRules:
            if rule.type != rule.STYLE_RULE:
                continue
            declarations = [
                (prop.name.lower(), prop.value, bool(prop.priority))
                for prop in rule.style
            ]
            if not declarations:
                continue
            for selector in rule.selectorList:
                rules.append((selector.selectorText, tuple(selector.specificity), declarations))
        return rules

    def inline(self, soup: BeautifulSoup) -> None:
        """Applies the stylesheet to the document in place."""
        matched: Dict[int, Tuple[Tag, List[_Declaration]]] = {}
        order = 0

        for selector, specificity, declarations in self._rules:
            try:
                elements = soup.select(selector)
            except (soupsieve.SelectorSyntaxError, NotImplementedError) as e:
                logger.debug("Selector '%s' not supported, skipped: %s", selector, e)
                continue

            for el in elements:
                _, collected = matched.setdefault(id(el), (el, []))
                for name, value, important in declarations:
                    order += 1
                    collected.append(_Declaration(name, value, (important, specificity, order)))

        for el, declarations in matched.values():
            self._apply(el, declarations)

    def _apply(self, el: Tag, declarations: List[_Declaration]) -> None:
        winners: Dict[str, _Declaration] = {}
        for declaration in sorted(declarations, key=lambda d: d.priority):
            winners[declaration.name] = declaration

        style: Dict[str, str] = {name: d.value for name, d in winners.items()}
        # Inline declarations beat everything except !important sheet rules.
        for name, value in self.parse_style(el.get("style")).items():
            if name in winners and winners[name].priority[0]:
                continue
            style[name] = value

        if not style:
            return

        el["style"] = self.serialize_style(style)
        self._apply_attributes(el, style)

    @staticmethod
    def _apply_attributes(el: Tag, style: Dict[str, str]) -> None:
        """Mirrors widths, heights and colors into the presentational attributes email clients honor."""
        if el.name in DIMENSION_ELEMENTS:
            for prop in ("width", "height"):
                value = _dimension_attribute(style.get(prop))
                if value is not None:
                    el[prop] = value

        if el.name in TABLE_ELEMENTS:
            if style.get("background-color"):
                el["bgcolor"] = style["background-color"]
            if el.name != "table" and style.get("text-align"):
                el["align"] = style["text-align"]
            if style.get("vertical-align"):
                el["valign"] = style["vertical-align"]

    @staticmethod
    def parse_style(style: Optional[str]) -> Dict[str, str]:
        """Parses a style attribute into an ordered name -> value mapping."""
        result: Dict[str, str] = {}
        if not style:
            return result
        # cssutils keeps semicolons inside url() and strings intact.
        for prop in cssutils.parseStyle(style, validate=False):
            if prop.value:
                result[prop.name.lower()] = prop.value
        return result

    @staticmethod
    def serialize_style(style: Dict[str, str]) -> str:
        return "; ".join(f"{name}: {value}" for name, value in style.items()) + ";"


def _dimension_attribute(value: Optional[str]) -> Optional[str]:
    """`600px` -> `600`, `100%` -> `100%`; anything else (auto, em, calc) is not expressible."""
    if not value:
        return None
    match = _DIMENSION.match(value)
    if not match:
        return None
    number, unit = match.groups()
    if unit == "%":
        return f"{number}%"
    return number
