# src/bootstrap_email/dom/content_compiler.py
import copy
import logging
import re
from enum import Enum
from typing import Callable, List, Optional, Set

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from bootstrap_email.constants import (
    BLOCK_CLASSES,
    BLOCK_ELEMENTS,
    MSO_EXCLUDE_END,
    MSO_EXCLUDE_START,
    NBSP,
    PREVIEW_LENGTH,
    VOID_ELEMENTS,
    DebugAttributes,
)
from bootstrap_email.dom.element_helper import ElementHelper
from bootstrap_email.dom.grid import layout, resolve_column
from bootstrap_email.dom.utility_classes import (
    is_column_token,
    parse_column_class,
    spacing_classes,
)
from bootstrap_email.model import CompileWarning

logger = logging.getLogger(__name__)

_DISPLAY_PATTERN = re.compile(r"(?:^|;)\s*display\s*:\s*([\w-]+)", re.IGNORECASE)

ROW_CLASSES = ("row", "row-fluid")
COMPONENT_SELECTORS = (".card", ".card-body", ".btn", ".alert")


class Alignment(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


ALIGNMENT_SELECTORS = {
    Alignment.LEFT: ".float-left",
    Alignment.RIGHT: ".float-right",
    Alignment.CENTER: ".mx-auto",
}


class ContentCompiler:
    """
    Runs the rewrite passes on one parsed document.

    The passes mutate the tree in place and must run in the order of `compile()`:
    spacing resolves against the authored elements before containers and grids
    wrap them, and `table()` runs last so it sees every synthesized table.
    """

    def __init__(self, soup: BeautifulSoup):
        self._soup = soup
        self.warnings: List[CompileWarning] = []

    # --- Full pipeline ---

    def compile(
            self,
            columns: int = 12,
            container_width: int = 600,
            container_width_fallback: bool = True,
            preview_length: int = PREVIEW_LENGTH,
    ) -> List[CompileWarning]:
        """Runs every pass in order and returns the collected warnings."""
        self.preview(preview_length)
        self.body()

        self.padding()
        self.margin()

        self.container(container_width, container_width_fallback)
        self.grid(columns)

        self.hr()

        self.align(Alignment.LEFT)
        self.align(Alignment.RIGHT)
        self.align(Alignment.CENTER)

        self.div()

        self.badge()
        for selector in COMPONENT_SELECTORS:
            self.component(selector)

        self.table()
        return self.warnings

    # --- Passes ---

    def preview(self, length: int = PREVIEW_LENGTH) -> None:
        """Turns the <preview> tag into a div and pads its text with whitespace to `length` characters."""
        preview = self._soup.find("preview")
        if preview is None:
            return

        missing = length - len(preview.get_text())
        if missing > 0:
            preview.append(NBSP * missing)

        ElementHelper.add_class(preview, "preview")
        preview.name = "div"

    def body(self) -> None:
        """Wraps the body content into the body table."""
        body = self._soup.body
        if body is not None:
            ElementHelper.wrap_content(body, "body")

    def padding(self) -> None:
        """Moves padding classes onto a spacer table inside the element (around it for void elements)."""
        for el in self._iter_spacing_targets("padding"):
            tokens = spacing_classes(ElementHelper.get_classes(el), "padding")
            ElementHelper.remove_class(el, [t.token for t in tokens])

            classes = [t.neutral for t in tokens]
            if self._is_block(el):
                classes.append("w-100")
            attributes = {DebugAttributes.SOURCE: "padding"}

            if el.name in VOID_ELEMENTS:
                ElementHelper.wrap(el, "spacing", classes=classes, attributes=attributes, transclude_classes=False)
            else:
                ElementHelper.wrap_content(el, "spacing", classes=classes, attributes=attributes)

    def margin(self) -> None:
        """Moves margin classes onto a full width spacer table around the element."""
        skipped: Set[int] = set()

        for el in self._iter_spacing_targets("margin", skipped):
            if not self._is_block(el):
                self._warn(
                    "INLINE_MARGIN",
                    f"Inline elements do not support margins. Got <{el.name}>",
                    el,
                )
                skipped.add(id(el))
                continue

            tokens = spacing_classes(ElementHelper.get_classes(el), "margin")
            ElementHelper.remove_class(el, [t.token for t in tokens])

            classes = [t.neutral for t in tokens] + ["w-100"]
            ElementHelper.wrap(
                el,
                "spacing",
                classes=classes,
                attributes={DebugAttributes.SOURCE: "margin"},
                transclude_classes=False,
            )

    def container(self, width: int = 600, fallback: bool = True) -> None:
        """
        Wraps containers twice: the outer table holds the Outlook fixed width fallback,
        the inner table the max-width.
        """
        for el in self._soup.select(".container, .container-fluid"):
            variables = {
                "containerWidthFallback": fallback and not ElementHelper.has_class(el, "container-fluid"),
                "width": width,
            }
            ElementHelper.wrap(el, "container", variables=variables)
            ElementHelper.replace(el, "container-inner", variables=variables)

    def grid(self, columns: int = 12) -> None:
        """Replaces the content of every row with a desktop grid and an Outlook-hidden mobile grid."""
        while True:
            row = self._soup.find(self._is_row)
            if row is None:
                break
            self._compile_row(row, columns)

    def hr(self) -> None:
        for el in self._soup.find_all("hr"):
            ElementHelper.replace(el, "hr")

    def align(self, direction: Alignment) -> None:
        """Handles floats and centered elements."""
        direction = Alignment(direction)
        source = ALIGNMENT_SELECTORS[direction].lstrip(".")

        for el in self._soup.select(ALIGNMENT_SELECTORS[direction]):
            if direction is Alignment.CENTER:
                ElementHelper.wrap(
                    el, "center", attributes={DebugAttributes.SOURCE: source}, transclude_classes=False
                )
            elif el.name == "table":
                el["align"] = direction.value
                ElementHelper.mark_source(el, source)
            else:
                ElementHelper.wrap(
                    el,
                    "table",
                    attributes={"align": direction.value, DebugAttributes.SOURCE: source},
                    transclude_classes=False,
                )

    def div(self) -> None:
        """Replaces all divs with one-cell tables. Divs without class or style are dropped."""
        for el in self._soup.find_all("div"):
            if not el.get("class") and not el.get("style"):
                ElementHelper.unwrap(el)
                continue

            has_width = any(c.startswith("w-") for c in ElementHelper.get_classes(el))
            table = ElementHelper.replace(el, "table")
            if not has_width:
                ElementHelper.add_class(table, "w-100")

    def badge(self) -> None:
        """Pads badge content with two non-breaking spaces on each side."""
        for el in self._soup.select(".badge"):
            el.insert(0, NBSP * 2)
            el.append(NBSP * 2)

    def component(self, selector: str) -> None:
        """Wraps design components which are not tables yet into a table."""
        for el in self._soup.select(selector):
            if el.name != "table":
                ElementHelper.wrap(el, "table")

    def table(self) -> None:
        """Adds border, cellpadding and cellspacing attributes to all tables."""
        for el in self._soup.find_all("table"):
            el["border"] = "0"
            el["cellpadding"] = "0"
            el["cellspacing"] = "0"

    # --- Grid internals ---

    def _compile_row(self, row: Tag, columns: int) -> None:
        no_gutters = ElementHelper.has_class(row, "no-gutters")

        # Each cell holds the row child; `sized` is the element carrying the column classes,
        # which is the child itself or the column inside a margin spacer.
        cells: List[Tag] = []
        sized: List[Tag] = []
        for child in row.find_all(True, recursive=False):
            column = child if self._is_column(child) else self._spaced_column(child)
            if column is not None:
                cells.append(child)
                sized.append(column)

        desktop_sizes, mobile_sizes = [], []
        for column in sized:
            sizes = resolve_column(ElementHelper.get_classes(column), columns)
            desktop_sizes.append(sizes.desktop)
            mobile_sizes.append(sizes.mobile)
            for warning in sizes.warnings:
                self._warn(warning.code, warning.message, column)

        # The desktop grid gets copies, the mobile grid the authored nodes.
        desktop_cells = [copy.copy(cell) for cell in cells]
        desktop_sized = [
            copy_ if cell is column else self._spaced_column(copy_)
            for copy_, cell, column in zip(desktop_cells, cells, sized)
        ]
        desktop = self._generate_grid(desktop_cells, desktop_sized, desktop_sizes, columns, no_gutters, "desktop")
        mobile = self._generate_grid(cells, sized, mobile_sizes, columns, no_gutters, "mobile")

        leftovers = [node for node in row.contents if not (isinstance(node, NavigableString) and not node.strip())]
        if leftovers:
            self._warn("ROW_CONTENT_DROPPED", f"{len(leftovers)} non-column node(s) removed from row", row)
        row.clear()

        row.append(desktop)
        row.append(Comment(MSO_EXCLUDE_START))
        row.append(mobile)
        row.append(Comment(MSO_EXCLUDE_END))

        ElementHelper.remove_class(row, [c for c in ROW_CLASSES if ElementHelper.has_class(row, c)])

    def _generate_grid(
            self,
            cells: List[Tag],
            sized: List[Tag],
            sizes: List[int],
            columns: int,
            no_gutters: bool,
            viewport: str,
    ) -> Tag:
        lines = []
        for line in layout(sizes, columns):
            row_cells = []
            for position, index in enumerate(line.columns):
                if position > 0 and not no_gutters:
                    row_cells.append(ElementHelper.create("col-separator"))

                ElementHelper.remove_class(sized[index], self._column_tokens(sized[index]))
                row_cells.append(ElementHelper.create("col", [cells[index]], variables={"size": sizes[index]}))

            if line.filler > 0:
                row_cells.append(ElementHelper.create(
                    "col", classes="bte-col-filler", variables={"size": line.filler}
                ))
            lines.append(ElementHelper.create("row", row_cells))

        return ElementHelper.create("grid", lines, variables={"viewport": viewport})

    def _spaced_column(self, tag: Tag) -> Optional[Tag]:
        """The column wrapped by a margin spacer table, None when `tag` is not such a spacer."""
        if "margin" not in (tag.get(DebugAttributes.SOURCE) or "").split():
            return None
        cell = tag.find("td")
        if cell is None:
            return None
        children = cell.find_all(True, recursive=False)
        if len(children) == 1 and self._is_column(children[0]):
            return children[0]
        return None

    @staticmethod
    def _column_tokens(col: Tag) -> List[str]:
        """Column classes which are consumed by the grid (malformed ones are left for the author)."""
        tokens = []
        for token in ElementHelper.get_classes(col):
            parsed = parse_column_class(token)
            if parsed is not None and not parsed.malformed:
                tokens.append(token)
        return tokens

    @staticmethod
    def _is_row(tag: Tag) -> bool:
        classes = ElementHelper.get_classes(tag)
        return any(c in classes for c in ROW_CLASSES)

    @staticmethod
    def _is_column(tag: Tag) -> bool:
        return any(is_column_token(c) for c in ElementHelper.get_classes(tag))

    # --- Helpers ---

    def _iter_spacing_targets(self, prop: str, skipped: Optional[Set[int]] = None):
        """
        Yields the first element that still carries a `prop` class, re-selecting after every
        mutation since wrapping moves elements around.
        """
        skipped = skipped if skipped is not None else set()
        matcher: Callable[[Tag], bool] = lambda tag: (
            id(tag) not in skipped and bool(spacing_classes(ElementHelper.get_classes(tag), prop))
        )
        while True:
            el = self._soup.find(matcher)
            if el is None:
                return
            yield el

    @staticmethod
    def _is_block(el: Tag) -> bool:
        match = _DISPLAY_PATTERN.search(el.get("style") or "")
        if match:
            return match.group(1).lower() == "block"
        if any(c in BLOCK_CLASSES for c in ElementHelper.get_classes(el)):
            return True
        return el.name in BLOCK_ELEMENTS

    def _warn(self, code: str, message: str, el: Optional[Tag] = None) -> None:
        warning = CompileWarning(
            code=code,
            message=message,
            tag=el.name if el is not None else None,
            classes=ElementHelper.get_classes(el) if el is not None else [],
        )
        self.warnings.append(warning)
        logger.warning("%s: %s", code, message)
