# src/bootstrap_email/dom/grid.py
"""
Column sizing and line breaking for the grid pass.

Works on class tokens and sizes only; building the tables is done by the ContentCompiler.
"""
import logging
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from bootstrap_email.dom.utility_classes import ColumnClass, parse_column_class
from bootstrap_email.model import CompileWarning

logger = logging.getLogger(__name__)

LG = "lg"


class ColumnSizes(BaseModel):
    """Resolved sizes of one column for both grids."""
    desktop: int
    mobile: int
    warnings: List[CompileWarning] = Field(default_factory=list)


class GridLine(BaseModel):
    """One line of a grid: the indexes of its columns, their sizes and the remaining space."""
    columns: List[int] = Field(default_factory=list)
    sizes: List[int] = Field(default_factory=list)
    filler: int = 0

    @property
    def total(self) -> int:
        return sum(self.sizes)


def _pick(candidates: List[ColumnClass], scope: str, warnings: List[CompileWarning]) -> Optional[int]:
    """Returns the size of the last declared class of a scope."""
    if not candidates:
        return None
    if len(candidates) > 1:
        tokens = [c.token for c in candidates]
        warnings.append(CompileWarning(
            code="DUPLICATE_COLUMN_CLASS",
            message=f"Multiple {scope} column classes {tokens}, using '{tokens[-1]}'",
            classes=tokens,
        ))
    return candidates[-1].size


def resolve_column(tokens: Iterable[str], columns: int) -> ColumnSizes:
    """
    Resolves the desktop and mobile size of a column from its class tokens.

    Desktop prefers `col-lg-N` and falls back to `col-N`, mobile only uses `col-N`.
    Columns without a usable class span the full row. Sizes above `columns` are clamped.

    Args:
        tokens (Iterable[str]): The column element's class tokens.
        columns (int): Amount of columns in a row.

    Returns:
        ColumnSizes: The sizes plus any warnings about malformed classes.
    """
    warnings: List[CompileWarning] = []
    scoped: Dict[Optional[str], List[ColumnClass]] = {LG: [], None: []}

    for token in tokens:
        parsed = parse_column_class(token)
        if parsed is None:
            continue
        if parsed.malformed:
            warnings.append(CompileWarning(
                code="MALFORMED_COLUMN_CLASS",
                message=f"Malformed column class '{token}' ignored",
                classes=[token],
            ))
            continue
        if parsed.size is not None:
            scoped[parsed.breakpoint].append(parsed)

    lg_size = _pick(scoped[LG], "lg", warnings)
    plain_size = _pick(scoped[None], "plain", warnings)

    desktop = lg_size or plain_size or columns
    mobile = plain_size or columns

    def clamp(size: int) -> int:
        if size > columns:
            warnings.append(CompileWarning(
                code="COLUMN_OVERFLOW",
                message=f"Column size {size} exceeds {columns} columns, clamped",
            ))
            return columns
        return size

    return ColumnSizes(desktop=clamp(desktop), mobile=clamp(mobile), warnings=warnings)


def layout(sizes: List[int], columns: int) -> List[GridLine]:
    """
    Breaks column sizes into lines of at most `columns`.

    A column that would push the current line over `columns` starts a new line.
    Lines shorter than `columns` get the difference as filler.
    """
    lines: List[GridLine] = []
    current = GridLine()

    for index, size in enumerate(sizes):
        if current.columns and current.total + size > columns:
            lines.append(current)
            current = GridLine()
        current.columns.append(index)
        current.sizes.append(size)

    if current.columns:
        lines.append(current)

    for line in lines:
        line.filler = max(columns - line.total, 0)

    return lines
