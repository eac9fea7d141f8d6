from dataclasses import dataclass
from typing import Optional, Sequence

from rich.cells import cell_len, get_character_cell_size

from cell_classifier import Cell, DateOrder, TypeTag
from color_mapper import CellColor, ColorMapper, RowParity

TRUNCATION_MARKER = "…"


def display_text(raw: str) -> str:
    """Single-line rendition of a raw field (embedded newlines and tabs become spaces)."""
    if not raw:
        return ""
    return raw.replace("\r\n", " ").replace("\n", " ").replace("\r", " ").replace("\t", " ")


def display_width(text: str) -> int:
    return cell_len(text)


def truncate(text: str, width_limit: int) -> str:
    """Cut ``text`` to at most ``width_limit`` terminal cells, marker included.

    A limit of 0 disables truncation. Already-fitting text is returned unchanged,
    so truncating twice to the same limit is a no-op.
    """
    if width_limit <= 0 or display_width(text) <= width_limit:
        return text
    budget = width_limit - 1
    used = 0
    kept = []
    for ch in text:
        size = get_character_cell_size(ch)
        if used + size > budget:
            break
        kept.append(ch)
        used += size
    return "".join(kept) + TRUNCATION_MARKER


def pad(text: str, width: int, align: str = "left") -> str:
    gap = max(0, width - display_width(text))
    if align == "right":
        return " " * gap + text
    return text + " " * gap


def normalize_row(fields: Sequence, column_count: int) -> tuple[list, int]:
    """Pad short rows with empty fields and drop the tail of long ones.

    Returns the normalized list and the number of dropped fields.
    """
    fields = list(fields)
    excess = max(0, len(fields) - column_count)
    if excess:
        fields = fields[:column_count]
    while len(fields) < column_count:
        fields.append("")
    return fields, excess


def _raw(value) -> str:
    if isinstance(value, Cell):
        return value.raw
    return "" if value is None else str(value)


def compute_column_widths(header: Sequence, rows, width_limit: int = 0) -> list[int]:
    """Max display width per column over header and rows, capped by ``width_limit``."""
    widths = [display_width(display_text(_raw(h))) for h in header]
    column_count = len(widths)
    for row in rows:
        for i, value in enumerate(row):
            if i >= column_count:
                break
            w = display_width(display_text(_raw(value)))
            if w > widths[i]:
                widths[i] = w
    if width_limit > 0:
        widths = [min(w, width_limit) for w in widths]
    return [max(1, w) for w in widths]


@dataclass(frozen=True)
class StyledCell:
    text: str
    type: TypeTag
    color: CellColor
    width: int
    align: str = "left"

    def padded(self) -> str:
        return pad(self.text, self.width, self.align)


class RowFormatter:
    def __init__(self, mapper: Optional[ColorMapper] = None, date_order: DateOrder = DateOrder.MDY):
        self.mapper = mapper if mapper is not None else ColorMapper()
        self.date_order = date_order

    def to_cells(self, row: Sequence) -> list[Cell]:
        return [v if isinstance(v, Cell) else Cell.of(v, self.date_order) for v in row]

    def format(
        self,
        row: Sequence,
        column_widths: Sequence[int],
        width_limit: int = 0,
        row_parity: RowParity = RowParity.EVEN,
        is_header: bool = False,
    ) -> list[StyledCell]:
        fields, _ = normalize_row(row, len(column_widths))
        styled = []
        for cell, width in zip(self.to_cells(fields), column_widths):
            text = truncate(display_text(cell.raw), width_limit)
            align = "right" if cell.type.numeric and not is_header else "left"
            color = self.mapper.color_for(cell.type, is_header=is_header, row_parity=row_parity)
            styled.append(StyledCell(text, cell.type, color, width, align))
        return styled
