from dataclasses import dataclass
from enum import Enum
from typing import Optional

from cell_classifier import TypeTag
from palette import DEFAULT_PALETTE, RGB, Palette, tag_field


class RowParity(Enum):
    EVEN = 0
    ODD = 1

    @classmethod
    def of(cls, row_index: int) -> "RowParity":
        return cls.ODD if row_index % 2 else cls.EVEN


@dataclass(frozen=True)
class CellColor:
    fg: RGB
    bg: Optional[RGB] = None


class ColorMapper:
    """Maps a cell's type tag and row context to foreground/background colours.

    The palette is read-only for the session. Header context always wins over
    the type colour; zebra striping only ever adds a background.
    """

    def __init__(self, palette: Optional[Palette] = None, zebra: bool = False):
        self.palette = palette if palette is not None else DEFAULT_PALETTE
        self.zebra = zebra

    def _lookup(self, name: str) -> RGB:
        value = getattr(self.palette, name, None)
        if value is None:
            value = getattr(DEFAULT_PALETTE, name)
        return value

    def background_for(self, row_parity: RowParity) -> Optional[RGB]:
        if not self.zebra:
            return None
        if row_parity is RowParity.ODD:
            return self._lookup("row_background_odd")
        return self._lookup("row_background_even")

    def color_for(
        self,
        tag: TypeTag,
        is_header: bool = False,
        row_parity: RowParity = RowParity.EVEN,
    ) -> CellColor:
        if is_header:
            return CellColor(self._lookup("header"))
        fg = self._lookup(tag_field(tag))
        return CellColor(fg, self.background_for(row_parity))

    def row_index_color(self, row_parity: RowParity = RowParity.EVEN) -> CellColor:
        return CellColor(self._lookup("row_index"), self.background_for(row_parity))
