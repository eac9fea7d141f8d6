from collections import OrderedDict
from typing import Callable, Iterable, Optional, Sequence

from loguru import logger

from cell_classifier import Cell, DateOrder, classify_row
from errors import SourceReadError


class LazyRowSource:
    """Index-addressable view over a forward-only row iterator.

    Rows are read only when an index at or past the frontier is requested and
    are kept once read, so revisiting a row never touches the stream again.
    Classified rows live in a small LRU on top of that.
    """

    def __init__(
        self,
        rows: Iterable[Sequence[str]],
        read_ahead: int = 64,
        cache_size: int = 512,
        date_order: DateOrder = DateOrder.MDY,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self._it = iter(rows)
        self._rows: list[list[str]] = []
        self._exhausted = False
        self._closed = False
        self.read_ahead = max(0, read_ahead)
        self.cache_size = max(1, cache_size)
        self.date_order = date_order
        self._on_close = on_close
        self._cells: OrderedDict[int, tuple[Cell, ...]] = OrderedDict()
        self.error: Optional[SourceReadError] = None

    def _read(self, count: int) -> int:
        """Pull up to ``count`` rows from the stream; returns how many arrived."""
        if self._exhausted or self._closed or count <= 0:
            return 0
        read = 0
        try:
            while read < count:
                row = next(self._it, None)
                if row is None:
                    self._exhausted = True
                    logger.debug("Source exhausted after {} rows", len(self._rows))
                    break
                self._rows.append(list(row))
                read += 1
        except SourceReadError as exc:
            self.error = exc
            self._exhausted = True
            logger.error("{} (keeping {} rows already read)", exc, len(self._rows))
        return read

    def ensure(self, count: int) -> int:
        """Make at least ``count`` rows known if the stream has them."""
        missing = count - len(self._rows)
        if missing > 0:
            self._read(missing + self.read_ahead)
        return len(self._rows)

    def row_at(self, index: int) -> Optional[list[str]]:
        if index < 0:
            return None
        if index >= len(self._rows):
            self.ensure(index + 1)
        if index >= len(self._rows):
            return None
        return self._rows[index]

    def cells_at(self, index: int) -> Optional[tuple[Cell, ...]]:
        cached = self._cells.get(index)
        if cached is not None:
            self._cells.move_to_end(index)
            return cached
        row = self.row_at(index)
        if row is None:
            return None
        cells = classify_row(row, self.date_order)
        self._cells[index] = cells
        if len(self._cells) > self.cache_size:
            self._cells.popitem(last=False)
        return cells

    def rows(self, start: int = 0, stop: Optional[int] = None) -> list[list[str]]:
        if stop is None:
            self.read_to_end()
            stop = len(self._rows)
        else:
            self.ensure(stop)
        return self._rows[max(0, start) : stop]

    def known_row_count_lower_bound(self) -> int:
        return len(self._rows)

    def is_exhausted(self) -> bool:
        return self._exhausted

    @property
    def closed(self) -> bool:
        return self._closed

    def read_to_end(self) -> int:
        while not self._exhausted and not self._closed:
            self._read(max(1, self.read_ahead) * 16)
        return len(self._rows)

    def close(self):
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()
