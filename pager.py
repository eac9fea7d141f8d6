import curses
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from loguru import logger

from color_mapper import CellColor, RowParity
from lazy_row_source import LazyRowSource
from row_formatter import RowFormatter, StyledCell, compute_column_widths
from status_bar import render_status


class PagerState(Enum):
    LOADING = "loading"
    READY = "ready"
    EXHAUSTED = "exhausted"
    CLOSED = "closed"


class Action(Enum):
    DOWN = "down"
    UP = "up"
    MULTI_DOWN = "multi_down"
    MULTI_UP = "multi_up"
    PAGE_DOWN = "page_down"
    PAGE_UP = "page_up"
    HALF_PAGE_DOWN = "half_page_down"
    HALF_PAGE_UP = "half_page_up"
    HOME = "home"
    END = "end"
    QUIT = "quit"


KEY_BINDINGS = {
    curses.KEY_DOWN: Action.DOWN,
    ord("j"): Action.DOWN,
    curses.KEY_SF: Action.MULTI_DOWN,  # Shift+Down
    ord("J"): Action.MULTI_DOWN,
    curses.KEY_UP: Action.UP,
    ord("k"): Action.UP,
    curses.KEY_SR: Action.MULTI_UP,  # Shift+Up
    ord("K"): Action.MULTI_UP,
    ord(" "): Action.PAGE_DOWN,
    curses.KEY_NPAGE: Action.PAGE_DOWN,
    6: Action.PAGE_DOWN,  # Ctrl+F
    ord("b"): Action.PAGE_UP,
    curses.KEY_PPAGE: Action.PAGE_UP,
    2: Action.PAGE_UP,  # Ctrl+B
    ord("d"): Action.HALF_PAGE_DOWN,
    4: Action.HALF_PAGE_DOWN,  # Ctrl+D
    ord("u"): Action.HALF_PAGE_UP,
    21: Action.HALF_PAGE_UP,  # Ctrl+U
    ord("g"): Action.HOME,
    curses.KEY_HOME: Action.HOME,
    ord("G"): Action.END,
    curses.KEY_END: Action.END,
    ord("q"): Action.QUIT,
    27: Action.QUIT,  # Esc
    3: Action.QUIT,  # Ctrl+C
}


@dataclass(frozen=True)
class ViewportState:
    top_row: int = 0
    viewport_height: int = 1
    total_rows: int = 0
    single_step: int = 1
    multi_step: int = 10

    @property
    def max_top(self) -> int:
        return max(0, self.total_rows - self.viewport_height)

    def clamp(self, top_row: int) -> int:
        return max(0, min(top_row, self.max_top))

    @property
    def bottom_row(self) -> int:
        return min(self.total_rows, self.top_row + self.viewport_height)


def scroll_target(viewport: ViewportState, action: Action) -> int:
    """Unclamped ``top_row`` an action asks for."""
    top = viewport.top_row
    if action is Action.DOWN:
        return top + viewport.single_step
    if action is Action.UP:
        return top - viewport.single_step
    if action is Action.MULTI_DOWN:
        return top + viewport.multi_step
    if action is Action.MULTI_UP:
        return top - viewport.multi_step
    if action is Action.PAGE_DOWN:
        return top + viewport.viewport_height
    if action is Action.PAGE_UP:
        return top - viewport.viewport_height
    if action is Action.HALF_PAGE_DOWN:
        return top + viewport.viewport_height // 2
    if action is Action.HALF_PAGE_UP:
        return top - viewport.viewport_height // 2
    if action is Action.HOME:
        return 0
    if action is Action.END:
        return viewport.max_top
    return top


def transition(viewport: ViewportState, action: Action) -> ViewportState:
    """Pure viewport step: move, then clamp against the known row count."""
    if action is Action.QUIT:
        return viewport
    return replace(viewport, top_row=viewport.clamp(scroll_target(viewport, action)))


@dataclass(frozen=True)
class PagerFrame:
    header: Sequence[StyledCell]
    rows: Sequence[tuple[int, Sequence[StyledCell]]]
    index_color: Callable[[RowParity], CellColor]
    show_row_numbers: bool
    status: str


class PagerSurface(Protocol):
    def viewport_height(self) -> int: ...

    def width(self) -> int: ...

    def get_key(self) -> int: ...

    def draw(self, frame: PagerFrame) -> None: ...

    def relayout(self) -> None: ...

    def restore(self) -> None: ...


class PagerController:
    def __init__(
        self,
        source: LazyRowSource,
        formatter: RowFormatter,
        surface: PagerSurface,
        header: Sequence[str],
        single_step: int = 1,
        multi_step: int = 10,
        width_limit: int = 0,
        show_row_numbers: bool = False,
        file_label: str = "",
    ):
        self.source = source
        self.formatter = formatter
        self.surface = surface
        self.header = list(header)
        self.width_limit = width_limit
        self.show_row_numbers = show_row_numbers
        self.file_label = file_label
        self.state = PagerState.LOADING
        self.viewport = ViewportState(
            top_row=0,
            viewport_height=max(1, surface.viewport_height()),
            total_rows=0,
            single_step=max(1, single_step),
            multi_step=max(1, multi_step),
        )
        self.render_count = 0
        self.status_msg: Optional[str] = None
        self._error_reported = False

    # ---------------- state ----------------

    def _set_state(self, state: PagerState):
        if state is not self.state:
            logger.debug("Pager {} -> {}", self.state.value, state.value)
            self.state = state

    def _sync(self):
        self.viewport = replace(self.viewport, total_rows=self.source.known_row_count_lower_bound())
        if self.state is PagerState.CLOSED:
            return
        if self.source.is_exhausted():
            self._set_state(PagerState.EXHAUSTED)
            if self.source.error is not None and not self._error_reported:
                self._error_reported = True
                self.status_msg = str(self.source.error)
        elif self.state is PagerState.LOADING:
            self._set_state(PagerState.READY)

    def start(self):
        """Load the first screenful and draw it."""
        self.source.ensure(self.viewport.viewport_height)
        self._sync()
        self.render()

    def close(self):
        if self.state is PagerState.CLOSED:
            return
        self._set_state(PagerState.CLOSED)
        self.source.close()

    # ---------------- events ----------------

    def dispatch(self, action: Action) -> bool:
        """Apply one action; returns True when it moved the viewport (and rendered)."""
        if self.state is PagerState.CLOSED:
            return False
        if action is Action.QUIT:
            self.close()
            return False

        if action is Action.END:
            self.source.read_to_end()
        else:
            target = scroll_target(self.viewport, action)
            if target > self.viewport.top_row:
                # scrolling past the known frontier pulls rows instead of refusing
                self.source.ensure(target + self.viewport.viewport_height)
        self._sync()

        moved = transition(self.viewport, action)
        if moved.top_row == self.viewport.top_row:
            return False
        self.viewport = moved
        self.render()
        return True

    def handle_key(self, ch: int) -> bool:
        if ch == curses.KEY_RESIZE:
            self.resize()
            return True
        action = KEY_BINDINGS.get(ch)
        if action is None:
            return False
        return self.dispatch(action)

    def resize(self):
        self.surface.relayout()
        height = max(1, self.surface.viewport_height())
        self.viewport = replace(self.viewport, viewport_height=height)
        self.source.ensure(self.viewport.top_row + height)
        self._sync()
        self.viewport = replace(self.viewport, top_row=self.viewport.clamp(self.viewport.top_row))
        self.render()

    # ---------------- rendering ----------------

    def _status_text(self) -> str:
        viewport = self.viewport
        context = {
            "status_msg": self.status_msg,
            "file_path": self.file_label,
            "state": self.state.value,
            "top_row": viewport.top_row,
            "bottom_row": viewport.bottom_row,
            "total_rows": viewport.total_rows,
            "exact": self.state is PagerState.EXHAUSTED,
        }
        self.status_msg = None
        return render_status(context, self.surface.width())

    def build_frame(self) -> PagerFrame:
        top = self.viewport.top_row
        window = []
        for index in range(top, top + self.viewport.viewport_height):
            cells = self.source.cells_at(index)
            if cells is None:
                break
            window.append((index, cells))

        # widths follow the visible window only and may shift while scrolling
        widths = compute_column_widths(self.header, [cells for _, cells in window], self.width_limit)
        header = self.formatter.format(self.header, widths, self.width_limit, is_header=True)
        rows = [
            (index, self.formatter.format(cells, widths, self.width_limit, row_parity=RowParity.of(index)))
            for index, cells in window
        ]
        return PagerFrame(
            header=header,
            rows=rows,
            index_color=self.formatter.mapper.row_index_color,
            show_row_numbers=self.show_row_numbers,
            status=self._status_text(),
        )

    def render(self):
        self.surface.draw(self.build_frame())
        self.render_count += 1

    def run(self):
        try:
            self.start()
            while self.state is not PagerState.CLOSED:
                ch = self.surface.get_key()
                if ch == -1:
                    continue
                self.handle_key(ch)
        finally:
            self.close()
            self.surface.restore()
