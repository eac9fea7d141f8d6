import curses
from typing import Optional

from color_mapper import CellColor, RowParity
from palette import RGB
from pager import PagerFrame
from screen_layout import ScreenLayout

_CUBE_LEVELS = (0, 95, 135, 175, 215, 255)

_BASIC_COLORS = (
    (curses.COLOR_BLACK, (0, 0, 0)),
    (curses.COLOR_RED, (205, 0, 0)),
    (curses.COLOR_GREEN, (0, 205, 0)),
    (curses.COLOR_YELLOW, (205, 205, 0)),
    (curses.COLOR_BLUE, (0, 0, 238)),
    (curses.COLOR_MAGENTA, (205, 0, 205)),
    (curses.COLOR_CYAN, (0, 205, 205)),
    (curses.COLOR_WHITE, (229, 229, 229)),
)


def _distance(a: RGB, b: RGB) -> int:
    return sum((x - y) ** 2 for x, y in zip(a, b))


def _nearest_level(value: int) -> int:
    return min(range(len(_CUBE_LEVELS)), key=lambda i: abs(_CUBE_LEVELS[i] - value))


def rgb_to_curses(rgb: RGB, colors: int) -> int:
    """Closest terminal colour number for an RGB triple."""
    if colors >= 256:
        r, g, b = (_nearest_level(v) for v in rgb)
        cube_index = 16 + 36 * r + 6 * g + b
        cube_rgb = (_CUBE_LEVELS[r], _CUBE_LEVELS[g], _CUBE_LEVELS[b])

        grey_step = max(0, min(23, round((sum(rgb) / 3 - 8) / 10)))
        grey_value = 8 + 10 * grey_step
        grey_index = 232 + grey_step

        if _distance(rgb, (grey_value,) * 3) < _distance(rgb, cube_rgb):
            return grey_index
        return cube_index
    return min(_BASIC_COLORS, key=lambda item: _distance(rgb, item[1]))[0]


class ColorPairs:
    def __init__(self):
        self.enabled = False
        self._pairs: dict[tuple[int, int], int] = {}
        self._next = 1
        try:
            curses.start_color()
            curses.use_default_colors()
            self.enabled = curses.has_colors()
        except curses.error:
            self.enabled = False

    def attr(self, color: Optional[CellColor]) -> int:
        if not self.enabled or color is None:
            return 0
        fg = rgb_to_curses(color.fg, curses.COLORS)
        bg = rgb_to_curses(color.bg, curses.COLORS) if color.bg is not None else -1
        key = (fg, bg)
        pair = self._pairs.get(key)
        if pair is None:
            if self._next >= curses.COLOR_PAIRS:
                return 0
            pair = self._next
            try:
                curses.init_pair(pair, fg, bg)
            except curses.error:
                return 0
            self._pairs[key] = pair
            self._next += 1
        return curses.color_pair(pair)


class CursesSurface:
    def __init__(self, stdscr):
        self.stdscr = stdscr
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        curses.raw()
        self.stdscr.keypad(True)
        self.stdscr.nodelay(False)
        self.stdscr.timeout(100)
        self.colors = ColorPairs()
        self.layout = ScreenLayout(stdscr)

    def viewport_height(self) -> int:
        return self.layout.rows_h

    def width(self) -> int:
        return self.layout.W

    def get_key(self) -> int:
        return self.stdscr.getch()

    def relayout(self):
        self.layout = ScreenLayout(self.stdscr)
        self.stdscr.clear()
        self.stdscr.refresh()

    @staticmethod
    def _put(win, y, x, text, attr=0):
        h, w = win.getmaxyx()
        if y >= h or x >= w:
            return
        try:
            win.addnstr(y, x, text, w - x, attr)
        except curses.error:
            pass

    def draw(self, frame: PagerFrame):
        win = self.layout.table_win
        win.erase()
        h, w = win.getmaxyx()

        x0 = 0
        row_w = 0
        if frame.show_row_numbers:
            last = frame.rows[-1][0] + 1 if frame.rows else 1
            row_w = max(3, len(str(last)))
            x0 = row_w + 1
            self._put(win, 0, 0, "#".rjust(row_w), curses.A_BOLD)

        # header
        x = x0
        for cell in frame.header:
            if x >= w:
                break
            self._put(win, 0, x, cell.padded(), self.colors.attr(cell.color) | curses.A_BOLD)
            x += cell.width + 1

        try:
            win.hline(1, 0, curses.ACS_HLINE, w)
        except curses.error:
            pass

        # rows
        y = self.layout.header_h
        for index, cells in frame.rows:
            if y >= h:
                break
            parity = RowParity.of(index)
            if frame.show_row_numbers:
                index_attr = self.colors.attr(frame.index_color(parity))
                self._put(win, y, 0, str(index + 1).rjust(row_w) + " ", index_attr)
            x = x0
            for cell in cells:
                if x >= w:
                    break
                attr = self.colors.attr(cell.color)
                self._put(win, y, x, cell.padded() + " ", attr)
                x += cell.width + 1
            y += 1

        win.refresh()

        sw = self.layout.status_win
        sw.erase()
        _, sw_w = sw.getmaxyx()
        self._put(sw, 0, 0, frame.status[: max(0, sw_w - 1)], curses.A_REVERSE)
        sw.refresh()

    def restore(self):
        try:
            self.stdscr.erase()
            self.stdscr.refresh()
            curses.curs_set(1)
        except curses.error:
            pass
