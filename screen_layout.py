import curses


class ScreenLayout:
    def __init__(self, stdscr):
        self.stdscr = stdscr
        self.H, self.W = stdscr.getmaxyx()

        # layout: table (header, separator, rows) and status bar (1 line)
        self.status_h = 1
        self.header_h = 2

        self.table_h = max(self.header_h + 1, self.H - self.status_h)

        self.table_win = curses.newwin(self.table_h, self.W, 0, 0)
        # table never owns the cursor
        self.table_win.leaveok(True)

        self.status_win = curses.newwin(self.status_h, self.W, min(self.table_h, max(0, self.H - 1)), 0)
        self.status_win.leaveok(True)

    @property
    def rows_h(self):
        return max(1, self.table_h - self.header_h)
