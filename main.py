import argparse
import curses
import os
import sys

from loguru import logger

# Make ESC snappy
os.environ.setdefault("ESCDELAY", "25")

from cell_classifier import DateOrder
from color_mapper import ColorMapper
from config_paths import LOG_PATH, ensure_config_dirs, load_config
from errors import PcsvError
from file_type_handler import FileTypeHandler
from lazy_row_source import LazyRowSource
from row_formatter import RowFormatter
from table_renderer import RenderOptions, render, render_file_info, render_footer

try:
    from _version import __version__
except Exception:
    __version__ = "0.0.0"


def _delimiter(value: str) -> str:
    if value in ("\\t", "tab", "TAB"):
        return "\t"
    if len(value) != 1:
        raise argparse.ArgumentTypeError("Delimiter must be a single character")
    return value


def _non_negative(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcsv",
        description="pcsv - colour-coded CSV/TSV viewer for the terminal",
    )
    parser.add_argument("file", nargs="?", help="CSV or TSV file to display")
    parser.add_argument("-n", "--rows", dest="max_rows", type=_non_negative, default=50,
                        help="rows to show in table mode (0 = all, default 50)")
    parser.add_argument("-r", "--row-numbers", dest="show_row_numbers", action="store_true", default=None,
                        help="show a row-number column")
    parser.add_argument("-w", "--width", dest="width_limit", type=_non_negative, default=None,
                        help="truncate cells wider than N columns (0 = no limit)")
    parser.add_argument("-d", "--delimiter", type=_delimiter, default=None,
                        help="field delimiter (default: tab for .tsv, comma otherwise)")
    parser.add_argument("--no-header", action="store_true", help="treat the first row as data")
    parser.add_argument("-c", "--config", "--colorscheme", dest="config", default=None,
                        help="path to a TOML config file")
    parser.add_argument("-p", "--pager", action="store_true", help="browse the file in an interactive pager")
    parser.add_argument("-z", "--zebra", action="store_true", default=None, help="stripe alternate rows")
    parser.add_argument("--date-order", choices=[o.value for o in DateOrder], default=None,
                        help="how to read ambiguous dd/dd/yyyy dates (default mdy)")
    parser.add_argument("--no-color", action="store_true", help="disable colour output")
    parser.add_argument("--no-info", action="store_true", help="skip the file information banner")
    parser.add_argument("--verbose", action="store_true", help="log debug details")
    parser.add_argument("-v", "-V", "--version", action="version", version=__version__)
    return parser


def configure_logging(pager: bool = False, verbose: bool = False):
    logger.remove()
    level = "DEBUG" if verbose else "WARNING"
    if pager:
        # stderr belongs to curses while the pager runs
        try:
            ensure_config_dirs()
            logger.add(LOG_PATH, level=level, rotation="1 MB", retention=2)
        except OSError:
            pass
        return
    logger.add(sys.stderr, level=level, format="<level>{level}</level>: {message}")


def resolve_settings(args, cfg) -> dict:
    width = args.width_limit
    if width is None:
        width = cfg["WIDTH"] or 0
    show_row_numbers = args.show_row_numbers
    if show_row_numbers is None:
        show_row_numbers = bool(cfg["ROW_NUMBERS"])
    zebra = args.zebra if args.zebra is not None else cfg["ZEBRA"]
    date_order = DateOrder(args.date_order) if args.date_order else cfg["DATE_ORDER"]
    color = not args.no_color and "NO_COLOR" not in os.environ
    return {
        "width_limit": width,
        "show_row_numbers": show_row_numbers,
        "zebra": zebra,
        "date_order": date_order,
        "color": color,
    }


def run_static(args, cfg, handler, out=None) -> int:
    out = out if out is not None else sys.stdout
    settings = resolve_settings(args, cfg)
    color = settings["color"] and out.isatty()

    line_source = handler.open()
    source = LazyRowSource(line_source, read_ahead=line_source.chunk_size, date_order=settings["date_order"],
                           on_close=line_source.close)
    try:
        total = source.read_to_end()
        shown = total if args.max_rows == 0 else min(args.max_rows, total)
        header = line_source.header

        if not args.no_info:
            out.write(render_file_info(args.file, total, len(header), color=color))

        options = RenderOptions(
            show_row_numbers=settings["show_row_numbers"],
            zebra=settings["zebra"],
            width_limit=settings["width_limit"],
            color=color,
            palette=cfg["PALETTE"],
            date_order=settings["date_order"],
        )
        out.write(render(header, source.rows(0, shown), options))
        out.write(render_footer(shown, total, color=color))
    finally:
        source.close()

    return 1 if source.error is not None else 0


def run_pager(args, cfg, handler) -> int:
    from pager import PagerController
    from pager_view import CursesSurface

    settings = resolve_settings(args, cfg)
    line_source = handler.open()
    formatter = RowFormatter(ColorMapper(cfg["PALETTE"], zebra=settings["zebra"]), settings["date_order"])

    def curses_main(stdscr):
        surface = CursesSurface(stdscr)
        source = LazyRowSource(line_source, date_order=settings["date_order"], on_close=line_source.close)
        controller = PagerController(
            source,
            formatter,
            surface,
            line_source.header,
            single_step=cfg["SCROLL_SINGLE_LINE"],
            multi_step=cfg["SCROLL_MULTI_LINE"],
            width_limit=settings["width_limit"],
            show_row_numbers=settings["show_row_numbers"],
            file_label=args.file,
        )
        controller.run()
        return controller

    controller = curses.wrapper(curses_main)
    if controller.source.error is not None:
        print(f"pcsv: {controller.source.error}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.file:
        parser.print_usage(sys.stderr)
        print("pcsv: error: a file path is required", file=sys.stderr)
        return 2

    configure_logging(pager=args.pager, verbose=args.verbose)

    try:
        cfg = load_config(args.config)
        handler = FileTypeHandler(args.file, delimiter=args.delimiter, has_header=not args.no_header)
        if args.pager:
            return run_pager(args, cfg, handler)
        return run_static(args, cfg, handler)
    except PcsvError as exc:
        print(f"pcsv: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
