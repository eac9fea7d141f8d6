import io
from dataclasses import dataclass
from typing import Optional, Sequence

from rich import box
from rich.color import Color
from rich.console import Console
from rich.style import Style
from rich.table import Table
from rich.text import Text

from cell_classifier import DateOrder, TypeTag
from color_mapper import CellColor, ColorMapper, RowParity
from palette import Palette
from row_formatter import RowFormatter, compute_column_widths, pad

# wide enough that rich never shrinks a column; truncation is left to width_limit
_UNBOUNDED_WIDTH = 100_000


@dataclass
class RenderOptions:
    show_row_numbers: bool = False
    zebra: bool = False
    width_limit: int = 0
    color: bool = True
    first_row_number: int = 1
    palette: Optional[Palette] = None
    date_order: DateOrder = DateOrder.MDY


def rich_style(color: CellColor, bold: bool = False) -> Style:
    return Style(
        color=Color.from_rgb(*color.fg),
        bgcolor=Color.from_rgb(*color.bg) if color.bg is not None else None,
        bold=bold or None,
    )


def _capture(renderable, color: bool) -> str:
    buf = io.StringIO()
    console = Console(
        file=buf,
        width=_UNBOUNDED_WIDTH,
        color_system="truecolor" if color else None,
        force_terminal=color,
        no_color=not color,
        highlight=False,
        emoji=False,
    )
    console.print(renderable)
    return buf.getvalue()


def build_table(header_row: Sequence, data_rows: Sequence, options: RenderOptions, formatter: RowFormatter) -> Table:
    widths = compute_column_widths(header_row, data_rows, options.width_limit)
    mapper = formatter.mapper

    table = Table(box=box.SQUARE, show_lines=True, show_edge=True, pad_edge=True)

    index_width = 1
    if options.show_row_numbers:
        last_number = options.first_row_number + max(0, len(data_rows) - 1)
        index_width = max(1, len(str(last_number)))
        header_style = rich_style(mapper.color_for(TypeTag.TEXT, is_header=True), bold=True)
        table.add_column(Text(pad("#", index_width, "right"), style=header_style), justify="right", no_wrap=True)

    for cell in formatter.format(header_row, widths, options.width_limit, is_header=True):
        table.add_column(
            Text(cell.padded(), style=rich_style(cell.color, bold=True)),
            no_wrap=True,
        )

    for i, row in enumerate(data_rows):
        parity = RowParity.of(i)
        texts = []
        if options.show_row_numbers:
            number = str(options.first_row_number + i)
            texts.append(Text(pad(number, index_width, "right"), style=rich_style(mapper.row_index_color(parity))))
        for cell in formatter.format(row, widths, options.width_limit, row_parity=parity):
            texts.append(Text(cell.padded(), style=rich_style(cell.color)))
        background = mapper.background_for(parity)
        row_style = Style(bgcolor=Color.from_rgb(*background)) if background is not None else None
        table.add_row(*texts, style=row_style)

    return table


def render(
    header_row: Sequence,
    data_rows: Sequence,
    options: Optional[RenderOptions] = None,
    formatter: Optional[RowFormatter] = None,
) -> str:
    """Compose header and rows into bordered table text."""
    options = options or RenderOptions()
    if formatter is None:
        formatter = RowFormatter(ColorMapper(options.palette, zebra=options.zebra), options.date_order)
    table = build_table(header_row, list(data_rows), options, formatter)
    return _capture(table, options.color)


def render_file_info(path: str, rows: int, columns: int, color: bool = True) -> str:
    text = Text()
    text.append("CSV File Information\n", style="bold cyan")
    text.append("File: ", style="blue")
    text.append(f"{path}\n", style="white")
    text.append("Rows: ", style="blue")
    text.append(f"{rows}\n", style="green")
    text.append("Columns: ", style="blue")
    text.append(f"{columns}\n", style="green")
    return _capture(text, color)


def render_footer(displayed: int, total: int, color: bool = True) -> str:
    if displayed >= total:
        return ""
    text = Text()
    text.append("Showing ", style="yellow")
    text.append(str(displayed), style="white")
    text.append(" of ", style="yellow")
    text.append(str(total), style="white")
    text.append(" rows. Use ", style="yellow")
    text.append("-n 0", style="green")
    text.append(" to show all rows.", style="yellow")
    return _capture(text, color)
