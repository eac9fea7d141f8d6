import unittest

from cell_classifier import Cell, TypeTag
from color_mapper import ColorMapper, RowParity
from palette import DEFAULT_PALETTE
from row_formatter import (
    TRUNCATION_MARKER,
    RowFormatter,
    compute_column_widths,
    display_text,
    display_width,
    normalize_row,
    pad,
    truncate,
)


class TruncateTests(unittest.TestCase):
    def test_zero_limit_disables_truncation(self):
        text = "x" * 500
        self.assertEqual(truncate(text, 0), text)

    def test_fitting_text_is_untouched(self):
        self.assertEqual(truncate("hello", 5), "hello")

    def test_long_text_gets_marker(self):
        self.assertEqual(truncate("hello world", 5), "hell" + TRUNCATION_MARKER)
        self.assertEqual(display_width(truncate("hello world", 5)), 5)

    def test_truncation_is_idempotent(self):
        for text in ["hello world", "日本語のテキスト", "abc", ""]:
            once = truncate(text, 5)
            self.assertEqual(truncate(once, 5), once)

    def test_wide_characters_measured_in_cells(self):
        out = truncate("日本語テキスト", 5)
        self.assertEqual(out, "日本" + TRUNCATION_MARKER)
        self.assertLessEqual(display_width(out), 5)

    def test_limit_of_one(self):
        self.assertEqual(truncate("abc", 1), TRUNCATION_MARKER)


class HelperTests(unittest.TestCase):
    def test_display_text_flattens_newlines(self):
        self.assertEqual(display_text("a\nb\r\nc\td"), "a b c d")

    def test_pad(self):
        self.assertEqual(pad("ab", 4), "ab  ")
        self.assertEqual(pad("ab", 4, "right"), "  ab")
        self.assertEqual(pad("abcdef", 4), "abcdef")

    def test_normalize_short_row(self):
        fields, excess = normalize_row(["a"], 3)
        self.assertEqual(fields, ["a", "", ""])
        self.assertEqual(excess, 0)

    def test_normalize_long_row(self):
        fields, excess = normalize_row(["a", "b", "c", "d"], 2)
        self.assertEqual(fields, ["a", "b"])
        self.assertEqual(excess, 2)

    def test_column_widths_from_header_and_rows(self):
        widths = compute_column_widths(["id", "name"], [["1", "Alice"], ["100", "Bo"]])
        self.assertEqual(widths, [3, 5])

    def test_column_widths_capped(self):
        widths = compute_column_widths(["id", "description"], [["1", "x" * 40]], width_limit=10)
        self.assertEqual(widths, [2, 10])

    def test_column_widths_accept_cells_and_ignore_extra_fields(self):
        widths = compute_column_widths(["a"], [[Cell.of("wide"), Cell.of("ignored-field")]])
        self.assertEqual(widths, [4])

    def test_empty_column_has_width_one(self):
        self.assertEqual(compute_column_widths([""], [[""]]), [1])


class RowFormatterTests(unittest.TestCase):
    def setUp(self):
        self.formatter = RowFormatter(ColorMapper())

    def test_short_row_padded_with_empty_cells(self):
        styled = self.formatter.format(["1"], [3, 3, 3])
        self.assertEqual(len(styled), 3)
        self.assertEqual([c.type for c in styled], [TypeTag.INTEGER, TypeTag.EMPTY, TypeTag.EMPTY])

    def test_long_row_dropped(self):
        styled = self.formatter.format(["a", "b", "c"], [1, 1])
        self.assertEqual([c.text for c in styled], ["a", "b"])

    def test_numbers_right_aligned(self):
        styled = self.formatter.format(["42", "abc"], [5, 5])
        self.assertEqual(styled[0].padded(), "   42")
        self.assertEqual(styled[1].padded(), "abc  ")

    def test_header_cells_use_header_color(self):
        styled = self.formatter.format(["42"], [2], is_header=True)
        self.assertEqual(styled[0].color.fg, DEFAULT_PALETTE.header)
        self.assertEqual(styled[0].align, "left")

    def test_width_limit_truncates(self):
        styled = self.formatter.format(["abcdefghij"], [4], width_limit=4)
        self.assertEqual(styled[0].text, "abc" + TRUNCATION_MARKER)
        # type comes from the raw value, not the truncated text
        self.assertIs(styled[0].type, TypeTag.TEXT)

    def test_zebra_parity_reaches_cells(self):
        formatter = RowFormatter(ColorMapper(zebra=True))
        styled = formatter.format(["x"], [1], row_parity=RowParity.ODD)
        self.assertEqual(styled[0].color.bg, DEFAULT_PALETTE.row_background_odd)

    def test_accepts_classified_cells(self):
        styled = self.formatter.format([Cell("7", TypeTag.INTEGER)], [1])
        self.assertIs(styled[0].type, TypeTag.INTEGER)


if __name__ == "__main__":
    unittest.main()
