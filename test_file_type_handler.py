import os
import tempfile
import unittest
import warnings

import pandas as pd

from errors import SourceReadError
from file_type_handler import FileTypeHandler
from lazy_row_source import LazyRowSource


class FileTypeHandlerTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_delimiter_from_extension(self):
        self.assertEqual(FileTypeHandler("a.tsv").delimiter, "\t")
        self.assertEqual(FileTypeHandler("a.TAB").delimiter, "\t")
        self.assertEqual(FileTypeHandler("a.csv").delimiter, ",")
        self.assertEqual(FileTypeHandler("a.tsv", delimiter=";").delimiter, ";")

    def test_reads_header_and_raw_strings(self):
        path = self.write("a.csv", "id,code,price\n1,007,3.50\n2,010,\n")
        source = FileTypeHandler(path).open()
        self.assertEqual(source.header, ["id", "code", "price"])
        self.assertEqual(list(source), [["1", "007", "3.50"], ["2", "010", ""]])

    def test_ragged_rows(self):
        path = self.write("r.csv", "a,b,c\n1,2\n3,4,5,6\nx,y,z\n")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            source = FileTypeHandler(path).open()
            rows = list(source)
        self.assertEqual(rows, [["1", "2", ""], ["3", "4", "5"], ["x", "y", "z"]])
        self.assertEqual(source.excess_fields, 1)
        self.assertFalse([w for w in caught if issubclass(w.category, pd.errors.ParserWarning)])

    def test_excess_fields_counted_across_rows(self):
        path = self.write("w.csv", "a,b\n1,2,3\n4,5,6,7\n8,9\n")
        source = FileTypeHandler(path).open()
        self.assertEqual(list(source), [["1", "2"], ["4", "5"], ["8", "9"]])
        self.assertEqual(source.excess_fields, 3)

    def test_tsv(self):
        path = self.write("t.tsv", "name\tcity\nAda\tLondon, UK\n")
        source = FileTypeHandler(path).open()
        self.assertEqual(source.header, ["name", "city"])
        self.assertEqual(list(source), [["Ada", "London, UK"]])

    def test_quoted_fields(self):
        path = self.write("q.csv", 'a,b\n"x, y","line1\nline2"\n')
        rows = list(FileTypeHandler(path).open())
        self.assertEqual(rows, [["x, y", "line1\nline2"]])

    def test_no_header_synthesizes_names(self):
        path = self.write("n.csv", "1,2,3\n4,5,6\n")
        source = FileTypeHandler(path, has_header=False).open()
        self.assertEqual(source.header, ["col0", "col1", "col2"])
        self.assertEqual(len(list(source)), 2)

    def test_empty_file(self):
        path = self.write("e.csv", "")
        source = FileTypeHandler(path).open()
        self.assertEqual(source.header, [])
        self.assertEqual(list(source), [])

    def test_missing_file(self):
        with self.assertRaises(SourceReadError):
            FileTypeHandler(os.path.join(self.tmp.name, "nope.csv")).open()

    def test_directory(self):
        with self.assertRaises(SourceReadError):
            FileTypeHandler(self.tmp.name).open()

    def test_chunked_reading_feeds_lazy_source(self):
        body = "".join(f"{i},v{i}\n" for i in range(95))
        path = self.write("big.csv", "n,v\n" + body)
        line_source = FileTypeHandler(path).open(chunk_size=10)
        source = LazyRowSource(line_source, read_ahead=0, on_close=line_source.close)
        self.assertEqual(source.row_at(42), ["42", "v42"])
        self.assertFalse(source.is_exhausted())
        self.assertEqual(source.read_to_end(), 95)
        source.close()


if __name__ == "__main__":
    unittest.main()
