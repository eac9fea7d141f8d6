import os
from typing import Iterator, Optional

import pandas as pd
from loguru import logger

from errors import SourceReadError

DEFAULT_CHUNK_SIZE = 10000


class LineSource:
    """Forward-only stream of rows of raw strings backed by pandas' chunked reader."""

    def __init__(self, path: str, delimiter: str, has_header: bool = True, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = path
        self.delimiter = delimiter
        self.has_header = has_header
        self.chunk_size = chunk_size
        self.column_count = 0
        self.excess_fields = 0
        self.header: list[str] = []
        self._reader = None
        self._rows: Optional[Iterator[list[str]]] = None

    def _read_csv(self, **kwargs):
        return pd.read_csv(
            self.path,
            sep=self.delimiter,
            header=None,
            dtype=object,
            na_filter=False,
            engine="python",
            encoding="utf-8",
            encoding_errors="replace",
            **kwargs,
        )

    def _trim_bad_line(self, bad_line: list[str]) -> list[str]:
        self.excess_fields += max(0, len(bad_line) - self.column_count)
        return bad_line[: self.column_count]

    def open(self) -> "LineSource":
        try:
            probe = self._read_csv(nrows=1)
        except pd.errors.EmptyDataError:
            logger.info("{} is empty", self.path)
            self._rows = iter(())
            return self
        except (OSError, ValueError) as exc:
            raise SourceReadError(f"Cannot open '{self.path}': {exc}") from exc

        self.column_count = probe.shape[1]
        try:
            self._reader = self._read_csv(
                names=list(range(self.column_count)),
                chunksize=self.chunk_size,
                on_bad_lines=self._trim_bad_line,
            )
        except (OSError, ValueError) as exc:
            raise SourceReadError(f"Cannot open '{self.path}': {exc}") from exc

        self._rows = self._iter_rows()
        if self.has_header:
            self.header = next(self._rows, [])
        else:
            self.header = [f"col{i}" for i in range(self.column_count)]
        return self

    def _iter_rows(self) -> Iterator[list[str]]:
        try:
            for chunk in self._reader:
                for record in chunk.itertuples(index=False, name=None):
                    yield [v if isinstance(v, str) else "" for v in record]
        except (OSError, ValueError) as exc:
            raise SourceReadError(f"Error reading '{self.path}': {exc}") from exc
        if self.excess_fields:
            logger.warning("{}: dropped {} fields beyond the header width", self.path, self.excess_fields)

    def __iter__(self):
        if self._rows is None:
            self.open()
        return self._rows

    def close(self):
        if self._reader is not None:
            try:
                self._reader.close()
            except (OSError, ValueError):
                pass
            self._reader = None


class FileTypeHandler:
    TAB_EXTENSIONS = {".tsv", ".tab"}

    def __init__(self, path: str, delimiter: Optional[str] = None, has_header: bool = True):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()
        self.has_header = has_header
        if delimiter is None:
            delimiter = "\t" if self.ext in self.TAB_EXTENSIONS else ","
        self.delimiter = delimiter

    def open(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> LineSource:
        if not os.path.exists(self.path):
            raise SourceReadError(f"Cannot open '{self.path}': no such file")
        if os.path.isdir(self.path):
            raise SourceReadError(f"Cannot open '{self.path}': is a directory")
        return LineSource(self.path, self.delimiter, self.has_header, chunk_size).open()
