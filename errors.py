class PcsvError(Exception):
    """Base class for errors that end the program with a message."""


class ConfigError(PcsvError):
    """Configuration file could not be parsed or holds malformed values."""


class SourceReadError(PcsvError):
    """The underlying CSV/TSV stream could not be opened or read."""
