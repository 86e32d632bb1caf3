"""
Error taxonomy for the sales consolidation pipeline.

- FileAccessError: reference file or report destination unusable. Fatal.
- RecordParseError: one malformed line. Skipped, processing continues.

Lookup misses and per-file read failures are not raised past the aggregator;
they are recorded in the DQ ledger and in the FileResult instead.
"""


class SalesReportError(Exception):
    """Base class for all pipeline errors."""


class FileAccessError(SalesReportError, OSError):
    """A file the run depends on could not be read or written."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")


class RecordParseError(SalesReportError, ValueError):
    """A single line could not be converted to a typed record."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"{reason} in line {line!r}")
