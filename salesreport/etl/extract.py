"""
Extract Layer - Reference tables and sales file discovery.

- ReferenceLoader: productos / salesmenInfo files into keyed lookup tables
- SalesFileScanner: prefix-matched sales files in a data directory

Reference files are mandatory: a file that cannot be opened or read raises
FileAccessError and aborts the run. Undecodable bytes are replaced, so a bad
byte only ever spoils its own line. Malformed lines are logged and skipped.
"""
import os
import logging
from typing import Callable, Dict, Iterator, List, Optional, TypeVar

from .dq import DataQualityLedger
from .errors import FileAccessError, RecordParseError
from .models import DELIMITER, Product, Salesperson, SalespersonKey

T = TypeVar("T")

DEFAULT_ENCODING = "utf-8-sig"


def read_lines(file_path: str, encoding: str = DEFAULT_ENCODING) -> Iterator[str]:
    """
    Yield lines of a text file, line endings stripped.
    Bytes invalid for `encoding` become U+FFFD instead of failing the read.
    """
    with open(file_path, "r", encoding=encoding, errors="replace", newline="") as f:
        for line in f:
            yield line.rstrip("\r\n")


class ReferenceLoader:
    """
    Loads the two reference files into dicts.
    Duplicate keys: last line wins.
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING, ledger: Optional[DataQualityLedger] = None,
                 delimiter: str = DELIMITER):
        self.encoding = encoding
        self.delimiter = delimiter
        self.ledger = ledger

    def load_salespeople(self, file_path: str) -> Dict[SalespersonKey, Salesperson]:
        return self._load(file_path, lambda line: Salesperson.from_line(line, self.delimiter), lambda s: s.key)

    def load_products(self, file_path: str) -> Dict[str, Product]:
        return self._load(file_path, lambda line: Product.from_line(line, self.delimiter), lambda p: p.product_id)

    def _load(self, file_path: str, parse: Callable[[str], Optional[T]],
              key_of: Callable[[T], object]) -> Dict[object, T]:
        table: Dict[object, T] = {}
        logging.info(f"Loading reference file: {file_path}")
        try:
            for line_no, line in enumerate(read_lines(file_path, self.encoding), 1):
                try:
                    record = parse(line)
                except RecordParseError as e:
                    logging.warning(f"{os.path.basename(file_path)}:{line_no}: {e}")
                    if self.ledger is not None:
                        self.ledger.flag(file_path, line_no, line, "MALFORMED_LINE", e.reason)
                    continue
                if record is None:
                    continue
                table[key_of(record)] = record
        except FileNotFoundError:
            raise FileAccessError(file_path, "Reference file not found") from None
        except OSError as e:
            raise FileAccessError(file_path, f"Reference file unreadable ({e})") from e
        logging.info(f"Loaded {len(table)} records from {os.path.basename(file_path)}")
        return table


def load_salespeople(file_path: str, encoding: str = DEFAULT_ENCODING) -> Dict[SalespersonKey, Salesperson]:
    return ReferenceLoader(encoding).load_salespeople(file_path)


def load_products(file_path: str, encoding: str = DEFAULT_ENCODING) -> Dict[str, Product]:
    return ReferenceLoader(encoding).load_products(file_path)


class SalesFileScanner:
    """Lists sales files by name prefix. Sorted so every run sees the same order."""

    def __init__(self, directory: str, prefix: str = "ventas_"):
        self.directory = directory
        self.prefix = prefix

    def scan(self) -> List[str]:
        try:
            names = os.listdir(self.directory)
        except OSError as e:
            raise FileAccessError(self.directory, f"Data directory unreadable ({e})") from e
        paths = [
            os.path.join(self.directory, name)
            for name in sorted(names)
            if name.startswith(self.prefix)
        ]
        return [p for p in paths if os.path.isfile(p)]
