import math
from dataclasses import dataclass
from typing import Optional, List, Tuple

from .errors import RecordParseError

DELIMITER = ";"

SalespersonKey = Tuple[str, str]


def split_fields(line: str, expected: int, delimiter: str = DELIMITER) -> Optional[List[str]]:
    """
    Split one delimited line into stripped fields.
    Returns None when the line carries fewer than `expected` fields (noise).
    """
    parts = [p.strip() for p in line.rstrip("\r\n").split(delimiter)]
    if len(parts) < expected:
        return None
    return parts


def parse_decimal(text: str) -> float:
    # Decimal comma is the only locale variant accepted; no nan/inf, no digit separators
    text = text.strip()
    if "_" in text:
        raise RecordParseError(text, "Invalid decimal value")
    try:
        value = float(text.replace(",", "."))
    except ValueError:
        raise RecordParseError(text, "Invalid decimal value") from None
    if not math.isfinite(value):
        raise RecordParseError(text, "Invalid decimal value")
    return value


def parse_quantity(text: str) -> int:
    text = text.strip()
    if "_" in text:
        raise RecordParseError(text, "Invalid quantity")
    try:
        return int(text)
    except ValueError:
        raise RecordParseError(text, "Invalid quantity") from None


@dataclass
class Product:
    product_id: str
    name: str
    price: float
    quantity_sold: int = 0

    @property
    def total_sold(self) -> float:
        return self.quantity_sold * self.price

    @classmethod
    def from_line(cls, line: str, delimiter: str = DELIMITER) -> Optional["Product"]:
        parts = split_fields(line, 3, delimiter)
        if parts is None:
            return None
        try:
            price = parse_decimal(parts[2])
        except RecordParseError:
            raise RecordParseError(line, "Invalid price") from None
        if price < 0:
            raise RecordParseError(line, "Negative price")
        return cls(product_id=parts[0], name=parts[1], price=price)


@dataclass
class Salesperson:
    doc_type: str
    doc_number: str
    first_name: str
    last_name: str
    total_sales: float = 0.0

    @property
    def key(self) -> SalespersonKey:
        return (self.doc_type, self.doc_number)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_line(cls, line: str, delimiter: str = DELIMITER) -> Optional["Salesperson"]:
        parts = split_fields(line, 4, delimiter)
        if parts is None:
            return None
        return cls(doc_type=parts[0], doc_number=parts[1],
                   first_name=parts[2], last_name=parts[3])


@dataclass
class SaleLine:
    product_id: str
    quantity: int

    @classmethod
    def from_line(cls, line: str, delimiter: str = DELIMITER) -> Optional["SaleLine"]:
        parts = split_fields(line, 2, delimiter)
        if parts is None:
            return None
        try:
            quantity = parse_quantity(parts[1])
        except RecordParseError:
            raise RecordParseError(line, "Invalid quantity") from None
        return cls(product_id=parts[0], quantity=quantity)


def parse_header(line: str, delimiter: str = DELIMITER) -> Optional[SalespersonKey]:
    """Header line of a sales file: docType;docNumber"""
    parts = split_fields(line, 2, delimiter)
    if parts is None:
        return None
    return (parts[0], parts[1])
