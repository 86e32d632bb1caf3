"""
Transform Layer - Accumulates sales files into the reference tables.

Per file:
1. Header line resolves the salesperson (miss is tolerated)
2. Each sale line resolves its product (miss drops that line only)
3. Resolved lines add quantity to the product and quantity * price to the
   salesperson

Failures are contained: a bad line (including undecodable bytes) skips the
line, an I/O error stops the file and keeps what was already applied.
Neither reaches the caller as an exception; the FileResult says what
happened.
"""
import os
import logging
from typing import Dict, Optional

from .dq import DataQualityLedger
from .errors import RecordParseError
from .extract import DEFAULT_ENCODING, read_lines
from .models import DELIMITER, Product, Salesperson, SalespersonKey, SaleLine, parse_header
from .schema import FileResult


class SalesAggregator:
    """
    Applies sales files to tables owned by the caller.
    Holds no totals of its own, so one instance can serve any number of runs.
    """

    def __init__(self, ledger: Optional[DataQualityLedger] = None, encoding: str = DEFAULT_ENCODING,
                 delimiter: str = DELIMITER):
        self.ledger = ledger or DataQualityLedger()
        self.encoding = encoding
        self.delimiter = delimiter

    def aggregate(self, file_path: str,
                  salespeople: Dict[SalespersonKey, Salesperson],
                  products: Dict[str, Product]) -> FileResult:
        result: FileResult = {
            "file": os.path.basename(file_path),
            "status": "processed",
            "reason": None,
            "salesperson": None,
            "applied_lines": 0,
            "skipped_lines": 0,
            "missed_lines": 0
        }
        salesperson: Optional[Salesperson] = None
        line_no = 0

        try:
            for line_no, line in enumerate(read_lines(file_path, self.encoding), 1):
                if line_no == 1:
                    salesperson = self._resolve_header(file_path, line, salespeople)
                    if salesperson is not None:
                        result["salesperson"] = salesperson.full_name
                    continue
                self._apply_line(file_path, line_no, line, salesperson, products, result)
        except OSError as e:
            logging.error(f"Error processing sales file {result['file']} at line {line_no}: {e}")
            self.ledger.flag(file_path, line_no, "", "FILE_ERROR", str(e))
            result["status"] = "failed"
            result["reason"] = str(e)
            return result

        if line_no == 0:
            logging.info(f"Skipping empty sales file: {result['file']}")
            result["status"] = "skipped"
            result["reason"] = "empty file"
            return result

        logging.info(
            f"Processed {result['file']}: {result['applied_lines']} applied, "
            f"{result['skipped_lines']} skipped, {result['missed_lines']} unknown products"
        )
        return result

    def _resolve_header(self, file_path: str, line: str,
                        salespeople: Dict[SalespersonKey, Salesperson]) -> Optional[Salesperson]:
        key = parse_header(line, self.delimiter)
        if key is None:
            logging.warning(f"{os.path.basename(file_path)}: malformed header {line!r}")
            self.ledger.flag(file_path, 1, line, "MALFORMED_HEADER", "Header needs docType;docNumber")
            return None

        salesperson = salespeople.get(key)
        if salesperson is None:
            # Products still accumulate; only the salesperson side is dropped
            logging.warning(f"{os.path.basename(file_path)}: unknown salesperson {key[0]};{key[1]}")
            self.ledger.flag(file_path, 1, line, "UNKNOWN_SALESPERSON", f"No salesperson {key[0]};{key[1]}")
        return salesperson

    def _apply_line(self, file_path: str, line_no: int, line: str,
                    salesperson: Optional[Salesperson],
                    products: Dict[str, Product],
                    result: FileResult) -> None:
        try:
            sale = SaleLine.from_line(line, self.delimiter)
        except RecordParseError as e:
            logging.warning(f"{os.path.basename(file_path)}:{line_no}: {e}")
            self.ledger.flag(file_path, line_no, line, "MALFORMED_LINE", e.reason)
            result["skipped_lines"] += 1
            return

        if sale is None:
            result["skipped_lines"] += 1
            return

        product = products.get(sale.product_id)
        if product is None:
            self.ledger.flag(file_path, line_no, line, "UNKNOWN_PRODUCT", f"No product {sale.product_id}")
            result["missed_lines"] += 1
            return

        product.quantity_sold += sale.quantity
        if salesperson is not None:
            salesperson.total_sales += sale.quantity * product.price
        self.ledger.record_applied()
        result["applied_lines"] += 1
