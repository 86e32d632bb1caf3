"""
Sales Pipeline Orchestrator - Coordinates Extract, Transform and Load.

Flow: INIT → LOAD_REFERENCES → DISCOVER_FILES → AGGREGATE → BUILD_REPORTS → DONE

A FileAccessError at any stage ends the run in FAILED. Per-file problems
stay inside AGGREGATE and only show up in the stats.
"""
import time
import logging
from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from .config import Config
from .dq import DataQualityLedger
from .errors import FileAccessError
from .extract import ReferenceLoader, SalesFileScanner
from .load import ReportWriter, rank_products, rank_salespeople
from .schema import FileResult, PipelineResult
from .transform import SalesAggregator


class Stage(str, Enum):
    INIT = "init"
    LOAD_REFERENCES = "load_references"
    DISCOVER_FILES = "discover_files"
    AGGREGATE = "aggregate"
    BUILD_REPORTS = "build_reports"
    DONE = "done"
    FAILED = "failed"


ProgressEvent = Tuple[Stage, str, Optional[PipelineResult]]


class SalesPipeline:
    """
    Batch consolidation of sales files into ranked reports.

    Reference tables are created per run and owned by it, so running the
    same pipeline twice gives the same reports rather than doubled totals.
    """

    def __init__(self, config: Optional[Config] = None, sales_files: Optional[Sequence[str]] = None):
        self.config = config or Config()
        self.sales_files = list(sales_files) if sales_files is not None else None
        self.writer = ReportWriter(delimiter=self.config.DELIMITER, encoding=self.config.REPORT_ENCODING)

    def process(self) -> Iterator[ProgressEvent]:
        """
        Run the pipeline.
        Yields (stage, message, result); result is set only on the last event.
        """
        start_time = time.time()
        cfg = self.config
        ledger = DataQualityLedger()
        file_results: List[FileResult] = []
        reports: List[str] = []

        yield Stage.INIT, "Starting sales consolidation", None

        try:
            # ─── 1. Reference tables ───
            yield Stage.LOAD_REFERENCES, "Loading products and salespeople...", None
            loader = ReferenceLoader(encoding=cfg.ENCODING, ledger=ledger, delimiter=cfg.DELIMITER)
            products = loader.load_products(cfg.path(cfg.PRODUCTS_FILE))
            salespeople = loader.load_salespeople(cfg.path(cfg.SALESPEOPLE_FILE))
            yield Stage.LOAD_REFERENCES, f"Loaded {len(products)} products, {len(salespeople)} salespeople.", None

            # ─── 2. Sales files ───
            yield Stage.DISCOVER_FILES, "Locating sales files...", None
            if self.sales_files is not None:
                sales_files = list(self.sales_files)
            else:
                sales_files = SalesFileScanner(cfg.DATA_DIR, cfg.SALES_FILE_PREFIX).scan()
            yield Stage.DISCOVER_FILES, f"Found {len(sales_files)} sales files.", None

            # ─── 3. Aggregate ───
            aggregator = SalesAggregator(ledger=ledger, encoding=cfg.ENCODING, delimiter=cfg.DELIMITER)
            for path in sales_files:
                file_result = aggregator.aggregate(path, salespeople, products)
                file_results.append(file_result)
                yield Stage.AGGREGATE, f"{file_result['file']}: {file_result['status']}", None

            # ─── 4. Reports ───
            yield Stage.BUILD_REPORTS, "Writing reports...", None
            salesperson_rows = rank_salespeople(salespeople)
            product_rows = rank_products(products)
            reports.append(self.writer.write_salesperson_report(salesperson_rows, cfg.path(cfg.SALESPERSON_REPORT)))
            reports.append(self.writer.write_product_report(product_rows, cfg.path(cfg.PRODUCT_REPORT)))
            if cfg.EXPORT_XLSX:
                reports.append(self.writer.write_workbook(salesperson_rows, product_rows, cfg.path(cfg.WORKBOOK_REPORT)))

        except FileAccessError as e:
            logging.exception("PIPELINE_ERROR")
            yield Stage.FAILED, f"Error: {e}", {
                "success": False,
                "error": str(e),
                "reports": reports,
                "files": file_results,
                "stats": self._stats(start_time, file_results, ledger)
            }
            return

        stats = self._stats(start_time, file_results, ledger)
        stats["salespeople"] = len(salespeople)
        stats["products"] = len(products)
        yield Stage.DONE, "Done", {
            "success": True,
            "error": None,
            "reports": reports,
            "files": file_results,
            "stats": stats
        }

    def run(self) -> PipelineResult:
        """Drain process() and return its final result."""
        result = None
        for stage, message, payload in self.process():
            logging.debug(f"[{stage.value}] {message}")
            if payload is not None:
                result = payload
        return result

    def _stats(self, start_time: float, file_results: List[FileResult], ledger: DataQualityLedger) -> dict:
        return {
            "processing_time_ms": (time.time() - start_time) * 1000,
            "timestamp": datetime.now().isoformat(),
            "files_total": len(file_results),
            "files_processed": sum(1 for r in file_results if r["status"] == "processed"),
            "files_skipped": sum(1 for r in file_results if r["status"] == "skipped"),
            "files_failed": sum(1 for r in file_results if r["status"] == "failed"),
            "dq_report": ledger.get_full_report()
        }
