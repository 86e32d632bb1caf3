"""
ETL Package - Sales file consolidation into ranked reports

Modules:
- models: typed records and line parsing
- extract: reference tables and sales file discovery
- transform: per-file sales accumulation
- dq: ledger of skipped and unresolved lines
- load: ranking and report writing
- pipeline: main orchestrator
- schema: TypedDict result payloads
"""
from .config import Config
from .errors import FileAccessError, RecordParseError, SalesReportError
from .models import Product, Salesperson, SaleLine
from .pipeline import SalesPipeline, Stage
from .schema import FileResult, PipelineResult

__all__ = [
    'Config', 'SalesPipeline', 'Stage',
    'Product', 'Salesperson', 'SaleLine',
    'FileResult', 'PipelineResult',
    'FileAccessError', 'RecordParseError', 'SalesReportError',
]
