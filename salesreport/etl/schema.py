"""
Result Schema - TypedDict payloads passed between pipeline layers.

Records themselves (Product, Salesperson, SaleLine) live in models.py as
dataclasses because the aggregator mutates them in place. The payloads here
are read-only summaries handed back to callers.
"""
from typing import TypedDict, Dict, Any, List, Optional


class FlaggedRow(TypedDict):
    """One line the DQ ledger could not apply"""
    file: str                     # Source file name
    line: int                     # 1-based line number, 0 for file-level flags
    content: str                  # Raw line text (max 100 chars)
    flag_type: str                # see dq.DQ_FLAGS
    reason: str


class FileResult(TypedDict):
    """Outcome of aggregating one sales file"""
    file: str
    status: str                   # 'processed' | 'skipped' | 'failed'
    reason: Optional[str]
    salesperson: Optional[str]    # Resolved full name, None on lookup miss
    applied_lines: int            # Lines that updated a product
    skipped_lines: int            # Noise or malformed lines
    missed_lines: int             # Lines with an unknown product


class PipelineResult(TypedDict):
    """Final output from the sales pipeline"""
    success: bool
    error: Optional[str]
    reports: List[str]            # Paths written
    files: List[FileResult]
    stats: Dict[str, Any]         # counts, processing time, dq_report
