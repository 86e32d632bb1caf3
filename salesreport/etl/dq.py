"""
Data Quality Ledger - Records every line the pipeline could not apply.

Flag types:
- MALFORMED_LINE: numeric field failed to parse (line skipped)
- MALFORMED_HEADER: sales file header has fewer than 2 fields
- UNKNOWN_SALESPERSON: header document pair not in the salesperson table
- UNKNOWN_PRODUCT: sale line product id not in the product table
- FILE_ERROR: sales file could not be opened or read to the end

Nothing here is fatal. The ledger only observes; it never changes totals.
"""
import os
from typing import List, Dict, Any
from .schema import FlaggedRow


DQ_FLAGS = ["MALFORMED_LINE", "MALFORMED_HEADER", "UNKNOWN_SALESPERSON", "UNKNOWN_PRODUCT", "FILE_ERROR"]


class DataQualityLedger:

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.stats: Dict[str, int] = {flag: 0 for flag in DQ_FLAGS}
        self.stats["applied"] = 0
        self.flagged_rows: List[FlaggedRow] = []

    def record_applied(self) -> None:
        self.stats["applied"] += 1

    def flag(self, file_path: str, line_no: int, content: str, flag_type: str, reason: str) -> None:
        if flag_type not in DQ_FLAGS:
            raise ValueError(f"Unknown DQ flag: {flag_type}")
        self.stats[flag_type] += 1
        self.flagged_rows.append({
            "file": os.path.basename(file_path),
            "line": line_no,
            "content": content[:100],
            "flag_type": flag_type,
            "reason": reason
        })

    def get_stats(self) -> Dict[str, int]:
        return self.stats.copy()

    def get_flagged_rows(self) -> List[FlaggedRow]:
        return self.flagged_rows.copy()

    def get_full_report(self) -> Dict[str, Any]:
        return {
            "stats": self.get_stats(),
            "flagged_rows": self.get_flagged_rows(),
            "summary": {
                "applied_count": self.stats["applied"],
                "total_flags": len(self.flagged_rows),
                "has_malformed": self.stats["MALFORMED_LINE"] > 0,
                "has_lookup_misses": (self.stats["UNKNOWN_PRODUCT"] + self.stats["UNKNOWN_SALESPERSON"]) > 0,
                "has_file_errors": self.stats["FILE_ERROR"] > 0
            }
        }
