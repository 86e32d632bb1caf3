"""
Load Layer - Ranked report generation.

Generates:
1. ReporteVendedores.csv - fullName;totalSales, best seller first
2. ReporteProductos.csv - name;quantitySold;unitPrice, most sold first
3. Reportes.xlsx (optional) - both rankings as styled sheets

Rankings use a stable sort, so equal totals keep table order and repeated
runs over the same input write identical files.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Dict, List

import pandas as pd
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from .errors import FileAccessError
from .models import Product, Salesperson


@dataclass
class SalespersonRow:
    full_name: str
    total_sales: float


@dataclass
class ProductRow:
    name: str
    quantity_sold: int
    unit_price: float
    total_sold: float


def rank_salespeople(salespeople: Dict[object, Salesperson]) -> List[SalespersonRow]:
    rows = [SalespersonRow(s.full_name, s.total_sales) for s in salespeople.values()]
    # sorted() is stable with reverse=True: ties stay in table order
    return sorted(rows, key=lambda r: r.total_sales, reverse=True)


def rank_products(products: Dict[str, Product]) -> List[ProductRow]:
    rows = [ProductRow(p.name, p.quantity_sold, p.price, p.total_sold) for p in products.values()]
    return sorted(rows, key=lambda r: r.quantity_sold, reverse=True)


class ReportWriter:
    """
    Writes rankings as delimited text, optionally as an Excel workbook.
    """

    SALESPERSON_HEADERS = ["Vendedor", "Total Ventas"]
    PRODUCT_HEADERS = ["Producto", "Cantidad Vendida", "Precio", "Total Vendido"]

    def __init__(self, delimiter: str = ";", encoding: str = "utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding
        self.currency_format = '$#,##0.00'
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="2D5016", end_color="2D5016", fill_type="solid")
        self.border = Border(bottom=Side(style='thin', color='DDDDDD'))

    def write_salesperson_report(self, rows: List[SalespersonRow], file_path: str) -> str:
        df = pd.DataFrame([asdict(r) for r in rows], columns=["full_name", "total_sales"])
        return self._write_csv(df, file_path)

    def write_product_report(self, rows: List[ProductRow], file_path: str) -> str:
        df = pd.DataFrame([asdict(r) for r in rows], columns=["name", "quantity_sold", "unit_price"])
        return self._write_csv(df, file_path)

    def _write_csv(self, df: pd.DataFrame, file_path: str) -> str:
        try:
            df.to_csv(file_path, sep=self.delimiter, header=False, index=False,
                      encoding=self.encoding, lineterminator="\n")
        except OSError as e:
            raise FileAccessError(file_path, f"Report not writable ({e})") from e
        logging.info(f"Wrote {len(df)} rows to {file_path}")
        return file_path

    def write_workbook(self, salesperson_rows: List[SalespersonRow],
                       product_rows: List[ProductRow], file_path: str) -> str:
        """
        Two-sheet Excel export:
        1. Vendedores - full name and total sales
        2. Productos - name, units sold, unit price and value sold
        """
        sellers = pd.DataFrame([asdict(r) for r in salesperson_rows], columns=["full_name", "total_sales"])
        sellers.columns = self.SALESPERSON_HEADERS
        items = pd.DataFrame([asdict(r) for r in product_rows],
                             columns=["name", "quantity_sold", "unit_price", "total_sold"])
        items.columns = self.PRODUCT_HEADERS

        try:
            with pd.ExcelWriter(file_path, engine="openpyxl") as writer:
                sellers.to_excel(writer, sheet_name="Vendedores", index=False)
                items.to_excel(writer, sheet_name="Productos", index=False)
                self._style_sheet(writer.sheets["Vendedores"], money_columns=[2])
                self._style_sheet(writer.sheets["Productos"], money_columns=[3, 4])
        except OSError as e:
            raise FileAccessError(file_path, f"Workbook not writable ({e})") from e
        logging.info(f"Wrote workbook {file_path}")
        return file_path

    def _style_sheet(self, ws, money_columns: List[int]) -> None:
        for cell in ws[1]:
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = Alignment(horizontal='center')
        for row in ws.iter_rows(min_row=2):
            for cell in row:
                cell.border = self.border
                if cell.column in money_columns:
                    cell.number_format = self.currency_format
        self._auto_width(ws)
        ws.freeze_panes = "A2"

    def _auto_width(self, ws) -> None:
        """Auto-adjust column widths"""
        for col_idx, column in enumerate(ws.columns, 1):
            max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 4, 60)
