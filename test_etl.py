"""Tests for the parse, extract, transform and load layers"""
import os

import pytest

from conftest import write_lines
from salesreport.etl.dq import DataQualityLedger
from salesreport.etl.errors import FileAccessError, RecordParseError
from salesreport.etl.extract import ReferenceLoader, SalesFileScanner, load_products, load_salespeople
from salesreport.etl.load import ReportWriter, ProductRow, SalespersonRow, rank_products, rank_salespeople
from salesreport.etl.models import Product, Salesperson, SaleLine, parse_header, split_fields
from salesreport.etl.transform import SalesAggregator


# ─────────────────────────────────────────────────────────────
# Record parsing
# ─────────────────────────────────────────────────────────────

def test_decimal_comma_and_point_give_same_price():
    assert Product.from_line("P1;Widget;10,50").price == Product.from_line("P1;Widget;10.50").price == 10.5


def test_short_lines_are_noise():
    assert split_fields("P1;Widget", 3) is None
    assert Product.from_line("P1;Widget") is None
    assert Salesperson.from_line("CC;1001;Ana") is None
    assert SaleLine.from_line("P1") is None
    assert SaleLine.from_line("") is None
    assert parse_header("CC") is None


def test_fields_are_stripped():
    sale = SaleLine.from_line(" P1 ; 3 \r\n")
    assert sale == SaleLine(product_id="P1", quantity=3)
    assert parse_header("CC;1001\r\n") == ("CC", "1001")


def test_bad_numbers_raise_line_error():
    with pytest.raises(RecordParseError) as exc:
        SaleLine.from_line("P1;two")
    assert exc.value.line == "P1;two"
    with pytest.raises(ValueError):
        Product.from_line("P1;Widget;cheap")
    with pytest.raises(RecordParseError):
        Product.from_line("P1;Widget;-1.00")


@pytest.mark.parametrize("price", ["nan", "inf", "-inf", "Infinity", "1_0"])
def test_non_finite_or_separated_prices_are_rejected(price):
    with pytest.raises(RecordParseError) as exc:
        Product.from_line(f"P1;Widget;{price}")
    assert exc.value.reason == "Invalid price"


def test_separated_quantity_is_rejected():
    with pytest.raises(RecordParseError):
        SaleLine.from_line("P1;1_0")


def test_custom_delimiter_reaches_parsers():
    assert Product.from_line("P1|Widget|2,5", delimiter="|").price == 2.5
    assert SaleLine.from_line("P1|4", delimiter="|") == SaleLine("P1", 4)
    assert parse_header("CC|1001", delimiter="|") == ("CC", "1001")
    assert SaleLine.from_line("P1|4") is None


def test_salesperson_identity_and_name():
    s = Salesperson.from_line("CC;1001;Ana;Ruiz")
    assert s.key == ("CC", "1001")
    assert s.full_name == "Ana Ruiz"
    assert s.total_sales == 0.0


# ─────────────────────────────────────────────────────────────
# Reference loading
# ─────────────────────────────────────────────────────────────

def test_load_products_indexes_by_id(data_dir):
    products = load_products(str(data_dir / "productos.txt"))
    assert list(products) == ["P1", "P2", "P3"]
    assert products["P2"].price == 20.0
    assert products["P3"].quantity_sold == 0


def test_load_salespeople_indexes_by_document_pair(data_dir):
    salespeople = load_salespeople(str(data_dir / "salesmenInfo.txt"))
    assert set(salespeople) == {("CC", "1001"), ("CC", "1002")}
    assert salespeople[("CC", "1002")].first_name == "Luis"


def test_duplicate_keys_last_write_wins(tmp_path):
    path = write_lines(tmp_path / "productos.txt", ["P1;Old;1.00", "P1;New;2.00"])
    products = load_products(path)
    assert len(products) == 1
    assert products["P1"].name == "New"
    assert products["P1"].price == 2.0


def test_malformed_reference_lines_are_skipped_and_flagged(tmp_path):
    path = write_lines(tmp_path / "productos.txt", ["P1;Widget;10.00", "P2;Gadget;abc", "junk", "P3;Gizmo;3"])
    ledger = DataQualityLedger()
    products = ReferenceLoader(ledger=ledger).load_products(path)
    assert list(products) == ["P1", "P3"]
    assert ledger.get_stats()["MALFORMED_LINE"] == 1
    assert ledger.get_flagged_rows()[0]["line"] == 2


def test_missing_reference_file_is_fatal(tmp_path):
    with pytest.raises(FileAccessError) as exc:
        load_products(str(tmp_path / "missing.txt"))
    assert exc.value.path.endswith("missing.txt")
    with pytest.raises(FileAccessError):
        load_salespeople(str(tmp_path))


def test_cp1252_salesperson_line_does_not_abort_loading(tmp_path):
    path = tmp_path / "salesmenInfo.txt"
    path.write_bytes("CC;1001;Ana;Ruiz\nCC;1002;José;Peña\nCC;1003;Luis;Gomez\n".encode("cp1252"))

    salespeople = load_salespeople(str(path))

    assert set(salespeople) == {("CC", "1001"), ("CC", "1002"), ("CC", "1003")}
    assert salespeople[("CC", "1002")].first_name == "Jos�"
    assert salespeople[("CC", "1003")].full_name == "Luis Gomez"


def test_leading_bom_is_not_part_of_first_id(tmp_path):
    path = tmp_path / "productos.txt"
    path.write_bytes("P1;Widget;10.00\nP2;Gadget;20.00\n".encode("utf-8-sig"))
    assert list(load_products(str(path))) == ["P1", "P2"]


def test_scanner_lists_prefixed_files_in_sorted_order(tmp_path):
    for name in ["ventas_b.txt", "ventas_a.txt", "otros.txt", "ReporteVendedores.csv"]:
        write_lines(tmp_path / name, ["CC;1"])
    (tmp_path / "ventas_dir").mkdir()
    found = SalesFileScanner(str(tmp_path), "ventas_").scan()
    assert [os.path.basename(p) for p in found] == ["ventas_a.txt", "ventas_b.txt"]


def test_scanner_missing_directory(tmp_path):
    with pytest.raises(FileAccessError):
        SalesFileScanner(str(tmp_path / "nope")).scan()


# ─────────────────────────────────────────────────────────────
# Aggregation
# ─────────────────────────────────────────────────────────────

@pytest.fixture
def tables(data_dir):
    loader = ReferenceLoader()
    return (
        loader.load_salespeople(str(data_dir / "salesmenInfo.txt")),
        loader.load_products(str(data_dir / "productos.txt")),
    )


def test_aggregate_accumulates_products_and_salesperson(tables, sales_file):
    salespeople, products = tables
    path = sales_file("ventas_1.txt", ["CC;1001", "P1;2", "P2;1"])
    result = SalesAggregator().aggregate(path, salespeople, products)

    assert result["status"] == "processed"
    assert result["salesperson"] == "Ana Ruiz"
    assert result["applied_lines"] == 2
    assert products["P1"].quantity_sold == 2
    assert products["P2"].quantity_sold == 1
    assert salespeople[("CC", "1001")].total_sales == 40.0


def test_sum_properties_across_files(tables, sales_file):
    salespeople, products = tables
    aggregator = SalesAggregator()
    files = [
        sales_file("ventas_1.txt", ["CC;1001", "P1;2", "P3;4"]),
        sales_file("ventas_2.txt", ["CC;1002", "P1;5", "P2;1", "P9;7"]),
        sales_file("ventas_3.txt", ["CC;1001", "P1;1"]),
    ]
    for path in files:
        aggregator.aggregate(path, salespeople, products)

    assert products["P1"].quantity_sold == 8
    assert products["P2"].quantity_sold == 1
    assert products["P3"].quantity_sold == 4
    assert salespeople[("CC", "1001")].total_sales == pytest.approx(3 * 10.0 + 4 * 5.5)
    assert salespeople[("CC", "1002")].total_sales == pytest.approx(5 * 10.0 + 1 * 20.0)
    assert aggregator.ledger.get_stats()["UNKNOWN_PRODUCT"] == 1


def test_malformed_line_skips_only_that_line(tables, sales_file):
    salespeople, products = tables
    path = sales_file("ventas_1.txt", ["CC;1001", "P1;2", "P2;many", "P2;3"])
    aggregator = SalesAggregator()
    result = aggregator.aggregate(path, salespeople, products)

    assert result["status"] == "processed"
    assert result["skipped_lines"] == 1
    assert products["P1"].quantity_sold == 2
    assert products["P2"].quantity_sold == 3
    assert salespeople[("CC", "1001")].total_sales == 80.0
    flagged = aggregator.ledger.get_flagged_rows()
    assert flagged[0]["flag_type"] == "MALFORMED_LINE"
    assert flagged[0]["line"] == 3


def test_unknown_salesperson_still_counts_products(tables, sales_file):
    salespeople, products = tables
    path = sales_file("ventas_x.txt", ["TI;9999", "P1;4"])
    aggregator = SalesAggregator()
    result = aggregator.aggregate(path, salespeople, products)

    assert result["status"] == "processed"
    assert result["salesperson"] is None
    assert products["P1"].quantity_sold == 4
    assert all(s.total_sales == 0.0 for s in salespeople.values())
    assert aggregator.ledger.get_stats()["UNKNOWN_SALESPERSON"] == 1


def test_malformed_header_is_treated_as_unknown_salesperson(tables, sales_file):
    salespeople, products = tables
    path = sales_file("ventas_x.txt", ["1001", "P2;2"])
    aggregator = SalesAggregator()
    aggregator.aggregate(path, salespeople, products)

    assert products["P2"].quantity_sold == 2
    assert aggregator.ledger.get_stats()["MALFORMED_HEADER"] == 1


def test_empty_file_is_skipped(tables, sales_file):
    salespeople, products = tables
    path = sales_file("ventas_empty.txt", [])
    result = SalesAggregator().aggregate(path, salespeople, products)
    assert result["status"] == "skipped"
    assert result["reason"] == "empty file"


def test_unreadable_file_fails_without_raising(tables, data_dir):
    salespeople, products = tables
    aggregator = SalesAggregator()
    result = aggregator.aggregate(str(data_dir / "ventas_missing.txt"), salespeople, products)
    assert result["status"] == "failed"
    assert aggregator.ledger.get_stats()["FILE_ERROR"] == 1


def test_undecodable_bytes_spoil_only_their_line(tables, data_dir):
    salespeople, products = tables
    path = data_dir / "ventas_bin.txt"
    path.write_bytes(b"CC;1001\nP1;2\nP1;3\nP1;\xf1\nP1;4\n")
    aggregator = SalesAggregator()
    result = aggregator.aggregate(str(path), salespeople, products)

    assert result["status"] == "processed"
    assert result["applied_lines"] == 3
    assert result["skipped_lines"] == 1
    assert products["P1"].quantity_sold == 9
    assert salespeople[("CC", "1001")].total_sales == 90.0
    flagged = aggregator.ledger.get_flagged_rows()
    assert [(f["line"], f["flag_type"]) for f in flagged] == [(4, "MALFORMED_LINE")]


# ─────────────────────────────────────────────────────────────
# Reports
# ─────────────────────────────────────────────────────────────

def test_rankings_are_descending_and_stable():
    salespeople = {
        ("CC", "1"): Salesperson("CC", "1", "A", "One", 0.0),
        ("CC", "2"): Salesperson("CC", "2", "B", "Two", 5.0),
        ("CC", "3"): Salesperson("CC", "3", "C", "Three", 0.0),
    }
    names = [r.full_name for r in rank_salespeople(salespeople)]
    assert names == ["B Two", "A One", "C Three"]

    products = {
        "P1": Product("P1", "First", 1.0, 3),
        "P2": Product("P2", "Second", 1.0, 3),
        "P3": Product("P3", "Third", 1.0, 7),
    }
    ranked = rank_products(products)
    assert [r.name for r in ranked] == ["Third", "First", "Second"]
    assert ranked[0].total_sold == products["P3"].total_sold == 7.0


def test_report_lines_use_natural_decimal_form(tmp_path):
    writer = ReportWriter()
    sellers = writer.write_salesperson_report(
        [SalespersonRow("Ana Ruiz", 40.0), SalespersonRow("Luis Gomez", 12.75)], str(tmp_path / "v.csv"))
    items = writer.write_product_report(
        [ProductRow("Widget", 2, 10.0, 20.0), ProductRow("Gadget", 1, 20.0, 20.0)], str(tmp_path / "p.csv"))

    assert open(sellers, encoding="utf-8").read() == "Ana Ruiz;40.0\nLuis Gomez;12.75\n"
    assert open(items, encoding="utf-8").read() == "Widget;2;10.0\nGadget;1;20.0\n"


def test_unwritable_report_is_fatal(tmp_path):
    with pytest.raises(FileAccessError):
        ReportWriter().write_product_report([ProductRow("Widget", 1, 1.0, 1.0)], str(tmp_path / "no" / "dir" / "p.csv"))


def test_workbook_has_both_rankings(tmp_path):
    from openpyxl import load_workbook

    path = ReportWriter().write_workbook(
        [SalespersonRow("Ana Ruiz", 40.0)],
        [ProductRow("Widget", 2, 10.0, 20.0), ProductRow("Gadget", 1, 20.0, 20.0)],
        str(tmp_path / "Reportes.xlsx"),
    )
    wb = load_workbook(path)
    assert wb.sheetnames == ["Vendedores", "Productos"]
    assert wb["Vendedores"]["A2"].value == "Ana Ruiz"
    assert wb["Vendedores"]["B2"].value == 40.0
    assert [c.value for c in wb["Productos"]["A"]] == ["Producto", "Widget", "Gadget"]
    assert [c.value for c in wb["Productos"][1]] == ["Producto", "Cantidad Vendida", "Precio", "Total Vendido"]
    assert wb["Productos"]["D2"].value == 20.0
