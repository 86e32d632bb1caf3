import os

# ETL Configuration
class Config:
    DATA_DIR = "."
    PRODUCTS_FILE = "productos.txt"
    SALESPEOPLE_FILE = "salesmenInfo.txt"
    SALES_FILE_PREFIX = "ventas_"
    SALESPERSON_REPORT = "ReporteVendedores.csv"
    PRODUCT_REPORT = "ReporteProductos.csv"
    WORKBOOK_REPORT = "Reportes.xlsx"
    EXPORT_XLSX = False
    DELIMITER = ";"
    ENCODING = "utf-8-sig"  # input files; tolerates a leading BOM
    REPORT_ENCODING = "utf-8"

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(Config, key):
                raise AttributeError(f"Unknown config key: {key}")
            setattr(self, key, value)

    @classmethod
    def from_env(cls) -> "Config":
        overrides = {}
        if os.environ.get("SALES_DATA_DIR"):
            overrides["DATA_DIR"] = os.environ["SALES_DATA_DIR"]
        if os.environ.get("SALES_ENCODING"):
            overrides["ENCODING"] = os.environ["SALES_ENCODING"]
        xlsx = os.environ.get("SALES_EXPORT_XLSX", "").strip().lower()
        if xlsx:
            overrides["EXPORT_XLSX"] = xlsx in ("1", "true", "yes", "on")
        return cls(**overrides)

    def path(self, file_name: str) -> str:
        return os.path.join(self.DATA_DIR, file_name)
