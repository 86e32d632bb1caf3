"""
Synthetic Input Generator - Writes sample files for the sales pipeline.

Files:
- productos.txt: IDProducto;NombreProducto;Precio
- salesmenInfo.txt: TipoDocumento;NumeroDocumento;Nombre;Apellido
- ventas_vendedor{i}.txt: TipoDocumento;NumeroDocumento header, then IDProducto;Cantidad

Seeded, so the same seed always writes the same files.
"""
import os
import sys
import random
import logging
from typing import List, Optional

from salesreport.etl.config import Config


class InfoFileGenerator:

    def __init__(self, directory: str = ".", seed: Optional[int] = None, decimal_comma: bool = False,
                 doc_type: str = "CC", id_base: int = 10000000):
        self.directory = directory
        self.rng = random.Random(seed)
        self.decimal_comma = decimal_comma
        self.doc_type = doc_type
        self.id_base = id_base
        self.products_count = 0

    def _write(self, file_name: str, lines: List[str]) -> str:
        path = os.path.join(self.directory, file_name)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                f.write(line + "\n")
        logging.info(f"Archivo generado: {path}")
        return path

    def _format_price(self, price: float) -> str:
        text = f"{price:.2f}"
        return text.replace(".", ",") if self.decimal_comma else text

    def create_products_file(self, products_count: int, file_name: str = Config.PRODUCTS_FILE) -> str:
        self.products_count = products_count
        lines = []
        for i in range(1, products_count + 1):
            price = 10 + self.rng.random() * 90  # between 10 and 100
            lines.append(f"P{i};Producto{i};{self._format_price(price)}")
        return self._write(file_name, lines)

    def create_salesman_info_file(self, salesman_count: int, file_name: str = Config.SALESPEOPLE_FILE) -> str:
        lines = [
            f"{self.doc_type};{self.id_base + i};Vendedor{i};Apellido{i}"
            for i in range(1, salesman_count + 1)
        ]
        return self._write(file_name, lines)

    def create_sales_files(self, sales_count: int, base_name: str = "ventas_vendedor",
                           lines_per_file: int = 3) -> List[str]:
        """
        One file per salesperson. Product ids point into the generated
        catalogue (P1..Pn) and quantities range 1..10.
        """
        if self.products_count < 1:
            raise ValueError("create_products_file must run before create_sales_files")
        paths = []
        for i in range(1, sales_count + 1):
            lines = [f"{self.doc_type};{self.id_base + i}"]
            for _ in range(lines_per_file):
                product_id = self.rng.randint(1, self.products_count)
                quantity = self.rng.randint(1, 10)
                lines.append(f"P{product_id};{quantity}")
            paths.append(self._write(f"{base_name}{i}.txt", lines))
        return paths

    def generate_all(self, products_count: int = 10, salesman_count: int = 5) -> List[str]:
        paths = [
            self.create_products_file(products_count),
            self.create_salesman_info_file(salesman_count),
        ]
        paths.extend(self.create_sales_files(salesman_count))
        return paths


def main() -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s')
    config = Config.from_env()
    seed = os.environ.get("SALES_SEED")
    generator = InfoFileGenerator(
        directory=config.DATA_DIR,
        seed=int(seed) if seed else None,
        decimal_comma=os.environ.get("SALES_DECIMAL_COMMA", "").lower() in ("1", "true", "yes", "on"),
    )
    try:
        generator.generate_all()
    except OSError as e:
        logging.error(f"Ocurrió un error al generar los archivos: {e}")
        print("❌ Ocurrió un error al generar los archivos.", file=sys.stderr)
        return 1
    print("✅ Archivos generados exitosamente.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
