import os
import sys
import logging

from salesreport.etl.config import Config
from salesreport.etl.pipeline import SalesPipeline


def setup_logging():
    level = os.environ.get('LOG_LEVEL', 'INFO').upper()
    log_file = os.environ.get('LOG_FILE')
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s'
    )


def main() -> int:
    setup_logging()
    config = Config.from_env()
    logging.info(f"Consolidating sales in {os.path.abspath(config.DATA_DIR)}")

    result = SalesPipeline(config).run()

    if result["success"]:
        stats = result["stats"]
        print("✅ Reportes generados exitosamente.")
        print(f"   {stats['files_processed']} archivos procesados, "
              f"{stats['files_skipped']} omitidos, {stats['files_failed']} con error.")
        return 0

    print(f"❌ Error al ejecutar el programa: {result['error']}", file=sys.stderr)
    return 1


if __name__ == '__main__':
    sys.exit(main())
