from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from attendance_payroll.database.bootstrap import apply_schema, list_tables
from attendance_payroll.database.connection import DBConfig, DatabaseConnection

logger = logging.getLogger("init_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))
    conn = DatabaseConnection.get_instance(config)

    apply_schema(conn)
    tables = list_tables(conn)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%s)",
        config.user,
        config.host,
        config.port,
        config.database,
        len(tables),
    )


if __name__ == "__main__":
    main()
