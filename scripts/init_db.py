from __future__ import annotations

import importlib
import logging

from config import get_settings_module

from attendmate.database.bootstrap import DEFAULT_SCHEMA_PATH, apply_schema, list_tables
from attendmate.database.connection import DBConfig

logger = logging.getLogger("attendmate.init_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=DEFAULT_SCHEMA_PATH)
    tables = list_tables(db_config)
    logger.info("Applied schema.sql -> %s (tables=%d)", DBConfig.from_dict(db_config).describe(), len(tables))


if __name__ == "__main__":
    main()
