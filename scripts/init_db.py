"""Apply the bundled schema to the database of the current APP_ENV."""
from __future__ import annotations

import importlib

from dotenv import load_dotenv

from attendance_engine.common.logging_utils import configure_logging
from attendance_engine.database.bootstrap import apply_schema, list_tables
from config import get_settings_module


def main() -> None:
    load_dotenv(override=False)
    logger = configure_logging("INFO")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    logger.info(
        "Schema applied -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
