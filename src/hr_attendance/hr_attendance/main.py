from __future__ import annotations

import logging

from dotenv import load_dotenv

from config import load_settings

from .container import Container, build_container
from .core.constants import DEFAULT_HALF_DAY_HOURS, DEFAULT_LATE_GRACE_MINUTES
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_engine() -> Container:
    load_dotenv(override=False)

    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings.__name__,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        config = DBConfig.from_dict(db_config)
        apply_schema(config)
        logger.info("schema ready (tables=%d)", len(list_tables(config)))

    return build_container(
        db_config=db_config,
        grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", DEFAULT_LATE_GRACE_MINUTES)),
        half_day_hours=float(getattr(settings, "HALF_DAY_HOURS", DEFAULT_HALF_DAY_HOURS)),
    )
