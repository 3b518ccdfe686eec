from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig

from .container import build_container
from .attendance.controller import register as register_attendance
from .marking.controller import register as register_marking
from .reports.controller import register as register_reports
from .subjects.controller import register as register_subjects

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    # Helpful startup info to avoid "connected but no tables" confusion.
    logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(db_config, schema_path=SQL_DIR / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if getattr(settings, "AUTO_SEED_DB", False):
        apply_seed_sql(db_config, seed_path=SQL_DIR / "seed.sql")
        logger.info("demo seed ready")

    container = build_container(
        db_config=db_config,
        write_mode=getattr(settings, "ATTENDANCE_WRITE_MODE", "append"),
        d2d_batch_exempt=bool(getattr(settings, "D2D_BATCH_EXEMPT", True)),
        report_date_format=getattr(settings, "REPORT_DATE_FORMAT", "%d/%m/%Y"),
    )

    register_attendance(app, container)
    register_reports(app, container)
    register_marking(app, container)
    register_subjects(app, container)

    return app
