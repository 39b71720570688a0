from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.policy import PayrollPolicy
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .payroll.controller import register as register_payroll
from .salary.controller import register as register_salary
from .staff.controller import register as register_staff
from .statutory.controller import register as register_statutory

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Tests pass a container built over in-memory repositories; otherwise one is
    built over MySQL from the selected settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

        policy = PayrollPolicy.from_settings(getattr(settings, "PAYROLL", None))
        container = build_container(db_config=db_config, policy=policy)

    register_staff(app, container)
    register_attendance(app, container)
    register_salary(app, container)
    register_statutory(app, container)
    register_payroll(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    return app
