from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.logger import configure_logging
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema
from .scanning.controller import register as register_scanning
from .students.controller import register as register_students

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_DIR", "") or None)

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
        container = build_container(db_config=db_config, settings=settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)

    app.extensions["qr_attendance"] = container

    register_scanning(app, container)
    register_students(app, container)

    return app
